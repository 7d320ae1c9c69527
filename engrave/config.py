"""Engrave configuration."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Engrave configuration, overridable through ``ENGRAVE_*`` variables."""

    # Rendering
    render_precision: int = 3  # decimal places in SVG output
    point_size: float = 39.0  # notation glyph size

    # Formatter
    context_padding: float = 1.0  # per side of every tick context
    context_spacing: float = 10.0  # between adjacent tick contexts
    allow_overflow: bool = False

    # Page layout
    page_width: int = 600
    page_height: int = 160
    staff_spacing: float = 10.0  # between staff lines
    staff_top: float = 40.0
    margin_left: float = 10.0

    # Logging
    log_level: str = "INFO"

    class Config:
        env_prefix = "ENGRAVE_"
        case_sensitive = False


settings = Settings()
