"""Unit tests for ScoreExporter: HTML wrapping, voice building and SVG output."""

import json
from pathlib import Path
from typing import Any

import pytest

from engrave import __version__
from engrave.config import Settings
from engrave.errors import UnableToFormat, VoiceTicksMismatch
from engrave.score_exporter import ScoreExporter
from engrave.score_models import ScoreDocument
from engrave.tickable import GhostNote, Note, Rest, TextNote


def _sample() -> dict[str, Any]:
    return {
        "title": "Two Staves",
        "time_signature": "4/4",
        "staves": [
            {
                "voices": [
                    {
                        "notes": [
                            {"duration": "h", "line": 3, "accidentals": ["#"]},
                            {"duration": "q", "line": 2.5, "fingering": "2"},
                            {"duration": "qr"},
                        ]
                    }
                ]
            },
            {
                "voices": [
                    {
                        "stem": "down",
                        "notes": [
                            {"duration": "h", "line": 1},
                            {"duration": "q", "text": "Fine"},
                            {"duration": "q", "line": 2},
                        ],
                    }
                ]
            },
        ],
    }


# ---------------------------------------------------------------------------
# build_html
# ---------------------------------------------------------------------------


def test_build_html_title_in_title_tag() -> None:
    html = ScoreExporter(title="My Song").build_html(["<svg></svg>"])
    assert "<title>My Song</title>" in html


def test_build_html_title_in_h1() -> None:
    html = ScoreExporter(title="My Song").build_html(["<svg></svg>"])
    assert "<h1>My Song</h1>" in html


def test_build_html_default_title_no_h1() -> None:
    html = ScoreExporter().build_html(["<svg></svg>"])
    assert "<h1>" not in html


def test_build_html_escapes_title() -> None:
    html = ScoreExporter(title="<Fur> & Feathers").build_html(["<svg></svg>"])
    assert "&lt;Fur&gt; &amp; Feathers" in html
    assert "<Fur>" not in html


def test_build_html_one_page_div_per_svg() -> None:
    html = ScoreExporter().build_html(["<svg>p1</svg>", "<svg>p2</svg>", "<svg>p3</svg>"])
    assert html.count('<div class="page">') == 3
    assert "<svg>p2</svg>" in html


def test_build_html_print_styles_present() -> None:
    html = ScoreExporter().build_html(["<svg></svg>"])
    assert "@media print" in html
    assert "break-after: page" in html


def test_build_html_pages_sized_to_page_width() -> None:
    html = ScoreExporter(width=720).build_html(["<svg></svg>"])
    assert "--page-width: 720px;" in html


def test_build_html_names_generator() -> None:
    html = ScoreExporter().build_html(["<svg></svg>"])
    assert f'<meta name="generator" content="engrave {__version__}" />' in html


def test_build_html_is_valid_html_skeleton() -> None:
    html = ScoreExporter(title="Skeleton").build_html(["<svg></svg>"])
    assert html.startswith("<!DOCTYPE html>")
    assert "<body>" in html
    assert html.endswith("</html>")


# ---------------------------------------------------------------------------
# Voices and rendering
# ---------------------------------------------------------------------------


def test_unsupported_format_fails() -> None:
    with pytest.raises(ValueError, match="Unsupported output format"):
        ScoreExporter(output_format="pdf")


def test_format_is_normalized() -> None:
    assert ScoreExporter(output_format=" HTML ").output_format == "html"


def test_build_voices_maps_note_kinds() -> None:
    exporter = ScoreExporter()
    staves = exporter.build_voices(ScoreDocument.from_dict(_sample()))
    first, second = staves[0][0], staves[1][0]
    assert [type(t) for t in first.tickables] == [Note, Note, Rest]
    assert [type(t) for t in second.tickables] == [Note, TextNote, Note]
    assert len(first.tickables[0].left_modifiers()) == 1
    assert len(first.tickables[1].left_modifiers()) == 1
    assert second.tickables[0].stem_up is False


def test_line_numbers_map_to_staff_positions() -> None:
    exporter = ScoreExporter(settings=Settings(staff_top=40, staff_spacing=10))
    staves = exporter.build_voices(ScoreDocument.from_dict(_sample()))
    assert staves[0][0].tickables[0].y == pytest.approx(50)
    assert staves[1][0].tickables[0].y == pytest.approx(170)


def test_lone_rest_is_center_aligned() -> None:
    data = {"staves": [{"voices": [{"notes": [{"duration": "wr"}]}]}]}
    voices = ScoreExporter().build_voices(ScoreDocument.from_dict(data))
    assert voices[0][0].tickables[0].center_align


def test_ghost_and_tuplet_entries() -> None:
    data = {
        "staves": [
            {
                "voices": [
                    {
                        "notes": [
                            {"duration": "q", "tuplet": [3, 2]},
                            {"duration": "q", "tuplet": [3, 2]},
                            {"duration": "q", "tuplet": [3, 2]},
                            {"duration": "h", "ghost": True},
                        ]
                    }
                ]
            }
        ]
    }
    voice = ScoreExporter().build_voices(ScoreDocument.from_dict(data))[0][0]
    assert isinstance(voice.tickables[3], GhostNote)
    assert voice.is_complete()


def test_render_svg_draws_staves_and_groups() -> None:
    svg = ScoreExporter().render_svg(ScoreDocument.from_dict(_sample()))
    assert svg.startswith("<svg")
    assert svg.endswith("</svg>\n")
    assert 'id="staff-1"' in svg
    assert 'id="staff-2"' in svg
    assert svg.count("<g ") == svg.count("</g>")
    assert svg.count('stroke="#999999"') == 10
    assert ">Fine</text>" in svg


@pytest.mark.parametrize("duration", ["32r", "64r", "128r", "256r"])
def test_render_svg_short_rests_with_builtin_font(duration: str) -> None:
    data = {"staves": [{"voices": [{"mode": "soft", "notes": [{"duration": duration}]}]}]}
    svg = ScoreExporter().render_svg(ScoreDocument.from_dict(data))
    assert '<g class="rest">' in svg


def test_render_svg_respects_width() -> None:
    svg = ScoreExporter(width=800).render_svg(ScoreDocument.from_dict(_sample()))
    assert 'width="800"' in svg


def test_render_svg_too_narrow_fails() -> None:
    with pytest.raises(UnableToFormat):
        ScoreExporter(width=60).render_svg(ScoreDocument.from_dict(_sample()))


def test_render_svg_overfull_voice_fails() -> None:
    data = _sample()
    data["staves"][0]["voices"][0]["notes"].append({"duration": "q"})
    with pytest.raises(VoiceTicksMismatch):
        ScoreExporter().render_svg(ScoreDocument.from_dict(data))


def test_render_html_wraps_svg() -> None:
    html = ScoreExporter(output_format="html").render(ScoreDocument.from_dict(_sample()))
    assert html.startswith("<!DOCTYPE html>")
    assert '<div class="page"><svg' in html


def test_export_writes_svg(tmp_path: Path) -> None:
    score = tmp_path / "score.json"
    score.write_text(json.dumps(_sample()), encoding="utf-8")
    out = tmp_path / "score.svg"

    ScoreExporter().export(str(score), str(out))

    assert out.read_text(encoding="utf-8").startswith("<svg")


def test_export_rejects_malformed_document(tmp_path: Path) -> None:
    score = tmp_path / "score.json"
    score.write_text(json.dumps({"title": "No staves"}), encoding="utf-8")
    with pytest.raises(ValueError, match="staves"):
        ScoreExporter().export(str(score), str(tmp_path / "out.svg"))


# ---------------------------------------------------------------------------
# Integration tests: full pipeline through the built-in font and HTML output.
# ---------------------------------------------------------------------------


@pytest.mark.integration
def test_export_creates_html_file(tmp_path: Path) -> None:
    """Smoke test: export() produces an HTML file titled from the document."""
    score = tmp_path / "score.json"
    score.write_text(json.dumps(_sample()), encoding="utf-8")
    out = tmp_path / "score.html"

    exporter = ScoreExporter(output_format="html")
    exporter.export(str(score), str(out))

    content = out.read_text(encoding="utf-8")
    assert "<!DOCTYPE html>" in content
    assert "<h1>Two Staves</h1>" in content
    assert "<svg" in content
