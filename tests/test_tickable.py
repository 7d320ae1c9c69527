"""Unit tests for tickable variants and modifiers."""

from typing import Callable

import pytest

from engrave.errors import UnformattedTickable
from engrave.font import Font, FontStack
from engrave.fraction import Fraction
from engrave.modifiers import (
    ACCIDENTAL_CODES,
    ACCIDENTAL_SPACING,
    Accidental,
    Dot,
    Fingering,
    ModifierPosition,
)
from engrave.renderers import FontInfo, SVGRenderContext
from engrave.tables import RESOLUTION, parse_duration
from engrave.tickable import (
    NOTEHEAD_CODES,
    REST_CODES,
    GhostNote,
    Note,
    Rest,
    TextNote,
    TickableKind,
)


def _quarter(stack: FontStack) -> Note:
    return Note(parse_duration("q"), stack, y=50, point=10)


def test_kind_capabilities() -> None:
    assert TickableKind.NOTE.is_stemmable
    assert not TickableKind.REST.is_stemmable
    assert not TickableKind.GHOST.is_visible
    assert all(kind.occupies_ticks for kind in TickableKind)


def test_ticks_are_exact_fractions(square_stack: FontStack) -> None:
    assert _quarter(square_stack).get_ticks() == Fraction(RESOLUTION // 4, 1)


def test_get_ticks_returns_a_copy(square_stack: FontStack) -> None:
    note = _quarter(square_stack)
    note.get_ticks().add(1)
    assert note.get_ticks() == RESOLUTION // 4


def test_tick_multiplier_for_triplets(square_stack: FontStack) -> None:
    note = _quarter(square_stack).apply_tick_multiplier(2, 3)
    assert note.get_ticks() == Fraction(RESOLUTION // 2, 3)


def test_pre_format_is_glyph_width(square_stack: FontStack) -> None:
    assert _quarter(square_stack).pre_format() == pytest.approx(10)


def test_dots_from_duration_add_width(square_stack: FontStack) -> None:
    note = Note(parse_duration("qd"), square_stack, y=50, point=10)
    assert [type(m) for m in note.modifiers] == [Dot]
    assert note.pre_format() == pytest.approx(15)


def test_accidental_width_includes_spacing(square_stack: FontStack) -> None:
    note = _quarter(square_stack).add_modifier(Accidental("#", square_stack, point=10))
    assert note.pre_format() == pytest.approx(23)


def test_unknown_accidental_fails(square_stack: FontStack) -> None:
    with pytest.raises(ValueError, match="Unknown accidental"):
        Accidental("x", square_stack)


def test_fingering_width_and_position(square_stack: FontStack) -> None:
    fingering = Fingering("3", ModifierPosition.RIGHT)
    note = _quarter(square_stack).add_modifier(fingering)
    assert note.right_modifiers() == [fingering]
    assert note.pre_format() == pytest.approx(10 + 0.6 * 9 + 1)


def test_ghost_note_has_no_width_and_draws_nothing() -> None:
    ghost = GhostNote(parse_duration("h"))
    assert ghost.pre_format() == 0
    ghost.set_x_position(12)
    ctx = SVGRenderContext(50, 50)
    ghost.draw(ctx)
    assert ctx.get_document().count("\n") == 2


def test_text_note_width_estimate() -> None:
    text = TextNote(parse_duration("q"), "Fine", y=20, font=FontInfo(size=10))
    assert text.pre_format() == pytest.approx(4 * 0.6 * 10)


def test_drawing_before_formatting_fails(square_stack: FontStack) -> None:
    with pytest.raises(UnformattedTickable):
        _quarter(square_stack).draw(SVGRenderContext(50, 50))


def test_note_draws_head_and_stem_in_a_group(square_stack: FontStack) -> None:
    note = _quarter(square_stack)
    note.set_x_position(20)
    ctx = SVGRenderContext(100, 100)
    note.draw(ctx)
    document = ctx.get_document()
    assert '<g class="note">' in document
    assert 'd="M 20 50 L 30 50 L 30 40 L 20 40"' in document
    assert 'd="M 29.5 50 L 29.5 15" fill="none"' in document


def test_whole_note_has_no_stem(square_stack: FontStack) -> None:
    note = Note(parse_duration("w"), square_stack, y=50, point=10)
    assert not note.has_stem


def test_left_modifiers_push_the_notehead_right(square_stack: FontStack) -> None:
    note = _quarter(square_stack).add_modifier(Accidental("#", square_stack, point=10))
    note.set_x_position(20)
    assert note.get_content_x() == pytest.approx(33)
    assert note.get_bounding_box().x == pytest.approx(33)


def test_rest_uses_rest_glyph(square_stack: FontStack) -> None:
    rest = Rest(parse_duration("qr"), square_stack, y=50, point=10)
    assert rest.kind is TickableKind.REST
    assert rest.glyph.code == "restQuarter"


@pytest.mark.parametrize("code", sorted(REST_CODES.values()))
def test_builtin_font_has_every_rest(builtin_stack: FontStack, code: str) -> None:
    assert builtin_stack.get_width(code, 39) > 0


@pytest.mark.parametrize("code", sorted({"noteheadBlack", *NOTEHEAD_CODES.values()}))
def test_builtin_font_has_every_notehead(builtin_stack: FontStack, code: str) -> None:
    assert builtin_stack.get_width(code, 39) > 0


@pytest.mark.parametrize("accidental", sorted(ACCIDENTAL_CODES))
def test_builtin_font_has_every_accidental(builtin_stack: FontStack, accidental: str) -> None:
    assert Accidental(accidental, builtin_stack).get_width() > ACCIDENTAL_SPACING


@pytest.mark.parametrize("value", sorted(REST_CODES))
def test_rests_of_every_value_draw_with_builtin_font(builtin_stack: FontStack, value: str) -> None:
    rest = Rest(parse_duration(f"{value}r"), builtin_stack, y=50)
    rest.set_x_position(10)
    ctx = SVGRenderContext(200, 200)
    rest.draw(ctx)
    assert '<g class="rest">' in ctx.get_document()


def test_dot_size_comes_from_font_metrics(make_square_font: Callable[..., Font]) -> None:
    font = Font("Dotted", make_square_font().glyphs, metrics={"dot": {"radius": 3, "width": 8}})
    stack = FontStack([font])
    note = Note(parse_duration("qd"), stack, y=50, point=10)
    dot = note.modifiers[0]
    assert isinstance(dot, Dot)
    assert dot.radius == 3
    assert note.pre_format() == pytest.approx(18)
