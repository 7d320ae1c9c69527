"""Unit tests for the SVG render context."""

import math

import pytest

from engrave.errors import UnbalancedGroup
from engrave.renderers import FontInfo, LineCap, SVGRenderContext, SVGRenderOptions


def _body_lines(ctx: SVGRenderContext) -> list[str]:
    return ctx.get_document().splitlines()[1:-1]


def test_closed_triangle_is_one_filled_path(svg_context: SVGRenderContext) -> None:
    ctx = svg_context
    ctx.set_fill_style("red")
    ctx.begin_path()
    ctx.move_to(10, 10)
    ctx.line_to(20, 10)
    ctx.line_to(15, 20)
    ctx.close_path()
    ctx.fill()
    assert _body_lines(ctx) == ['<path d="M 10 10 L 20 10 L 15 20 Z" fill="red" />']


def test_document_root_carries_size_and_view_box(svg_context: SVGRenderContext) -> None:
    document = svg_context.get_document()
    assert document.startswith(
        '<svg xmlns="http://www.w3.org/2000/svg" width="100" height="50" viewBox="0 0 100 50">'
    )
    assert document.endswith("</svg>\n")


def test_view_box_and_xml_header_are_optional() -> None:
    options = SVGRenderOptions(include_xml_header=True, include_view_box=False)
    document = SVGRenderContext(10, 10, options).get_document()
    assert document.startswith('<?xml version="1.0" encoding="UTF-8"?>\n<svg ')
    assert "viewBox" not in document


def test_numbers_rounded_to_precision_and_trimmed(svg_context: SVGRenderContext) -> None:
    svg_context.begin_path()
    svg_context.move_to(1.23456, 2.5)
    svg_context.line_to(3.0, -0.0001)
    svg_context.fill()
    assert 'd="M 1.235 2.5 L 3 0"' in svg_context.get_document()


def test_precision_option() -> None:
    ctx = SVGRenderContext(100, 100, SVGRenderOptions(precision=1))
    ctx.begin_path()
    ctx.move_to(1.26, 7.04)
    ctx.fill()
    assert 'd="M 1.3 7"' in ctx.get_document()


def test_nested_groups_are_balanced(svg_context: SVGRenderContext) -> None:
    ctx = svg_context
    assert ctx.open_group("outer", "o1") == 1
    assert ctx.open_group("inner") == 2
    ctx.close_group()
    ctx.close_group()
    assert _body_lines(ctx) == ['<g class="outer" id="o1">', '<g class="inner">', "</g>", "</g>"]


def test_close_without_open_group_fails(svg_context: SVGRenderContext) -> None:
    with pytest.raises(UnbalancedGroup):
        svg_context.close_group()


def test_document_with_open_group_fails(svg_context: SVGRenderContext) -> None:
    svg_context.open_group("left-open")
    with pytest.raises(UnbalancedGroup, match="left-open"):
        svg_context.get_document()


def test_stroke_carries_line_style(svg_context: SVGRenderContext) -> None:
    ctx = svg_context
    ctx.set_stroke_style("#333")
    ctx.set_line_width(2)
    ctx.set_line_cap(LineCap.ROUND)
    ctx.begin_path()
    ctx.move_to(0, 0)
    ctx.line_to(10, 0)
    ctx.stroke()
    assert _body_lines(ctx) == [
        '<path d="M 0 0 L 10 0" fill="none" stroke="#333" stroke-width="2" '
        'stroke-linecap="round" />'
    ]


def test_line_dash_is_serialized(svg_context: SVGRenderContext) -> None:
    svg_context.set_line_dash([3, 1.5])
    svg_context.begin_path()
    svg_context.move_to(0, 0)
    svg_context.line_to(5, 0)
    svg_context.stroke()
    assert 'stroke-dasharray="3,1.5"' in svg_context.get_document()


def test_curves_map_to_svg_commands(svg_context: SVGRenderContext) -> None:
    svg_context.begin_path()
    svg_context.move_to(0, 0)
    svg_context.quadratic_curve_to(5, 5, 10, 0)
    svg_context.bezier_curve_to(12, 2, 14, 2, 16, 0)
    svg_context.fill()
    assert 'd="M 0 0 Q 5 5 10 0 C 12 2 14 2 16 0"' in svg_context.get_document()


def test_full_circle_arc_is_split_in_two(svg_context: SVGRenderContext) -> None:
    svg_context.begin_path()
    svg_context.arc(10, 10, 2, 0, math.pi * 2)
    svg_context.fill()
    assert 'd="M 12 10 A 2 2 0 0 1 8 10 A 2 2 0 0 1 12 10"' in svg_context.get_document()


def test_rect_path(svg_context: SVGRenderContext) -> None:
    svg_context.begin_path()
    svg_context.rect(0, 0, 10, 5)
    svg_context.fill()
    assert 'd="M 0 0 L 10 0 L 10 5 L 0 5 Z"' in svg_context.get_document()


def test_fill_rect_and_clear_rect(svg_context: SVGRenderContext) -> None:
    svg_context.set_fill_style("blue")
    svg_context.fill_rect(1, 2, 3, 4)
    svg_context.clear_rect(0, 0, 5, 5)
    assert _body_lines(svg_context) == [
        '<rect x="1" y="2" width="3" height="4" fill="blue" />',
        '<rect x="0" y="0" width="5" height="5" fill="white" />',
    ]


def test_text_is_escaped(svg_context: SVGRenderContext) -> None:
    svg_context.fill_text('a<b & "c"', 1, 2)
    assert ">a&lt;b &amp; &quot;c&quot;</text>" in svg_context.get_document()


def test_measure_text_uses_font_size(svg_context: SVGRenderContext) -> None:
    svg_context.set_font(FontInfo(size=10))
    assert svg_context.measure_text("abc").width == pytest.approx(18)


def test_save_and_restore_style(svg_context: SVGRenderContext) -> None:
    svg_context.set_fill_style("red")
    svg_context.save()
    svg_context.set_fill_style("blue")
    svg_context.restore()
    assert svg_context.fill_style == "red"


def test_scale_applies_to_coordinates(svg_context: SVGRenderContext) -> None:
    svg_context.scale(2, 2)
    svg_context.begin_path()
    svg_context.move_to(1, 1.5)
    svg_context.fill()
    assert 'd="M 2 3"' in svg_context.get_document()


def test_line_to_without_current_point_moves(svg_context: SVGRenderContext) -> None:
    svg_context.begin_path()
    svg_context.line_to(4, 4)
    svg_context.fill()
    assert 'd="M 4 4"' in svg_context.get_document()


def test_clear_drops_elements(svg_context: SVGRenderContext) -> None:
    svg_context.fill_rect(0, 0, 1, 1)
    svg_context.clear()
    assert _body_lines(svg_context) == []


def test_resize_updates_root(svg_context: SVGRenderContext) -> None:
    svg_context.resize(300, 120)
    assert 'width="300" height="120" viewBox="0 0 300 120"' in svg_context.get_document()
