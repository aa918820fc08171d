"""Tests for collage grid geometry, the scale policy and cell painting."""

import math

import pytest

from conftest import ink_bbox
from specimen_collage import (
    BORDER_COLOR,
    CLIP_INSET,
    LABEL_BAND_COLOR,
    MAX_COLLAGE_DIM,
    CollageCell,
    cell_geometry,
    grid_shape,
    label_metrics,
    plan_collage,
    render_collage,
)
from specimen_render import MARGIN, CanvasSize, FontHandle, RenderSurface, StyleConfig


class TestGridGeometry:
    @pytest.mark.parametrize("n", range(1, 60))
    def test_grid_holds_every_font(self, n):
        cols, rows = grid_shape(n)
        assert cols == math.ceil(math.sqrt(n))
        assert rows == math.ceil(n / cols)
        assert cols * rows >= n > cols * (rows - 1)

    def test_zero_fonts_has_empty_grid(self):
        assert grid_shape(0) == (0, 0)

    def test_cells_are_row_major(self):
        assert cell_geometry(0, 3, 100, 50) == CollageCell(0, 0, 0, 0)
        assert cell_geometry(2, 3, 100, 50) == CollageCell(2, 0, 200, 0)
        assert cell_geometry(4, 3, 100, 50) == CollageCell(1, 1, 100, 50)


class TestPlanCollage:
    def test_three_strip_fonts(self):
        layout = plan_collage(3, CanvasSize(1055, 127))
        assert (layout.columns, layout.rows) == (2, 2)
        assert (layout.total_width, layout.total_height) == (2110, 254)
        assert layout.scale == 1

    def test_exactly_at_limit_is_not_scaled(self):
        layout = plan_collage(4, CanvasSize(2500, 2500))
        assert (layout.total_width, layout.total_height, layout.scale) == (5000, 5000, 1)

    def test_oversized_collage_scaled_uniformly(self):
        layout = plan_collage(10, CanvasSize(2000, 2000))
        assert (layout.columns, layout.rows) == (4, 3)
        assert layout.scale == pytest.approx(min(5000 / 8000, 5000 / 6000))
        assert (layout.total_width, layout.total_height) == (5000, 3750)

    @pytest.mark.parametrize("n,w,h", [(2, 5000, 400), (7, 1200, 4000), (30, 700, 166), (5, 4999, 4999)])
    def test_scaled_totals_touch_the_limit(self, n, w, h):
        layout = plan_collage(n, CanvasSize(w, h))
        raw_w, raw_h = layout.columns * w, layout.rows * h
        if raw_w <= MAX_COLLAGE_DIM and raw_h <= MAX_COLLAGE_DIM:
            assert layout.scale == 1
        else:
            assert layout.scale == pytest.approx(min(5000 / raw_w, 5000 / raw_h))
            assert max(layout.total_width, layout.total_height) == 5000
        assert layout.total_width <= 5000 and layout.total_height <= 5000

    @pytest.mark.parametrize("cell_h,expected", [(127, (14, 25)), (300, (24, 43)), (1000, (48, 86))])
    def test_label_metrics_clamped(self, cell_h, expected):
        assert label_metrics(cell_h) == expected


class TestRenderCollage:
    def test_three_fonts_one_empty_cell(self, fonts):
        surface = RenderSurface()
        layout = render_collage(surface, fonts, CanvasSize(1055, 127), MAX_COLLAGE_DIM, StyleConfig(font_size=32), "AaBbCc", single_line=True)
        assert (layout.columns, layout.rows, layout.scale) == (2, 2, 1)
        image = surface.image
        assert image.size == (2110, 254)
        assert ink_bbox(image.crop((1055, 127, 2110, 254))) is None
        for x0, y0 in ((0, 0), (1055, 0), (0, 127)):
            assert image.getpixel((x0, y0)) == BORDER_COLOR
            assert image.getpixel((x0 + 5, y0 + 10)) == LABEL_BAND_COLOR

    def test_specimen_drawn_below_label(self, fonts):
        surface = RenderSurface()
        render_collage(surface, fonts[:2], CanvasSize(1055, 127), MAX_COLLAGE_DIM, StyleConfig(font_size=32), "AaBbCc", single_line=True)
        _, band_h = label_metrics(127)
        specimen = surface.image.crop((CLIP_INSET, band_h + CLIP_INSET, 1055 - CLIP_INSET, 127 - CLIP_INSET))
        assert ink_bbox(specimen) is not None

    def test_specimen_centred_over_cell_and_label(self, fonts):
        surface = RenderSurface()
        style = StyleConfig(font_size=28)
        render_collage(surface, fonts[:2], CanvasSize(700, 400), MAX_COLLAGE_DIM, style, "HHHH", single_line=True)
        _, band_h = label_metrics(400)
        top = band_h + CLIP_INSET
        box = ink_bbox(surface.image.crop((CLIP_INSET, top, 700 - CLIP_INSET, 400 - CLIP_INSET)))
        centre = top + (box[1] + box[3]) / 2
        assert abs(centre - (400 + band_h) / 2) < style.font_size * 0.25

    def test_rtl_specimen_anchored_on_right_margin(self, fonts):
        surface = RenderSurface()
        render_collage(surface, fonts[:2], CanvasSize(700, 166), MAX_COLLAGE_DIM, StyleConfig(font_size=28, rtl=True), "Hamburg")
        _, band_h = label_metrics(166)
        box = ink_bbox(surface.image.crop((CLIP_INSET, band_h + CLIP_INSET, 700 - CLIP_INSET, 166 - CLIP_INSET)))
        assert box[2] + CLIP_INSET <= 700 - MARGIN + 2
        assert box[0] + CLIP_INSET > 700 // 2

    def test_overflow_is_clipped_to_cell(self, fonts):
        surface = RenderSurface()
        cell = CanvasSize(400, 400)
        style = StyleConfig(font_size=200, line_height=0.6)
        render_collage(surface, fonts[:2], cell, MAX_COLLAGE_DIM, style, "HHHHHHHHHHHH")
        _, band_h = label_metrics(400)
        image = surface.image
        # Gap rows between the label band and the clip rectangle stay white.
        gap = image.crop((CLIP_INSET, band_h + 2, 400 - CLIP_INSET, band_h + CLIP_INSET))
        assert ink_bbox(gap) is None
        # Nothing crosses into the right-hand neighbour's inset either.
        seam = image.crop((400 - CLIP_INSET + 1, band_h + 2, 400 - 1, 400 - 1))
        assert ink_bbox(seam) is None

    def test_scaled_collage_fits_limit(self, fonts):
        surface = RenderSurface()
        five = fonts + fonts[:2]
        layout = render_collage(surface, five, CanvasSize(2500, 2500), MAX_COLLAGE_DIM, StyleConfig(font_size=120), "Specimen")
        assert (layout.columns, layout.rows) == (3, 2)
        assert layout.scale == pytest.approx(5000 / 7500)
        assert surface.image.size == (5000, 3333)
        assert surface.image.size == (layout.total_width, layout.total_height)

    def test_broken_font_only_loses_its_specimen(self, fonts, capsys):
        broken = FontHandle(id="font-broken", file_name="Broken.ttf", data=b"not a font")
        surface = RenderSurface()
        layout = render_collage(surface, [fonts[0], broken], CanvasSize(700, 166), MAX_COLLAGE_DIM, StyleConfig(font_size=28), "Hamburg")
        assert layout is not None
        _, band_h = label_metrics(166)
        broken_specimen = surface.image.crop((700 + CLIP_INSET, band_h + CLIP_INSET, 1400 - CLIP_INSET, 166 - CLIP_INSET))
        good_specimen = surface.image.crop((CLIP_INSET, band_h + CLIP_INSET, 700 - CLIP_INSET, 166 - CLIP_INSET))
        assert ink_bbox(broken_specimen) is None
        assert ink_bbox(good_specimen) is not None
        assert "Broken.ttf" in capsys.readouterr().out

    def test_no_fonts_or_surface_is_a_no_op(self, fonts):
        surface = RenderSurface()
        assert render_collage(surface, [], CanvasSize(700, 166), MAX_COLLAGE_DIM, StyleConfig(), "x") is None
        assert surface.image is None
        assert render_collage(None, fonts, CanvasSize(700, 166), MAX_COLLAGE_DIM, StyleConfig(), "x") is None
