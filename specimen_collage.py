"""
Font Specimen Collage

Tiles several fonts' specimens into one square-ish grid of equal cells. Each
cell carries a filename label band and a clipped specimen below it. When the
composed canvas would exceed MAX_COLLAGE_DIM on either axis, the whole grid is
shrunk by one uniform factor so cell proportions are preserved.

Dependencies:
    - Pillow
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional, Sequence, Tuple

from PIL import Image, ImageDraw, ImageFont

from specimen_render import (
    BACKGROUND,
    MARGIN,
    CanvasSize,
    FontHandle,
    RenderSurface,
    StyleConfig,
    SurfaceUnavailableError,
    block_start_y,
    paint_lines,
    warn,
)
from specimen_wrap import wrap_text

MAX_COLLAGE_DIM = 5000
BORDER_COLOR = (229, 229, 229)
LABEL_BAND_COLOR = (249, 249, 249)
LABEL_TEXT_COLOR = (51, 51, 51)
LABEL_FONT_MIN = 14
LABEL_FONT_MAX = 48
CLIP_INSET = 5

LABEL_FONT_CANDIDATES = [
    "DejaVuSans-Bold.ttf",
    "LiberationSans-Bold.ttf",
    "Arial Bold.ttf",
    "arialbd.ttf",
    "Helvetica-Bold.ttf",
]


@dataclass(frozen=True)
class CollageCell:
    column: int
    row: int
    origin_x: int
    origin_y: int


@dataclass(frozen=True)
class CollageLayout:
    columns: int
    rows: int
    cell_width: int
    cell_height: int
    total_width: int
    total_height: int
    scale: float = 1.0


# --------------------------- Geometry ----------------------------------------

def grid_shape(count: int) -> Tuple[int, int]:
    if count <= 0:
        return 0, 0
    cols = math.ceil(math.sqrt(count))
    rows = math.ceil(count / cols)
    return cols, rows


def cell_geometry(index: int, columns: int, cell_width: int, cell_height: int) -> CollageCell:
    col = index % columns
    row = index // columns
    return CollageCell(column=col, row=row, origin_x=col * cell_width, origin_y=row * cell_height)


def plan_collage(count: int, cell_size: CanvasSize, max_total_dim: int = MAX_COLLAGE_DIM) -> CollageLayout:
    cols, rows = grid_shape(count)
    total_w = cols * cell_size.width
    total_h = rows * cell_size.height
    scale = 1.0
    if total_w > max_total_dim or total_h > max_total_dim:
        scale = min(max_total_dim / total_w, max_total_dim / total_h)
    return CollageLayout(
        columns=cols,
        rows=rows,
        cell_width=cell_size.width,
        cell_height=cell_size.height,
        total_width=int(round(total_w * scale)),
        total_height=int(round(total_h * scale)),
        scale=scale,
    )


def label_metrics(cell_height: int) -> Tuple[int, int]:
    """Return (label font size, label band height) for a cell height."""
    size = max(LABEL_FONT_MIN, min(LABEL_FONT_MAX, round(cell_height * 0.08)))
    return size, round(size * 1.8)


@lru_cache(maxsize=None)
def label_font(size: int) -> ImageFont.FreeTypeFont:
    for name in LABEL_FONT_CANDIDATES:
        try:
            return ImageFont.truetype(name, size=size)
        except OSError:
            continue
    return ImageFont.load_default(size=size)


# --------------------------- Rendering ---------------------------------------

def render_cell(font: FontHandle, cell_width: int, cell_height: int, style: StyleConfig, text: str, single_line: bool) -> Image.Image:
    """Paint one collage cell in its own coordinate space at full resolution."""
    cell = Image.new("RGB", (cell_width, cell_height), BACKGROUND)
    draw = ImageDraw.Draw(cell)
    draw.rectangle((0, 0, cell_width - 1, cell_height - 1), outline=BORDER_COLOR, width=1)

    label_size, band_h = label_metrics(cell_height)
    draw.rectangle((2, 2, cell_width - 3, 2 + band_h - 1), fill=LABEL_BAND_COLOR)
    draw.text((label_size * 0.75, band_h / 2 + 2), font.file_name, font=label_font(label_size), fill=LABEL_TEXT_COLOR, anchor="lm")

    clip_x = CLIP_INSET
    clip_y = band_h + CLIP_INSET
    clip_w = cell_width - 2 * CLIP_INSET
    clip_h = cell_height - band_h - 2 * CLIP_INSET
    if not text or clip_w <= 0 or clip_h <= 0:
        return cell

    try:
        face = font.face(style.font_size)
        lines = wrap_text(text, cell_width - MARGIN * 2, face, style.letter_spacing, single_line, "rtl" if style.rtl else None)
        # The specimen is painted into a clip-sized tile so overflow never reaches the label or a neighbour.
        clip = Image.new("RGB", (clip_w, clip_h), BACKGROUND)
        x = (cell_width - MARGIN if style.rtl else MARGIN) - clip_x
        start_y = block_start_y(len(lines), style, cell_height + band_h) - clip_y
        paint_lines(ImageDraw.Draw(clip), lines, face, style, x, start_y)
        cell.paste(clip, (clip_x, clip_y))
    except Exception as e:
        warn(f"Failed to render collage cell for {font.file_name}: {e}")
    return cell


def render_collage(surface: Optional[RenderSurface], fonts: Sequence[FontHandle], cell_size: CanvasSize, max_total_dim: int, style: StyleConfig, text: str, single_line: bool = False) -> Optional[CollageLayout]:
    if surface is None or not fonts:
        return None
    layout = plan_collage(len(fonts), cell_size, max_total_dim)
    try:
        with surface.session(layout.total_width, layout.total_height) as image:
            draw = ImageDraw.Draw(image)
            draw.rectangle((0, 0, layout.total_width, layout.total_height), fill=BACKGROUND)
            for i, font in enumerate(fonts):
                geo = cell_geometry(i, layout.columns, layout.cell_width, layout.cell_height)
                cell = render_cell(font, layout.cell_width, layout.cell_height, style, text, single_line)
                x0 = round(geo.origin_x * layout.scale)
                y0 = round(geo.origin_y * layout.scale)
                if layout.scale != 1.0:
                    # Scaled edges come from neighbouring origins so the grid tiles without gaps.
                    x1 = round((geo.origin_x + layout.cell_width) * layout.scale)
                    y1 = round((geo.origin_y + layout.cell_height) * layout.scale)
                    cell = cell.resize((max(1, x1 - x0), max(1, y1 - y0)), Image.LANCZOS)
                image.paste(cell, (x0, y0))
    except SurfaceUnavailableError as e:
        warn(str(e))
        return None
    return layout
