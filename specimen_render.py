"""
Font Specimen Renderer

Shared model for specimen rendering (size presets, resolved styles, loaded
font handles, the reusable drawing surface) and the single-specimen renderer:
one font's wrapped sample text, centred vertically on a white canvas.

Size presets:
    1055x127   character set strip, single line, forced line height/spacing
    700x166    new typeface sample, forced line height/spacing
    custom     any width/height between 400 and 5000 px

Dependencies:
    - Pillow
"""
from __future__ import annotations

import io
import os
import random
import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from typing import Dict, Iterator, List, Optional, Sequence

from PIL import Image, ImageDraw, ImageFont

from specimen_wrap import draw_spaced_text, wrap_text

# Constants
MARGIN = 40  # horizontal padding on both sides of a specimen (px)
CUSTOM_MIN_DIM = 400
CUSTOM_MAX_DIM = 5000
BACKGROUND = (255, 255, 255)
TEXT_COLOR = (0, 0, 0)

FONT_SIZE_RANGE = (10, 300)
LINE_HEIGHT_RANGE = (0.5, 3.0)
LETTER_SPACING_RANGE = (-20, 100)

_ID_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"

# ----------------------------- Utilities -------------------------------------

def warn(msg: str) -> None:
    print(f"[WARN] {msg}")


def info(msg: str) -> None:
    print(f"[INFO] {msg}")


class SurfaceUnavailableError(RuntimeError):
    """The drawing surface could not be allocated for this render."""


# --------------------------- Data Model --------------------------------------

@dataclass(frozen=True)
class CanvasSize:
    width: int
    height: int

    @classmethod
    def custom(cls, width: int, height: int) -> "CanvasSize":
        for label, value in (("width", width), ("height", height)):
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"Custom {label} must be an integer, got {value!r}")
            if not CUSTOM_MIN_DIM <= value <= CUSTOM_MAX_DIM:
                raise ValueError(f"Custom {label} must be between {CUSTOM_MIN_DIM} and {CUSTOM_MAX_DIM} px, got {value}")
        return cls(width, height)

    def __str__(self) -> str:
        return f"{self.width}x{self.height}"


@dataclass(frozen=True)
class SizePreset:
    id: str
    width: int
    height: int
    label: str
    description: str = ""
    is_custom: bool = False
    single_line: bool = False
    fixed_font_size: Optional[int] = None
    fixed_line_height: Optional[float] = None
    fixed_letter_spacing: Optional[float] = None


@dataclass(frozen=True)
class StyleConfig:
    font_size: int = 32
    line_height: float = 1.2
    letter_spacing: float = 0
    rtl: bool = False

    @property
    def line_advance(self) -> float:
        return self.font_size * self.line_height


SIZE_PRESETS: Dict[str, SizePreset] = {
    "1055x127": SizePreset(
        id="1055x127",
        width=1055,
        height=127,
        label="1055 x 127 px",
        description="Character set strip (fixed size)",
        single_line=True,
        fixed_line_height=1.2,
        fixed_letter_spacing=0,
    ),
    "700x166": SizePreset(
        id="700x166",
        width=700,
        height=166,
        label="700 x 166 px",
        description="New typeface development sample (fixed size)",
        fixed_line_height=1.2,
        fixed_letter_spacing=0,
    ),
    "custom": SizePreset(
        id="custom",
        width=1000,
        height=1000,
        label="Custom size",
        description="Copyright images and others",
        is_custom=True,
    ),
}
DEFAULT_PRESET = "1055x127"


def get_preset(preset_id: str) -> SizePreset:
    try:
        return SIZE_PRESETS[preset_id]
    except KeyError:
        raise ValueError(f"Unknown size preset '{preset_id}'. Available: {', '.join(SIZE_PRESETS)}") from None


def canvas_size_for(preset: SizePreset, width: Optional[int] = None, height: Optional[int] = None) -> CanvasSize:
    if preset.is_custom:
        return CanvasSize.custom(width if width is not None else preset.width, height if height is not None else preset.height)
    return CanvasSize(preset.width, preset.height)


def default_font_size(preset: SizePreset) -> int:
    # The strip preset reads best a little larger.
    return 32 if preset.width == 1055 and not preset.is_custom else 28


def validate_style(style: StyleConfig) -> StyleConfig:
    checks = (
        ("font size", style.font_size, FONT_SIZE_RANGE),
        ("line height", style.line_height, LINE_HEIGHT_RANGE),
        ("letter spacing", style.letter_spacing, LETTER_SPACING_RANGE),
    )
    for label, value, (lo, hi) in checks:
        if not lo <= value <= hi:
            raise ValueError(f"{label} must be between {lo} and {hi}, got {value}")
    return style


def resolve_style(preset: SizePreset, user: StyleConfig) -> StyleConfig:
    """Merge the preset's locked fields over the user-adjustable style."""
    return replace(
        user,
        font_size=preset.fixed_font_size if preset.fixed_font_size is not None else user.font_size,
        line_height=preset.fixed_line_height if preset.fixed_line_height is not None else user.line_height,
        letter_spacing=preset.fixed_letter_spacing if preset.fixed_letter_spacing is not None else user.letter_spacing,
    )


# ----------------------------- Fonts -----------------------------------------

def new_font_id() -> str:
    suffix = "".join(random.choice(_ID_ALPHABET) for _ in range(9))
    return f"font-{int(time.time() * 1000)}-{suffix}"


@dataclass
class FontHandle:
    id: str
    file_name: str
    data: bytes = field(repr=False)
    _faces: Dict[int, ImageFont.FreeTypeFont] = field(default_factory=dict, repr=False, compare=False)

    @property
    def stem(self) -> str:
        return self.file_name.split(".")[0]

    def face(self, size: int) -> ImageFont.FreeTypeFont:
        size = int(size)
        if size not in self._faces:
            self._faces[size] = ImageFont.truetype(io.BytesIO(self.data), size=size)
        return self._faces[size]


def font_from_bytes(data: bytes, file_name: str) -> FontHandle:
    handle = FontHandle(id=new_font_id(), file_name=file_name, data=data)
    # Decoding once up front keeps broken files out of the usable set.
    handle.face(12)
    return handle


def load_fonts(paths: Sequence[str]) -> List[FontHandle]:
    fonts: List[FontHandle] = []
    for path in paths:
        try:
            with open(path, "rb") as f:
                data = f.read()
            fonts.append(font_from_bytes(data, os.path.basename(path)))
        except Exception as e:
            warn(f"Failed to load font {path}: {e}")
            continue
        info(f"Loaded font {os.path.basename(path)}")
    return fonts


def find_font(fonts: Sequence[FontHandle], key: Optional[str]) -> Optional[FontHandle]:
    """Look a font up by id, file name or file stem."""
    if not key:
        return None
    for f in fonts:
        if key in (f.id, f.file_name, f.stem):
            return f
    return None


# ----------------------------- Surface ---------------------------------------

def allocate_canvas(width: int, height: int) -> Image.Image:
    try:
        return Image.new("RGB", (int(width), int(height)), BACKGROUND)
    except (MemoryError, ValueError) as e:
        raise SurfaceUnavailableError(f"Cannot allocate a {width}x{height} canvas: {e}") from e


class RenderSurface:
    """A drawing surface reused across preview and export frames.

    ``session`` holds the surface lock for a whole draw-and-encode sequence so
    two frames never paint over each other. Sessions nest within one thread.
    """

    def __init__(self) -> None:
        self.image: Optional[Image.Image] = None
        self._lock = threading.RLock()

    @contextmanager
    def session(self, width: int, height: int) -> Iterator[Image.Image]:
        with self._lock:
            if self.image is None or self.image.size != (int(width), int(height)):
                self.image = allocate_canvas(width, height)
            yield self.image

    def snapshot(self) -> Optional[Image.Image]:
        with self._lock:
            return self.image.copy() if self.image is not None else None


# --------------------------- Rendering ---------------------------------------

def block_start_y(line_count: int, style: StyleConfig, available_height: float) -> float:
    """Centre of the first line when ``line_count`` lines are centred in ``available_height``."""
    total = line_count * style.line_advance
    return (available_height - total) / 2 + style.line_advance / 2


def paint_lines(draw: ImageDraw.ImageDraw, lines: Sequence[str], face: ImageFont.FreeTypeFont, style: StyleConfig, x: float, start_y: float) -> None:
    direction = "rtl" if style.rtl else None
    for idx, line in enumerate(lines):
        y = start_y + idx * style.line_advance
        draw_spaced_text(draw, (x, y), line, face, style.letter_spacing, fill=TEXT_COLOR, align_right=style.rtl, direction=direction)


def render_single(surface: Optional[RenderSurface], font: Optional[FontHandle], size: CanvasSize, style: StyleConfig, text: str, single_line: bool = False) -> bool:
    if surface is None or font is None:
        return False
    W, H = size.width, size.height
    try:
        with surface.session(W, H) as image:
            draw = ImageDraw.Draw(image)
            draw.rectangle((0, 0, W, H), fill=BACKGROUND)
            if not text:
                return True

            face = font.face(style.font_size)
            max_width = W - MARGIN * 2
            lines = wrap_text(text, max_width, face, style.letter_spacing, single_line, "rtl" if style.rtl else None)
            x = W - MARGIN if style.rtl else MARGIN
            paint_lines(draw, lines, face, style, x, block_start_y(len(lines), style, H))
    except SurfaceUnavailableError as e:
        warn(str(e))
        return False
    return True
