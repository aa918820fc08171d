"""
Specimen line breaking and letter-spaced text metrics.

The wrapper is a character-grid greedy wrap (no word boundaries) which is what
character-set specimens need. Measuring and drawing share ``measure_text`` and
``draw_spaced_text`` so a wrapped line always paints at the width it was
measured at.
"""
from __future__ import annotations

from functools import lru_cache
from typing import List, Optional, Tuple

from PIL import ImageDraw, features


@lru_cache(maxsize=None)
def raqm_available() -> bool:
    return bool(features.check_feature("raqm"))


def _direction_kwargs(direction: Optional[str]) -> dict:
    # Pillow refuses direction hints without libraqm.
    if direction and raqm_available():
        return {"direction": direction}
    return {}


def one_row(text: str) -> str:
    """Show line breaks as spaces; a display line always paints on one row."""
    return text.replace("\r\n", " ").replace("\r", " ").replace("\n", " ")


def measure_text(font, text: str, letter_spacing: float = 0, direction: Optional[str] = None) -> float:
    """Advance width of ``text`` with ``letter_spacing`` added after every character."""
    text = one_row(text)
    if not text:
        return 0.0
    if not letter_spacing:
        return float(font.getlength(text, **_direction_kwargs(direction)))
    return float(sum(font.getlength(ch) + letter_spacing for ch in text))


def draw_spaced_text(draw: ImageDraw.ImageDraw, xy: Tuple[float, float], text: str, font, letter_spacing: float = 0, fill=(0, 0, 0), align_right: bool = False, direction: Optional[str] = None) -> None:
    """Draw one line vertically centred on ``xy``; ``xy`` is the left edge, or the right edge when ``align_right``.

    With letter spacing each code point is drawn on its own, so complex
    scripts are not shaped: Arabic shows isolated letter forms and combining
    marks (harakat) may not sit on their base letter. Unspaced lines go
    through the shaped whole-string path.
    """
    text = one_row(text)
    if not text:
        return
    x, y = xy
    if not letter_spacing:
        anchor = "rm" if align_right else "lm"
        draw.text((x, y), text, font=font, fill=fill, anchor=anchor, **_direction_kwargs(direction))
        return

    width = measure_text(font, text, letter_spacing)
    cursor = x - width if align_right else x
    # Spaced text goes glyph by glyph; right-to-left runs are laid out visually reversed.
    glyphs = reversed(text) if direction == "rtl" else text
    for ch in glyphs:
        draw.text((cursor, y), ch, font=font, fill=fill, anchor="lm")
        cursor += font.getlength(ch) + letter_spacing


def wrap_paragraph(paragraph: str, max_width: float, font, letter_spacing: float = 0, direction: Optional[str] = None) -> List[str]:
    if not paragraph:
        return [""]
    lines: List[str] = []
    current = ""
    for i, ch in enumerate(paragraph):
        tentative = current + ch
        # i > 0 keeps an over-wide first character on its own line instead of looping.
        if measure_text(font, tentative, letter_spacing, direction) > max_width and i > 0:
            lines.append(current)
            current = ch
        else:
            current = tentative
    lines.append(current)
    return lines


def wrap_text(text: str, max_width: float, font, letter_spacing: float = 0, single_line: bool = False, direction: Optional[str] = None) -> List[str]:
    """Break ``text`` into display lines no wider than ``max_width``.

    Explicit line breaks start new paragraphs and every paragraph yields at
    least one line, so blank paragraphs survive as empty lines. In single-line
    mode the text is returned untouched as the only line, whatever its width;
    measuring and drawing show any line breaks in it as spaces.
    """
    if single_line:
        return [text]
    lines: List[str] = []
    for paragraph in text.replace("\r\n", "\n").split("\n"):
        lines.extend(wrap_paragraph(paragraph, max_width, font, letter_spacing, direction))
    return lines
