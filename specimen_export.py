#!/usr/bin/env python3
"""
Font Specimen Generator

Renders type-specimen images from font files: one image per font, a
multi-page PDF with one page per font, or a single collage tiling every
selected font into a labelled grid.

Usage:
    python specimen_export.py Regular.ttf Bold.ttf --size 700x166 --format pdf
    python specimen_export.py *.otf --size custom --width 2000 --height 800 --lang vi --collage

CLI flags:
    --size              Size preset: 1055x127 (single-line strip), 700x166, custom
    --width/--height    Custom canvas size, 400-5000 px (only with --size custom)
    --lang              Character set preset (en, latin-tr, vi, th, ru, ar, custom)
    --text              Specimen text, overrides the preset text ("\\n" breaks lines)
    --text-file         Read the specimen text from a UTF-8 file
    --font-size         Font size in px (10-300; default 32 for the strip, else 28)
    --line-height       Line height multiplier (0.5-3.0)
    --letter-spacing    Letter spacing in px (-20-100)
    --rtl               Right-to-left layout (implied by --lang ar)
    --format            png, jpg or pdf (default: png)
    --collage           Combine all selected fonts into one labelled grid
    --select            Font file names (or stems) to include; default all
    --preview           Font kept on the preview surface after export
    --config            Optional JSON job file; explicit flags override it
    --outdir            Output directory (default: ./out_specimens)

Job JSON schema (all keys optional):
    {
      "fonts": ["fonts/Regular.ttf", "fonts/Bold.ttf"],
      "size": "custom", "width": 1600, "height": 900,
      "lang": "en", "text": "Optional override",
      "font_size": 48, "line_height": 1.4, "letter_spacing": 2, "rtl": false,
      "format": "pdf", "collage": true, "select": ["Regular"],
      "outdir": "out"
    }

Dependencies:
    - Pillow
    - reportlab
"""
from __future__ import annotations

import argparse
import io
import json
import os
import sys
import time
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from PIL import Image
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas as pdf_canvas

from specimen_collage import MAX_COLLAGE_DIM, render_collage
from specimen_render import (
    DEFAULT_PRESET,
    SIZE_PRESETS,
    CanvasSize,
    FontHandle,
    RenderSurface,
    StyleConfig,
    SurfaceUnavailableError,
    canvas_size_for,
    default_font_size,
    find_font,
    get_preset,
    info,
    load_fonts,
    render_single,
    resolve_style,
    validate_style,
    warn,
)
from specimen_text import DEFAULT_LANGUAGE, LANGUAGE_PRESETS, is_rtl_language, select_specimen_text

EXPORT_FORMATS = ("png", "jpg", "pdf")
JPEG_QUALITY = 90
DEFAULT_OUTDIR = "./out_specimens"


@dataclass
class ExportArtifact:
    filename: str
    format: str
    data: bytes = field(repr=False)
    page_sizes: List[Tuple[int, int]] = field(default_factory=list)
    sources: List[str] = field(default_factory=list)


# ----------------------------- Encoding --------------------------------------

def normalize_format(fmt: str) -> str:
    fmt = (fmt or "png").lower().strip()
    if fmt == "jpeg":
        fmt = "jpg"
    if fmt not in EXPORT_FORMATS:
        raise ValueError(f"Unsupported export format '{fmt}'. Available: {', '.join(EXPORT_FORMATS)}")
    return fmt


def encode_image(image: Image.Image, fmt: str) -> bytes:
    buf = io.BytesIO()
    if fmt == "jpg":
        image.convert("RGB").save(buf, format="JPEG", quality=JPEG_QUALITY)
    else:
        image.save(buf, format="PNG")
    return buf.getvalue()


def compose_pdf(pages: Sequence[Tuple[bytes, int, int]]) -> bytes:
    """One page per PNG frame; page size in points equals the frame's pixel size."""
    buf = io.BytesIO()
    first_w, first_h = pages[0][1], pages[0][2]
    c = pdf_canvas.Canvas(buf, pagesize=(first_w, first_h))
    for png, w, h in pages:
        c.setPageSize((w, h))
        c.drawImage(ImageReader(io.BytesIO(png)), 0, 0, width=w, height=h)
        c.showPage()
    c.save()
    return buf.getvalue()


# ----------------------------- Pipeline --------------------------------------

class SpecimenExporter:
    """Drives preview-surface frames through encoding into export artifacts."""

    def __init__(self, surface: Optional[RenderSurface] = None) -> None:
        self.surface = surface
        self.generating = False

    def export(
        self,
        fonts: Sequence[FontHandle],
        size: CanvasSize,
        style: StyleConfig,
        text: str,
        fmt: str = "png",
        collage: bool = False,
        single_line: bool = False,
        selected_ids: Optional[Sequence[str]] = None,
        preview_font: Optional[FontHandle] = None,
        timestamp: Optional[int] = None,
    ) -> List[ExportArtifact]:
        if self.generating:
            warn("An export is already running; request ignored.")
            return []
        if self.surface is None:
            warn("No drawing surface available; nothing exported.")
            return []
        if not fonts:
            warn("No fonts loaded; nothing to export.")
            return []
        fmt = normalize_format(fmt)
        ts = timestamp if timestamp is not None else int(time.time() * 1000)

        self.generating = True
        try:
            if selected_ids is None:
                selected = list(fonts)
            else:
                wanted = set(selected_ids)
                selected = [f for f in fonts if f.id in wanted]

            if collage and len(selected) > 1:
                return self._export_collage(selected, size, style, text, fmt, single_line, ts)

            targets = selected or ([preview_font] if preview_font is not None else [])
            if not targets:
                warn("No fonts selected; nothing to export.")
                return []
            if fmt == "pdf" and len(targets) > 1:
                return self._export_batch_pdf(targets, size, style, text, single_line, ts)
            return self._export_images(targets, size, style, text, fmt, single_line)
        finally:
            try:
                if preview_font is not None:
                    self._restore_preview(preview_font, size, style, text, single_line)
            finally:
                self.generating = False

    def _restore_preview(self, font: FontHandle, size: CanvasSize, style: StyleConfig, text: str, single_line: bool) -> None:
        # Leave the preview showing the selected font, not the last exported frame.
        try:
            render_single(self.surface, font, size, style, text, single_line)
        except Exception as e:
            warn(f"Failed to restore preview for {font.file_name}: {e}")

    def _render_frame(self, font: FontHandle, size: CanvasSize, style: StyleConfig, text: str, single_line: bool, fmt: str) -> Optional[bytes]:
        with self.surface.session(size.width, size.height) as image:
            if not render_single(self.surface, font, size, style, text, single_line):
                return None
            return encode_image(image, fmt)

    def _export_images(self, targets: Sequence[FontHandle], size: CanvasSize, style: StyleConfig, text: str, fmt: str, single_line: bool) -> List[ExportArtifact]:
        artifacts: List[ExportArtifact] = []
        for i, font in enumerate(targets):
            info(f"Rendering specimen {i+1}/{len(targets)}: {font.file_name}")
            try:
                frame = self._render_frame(font, size, style, text, single_line, "png" if fmt == "pdf" else fmt)
                if frame is None:
                    warn(f"Nothing rendered for {font.file_name}; skipping.")
                    continue
                data = compose_pdf([(frame, size.width, size.height)]) if fmt == "pdf" else frame
            except SurfaceUnavailableError as e:
                warn(f"Export aborted: {e}")
                return []
            except Exception as e:
                warn(f"Failed to export {font.file_name}: {e}")
                continue
            artifacts.append(
                ExportArtifact(
                    filename=f"{font.stem}-{size.width}x{size.height}.{fmt}",
                    format=fmt,
                    data=data,
                    page_sizes=[(size.width, size.height)],
                    sources=[font.file_name],
                )
            )
        return artifacts

    def _export_batch_pdf(self, targets: Sequence[FontHandle], size: CanvasSize, style: StyleConfig, text: str, single_line: bool, ts: int) -> List[ExportArtifact]:
        pages: List[Tuple[bytes, int, int]] = []
        sources: List[str] = []
        for i, font in enumerate(targets):
            info(f"Rendering page {i+1}/{len(targets)}: {font.file_name}")
            try:
                frame = self._render_frame(font, size, style, text, single_line, "png")
            except SurfaceUnavailableError as e:
                warn(f"Export aborted: {e}")
                return []
            except Exception as e:
                warn(f"Failed to render page for {font.file_name}: {e}")
                continue
            if frame is None:
                warn(f"Nothing rendered for {font.file_name}; skipping page.")
                continue
            pages.append((frame, size.width, size.height))
            sources.append(font.file_name)
        if not pages:
            warn("No pages rendered; PDF not written.")
            return []
        info(f"Composing PDF with {len(pages)} page(s)...")
        return [
            ExportArtifact(
                filename=f"batch-export-{ts}.pdf",
                format="pdf",
                data=compose_pdf(pages),
                page_sizes=[(w, h) for _, w, h in pages],
                sources=sources,
            )
        ]

    def _export_collage(self, fonts: Sequence[FontHandle], size: CanvasSize, style: StyleConfig, text: str, fmt: str, single_line: bool, ts: int) -> List[ExportArtifact]:
        info(f"Composing collage of {len(fonts)} fonts...")
        collage_surface = RenderSurface()
        layout = render_collage(collage_surface, fonts, size, MAX_COLLAGE_DIM, style, text, single_line)
        image = collage_surface.snapshot() if layout is not None else None
        if image is None:
            warn("Collage could not be rendered.")
            return []
        if layout.scale < 1.0:
            info(f"Collage scaled by {layout.scale:.4f} to fit {MAX_COLLAGE_DIM}px")
        w, h = image.size
        frame = encode_image(image, "png" if fmt == "pdf" else fmt)
        data = compose_pdf([(frame, w, h)]) if fmt == "pdf" else frame
        return [
            ExportArtifact(
                filename=f"collage-{w}x{h}-{ts}.{fmt}",
                format=fmt,
                data=data,
                page_sizes=[(w, h)],
                sources=[f.file_name for f in fonts],
            )
        ]


def save_artifacts(artifacts: Sequence[ExportArtifact], outdir: str) -> List[str]:
    os.makedirs(outdir, exist_ok=True)
    paths: List[str] = []
    for artifact in artifacts:
        fpath = os.path.join(outdir, artifact.filename)
        with open(fpath, "wb") as f:
            f.write(artifact.data)
        info(f"Saved {fpath}")
        paths.append(fpath)
    return paths


# --------------------------- CLI ---------------------------------------------

def load_json(path: str) -> dict:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def pick(*values):
    for v in values:
        if v is not None:
            return v
    return None


def read_job(path: Optional[str]) -> dict:
    if not path:
        return {}
    if not os.path.isfile(path):
        warn(f"Job file not found: {path}")
        return {}
    job = load_json(path)
    if not isinstance(job, dict):
        warn(f"Job file {path} must contain a JSON object; ignoring it.")
        return {}
    base = os.path.dirname(os.path.abspath(path))
    # Font paths in a job file are relative to the job file.
    job["fonts"] = [p if os.path.isabs(p) else os.path.join(base, p) for p in job.get("fonts") or []]
    return job


def print_presets() -> None:
    print("Sizes:")
    for preset in SIZE_PRESETS.values():
        print(f"  {preset.id:<10} {preset.label:<16} {preset.description}")
    print("Languages:")
    for lang in LANGUAGE_PRESETS.values():
        print(f"  {lang.id:<10} {lang.name}")


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Font Specimen Generator")
    parser.add_argument("fonts", nargs="*", help="Font files to render")
    parser.add_argument("--config", default=None, help="Optional JSON job file; explicit flags override its values")
    parser.add_argument("--size", default=None, choices=list(SIZE_PRESETS), help="Size preset (default 1055x127)")
    parser.add_argument("--width", type=int, default=None, help="Custom canvas width (px, 400-5000)")
    parser.add_argument("--height", type=int, default=None, help="Custom canvas height (px, 400-5000)")
    parser.add_argument("--lang", default=None, choices=list(LANGUAGE_PRESETS), help="Character set preset")
    parser.add_argument("--text", default=None, help="Specimen text; '\\n' starts a new line")
    parser.add_argument("--text-file", default=None, help="Read specimen text from a UTF-8 file")
    parser.add_argument("--font-size", type=int, default=None, help="Font size (px)")
    parser.add_argument("--line-height", type=float, default=None, help="Line height multiplier")
    parser.add_argument("--letter-spacing", type=float, default=None, help="Letter spacing (px)")
    parser.add_argument("--rtl", action="store_true", default=None, help="Right-to-left layout")
    parser.add_argument("--format", default=None, choices=EXPORT_FORMATS, help="Output format (default png)")
    parser.add_argument("--collage", action="store_true", default=None, help="Combine selected fonts into one grid image")
    parser.add_argument("--select", nargs="+", default=None, help="Font file names or stems to include")
    parser.add_argument("--preview", default=None, help="Font kept on the preview surface after export")
    parser.add_argument("--outdir", default=None, help="Directory to save output files")
    parser.add_argument("--list-presets", action="store_true", help="List size and language presets and exit")
    args = parser.parse_args(argv)

    if args.list_presets:
        print_presets()
        return 0

    job = read_job(args.config)

    try:
        preset = get_preset(pick(args.size, job.get("size"), DEFAULT_PRESET))
        size = canvas_size_for(preset, pick(args.width, job.get("width")), pick(args.height, job.get("height")))
    except ValueError as e:
        parser.error(str(e))

    lang = pick(args.lang, job.get("lang"), DEFAULT_LANGUAGE)
    if lang not in LANGUAGE_PRESETS:
        parser.error(f"Unknown language preset '{lang}'")
    text = args.text
    if args.text_file:
        try:
            with open(args.text_file, "r", encoding="utf-8") as f:
                text = f.read().rstrip("\n")
        except (OSError, UnicodeDecodeError) as e:
            parser.error(f"Cannot read text file {args.text_file}: {e}")
    text = pick(text, job.get("text"))
    if text is not None:
        text = text.replace("\\n", "\n")
    else:
        text = select_specimen_text(preset, lang)
    if not text:
        warn("Specimen text is empty; canvases will be blank.")

    user_style = StyleConfig(
        font_size=pick(args.font_size, job.get("font_size"), default_font_size(preset)),
        line_height=pick(args.line_height, job.get("line_height"), 1.2),
        letter_spacing=pick(args.letter_spacing, job.get("letter_spacing"), 0),
        rtl=bool(pick(args.rtl, job.get("rtl"), is_rtl_language(lang))),
    )
    try:
        validate_style(user_style)
        fmt = normalize_format(pick(args.format, job.get("format"), "png"))
    except ValueError as e:
        parser.error(str(e))
    style = resolve_style(preset, user_style)

    fonts = load_fonts(args.fonts or job.get("fonts") or [])
    if not fonts:
        warn("No fonts to render.")
        return 1

    selected_ids: Optional[List[str]] = None
    names = pick(args.select, job.get("select"))
    if names is not None:
        selected_ids = []
        for name in names:
            f = find_font(fonts, name)
            if f is None:
                warn(f"Selected font '{name}' is not loaded; ignoring.")
                continue
            selected_ids.append(f.id)
    preview_font = find_font(fonts, args.preview) or fonts[0]

    exporter = SpecimenExporter(RenderSurface())
    artifacts = exporter.export(
        fonts,
        size,
        style,
        text,
        fmt=fmt,
        collage=bool(pick(args.collage, job.get("collage"), False)),
        single_line=preset.single_line,
        selected_ids=selected_ids,
        preview_font=preview_font,
    )
    if not artifacts:
        warn("Nothing exported.")
        return 1

    save_artifacts(artifacts, pick(args.outdir, job.get("outdir"), DEFAULT_OUTDIR))
    info("Done.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
