#!/usr/bin/env python3
"""Composite a pledge certificate from a template, a name, a photo and a signature.

Layers are drawn onto one surface in a fixed order, each image decoded before it
is drawn:

    template -> name -> photo (circular, cover-fit) -> signature -> JPEG

Every position comes from the campaign's percentage anchors, resolved against
the decoded template's pixel size. Without a photo the signature goes into the
campaign's fallback box. A template, photo or signature that cannot be decoded
aborts the attempt with DecodeError; nothing is written.

Usage:
    python compose.py <template.jpg> <output.jpg> --name "Jane Doe" \
        [--photo photo.jpg] [--signature signature.png] \
        [--campaign arthritis|campaign.json] [--quality 92] [--pdf out.pdf]
"""

import argparse
import asyncio
import io
import json
import sys
from dataclasses import dataclass
from pathlib import Path

from PIL import Image, ImageDraw, ImageFont, ImageOps

from anchors import resolve_layout
from campaigns import ASSETS_DIR, load_campaign
from errors import DecodeError, PledgeError
from record import PledgeRecord

DEFAULT_QUALITY = 92
FALLBACK_FONTS = ("DejaVuSans-Bold.ttf", "LiberationSans-Bold.ttf", "Arial Bold.ttf")

# The circle mask is drawn this many times larger, then downsampled for smooth edges
MASK_SUPERSAMPLE = 4


@dataclass
class CompositeResult:
    data: bytes
    size: tuple
    layers: list
    layout: dict

    def to_dict(self):
        return {
            "size": {"width": self.size[0], "height": self.size[1]},
            "layers": list(self.layers),
            "layout": {key: placement.to_dict() for key, placement in self.layout.items()},
            "bytes": len(self.data),
        }


def _log(verbose, message):
    if verbose:
        print(f"[compose] {message}", file=sys.stderr)


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------

def _decode(source):
    if isinstance(source, (bytes, bytearray)):
        source = io.BytesIO(source)
    image = Image.open(source)
    image.load()
    return image


async def load_image(source, label):
    """Decode an image source (path, bytes or PIL image) off the event loop."""
    if source is None:
        raise DecodeError(label, "no image given")
    if isinstance(source, Image.Image):
        return source.copy()
    try:
        return await asyncio.to_thread(_decode, source)
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        raise DecodeError(label, str(e)) from e


def load_font(font, size):
    """Load the campaign font at a pixel size.

    Returns (font, synthetic_bold). When no bold TrueType face can be found the
    scalable default font is used and the caller should embolden it.
    """
    candidates = [font, str(ASSETS_DIR / "fonts" / font)] if font else []
    for candidate in candidates + list(FALLBACK_FONTS):
        try:
            return ImageFont.truetype(candidate, size), False
        except OSError:
            continue
    return ImageFont.load_default(size=size), True


# ---------------------------------------------------------------------------
# Layers
# ---------------------------------------------------------------------------

def draw_name(surface, name, placement, color, font, synthetic_bold=False):
    """Draw the name left-aligned with its baseline on the anchor point."""
    if not name:
        return
    stroke = max(1, placement.font_size // 30) if synthetic_bold else 0
    draw = ImageDraw.Draw(surface)
    draw.text((placement.x, placement.y), name, fill=color, font=font, anchor="ls",
              stroke_width=stroke, stroke_fill=color)


def cover_size(photo_size, diameter):
    """Size that covers a circle of the given diameter, keeping aspect ratio."""
    photo_w, photo_h = photo_size
    aspect = photo_w / photo_h
    if aspect > 1:
        draw_h = diameter
        draw_w = draw_h * aspect
    else:
        draw_w = diameter
        draw_h = draw_w / aspect
    return draw_w, draw_h


def draw_photo(surface, photo, circle):
    """Clip the photo to a circle, scaled to cover it and centred."""
    photo = ImageOps.exif_transpose(photo).convert("RGB")
    size = max(1, round(circle.radius * 2))
    draw_w, draw_h = cover_size(photo.size, size)
    scaled_w = max(size, round(draw_w))
    scaled_h = max(size, round(draw_h))

    scaled = photo.resize((scaled_w, scaled_h), Image.LANCZOS)
    left = (scaled_w - size) // 2
    top = (scaled_h - size) // 2
    square = scaled.crop((left, top, left + size, top + size))

    big = size * MASK_SUPERSAMPLE
    mask = Image.new("L", (big, big), 0)
    ImageDraw.Draw(mask).ellipse((0, 0, big - 1, big - 1), fill=255)
    mask = mask.resize((size, size), Image.LANCZOS)

    origin = (round(circle.cx - size / 2), round(circle.cy - size / 2))
    surface.paste(square, origin, mask)


def draw_signature(surface, signature, box):
    """Stretch the signature into its box; only the ink is drawn."""
    width = max(1, round(box.width))
    height = max(1, round(box.height))
    ink = signature.convert("RGBA").resize((width, height), Image.LANCZOS)
    surface.paste(ink, (round(box.x), round(box.y)), ink)


def _encode(surface, quality):
    buf = io.BytesIO()
    surface.save(buf, "JPEG", quality=quality)
    return buf.getvalue()


async def encode_certificate(surface, quality=DEFAULT_QUALITY):
    return await asyncio.to_thread(_encode, surface, quality)


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------

async def compose_certificate(record, campaign="arthritis", template=None,
                              quality=DEFAULT_QUALITY, verbose=False):
    """Composite one certificate for a pledge record.

    The record is only read. Each stage awaits its decode and finishes drawing
    before the next one starts, so later layers always land on top.
    """
    campaign = load_campaign(campaign)
    if template is None:
        template = campaign.final_template

    background = await load_image(template, "template")
    surface = background.convert("RGB")
    width, height = surface.size
    _log(verbose, f"template loaded: {width}x{height}")
    layers = ["background"]

    has_photo = record.photo is not None
    layout = resolve_layout(campaign, width, height, has_photo=has_photo)

    font, synthetic_bold = load_font(campaign.font, layout["name"].font_size)
    draw_name(surface, record.name, layout["name"], campaign.name_color, font, synthetic_bold)
    layers.append("name")
    _log(verbose, f"name position: {layout['name'].to_dict()}")

    if has_photo:
        photo = await load_image(record.photo, "photo")
        _log(verbose, f"photo loaded: {photo.width}x{photo.height}")
        draw_photo(surface, photo, layout["photo"])
        layers.append("photo")
        _log(verbose, f"photo position: {layout['photo'].to_dict()}")
    else:
        _log(verbose, "no photo provided")
        del layout["photo"]

    if record.signature is not None:
        signature = await load_image(record.signature, "signature")
        draw_signature(surface, signature, layout["signature"])
        layers.append("signature")
        _log(verbose, f"signature position: {layout['signature'].to_dict()}")
    else:
        _log(verbose, "no signature provided")
        del layout["signature"]

    data = await encode_certificate(surface, quality)
    _log(verbose, f"certificate encoded: {len(data)} bytes")
    return CompositeResult(data=data, size=(width, height), layers=layers, layout=layout)


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main():
    parser = argparse.ArgumentParser(description="Composite a pledge certificate")
    parser.add_argument("template", help="Path to the certificate template image")
    parser.add_argument("output", help="Path for the output JPEG")
    parser.add_argument("--name", required=True, help="Name to print on the certificate")
    parser.add_argument("--photo", help="Photo to place in the circle")
    parser.add_argument("--signature", help="Signature PNG (transparent background)")
    parser.add_argument("--campaign", default="arthritis", help="Campaign name or JSON file")
    parser.add_argument("--quality", type=int, default=DEFAULT_QUALITY, help="JPEG quality")
    parser.add_argument("--pdf", help="Also write a printable single-page PDF")
    parser.add_argument("--pretty", action="store_true", help="Pretty-print JSON")
    parser.add_argument("--verbose", action="store_true", help="Print progress to stderr")
    args = parser.parse_args()

    for label, path in (("Template", args.template), ("Photo", args.photo),
                        ("Signature", args.signature)):
        if path and not Path(path).exists():
            print(json.dumps({"error": f"{label} not found: {path}"}), file=sys.stderr)
            sys.exit(1)

    try:
        campaign = load_campaign(args.campaign)
    except ValueError as e:
        print(json.dumps({"error": str(e)}), file=sys.stderr)
        sys.exit(1)

    record = PledgeRecord(name=args.name, photo=args.photo and Path(args.photo),
                          signature=args.signature and Path(args.signature))
    try:
        result = asyncio.run(compose_certificate(record, campaign, args.template,
                                                 args.quality, args.verbose))
    except PledgeError as e:
        print(json.dumps({"error": str(e)}), file=sys.stderr)
        sys.exit(1)

    Path(args.output).write_bytes(result.data)
    report = {"status": "success", "output": str(args.output), "campaign": campaign.key}
    report.update(result.to_dict())

    if args.pdf:
        from export import certificate_to_pdf
        certificate_to_pdf(result.data, args.pdf)
        report["pdf"] = str(args.pdf)

    indent = 2 if args.pretty else None
    print(json.dumps(report, indent=indent))


if __name__ == "__main__":
    main()
