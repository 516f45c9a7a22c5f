#!/usr/bin/env python3
"""Verify that a composited certificate has each layer inside its anchor region.

Compares the certificate against the template it was made from. For every
expected layer the anchor region is resolved for the template's pixel size and
the share of pixels that changed is measured:

1. name:      the band just above the name baseline must contain new pixels
2. photo:     the square inscribed in the photo circle must be mostly replaced
3. signature: the signature box must contain some ink

Usage:
    python verify.py <certificate.jpg> <template.jpg> [--campaign arthritis]
                     [--fields name,photo,signature] [--tolerance 48] [--pretty]

Outputs a JSON report with pass/fail for each layer; exits 1 if any fail.
"""

import argparse
import json
import math
import sys
from pathlib import Path

from PIL import Image, ImageChops

from anchors import resolve_layout
from campaigns import load_campaign

# Minimum share of changed pixels for a region to count as drawn
MIN_CHANGED = {
    "name": 0.01,
    "photo": 0.5,
    "signature": 0.005,
}

NAME_BAND_WIDTH = 6  # in font sizes, to the right of the baseline origin


def changed_fraction(certificate, template, box, tolerance=48):
    """Share of pixels in box whose largest channel difference exceeds tolerance."""
    width, height = certificate.size
    x0, y0, x1, y1 = box
    x0, y0 = max(0, int(x0)), max(0, int(y0))
    x1, y1 = min(width, int(math.ceil(x1))), min(height, int(math.ceil(y1)))
    if x1 <= x0 or y1 <= y0:
        return 0.0

    region = (x0, y0, x1, y1)
    diff = ImageChops.difference(certificate.crop(region), template.crop(region))
    # Largest channel difference per pixel
    r, g, b = diff.split()
    peak = ImageChops.lighter(ImageChops.lighter(r, g), b)
    histogram = peak.histogram()
    changed = sum(histogram[tolerance + 1:])
    return changed / ((x1 - x0) * (y1 - y0))


def layer_regions(layout):
    """Boxes to inspect for each layer of a resolved layout."""
    regions = {}
    name = layout["name"]
    regions["name"] = (name.x, name.y - name.font_size,
                       name.x + name.font_size * NAME_BAND_WIDTH, name.y)

    photo = layout["photo"]
    half = photo.radius / math.sqrt(2)
    regions["photo"] = (photo.cx - half, photo.cy - half, photo.cx + half, photo.cy + half)

    regions["signature"] = layout["signature"].bounds
    return regions


def verify_certificate(certificate_path, template_path, campaign="arthritis",
                       fields=("name", "photo", "signature"), tolerance=48):
    """Run full verification."""
    campaign = load_campaign(campaign)
    certificate = Image.open(certificate_path).convert("RGB")
    template = Image.open(template_path).convert("RGB")

    report = {
        "file": str(certificate_path),
        "template": str(template_path),
        "results": [],
        "summary": {"total": 0, "pass": 0, "fail": 0, "warn": 0},
    }

    if certificate.size != template.size:
        report["results"].append({
            "field": "size",
            "status": "fail",
            "reason": "Certificate and template sizes differ",
            "expected": list(template.size),
            "actual": list(certificate.size),
        })
    else:
        width, height = template.size
        layout = resolve_layout(campaign, width, height, has_photo="photo" in fields)
        regions = layer_regions(layout)
        for field in fields:
            if field not in regions:
                report["results"].append({
                    "field": field,
                    "status": "warn",
                    "reason": "Unknown layer",
                })
                continue
            fraction = changed_fraction(certificate, template, regions[field], tolerance)
            ok = fraction >= MIN_CHANGED[field]
            report["results"].append({
                "field": field,
                "status": "pass" if ok else "fail",
                "reason": None if ok else "Layer not found in its anchor region",
                "changed": round(fraction, 4),
                "region": [round(v, 1) for v in regions[field]],
            })

    for r in report["results"]:
        report["summary"]["total"] += 1
        status = r.get("status", "fail")
        if status in report["summary"]:
            report["summary"][status] += 1

    report["all_passed"] = report["summary"]["fail"] == 0

    return report


def main():
    parser = argparse.ArgumentParser(description="Verify certificate layer placement")
    parser.add_argument("certificate", help="Path to composited certificate")
    parser.add_argument("template", help="Path to the template it was made from")
    parser.add_argument("--campaign", default="arthritis", help="Campaign name or JSON file")
    parser.add_argument("--fields", default="name,photo,signature",
                        help="Comma-separated layers expected on the certificate")
    parser.add_argument("--tolerance", type=int, default=48,
                        help="Per-channel difference that counts as a change (0-254)")
    parser.add_argument("--pretty", action="store_true", help="Pretty-print JSON")
    args = parser.parse_args()

    for path in (args.certificate, args.template):
        if not Path(path).exists():
            print(json.dumps({"error": f"File not found: {path}"}), file=sys.stderr)
            sys.exit(1)

    fields = [f.strip() for f in args.fields.split(",") if f.strip()]
    try:
        report = verify_certificate(args.certificate, args.template, args.campaign,
                                    fields, args.tolerance)
    except ValueError as e:
        print(json.dumps({"error": str(e)}), file=sys.stderr)
        sys.exit(1)

    indent = 2 if args.pretty else None
    print(json.dumps(report, indent=indent, ensure_ascii=False))

    sys.exit(0 if report["all_passed"] else 1)


if __name__ == "__main__":
    main()
