"""Percentage anchors resolved against a template's decoded pixel size.

All positions on a certificate are stored as percentages so the same layout
works for any template resolution:

  - TextAnchor   x%, y% of width/height give the left baseline origin;
                 font_size is a percentage of the template *width*
  - CircleAnchor x%, y% give the centre; radius is a percentage of the width
  - BoxAnchor    x%, y% give the top-left corner; width% of the width and
                 height% of the height give the size

Anchors must be resolved against the pixel dimensions of the decoded template,
never against an on-screen size.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class TextAnchor:
    x: float
    y: float
    font_size: float


@dataclass(frozen=True)
class CircleAnchor:
    x: float
    y: float
    radius: float


@dataclass(frozen=True)
class BoxAnchor:
    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class TextPlacement:
    x: float
    y: float
    font_size: int

    def to_dict(self):
        return {"x": self.x, "y": self.y, "font_size": self.font_size}


@dataclass(frozen=True)
class CirclePlacement:
    cx: float
    cy: float
    radius: float

    @property
    def bounds(self):
        return (self.cx - self.radius, self.cy - self.radius,
                self.cx + self.radius, self.cy + self.radius)

    def to_dict(self):
        return {"cx": self.cx, "cy": self.cy, "radius": self.radius}


@dataclass(frozen=True)
class BoxPlacement:
    x: float
    y: float
    width: float
    height: float

    @property
    def bounds(self):
        return (self.x, self.y, self.x + self.width, self.y + self.height)

    def to_dict(self):
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


def _check_size(width, height):
    if width <= 0 or height <= 0:
        raise ValueError(f"Template size must be positive, got {width}x{height}")


def resolve_text(anchor: TextAnchor, width: int, height: int) -> TextPlacement:
    _check_size(width, height)
    if anchor.font_size < 0:
        raise ValueError(f"Negative font size in {anchor}")
    return TextPlacement(
        x=width * anchor.x / 100,
        y=height * anchor.y / 100,
        font_size=max(1, round(width * anchor.font_size / 100)),
    )


def resolve_circle(anchor: CircleAnchor, width: int, height: int) -> CirclePlacement:
    _check_size(width, height)
    if anchor.radius < 0:
        raise ValueError(f"Negative radius in {anchor}")
    return CirclePlacement(
        cx=width * anchor.x / 100,
        cy=height * anchor.y / 100,
        radius=width * anchor.radius / 100,
    )


def resolve_box(anchor: BoxAnchor, width: int, height: int) -> BoxPlacement:
    _check_size(width, height)
    if anchor.width < 0 or anchor.height < 0:
        raise ValueError(f"Negative box size in {anchor}")
    return BoxPlacement(
        x=width * anchor.x / 100,
        y=height * anchor.y / 100,
        width=width * anchor.width / 100,
        height=height * anchor.height / 100,
    )


def resolve_layout(campaign, width, height, has_photo=True):
    """Resolve every anchor of a campaign for one template size.

    The signature box depends on whether a photo is drawn: without a photo the
    campaign's fallback box is used.
    """
    signature_anchor = campaign.signature if has_photo else campaign.signature_fallback
    return {
        "name": resolve_text(campaign.name, width, height),
        "photo": resolve_circle(campaign.photo, width, height),
        "signature": resolve_box(signature_anchor, width, height),
    }


def scale_point(point, buffer_size, display_size):
    """Map an on-screen point into a buffer's native pixel space."""
    display_w, display_h = display_size
    if display_w <= 0 or display_h <= 0:
        raise ValueError(f"Display size must be positive, got {display_w}x{display_h}")
    buffer_w, buffer_h = buffer_size
    x, y = point
    return (x * buffer_w / display_w, y * buffer_h / display_h)
