"""Freehand signature surface backed by a transparent RGBA buffer.

The buffer has a fixed native resolution. Pointer positions arrive in on-screen
coordinates and are rescaled into buffer pixels using the size the pad is
currently displayed at, so strokes stay crisp whatever the layout size.

    pad = SignaturePad(1000, 400, ink="#1e3a8a")
    pad.mount(500, 200)
    pad.begin_stroke((10, 20))
    pad.extend_stroke((60, 40))
    signature = pad.end_stroke()     # RGBA image, or None if nothing drawn
"""

from PIL import Image, ImageColor, ImageDraw

from anchors import scale_point

TRANSPARENT = (0, 0, 0, 0)


class SignaturePad:
    def __init__(self, width: int = 1000, height: int = 400,
                 ink: str = "#1e3a8a", stroke_width: int = 3):
        self.width = width
        self.height = height
        self.ink = ImageColor.getrgb(ink)[:3] + (255,)
        self.stroke_width = stroke_width
        self._display_size = None
        self._last_point = None
        self._segments = 0
        self._snapshot = None
        self._allocate()

    def _allocate(self):
        self._image = Image.new("RGBA", (self.width, self.height), TRANSPARENT)
        self._draw = ImageDraw.Draw(self._image)

    # -- mounting ---------------------------------------------------------

    @property
    def mounted(self) -> bool:
        return self._display_size is not None

    def mount(self, display_width=None, display_height=None):
        """Attach the pad to an on-screen area of the given size.

        Without a size the pad is shown at its native resolution.
        """
        self.resize(display_width or self.width, display_height or self.height)

    def resize(self, display_width, display_height):
        if display_width <= 0 or display_height <= 0:
            raise ValueError(f"Display size must be positive, got {display_width}x{display_height}")
        self._display_size = (display_width, display_height)

    def unmount(self):
        self._display_size = None
        self._last_point = None

    # -- strokes ----------------------------------------------------------

    @property
    def has_ink(self) -> bool:
        return self._segments > 0

    def _to_buffer(self, point):
        return scale_point(point, (self.width, self.height), self._display_size)

    def begin_stroke(self, point):
        if not self.mounted:
            return
        self._last_point = self._to_buffer(point)

    def extend_stroke(self, point):
        if not self.mounted or self._last_point is None:
            return
        x0, y0 = self._last_point
        x1, y1 = self._to_buffer(point)
        self._draw.line([(x0, y0), (x1, y1)], fill=self.ink,
                        width=self.stroke_width, joint="curve")
        # Round caps at both ends so consecutive segments join smoothly
        r = self.stroke_width / 2
        for cx, cy in ((x0, y0), (x1, y1)):
            self._draw.ellipse([cx - r, cy - r, cx + r, cy + r], fill=self.ink)
        self._last_point = (x1, y1)
        self._segments += 1
        self._snapshot = None

    def end_stroke(self):
        """Finish the current stroke and return the signature, if any ink exists."""
        if not self.mounted:
            return None
        self._last_point = None
        return self.snapshot()

    def clear(self):
        """Wipe the buffer back to fully transparent."""
        if not self.mounted:
            return
        self._allocate()
        self._last_point = None
        self._segments = 0
        self._snapshot = None

    # -- export -----------------------------------------------------------

    def snapshot(self, crop=False, pad=10):
        """Return a copy of the signature, or None when nothing was drawn.

        With crop=True the image is trimmed to the ink bounding box plus
        ``pad`` pixels on each side.
        """
        if not self.has_ink:
            return None
        if self._snapshot is None:
            self._snapshot = self._image.copy()
        image = self._snapshot.copy()
        if crop:
            bbox = image.getbbox()
            if bbox:
                x0 = max(0, bbox[0] - pad)
                y0 = max(0, bbox[1] - pad)
                x1 = min(self.width, bbox[2] + pad)
                y1 = min(self.height, bbox[3] + pad)
                image = image.crop((x0, y0, x1, y1))
        return image
