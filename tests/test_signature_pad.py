"""Tests for the freehand signature surface."""

import pytest

from signature_pad import SignaturePad

INK = (30, 58, 138, 255)


@pytest.fixture
def pad():
    pad = SignaturePad(1000, 400, ink="#1e3a8a", stroke_width=3)
    pad.mount(500, 200)
    return pad


def draw_line(pad, start, end):
    pad.begin_stroke(start)
    pad.extend_stroke(end)
    return pad.end_stroke()


# ---------------------------------------------------------------------------
# Drawing
# ---------------------------------------------------------------------------

class TestStrokes:
    def test_stroke_is_rescaled_into_buffer(self, pad):
        signature = draw_line(pad, (10, 10), (60, 10))
        # Display (500x200) -> buffer (1000x400) doubles coordinates
        assert signature.getpixel((70, 20)) == INK
        assert signature.getpixel((70, 200))[3] == 0
        assert signature.getpixel((130, 20))[3] == 0

    def test_background_stays_transparent(self, pad):
        signature = draw_line(pad, (10, 10), (200, 100))
        assert signature.mode == "RGBA"
        assert signature.size == (1000, 400)
        assert signature.getpixel((0, 0)) == (0, 0, 0, 0)
        assert signature.getpixel((999, 399)) == (0, 0, 0, 0)

    def test_begin_without_extend_is_not_a_signature(self, pad):
        pad.begin_stroke((10, 10))
        assert pad.end_stroke() is None
        assert not pad.has_ink

    def test_extend_without_begin_is_ignored(self, pad):
        pad.extend_stroke((10, 10))
        assert not pad.has_ink

    def test_strokes_accumulate(self, pad):
        draw_line(pad, (10, 10), (60, 10))
        signature = draw_line(pad, (10, 100), (60, 100))
        assert signature.getpixel((70, 20)) == INK
        assert signature.getpixel((70, 200)) == INK

    def test_resize_changes_scaling(self, pad):
        pad.resize(1000, 400)
        signature = draw_line(pad, (10, 10), (60, 10))
        assert signature.getpixel((35, 10)) == INK
        assert signature.getpixel((70, 20))[3] == 0

    def test_resize_rejects_zero(self, pad):
        with pytest.raises(ValueError):
            pad.resize(0, 200)


# ---------------------------------------------------------------------------
# Clearing and snapshots
# ---------------------------------------------------------------------------

class TestClearAndSnapshot:
    def test_clear_then_end_stroke_is_absent(self, pad):
        draw_line(pad, (10, 10), (60, 10))
        pad.clear()
        assert pad.end_stroke() is None
        assert pad.snapshot() is None

    def test_clear_wipes_buffer(self, pad):
        draw_line(pad, (10, 10), (60, 10))
        pad.clear()
        signature = draw_line(pad, (10, 100), (60, 100))
        assert signature.getpixel((70, 20))[3] == 0

    def test_snapshot_is_a_copy(self, pad):
        first = draw_line(pad, (10, 10), (60, 10))
        first.putpixel((500, 300), (255, 0, 0, 255))
        second = pad.snapshot()
        assert second.getpixel((500, 300)) == (0, 0, 0, 0)

    def test_cropped_snapshot(self, pad):
        draw_line(pad, (100, 50), (200, 50))
        cropped = pad.snapshot(crop=True, pad=10)
        # 200..400 wide in buffer, plus caps and padding
        assert 200 < cropped.width < 240
        assert cropped.height < 40


# ---------------------------------------------------------------------------
# Unmounted surface
# ---------------------------------------------------------------------------

class TestUnmounted:
    def test_operations_before_mount_are_noops(self):
        pad = SignaturePad(200, 100)
        assert not pad.mounted
        pad.begin_stroke((10, 10))
        pad.extend_stroke((50, 50))
        pad.clear()
        assert pad.end_stroke() is None
        assert not pad.has_ink

    def test_mount_without_size_uses_native_resolution(self):
        pad = SignaturePad(200, 100)
        pad.mount()
        signature = draw_line(pad, (10, 10), (60, 10))
        assert signature.getpixel((35, 10))[3] == 255

    def test_operations_after_unmount_are_noops(self, pad):
        draw_line(pad, (10, 10), (60, 10))
        pad.unmount()
        pad.begin_stroke((10, 100))
        pad.extend_stroke((60, 100))
        pad.clear()
        assert pad.end_stroke() is None
        # Ink drawn before unmounting is untouched
        assert pad.has_ink
