"""Camera capture session: one owned video stream, released on every exit.

The session is the single owner of the device stream. Opening a new stream,
switching between the front ("user") and back ("environment") camera, and
closing all go through it, and it guarantees that at most one stream is open
at a time:

    async with CameraSession() as camera:
        await camera.open("user")
        await camera.switch_facing()
        photo = camera.snapshot()      # PIL image, RGB

Stream acquisition is blocking in OpenCV, so it runs in a worker thread. A
close() issued while an open() is still acquiring wins: the late stream is
stopped as soon as it arrives and open() returns None. The same holds when the
task awaiting open() is cancelled.
"""

import asyncio
import os
import sys
import threading

import cv2
from PIL import Image

from errors import CameraPermissionError, DeviceError, NotReadyError

FACING_USER = "user"
FACING_ENVIRONMENT = "environment"
FACING_MODES = (FACING_USER, FACING_ENVIRONMENT)

# Front camera is the first device, rear camera the second
DEVICE_INDEX = {FACING_USER: 0, FACING_ENVIRONMENT: 1}

IDEAL_WIDTH = 1280
IDEAL_HEIGHT = 720

PERMISSION_MARKERS = ("permission", "not authorized", "not authorised", "access denied")


def other_facing(facing):
    return FACING_ENVIRONMENT if facing == FACING_USER else FACING_USER


def _check_facing(facing):
    if facing not in FACING_MODES:
        raise ValueError(f"Unknown facing mode: {facing}. Use one of {FACING_MODES}")


class VideoStream:
    """A live OpenCV capture for one facing mode."""

    def __init__(self, capture, facing):
        self.capture = capture
        self.facing = facing
        self._dimensions = (0, 0)

    @property
    def active(self):
        return self.capture is not None

    @property
    def dimensions(self):
        """Size of the last decoded frame; (0, 0) until one arrives."""
        return self._dimensions

    def read_frame(self):
        """Grab and decode the next frame as an RGB image, or None."""
        if self.capture is None:
            return None
        ok, frame = self.capture.read()
        if not ok or frame is None or frame.size == 0:
            return None
        height, width = frame.shape[:2]
        self._dimensions = (width, height)
        return Image.fromarray(cv2.cvtColor(frame, cv2.COLOR_BGR2RGB))

    def stop(self):
        if self.capture is not None:
            self.capture.release()
            self.capture = None


def _is_permission_error(message):
    message = message.lower()
    return any(marker in message for marker in PERMISSION_MARKERS)


def open_device(facing, width=IDEAL_WIDTH, height=IDEAL_HEIGHT):
    """Open the capture device for a facing mode (blocking).

    Raises CameraPermissionError when the OS refuses access and DeviceError
    when there is no usable device.
    """
    _check_facing(facing)
    index = DEVICE_INDEX[facing]

    device_path = f"/dev/video{index}"
    if sys.platform.startswith("linux") and os.path.exists(device_path):
        if not os.access(device_path, os.R_OK | os.W_OK):
            raise CameraPermissionError()

    try:
        capture = cv2.VideoCapture(index)
    except cv2.error as e:
        if _is_permission_error(str(e)):
            raise CameraPermissionError() from e
        raise DeviceError() from e

    if not capture.isOpened():
        capture.release()
        raise DeviceError()

    # Resolution is a hint; drivers pick the closest mode they support
    capture.set(cv2.CAP_PROP_FRAME_WIDTH, width)
    capture.set(cv2.CAP_PROP_FRAME_HEIGHT, height)
    return VideoStream(capture, facing)


class CameraSession:
    def __init__(self, opener=open_device, facing=FACING_USER,
                 width=IDEAL_WIDTH, height=IDEAL_HEIGHT, verbose=False):
        _check_facing(facing)
        self._opener = opener
        self.facing = facing
        self.width = width
        self.height = height
        self.verbose = verbose
        self._stream = None
        self._generation = 0
        self._lock = asyncio.Lock()
        # Guards _generation and _arrived between the loop and the worker thread
        self._handoff = threading.Lock()
        self._arrived = None

    def _log(self, message):
        if self.verbose:
            print(f"[camera] {message}", file=sys.stderr)

    @property
    def stream(self):
        return self._stream

    @property
    def is_open(self):
        return self._stream is not None and self._stream.active

    def _acquire(self, facing, generation):
        """Open the device in a worker thread and hand the stream over.

        A stream whose acquisition was closed or cancelled meanwhile is
        stopped here, so it never outlives the request.
        """
        stream = self._opener(facing, self.width, self.height)
        with self._handoff:
            if generation == self._generation:
                self._arrived = stream
                return stream
        stream.stop()
        return None

    async def open(self, facing=None):
        """Acquire a stream, releasing any existing one first.

        Returns the new stream, or None if the session was closed while the
        device was being acquired. Cancelling the caller closes the session.
        """
        if facing is not None:
            _check_facing(facing)
        async with self._lock:
            self.close()
            self.facing = facing or self.facing
            generation = self._generation
            self._log(f"requesting {self.facing} camera at {self.width}x{self.height}")
            try:
                stream = await asyncio.to_thread(self._acquire, self.facing, generation)
            except asyncio.CancelledError:
                self._log("open cancelled, releasing the device")
                self.close()
                raise
            if stream is None or generation != self._generation:
                self._log("session closed during acquisition, late stream released")
                return None
            with self._handoff:
                self._arrived = None
            self._stream = stream
            return stream

    async def switch_facing(self):
        """Stop the current stream, then open the opposite facing mode.

        If the new device cannot be opened the session is left empty.
        """
        facing = other_facing(self.facing)
        self.close()
        return await self.open(facing)

    def snapshot(self):
        """Capture the current frame as an RGB image."""
        if not self.is_open:
            raise NotReadyError()
        frame = self._stream.read_frame()
        if frame is None or frame.width == 0 or frame.height == 0:
            raise NotReadyError()
        self._log(f"captured {frame.width}x{frame.height} frame")
        return frame

    def close(self):
        """Stop the stream and cancel any acquisition in flight. Idempotent."""
        with self._handoff:
            self._generation += 1
            arrived, self._arrived = self._arrived, None
        if arrived is not None and arrived is not self._stream:
            self._log(f"stopping unclaimed {arrived.facing} camera")
            arrived.stop()
        if self._stream is not None:
            self._log(f"stopping {self._stream.facing} camera")
            self._stream.stop()
            self._stream = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.close()
        return False
