#!/usr/bin/env python3
"""Capture a photo from the webcam for a pledge certificate.

Opens an OpenCV preview window on the front camera.

Keys:
  - SPACE  capture the current frame and save it
  - s      switch between front and back camera
  - ESC/q  cancel (exits with code 1)

Usage:
    python capture_photo.py <output.jpg> [--facing user|environment] [--quality 90]

The camera is released on every exit path, including errors and Ctrl-C.
"""

import argparse
import asyncio
import json
import sys

import cv2
import numpy as np

from camera import FACING_MODES, FACING_USER, CameraSession
from errors import NotReadyError, PledgeError

WINDOW = "Take your photo (SPACE capture, s switch, ESC cancel)"


async def next_frame(camera):
    """Read the next preview frame in a worker thread; None if nothing is open."""
    if not camera.is_open:
        return None
    return await asyncio.to_thread(camera.stream.read_frame)


async def capture_photo(output_path, facing=FACING_USER, quality=90, verbose=False):
    """Run the preview loop. Returns True if a photo was saved."""
    async with CameraSession(facing=facing, verbose=verbose) as camera:
        await camera.open()
        try:
            while True:
                frame = await next_frame(camera)
                if frame is not None:
                    cv2.imshow(WINDOW, cv2.cvtColor(np.asarray(frame), cv2.COLOR_RGB2BGR))
                key = cv2.waitKey(15) & 0xFF
                if key in (27, ord("q")):
                    return False
                if key == ord("s"):
                    await camera.switch_facing()
                elif key == ord(" "):
                    try:
                        photo = await asyncio.to_thread(camera.snapshot)
                    except NotReadyError as e:
                        print(str(e), file=sys.stderr)
                        continue
                    photo.save(output_path, "JPEG", quality=quality)
                    return True
        finally:
            cv2.destroyAllWindows()


def main():
    parser = argparse.ArgumentParser(description="Capture a photo from the webcam")
    parser.add_argument("output", help="Output JPEG path")
    parser.add_argument("--facing", default=FACING_USER, choices=FACING_MODES,
                        help="Camera to start with (default: user)")
    parser.add_argument("--quality", type=int, default=90, help="JPEG quality (default: 90)")
    parser.add_argument("--verbose", action="store_true", help="Print camera diagnostics to stderr")
    args = parser.parse_args()

    try:
        saved = asyncio.run(capture_photo(args.output, args.facing, args.quality, args.verbose))
    except PledgeError as e:
        print(json.dumps({"error": str(e)}), file=sys.stderr)
        sys.exit(1)

    if saved:
        print(json.dumps({"status": "saved", "path": args.output}))
    else:
        print(json.dumps({"status": "cancelled"}))
        sys.exit(1)


if __name__ == "__main__":
    main()
