#!/usr/bin/env python3
"""Capture a handwritten signature via a GUI drawing canvas.

Opens a tkinter window where the user draws their signature with the mouse or a
touch screen. Strokes are recorded on a SignaturePad at the campaign's native
signature resolution, whatever size the window canvas is shown at, and saved as
a PNG with a transparent background (ink strokes on alpha).

Usage:
    python capture_signature.py <output.png> [--campaign arthritis] [--width 500] [--height 200]

The user can:
  - Draw with mouse (click-and-drag)
  - Click "Clear" to start over
  - Click "Done" to save and exit (ignored until something is drawn)
  - Close the window to cancel (exits with code 1)
"""

import argparse
import json
import sys
import tkinter as tk

from campaigns import load_campaign
from signature_pad import SignaturePad


def capture_signature(output_path: str, campaign, width: int = 500, height: int = 200,
                      crop: bool = False) -> bool:
    """Open a signature capture window. Returns True if signature was saved."""
    result = {"saved": False}

    buffer_w, buffer_h = campaign.signature_canvas
    pad = SignaturePad(buffer_w, buffer_h, ink=campaign.ink_color,
                       stroke_width=campaign.stroke_width)

    root = tk.Tk()
    root.title("Sign here")

    # White canvas for visual feedback; the pad holds the transparent export
    canvas = tk.Canvas(root, width=width, height=height, bg="white",
                       cursor="pencil", highlightthickness=1, highlightbackground="#999")
    canvas.pack(padx=10, pady=(10, 5), fill=tk.BOTH, expand=True)
    pad.mount(width, height)

    last_point = [None]
    line_width = max(1, round(campaign.stroke_width * width / buffer_w))

    def on_configure(event):
        pad.resize(event.width, event.height)

    def on_press(event):
        last_point[0] = (event.x, event.y)
        pad.begin_stroke((event.x, event.y))

    def on_drag(event):
        if last_point[0] is not None:
            x0, y0 = last_point[0]
            canvas.create_line(x0, y0, event.x, event.y, fill=campaign.ink_color,
                               width=line_width, smooth=True,
                               capstyle=tk.ROUND, joinstyle=tk.ROUND)
        last_point[0] = (event.x, event.y)
        pad.extend_stroke((event.x, event.y))

    def on_release(event):
        last_point[0] = None
        pad.end_stroke()

    def clear():
        canvas.delete("all")
        pad.clear()

    def done():
        signature = pad.snapshot(crop=crop)
        if signature is None:
            return
        signature.save(output_path, "PNG")
        result["saved"] = True
        pad.unmount()
        root.destroy()

    def cancel():
        pad.unmount()
        root.destroy()

    canvas.bind("<Configure>", on_configure)
    canvas.bind("<ButtonPress-1>", on_press)
    canvas.bind("<B1-Motion>", on_drag)
    canvas.bind("<ButtonRelease-1>", on_release)

    # Buttons
    btn_frame = tk.Frame(root)
    btn_frame.pack(pady=(5, 10))

    tk.Button(btn_frame, text="Clear", command=clear, width=10).pack(side=tk.LEFT, padx=5)
    tk.Button(btn_frame, text="Done", command=done, width=10).pack(side=tk.LEFT, padx=5)
    tk.Button(btn_frame, text="Cancel", command=cancel, width=10).pack(side=tk.LEFT, padx=5)

    tk.Label(root, text="Draw your signature above, then click Done",
             fg="#666", font=("Helvetica", 11)).pack(pady=(0, 8))

    root.protocol("WM_DELETE_WINDOW", cancel)
    root.mainloop()

    return result["saved"]


def main():
    parser = argparse.ArgumentParser(description="Capture a handwritten signature")
    parser.add_argument("output", help="Output PNG path")
    parser.add_argument("--campaign", default="arthritis",
                        help="Campaign name or JSON file (sets ink colour and resolution)")
    parser.add_argument("--width", type=int, default=500, help="Canvas width on screen (default: 500)")
    parser.add_argument("--height", type=int, default=200, help="Canvas height on screen (default: 200)")
    parser.add_argument("--crop", action="store_true", help="Trim the PNG to the drawn strokes")
    args = parser.parse_args()

    try:
        campaign = load_campaign(args.campaign)
    except ValueError as e:
        print(json.dumps({"error": str(e)}), file=sys.stderr)
        sys.exit(1)

    saved = capture_signature(args.output, campaign, args.width, args.height, args.crop)
    if saved:
        print(json.dumps({"status": "saved", "path": args.output}))
    else:
        print(json.dumps({"status": "cancelled"}))
        sys.exit(1)


if __name__ == "__main__":
    main()
