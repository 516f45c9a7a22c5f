"""Pytest configuration and shared fixtures for pledge certificate tests."""

import json
import subprocess
import sys
import threading
from pathlib import Path

import pytest
from PIL import Image, ImageDraw

# Add scripts to path
ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(ROOT / "scripts"))

SCRIPTS = ROOT / "scripts"

TEMPLATE_SIZE = (1200, 900)
TEMPLATE_COLOR = (245, 240, 230)
PHOTO_COLOR = (220, 30, 30)
INK = (30, 58, 138, 255)


# --- Image builders ---

def make_template(path, size=TEMPLATE_SIZE, color=TEMPLATE_COLOR):
    image = Image.new("RGB", size, color)
    image.save(path, "PNG")
    return path


def make_photo(size=(640, 480), color=PHOTO_COLOR):
    return Image.new("RGB", size, color)


def make_signature(size=(1000, 400)):
    """A transparent image with a few thick ink strokes."""
    image = Image.new("RGBA", size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(image)
    w, h = size
    draw.line([(w * 0.1, h * 0.7), (w * 0.3, h * 0.2), (w * 0.5, h * 0.8),
               (w * 0.7, h * 0.3), (w * 0.9, h * 0.6)], fill=INK, width=14)
    return image


@pytest.fixture
def tmp_output(tmp_path):
    return tmp_path


@pytest.fixture
def template_path(tmp_path):
    return make_template(tmp_path / "template.png")


@pytest.fixture
def photo_path(tmp_path):
    path = tmp_path / "photo.jpg"
    make_photo().save(path, "JPEG", quality=95)
    return path


@pytest.fixture
def signature_path(tmp_path):
    path = tmp_path / "signature.png"
    make_signature().save(path, "PNG")
    return path


# --- Fake camera ---

class FakeStream:
    def __init__(self, owner, facing, size, ready):
        self.owner = owner
        self.facing = facing
        self.size = size
        self.ready = ready
        self.active = True
        self.stop_calls = 0

    @property
    def dimensions(self):
        return self.size if self.ready and self.active else (0, 0)

    def read_frame(self):
        if not self.active or not self.ready:
            return None
        color = (10, 200, 10) if self.facing == "user" else (10, 10, 200)
        return Image.new("RGB", self.size, color)

    def stop(self):
        self.stop_calls += 1
        if self.active:
            self.active = False
            self.owner.live.remove(self)


class FakeCamera:
    """Stream opener that records every stream it hands out.

    ``fail`` is raised on each call whose 1-based number is in ``fail_on``
    (or on every call when ``fail_on`` is None). ``gate`` makes the opener wait
    until released, to simulate a slow device.
    """

    def __init__(self, size=(640, 480), ready=True, fail=None, fail_on=None, gate=None):
        self.size = size
        self.ready = ready
        self.fail = fail
        self.fail_on = fail_on
        self.gate = gate
        self.started = threading.Event()
        self.live = []
        self.opened = []
        self.requests = []
        self.max_live = 0

    def __call__(self, facing, width, height):
        self.requests.append((facing, width, height))
        self.max_live = max(self.max_live, len(self.live) + 1)
        self.started.set()
        if self.gate is not None:
            self.gate.wait(timeout=5)
        if self.fail is not None and (self.fail_on is None or len(self.requests) in self.fail_on):
            raise self.fail
        stream = FakeStream(self, facing, self.size, self.ready)
        self.live.append(stream)
        self.opened.append(stream)
        return stream


# --- Helpers used across test files ---

def run_compose(template, output, name, photo=None, signature=None, extra_args=None):
    """Run compose.py and return (parsed JSON output or None, CompletedProcess)."""
    cmd = [sys.executable, str(SCRIPTS / "compose.py"), str(template), str(output),
           "--name", name]
    if photo:
        cmd += ["--photo", str(photo)]
    if signature:
        cmd += ["--signature", str(signature)]
    if extra_args:
        cmd.extend(extra_args)
    result = subprocess.run(cmd, capture_output=True, text=True, timeout=60)
    data = json.loads(result.stdout) if result.returncode == 0 else None
    return data, result


def run_verify(certificate, template, extra_args=None):
    """Run verify.py and return (report, exitcode)."""
    cmd = [sys.executable, str(SCRIPTS / "verify.py"), str(certificate), str(template), "--pretty"]
    if extra_args:
        cmd.extend(extra_args)
    result = subprocess.run(cmd, capture_output=True, text=True, timeout=60)
    return json.loads(result.stdout), result.returncode


def write_campaign(tmp_path, data, filename="campaign.json"):
    """Write a campaign JSON file and return its path."""
    path = tmp_path / filename
    path.write_text(json.dumps(data))
    return path
