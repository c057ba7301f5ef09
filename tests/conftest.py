import io
import sys
from pathlib import Path

import numpy as np
import pytest
from PIL import Image

# Add repository root to path for module imports
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from guess_the_child.core.pipeline import CaptionPipeline
from guess_the_child.core.roster import RosterEditor


def make_image_bytes(fmt: str = "PNG", size=(64, 48), mode: str = "RGB") -> bytes:
    channels = 4 if mode == "RGBA" else 3
    pixels = np.random.randint(0, 255, (size[1], size[0], channels), dtype=np.uint8)
    buffer = io.BytesIO()
    Image.fromarray(pixels).save(buffer, format=fmt)
    return buffer.getvalue()


class FakeCaptioner:
    """Captioning service stand-in that records every request."""

    def __init__(self, fail_on_call=None):
        self.requests = []
        self.fail_on_call = fail_on_call

    def generate(self, request):
        self.requests.append(request)
        call = len(self.requests)
        if self.fail_on_call is not None and call == self.fail_on_call:
            raise RuntimeError("service unavailable")
        return f"caption {call}"


@pytest.fixture
def png_bytes():
    return make_image_bytes("PNG")


@pytest.fixture
def jpeg_bytes():
    return make_image_bytes("JPEG")


@pytest.fixture
def image_file(tmp_path):
    path = tmp_path / "kid.png"
    path.write_bytes(make_image_bytes("PNG"))
    return path


@pytest.fixture
def captioner():
    return FakeCaptioner()


@pytest.fixture
def pipeline(captioner):
    return CaptionPipeline(captioner)


@pytest.fixture
def make_roster():
    def _make(count: int) -> RosterEditor:
        roster = RosterEditor()
        for _ in range(count):
            roster.select_image(make_image_bytes("PNG"), "childhood")
            roster.select_image(make_image_bytes("JPEG"), "current")
            roster.commit_entry()
        return roster
    return _make
