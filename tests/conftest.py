import pytest
from PIL import Image

from offline_khqr.controller import FormController
from offline_khqr.khqr import KHQRResponse
from offline_khqr.storage import MemoryStore


class StubBuilder:
    def __init__(self, response):
        self.response = response
        self.calls = []

    def generate_individual(self, info):
        self.calls.append(info)
        return self.response


class StubRenderer:
    def __init__(self):
        self.rendered = []

    def render(self, text):
        self.rendered.append(text)
        if not text:
            return None
        return Image.new("1", (10, 10), 1)


@pytest.fixture
def store():
    """Return an empty in-memory settings store."""
    return MemoryStore()


@pytest.fixture
def renderer():
    return StubRenderer()


@pytest.fixture
def ok_builder():
    """Builder stub that always succeeds with payload "X"."""
    return StubBuilder(KHQRResponse(0, None, "X"))


@pytest.fixture
def make_controller(renderer, store):
    def _make(builder, amount_text="12.50"):
        controller = FormController(builder=builder, renderer=renderer, store=store)
        controller.amount_text = amount_text
        return controller
    return _make


@pytest.fixture
def stub_builder():
    return StubBuilder
