import io
import json

import pytest
from PIL import Image
from langchain_core.tools import BaseTool
from pydantic import Field

from poem_canvas.llm_wrapper import GeminiLLM
from poem_canvas.schema_models import PoemAnalysis


ROSES_ANALYSIS = {
    "title": "Untitled",
    "author": "Anonymous",
    "body": "Roses are red\nViolets are blue",
    "emotions": ["joyful"],
    "imagery": ["roses", "violets"],
    "atmosphere": "playful",
    "artStyle": "soft pastel",
    "textPlacement": "center",
    "textStyle": "shadow",
}


class FakeGeminiLLM(GeminiLLM):
    """Stands in for Gemini: canned replies, no network, records prompts."""

    def __init__(self, reply: str = "", system_instruction: str = "test"):
        self.system_instruction = system_instruction
        self.model_name = "fake-gemini"
        self.reply = reply
        self.prompts = []
        self.images = []

    def generate_content(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self.reply

    async def agenerate_content(self, prompt: str) -> str:
        return self.generate_content(prompt)

    def read_image(self, image_base64: str, mime_type: str) -> str:
        self.images.append((image_base64, mime_type))
        return self.reply

    async def aread_image(self, image_base64: str, mime_type: str) -> str:
        return self.read_image(image_base64, mime_type)


class FakeImageTool(BaseTool):
    name: str = "FakeImageTool"
    description: str = "Returns a fixed image URL."
    prompts: list = Field(default_factory=list)

    def _run(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return "https://images.example/poster.jpg"


class FakeServices:
    """A scripted PosterServices implementation that logs every call."""

    def __init__(self, extracted="", analysis=None, image_bytes=b"X", analyze_error=None):
        self.extracted = extracted
        self.analysis = analysis or PoemAnalysis.model_validate(ROSES_ANALYSIS)
        self.image_bytes = image_bytes
        self.analyze_error = analyze_error
        self.calls = []

    async def extract(self, image):
        self.calls.append(("extract", image))
        return self.extracted

    async def analyze(self, poem_text):
        self.calls.append(("analyze", poem_text))
        if self.analyze_error is not None:
            raise self.analyze_error
        return self.analysis

    async def synthesize(self, analysis):
        self.calls.append(("synthesize", analysis))
        return self.image_bytes

    def called(self, name):
        return [args for call, args in self.calls if call == name]


def make_jpeg(size=(90, 160), color=(240, 236, 228)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format="JPEG")
    return buffer.getvalue()


@pytest.fixture
def roses_reply():
    return json.dumps(ROSES_ANALYSIS)


@pytest.fixture
def jpeg_bytes():
    return make_jpeg()
