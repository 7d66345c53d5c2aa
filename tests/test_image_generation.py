import pytest

import poem_canvas.image_generation as image_generation
from poem_canvas.image_generation import ReplicateImageGenerationTool, url_to_bytes


class FakeFileOutput:
    def __init__(self, url):
        self.url = url

    def __str__(self):
        return self.url


class FakeReplicateClient:
    runs = []

    def __init__(self, api_token=None):
        self.api_token = api_token

    def run(self, model, input):
        FakeReplicateClient.runs.append((model, input, self.api_token))
        return [FakeFileOutput("https://replicate.delivery/out-0.jpg")]


class FakeResponse:
    def __init__(self, status_code, content=b""):
        self.status_code = status_code
        self.content = content


@pytest.fixture(autouse=True)
def fake_replicate(monkeypatch):
    FakeReplicateClient.runs = []
    monkeypatch.setattr(image_generation.replicate, "Client", FakeReplicateClient)
    monkeypatch.setenv("REPLICATE_KEY", "r8_test")


def test_tool_requests_one_portrait_jpeg():
    url = ReplicateImageGenerationTool().run("a pale watercolor meadow")

    assert url == "https://replicate.delivery/out-0.jpg"
    model, data, token = FakeReplicateClient.runs[0]
    assert model == image_generation.REPLICATE_IMAGE_MODEL
    assert data == {
        "prompt": "a pale watercolor meadow",
        "num_outputs": 1,
        "output_format": "jpg",
        "aspect_ratio": "9:16",
    }
    assert token == "r8_test"


def test_tool_fails_on_empty_output(monkeypatch):
    monkeypatch.setattr(FakeReplicateClient, "run", lambda self, model, input: [])

    with pytest.raises(RuntimeError):
        ReplicateImageGenerationTool()._run("anything")


def test_url_to_bytes(monkeypatch):
    monkeypatch.setattr(image_generation.requests, "get", lambda url, timeout: FakeResponse(200, b"jpeg"))
    assert url_to_bytes("https://replicate.delivery/out-0.jpg") == b"jpeg"


def test_url_to_bytes_raises_on_http_error(monkeypatch):
    monkeypatch.setattr(image_generation.requests, "get", lambda url, timeout: FakeResponse(404))

    with pytest.raises(RuntimeError, match="status 404"):
        url_to_bytes("https://replicate.delivery/missing.jpg")
