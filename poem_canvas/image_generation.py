import os
import logging

import replicate
import requests
from langchain_core.tools import BaseTool

logger = logging.getLogger(__name__)

REPLICATE_IMAGE_MODEL = os.getenv("REPLICATE_IMAGE_MODEL", "black-forest-labs/flux-schnell")
# Tall enough for a poster or a phone background.
POSTER_ASPECT_RATIO = "9:16"


class ReplicateImageGenerationTool(BaseTool):
    name: str = "ReplicateImageGenerationTool"
    description: str = (
        "Generates a single portrait poster background using Replicate's 'flux-schnell' model. "
        "Accepts a prompt and returns the image URL."
    )
    model: str = REPLICATE_IMAGE_MODEL
    aspect_ratio: str = POSTER_ASPECT_RATIO

    def _run(self, prompt: str) -> str:
        data = {
            "prompt": prompt,
            "num_outputs": 1,
            "output_format": "jpg",
            "aspect_ratio": self.aspect_ratio
        }
        # Instantiate the replicate client (uses the REPLICATE_KEY env var)
        client = replicate.Client(api_token=os.getenv("REPLICATE_KEY"))
        logger.info(f"Requesting {self.aspect_ratio} image from {self.model}")
        output = client.run(self.model, input=data)
        if isinstance(output, list):
            if not output:
                raise RuntimeError(f"{self.model} returned no images")
            output = output[0]
        # Newer clients hand back FileOutput objects whose str() is the URL.
        return str(output)

    async def _arun(self, prompt: str) -> str:
        raise NotImplementedError("Asynchronous run is not supported.")


def url_to_bytes(url: str) -> bytes:
    """Download a generated image."""
    response = requests.get(url, timeout=60)
    if response.status_code == 200:
        return response.content
    raise RuntimeError(f"Failed to fetch image from URL: {url} with status {response.status_code}")
