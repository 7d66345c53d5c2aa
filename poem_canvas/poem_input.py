import io
import logging
from typing import Optional

from PIL import Image

from poem_canvas.schema_models import PoemImage

logger = logging.getLogger(__name__)

TEXT_MODE = "text"
IMAGE_MODE = "image"
PREVIEW_SIZE = (480, 480)


class PoemInput:
    """
    What the user has entered so far: typed text or an uploaded image,
    never both. Holds the decoded preview of the uploaded image and closes
    it whenever it is replaced or the input is cleared.
    """

    def __init__(self, mode: str = TEXT_MODE):
        if mode not in (TEXT_MODE, IMAGE_MODE):
            raise ValueError(f"Unknown input mode: {mode}")
        self.mode = mode
        self.text = ""
        self.image: Optional[PoemImage] = None
        self.preview: Optional[Image.Image] = None

    def set_text(self, text: str) -> None:
        self.text = text or ""

    def set_image(self, image: PoemImage) -> None:
        """
        Selecting an image drops any typed text. An upload PIL cannot decode
        clears the input and re-raises, so nothing stale stays submittable.
        """
        if self.image is not None and self.image.data == image.data:
            return
        try:
            preview = make_preview(image.data)
        except OSError:
            logger.warning(f"Could not decode uploaded image {image.name or ''}".rstrip())
            self.clear()
            raise
        self._release_preview()
        self.image = image
        self.preview = preview
        self.text = ""

    def switch_mode(self, mode: str) -> None:
        if mode not in (TEXT_MODE, IMAGE_MODE):
            raise ValueError(f"Unknown input mode: {mode}")
        self.mode = mode
        self.clear()

    def clear(self) -> None:
        self.text = ""
        self.image = None
        self._release_preview()

    def can_submit(self, busy: bool = False) -> bool:
        if busy:
            return False
        if self.mode == TEXT_MODE:
            return bool(self.text.strip())
        return self.image is not None

    def submission(self):
        """(poem_text, image) for the generator, according to the active mode."""
        if self.mode == IMAGE_MODE:
            return "", self.image
        return self.text, None

    def _release_preview(self) -> None:
        if self.preview is not None:
            self.preview.close()
            self.preview = None


def make_preview(data: bytes) -> Image.Image:
    """A small RGB thumbnail of the uploaded image."""
    with Image.open(io.BytesIO(data)) as img:
        preview = img.convert("RGB")
    preview.thumbnail(PREVIEW_SIZE)
    return preview
