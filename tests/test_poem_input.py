import pytest
from PIL import UnidentifiedImageError

from conftest import make_jpeg
from poem_canvas.poem_input import IMAGE_MODE, TEXT_MODE, PoemInput, PREVIEW_SIZE
from poem_canvas.schema_models import PoemImage


def upload(color=(200, 10, 10)):
    return PoemImage(data=make_jpeg(size=(1200, 900), color=color), mime_type="image/jpeg", name="poem.jpg")


def test_text_mode_gating():
    poem_input = PoemInput()
    assert not poem_input.can_submit()

    poem_input.set_text("   ")
    assert not poem_input.can_submit()

    poem_input.set_text("Roses are red")
    assert poem_input.can_submit()
    assert not poem_input.can_submit(busy=True)
    assert poem_input.submission() == ("Roses are red", None)


def test_selecting_image_clears_text_and_builds_preview():
    poem_input = PoemInput(IMAGE_MODE)
    poem_input.set_text("typed before")
    image = upload()

    poem_input.set_image(image)

    assert poem_input.text == ""
    assert poem_input.can_submit()
    assert poem_input.submission() == ("", image)
    assert poem_input.preview.size[0] <= PREVIEW_SIZE[0]
    assert poem_input.preview.size[1] <= PREVIEW_SIZE[1]


def test_new_image_releases_old_preview(monkeypatch):
    poem_input = PoemInput(IMAGE_MODE)
    poem_input.set_image(upload())
    old_preview = poem_input.preview
    closed = []
    monkeypatch.setattr(old_preview, "close", lambda: closed.append(True))

    poem_input.set_image(upload(color=(10, 200, 10)))

    assert closed == [True]
    assert poem_input.preview is not old_preview


def test_same_upload_keeps_preview():
    poem_input = PoemInput(IMAGE_MODE)
    image = upload()
    poem_input.set_image(image)
    preview = poem_input.preview

    poem_input.set_image(PoemImage(data=image.data, mime_type="image/jpeg"))

    assert poem_input.preview is preview


def test_switching_mode_clears_everything(monkeypatch):
    poem_input = PoemInput(IMAGE_MODE)
    poem_input.set_image(upload())
    closed = []
    monkeypatch.setattr(poem_input.preview, "close", lambda: closed.append(True))

    poem_input.switch_mode(TEXT_MODE)

    assert closed == [True]
    assert poem_input.mode == TEXT_MODE
    assert poem_input.image is None
    assert poem_input.preview is None
    assert poem_input.text == ""
    assert not poem_input.can_submit()


def test_image_mode_ignores_typed_text():
    poem_input = PoemInput(IMAGE_MODE)
    poem_input.set_text("Roses are red")

    assert not poem_input.can_submit()
    assert poem_input.submission() == ("", None)


def test_unknown_mode_is_rejected():
    with pytest.raises(ValueError):
        PoemInput("audio")
    with pytest.raises(ValueError):
        PoemInput().switch_mode("audio")


def test_undecodable_upload_clears_input(monkeypatch):
    poem_input = PoemInput(IMAGE_MODE)
    poem_input.set_image(upload())
    closed = []
    monkeypatch.setattr(poem_input.preview, "close", lambda: closed.append(True))

    with pytest.raises(UnidentifiedImageError):
        poem_input.set_image(PoemImage(data=b"not an image", name="poem.jpg"))

    assert closed == [True]
    assert poem_input.image is None
    assert poem_input.preview is None
    assert not poem_input.can_submit()


def test_undecodable_upload_drops_typed_text():
    poem_input = PoemInput(IMAGE_MODE)
    poem_input.set_text("typed before")

    with pytest.raises(UnidentifiedImageError):
        poem_input.set_image(PoemImage(data=b"not an image"))

    assert poem_input.text == ""
    assert poem_input.image is None
    assert poem_input.submission() == ("", None)
