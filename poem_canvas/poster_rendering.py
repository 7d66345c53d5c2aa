import io
import logging
from typing import List, Tuple

from PIL import Image, ImageDraw, ImageFilter, ImageFont, ImageOps

from poem_canvas.schema_models import GenerationResult, TextPlacement, TextStyle

logger = logging.getLogger(__name__)

POSTER_SIZE = (900, 1600)  # 9:16
PADDING = 64
PANEL_PADDING = 36
TITLE_FONT_SIZE = 60
AUTHOR_FONT_SIZE = 34

TITLE_FONTS = ["DejaVuSerif-Bold.ttf", "LiberationSerif-Bold.ttf", "Georgia Bold.ttf"]
AUTHOR_FONTS = ["DejaVuSerif-Italic.ttf", "LiberationSerif-Italic.ttf", "Georgia Italic.ttf"]
BODY_FONTS = ["DejaVuSerif.ttf", "LiberationSerif-Regular.ttf", "Georgia.ttf"]


def body_font_size(body: str) -> int:
    """Longer poems get smaller type."""
    length = len(body)
    if length > 500:
        return 26
    if length > 300:
        return 30
    if length > 150:
        return 34
    return 40


def load_font(candidates: List[str], size: int) -> ImageFont.FreeTypeFont:
    for name in candidates:
        try:
            return ImageFont.truetype(name, size)
        except OSError:
            continue
    logger.debug(f"No serif font found, using Pillow's default at {size}px")
    return ImageFont.load_default(size=size)


def split_placement(placement: TextPlacement) -> Tuple[str, str]:
    """(vertical, horizontal) anchors, e.g. top-left -> ('top', 'left')."""
    if placement == TextPlacement.CENTER:
        return "center", "center"
    vertical, horizontal = placement.value.split("-")
    return vertical, horizontal


def wrap_line(draw: ImageDraw.ImageDraw, text: str, font, max_width: int) -> List[str]:
    words = text.split()
    if not words:
        return [""]
    lines = [words[0]]
    for word in words[1:]:
        candidate = f"{lines[-1]} {word}"
        if draw.textlength(candidate, font=font) <= max_width:
            lines[-1] = candidate
        else:
            lines.append(word)
    return lines


def layout_text(draw, result: GenerationResult, max_width: int):
    """
    Returns the lines of the text block as (text, font, height) tuples,
    plus the block's width and height.
    """
    title_font = load_font(TITLE_FONTS, TITLE_FONT_SIZE)
    author_font = load_font(AUTHOR_FONTS, AUTHOR_FONT_SIZE)
    body_font = load_font(BODY_FONTS, body_font_size(result.body))

    def line_height(font, factor):
        top, bottom = draw.textbbox((0, 0), "Ay", font=font)[1::2]
        return int((bottom - top) * factor)

    lines = []
    for text in wrap_line(draw, result.title, title_font, max_width):
        lines.append((text, title_font, line_height(title_font, 1.25)))
    lines.append((f"by {result.author}", author_font, line_height(author_font, 1.25) + 36))
    for raw_line in result.body.split("\n"):
        for text in wrap_line(draw, raw_line, body_font, max_width):
            lines.append((text, body_font, line_height(body_font, 1.6)))

    width = max(int(draw.textlength(text, font=font)) for text, font, _ in lines)
    height = sum(h for _, _, h in lines)
    return lines, width, height


def _draw_lines(draw, lines, origin, block_width, horizontal, fill):
    x0, y = origin
    for text, font, height in lines:
        text_width = draw.textlength(text, font=font)
        if horizontal == "left":
            x = x0
        elif horizontal == "right":
            x = x0 + block_width - text_width
        else:
            x = x0 + (block_width - text_width) / 2
        draw.text((x, y), text, font=font, fill=fill)
        y += height


def render_poster(result: GenerationResult, size: Tuple[int, int] = POSTER_SIZE) -> Image.Image:
    """
    Draws the poem onto its background: the text block is anchored at the
    result's placement and treated with its style (shadow, glow or overlay).
    """
    width, height = size
    with Image.open(io.BytesIO(result.image_bytes)) as background:
        poster = ImageOps.fit(background.convert("RGB"), size).convert("RGBA")

    inset = PADDING + (PANEL_PADDING if result.text_style == TextStyle.OVERLAY else 0)
    measure = ImageDraw.Draw(poster)
    lines, block_width, block_height = layout_text(measure, result, width - 2 * inset)

    vertical, horizontal = split_placement(result.text_placement)
    if horizontal == "left":
        x = inset
    elif horizontal == "right":
        x = width - inset - block_width
    else:
        x = (width - block_width) // 2
    if vertical == "top":
        y = inset
    elif vertical == "bottom":
        y = height - inset - block_height
    else:
        y = (height - block_height) // 2

    if result.text_style == TextStyle.OVERLAY:
        box = (
            max(x - PANEL_PADDING, 0),
            max(y - PANEL_PADDING, 0),
            min(x + block_width + PANEL_PADDING, width),
            min(y + block_height + PANEL_PADDING, height),
        )
        frosted = poster.crop(box).filter(ImageFilter.GaussianBlur(6))
        poster.paste(frosted, box[:2])
        panel = Image.new("RGBA", size, (0, 0, 0, 0))
        ImageDraw.Draw(panel).rounded_rectangle(box, radius=16, fill=(255, 255, 255, 128))
        poster = Image.alpha_composite(poster, panel)
    else:
        if result.text_style == TextStyle.GLOW:
            offset, blur, fill = (0, 2), 15, (0, 0, 0, 128)
        else:
            offset, blur, fill = (0, 2), 2, (0, 0, 0, 102)
        halo = Image.new("RGBA", size, (0, 0, 0, 0))
        _draw_lines(ImageDraw.Draw(halo), lines, (x + offset[0], y + offset[1]), block_width, horizontal, fill)
        poster = Image.alpha_composite(poster, halo.filter(ImageFilter.GaussianBlur(blur)))

    _draw_lines(ImageDraw.Draw(poster), lines, (x, y), block_width, horizontal, result.font_color)
    return poster.convert("RGB")


def to_jpeg(image: Image.Image, quality: int = 92) -> bytes:
    buffer = io.BytesIO()
    image.convert("RGB").save(buffer, format="JPEG", quality=quality)
    return buffer.getvalue()
