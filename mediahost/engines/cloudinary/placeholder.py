import io
import re
from typing import Tuple

from PIL import Image, ImageDraw, ImageFont

PUBLIC_ID_PREFIX = "default-ad-"

# Tried in order; Pillow's bundled font is the fallback
FONT_PATHS = [
    "DejaVuSans-Bold.ttf",
    "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
    "/System/Library/Fonts/Helvetica.ttc",
    "Arial Bold.ttf",
]


def placeholder_public_id(title: str) -> str:
    """Derive the placeholder public id: every non-alphanumeric char becomes '-'."""
    return PUBLIC_ID_PREFIX + re.sub(r"[^a-zA-Z0-9]", "-", title).lower()


def _get_font(font_size: int):
    for font_path in FONT_PATHS:
        try:
            return ImageFont.truetype(font_path, font_size)
        except (OSError, IOError):
            continue
    return ImageFont.load_default(size=font_size)


def render_placeholder(
    title: str,
    size: Tuple[int, int] = (400, 200),
    background: str = "#4F46E5",
    text_color: str = "#FFFFFF",
    font_size: int = 20
) -> bytes:
    """Render a solid-fill PNG with 'Default Ad' and the title centred on it."""
    image = Image.new("RGB", size, background)
    draw = ImageDraw.Draw(image)
    font = _get_font(font_size)

    text = f"Default Ad\n{title}"
    left, top, right, bottom = draw.multiline_textbbox((0, 0), text, font=font, align="center")
    x = (size[0] - (right - left)) / 2 - left
    y = (size[1] - (bottom - top)) / 2 - top
    draw.multiline_text((x, y), text, font=font, fill=text_color, align="center")

    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()
