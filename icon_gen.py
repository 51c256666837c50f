"""Generate the window icon (64×64 PIL Image, in-memory)."""

from __future__ import annotations

from datetime import date

from PIL import Image, ImageDraw, ImageFont

from day_style import ACCENT

_HEADER_H = 16


def _fit_font(draw: ImageDraw.ImageDraw, text: str, max_w: int, max_h: int):
    """Return the largest TrueType font that fits, or Pillow's default font."""
    font_size = 120
    while font_size > 10:
        try:
            font = ImageFont.truetype("segoeuib.ttf", font_size)
        except OSError:
            try:
                font = ImageFont.truetype("DejaVuSans-Bold.ttf", font_size)
            except OSError:
                return ImageFont.load_default()
        bbox = draw.textbbox((0, 0), text, font=font)
        if bbox[2] - bbox[0] <= max_w and bbox[3] - bbox[1] <= max_h:
            return font
        font_size -= 1
    return font


def create_icon_image(today: date | None = None, size: int = 64) -> Image.Image:
    """Return a calendar-page icon: accent header band over the day of month."""
    today = today or date.today()
    img = Image.new("RGBA", (size, size), "white")
    draw = ImageDraw.Draw(img)
    draw.rectangle((0, 0, size - 1, _HEADER_H - 1), fill=ACCENT)

    text = str(today.day)
    body_h = size - _HEADER_H
    font = _fit_font(draw, text, size - 8, body_h - 6)

    # Centre the actual visible pixels (compensate for font metric offsets)
    bbox = draw.textbbox((0, 0), text, font=font)
    x = (size - (bbox[2] - bbox[0])) / 2 - bbox[0]
    y = _HEADER_H + (body_h - (bbox[3] - bbox[1])) / 2 - bbox[1]
    draw.text((x, y), text, fill="black", font=font)

    return img
