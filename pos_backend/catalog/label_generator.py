"""
Local product label generator.
Uses PIL/Pillow and python-barcode to draw a Code128 label in memory.
"""
import io
import base64
import logging
from typing import Optional

import barcode
from barcode.writer import ImageWriter
from PIL import Image, ImageDraw, ImageFont

logger = logging.getLogger('pos_backend.catalog')

MAX_NAME_LENGTH = 30


def _load_fonts():
    try:
        return (
            ImageFont.truetype('/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf', 14),
            ImageFont.truetype('/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf', 12),
        )
    except (OSError, IOError):
        try:
            return ImageFont.truetype('arial.ttf', 14), ImageFont.truetype('arial.ttf', 12)
        except (OSError, IOError):
            return ImageFont.load_default(), ImageFont.load_default()


def _draw_centered(draw, y, text, font, width):
    bbox = draw.textbbox((0, 0), text, font=font)
    text_width = bbox[2] - bbox[0]
    draw.text(((width - text_width) // 2, y), text, fill='black', font=font)


def generate_label_image(
    product_name: str,
    barcode_value: str,
    price: Optional[str] = None,
    width: int = 400,  # 4 inches at 100 DPI
    height: int = 200,  # 2 inches at 100 DPI
) -> str:
    """
    Draw a shelf label: product name on top, Code128 barcode in the middle,
    the encoded value and optional price below.

    Args:
        product_name: Product name (truncated if too long)
        barcode_value: Value to encode
        price: Price text printed on the last line (optional)
        width: Image width in pixels
        height: Image height in pixels

    Returns:
        Base64-encoded PNG image as data URL string
    """
    if len(product_name) > MAX_NAME_LENGTH:
        product_name = product_name[:MAX_NAME_LENGTH] + '...'

    img = Image.new('RGB', (width, height), color='white')
    draw = ImageDraw.Draw(img)
    font_medium, font_small = _load_fonts()

    margin = 10
    first_line_y = 8
    barcode_y = first_line_y + 18
    barcode_available_height = height - 12 - barcode_y - 20

    _draw_centered(draw, first_line_y, product_name, font_medium, width)

    try:
        code128 = barcode.get_barcode_class('code128')
        barcode_img = code128(barcode_value, writer=ImageWriter()).render({
            'write_text': False,
            'module_width': 0.3,
            'module_height': 20.0,
            'quiet_zone': 2.0,
            'font_size': 0,
            'text_distance': 0,
            'background': 'white',
            'foreground': 'black',
        })

        barcode_img_width, barcode_img_height = barcode_img.size
        barcode_width = width - (2 * margin)
        scale_factor = barcode_width / barcode_img_width
        scaled_height = int(barcode_img_height * scale_factor)
        if scaled_height > barcode_available_height:
            scale_factor = barcode_available_height / barcode_img_height
            scaled_height = barcode_available_height
            barcode_width = int(barcode_img_width * scale_factor)

        # Barcodes don't need LANCZOS quality
        barcode_img = barcode_img.resize((barcode_width, scaled_height), Image.Resampling.BILINEAR)
        img.paste(barcode_img, ((width - barcode_width) // 2, barcode_y))

        text_y = barcode_y + scaled_height + 5
        _draw_centered(draw, text_y, barcode_value, font_small, width)
        if price:
            _draw_centered(draw, text_y + 16, price, font_medium, width)
    except Exception as e:
        # Unencodable values still get a readable label
        logger.error(f"Barcode generation failed for '{barcode_value}': {str(e)}", exc_info=True)
        _draw_centered(draw, barcode_y, f'BARCODE: {barcode_value}', font_small, width)
        if price:
            _draw_centered(draw, barcode_y + 20, price, font_medium, width)

    buffer = io.BytesIO()
    img.save(buffer, format='PNG', optimize=False, compress_level=1)
    image_base64 = base64.b64encode(buffer.getvalue()).decode('utf-8')
    buffer.close()
    img.close()

    return f'data:image/png;base64,{image_base64}'
