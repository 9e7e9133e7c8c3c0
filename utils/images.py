import base64
import binascii
import io
import logging
import re

from PIL import Image

logger = logging.getLogger(__name__)

DATA_URL = re.compile(r'^data:(?P<mime>[\w/+.-]+);base64,(?P<data>.+)$', re.DOTALL)


def split_data_url(data_url):
    """Return ``(mime_type, bytes)`` for a base64 ``data:`` URL."""
    match = DATA_URL.match(data_url or '')
    if not match:
        raise ValueError("Not a base64 data URL")
    try:
        return match.group('mime'), base64.b64decode(match.group('data'), validate=True)
    except binascii.Error as e:
        raise ValueError(f"Invalid base64 payload: {e}") from e


def to_data_url(mime_type, payload):
    return f"data:{mime_type};base64,{base64.b64encode(payload).decode('ascii')}"


def normalize_image(data_url, max_size=1024, quality=80):
    """
    Downscale an image to fit ``max_size`` and recompress it as JPEG.

    Any failure returns the original data URL unchanged.
    """
    try:
        _, payload = split_data_url(data_url)
        with Image.open(io.BytesIO(payload)) as img:
            img.thumbnail((max_size, max_size))
            out = io.BytesIO()
            img.convert('RGB').save(out, 'JPEG', quality=quality, optimize=True)
    except Exception as e:
        logger.warning(f"Failed to normalize image: {e}")
        return data_url

    return to_data_url('image/jpeg', out.getvalue())
