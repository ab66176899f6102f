# QR image rendering on top of qrcode + Pillow

import logging

import qrcode
from qrcode.exceptions import DataOverflowError
from PIL import Image

log = logging.getLogger(__name__)


class QRRenderer:
    def render(self, text):
        raise NotImplementedError


class QRCodeRenderer(QRRenderer):
    """Draws each QR module as a `scale` x `scale` block of pixels.

    Blocks are painted directly rather than resampled, so module edges stay
    sharp at any scale. Rendering is deterministic for a given text.
    """

    def __init__(self, scale=10, border=4):
        self.scale = scale
        self.border = border

    def render(self, text):
        if not text:
            return None

        qr = qrcode.QRCode(
            error_correction=qrcode.constants.ERROR_CORRECT_M,
            box_size=self.scale,
            border=self.border,
        )
        try:
            qr.add_data(text.encode("utf-8"))
            qr.make(fit=True)
        except (DataOverflowError, ValueError) as e:
            log.warning("QR encoding failed: %s", e)
            return None

        return qr.make_image(fill_color="black", back_color="white").get_image()


def preview_image(image, size=250):
    return image.resize((size, size), Image.Resampling.NEAREST)
