"""QR code encoding."""

import io

import qrcode
from qrcode.exceptions import DataOverflowError

from .errors import EncodingFailure

ERROR_CORRECTION_LEVELS = {
    "L": qrcode.constants.ERROR_CORRECT_L,
    "M": qrcode.constants.ERROR_CORRECT_M,
    "Q": qrcode.constants.ERROR_CORRECT_Q,
    "H": qrcode.constants.ERROR_CORRECT_H,
}

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


class QrEncoder:
    """Renders a URL as a PNG QR code.

    Encoding is deterministic: the same URL and settings give the same bytes.
    """

    def __init__(self, box_size: int = 10, border: int = 4, error_correction: str = "M"):
        level = error_correction.upper()
        if level not in ERROR_CORRECTION_LEVELS:
            raise ValueError(f"Unknown error correction level: {error_correction}")
        self.box_size = box_size
        self.border = border
        self.error_correction = level

    def encode(self, url: str) -> bytes:
        """Encode a URL into PNG bytes.

        Raises:
            EncodingFailure: If the URL is empty or does not fit in a QR code
        """
        if not url:
            raise EncodingFailure(url, "empty payload")

        qr = qrcode.QRCode(
            version=None,
            error_correction=ERROR_CORRECTION_LEVELS[self.error_correction],
            box_size=self.box_size,
            border=self.border,
        )
        qr.add_data(url)
        try:
            qr.make(fit=True)
        except (DataOverflowError, ValueError) as e:
            raise EncodingFailure(url, str(e)) from e

        img = qr.make_image(fill_color="black", back_color="white")
        buf = io.BytesIO()
        img.save(buf, format="PNG")
        return buf.getvalue()

    def __call__(self, url: str) -> bytes:
        return self.encode(url)
