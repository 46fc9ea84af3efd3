import base64
from io import BytesIO

import qrcode
from qrcode.constants import ERROR_CORRECT_M


class QRCodeError(Exception):
    pass


def make_qr_data_uri(data: str) -> str:
    """Encode ``data`` as a PNG QR code and return it as a data URI."""
    try:
        qr = qrcode.QRCode(
            version=None,
            error_correction=ERROR_CORRECT_M,
            box_size=10,
            border=4,
        )
        qr.add_data(data)
        qr.make(fit=True)

        img = qr.make_image(fill_color="black", back_color="white")
        buffered = BytesIO()
        img.save(buffered, format="PNG")
    except Exception as e:
        raise QRCodeError(f"QR encoding failed: {e}") from e

    img_str = base64.b64encode(buffered.getvalue()).decode()
    return f"data:image/png;base64,{img_str}"
