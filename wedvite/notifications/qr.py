"""QR code images for invitation links."""
import base64
import io

import qrcode
from qrcode.constants import ERROR_CORRECT_M


def generate_qr_png(data: str) -> bytes:
    """Encode ``data`` as a PNG QR code."""
    qr = qrcode.QRCode(
        version=None,
        error_correction=ERROR_CORRECT_M,
        box_size=8,
        border=1,
    )
    qr.add_data(data)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")
    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()


def generate_qr_data_url(data: str) -> str:
    """Encode ``data`` as a ``data:image/png;base64,...`` URL for embedding."""
    encoded = base64.b64encode(generate_qr_png(data)).decode("ascii")
    return f"data:image/png;base64,{encoded}"
