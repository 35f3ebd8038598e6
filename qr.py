"""
QR code values and images

Images are rendered as SVG so no imaging library is needed; they are
returned as data URLs ready for an <img> tag.
"""
import base64
import io
import secrets
import string
import time

import qrcode
import qrcode.image.svg

CUSTOM_CODES = ("D", "N", "T")
CODE_PREFIX = "ViDa"

_BASE36 = string.digits + string.ascii_uppercase


def to_base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, rem = divmod(number, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def normalize_custom_code(custom_code: str) -> str:
    code = (custom_code or "").strip().upper()
    if code not in CUSTOM_CODES:
        raise ValueError("Invalid custom code. Must be D, N, or T")
    return code


def new_qr_value(custom_code: str) -> str:
    """ViDa-<code>-<base36 epoch ms><5 random base36 chars>"""
    code = normalize_custom_code(custom_code)
    stamp = to_base36(int(time.time() * 1000))
    suffix = "".join(secrets.choice(_BASE36) for _ in range(5))
    return f"{CODE_PREFIX}-{code}-{stamp}{suffix}"


def qr_data_url(value: str, box_size: int = 10, border: int = 2) -> str:
    qr = qrcode.QRCode(box_size=box_size, border=border)
    qr.add_data(value)
    qr.make(fit=True)
    img = qr.make_image(image_factory=qrcode.image.svg.SvgPathImage)
    buf = io.BytesIO()
    img.save(buf)
    return "data:image/svg+xml;base64," + base64.b64encode(buf.getvalue()).decode("ascii")
