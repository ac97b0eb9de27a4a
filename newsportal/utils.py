import base64

import pydenticon

IDENTICON_FOREGROUND = [
    "rgb(45,79,255)",
    "rgb(254,180,44)",
    "rgb(226,121,234)",
    "rgb(30,179,253)",
    "rgb(232,77,65)",
    "rgb(49,203,115)",
    "rgb(141,69,170)",
    "rgb(255,92,51)",
    "rgb(0,180,140)",
    "rgb(246,82,166)",
]


def generate_identicon(data: str, size: int = 120) -> str:
    """Base64 encoded PNG identicon derived from ``data`` (usually a username)."""
    generator = pydenticon.Generator(
        5, 5, foreground=IDENTICON_FOREGROUND, background="rgb(255,255,255)"
    )
    padding = (12, 12, 12, 12)
    identicon_png = generator.generate(
        data, size, size, padding=padding, output_format="png"
    )
    return base64.b64encode(identicon_png).decode("utf-8")
