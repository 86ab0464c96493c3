"""Random short ids for boxes and QR stickers.

Box ids are 10 mixed-case alphanumerics; QR ids are ``QR-`` plus six
upper-case alphanumerics so they stay readable when printed.
"""

import re
import secrets
import string
from collections.abc import Awaitable, Callable

BOX_ALPHABET = string.ascii_letters + string.digits
BOX_SHORT_ID_LENGTH = 10
QR_ALPHABET = string.ascii_uppercase + string.digits
QR_SHORT_ID_LENGTH = 6
QR_SHORT_ID_PATTERN = re.compile(r"^QR-[A-Z0-9]{6}$")
MAX_ATTEMPTS = 100


def box_short_id() -> str:
    return "".join(secrets.choice(BOX_ALPHABET) for _ in range(BOX_SHORT_ID_LENGTH))


def qr_short_id() -> str:
    return "QR-" + "".join(secrets.choice(QR_ALPHABET) for _ in range(QR_SHORT_ID_LENGTH))


def is_qr_short_id(value: str) -> bool:
    return QR_SHORT_ID_PATTERN.fullmatch(value) is not None


async def unique_short_id(generate: Callable[[], str],
                          is_taken: Callable[[str], Awaitable[bool]],
                          reserved: set[str] | None = None) -> str | None:
    """Draw ids until one is free; None after MAX_ATTEMPTS collisions.

    ``reserved`` holds ids already handed out but not yet flushed.
    """
    reserved = reserved or set()
    for _ in range(MAX_ATTEMPTS):
        candidate = generate()
        if candidate in reserved or await is_taken(candidate):
            continue
        return candidate
    return None
