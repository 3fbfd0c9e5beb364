import re
import secrets
import time
from typing import Optional

REQUEST_PREFIX = "PR"
PO_PREFIX = "PO"

_BASE36 = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"


def sanitize_org_id(org_id: Optional[object]) -> str:
    """
    Upper-case the org id, strip anything that is not A-Z/0-9 and keep the last 6 chars.
    Falls back to "ORG" when nothing survives.
    """
    cleaned = re.sub(r"[^A-Z0-9]", "", str(org_id if org_id is not None else "").upper())
    return cleaned[-6:] or "ORG"


def _to_base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, rem = divmod(number, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def timestamp_segment() -> str:
    return _to_base36(int(time.time() * 1000))


def random_segment(length: int = 4) -> str:
    return secrets.token_hex((length + 1) // 2).upper()[:length]


def generate_identifier(prefix: str, org_id: object) -> str:
    """
    Build a human-readable identifier: PREFIX-ORG-TIMESTAMP36-RAND.
    Not a cryptographic guarantee of uniqueness; the unique column constraint is the backstop.
    """
    return f"{prefix}-{sanitize_org_id(org_id)}-{timestamp_segment()}-{random_segment(4)}"


def generate_request_number(org_id: object) -> str:
    return generate_identifier(REQUEST_PREFIX, org_id)


def generate_po_number(org_id: object) -> str:
    return generate_identifier(PO_PREFIX, org_id)
