"""Content-derived identifiers.

Identifiers are the hex SHA-256 digest of one designated field, so equal
content always maps to the same key and the later write wins.
"""

import hashlib


def generate_id(content: str | bytes) -> str:
    """Return the lowercase hex SHA-256 digest of ``content``."""
    if isinstance(content, str):
        content = content.encode("utf-8")
    if not content:
        raise ValueError("Cannot derive an id from empty content")
    return hashlib.sha256(content).hexdigest()


def purchase_key(date: str, product: str, quantity: int, price: int) -> str:
    """Canonical hashed content for a purchase."""
    return f"{date}|{product}|{quantity}|{price}"
