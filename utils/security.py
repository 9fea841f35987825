from __future__ import annotations

from typing import Optional
from werkzeug.security import generate_password_hash, check_password_hash


def hash_password(plain: str, method: str = "pbkdf2:sha256", salt_length: int = 16) -> str:
    plain = (plain or "").strip()
    return generate_password_hash(plain, method=method, salt_length=salt_length)


def is_hashed(value: Optional[str]) -> bool:
    if not value:
        return False
    v = str(value)
    # Werkzeug hashes usually start with method prefix like 'pbkdf2:sha256:'
    return v.startswith("pbkdf2:") or v.startswith("scrypt:")


def ensure_hashed(value: Optional[str]) -> Optional[str]:
    """Hash a password unless it is empty or already hashed."""
    if not value or is_hashed(value):
        return value
    return hash_password(value)


def verify_password(stored_value: Optional[str], candidate: str) -> bool:
    """Verify a stored password value which may be hashed or plain text.

    Accounts created before hashing was introduced still hold plain text, so
    anything that does not look hashed is compared as a string.
    """
    if not stored_value:
        return False
    if is_hashed(stored_value):
        return check_password_hash(stored_value, candidate or "")
    return (stored_value or "").strip() == (candidate or "").strip()
