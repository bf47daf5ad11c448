"""
Password hashing with passlib's PBKDF2-SHA256 (salted, iterated).
"""
from passlib.hash import pbkdf2_sha256


def hash_password(password: str) -> str:
    return pbkdf2_sha256.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    """Return False for a wrong password or a malformed hash."""
    try:
        return pbkdf2_sha256.verify(password, hashed)
    except ValueError:
        return False
