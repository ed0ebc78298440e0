"""Password hashing with passlib's pbkdf2_sha256."""

from passlib.hash import pbkdf2_sha256


def hash_password(password: str) -> str:
    return pbkdf2_sha256.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Check ``password`` against a stored hash. Malformed hashes never match."""
    try:
        return pbkdf2_sha256.verify(password, password_hash)
    except ValueError:
        return False
