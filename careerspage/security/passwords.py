# careerspage/security/passwords.py

import bcrypt

from careerspage.core.errors import ValidationError

# bcrypt only looks at the first 72 bytes and newer releases refuse longer input
BCRYPT_MAX_BYTES = 72


def _encode(password: str) -> bytes:
    return password.encode("utf-8")


def hash_password(password: str) -> str:
    """Hashes an account password, rejecting ones bcrypt cannot represent."""
    encoded = _encode(password)
    if len(encoded) > BCRYPT_MAX_BYTES:
        raise ValidationError(f"Password must be at most {BCRYPT_MAX_BYTES} bytes")
    return bcrypt.hashpw(encoded, bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str | None) -> bool:
    encoded = _encode(plain_password)
    if not hashed_password or len(encoded) > BCRYPT_MAX_BYTES:
        return False
    try:
        return bcrypt.checkpw(encoded, hashed_password.encode("utf-8"))
    except ValueError:
        # Malformed hash in the database
        return False
