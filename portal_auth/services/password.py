"""Password hashing (bcrypt, used directly)."""

import bcrypt

# Fixed work factor shared by every hash the system writes.
BCRYPT_ROUNDS = 10

# bcrypt only reads this many bytes of the secret.
BCRYPT_MAX_BYTES = 72


def _secret_bytes(plain: str) -> bytes:
    return plain.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(plain: str) -> str:
    """Return a salted bcrypt hash of the plaintext password.

    Only the first 72 bytes of the UTF-8 encoding take part, as with any
    bcrypt implementation; longer passwords are accepted, not rejected.
    """
    if not isinstance(plain, str):
        raise TypeError("password must be a str")
    return bcrypt.hashpw(_secret_bytes(plain), bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext matches the hash.

    A wrong password or a hash bcrypt cannot parse gives False. Only
    non-string arguments raise.
    """
    if not isinstance(plain, str) or not isinstance(hashed, str):
        raise TypeError("password and hash must be str")
    try:
        return bcrypt.checkpw(_secret_bytes(plain), hashed.encode("utf-8"))
    except ValueError:
        return False


# Verified against when the email is unknown so the response time does not
# reveal whether an account exists.
DUMMY_HASH: str = hash_password("portal_auth_timing_dummy")
