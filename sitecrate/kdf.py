from __future__ import annotations

from Cryptodome.Hash import SHA256
from Cryptodome.Protocol.KDF import PBKDF2

from .constants import KDF_ITERATIONS, KEY_SIZE, SALT_SIZE
from .errors import InvalidInput


def derive_key(password: str, salt: bytes) -> bytes:
    """Derive the 32-byte archive key from ``password`` and a 16-byte ``salt``.

    PBKDF2-HMAC-SHA256 with a fixed iteration count. The parameters are part of
    the container format and are deliberately not configurable.
    """
    if not password:
        raise InvalidInput("Password cannot be empty")
    if len(salt) != SALT_SIZE:
        raise InvalidInput(f"Salt must be {SALT_SIZE} bytes, got {len(salt)}")
    return PBKDF2(
        password.encode("utf-8"),
        salt,
        dkLen=KEY_SIZE,
        count=KDF_ITERATIONS,
        hmac_hash_module=SHA256,
    )
