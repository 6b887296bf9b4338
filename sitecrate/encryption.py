"""Password-sealed container: ``salt || iv || AES-256-CBC(PKCS#7) ciphertext``.

The format carries no version byte and no authentication tag. A wrong password
is only detected when the padding fails to validate; roughly one time in 256 it
validates by chance and ``unseal`` returns garbage, which the zip layer then
rejects as a corrupt archive. Archives already in circulation depend on this
exact layout, so it is kept as is.
"""

from __future__ import annotations

from dataclasses import dataclass

from Cryptodome.Cipher import AES
from Cryptodome.Random import get_random_bytes
from Cryptodome.Util.Padding import pad, unpad

from .constants import BLOCK_SIZE, HEADER_SIZE, IV_SIZE, MIN_CONTAINER_SIZE, SALT_SIZE
from .errors import DecryptionFailed, InvalidInput
from .kdf import derive_key


@dataclass(frozen=True)
class ContainerParts:
    salt: bytes
    iv: bytes
    ciphertext: bytes


def split_container(container: bytes) -> ContainerParts:
    if len(container) < MIN_CONTAINER_SIZE:
        raise InvalidInput(
            f"Encrypted container too short: {len(container)} bytes (minimum {MIN_CONTAINER_SIZE})"
        )
    return ContainerParts(
        salt=bytes(container[:SALT_SIZE]),
        iv=bytes(container[SALT_SIZE:HEADER_SIZE]),
        ciphertext=bytes(container[HEADER_SIZE:]),
    )


def sealed_size(plaintext_len: int) -> int:
    """Exact container length for a plaintext of ``plaintext_len`` bytes."""
    return HEADER_SIZE + (plaintext_len // BLOCK_SIZE + 1) * BLOCK_SIZE


def seal(plaintext: bytes, password: str) -> bytes:
    """Encrypt ``plaintext`` under ``password`` with a fresh salt and IV."""
    if not plaintext:
        raise InvalidInput("Data cannot be empty")
    if not password:
        raise InvalidInput("Password cannot be empty")

    salt = get_random_bytes(SALT_SIZE)
    iv = get_random_bytes(IV_SIZE)
    cipher = AES.new(derive_key(password, salt), AES.MODE_CBC, iv=iv)
    ciphertext = cipher.encrypt(pad(plaintext, BLOCK_SIZE, style="pkcs7"))
    return salt + iv + ciphertext


def unseal(container: bytes, password: str) -> bytes:
    """Decrypt a container produced by :func:`seal`.

    Raises:
        InvalidInput: container shorter than 33 bytes, or empty password.
        DecryptionFailed: the cipher or the padding rejected the ciphertext.
    """
    parts = split_container(container)
    if not password:
        raise InvalidInput("Password cannot be empty")

    cipher = AES.new(derive_key(password, parts.salt), AES.MODE_CBC, iv=parts.iv)
    try:
        padded = cipher.decrypt(parts.ciphertext)
        return unpad(padded, BLOCK_SIZE, style="pkcs7")
    except ValueError as exc:
        raise DecryptionFailed("Decryption failed: incorrect password or corrupted file") from exc


__all__ = [
    "ContainerParts",
    "seal",
    "sealed_size",
    "split_container",
    "unseal",
]
