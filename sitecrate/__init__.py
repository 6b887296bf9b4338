"""
sitecrate — encrypted configuration bundles for multi-site work folders.

A fixed manifest of configuration files is collected from a folder, zipped and
sealed into a portable ``.zip.enc`` container; the container (or a plain zip)
is later restored into a per-site working folder.

Container layout (unversioned, legacy compatible):

- salt[16] || iv[16] || AES-256-CBC ciphertext with PKCS#7 padding
- key = PBKDF2-HMAC-SHA256(password, salt, 100000 iterations, 32 bytes)

There is no authentication tag. A wrong password usually fails the padding
check (DecryptionFailed) and otherwise yields a payload that fails to parse as
a zip (CorruptArchive).
"""

__version__ = "0.1"

from .encryption import seal, unseal
from .engine import ArchiveKind, PackagingResult, classify, package, restore, restore_encrypted, restore_plain
from .errors import ArchiveIOError, CorruptArchive, DecryptionFailed, InvalidInput, SitecrateError
from .kdf import derive_key
from .manifest import DEFAULT_MANIFEST, Manifest, resolve_sources

__all__ = [
    "ArchiveIOError",
    "ArchiveKind",
    "CorruptArchive",
    "DEFAULT_MANIFEST",
    "DecryptionFailed",
    "InvalidInput",
    "Manifest",
    "PackagingResult",
    "SitecrateError",
    "classify",
    "derive_key",
    "package",
    "resolve_sources",
    "restore",
    "restore_encrypted",
    "restore_plain",
    "seal",
    "unseal",
]
