"""Packaging and restore entry points.

Every call is a self-contained transaction: no state survives between calls,
nothing is cached, nothing is logged and nothing is retried. Errors propagate
to the caller as :mod:`sitecrate.errors` exceptions; a non-empty set of missing
manifest files is a normal result, not an error.
"""

from __future__ import annotations

import enum
import os
import tempfile
from dataclasses import dataclass, field
from typing import List, Optional

from .constants import ENCRYPTED_EXT, ENCRYPTED_NAME_SUFFIX, PLAIN_EXT
from .encryption import seal, unseal
from .errors import InvalidInput, io_error
from .manifest import DEFAULT_MANIFEST, Manifest, list_candidates, resolve_sources
from .reader import extract_bytes
from .writer import ArchiveWriter


class ArchiveKind(enum.Enum):
    ENCRYPTED = "encrypted"
    PLAIN = "plain"
    NEITHER = "neither"


@dataclass
class PackagingResult:
    output_path: str
    missing: frozenset = frozenset()
    added: List[str] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return not self.missing


def classify(file_path) -> ArchiveKind:
    # Suffix tests rather than splitext: a bare ".enczip" still has that extension
    name = os.path.basename(os.fspath(file_path)).lower()
    if name.endswith(ENCRYPTED_EXT) or name.endswith(ENCRYPTED_NAME_SUFFIX):
        return ArchiveKind.ENCRYPTED
    if name.endswith(PLAIN_EXT):
        return ArchiveKind.PLAIN
    return ArchiveKind.NEITHER


def _read_file(path) -> bytes:
    try:
        with open(path, "rb") as f:
            return f.read()
    except OSError as exc:
        raise io_error(exc, path, "read") from exc


def _write_atomic(path, data: bytes) -> None:
    """Write via a temp file in the target directory, then swap into place."""
    path = os.fspath(path)
    out_dir = os.path.dirname(os.path.abspath(path))
    tmp_path: Optional[str] = None
    try:
        fd, tmp_path = tempfile.mkstemp(prefix=".sitecrate-", suffix=".tmp", dir=out_dir)
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
        tmp_path = None
    except OSError as exc:
        raise io_error(exc, path, "write") from exc
    finally:
        if tmp_path is not None and os.path.exists(tmp_path):
            os.remove(tmp_path)


def package(source_dir, output_path, password: str, *, manifest: Manifest = DEFAULT_MANIFEST) -> PackagingResult:
    """Collect manifest files found directly inside ``source_dir`` into an encrypted archive.

    Args:
        source_dir: Directory to scan (not recursive).
        output_path: Container file to write; replaced if it exists.
        password: Encryption password; must be non-empty.
        manifest: Names to collect.

    Returns:
        PackagingResult whose ``missing`` lists every manifest name that was not
        found. Packaging proceeds with whatever was found.
    """
    if not password:
        raise InvalidInput("Password is required for encryption")

    resolution = resolve_sources(list_candidates(source_dir), manifest)
    zip_bytes = ArchiveWriter.build(resolution.matches.items())
    _write_atomic(output_path, seal(zip_bytes, password))
    return PackagingResult(
        output_path=os.fspath(output_path),
        missing=resolution.missing,
        added=resolution.found,
    )


def restore_encrypted(archive_path, destination_dir, password: str) -> List[str]:
    """Decrypt ``archive_path`` and unpack it into ``destination_dir``.

    Raises:
        InvalidInput: empty password or truncated container.
        DecryptionFailed: wrong password or corrupted ciphertext.
        CorruptArchive: decrypted payload is not a zip.
        ArchiveIOError: the archive could not be read or a file not written.
    """
    if not password:
        raise InvalidInput("Password is required for decryption")
    plaintext = unseal(_read_file(archive_path), password)
    return extract_bytes(plaintext, destination_dir)


def restore_plain(zip_path, destination_dir) -> List[str]:
    return extract_bytes(_read_file(zip_path), destination_dir)


def restore(path, destination_dir, password: Optional[str] = None) -> List[str]:
    """Route ``path`` to :func:`restore_encrypted` or :func:`restore_plain` by its name."""
    kind = classify(path)
    if kind is ArchiveKind.ENCRYPTED:
        return restore_encrypted(path, destination_dir, password or "")
    if kind is ArchiveKind.PLAIN:
        return restore_plain(path, destination_dir)
    raise InvalidInput(f"Not an archive: {os.fspath(path)}")


__all__ = [
    "ArchiveKind",
    "PackagingResult",
    "classify",
    "package",
    "restore",
    "restore_encrypted",
    "restore_plain",
]
