from __future__ import annotations

import io
import lzma
import os
import zipfile
import zlib
from typing import List

from .constants import COPY_CHUNK_SIZE
from .errors import CorruptArchive, io_error
from .pathutil import norm_path


class ArchiveReader:
    """Read a zip held in memory and unpack it under a destination directory."""

    def __init__(self, data: bytes):
        try:
            self._zf = zipfile.ZipFile(io.BytesIO(data), "r")
        except (zipfile.BadZipFile, zipfile.LargeZipFile, ValueError, EOFError) as exc:
            raise CorruptArchive(f"Not a valid zip archive: {exc}") from exc

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def close(self) -> None:
        self._zf.close()

    def names(self) -> List[str]:
        """Names of file entries (directory markers excluded), archive order."""
        return [info.filename for info in self._zf.infolist() if not info.is_dir()]

    def extract(self, dest) -> List[str]:
        """Write every file entry under ``dest``, replacing existing files.

        Returns the normalized relative paths written, in archive order.
        """
        dest = os.fspath(dest)
        written: List[str] = []
        for info in self._zf.infolist():
            if info.is_dir():
                continue
            try:
                rel = norm_path(info.filename)
            except ValueError as exc:
                raise CorruptArchive(f"Unsafe entry name {info.filename!r}: {exc}") from exc
            if not rel:
                continue
            out_path = os.path.join(dest, *rel.split("/"))
            parent = os.path.dirname(out_path)
            try:
                os.makedirs(parent, exist_ok=True)
            except OSError as exc:
                raise io_error(exc, parent, "create directory") from exc
            self._extract_one(info, out_path)
            written.append(rel)
        return written

    def _extract_one(self, info: zipfile.ZipInfo, out_path: str) -> None:
        try:
            src = self._zf.open(info, "r")
        except (zipfile.BadZipFile, lzma.LZMAError, NotImplementedError, RuntimeError, ValueError) as exc:
            raise CorruptArchive(f"Cannot read entry {info.filename!r}: {exc}") from exc
        with src:
            try:
                dst = open(out_path, "wb")
            except OSError as exc:
                raise io_error(exc, out_path, "write") from exc
            with dst:
                while True:
                    # Decoder failures surface as OSError for bzip2; keep them apart from write errors
                    try:
                        chunk = src.read(COPY_CHUNK_SIZE)
                    except (zipfile.BadZipFile, zlib.error, lzma.LZMAError, EOFError, OSError) as exc:
                        raise CorruptArchive(f"Entry {info.filename!r} is damaged: {exc}") from exc
                    if not chunk:
                        break
                    try:
                        dst.write(chunk)
                    except OSError as exc:
                        raise io_error(exc, out_path, "write") from exc


def extract_bytes(data: bytes, dest) -> List[str]:
    with ArchiveReader(data) as r:
        return r.extract(dest)


__all__ = ["ArchiveReader", "extract_bytes"]
