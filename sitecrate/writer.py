from __future__ import annotations

import io
import shutil
import zipfile
from typing import Iterable, List, Optional, Tuple

from .constants import COPY_CHUNK_SIZE
from .errors import ArchiveIOError, InvalidInput, io_error
from .pathutil import norm_path


class ArchiveWriter:
    """Build a deflate zip in memory.

    Entry names are stored exactly as given, so the manifest's canonical name
    (not the on-disk spelling of the source) ends up in the archive.
    """

    def __init__(self, compresslevel: Optional[int] = None):
        self._buf = io.BytesIO()
        self._zf: Optional[zipfile.ZipFile] = zipfile.ZipFile(
            self._buf, "w", compression=zipfile.ZIP_DEFLATED, compresslevel=compresslevel
        )
        self.names: List[str] = []

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    @staticmethod
    def _check_name(arcname: str) -> str:
        try:
            clean = norm_path(arcname)
        except ValueError as exc:
            raise InvalidInput(f"Invalid archive name {arcname!r}: {exc}") from exc
        if not clean:
            raise InvalidInput("Archive name cannot be empty")
        return arcname

    def _require_open(self) -> zipfile.ZipFile:
        if self._zf is None:
            raise RuntimeError("Archive already finalized")
        return self._zf

    def add_file(self, arcname: str, src_path: str) -> None:
        zf = self._require_open()
        arcname = self._check_name(arcname)
        try:
            src = open(src_path, "rb")
        except OSError as exc:
            raise io_error(exc, src_path, "open") from exc
        with src:
            try:
                with zf.open(arcname, "w") as dst:
                    shutil.copyfileobj(src, dst, COPY_CHUNK_SIZE)
            except OSError as exc:
                if isinstance(exc, ArchiveIOError):
                    raise
                raise io_error(exc, src_path, "read") from exc
        self.names.append(arcname)

    def add_bytes(self, arcname: str, data: bytes) -> None:
        zf = self._require_open()
        arcname = self._check_name(arcname)
        zf.writestr(arcname, data)
        self.names.append(arcname)

    def close(self) -> None:
        if self._zf is not None:
            self._zf.close()
            self._zf = None

    def getvalue(self) -> bytes:
        """Finalize (writes the central directory) and return the zip bytes."""
        self.close()
        return self._buf.getvalue()

    @classmethod
    def build(cls, entries: Iterable[Tuple[str, str]], compresslevel: Optional[int] = None) -> bytes:
        """One entry per ``(archive_name, source_path)`` pair, in order."""
        with cls(compresslevel=compresslevel) as w:
            for arcname, src_path in entries:
                w.add_file(arcname, src_path)
            return w.getvalue()


__all__ = ["ArchiveWriter"]
