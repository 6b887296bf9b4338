"""Per-site working folders.

Each site owns ``<root>/<site>/Temp``. These helpers rebuild, clear and fill
that folder from folders, loose files and archives. Results come back as a
:class:`SiteReport` for the caller to render.
"""

from __future__ import annotations

import os
import shutil
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from .constants import (
    ARCHIVE_TIMESTAMP_FORMAT,
    DEFAULT_ARCHIVE_SUFFIX,
    DEFAULT_FLOP_FILES,
    SITE_TEMP_DIRNAME,
    WORKSPACE_DIRNAME,
    WORKSPACE_ENV,
)
from .engine import ArchiveKind, PackagingResult, classify, package, restore_encrypted, restore_plain
from .errors import CorruptArchive, InvalidInput, SitecrateError, io_error
from .manifest import DEFAULT_MANIFEST, Manifest, walk_candidates
from .pathutil import is_single_segment


@dataclass
class SiteReport:
    messages: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    errors: List[Tuple[str, Exception]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def info(self, msg: str) -> None:
        self.messages.append(msg)

    def warn(self, msg: str) -> None:
        self.warnings.append(msg)

    def merge(self, other: "SiteReport") -> None:
        self.messages.extend(other.messages)
        self.warnings.extend(other.warnings)
        self.errors.extend(other.errors)


def default_root() -> Path:
    env = os.environ.get(WORKSPACE_ENV)
    if env:
        return Path(env).expanduser()
    return Path.home() / WORKSPACE_DIRNAME


def default_archive_name(site: Optional[str] = None, when: Optional[datetime] = None) -> str:
    """``{site}_Config_{timestamp}.zip.enc``, or ``Config_{timestamp}.zip.enc`` without a site."""
    if site is not None and not is_single_segment(site):
        raise InvalidInput(f"Invalid site name: {site!r}")
    stamp = (when or datetime.now()).strftime(ARCHIVE_TIMESTAMP_FORMAT)
    prefix = f"{site}_Config" if site else "Config"
    return f"{prefix}_{stamp}{DEFAULT_ARCHIVE_SUFFIX}"


def _copy(src: str, dst: str) -> None:
    try:
        shutil.copyfile(src, dst)
    except OSError as exc:
        raise io_error(exc, src, "copy") from exc


def _rmtree(path: Path) -> None:
    try:
        shutil.rmtree(path)
    except OSError as exc:
        raise io_error(exc, path, "delete") from exc


class SiteWorkspace:
    def __init__(self, root=None, manifest: Manifest = DEFAULT_MANIFEST):
        self.root = Path(root) if root is not None else default_root()
        self.manifest = manifest

    def temp_path(self, site: str) -> Path:
        if not is_single_segment(site):
            raise InvalidInput(f"Invalid site name: {site!r}")
        return self.root / site / SITE_TEMP_DIRNAME

    def _ensure_temp(self, site: str) -> Path:
        path = self.temp_path(site)
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise io_error(exc, path, "create directory") from exc
        return path

    def build(self, site: str, default_flop=None) -> SiteReport:
        """Recreate the site's temp folder and seed it from the default flop zip.

        A missing or unreadable defaults zip is reported as a warning; the fresh
        folder is still returned.
        """
        report = SiteReport()
        path = self.temp_path(site)
        if path.exists():
            _rmtree(path)
            report.info(f"Deleted existing temp folder: {path}")
        self._ensure_temp(site)
        report.info(f"Created temp folder: {path}")

        flop = Path(default_flop) if default_flop is not None else self.root / DEFAULT_FLOP_FILES
        if not flop.is_file():
            report.warn(f"{flop.name} not found")
            return report
        try:
            restore_plain(flop, path)
        except (CorruptArchive, OSError) as exc:
            report.warn(f"Failed to extract {flop.name}: {exc}")
        else:
            report.info(f"Extracted {flop.name} into temp folder")
        return report

    def clear(self, site: str) -> SiteReport:
        report = SiteReport()
        path = self.temp_path(site)
        if path.exists():
            _rmtree(path)
            report.info(f"Cleared temp folder: {path}")
        else:
            report.info("Temp folder does not exist")
        return report

    def clear_all(self) -> SiteReport:
        report = SiteReport()
        if self.root.exists():
            _rmtree(self.root)
            report.info("Cleared all temp folders")
        else:
            report.info("No temp folders to clear")
        return report

    def collect(self, site: str, source_folder) -> SiteReport:
        """Copy every manifest file found anywhere under ``source_folder``.

        Files keep their on-disk name; a later match overwrites an earlier one.
        """
        report = SiteReport()
        dest = self._ensure_temp(site)
        copied = 0
        for src in walk_candidates(source_folder):
            name = os.path.basename(src)
            if name not in self.manifest:
                continue
            _copy(src, str(dest / name))
            report.info(f"Copied: {name}")
            copied += 1
        report.info(f"Copied {copied} matching file(s) from folder")
        return report

    def copy_file(self, site: str, file_path) -> SiteReport:
        report = SiteReport()
        dest = self._ensure_temp(site)
        name = os.path.basename(os.fspath(file_path))
        _copy(os.fspath(file_path), str(dest / name))
        report.info(f"Copied: {name}")
        return report

    def ingest(self, site: str, paths: Iterable, password: Optional[str] = None) -> SiteReport:
        """Route each dropped path to the matching operation.

        Folders are collected, archives restored by kind, anything else copied
        verbatim. A failing item is recorded in ``errors`` and the rest still run.
        """
        report = SiteReport()
        dest = self._ensure_temp(site)
        for item in paths:
            item = os.fspath(item)
            name = os.path.basename(item.rstrip("/\\")) or item
            try:
                if os.path.isdir(item):
                    report.info(f"Processing folder: {name}")
                    report.merge(self.collect(site, item))
                    continue
                kind = classify(item)
                if kind is ArchiveKind.ENCRYPTED:
                    if not password:
                        raise InvalidInput(f"Password required to decrypt {name!r}")
                    report.info(f"Decrypting: {name}")
                    for rel in restore_encrypted(item, dest, password):
                        report.info(f"Extracted: {rel}")
                elif kind is ArchiveKind.PLAIN:
                    report.info(f"Extracting zip: {name}")
                    for rel in restore_plain(item, dest):
                        report.info(f"Extracted: {rel}")
                else:
                    report.merge(self.copy_file(site, item))
            except (SitecrateError, OSError) as exc:
                report.errors.append((item, exc))
        return report

    def package(self, site: str, source_dir, password: str, output_dir=None) -> PackagingResult:
        self.temp_path(site)
        out_dir = Path(output_dir) if output_dir is not None else Path(source_dir)
        return package(source_dir, out_dir / default_archive_name(site), password, manifest=self.manifest)


__all__ = [
    "SiteReport",
    "SiteWorkspace",
    "default_archive_name",
    "default_root",
]
