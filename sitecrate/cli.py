from __future__ import annotations

import argparse
import getpass as _getpass
import os
import sys
from typing import List, Optional

from sitecrate.constants import ENCRYPTED_NAME_SUFFIX
from sitecrate.encryption import split_container
from sitecrate.engine import ArchiveKind, classify, package, restore_encrypted, restore_plain
from sitecrate.errors import (
    ArchiveIOError,
    CorruptArchive,
    DecryptionFailed,
    InvalidInput,
    SitecrateError,
)
from sitecrate.manifest import DEFAULT_MANIFEST
from sitecrate.pathutil import is_single_segment
from sitecrate.reader import ArchiveReader
from sitecrate.sites import SiteReport, SiteWorkspace, default_archive_name


MISSING_PREVIEW = 5


def _password(given: Optional[str], *, confirm: bool = False) -> str:
    """Use ``given`` or prompt once on the terminal."""
    if given:
        return given
    pw = _getpass.getpass("Archive password: ")
    if confirm and pw and _getpass.getpass("Confirm password: ") != pw:
        raise InvalidInput("Passwords do not match")
    return pw


def _print_report(report: SiteReport, *, quiet: bool = False) -> None:
    if not quiet:
        for msg in report.messages:
            print(f"  {msg}")
    for msg in report.warnings:
        print(f"Warning: {msg}", file=sys.stderr)
    for path, exc in report.errors:
        print(f"ERROR processing '{os.path.basename(path)}': {exc}", file=sys.stderr)


def cmd_pack(source_dir: str, *, output: Optional[str] = None, site: Optional[str] = None, password: Optional[str] = None, quiet: bool = False) -> bool:
    """Collect manifest files from ``source_dir`` into an encrypted archive.

    Missing files are reported but do not fail the command.
    """
    if site is not None and not is_single_segment(site):
        raise InvalidInput(f"Invalid site name: {site!r}")
    pw = _password(password, confirm=True)
    if not pw:
        raise InvalidInput("Password is required for encryption")
    if output is None:
        output = default_archive_name(site)
    elif os.path.isdir(output):
        output = os.path.join(output, default_archive_name(site))
    if not quiet:
        print(f" Creating encrypted zip from: {source_dir}")
    result = package(source_dir, output, pw)
    if not quiet:
        for name in result.added:
            print(f"   added: {name}")
    if result.missing:
        ordered = [n for n in DEFAULT_MANIFEST if n in result.missing]
        more = "..." if len(ordered) > MISSING_PREVIEW else ""
        print(f"Warning: {len(ordered)} file(s) were missing", file=sys.stderr)
        print(f"Missing files: {', '.join(ordered[:MISSING_PREVIEW])}{more}", file=sys.stderr)
    print(f"Created {result.output_path} ({len(result.added)}/{len(DEFAULT_MANIFEST)} files)")
    return True


def cmd_restore(archive: str, *, outdir: str = ".", password: Optional[str] = None, quiet: bool = False) -> bool:
    """Restore an encrypted (``.zip.enc``/``.enczip``) or plain (``.zip``) archive."""
    kind = classify(archive)
    if kind is ArchiveKind.ENCRYPTED:
        pw = _password(password)
        if not quiet:
            print(f" Decrypting: {os.path.basename(archive)}")
        extracted = restore_encrypted(archive, outdir, pw)
    elif kind is ArchiveKind.PLAIN:
        if not quiet:
            print(f" Extracting zip: {os.path.basename(archive)}")
        extracted = restore_plain(archive, outdir)
    else:
        raise InvalidInput(f"Not an archive (expected .zip, {ENCRYPTED_NAME_SUFFIX} or .enczip): {archive}")
    if not quiet:
        for rel in extracted:
            print(f"   extracted: {rel}")
    print(f"Restored {len(extracted)} file(s) into {outdir}")
    return True


def cmd_info(archive: str) -> bool:
    kind = classify(archive)
    print(f"Path: {archive}")
    print(f"Kind: {kind.value}")
    try:
        size = os.path.getsize(archive)
    except OSError as exc:
        raise ArchiveIOError(f"Failed to stat {archive}: {exc.strerror or exc}", path=archive) from exc
    print(f"Size: {size} bytes")
    if kind is ArchiveKind.ENCRYPTED:
        with open(archive, "rb") as f:
            parts = split_container(f.read())
        print(f"Salt: {parts.salt.hex()}")
        print(f"IV:   {parts.iv.hex()}")
        print(f"Ciphertext: {len(parts.ciphertext)} bytes")
    elif kind is ArchiveKind.PLAIN:
        with open(archive, "rb") as f:
            with ArchiveReader(f.read()) as r:
                names = r.names()
        print(f"Entries: {len(names)}")
        for n in names:
            print(f"  {n}")
    return True


def cmd_manifest() -> bool:
    for name in DEFAULT_MANIFEST:
        print(name)
    return True


def cmd_site(action: str, site: Optional[str], *, root: Optional[str] = None, inputs: Optional[List[str]] = None, default_flop: Optional[str] = None, password: Optional[str] = None, quiet: bool = False) -> bool:
    ws = SiteWorkspace(root)
    if action == "clear-all":
        report = ws.clear_all()
    elif action == "build":
        report = ws.build(site, default_flop=default_flop)
    elif action == "clear":
        report = ws.clear(site)
    elif action == "ingest":
        paths = inputs or []
        pw = password
        if pw is None and any(classify(p) is ArchiveKind.ENCRYPTED for p in paths):
            pw = _password(None)
        report = ws.ingest(site, paths, password=pw)
    elif action == "path":
        print(ws.temp_path(site))
        return True
    else:
        raise RuntimeError(f"Unknown site action: {action}")
    _print_report(report, quiet=quiet)
    return report.ok


def main(argv: List[str] | None = None):
    ap = argparse.ArgumentParser(
        prog="sitecrate",
        description="Encrypted configuration bundles for site work folders",
        epilog=(
            "Encrypted archives are AES-256-CBC with a PBKDF2-derived key and carry no "
            "authentication tag; a wrong password may surface as a corrupt archive."
        ),
    )
    sub = ap.add_subparsers(dest="cmd", required=True)

    ap_pack = sub.add_parser("pack", help="Create an encrypted zip from a folder of config files")
    ap_pack.add_argument("source", help="Folder holding the config files (not searched recursively)")
    ap_pack.add_argument("-o", "--output", help="Output .zip.enc path or directory (default: ./Config_<timestamp>.zip.enc)")
    ap_pack.add_argument("--site", help="Site name used in the default output name")
    ap_pack.add_argument("--password", help="Encryption password")
    ap_pack.add_argument("--quiet", help="limit outputs to summaries only", action="store_true")

    ap_restore = sub.add_parser("restore", help="Restore an encrypted or plain zip")
    ap_restore.add_argument("archive", help="Archive path (.zip.enc, .enczip or .zip)")
    ap_restore.add_argument("--outdir", default=".", help="Output directory")
    ap_restore.add_argument("--password", help="Archive password")
    ap_restore.add_argument("--quiet", help="limit outputs to summaries only", action="store_true")

    ap_info = sub.add_parser("info", help="Show archive information")
    ap_info.add_argument("archive", help="Archive path")

    sub.add_parser("manifest", help="List the required file names")

    ap_site = sub.add_parser("site", help="Manage per-site temp folders")
    ap_site.add_argument("action", choices=["build", "clear", "clear-all", "ingest", "path"])
    ap_site.add_argument("site", nargs="?", help="Site name (not used by clear-all)")
    ap_site.add_argument("inputs", nargs="*", help="Folders, files or archives to ingest")
    ap_site.add_argument("--root", help="Workspace root (default: $SITECRATE_HOME or ~/.sitecrate)")
    ap_site.add_argument("--default-flop", help="Zip to seed new temp folders with")
    ap_site.add_argument("--password", help="Password for encrypted archives")
    ap_site.add_argument("--quiet", help="limit outputs to summaries only", action="store_true")

    args = ap.parse_args(argv)
    try:
        if args.cmd == "pack":
            cmd_pack(args.source, output=args.output, site=args.site, password=args.password, quiet=args.quiet)
        elif args.cmd == "restore":
            cmd_restore(args.archive, outdir=args.outdir, password=args.password, quiet=args.quiet)
        elif args.cmd == "info":
            cmd_info(args.archive)
        elif args.cmd == "manifest":
            cmd_manifest()
        elif args.cmd == "site":
            if args.action != "clear-all" and not args.site:
                ap.error(f"site {args.action} requires a site name")
            success = cmd_site(
                args.action,
                args.site,
                root=args.root,
                inputs=args.inputs,
                default_flop=args.default_flop,
                password=args.password,
                quiet=args.quiet,
            )
            sys.exit(0 if success else 1)
        else:
            raise RuntimeError("Unknown command")
    except DecryptionFailed:
        print("Error: Decryption failed - incorrect password or corrupted file", file=sys.stderr)
        sys.exit(2)
    except CorruptArchive as e:
        print(f"Error: Bad archive: {e}", file=sys.stderr)
        sys.exit(2)
    except InvalidInput as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)
    except (SitecrateError, OSError, RuntimeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()
