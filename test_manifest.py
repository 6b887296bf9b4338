from __future__ import annotations

import os
import tempfile
import unittest
from pathlib import Path

from sitecrate.constants import CORE_FILES
from sitecrate.errors import ArchiveIOError, InvalidInput
from sitecrate.manifest import (
    DEFAULT_MANIFEST,
    Manifest,
    list_candidates,
    resolve_sources,
    siteview_files,
    walk_candidates,
)


class ManifestTests(unittest.TestCase):
    def test_default_contents(self):
        names = list(DEFAULT_MANIFEST)
        self.assertEqual(39, len(names))
        self.assertEqual(list(CORE_FILES), names[:19])
        self.assertEqual(["siteview1.ini", "siteview1.png", "siteview2.ini"], names[19:22])
        self.assertEqual("siteview10.png", names[-1])
        self.assertEqual(len(names), len({n.lower() for n in names}))

    def test_core_and_generated_are_disjoint(self):
        core = {n.lower() for n in CORE_FILES}
        generated = {n.lower() for n in siteview_files()}
        self.assertFalse(core & generated)

    def test_canonical_lookup_ignores_case_and_directories(self):
        self.assertEqual("IOT.dat", DEFAULT_MANIFEST.canonical("iot.DAT"))
        self.assertEqual("VMFUNC.C", DEFAULT_MANIFEST.canonical("some/dir/vmfunc.c"))
        self.assertEqual("kop.def", DEFAULT_MANIFEST.canonical("C:\\site\\KOP.DEF"))
        self.assertIsNone(DEFAULT_MANIFEST.canonical("siteview11.ini"))
        self.assertIn("TRACE.INI", DEFAULT_MANIFEST)

    def test_duplicate_names_rejected(self):
        with self.assertRaises(InvalidInput):
            Manifest(("a.ini", "A.INI"))
        with self.assertRaises(InvalidInput):
            Manifest(("dir/a.ini",))


class ResolveTests(unittest.TestCase):
    def test_five_matches_two_extraneous(self):
        candidates = [
            "/src/vmfunc.c",
            "/src/SIMULATOR.INI",
            "/src/SiteView3.PNG",
            "/src/Report01.HTML",
            "/src/iot.DAT",
            "/src/readme.md",
            "/src/siteview11.ini",
        ]
        res = resolve_sources(candidates)
        self.assertEqual(
            {
                "VMFUNC.C": "/src/vmfunc.c",
                "Simulator.ini": "/src/SIMULATOR.INI",
                "siteview3.png": "/src/SiteView3.PNG",
                "report01.html": "/src/Report01.HTML",
                "IOT.dat": "/src/iot.DAT",
            },
            res.matches,
        )
        self.assertEqual(34, len(res.missing))
        self.assertEqual(set(DEFAULT_MANIFEST) - set(res.matches), set(res.missing))
        # Matches are reported in manifest order
        self.assertEqual(["VMFUNC.C", "Simulator.ini", "IOT.dat", "report01.html", "siteview3.png"], res.found)

    def test_first_candidate_wins(self):
        res = resolve_sources(["/a/XP.DAT", "/b/xp.dat"])
        self.assertEqual("/a/XP.DAT", res.matches["XP.DAT"])

    def test_nothing_found(self):
        res = resolve_sources([])
        self.assertEqual({}, res.matches)
        self.assertEqual(frozenset(DEFAULT_MANIFEST), res.missing)


class CandidateListingTests(unittest.TestCase):
    def test_list_is_flat_and_sorted(self):
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            (root / "b.txt").write_text("b")
            (root / "a.txt").write_text("a")
            (root / "sub").mkdir()
            (root / "sub" / "XP.DAT").write_text("x")
            got = list_candidates(root)
            self.assertEqual([os.path.join(tmp, "a.txt"), os.path.join(tmp, "b.txt")], got)
            walked = walk_candidates(root)
            self.assertIn(os.path.join(tmp, "sub", "XP.DAT"), walked)
            self.assertEqual(3, len(walked))

    def test_missing_directory(self):
        with tempfile.TemporaryDirectory() as tmp:
            missing = os.path.join(tmp, "nope")
            with self.assertRaises(ArchiveIOError) as ctx:
                list_candidates(missing)
            self.assertEqual(missing, ctx.exception.path)
            with self.assertRaises(ArchiveIOError):
                walk_candidates(missing)


if __name__ == "__main__":
    unittest.main()
