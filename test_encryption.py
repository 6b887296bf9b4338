from __future__ import annotations

import hashlib
import os
import unittest
from unittest import mock

from Cryptodome.Cipher import AES
from Cryptodome.Util.Padding import pad

from sitecrate.constants import KDF_ITERATIONS
from sitecrate.encryption import seal, sealed_size, split_container, unseal
from sitecrate.errors import CorruptArchive, DecryptionFailed, InvalidInput
from sitecrate.kdf import derive_key
from sitecrate.reader import ArchiveReader


def _cheap_key(password: str, salt: bytes) -> bytes:
    return hashlib.sha256(password.encode("utf-8") + salt).digest()


class KeyDerivationTests(unittest.TestCase):
    def test_deterministic_and_salt_sensitive(self):
        salt1 = b"\x01" * 16
        salt2 = b"\x02" * 16
        a = derive_key("hunter2", salt1)
        b = derive_key("hunter2", salt1)
        c = derive_key("hunter2", salt2)
        self.assertEqual(32, len(a))
        self.assertEqual(a, b)
        self.assertNotEqual(a, c)

    def test_matches_pbkdf2_hmac_sha256(self):
        salt = bytes(range(16))
        expected = hashlib.pbkdf2_hmac("sha256", "pässwörd".encode("utf-8"), salt, KDF_ITERATIONS, dklen=32)
        self.assertEqual(expected, derive_key("pässwörd", salt))

    def test_empty_password_rejected(self):
        with self.assertRaises(InvalidInput):
            derive_key("", b"\x00" * 16)

    def test_salt_length_enforced(self):
        with self.assertRaises(InvalidInput):
            derive_key("pw", b"\x00" * 8)


class ContainerTests(unittest.TestCase):
    def test_roundtrip_various_sizes(self):
        for size in (1, 15, 16, 17, 31, 32, 33, 1000):
            data = os.urandom(size)
            blob = seal(data, "correct horse")
            self.assertEqual(sealed_size(size), len(blob))
            self.assertEqual(data, unseal(blob, "correct horse"))

    def test_sealed_length_formula(self):
        for size, expected in ((1, 48), (15, 48), (16, 64), (17, 64), (32, 80)):
            self.assertEqual(expected, sealed_size(size))
            self.assertEqual(32 + ((size + 1 + 15) // 16) * 16, sealed_size(size))

    def test_decrypts_container_built_directly(self):
        # Layout check independent of seal(): salt || iv || AES-CBC(PKCS#7)
        salt = bytes(range(16))
        iv = bytes(range(16, 32))
        key = hashlib.pbkdf2_hmac("sha256", b"legacy", salt, KDF_ITERATIONS, dklen=32)
        payload = b"legacy archive payload"
        ct = AES.new(key, AES.MODE_CBC, iv=iv).encrypt(pad(payload, 16))
        self.assertEqual(payload, unseal(salt + iv + ct, "legacy"))

    def test_fresh_salt_and_iv_every_call(self):
        seen = set()
        with mock.patch("sitecrate.encryption.derive_key", side_effect=_cheap_key):
            for _ in range(1000):
                parts = split_container(seal(b"same plaintext", "same password"))
                seen.add(parts.salt + parts.iv)
        self.assertEqual(1000, len(seen))

    def test_key_derived_once_per_call(self):
        calls = []

        def _recording(password, salt):
            calls.append(salt)
            return _cheap_key(password, salt)

        with mock.patch("sitecrate.encryption.derive_key", side_effect=_recording):
            blob = seal(b"payload", "pw")
            self.assertEqual(b"payload", unseal(blob, "pw"))
            self.assertEqual(b"payload", unseal(blob, "pw"))
        salt = split_container(blob).salt
        self.assertEqual([salt, salt, salt], calls)

    def test_empty_inputs_rejected(self):
        with self.assertRaises(InvalidInput):
            seal(b"", "pw")
        with self.assertRaises(InvalidInput):
            seal(b"data", "")
        blob = seal(b"data", "pw")
        with self.assertRaises(InvalidInput):
            unseal(blob, "")

    def test_short_container_rejected(self):
        for n in (0, 16, 32):
            with self.assertRaises(InvalidInput):
                unseal(b"\x00" * n, "pw")

    def test_unaligned_ciphertext_is_decryption_failure(self):
        blob = seal(b"some data", "pw")
        with self.assertRaises(DecryptionFailed):
            unseal(blob[:-1], "pw")
        with self.assertRaises(DecryptionFailed):
            unseal(blob[:33], "pw")

    def test_wrong_password_never_yields_plaintext(self):
        data = b"PK\x05\x06" + b"\x00" * 18
        failures = 0
        trials = 24
        for i in range(trials):
            blob = seal(data, f"right-{i}")
            try:
                out = unseal(blob, f"wrong-{i}")
            except DecryptionFailed:
                failures += 1
                continue
            self.assertNotEqual(data, out)
            # Padding validated by chance; the payload must still be rejected as a zip
            with self.assertRaises(CorruptArchive):
                ArchiveReader(out)
            failures += 1
        self.assertEqual(trials, failures)

    def test_split_container(self):
        blob = seal(b"abc", "pw")
        parts = split_container(blob)
        self.assertEqual(16, len(parts.salt))
        self.assertEqual(16, len(parts.iv))
        self.assertEqual(16, len(parts.ciphertext))
        self.assertEqual(blob, parts.salt + parts.iv + parts.ciphertext)


if __name__ == "__main__":
    unittest.main()
