"""Tests for hashing and HMAC primitives."""

from volcsign.common.hmac import hmac_sha256, hmac_sha256_hex, sha256_hex


class TestSha256Hex:
    """Tests for the content hasher."""

    def test_empty_input(self):
        """Empty content has the standard SHA-256 digest."""
        assert (
            sha256_hex(b"")
            == "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
        )

    def test_known_value(self):
        assert (
            sha256_hex(b"abc")
            == "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"
        )

    def test_str_hashed_as_utf8(self):
        """Strings hash to the same digest as their UTF-8 bytes."""
        assert sha256_hex("狗仔") == sha256_hex("狗仔".encode("utf-8"))

    def test_lowercase_64_chars(self):
        digest = sha256_hex(b"payload")
        assert len(digest) == 64
        assert digest == digest.lower()


class TestHmac:
    """Tests for HMAC helpers (RFC 4231 test case 2)."""

    KEY = b"Jefe"
    MESSAGE = "what do ya want for nothing?"
    EXPECTED = "5bdcc146bf60754e6a042426089575c75a003f089d2739839dec58b964ec3843"

    def test_hex_digest(self):
        assert hmac_sha256_hex(self.KEY, self.MESSAGE) == self.EXPECTED

    def test_raw_digest(self):
        digest = hmac_sha256(self.KEY, self.MESSAGE.encode("utf-8"))
        assert len(digest) == 32
        assert digest.hex() == self.EXPECTED

