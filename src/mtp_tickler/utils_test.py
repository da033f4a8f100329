import base64

import pytest

from mtp_tickler.utils import b64_decode, decode_ciphertext, load_corpus, parse_corpus, CiphertextFormatError


class TestDecodeCiphertext:
    """Test suite for decode_ciphertext()"""

    def test_hex(self):
        assert decode_ciphertext("  0a0B ff\n") == b"\x0a\x0b\xff"

    def test_b64(self):
        assert decode_ciphertext(base64.b64encode(b"\xfa\xfb\xfc").decode(), "b64") == b"\xfa\xfb\xfc"

    def test_b64_missing_padding(self):
        assert b64_decode("YWI") == b"ab"

    def test_b64_urlsafe(self):
        text = base64.urlsafe_b64encode(b"\xfb\xff").decode().rstrip("=")
        assert decode_ciphertext(text, "b64_urlsafe") == b"\xfb\xff"

    def test_invalid_hex(self):
        with pytest.raises(CiphertextFormatError, match="hex"):
            decode_ciphertext("zz", "hex")

    def test_invalid_b64(self):
        with pytest.raises(CiphertextFormatError):
            decode_ciphertext("not*base64", "b64")

    @pytest.mark.parametrize("text", ["ab*c", "a.b-", "-_ !"])
    def test_invalid_b64_urlsafe(self, text):
        """Characters outside the URL-safe alphabet are rejected, not skipped"""
        with pytest.raises(CiphertextFormatError):
            decode_ciphertext(text, "b64_urlsafe")

    def test_unknown_format(self):
        with pytest.raises(CiphertextFormatError, match="Invalid ciphertext format"):
            decode_ciphertext("00", "rot13")


class TestParseCorpus:
    """Test suite for parse_corpus() and load_corpus()"""

    def test_skips_blank_and_comments(self):
        text = "# corpus\n0102\n\n  0304  \n# done\n"
        assert parse_corpus(text) == [b"\x01\x02", b"\x03\x04"]

    def test_reports_line_number(self):
        with pytest.raises(CiphertextFormatError, match="line 2"):
            parse_corpus("0102\nxyz\n")

    def test_load_corpus(self, tmp_path):
        path = tmp_path / "corpus.txt"
        path.write_text("aabb\nccdd\n")
        assert load_corpus(str(path)) == [b"\xaa\xbb", b"\xcc\xdd"]
