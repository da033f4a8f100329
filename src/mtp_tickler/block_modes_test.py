import os

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
import pytest

from mtp_tickler import samples
from mtp_tickler.block_modes import cbc_decrypt, ctr_decrypt, unpad_pkcs5

KEY = bytes.fromhex("000102030405060708090a0b0c0d0e0f")
IV = bytes.fromhex("f0f1f2f3f4f5f6f7f8f9fafbfcfdfeff")


def cbc_encrypt(key: bytes, iv: bytes, plaintext: bytes) -> bytes:
    padder = padding.PKCS7(128).padder()
    padded = padder.update(plaintext) + padder.finalize()
    encryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).encryptor()
    return iv + encryptor.update(padded) + encryptor.finalize()


def ctr_encrypt(key: bytes, nonce: bytes, plaintext: bytes) -> bytes:
    encryptor = Cipher(algorithms.AES(key), modes.CTR(nonce)).encryptor()
    return nonce + encryptor.update(plaintext) + encryptor.finalize()


class TestUnpadPkcs5:
    """Test suite for unpad_pkcs5()"""

    def test_valid(self):
        assert unpad_pkcs5(b"YELLOW SUBMARINE" + b"\x10" * 16) == b"YELLOW SUBMARINE"
        assert unpad_pkcs5(b"ICE ICE BABY\x04\x04\x04\x04") == b"ICE ICE BABY"
        assert unpad_pkcs5(b"\x01" * 16, block_size=16) == b"\x01" * 15

    @pytest.mark.parametrize("data", [
        b"",
        b"ICE ICE BABY\x04\x04\x04\x00",
        b"ICE ICE BABY\x05\x05\x05\x05",
        b"ICE ICE BABY\x01\x02\x03\x04",
        b"A" * 15 + b"\x11",
        b"\x03\x03",
        b"\x01",
        b"ABC\x01",
    ])
    def test_invalid(self, data):
        assert unpad_pkcs5(data) is None

    def test_not_block_aligned(self):
        """Padding is only checked on whole blocks"""
        assert unpad_pkcs5(b"ABCDEFG\x01") is None
        assert unpad_pkcs5(b"ABCDEFG\x01", block_size=8) == b"ABCDEFG"


class TestCbcDecrypt:
    """Test suite for cbc_decrypt()"""

    def test_matches_library_cbc(self):
        plaintext = b"Basic CBC mode needs an IV and padding."
        data = cbc_encrypt(KEY, IV, plaintext)
        assert unpad_pkcs5(cbc_decrypt(KEY, data)) == plaintext

    def test_padding_left_in_place(self):
        data = cbc_encrypt(KEY, IV, b"exactly sixteen!")
        assert cbc_decrypt(KEY, data) == b"exactly sixteen!" + b"\x10" * 16

    def test_unaligned(self):
        with pytest.raises(ValueError, match="block-aligned"):
            cbc_decrypt(KEY, IV + b"\x00" * 5)

    def test_missing_iv(self):
        with pytest.raises(ValueError, match="IV"):
            cbc_decrypt(KEY, b"\x00" * 8)

    def test_invalid_key_length(self):
        with pytest.raises(ValueError):
            cbc_decrypt(b"\x00" * 5, IV + b"\x00" * 16)


class TestCtrDecrypt:
    """Test suite for ctr_decrypt()"""

    def test_matches_library_ctr(self):
        plaintext = os.urandom(53)
        data = ctr_encrypt(KEY, IV, plaintext)
        assert ctr_decrypt(KEY, data) == plaintext

    def test_counter_wraps(self):
        nonce = b"\xff" * 16
        plaintext = b"A" * 40
        data = ctr_encrypt(KEY, nonce, plaintext)
        assert ctr_decrypt(KEY, data) == plaintext

    def test_empty_body(self):
        assert ctr_decrypt(KEY, IV) == b""


class TestSampleQuestions:
    """Known answers for the built-in CBC/CTR questions"""

    EXPECTED = [
        b"Basic CBC mode encryption needs padding.",
        b"Our implementation uses rand. IV",
        b"CTR mode lets you build a stream cipher from a block cipher.",
        b"Always avoid the two time pad!",
    ]

    def test_answers(self):
        for (mode, key_hex, data_hex), expected in zip(samples.BLOCK_MODE_QUESTIONS, self.EXPECTED):
            key, data = bytes.fromhex(key_hex), bytes.fromhex(data_hex)
            if mode == "cbc":
                assert unpad_pkcs5(cbc_decrypt(key, data)) == expected
            else:
                assert ctr_decrypt(key, data) == expected
