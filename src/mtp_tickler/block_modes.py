from typing import Optional

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
import structlog


log = structlog.get_logger()

BLOCK_SIZE = 16


def unpad_pkcs5(data: bytes, block_size: int = BLOCK_SIZE) -> Optional[bytes]:
    """Strip PKCS#5/#7 padding. Returns None if the padding is malformed."""
    unpadder = padding.PKCS7(block_size * 8).unpadder()
    try:
        return unpadder.update(data) + unpadder.finalize()
    except ValueError:
        return None


def _split_iv(data: bytes) -> tuple[bytes, bytes]:
    if len(data) < BLOCK_SIZE:
        raise ValueError(f"Ciphertext must start with a {BLOCK_SIZE}-byte IV")
    return data[:BLOCK_SIZE], data[BLOCK_SIZE:]


def _aes_cipher(key: bytes, mode: modes.Mode) -> Cipher:
    try:
        return Cipher(algorithms.AES(key), mode)
    except ValueError as e:
        log.error("invalid AES key", key_length=len(key), error=str(e))
        raise


def cbc_decrypt(key: bytes, data: bytes) -> bytes:
    """Decrypt AES-CBC where the first block is the IV. Padding is left in place."""
    iv, ciphertext = _split_iv(data)
    if len(ciphertext) % BLOCK_SIZE != 0:
        raise ValueError("CBC ciphertext must be block-aligned")

    decryptor = _aes_cipher(key, modes.CBC(iv)).decryptor()
    plaintext = decryptor.update(ciphertext) + decryptor.finalize()
    log.debug("cbc decrypted", blocks=len(ciphertext) // BLOCK_SIZE)
    return plaintext


def ctr_decrypt(key: bytes, data: bytes) -> bytes:
    """
    Decrypt AES-CTR where the first block is the initial counter (big-endian).
    The counter wraps at 2**128 and a trailing partial block is truncated.
    """
    iv, ciphertext = _split_iv(data)
    decryptor = _aes_cipher(key, modes.CTR(iv)).decryptor()
    plaintext = decryptor.update(ciphertext) + decryptor.finalize()
    log.debug("ctr decrypted", blocks=-(-len(ciphertext) // BLOCK_SIZE))
    return plaintext
