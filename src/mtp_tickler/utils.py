import base64
import binascii
from typing import List, Literal, Union

type CiphertextFormat = Union[Literal[
    "hex",
    "b64",
    "b64_urlsafe",
], str]

CIPHERTEXT_FORMATS = ("hex", "b64", "b64_urlsafe")


class CiphertextFormatError(ValueError):
    pass


def b64_decode(b64_text: str, *, urlsafe: bool = False) -> bytes:
    """Decodes standard or URL-safe b64. Tolerates missing '=' padding."""
    # normalize padding
    missing = len(b64_text) % 4
    if missing:
        b64_text += "=" * (4 - missing)

    if urlsafe:
        return base64.b64decode(b64_text, altchars=b"-_", validate=True)
    return base64.b64decode(b64_text, validate=True)


def decode_ciphertext(text: str, format: CiphertextFormat = "hex") -> bytes:
    """Decode one textual ciphertext."""
    text = text.strip()
    try:
        if format == "hex":
            return bytes.fromhex(text)
        elif format == "b64":
            return b64_decode(text)
        elif format == "b64_urlsafe":
            return b64_decode(text, urlsafe=True)
    except (ValueError, binascii.Error) as e:
        raise CiphertextFormatError(f"Could not decode {format} ciphertext: {e}") from e
    raise CiphertextFormatError(f"Invalid ciphertext format: {format}")


def parse_corpus(text: str, format: CiphertextFormat = "hex") -> List[bytes]:
    """Decode one ciphertext per non-blank line. Lines starting with '#' are comments."""
    corpus = []
    for line_number, line in enumerate(text.splitlines(), start=1):
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        try:
            corpus.append(decode_ciphertext(line, format))
        except CiphertextFormatError as e:
            raise CiphertextFormatError(f"line {line_number}: {e}") from e
    return corpus


def load_corpus(file_path: str, format: CiphertextFormat = "hex") -> List[bytes]:
    """Load a ciphertext corpus from a file."""
    with open(file_path, "r", encoding="utf-8") as f:
        return parse_corpus(f.read(), format)
