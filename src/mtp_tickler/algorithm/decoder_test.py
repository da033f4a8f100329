from mtp_tickler.algorithm.decoder import decode_corpus, decode_with_keystream, recovery_stats, RecoveryStats
from mtp_tickler.algorithm.keystream_builder import build_keystream
from mtp_tickler.models.keystream import Keystream

KEY = bytes.fromhex("3e11a0c4970b5d22")
PLAINTEXT = b"attack!!"
CIPHERTEXT = bytes(p ^ k for p, k in zip(PLAINTEXT, KEY))


def full_keystream(key: bytes) -> Keystream:
    keystream = Keystream(len(key))
    for position, value in enumerate(key):
        keystream.resolve(position, value)
    return keystream


class TestDecodeWithKeystream:
    """Test suite for decode_with_keystream()"""

    def test_full_keystream_round_trip(self):
        assert decode_with_keystream(CIPHERTEXT, full_keystream(KEY)) == "attack!!"

    def test_unknown_keystream_placeholders(self):
        assert decode_with_keystream(CIPHERTEXT, Keystream(8)) == "_" * 8

    def test_partial_keystream(self):
        keystream = Keystream(8)
        keystream.resolve(0, KEY[0])
        keystream.resolve(5, KEY[5])
        assert decode_with_keystream(CIPHERTEXT, keystream) == "a____k__"

    def test_custom_placeholder(self):
        assert decode_with_keystream(CIPHERTEXT, Keystream(3), placeholder="?") == "???"

    def test_truncates_to_shorter(self):
        assert decode_with_keystream(CIPHERTEXT[:4], full_keystream(KEY)) == "atta"
        assert decode_with_keystream(CIPHERTEXT, full_keystream(KEY[:2])) == "at"

    def test_corpus_too_small_scenario(self):
        corpus = [bytes(range(1, 11)), bytes(range(11, 21))]
        keystream = build_keystream(corpus, 10)
        assert decode_with_keystream(corpus[1], keystream) == "_" * 10


class TestDecodeCorpus:
    """Test suite for decode_corpus()"""

    def test_each_message(self):
        other = bytes(p ^ k for p, k in zip(b"at dawn", KEY))
        assert decode_corpus([CIPHERTEXT, other], full_keystream(KEY)) == ["attack!!", "at dawn"]


class TestRecoveryStats:
    """Test suite for recovery_stats()"""

    def test_counts(self):
        keystream = Keystream(4)
        keystream.resolve(1, 0x10)
        stats = recovery_stats(keystream)
        assert stats == RecoveryStats(known=1, total=4)
        assert stats.ratio == 0.25
        assert str(stats) == "1/4"

    def test_empty_keystream(self):
        assert recovery_stats(Keystream(0)).ratio == 0.0
