"""Content addressing"""

import pytest

from chunkwire.integrity.hasher import ContentHasher, create_hash, verify_hash
from chunkwire.errors import InvalidInput, InvalidParameter


class TestContentHasher:

    def test_known_digests(self):
        assert create_hash(b"abc") == "a9993e364706816aba3e25717850c26c9cd0d89d"
        assert create_hash(b"") == "da39a3ee5e6b4b0d3255bfef95601890afd80709"

    def test_deterministic(self, random_payload):
        assert create_hash(random_payload) == create_hash(bytes(random_payload))
        assert create_hash(bytearray(random_payload)) == create_hash(random_payload)

    def test_verify(self):
        digest = create_hash(b"payload")
        assert verify_hash(b"payload", digest)
        assert not verify_hash(b"Payload", digest)

    def test_rejects_text(self):
        with pytest.raises(InvalidInput):
            create_hash("abc")

    def test_stronger_algorithm(self):
        hasher = ContentHasher("sha256")
        assert len(hasher.hash(b"abc")) == 64

    @pytest.mark.parametrize("algorithm", ["md5", "not-a-hash"])
    def test_rejects_weak_or_unknown_algorithm(self, algorithm):
        with pytest.raises(InvalidParameter):
            ContentHasher(algorithm)
