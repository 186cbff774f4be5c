"""Splitting strategies and the text splitter"""

import pytest

from chunkwire.codec.splitter import (
    RawSplitter, Base64Splitter, get_splitter, split_text, join_text, SPLITTERS
)
from chunkwire.errors import InvalidInput, InvalidParameter, ReconstructionFailure


class TestBase64Splitter:
    """Base64 text splitting"""

    @pytest.fixture
    def splitter(self):
        return Base64Splitter()

    @pytest.mark.parametrize("given,chunk_size,expected", [
        ("abcdabcd", 4, ["YWJj", "ZGFi", "Y2Q="]),
        ("abcdef", 4, ["YWJj", "ZGVm"]),
        ("a😊c", 4, ["YfCf", "mIpj"]),
        ("a😊cdefg", 8, ["YfCfmIpj", "ZGVmZw=="]),
        ("😃🐇🐴:!", 4, ["8J+Y", "g/Cf", "kIfw", "n5C0", "OiE="]),
        ("åß∂ƒ©˙∆˚¬…æ", 16, ["w6XDn+KIgsaSwqnL", "meKIhsuawqzigKbD", "pg=="]),
        ("", 4, [""]),
        ("å", 64, ["w6U="]),
    ])
    def test_split_and_join(self, splitter, given, chunk_size, expected):
        result = splitter.split(given.encode('utf-8'), chunk_size)
        assert result == expected
        assert splitter.join(result).decode('utf-8') == given

    def test_fragments_respect_budget(self, splitter, random_payload):
        fragments = splitter.split(random_payload, 100)
        assert all(len(f.encode('utf-8')) <= 100 for f in fragments)
        assert splitter.join(fragments) == random_payload

    @pytest.mark.parametrize("chunk_size", [0, 3, 5, 2, -4, 4.0, True, "8", None])
    def test_invalid_chunk_size(self, splitter, chunk_size):
        with pytest.raises(InvalidParameter):
            splitter.split(b"abc", chunk_size)

    def test_rejects_text_payload(self, splitter):
        with pytest.raises(InvalidInput):
            splitter.split("abc", 4)

    def test_join_rejects_bad_base64(self, splitter):
        with pytest.raises(ReconstructionFailure):
            splitter.join(["YWJ", "!!!!"])

    def test_join_rejects_non_list(self, splitter):
        with pytest.raises(InvalidInput):
            splitter.join("YWJj")

    def test_one_fragment_bound_is_encoded_length(self, splitter):
        assert splitter.split(b"abc", 4) == ["YWJj"]
        assert splitter.split(b"abcd", 4) == ["YWJj", "ZA=="]
        assert splitter.split(b"abcd", 8) == ["YWJjZA=="]

    @pytest.mark.parametrize("data", [None, 42, b"YWJj", ["YWJj"]])
    def test_check_fragment_rejects_non_text(self, splitter, data):
        with pytest.raises(InvalidInput):
            splitter.check_fragment(data)
        splitter.check_fragment("YWJj")


class TestRawSplitter:
    """Raw byte slicing"""

    @pytest.fixture
    def splitter(self):
        return RawSplitter()

    def test_split_sizes(self, splitter):
        result = splitter.split(b"abcdef", 4)
        assert result == [b"abcd", b"ef"]
        assert [len(f) for f in result] == [4, 2]
        assert splitter.join(result) == b"abcdef"

    def test_empty_payload_yields_one_fragment(self, splitter):
        assert splitter.split(b"", 10) == [b""]
        assert splitter.join([b""]) == b""

    def test_small_payload_yields_one_fragment(self, splitter):
        assert splitter.split(b"abc", 3) == [b"abc"]
        assert splitter.split(b"abc", 1000) == [b"abc"]

    def test_odd_chunk_size_allowed(self, splitter, random_payload):
        fragments = splitter.split(random_payload, 3)
        assert len(fragments) == -(-len(random_payload) // 3)
        assert all(len(f) <= 3 for f in fragments)
        assert splitter.join(fragments) == random_payload

    def test_deterministic(self, splitter, random_payload):
        assert splitter.split(random_payload, 77) == splitter.split(random_payload, 77)

    @pytest.mark.parametrize("chunk_size", [0, -1, 1.5, False, None])
    def test_invalid_chunk_size(self, splitter, chunk_size):
        with pytest.raises(InvalidParameter):
            splitter.split(b"abc", chunk_size)

    def test_rejects_text_payload(self, splitter):
        with pytest.raises(InvalidInput):
            splitter.split("abcdef", 4)

    def test_join_rejects_text_fragments(self, splitter):
        with pytest.raises(InvalidInput):
            splitter.join(["abcd", "ef"])

    @pytest.mark.parametrize("data", [None, "abcd", [97]])
    def test_check_fragment_rejects_non_bytes(self, splitter, data):
        with pytest.raises(InvalidInput):
            splitter.check_fragment(data)
        splitter.check_fragment(b"abcd")


class TestTextSplitter:
    """Splitting plain strings without breaking characters"""

    @pytest.mark.parametrize("given,chunk_size,expected", [
        ("abcdabcd", 4, ["abcd", "abcd"]),
        ("a😊c", 4, ["a", "😊", "c"]),
        ("a😊cdefg", 8, ["a😊cde", "fg"]),
        ("😃🐇🐴:!", 4, ["😃", "🐇", "🐴", ":!"]),
        ("åß∂ƒ©˙∆˚¬…æ", 16, ["åß∂ƒ©˙∆", "˚¬…æ"]),
        ("", 4, [""]),
        ("å", 64, ["å"]),
    ])
    def test_split_and_join(self, given, chunk_size, expected):
        result = split_text(given, chunk_size)
        assert result == expected
        assert join_text(result) == given

    def test_rejects_bytes(self):
        with pytest.raises(InvalidInput):
            split_text(b"abc", 4)

    def test_rejects_odd_size(self):
        with pytest.raises(InvalidParameter):
            split_text("abc", 3)


class TestRegistry:

    def test_lookup(self):
        assert isinstance(get_splitter("raw"), RawSplitter)
        assert isinstance(get_splitter("base64"), Base64Splitter)
        assert isinstance(get_splitter(), Base64Splitter)
        assert set(SPLITTERS) == {"raw", "base64"}

    def test_unknown_encoding(self):
        with pytest.raises(InvalidParameter):
            get_splitter("hex")
