"""
Unit Tests for Token Utilities

Tests token counting and the token-bounded splitter.
"""

import math

import pytest
import tiktoken

from reflect_translate.errors import SplitError
from reflect_translate.utils.tokens import num_tokens_in_string, split_text_on_tokens

ENGLISH_TEXT = (
    "The quick brown fox jumps over the lazy dog.  It was a bright cold day in April,\n"
    "and the clocks were striking thirteen.\n\n\tIndented line with trailing spaces   \n"
) * 12

MIXED_TEXT = ("翻訳のテストです。😀🎉 naïve café, Ünïcödé 한국어 텍스트\n") * 15


class TestCounting:

    def test_empty_string(self, cl100k):
        assert num_tokens_in_string("") == 0

    def test_matches_encoding(self, cl100k):
        assert num_tokens_in_string(ENGLISH_TEXT) == len(cl100k.encode(ENGLISH_TEXT))

    def test_special_token_text_is_ordinary_text(self, cl100k):
        assert num_tokens_in_string("before <|endoftext|> after") > 3


class TestSplitting:

    def test_empty_text_gives_no_chunks(self, cl100k):
        assert split_text_on_tokens("", 10) == []

    def test_english_round_trip(self, cl100k):
        chunks = split_text_on_tokens(ENGLISH_TEXT, 7)

        assert "".join(chunks) == ENGLISH_TEXT
        assert len(chunks) == math.ceil(len(cl100k.encode(ENGLISH_TEXT)) / 7)

    @pytest.mark.parametrize("chunk_size", [1, 2, 3, 5, 50])
    def test_multibyte_round_trip(self, cl100k, chunk_size):
        chunks = split_text_on_tokens(MIXED_TEXT, chunk_size)

        assert "".join(chunks) == MIXED_TEXT
        assert all(chunks)

    def test_single_chunk_when_size_covers_text(self, cl100k):
        size = len(cl100k.encode(ENGLISH_TEXT))

        assert split_text_on_tokens(ENGLISH_TEXT, size) == [ENGLISH_TEXT]

    def test_overlap_repeats_text(self, cl100k):
        plain = split_text_on_tokens(ENGLISH_TEXT, 10)
        overlapped = split_text_on_tokens(ENGLISH_TEXT, 10, chunk_overlap=3)

        assert overlapped[0] == plain[0]
        assert len(overlapped) > len(plain)
        assert len("".join(overlapped)) > len(ENGLISH_TEXT)


class TestInvalidInput:

    @pytest.mark.parametrize("chunk_size", [0, -1])
    def test_non_positive_chunk_size(self, chunk_size):
        with pytest.raises(SplitError):
            split_text_on_tokens("text", chunk_size)

    @pytest.mark.parametrize("overlap", [-1, 5, 6])
    def test_overlap_out_of_range(self, overlap):
        with pytest.raises(SplitError):
            split_text_on_tokens("text", 5, chunk_overlap=overlap)

    def test_unknown_encoding(self):
        with pytest.raises(SplitError):
            num_tokens_in_string("text", encoding_name="no_such_encoding")

    def test_encoding_download_failure(self, monkeypatch):
        def unreachable(encoding_name):
            raise ConnectionError("openaipublic.blob.core.windows.net unreachable")

        monkeypatch.setattr(tiktoken, "get_encoding", unreachable)

        with pytest.raises(SplitError) as excinfo:
            num_tokens_in_string("text")

        assert isinstance(excinfo.value.__cause__, ConnectionError)


class TestOfflineSplitting:
    """Boundary handling against a byte-per-token encoding, no download needed."""

    @pytest.mark.parametrize("text", [ENGLISH_TEXT, MIXED_TEXT, "é😀áb", "a"])
    @pytest.mark.parametrize("chunk_size", [1, 2, 3])
    def test_round_trip(self, offline_tokens, text, chunk_size):
        chunks = split_text_on_tokens(text, chunk_size)

        assert "".join(chunks) == text
        assert all(chunks)

    def test_multibyte_character_is_never_cut(self, offline_tokens):
        # "😀" is four bytes, so four tokens in this encoding
        chunks = split_text_on_tokens("ab😀cd", 3)

        assert "".join(chunks) == "ab😀cd"
        assert any("😀" in chunk for chunk in chunks)

    def test_ascii_chunk_count(self, offline_tokens):
        chunks = split_text_on_tokens("abcdefghij", 3)

        assert chunks == ["abc", "def", "ghi", "j"]

    def test_count_is_byte_length(self, offline_tokens):
        assert num_tokens_in_string(MIXED_TEXT) == len(MIXED_TEXT.encode("utf-8"))
