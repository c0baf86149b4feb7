"""
Token counting and token-bounded text splitting (tiktoken).

Chunks are cut at the character where a boundary token starts, so with no
overlap the chunks concatenate back to the input exactly, whitespace and
multi-byte characters included.
"""

from __future__ import annotations

import tiktoken

from reflect_translate.errors import SplitError

DEFAULT_ENCODING_NAME = "cl100k_base"


def get_encoding(encoding_name: str = DEFAULT_ENCODING_NAME) -> tiktoken.Encoding:
    try:
        return tiktoken.get_encoding(encoding_name)
    except ValueError as e:
        raise SplitError(f"Unknown token encoding: {encoding_name}") from e
    except Exception as e:
        # The BPE file is downloaded on first use; offline or unreadable caches fail here.
        raise SplitError(f"Could not load token encoding {encoding_name}: {e}") from e


def _encode(encoding: tiktoken.Encoding, text: str) -> list[int]:
    # Special-token text such as "<|endoftext|>" is counted as ordinary text.
    return encoding.encode(text, disallowed_special=())


def num_tokens_in_string(input_str: str, encoding_name: str = DEFAULT_ENCODING_NAME) -> int:
    """
    Count the tokens in a string.

    Example:
        >>> num_tokens_in_string("Hello, how are you?")
        6
    """
    return len(_encode(get_encoding(encoding_name), input_str))


def split_text_on_tokens(
    text: str,
    chunk_size: int,
    chunk_overlap: int = 0,
    encoding_name: str = DEFAULT_ENCODING_NAME,
) -> list[str]:
    """
    Split text into ordered chunks of at most `chunk_size` tokens.

    Consecutive chunks share `chunk_overlap` tokens. With the default overlap
    of 0 the chunks cover the text with no gaps and no repeats.
    """
    if chunk_size <= 0:
        raise SplitError(f"chunk_size must be positive, got {chunk_size}")
    if chunk_overlap < 0 or chunk_overlap >= chunk_size:
        raise SplitError(
            f"chunk_overlap must be in [0, chunk_size), got {chunk_overlap} for chunk_size {chunk_size}"
        )

    encoding = get_encoding(encoding_name)
    token_ids = _encode(encoding, text)
    if not token_ids:
        return []

    decoded, offsets = encoding.decode_with_offsets(token_ids)
    if decoded != text:
        raise SplitError("Text does not survive a tokenizer round trip (invalid unicode?)")
    offsets.append(len(text))

    chunks: list[str] = []
    n_tokens = len(token_ids)
    start = 0
    while start < n_tokens:
        end = min(start + chunk_size, n_tokens)
        # Empty when one character spans the whole window; it goes to the next chunk.
        piece = text[offsets[start]:offsets[end]]
        if piece:
            chunks.append(piece)
        if end == n_tokens:
            break
        start = end - chunk_overlap

    return chunks
