"""
pipeline.py - Translate facade.

Texts under the token budget go through the translate -> reflect -> improve
graph once. Longer texts are split into near-equal token chunks, each chunk
is run through the graph with the full document as context, and the chunk
translations are joined back together in order.
"""

import logging
import math
from typing import Optional

from reflect_translate.agents.llm import get_default_llm
from reflect_translate.agents.state import DEFAULT_MAX_TOKENS, TranslationRequest
from reflect_translate.agents.workflow import multichunk_translation, one_chunk_translate_text
from reflect_translate.utils.config_loader import get_section, load_config
from reflect_translate.utils.tokens import DEFAULT_ENCODING_NAME, num_tokens_in_string, split_text_on_tokens

logger = logging.getLogger(__name__)


def calculate_chunk_size(token_count: int, token_limit: int) -> int:
    """
    Size chunks so the text splits into the fewest chunks of near-equal size.

    Example:
        >>> calculate_chunk_size(1000, 500)
        500
        >>> calculate_chunk_size(2500, 1000)
        834
    """
    if token_limit <= 0:
        raise ValueError(f"token_limit must be positive, got {token_limit}")
    if token_count <= token_limit:
        return token_count

    num_chunks = math.ceil(token_count / token_limit)
    # The leftover of the base division is spread one token per chunk.
    return math.ceil(token_count / num_chunks)


def configured_encoding_name(config=None) -> str:
    """The `translation.encoding` setting, falling back to cl100k_base."""
    if config is None:
        config = load_config()
    return str(get_section(config, "translation").get("encoding") or DEFAULT_ENCODING_NAME)


async def translate_request(request: TranslationRequest, model=None, encoding_name: Optional[str] = None) -> str:
    """
    Translate `request.source_text`; see translate().

    `encoding_name` defaults to the configured `translation.encoding`.
    """
    if model is None:
        model = get_default_llm()
    if encoding_name is None:
        encoding_name = configured_encoding_name()

    num_tokens_in_text = num_tokens_in_string(request.source_text, encoding_name)
    logger.info("num_tokens_in_text=%d max_tokens=%d", num_tokens_in_text, request.max_tokens)

    if num_tokens_in_text < request.max_tokens:
        logger.info("Translating text as a single chunk")
        return await one_chunk_translate_text(
            model, request.source_lang, request.target_lang, request.source_text, request.country
        )

    token_size = calculate_chunk_size(num_tokens_in_text, request.max_tokens)
    source_text_chunks = split_text_on_tokens(
        request.source_text,
        token_size,
        chunk_overlap=0,
        encoding_name=encoding_name,
    )
    logger.info("Translating text as %d chunks of ~%d tokens", len(source_text_chunks), token_size)

    translation_chunks = await multichunk_translation(
        model, request.source_lang, request.target_lang, source_text_chunks, request.country
    )
    return "".join(translation_chunks)


async def translate(
    source_lang: str,
    target_lang: str,
    source_text: str,
    country: str = "",
    model=None,
    max_tokens: int = DEFAULT_MAX_TOKENS,
) -> str:
    """
    Translate source_text from source_lang to target_lang.

    Args:
        source_lang: Name of the source language, e.g. "English".
        target_lang: Name of the target language, e.g. "Spanish".
        source_text: The text to translate.
        country: Country whose colloquial variant of target_lang the
            reflection stage should aim for; "" for none.
        model: A LangChain chat model. When None, the default model is built
            from config and the OPENAI_API_KEY environment variable.
        max_tokens: Token budget. Texts with at least this many tokens are
            translated in chunks.

    Returns:
        The translation. There is no partial result: any failure raises
        (TranslationServiceError, SplitError, ConfigurationError).
    """
    request = TranslationRequest(
        source_lang=source_lang,
        target_lang=target_lang,
        source_text=source_text,
        country=country or "",
        max_tokens=max_tokens,
    )
    return await translate_request(request, model=model)
