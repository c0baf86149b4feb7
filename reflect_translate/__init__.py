from reflect_translate.agents.state import TranslationRequest
from reflect_translate.errors import ConfigurationError, SplitError, TranslateError, TranslationServiceError
from reflect_translate.pipeline import calculate_chunk_size, translate, translate_request

__all__ = [
    "ConfigurationError",
    "SplitError",
    "TranslateError",
    "TranslationRequest",
    "TranslationServiceError",
    "calculate_chunk_size",
    "translate",
    "translate_request",
]
