from dataclasses import dataclass
from typing import TypedDict, Optional


DEFAULT_MAX_TOKENS = 1000


@dataclass(frozen=True)
class TranslationRequest:
    """One translate() call's inputs. `country` of "" means no locale."""
    source_lang: str
    target_lang: str
    source_text: str
    country: str = ""
    max_tokens: int = DEFAULT_MAX_TOKENS

    def __post_init__(self):
        if self.max_tokens <= 0:
            raise ValueError(f"max_tokens must be positive, got {self.max_tokens}")


class ChunkTranslationState(TypedDict):
    """
    Represents the state of the translate -> reflect -> improve graph for one chunk.
    """
    source_lang: str
    target_lang: str
    country: str
    source_text: str              # The chunk (or whole text) to translate
    tagged_text: Optional[str]    # Full document with the chunk delimited; None for single-chunk

    # Stage outputs, each written once
    initial_translation: Optional[str]
    critique: Optional[str]
    final_translation: Optional[str]
