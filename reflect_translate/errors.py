"""
Exception types raised by the translation pipeline.

Nothing in the pipeline catches these: a failed stage aborts the whole
translate() call and the error reaches the caller.
"""


class TranslateError(Exception):
    """Base class for all reflect_translate errors."""


class ConfigurationError(TranslateError):
    """Missing credential or unreadable/invalid configuration."""


class SplitError(TranslateError):
    """The tokenizer or splitter rejected its input."""


class TranslationServiceError(TranslateError):
    """
    A model invocation failed (network, auth, quota, malformed response).

    The original exception is chained as __cause__. `stage` names the graph
    node that was running and is informational only.
    """

    def __init__(self, message: str, stage: str = ""):
        super().__init__(message)
        self.stage = stage
