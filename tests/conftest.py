"""
Pytest Configuration and Shared Fixtures

Provides a recording fake chat model and a guard for tests that need the
real tiktoken encoding file, plus a byte-level encoding for offline runs.
"""

# Standard library
import re
from typing import Callable, List, Optional

# Third-party
import pytest
import tiktoken
from langchain_core.messages import AIMessage, BaseMessage

RESTATED_CHUNK_RE = re.compile(
    r"shown here again between <TRANSLATE_THIS> and </TRANSLATE_THIS>:\n<TRANSLATE_THIS>\n(.*?)\n</TRANSLATE_THIS>\n\n",
    re.DOTALL,
)


class RecordingChatModel:
    """
    Stands in for a LangChain chat model.

    Every ainvoke() call is recorded. Replies come from `responses` (by call
    order) or from `responder(messages, call_number)`. When `fail_on` matches
    the 1-based call number, `error` is raised instead.
    """

    def __init__(
        self,
        responses: Optional[List[str]] = None,
        responder: Optional[Callable[[List[BaseMessage], int], str]] = None,
        fail_on: Optional[int] = None,
        error: Optional[Exception] = None,
    ):
        self.responses = list(responses or [])
        self.responder = responder
        self.fail_on = fail_on
        self.error = error or ConnectionError("model endpoint unreachable")
        self.calls: List[List[BaseMessage]] = []

    async def ainvoke(self, messages, config=None, **kwargs):
        self.calls.append(list(messages))
        call_number = len(self.calls)
        if self.fail_on == call_number:
            raise self.error
        if self.responder is not None:
            return AIMessage(content=self.responder(messages, call_number))
        if call_number <= len(self.responses):
            return AIMessage(content=self.responses[call_number - 1])
        return AIMessage(content=f"response {call_number}")

    def system_prompt(self, index: int) -> str:
        return self.calls[index][0].content

    def user_prompt(self, index: int) -> str:
        return self.calls[index][-1].content


def restated_chunk(messages: List[BaseMessage]) -> str:
    """Pull the isolated chunk back out of a multi-chunk user prompt."""
    match = RESTATED_CHUNK_RE.search(messages[-1].content)
    assert match, "prompt does not restate a <TRANSLATE_THIS> chunk"
    return match.group(1)


@pytest.fixture
def recording_model():
    """Factory fixture: recording_model(responses=..., responder=..., fail_on=...)."""
    return RecordingChatModel


@pytest.fixture(scope="session")
def cl100k():
    """The cl100k_base encoding; tests using it are skipped when it cannot be loaded."""
    try:
        return tiktoken.get_encoding("cl100k_base")
    except Exception as e:
        pytest.skip(f"cl100k_base encoding unavailable: {e}")


@pytest.fixture
def echo_chunk_responder():
    """Responder that "translates" a multi-chunk prompt by echoing its chunk."""
    def respond(messages, call_number):
        return restated_chunk(messages)
    return respond


@pytest.fixture(scope="session")
def byte_level_encoding():
    """A byte-per-token encoding that needs no download."""
    return tiktoken.Encoding(
        name="byte_level_test",
        pat_str=r"\s+|\S+",
        mergeable_ranks={bytes([i]): i for i in range(256)},
        special_tokens={},
    )


@pytest.fixture
def offline_tokens(monkeypatch, byte_level_encoding):
    """Route every token count and split through the byte-level encoding."""
    import reflect_translate.utils.tokens as tokens

    monkeypatch.setattr(tokens, "get_encoding", lambda encoding_name=tokens.DEFAULT_ENCODING_NAME: byte_level_encoding)
    return byte_level_encoding
