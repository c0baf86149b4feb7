import logging

from langgraph.graph import StateGraph, END
from langchain_core.output_parsers import StrOutputParser

from reflect_translate.agents.state import ChunkTranslationState
from reflect_translate.agents.prompts import country_clause, get_prompt
from reflect_translate.errors import TranslationServiceError

logger = logging.getLogger(__name__)

TAG_OPEN = "<TRANSLATE_THIS>"
TAG_CLOSE = "</TRANSLATE_THIS>"


def tag_chunk(chunks: list[str], index: int) -> str:
    """Rebuild the full document with chunk `index` wrapped in TRANSLATE_THIS tags."""
    return "".join(chunks[:index]) + TAG_OPEN + chunks[index] + TAG_CLOSE + "".join(chunks[index + 1:])


def _prompt_variables(state: ChunkTranslationState) -> dict:
    return {
        "source_lang": state["source_lang"],
        "target_lang": state["target_lang"],
        "source_text": state["source_text"],
        "tagged_text": state.get("tagged_text") or "",
        "translation_1": state.get("initial_translation") or "",
        "reflection": state.get("critique") or "",
        "country_clause": country_clause(state["target_lang"], state.get("country", "")),
    }


async def _call_llm(llm, stage: str, state: ChunkTranslationState) -> str:
    """Render the stage prompt, invoke the model once, and return its text."""
    prompt = get_prompt(stage, multi_chunk=state.get("tagged_text") is not None)
    messages = prompt.format_messages(**_prompt_variables(state))
    # CancelledError is not an Exception and is not wrapped; langgraph
    # re-raises it out of ainvoke() as NodeCancelledError.
    try:
        response = await llm.ainvoke(messages)
        return StrOutputParser().invoke(response)
    except Exception as e:
        raise TranslationServiceError(f"{stage} call failed: {e}", stage=stage) from e


def build_graph(llm):
    """Build and compile the 3-step workflow graph (translator -> reflector -> editor)."""

    async def translate_node(state: ChunkTranslationState):
        """Agent 1: initial translation"""
        return {"initial_translation": await _call_llm(llm, "translator", state)}

    async def reflect_node(state: ChunkTranslationState):
        """Agent 2: critique of the initial translation"""
        return {"critique": await _call_llm(llm, "reflector", state)}

    async def improve_node(state: ChunkTranslationState):
        """Agent 3: rewrite the translation following the critique"""
        return {"final_translation": await _call_llm(llm, "editor", state)}

    workflow = StateGraph(ChunkTranslationState)

    workflow.add_node("translator", translate_node)
    workflow.add_node("reflector", reflect_node)
    workflow.add_node("editor", improve_node)

    workflow.set_entry_point("translator")
    workflow.add_edge("translator", "reflector")
    workflow.add_edge("reflector", "editor")
    workflow.add_edge("editor", END)

    return workflow.compile()


def _initial_state(source_lang, target_lang, source_text, country, tagged_text=None) -> ChunkTranslationState:
    return {
        "source_lang": source_lang,
        "target_lang": target_lang,
        "country": country or "",
        "source_text": source_text,
        "tagged_text": tagged_text,
        "initial_translation": None,
        "critique": None,
        "final_translation": None,
    }


async def one_chunk_translate_text(llm, source_lang: str, target_lang: str, source_text: str, country: str = "") -> str:
    """
    Translate a text as a single chunk: initial translation, reflection, improvement.

    Returns the improved translation. Any failing stage raises
    TranslationServiceError and nothing is returned.
    """
    app = build_graph(llm)
    result = await app.ainvoke(_initial_state(source_lang, target_lang, source_text, country))
    return result["final_translation"]


async def multichunk_translation(
    llm,
    source_lang: str,
    target_lang: str,
    source_text_chunks: list[str],
    country: str = "",
) -> list[str]:
    """
    Translate each chunk with the whole document as context.

    Chunks run one after another through the same three stages; the result
    list is aligned with `source_text_chunks`.
    """
    app = build_graph(llm)
    translations: list[str] = []
    total = len(source_text_chunks)
    for i, chunk in enumerate(source_text_chunks):
        state = _initial_state(source_lang, target_lang, chunk, country, tagged_text=tag_chunk(source_text_chunks, i))
        result = await app.ainvoke(state)
        logger.debug("chunk %d/%d translation: %s", i + 1, total, result["final_translation"])
        translations.append(result["final_translation"])
    return translations
