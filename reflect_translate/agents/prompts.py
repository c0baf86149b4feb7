from langchain_core.prompts import ChatPromptTemplate


TRANSLATOR_SYSTEM = "You are an expert linguist, specializing in translation from {source_lang} to {target_lang}."

REFLECTOR_SYSTEM = """You are an expert linguist specializing in translation from {source_lang} to {target_lang}.
You will be provided with a source text and its translation and your goal is to improve the translation."""

EDITOR_SYSTEM = "You are an expert linguist, specializing in translation editing from {source_lang} to {target_lang}."

COUNTRY_CLAUSE = "\nThe final style and tone of the translation should match the style of {target_lang} colloquially spoken in {country}."


def country_clause(target_lang: str, country: str) -> str:
    """Locale sentence for the reflection prompts; empty when no country is set."""
    if not country:
        return ""
    return COUNTRY_CLAUSE.format(target_lang=target_lang, country=country)


# 1. Single chunk: the whole text is translated at once

ONE_CHUNK_TRANSLATOR_PROMPT = ChatPromptTemplate.from_messages(
    [
        ("system", TRANSLATOR_SYSTEM),
        (
            "user",
            """This is an {source_lang} to {target_lang} translation, please provide the {target_lang} translation for this text.
Do not provide any explanations or text apart from the translation.
{source_lang}: {source_text}

{target_lang}:""",
        ),
    ]
)


ONE_CHUNK_REFLECTOR_PROMPT = ChatPromptTemplate.from_messages(
    [
        ("system", REFLECTOR_SYSTEM),
        (
            "user",
            """Your task is to carefully read a source text and a translation from {source_lang} to {target_lang}, and then give constructive criticisms and helpful suggestions to improve the translation.{country_clause}

The source text and initial translation, delimited by XML tags <SOURCE_TEXT></SOURCE_TEXT> and <TRANSLATION></TRANSLATION>, are as follows:

<SOURCE_TEXT>
{source_text}
</SOURCE_TEXT>

<TRANSLATION>
{translation_1}
</TRANSLATION>

When writing suggestions, pay attention to whether there are ways to improve the translation's
(i) accuracy (by correcting errors of addition, mistranslation, omission, or untranslated text),
(ii) fluency (by applying {target_lang} grammar, spelling and punctuation rules, and ensuring there are no unnecessary repetitions),
(iii) style (by ensuring the translations reflect the style of the source text and take into account any cultural context),
(iv) terminology (by ensuring terminology use is consistent and reflects the source text domain; and by only ensuring you use equivalent idioms {target_lang}).

Write a list of specific, helpful and constructive suggestions for improving the translation.
Each suggestion should address one specific part of the translation.
Output only the suggestions and nothing else.""",
        ),
    ]
)


ONE_CHUNK_EDITOR_PROMPT = ChatPromptTemplate.from_messages(
    [
        ("system", EDITOR_SYSTEM),
        (
            "user",
            """Your task is to carefully read, then edit, a translation from {source_lang} to {target_lang}, taking into
account a list of expert suggestions and constructive criticisms.

The source text, the initial translation, and the expert linguist suggestions are delimited by XML tags <SOURCE_TEXT></SOURCE_TEXT>, <TRANSLATION></TRANSLATION> and <EXPERT_SUGGESTIONS></EXPERT_SUGGESTIONS>
as follows:

<SOURCE_TEXT>
{source_text}
</SOURCE_TEXT>

<TRANSLATION>
{translation_1}
</TRANSLATION>

<EXPERT_SUGGESTIONS>
{reflection}
</EXPERT_SUGGESTIONS>

Please take into account the expert suggestions when editing the translation. Edit the translation by ensuring:

(i) accuracy (by correcting errors of addition, mistranslation, omission, or untranslated text),
(ii) fluency (by applying {target_lang} grammar, spelling and punctuation rules and ensuring there are no unnecessary repetitions),
(iii) style (by ensuring the translations reflect the style of the source text)
(iv) terminology (inappropriate for context, inconsistent use), or
(v) other errors.

Output only the new translation and nothing else.""",
        ),
    ]
)


# 2. Multi chunk: the whole document is shown, only <TRANSLATE_THIS> is worked on

MULTI_CHUNK_TRANSLATOR_PROMPT = ChatPromptTemplate.from_messages(
    [
        ("system", TRANSLATOR_SYSTEM),
        (
            "user",
            """Your task is to provide a professional translation from {source_lang} to {target_lang} of PART of a text.

The source text is below, delimited by XML tags <SOURCE_TEXT> and </SOURCE_TEXT>. Translate only the part within the source text
delimited by <TRANSLATE_THIS> and </TRANSLATE_THIS>. You can use the rest of the source text as context, but do not translate any
of the other text. Do not output anything other than the translation of the indicated part of the text.

<SOURCE_TEXT>
{tagged_text}
</SOURCE_TEXT>

To reiterate, you should translate only this part of the text, shown here again between <TRANSLATE_THIS> and </TRANSLATE_THIS>:
<TRANSLATE_THIS>
{source_text}
</TRANSLATE_THIS>

Output only the translation of the portion you are asked to translate, and nothing else.""",
        ),
    ]
)


MULTI_CHUNK_REFLECTOR_PROMPT = ChatPromptTemplate.from_messages(
    [
        ("system", REFLECTOR_SYSTEM),
        (
            "user",
            """Your task is to carefully read a source text and part of a translation of that text from {source_lang} to {target_lang}, and then give constructive criticism and helpful suggestions for improving the translation.{country_clause}

The source text is below, delimited by XML tags <SOURCE_TEXT> and </SOURCE_TEXT>, and the part that has been translated
is delimited by <TRANSLATE_THIS> and </TRANSLATE_THIS> within the source text. You can use the rest of the source text
as context for critiquing the translated part.

<SOURCE_TEXT>
{tagged_text}
</SOURCE_TEXT>

To reiterate, only part of the text is being translated, shown here again between <TRANSLATE_THIS> and </TRANSLATE_THIS>:
<TRANSLATE_THIS>
{source_text}
</TRANSLATE_THIS>

The translation of the indicated part, delimited below by <TRANSLATION> and </TRANSLATION>, is as follows:
<TRANSLATION>
{translation_1}
</TRANSLATION>

When writing suggestions, pay attention to whether there are ways to improve the translation's:
(i) accuracy (by correcting errors of addition, mistranslation, omission, or untranslated text),
(ii) fluency (by applying {target_lang} grammar, spelling and punctuation rules, and ensuring there are no unnecessary repetitions),
(iii) style (by ensuring the translations reflect the style of the source text and take into account any cultural context),
(iv) terminology (by ensuring terminology use is consistent and reflects the source text domain; and by only ensuring you use equivalent idioms {target_lang}).

Write a list of specific, helpful and constructive suggestions for improving the translation.
Each suggestion should address one specific part of the translation.
Output only the suggestions and nothing else.""",
        ),
    ]
)


MULTI_CHUNK_EDITOR_PROMPT = ChatPromptTemplate.from_messages(
    [
        ("system", EDITOR_SYSTEM),
        (
            "user",
            """Your task is to carefully read, then improve, a translation from {source_lang} to {target_lang}, taking into
account a set of expert suggestions and constructive criticisms. Below, the source text, initial translation, and expert suggestions are provided.

The source text is below, delimited by XML tags <SOURCE_TEXT> and </SOURCE_TEXT>, and the part that has been translated
is delimited by <TRANSLATE_THIS> and </TRANSLATE_THIS> within the source text. You can use the rest of the source text
as context, but need to provide a translation only of the part indicated by <TRANSLATE_THIS> and </TRANSLATE_THIS>.

<SOURCE_TEXT>
{tagged_text}
</SOURCE_TEXT>

To reiterate, only part of the text is being translated, shown here again between <TRANSLATE_THIS> and </TRANSLATE_THIS>:
<TRANSLATE_THIS>
{source_text}
</TRANSLATE_THIS>

The translation of the indicated part, delimited below by <TRANSLATION> and </TRANSLATION>, is as follows:
<TRANSLATION>
{translation_1}
</TRANSLATION>

The expert translations of the indicated part, delimited below by <EXPERT_SUGGESTIONS> and </EXPERT_SUGGESTIONS>, are as follows:
<EXPERT_SUGGESTIONS>
{reflection}
</EXPERT_SUGGESTIONS>

Taking into account the expert suggestions rewrite the translation to improve it, paying attention
to whether there are ways to improve the translation's

(i) accuracy (by correcting errors of addition, mistranslation, omission, or untranslated text),
(ii) fluency (by applying {target_lang} grammar, spelling and punctuation rules and ensuring there are no unnecessary repetitions),
(iii) style (by ensuring the translations reflect the style of the source text)
(iv) terminology (inappropriate for context, inconsistent use), or
(v) other errors.

Output only the new translation of the indicated part and nothing else.""",
        ),
    ]
)


# (single chunk, multi chunk) per graph node
STAGE_PROMPTS = {
    "translator": (ONE_CHUNK_TRANSLATOR_PROMPT, MULTI_CHUNK_TRANSLATOR_PROMPT),
    "reflector": (ONE_CHUNK_REFLECTOR_PROMPT, MULTI_CHUNK_REFLECTOR_PROMPT),
    "editor": (ONE_CHUNK_EDITOR_PROMPT, MULTI_CHUNK_EDITOR_PROMPT),
}


def get_prompt(stage: str, multi_chunk: bool) -> ChatPromptTemplate:
    one_chunk, multi = STAGE_PROMPTS[stage]
    return multi if multi_chunk else one_chunk
