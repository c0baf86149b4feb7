import argparse
import asyncio
import os
import sys
from pathlib import Path

from reflect_translate.agents.state import DEFAULT_MAX_TOKENS, TranslationRequest
from reflect_translate.errors import TranslateError
from reflect_translate.pipeline import configured_encoding_name, translate_request
from reflect_translate.utils.config_loader import get_section, load_config
from reflect_translate.utils.logging_utils import setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Reflective LLM translation: translate, critique, improve")
    parser.add_argument("--source", "-s", required=True, help="Path to the source text or Markdown file")
    parser.add_argument("--source-lang", default=None, help="Source language name (e.g. English)")
    parser.add_argument("--target-lang", default=None, help="Target language name (e.g. Spanish)")
    parser.add_argument("--country", default=None, help="Country for the colloquial target variant (optional)")
    parser.add_argument("--max-tokens", type=int, default=None, help="Token budget before the text is chunked")
    parser.add_argument("--output", "-o", default=None, help="Output path (default: <output dir>/<name>_<lang>.md)")
    parser.add_argument("--config", default=None, help="Path to config.yaml")
    parser.add_argument("--log-level", default=None, help="Logging level (DEBUG shows chunk translations)")
    return parser


def _default_output_path(config: dict, source: str, target_lang: str) -> str:
    output_dir = get_section(config, "directories").get("output", "output")
    base_name = os.path.splitext(os.path.basename(source))[0]
    lang_suffix = target_lang.strip().lower().replace(" ", "_")
    return os.path.join(output_dir, f"{base_name}_{lang_suffix}.md")


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config, required=args.config is not None)
    except TranslateError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    translation_config = get_section(config, "translation")
    logs_dir = get_section(config, "directories").get("logs")
    log_level = args.log_level or get_section(config, "logging").get("level", "INFO")
    setup_logging(level=log_level, log_file=Path(logs_dir) / "translate.log" if logs_dir else None)

    source_lang = args.source_lang or translation_config.get("source_lang", "English")
    target_lang = args.target_lang or translation_config.get("target_lang")
    if not target_lang:
        print("Error: --target-lang is required (or set translation.target_lang in config)", file=sys.stderr)
        return 1
    country = args.country if args.country is not None else translation_config.get("country", "")
    if args.max_tokens is not None:
        max_tokens = args.max_tokens
    else:
        max_tokens = int(translation_config.get("max_tokens", DEFAULT_MAX_TOKENS))
    encoding_name = configured_encoding_name(config)

    # Read source file
    if not os.path.exists(args.source):
        print(f"Error: Source file not found: {args.source}", file=sys.stderr)
        return 1

    with open(args.source, "r", encoding="utf-8") as f:
        source_text = f.read()

    print(f"Loaded source: {args.source} ({len(source_text)} chars)")
    print(f"Translating {source_lang} -> {target_lang}" + (f" ({country})" if country else ""))

    try:
        request = TranslationRequest(
            source_lang=source_lang,
            target_lang=target_lang,
            source_text=source_text,
            country=country or "",
            max_tokens=max_tokens,
        )
        translation = asyncio.run(translate_request(request, encoding_name=encoding_name))
    except (TranslateError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    output_path = args.output or _default_output_path(config, args.source, target_lang)
    os.makedirs(os.path.dirname(output_path) or ".", exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as f:
        f.write(translation)

    print("\n=== Translation Complete ===")
    print(f"Output: {output_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
