"""
Convenience entrypoint for the translator CLI.

Usage:
    python run_translate.py --source data/input/article.md --source-lang English --target-lang Spanish --country Mexico
"""

from reflect_translate.main import main


if __name__ == "__main__":
    raise SystemExit(main())
