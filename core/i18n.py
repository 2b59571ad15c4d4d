"""UI label translations.

Keys are the English labels; ``core/translations/<lang>.json`` maps them to
the displayed text. Staff use the app in Spanish, so ``es`` is complete and
other languages fall back to the key itself.
"""
from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Dict, List

TRANSLATIONS_DIR = Path(__file__).resolve().parent / "translations"
DEFAULT_LANGUAGE = "es"


@lru_cache()
def load_translations(lang: str) -> Dict[str, str]:
    path = TRANSLATIONS_DIR / f"{lang}.json"
    try:
        with path.open("r", encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError:
        return {}


def available_languages() -> List[str]:
    """Language codes with a translation file, default language first."""
    found = sorted(p.stem for p in TRANSLATIONS_DIR.glob("*.json"))
    if DEFAULT_LANGUAGE in found:
        found.remove(DEFAULT_LANGUAGE)
        found.insert(0, DEFAULT_LANGUAGE)
    return found


def t(key: str, lang: str = DEFAULT_LANGUAGE) -> str:
    """Label for ``key`` in ``lang``; unknown keys are shown as-is."""
    return load_translations(lang or DEFAULT_LANGUAGE).get(key, key)
