import re
from typing import Optional

# Zero-width space/non-joiner/joiner, word joiner, BOM
_INVISIBLE = re.compile("[\u200b-\u200d\u2060\ufeff]")
# \s is Unicode-aware and includes the ideographic space (U+3000)
_WHITESPACE_RUN = re.compile(r"\s+")


def canonicalize(text: Optional[str]) -> str:
    """Lookup form of a scraped name: invisible characters removed,
    whitespace runs collapsed to one ASCII space, ends trimmed."""
    if not text:
        return ""
    text = _INVISIBLE.sub("", text)
    text = _WHITESPACE_RUN.sub(" ", text)
    return text.strip()
