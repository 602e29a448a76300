"""
Question-count parsing for the "N questões" annotations on subject pages.
"""

import re
from typing import Optional

# Phrases the site renders instead of "1 questão"
ONE_QUESTION_PHRASES = frozenset({
    "uma questão",
    "uma questao",
    "one question",
})

_DIGITS = re.compile(r"(\d+)")
_WHITESPACE = re.compile(r"\s+")


def parse_question_count(text: Optional[str]) -> int:
    """
    Turn a free-text count annotation into an integer.

    Returns 1 for the "one question" phrase, otherwise the first run of
    digits.  Missing, empty or digit-less text yields 0; never raises.
    """
    if not text:
        return 0

    normalized = _WHITESPACE.sub(" ", text).strip().lower()
    if not normalized:
        return 0

    if normalized in ONE_QUESTION_PHRASES:
        return 1

    match = _DIGITS.search(normalized)
    if not match:
        return 0
    return int(match.group(1))
