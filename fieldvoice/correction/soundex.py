"""Soundex phonetic codes."""

from typing import Dict, Optional

SOUNDEX_LENGTH = 4

# Letters with an empty code are skipped and do not reset the previous digit.
_CODES: Dict[str, str] = {
    **dict.fromkeys("aeiouyhw", ""),
    **dict.fromkeys("bfpv", "1"),
    **dict.fromkeys("cgjkqsxz", "2"),
    **dict.fromkeys("dt", "3"),
    "l": "4",
    **dict.fromkeys("mn", "5"),
    "r": "6",
}


def soundex(word: str) -> str:
    """Return the 4-character Soundex code of ``word``.

    The first character is kept (upper-cased). Following letters map to
    digits; a digit equal to the previous one is not repeated. Vowels, y, h
    and w add nothing and leave the previous digit in place, so ``Schmit``
    and ``Smith`` share ``S530``. Characters outside the table (digits,
    punctuation) add nothing but clear the previous digit.
    """
    if not word:
        return ""

    lower = word.lower()
    digits = []
    prev: Optional[str] = _CODES.get(lower[0]) or None

    for char in lower[1:]:
        code = _CODES.get(char)
        if code and code != prev:
            digits.append(code)
        if code != "":
            prev = code

    return (lower[0].upper() + "".join(digits) + "0" * SOUNDEX_LENGTH)[:SOUNDEX_LENGTH]


def build_soundex_map(words) -> Dict[str, str]:
    """Map Soundex code -> word. The first word with a given code wins."""
    code_map: Dict[str, str] = {}
    for word in words:
        code = soundex(word)
        if code and code not in code_map:
            code_map[code] = word
    return code_map
