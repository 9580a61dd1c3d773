"""Vocabulary correction of transcripts."""

from .soundex import soundex, build_soundex_map
from .vocabulary import Vocabulary, WordIndex, SHOP_CONTEXT, PRODUCT_CONTEXT
from .corrector import VocabularyCorrector

__all__ = [
    "soundex",
    "build_soundex_map",
    "Vocabulary",
    "WordIndex",
    "SHOP_CONTEXT",
    "PRODUCT_CONTEXT",
    "VocabularyCorrector",
]
