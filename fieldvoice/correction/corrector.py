"""Phonetic correction of transcripts against the domain vocabulary."""

import logging
from typing import Optional

from .soundex import soundex
from .vocabulary import Vocabulary

logger = logging.getLogger(__name__)


class VocabularyCorrector:
    """Corrects a transcript token by token.

    For each whitespace-separated token the first matching rule wins:
    stop word (lower-cased, unchanged), synonym substitution (then continue),
    exact case-insensitive vocabulary match (vocabulary casing), Soundex match
    in the context's code map, otherwise the token itself.
    """

    def __init__(self, vocabulary: Optional[Vocabulary] = None):
        self.vocabulary = vocabulary or Vocabulary()

    def correct(self, text: str, context: Optional[str] = None) -> str:
        """Correct ``text`` using the ``shop``, ``product`` or global vocabulary."""
        if not text:
            return ""

        index = self.vocabulary.index_for(context)
        corrected = " ".join(self.correct_word(token, index) for token in text.split())
        if corrected != text:
            logger.debug(f"Corrected ({context or 'global'}): {text!r} -> {corrected!r}")
        return corrected

    def correct_word(self, word, index) -> str:
        lower = word.lower()

        if lower in self.vocabulary.stop_words:
            return lower

        synonym = self.vocabulary.synonyms.get(lower)
        if synonym is not None:
            word = synonym
            lower = synonym.lower()

        exact = index.exact(lower)
        if exact is not None:
            return exact

        phonetic = index.phonetic(soundex(word))
        if phonetic is not None:
            return phonetic

        return word
