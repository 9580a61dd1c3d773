"""Resolves a transcript to a page-scoped command or a trigger-fill value."""

import math
import logging
from typing import Dict, Iterable, List, Optional, Tuple

from ..correction.corrector import VocabularyCorrector
from ..correction.vocabulary import PRODUCT_CONTEXT, SHOP_CONTEXT
from ..errors import EmbeddingNotReady
from ..models.catalog import CommandRecord, ProductRecord, ShopRecord
from ..models.commands import CatalogEntry, CommandDescriptor, MatchResult
from .embedding import AbstractEmbeddingBackend
from .index import CommandIndex
from .similarity import cosine_similarity

logger = logging.getLogger(__name__)

DEFAULT_COMMAND_THRESHOLD = 0.32
DEFAULT_QUICK_THRESHOLD = 0.25

# Input-trigger commands and the correction context used for the value
# spoken after them. None means the global vocabulary.
TRIGGER_CONTEXTS: Dict[str, Optional[str]] = {
    "search-for-shop-name": SHOP_CONTEXT,
    "add-name": PRODUCT_CONTEXT,
    "add-category": PRODUCT_CONTEXT,
    "add-brand": PRODUCT_CONTEXT,
    "add-manufacturer": PRODUCT_CONTEXT,
    "add-price": None,
    "add-quantity": None,
}


def best_match(vector, candidates: Iterable[CommandDescriptor]) -> Tuple[Optional[CommandDescriptor], float]:
    """Highest-scoring candidate; ties go to the first one seen."""
    best: Optional[CommandDescriptor] = None
    best_score = -math.inf
    for candidate in candidates:
        score = cosine_similarity(vector, candidate.embedding, candidate.magnitude)
        if score > best_score:
            best, best_score = candidate, score
    return best, best_score


class SemanticMatcher:
    """Embedding-similarity command matcher with trigger-fill continuation.

    Holds the trigger state: the id of the last matched input-trigger
    command. While a trigger is active, utterances that match no command are
    returned as the value for that trigger's field.
    """

    def __init__(self,
                 backend: AbstractEmbeddingBackend,
                 corrector: Optional[VocabularyCorrector] = None,
                 index: Optional[CommandIndex] = None,
                 threshold: float = DEFAULT_COMMAND_THRESHOLD,
                 quick_threshold: float = DEFAULT_QUICK_THRESHOLD,
                 trigger_contexts: Optional[Dict[str, Optional[str]]] = None):
        """Initialize the matcher.

        Args:
            backend: Embedding backend
            corrector: Vocabulary corrector; a default one is created if omitted
            index: Prebuilt index; otherwise call build_index() before matching
            threshold: Minimum similarity for a command match
            quick_threshold: Minimum similarity for quick_match()
            trigger_contexts: Trigger command id -> correction context
        """
        self.backend = backend
        self.corrector = corrector or VocabularyCorrector()
        self.index = index
        self.threshold = threshold
        self.quick_threshold = quick_threshold
        self.trigger_contexts = dict(TRIGGER_CONTEXTS if trigger_contexts is None else trigger_contexts)
        self._active_trigger: Optional[str] = None

    @property
    def is_ready(self) -> bool:
        return self.index is not None and self.backend.is_ready

    @property
    def active_trigger(self) -> Optional[str]:
        return self._active_trigger

    def clear_trigger(self) -> None:
        if self._active_trigger:
            logger.info(f"Trigger cleared: {self._active_trigger}")
        self._active_trigger = None

    async def build_index(self,
                          commands: Iterable[CommandRecord],
                          products: Iterable[ProductRecord] = (),
                          shops: Iterable[ShopRecord] = ()) -> CommandIndex:
        self.index = await CommandIndex.build(
            self.backend, commands, products, shops,
            trigger_ids=self.trigger_contexts.keys(),
        )
        return self.index

    async def match(self, text: str, page: str, threshold: Optional[float] = None) -> MatchResult:
        """Resolve a raw transcript on ``page``.

        Returns a MatchResult whose ``command`` is the matched id, or None with
        ``fill_trigger`` set when the text fills the active trigger's field,
        or None with no trigger when the utterance should be ignored.
        """
        if not text or not text.strip():
            return MatchResult(command=None, corrected_text="")

        if not self.is_ready:
            logger.debug("Matcher not ready; passing text through")
            return MatchResult(command=None, corrected_text=text)

        threshold = self.threshold if threshold is None else threshold
        corrected = self.corrector.correct(text)
        logger.info(f"ASR input: {text!r} -> corrected: {corrected!r} (page {page})")

        try:
            vector = await self.backend.embed(corrected)
        except EmbeddingNotReady:
            logger.debug("Embedding backend not ready; passing text through")
            return MatchResult(command=None, corrected_text=text)

        best, score = best_match(vector, self.index.candidates(page))
        if best is None:
            score = 0.0
        logger.info(f"Command search => best match: {best.command_id if best else None} "
                    f"| score: {score:.3f}")

        if best is not None and score >= threshold:
            if best.is_trigger:
                logger.info(f"Trigger command detected: {best.command_id}")
                self._active_trigger = best.command_id
            else:
                self.clear_trigger()
            return MatchResult(command=best.command_id, corrected_text=corrected, score=score)

        trigger = self._active_trigger
        if trigger is None:
            return MatchResult(command=None, corrected_text=corrected, score=score)

        context = self.trigger_contexts.get(trigger)
        filled = self.corrector.correct(text, context)
        logger.info(f"Below threshold; filling {trigger} with {filled!r} "
                    f"(context: {context or 'none'})")
        return MatchResult(command=None, corrected_text=filled,
                           score=score, fill_trigger=trigger)

    async def quick_match(self, text: str, page: str) -> Optional[str]:
        """Score the uncorrected text against page commands using the quick threshold.

        Leaves the trigger state untouched. Returns the command id or None.
        """
        if not text or not text.strip() or not self.is_ready:
            return None
        try:
            vector = await self.backend.embed(text)
        except EmbeddingNotReady:
            return None

        best, score = best_match(vector, self.index.candidates(page))
        if best is not None and score >= self.quick_threshold:
            return best.command_id
        return None

    async def search_catalog(self, text: str, kind: Optional[str] = None,
                             top_k: int = 5) -> List[Tuple[CatalogEntry, float]]:
        """Catalog entries most similar to ``text``, best first."""
        if not text or not text.strip() or not self.is_ready:
            return []
        try:
            vector = await self.backend.embed(self.corrector.correct(text, kind))
        except EmbeddingNotReady:
            return []

        scored = [(entry, cosine_similarity(vector, entry.embedding, entry.magnitude))
                  for entry in self.index.catalog_entries(kind)]
        scored.sort(key=lambda pair: pair[1], reverse=True)
        return scored[:top_k]
