"""Precomputed embeddings for commands and catalog records."""

import logging
from typing import Iterable, List, Optional, Sequence

import numpy as np

from ..models.catalog import CommandRecord, ProductRecord, ShopRecord
from ..models.commands import CatalogEntry, CommandDescriptor
from .embedding import AbstractEmbeddingBackend
from .similarity import magnitude

logger = logging.getLogger(__name__)


def _freeze(vector: np.ndarray) -> np.ndarray:
    vector = np.array(vector, dtype=np.float64)
    vector.setflags(write=False)
    return vector


class CommandIndex:
    """Command descriptors and catalog entries, immutable once built."""

    def __init__(self,
                 descriptors: Sequence[CommandDescriptor],
                 catalog: Sequence[CatalogEntry] = ()):
        self.descriptors = tuple(descriptors)
        self.catalog = tuple(catalog)

    @classmethod
    async def build(cls,
                    backend: AbstractEmbeddingBackend,
                    commands: Iterable[CommandRecord],
                    products: Iterable[ProductRecord] = (),
                    shops: Iterable[ShopRecord] = (),
                    trigger_ids: Iterable[str] = ()) -> "CommandIndex":
        """Embed every command description and catalog record once.

        Args:
            backend: Embedding backend, must be ready
            commands: Command catalog
            products: Product records, embedded as "name brand manufacturer"
            shops: Shop records, embedded as "name address"
            trigger_ids: Command ids that open an input field

        Raises:
            EmbeddingNotReady: If the backend is not ready
        """
        trigger_ids = set(trigger_ids)

        logger.info("Building command index...")
        descriptors: List[CommandDescriptor] = []
        for record in commands:
            vector = _freeze(await backend.embed(record.description))
            descriptors.append(CommandDescriptor(
                command_id=record.command,
                page_scope=record.page,
                description=record.description,
                embedding=vector,
                magnitude=magnitude(vector),
                is_trigger=record.command in trigger_ids,
            ))

        logger.info("Building catalog index...")
        catalog: List[CatalogEntry] = []
        for kind, records in (("product", products), ("shop", shops)):
            for record in records:
                text = record.search_text()
                vector = _freeze(await backend.embed(text))
                catalog.append(CatalogEntry(
                    kind=kind,
                    record=record,
                    text=text,
                    embedding=vector,
                    magnitude=magnitude(vector),
                ))

        logger.info(f"Index ready: {len(descriptors)} commands, {len(catalog)} catalog entries")
        return cls(descriptors, catalog)

    def candidates(self, page: str) -> List[CommandDescriptor]:
        """Descriptors valid on ``page`` (its own scope or global), in catalog order."""
        return [d for d in self.descriptors if d.in_scope(page)]

    def catalog_entries(self, kind: Optional[str] = None) -> List[CatalogEntry]:
        return [e for e in self.catalog if kind is None or e.kind == kind]

    def get(self, command_id: str) -> Optional[CommandDescriptor]:
        for descriptor in self.descriptors:
            if descriptor.command_id == command_id:
                return descriptor
        return None

    def __len__(self) -> int:
        return len(self.descriptors)
