"""Domain vocabulary used to correct transcripts."""

from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple

from .soundex import build_soundex_map

SHOP_CONTEXT = "shop"
PRODUCT_CONTEXT = "product"
CONTEXTS = (SHOP_CONTEXT, PRODUCT_CONTEXT)

SYNONYMS: Dict[str, str] = {
    "store": "shop",
    "stores": "shop",
    "mart": "shop",
    "locate": "search",
    "find": "search",
    "qty": "quantity",
    "amt": "price",
    "cost": "price",
    "rate": "price",
    "coke": "Coca Cola",
    "stored": "store",
}

STOP_WORDS: FrozenSet[str] = frozenset([
    "for", "to", "in", "at", "on", "with", "and", "the", "a", "an", "of", "is", "are",
])

PRODUCT_WORDS: Tuple[str, ...] = (
    "Coca", "Cola", "500ml", "Pepsi", "Sprite", "600ml", "Thumbs", "Up",
    "Fanta", "Orange", "Maaza", "Mango", "Drink", "7UP", "Mountain", "Dew",
    "Mirinda", "Limca", "Appy", "Fizz", "Sting", "Energy", "Red", "Bull",
    "Bisleri", "Water", "1L", "Kinley", "Aquafina", "Real", "Tropicana",
)

SHOP_WORDS: Tuple[str, ...] = (
    "Reliance", "Smart", "DMart", "Big", "Bazaar", "Spencer’s", "JioMart",
)

COMMAND_WORDS: Tuple[str, ...] = (
    "search", "shop", "name", "full", "partial", "user", "quickly",
    "collect", "details", "location", "owner", "information",
    "product", "brand", "category", "manufacturer", "items",
    "add", "edit", "update", "price", "quantity", "save", "clear", "remove",
)


class WordIndex:
    """A word list with case-insensitive exact lookup and a Soundex code map."""

    def __init__(self, words: Iterable[str]):
        self.words: List[str] = list(words)
        self.code_map: Dict[str, str] = build_soundex_map(self.words)
        self._exact: Dict[str, str] = {}
        for word in self.words:
            self._exact.setdefault(word.lower(), word)

    def exact(self, lower_word: str) -> Optional[str]:
        return self._exact.get(lower_word)

    def phonetic(self, code: str) -> Optional[str]:
        return self.code_map.get(code)

    def __len__(self) -> int:
        return len(self.words)


class Vocabulary:
    """Global, shop and product word indexes plus the synonym and stop-word tables.

    The global index is commands + shops + products in that order, so on a
    Soundex collision the command word wins.
    """

    def __init__(self,
                 command_words: Iterable[str] = COMMAND_WORDS,
                 shop_words: Iterable[str] = SHOP_WORDS,
                 product_words: Iterable[str] = PRODUCT_WORDS,
                 synonyms: Optional[Dict[str, str]] = None,
                 stop_words: Optional[Iterable[str]] = None):
        command_words = list(command_words)
        shop_words = list(shop_words)
        product_words = list(product_words)

        self.synonyms = {k.lower(): v for k, v in (SYNONYMS if synonyms is None else synonyms).items()}
        self.stop_words = frozenset(w.lower() for w in (STOP_WORDS if stop_words is None else stop_words))

        self.global_index = WordIndex(command_words + shop_words + product_words)
        self.shop_index = WordIndex(shop_words)
        self.product_index = WordIndex(product_words)

    def index_for(self, context: Optional[str]) -> WordIndex:
        """Word index for a correction context; unknown or unset means global."""
        if context == SHOP_CONTEXT:
            return self.shop_index
        if context == PRODUCT_CONTEXT:
            return self.product_index
        return self.global_index
