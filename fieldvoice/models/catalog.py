"""Static catalog records loaded at startup."""

import logging
from pathlib import Path
from typing import List, Type, TypeVar, Union

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).resolve().parent.parent / "data"

RecordT = TypeVar("RecordT", bound=BaseModel)


class CommandRecord(BaseModel):
    """One entry of the command catalog."""
    model_config = ConfigDict(frozen=True)

    command: str
    page: str
    description: str


class ProductRecord(BaseModel):
    model_config = ConfigDict(frozen=True, extra="allow")

    id: Union[int, str]
    name: str
    brand: str = ""
    manufacturer: str = ""
    category: str = ""

    def search_text(self) -> str:
        return " ".join(part for part in (self.name, self.brand, self.manufacturer) if part)


class ShopRecord(BaseModel):
    model_config = ConfigDict(frozen=True, extra="allow")

    id: Union[int, str]
    name: str
    address: str = ""

    def search_text(self) -> str:
        return " ".join(part for part in (self.name, self.address) if part)


def _load_records(path: Union[str, Path], model: Type[RecordT]) -> List[RecordT]:
    """Load a YAML (or JSON) list of records and validate each one.

    Raises:
        ValueError: If the file is not a list or a record is invalid
    """
    path = Path(path)
    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)

    if not isinstance(raw, list):
        raise ValueError(f"Catalog file must contain a list of records: {path}")

    try:
        records = [model.model_validate(item) for item in raw]
    except ValidationError as e:
        raise ValueError(f"Invalid record in {path}: {e}")

    logger.info(f"Loaded {len(records)} {model.__name__} entries from {path}")
    return records


def load_commands(path: Union[str, Path, None] = None) -> List[CommandRecord]:
    return _load_records(path or DATA_DIR / "commands.yaml", CommandRecord)


def load_products(path: Union[str, Path, None] = None) -> List[ProductRecord]:
    return _load_records(path or DATA_DIR / "products.yaml", ProductRecord)


def load_shops(path: Union[str, Path, None] = None) -> List[ShopRecord]:
    return _load_records(path or DATA_DIR / "shops.yaml", ShopRecord)
