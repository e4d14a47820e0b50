"""
Canonical game content lookups.

The bonus collectors need three lookups: a class by name, a subclass by
(class, subclass) name, and a domain card by name. ``ContentCatalog`` is an
in-memory implementation that can be filled programmatically or loaded from
a JSON/YAML content file:

```json
{
  "$schema": "daggersheet/content-v1",
  "name": "Core Rules",
  "content": {
    "classes": [...],
    "cards": [...]
  }
}
```
"""

import json
import logging
from pathlib import Path
from typing import Any, Protocol

import yaml
from pydantic import ValidationError

from .models import ClassDefinition, DomainCard, SubclassDefinition


logger = logging.getLogger("daggersheet.catalog")


class CatalogError(Exception):
    """Error loading or parsing a content file."""
    pass


class ContentLookup(Protocol):
    """The canonical-content lookups the bonus collectors rely on."""

    def get_class_by_name(self, name: str) -> ClassDefinition | None: ...

    def get_subclass_by_name(
        self, class_name: str, subclass_name: str
    ) -> SubclassDefinition | None: ...

    def get_card_by_name(self, name: str) -> DomainCard | None: ...


def _key(name: str) -> str:
    return name.strip().lower()


class ContentCatalog:
    """In-memory store of canonical classes and domain cards."""

    SUPPORTED_EXTENSIONS = {".json", ".yaml", ".yml"}
    CURRENT_SCHEMA = "daggersheet/content-v1"

    def __init__(
        self,
        classes: list[ClassDefinition] | None = None,
        cards: list[DomainCard] | None = None,
        name: str | None = None,
    ) -> None:
        self.name = name
        self._classes: dict[str, ClassDefinition] = {}
        self._cards: dict[str, DomainCard] = {}
        for class_def in classes or []:
            self.add_class(class_def)
        for card in cards or []:
            self.add_card(card)

    def __len__(self) -> int:
        return len(self._classes) + len(self._cards)

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def add_class(self, class_def: ClassDefinition) -> None:
        if not class_def.name:
            raise CatalogError("Canonical classes must have a name")
        self._classes[_key(class_def.name)] = class_def

    def add_card(self, card: DomainCard) -> None:
        self._cards[_key(card.name)] = card

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_class_by_name(self, name: str) -> ClassDefinition | None:
        class_def = self._classes.get(_key(name))
        if class_def is None:
            logger.debug(f"Class '{name}' not found in catalog")
        return class_def

    def get_subclass_by_name(
        self, class_name: str, subclass_name: str
    ) -> SubclassDefinition | None:
        class_def = self.get_class_by_name(class_name)
        if class_def is None:
            return None
        wanted = _key(subclass_name)
        for subclass in class_def.subclasses:
            if _key(subclass.name) == wanted:
                return subclass
        logger.debug(f"Subclass '{subclass_name}' not found for class '{class_name}'")
        return None

    def get_card_by_name(self, name: str) -> DomainCard | None:
        card = self._cards.get(_key(name))
        if card is None:
            logger.debug(f"Domain card '{name}' not found in catalog")
        return card

    def class_names(self) -> list[str]:
        return sorted(c.name for c in self._classes.values() if c.name)

    def card_names(self) -> list[str]:
        return sorted(card.name for card in self._cards.values())

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ContentCatalog":
        """Build a catalog from a parsed content document.

        Raises:
            CatalogError: If the document is not an object or fails validation.
        """
        if not isinstance(data, dict):
            raise CatalogError("Content must be a JSON/YAML object at the top level")

        schema = data.get("$schema")
        if schema and schema != cls.CURRENT_SCHEMA:
            logger.warning(
                f"Content schema '{schema}' differs from current '{cls.CURRENT_SCHEMA}'. "
                "Some content may not load correctly."
            )

        content = data.get("content", {})
        if not isinstance(content, dict):
            raise CatalogError("'content' must be an object")

        try:
            classes = [ClassDefinition.model_validate(c) for c in content.get("classes", [])]
            cards = [DomainCard.model_validate(c) for c in content.get("cards", [])]
        except ValidationError as e:
            raise CatalogError(f"Invalid content: {e}") from e

        catalog = cls(classes=classes, cards=cards, name=data.get("name"))
        logger.info(
            f"Loaded content '{catalog.name or 'unnamed'}': "
            f"{len(catalog._classes)} classes, {len(catalog._cards)} cards"
        )
        return catalog

    @classmethod
    def from_file(cls, path: Path | str) -> "ContentCatalog":
        """Load a catalog from a JSON or YAML file.

        Raises:
            CatalogError: If the file is missing, unsupported, or unparsable.
        """
        path = Path(path)
        if not path.exists():
            raise CatalogError(f"Content file not found: {path}")

        suffix = path.suffix.lower()
        if suffix not in cls.SUPPORTED_EXTENSIONS:
            raise CatalogError(
                f"Unsupported file format: {suffix}. "
                f"Supported: {', '.join(sorted(cls.SUPPORTED_EXTENSIONS))}"
            )

        try:
            raw_content = path.read_text(encoding="utf-8")
        except OSError as e:
            raise CatalogError(f"Failed to read file: {e}") from e

        try:
            if suffix == ".json":
                data = json.loads(raw_content)
            else:
                data = yaml.safe_load(raw_content)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise CatalogError(f"Failed to parse {suffix} file: {e}") from e

        return cls.from_dict(data)
