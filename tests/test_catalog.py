"""
Tests for ContentCatalog lookups and JSON/YAML content loading.
"""

import json
import logging

import pytest
import yaml

from daggersheet.catalog import CatalogError, ContentCatalog
from daggersheet.models import ClassDefinition, DomainCard, SubclassDefinition


CONTENT = {
    "$schema": "daggersheet/content-v1",
    "name": "Test Content",
    "content": {
        "classes": [
            {
                "name": "Seraph",
                "domains": ["Splendor", "Valor"],
                "startingHitPoints": 7,
                "startingEvasion": 9,
                "classFeatures": [
                    {"name": "Prayer Dice", "description": "Roll prayer dice."},
                ],
                "subclasses": [
                    {
                        "name": "Winged Sentinel",
                        "features": [
                            {"name": "Wings of Light", "modifiers": {"evasion": 1}},
                        ],
                    }
                ],
            }
        ],
        "cards": [
            {
                "name": "Bolt Beacon",
                "domain": "Splendor",
                "level": 1,
                "recallCost": 1,
                "modifiers": {"spellcastRolls": 1},
            }
        ],
    },
}


@pytest.fixture
def catalog() -> ContentCatalog:
    return ContentCatalog.from_dict(CONTENT)


class TestLookups:

    def test_class_lookup_is_case_insensitive(self, catalog):
        assert catalog.get_class_by_name("seraph").starting_hit_points == 7
        assert catalog.get_class_by_name(" SERAPH ") is not None

    def test_subclass_lookup(self, catalog):
        subclass = catalog.get_subclass_by_name("Seraph", "winged sentinel")
        assert subclass.features[0].modifiers.evasion == 1

    def test_missing_lookups(self, catalog):
        assert catalog.get_class_by_name("Druid") is None
        assert catalog.get_subclass_by_name("Druid", "Warden of Elements") is None
        assert catalog.get_subclass_by_name("Seraph", "Divine Wielder") is None
        assert catalog.get_card_by_name("Nope") is None

    def test_card_lookup(self, catalog):
        card = catalog.get_card_by_name("bolt beacon")
        assert card.recall_cost == 1
        assert card.modifiers.spellcast_rolls == 1

    def test_names_and_len(self, catalog):
        assert catalog.class_names() == ["Seraph"]
        assert catalog.card_names() == ["Bolt Beacon"]
        assert len(catalog) == 2
        assert catalog.name == "Test Content"

    def test_add_programmatically(self):
        catalog = ContentCatalog()
        catalog.add_class(ClassDefinition(
            name="Ranger", subclasses=[SubclassDefinition(name="Beastbound")]
        ))
        catalog.add_card(DomainCard(name="Gifted Tracker", domain="Sage"))
        assert catalog.get_subclass_by_name("ranger", "beastbound") is not None
        assert catalog.get_card_by_name("gifted tracker").domain == "Sage"

    def test_unnamed_class_rejected(self):
        with pytest.raises(CatalogError):
            ContentCatalog(classes=[ClassDefinition()])


class TestFromDict:

    def test_empty_document(self):
        assert len(ContentCatalog.from_dict({})) == 0

    def test_non_object_rejected(self):
        with pytest.raises(CatalogError):
            ContentCatalog.from_dict(["not", "a", "dict"])

    def test_invalid_content_section(self):
        with pytest.raises(CatalogError):
            ContentCatalog.from_dict({"content": []})

    def test_validation_error_wrapped(self):
        with pytest.raises(CatalogError, match="Invalid content"):
            ContentCatalog.from_dict({"content": {"cards": [{"domain": "Blade"}]}})

    def test_schema_mismatch_warns(self, caplog):
        with caplog.at_level(logging.WARNING, logger="daggersheet.catalog"):
            ContentCatalog.from_dict({"$schema": "daggersheet/content-v0"})
        assert "differs from current" in caplog.text


class TestFromFile:

    def test_json(self, tmp_path):
        path = tmp_path / "core.json"
        path.write_text(json.dumps(CONTENT), encoding="utf-8")
        catalog = ContentCatalog.from_file(path)
        assert catalog.get_class_by_name("Seraph") is not None

    @pytest.mark.parametrize("suffix", [".yaml", ".yml"])
    def test_yaml(self, tmp_path, suffix):
        path = tmp_path / f"core{suffix}"
        path.write_text(yaml.safe_dump(CONTENT), encoding="utf-8")
        catalog = ContentCatalog.from_file(str(path))
        assert catalog.get_card_by_name("Bolt Beacon").domain == "Splendor"

    def test_missing_file(self, tmp_path):
        with pytest.raises(CatalogError, match="not found"):
            ContentCatalog.from_file(tmp_path / "missing.json")

    def test_unsupported_extension(self, tmp_path):
        path = tmp_path / "core.toml"
        path.write_text("", encoding="utf-8")
        with pytest.raises(CatalogError, match="Unsupported"):
            ContentCatalog.from_file(path)

    def test_malformed_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(CatalogError, match="Failed to parse"):
            ContentCatalog.from_file(path)

    def test_malformed_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("content: [unclosed", encoding="utf-8")
        with pytest.raises(CatalogError, match="Failed to parse"):
            ContentCatalog.from_file(path)
