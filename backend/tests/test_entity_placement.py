"""
Тести для розміщення entities
"""
import pytest

from services.entity_placement import EntityCatalog, generate_entity


class TestEntityPlacement:
    """Тести для entity_placement.py"""

    def test_generate_entity(self):
        catalog = EntityCatalog({"Chest": {}, "NPC": {}})
        entity = generate_entity({"x": 12.5, "y": 40}, "Chest", catalog)
        assert entity == {"x": 12.5, "y": 40, "type": "Chest", "level": 0, "settings": {}}

    def test_level(self):
        entity = generate_entity({"x": 0, "y": 0}, "Prop", level=2)
        assert entity["level"] == 2

    def test_unknown_type(self):
        catalog = EntityCatalog({"Chest": {}})
        with pytest.raises(ValueError):
            generate_entity({"x": 0, "y": 0}, "Dragon", catalog)

    def test_catalog_keys(self):
        catalog = EntityCatalog({"Chest": {}, "NPC": {}, "Prop": {}})
        assert catalog.keys() == ["Chest", "NPC", "Prop"]
        assert "NPC" in catalog

    def test_settings_not_shared(self):
        a = generate_entity({"x": 0, "y": 0}, "Prop")
        b = generate_entity({"x": 0, "y": 0}, "Prop")
        a["settings"]["name"] = "a"
        assert b["settings"] == {}
