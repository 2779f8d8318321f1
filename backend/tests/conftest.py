"""
Спільні fixtures для тестів
"""
import copy

import pytest

from services.asset_loader import AssetLoader

# 3x3 кільце: суцільні тайли по периметру, центр порожній
RING = [
    [1, 1, 1],
    [1, 0, 1],
    [1, 1, 1],
]

MAP_DOCUMENT = {
    "name": "autumn/entrance",
    "levels": [{"height": 0}, {"height": 32}, {"height": 64}],
    "mapWidth": 3,
    "mapHeight": 3,
    "masterLevel": 0,
    "attributes": {"bgm": "autumn"},
    "screen": {"x": 0, "y": 0},
    "layer": [
        {
            "id": 0,
            "name": "ground",
            "type": "Background",
            "level": 0,
            "width": 3,
            "height": 3,
            "tilesetName": "media/map/autumn-outside.png",
            "distance": 1,
            "data": RING,
        },
        {
            "id": 1,
            "name": "collision",
            "type": "Collision",
            "level": 0,
            "width": 3,
            "height": 3,
            "data": RING,
        },
        {
            "id": 2,
            "name": "upper",
            "type": "Background",
            "level": 1,
            "width": 3,
            "height": 3,
            "tilesetName": "media/map/autumn-outside.png",
            "data": [[1, 0, 0], [0, 0, 0], [0, 0, 0]],
        },
    ],
    "entities": [
        {"x": 16, "y": 32, "type": "Chest", "level": 0, "settings": {"name": "chest1"}},
        {"x": 40, "y": 8, "type": "NPC", "level": 1, "settings": {"npc": "guard"}},
    ],
}


@pytest.fixture
def output_dir(tmp_path):
    """Тимчасова директорія для експортованих файлів"""
    return tmp_path


@pytest.fixture
def map_document():
    return copy.deepcopy(MAP_DOCUMENT)


@pytest.fixture
def fetched_urls():
    return []


@pytest.fixture
def fake_loader(fetched_urls):
    """AssetLoader без мережі: запам'ятовує URL-и і повертає фейкові байти"""

    def fetch(url):
        fetched_urls.append(url)
        return b"\x89PNG"

    return AssetLoader(fetch=fetch)
