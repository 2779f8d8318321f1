"""
Створення entity з запиту розміщення (точка у світі + ключ типу з каталогу).
Пошук/фільтрація каталогу - справа UI.
"""
from typing import Any, Dict, List, Optional


class EntityCatalog:
    """Каталог доступних типів entity: key -> definition"""

    def __init__(self, definitions: Optional[Dict[str, Any]] = None):
        self.definitions = dict(definitions or {})

    def keys(self) -> List[str]:
        return list(self.definitions.keys())

    def __contains__(self, key: str) -> bool:
        return key in self.definitions


def generate_entity(
    world_pos: Dict[str, float],
    key: str,
    catalog: Optional[EntityCatalog] = None,
    level: Any = 0,
) -> Dict[str, Any]:
    """
    Returns:
        Запис {x, y, type, level, settings} для TileMap.add_entity

    Raises:
        ValueError: тип відсутній у каталозі (якщо каталог переданий)
    """
    if catalog is not None and key not in catalog:
        raise ValueError(f"Невідомий тип entity: {key}")
    return {
        "x": world_pos["x"],
        "y": world_pos["y"],
        "type": key,
        "level": level,
        "settings": {},
    }
