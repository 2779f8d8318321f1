"""
In-memory модель карти: рівні висоти, tile layers, entities.

Кожне перезавантаження - destroy-all / rebuild-all (без інкрементального diff).
Лічильник generation дозволяє відкинути load, який встиг застаріти,
поки чекав на асети.
"""
import copy
from typing import Any, Dict, List, Optional

import numpy as np

from services import config
from services.asset_loader import AssetLoader
from services.event_nodes import EventNode, default_registry
from services.level_offset import LevelOffsetResolver, validate_levels


class MapError(ValueError):
    """Невалідний документ карти"""


class LoadSupersededError(RuntimeError):
    """Load перекрито новішим викликом load_map, модель не змінювалась"""


class SimpleTileLayer:
    """Розміри сітки шару для UV: width, height і зарезервовані нижні рядки"""

    def __init__(self, width: int, height: int, extended_bottom: int = 0):
        self.width = int(width)
        self.height = int(height)
        self.extended_bottom = int(extended_bottom)

    @property
    def trimmed_height(self) -> int:
        return self.height - self.extended_bottom


class TileLayer:
    """Один tile layer: рівень, tileset, 2D сітка тайлів [row][col]"""

    def __init__(self, details: Dict[str, Any]):
        self.details = copy.deepcopy(details)
        self.details.setdefault("extendedBottom", 0)
        self.details.setdefault("data", [])
        self.destroyed = False

    @property
    def level(self) -> int:
        return int(self.details.get("level", 0))

    @property
    def width(self) -> int:
        return int(self.details.get("width", 0))

    @property
    def height(self) -> int:
        return int(self.details.get("height", 0))

    @property
    def tileset_name(self) -> Optional[str]:
        return self.details.get("tilesetName")

    @property
    def extended_bottom(self) -> int:
        return int(self.details.get("extendedBottom") or 0)

    @property
    def data(self) -> List[List[int]]:
        return self.details["data"]

    def simple(self) -> SimpleTileLayer:
        return SimpleTileLayer(self.width, self.height, self.extended_bottom)

    def solid_mask(self) -> np.ndarray:
        """Bool-сітка (height, width): True там, де тайл не порожній (!= 0)"""
        if not self.data:
            return np.zeros((self.height, self.width), dtype=bool)
        return np.asarray(self.data, dtype=np.int64) != 0

    def resize(self, width: int, height: int) -> None:
        """Обрізає або доповнює нулями, якір - лівий верхній кут"""
        grid = np.zeros((height, width), dtype=np.int64)
        if self.data:
            old = np.asarray(self.data, dtype=np.int64)
            h = min(height, old.shape[0])
            w = min(width, old.shape[1])
            grid[:h, :w] = old[:h, :w]
        self.details["data"] = grid.tolist()
        self.details["width"] = int(width)
        self.details["height"] = int(height)

    def destroy(self) -> None:
        self.destroyed = True

    def export(self) -> Dict[str, Any]:
        return copy.deepcopy(self.details)


class MapEntity:
    """Entity карти; settings копіюються як є"""

    def __init__(self, x: float, y: float, type: str, level: Any = 0, settings: Optional[dict] = None):
        self.x = x
        self.y = y
        self.type = type
        self.level = level
        self.settings = copy.deepcopy(settings) if settings is not None else {}
        self.destroyed = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MapEntity":
        return cls(
            x=data.get("x", 0),
            y=data.get("y", 0),
            type=data.get("type"),
            level=data.get("level", 0),
            settings=data.get("settings") or {},
        )

    def events(self) -> List[EventNode]:
        """Дерево event-вузлів з settings["event"] (порожнє, якщо event немає)"""
        return default_registry.build_list(self.settings.get("event") or [])

    def destroy(self) -> None:
        self.destroyed = True

    def export(self) -> Dict[str, Any]:
        return {
            "x": self.x,
            "y": self.y,
            "type": self.type,
            "level": copy.deepcopy(self.level),
            "settings": copy.deepcopy(self.settings),
        }


def validate_map_document(map_doc: Dict[str, Any]) -> None:
    """
    Перевіряє документ ДО того, як модель почне руйнувати старі шари.

    Raises:
        MapError: рівні не зростають, masterLevel поза списком, сітка шару не збігається з width/height
    """
    levels = map_doc.get("levels") or []
    try:
        validate_levels(levels)
    except ValueError as e:
        raise MapError(str(e)) from e

    master_level = map_doc.get("masterLevel", 0) or 0
    if levels and not 0 <= int(master_level) < len(levels):
        raise MapError(f"masterLevel {master_level} поза списком рівнів (0..{len(levels) - 1})")

    for i, layer in enumerate(map_doc.get("layer") or []):
        data = layer.get("data")
        if not data:
            continue
        width = int(layer.get("width", 0))
        height = int(layer.get("height", 0))
        if len(data) != height or any(len(row) != width for row in data):
            raise MapError(f"Шар {i} ({layer.get('name')}): сітка не відповідає {width}x{height}")
        extended_bottom = int(layer.get("extendedBottom") or 0)
        if not 0 <= extended_bottom < height:
            raise MapError(f"Шар {i}: extendedBottom={extended_bottom} при height={height}")


class TileMap:
    """
    Модель карти. asset_loader передається явно (ніяких глобальних game-handle).
    """

    PROP_DEFAULTS: Dict[str, Any] = {
        "name": "",
        "levels": [],
        "mapWidth": 0,
        "mapHeight": 0,
        "masterLevel": 0,
        "attributes": {},
        "screen": {"x": 0, "y": 0},
    }

    def __init__(self, asset_loader: Optional[AssetLoader] = None, assets_url: Optional[str] = None):
        self.asset_loader = asset_loader or AssetLoader()
        self.assets_url = assets_url if assets_url is not None else config.ASSETS_URL

        for prop, default in self.PROP_DEFAULTS.items():
            setattr(self, prop, copy.deepcopy(default))
        self.filename: Optional[str] = None

        self.layers: List[TileLayer] = []
        self.entities: List[MapEntity] = []
        self.generation = 0

    @property
    def offsets(self) -> LevelOffsetResolver:
        return LevelOffsetResolver(self.levels)

    async def load_map(self, map_doc: Dict[str, Any]) -> "TileMap":
        """
        Повністю перебудовує модель з документа карти.

        Порядок: копія скалярних полів -> teardown -> запити асетів на кожен tileset ->
        очікування batch -> шари (без tileset пропускаються) -> entities.
        Якщо batch асетів ніколи не завершиться, load теж не завершиться (timeout тут немає).

        Raises:
            MapError: невалідний документ (модель не змінюється)
            AssetLoadError: batch асетів впав
            LoadSupersededError: під час очікування асетів стартував новіший load
        """
        validate_map_document(map_doc)

        self.generation += 1
        generation = self.generation

        # пропущені у документі поля повертаються до значень за замовчуванням
        for prop, default in self.PROP_DEFAULTS.items():
            setattr(self, prop, copy.deepcopy(map_doc.get(prop, default)))
        self.filename = map_doc.get("filename")

        input_layers = list(map_doc.get("layer") or [])
        input_entities = list(map_doc.get("entities") or [])

        # cleanup everything before loading new map
        for layer in self.layers:
            layer.destroy()
        for entity in self.entities:
            entity.destroy()
        self.layers = []
        self.entities = []

        print(f"[INFO] Завантаження карти {self.name!r}: {len(input_layers)} шарів, {len(input_entities)} entities")

        for layer in input_layers:
            tileset = layer.get("tilesetName")
            if tileset:
                self.asset_loader.load_image(tileset, self.assets_url + tileset)

        await self.asset_loader.start()

        if generation != self.generation:
            print(f"[WARN] Load #{generation} застарів (поточний #{self.generation}), результат відкинуто")
            raise LoadSupersededError(f"load #{generation} superseded by #{self.generation}")

        for layer in input_layers:
            if not layer.get("tilesetName"):
                print(f"[DEBUG] Шар {layer.get('name')!r} без tileset - пропущено")
                continue
            self.layers.append(TileLayer(layer))

        for entity in input_entities:
            self.entities.append(MapEntity.from_dict(entity))

        print(f"[INFO] Карту завантажено: {len(self.layers)} шарів, {len(self.entities)} entities")
        return self

    def resize(self, width: int, height: int) -> None:
        self.mapWidth = width
        self.mapHeight = height
        for layer in self.layers:
            layer.resize(width, height)

    def add_entity(self, entity: Dict[str, Any]) -> MapEntity:
        ent = MapEntity.from_dict(entity)
        self.entities.append(ent)
        return ent

    def export(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        for prop in self.PROP_DEFAULTS:
            out[prop] = copy.deepcopy(getattr(self, prop))
        if self.filename:
            out["filename"] = self.filename
        out["layer"] = [layer.export() for layer in self.layers]
        out["entities"] = [entity.export() for entity in self.entities]
        return out
