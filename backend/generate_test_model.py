"""
Скрипт для генерації тестової моделі стін усіх шарів карти (GLB/OBJ/STL)

Використання:
    python generate_test_model.py path/to/map.json [output.glb] [--offline]

--offline: не вантажити tileset-и (для перевірки геометрії без сервера асетів)
"""
import asyncio
import json
import sys
from pathlib import Path

# Додаємо поточну директорію до шляху
sys.path.insert(0, str(Path(__file__).parent))

from services import config
from services.asset_loader import AssetLoader
from services.layer_generation import generate_layer_sides
from services.model_exporter import export_layer_meshes
from services.tile_map import TileMap


def generate(map_path: str, output_path: str, offline: bool = False) -> str:
    with open(map_path, "r", encoding="utf-8") as f:
        map_doc = json.load(f)

    loader = AssetLoader(fetch=lambda url: b"") if offline else AssetLoader()
    tile_map = asyncio.run(TileMap(loader).load_map(map_doc))

    print("=" * 60)
    print(f"Карта: {tile_map.name} ({tile_map.mapWidth}x{tile_map.mapHeight}), шарів: {len(tile_map.layers)}")
    print("=" * 60)

    items = []
    for index, layer in enumerate(tile_map.layers):
        name = layer.details.get("name") or f"layer{index}"
        items.append((f"{index}_{name}", generate_layer_sides(tile_map, layer)))

    fmt = Path(output_path).suffix.lstrip(".") or "glb"
    return export_layer_meshes(items, output_path, fmt)


if __name__ == "__main__":
    args = [a for a in sys.argv[1:] if not a.startswith("--")]
    if not args:
        print(__doc__)
        sys.exit(1)
    default_output = str(config.OUTPUT_DIR / (Path(args[0]).stem + "_sides.glb"))
    config.OUTPUT_DIR.mkdir(parents=True, exist_ok=True)
    generate(args[0], args[1] if len(args) > 1 else default_output, offline="--offline" in sys.argv)
