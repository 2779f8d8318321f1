"""
Налаштування бекенду редактора карт.
Все читається з environment variables (як OSM_SOURCE у завантажувачі даних), без конфіг-файлів.
"""
import os
from pathlib import Path


# Базовий URL для tileset-зображень (аналог Globals.URL у фронтенді)
ASSETS_URL = os.getenv("MAP_ASSETS_URL", "http://localhost:8080/assets/")

# Розмір тайла в пікселях
TILE_SIZE = int(os.getenv("MAP_TILE_SIZE", "16"))

# Висота одного кроку рівня (px), якщо рівень поза списком levels карти
DEFAULT_LEVEL_HEIGHT = float(os.getenv("MAP_DEFAULT_LEVEL_HEIGHT", "32"))

# HTTP timeout одного запиту асету (секунди). Сам batch не має timeout.
ASSET_TIMEOUT = float(os.getenv("MAP_ASSET_TIMEOUT", "60"))

# Ключ UV-мапи: "tuple" (точний) або "hash" (старий p3Hash з перевіркою діапазону)
SIDE_MESH_UV_KEY = (os.getenv("SIDE_MESH_UV_KEY") or "tuple").lower()

# Strict mode: валідувати boundary loops і кидати GeometryError
SIDE_MESH_STRICT = (os.getenv("SIDE_MESH_STRICT") or "0").lower() in ("1", "true", "yes")

# Директорія для експортованих мешів
OUTPUT_DIR = Path(os.getenv("OUTPUT_DIR", "output"))
