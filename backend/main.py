"""
FastAPI backend для редактора tile-карт
Завантаження карт, розміщення entities, undo/redo та генерація 3D стін шарів для прев'ю
"""
from fastapi import FastAPI, HTTPException, BackgroundTasks, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Optional, Tuple
import uuid

from services import config
from services.asset_loader import AssetLoader, AssetLoadError
from services.entity_placement import EntityCatalog, generate_entity
from services.layer_generation import NORMAL_MODES, generate_layer_sides
from services.load_task import LoadTask
from services.model_exporter import EXPORT_FORMATS, export_layer_meshes
from services.side_mesh_generator import GeometryError
from services.state_history import StateHistory
from services.tile_map import LoadSupersededError, MapError, TileMap, validate_map_document

app = FastAPI(title="Tile Map Editor API", version="1.0.0")

# CORS налаштування для інтеграції з frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:4200", "http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Директорія для збереження експортованих мешів
OUTPUT_DIR = config.OUTPUT_DIR
OUTPUT_DIR.mkdir(parents=True, exist_ok=True)


class MapSession:
    """Одна відкрита карта: модель + історія станів"""

    def __init__(self, map_id: str, tile_map: TileMap):
        self.map_id = map_id
        self.tile_map = tile_map
        self.history = StateHistory()
        self.loaded = False


# Зберігання задач завантаження та відкритих карт
tasks: Dict[str, LoadTask] = {}
maps: Dict[str, MapSession] = {}


def create_asset_loader() -> AssetLoader:
    return AssetLoader()


class MapDocument(BaseModel):
    """Документ карти (решта полів зберігається як є)"""
    model_config = ConfigDict(extra="allow")

    name: str = ""
    levels: List[Dict[str, Any]] = Field(default_factory=list)
    mapWidth: int = Field(default=0, ge=0)
    mapHeight: int = Field(default=0, ge=0)
    masterLevel: int = Field(default=0, ge=0)
    attributes: Dict[str, Any] = Field(default_factory=dict)
    screen: Dict[str, Any] = Field(default_factory=lambda: {"x": 0, "y": 0})
    layer: List[Dict[str, Any]] = Field(default_factory=list)
    entities: List[Dict[str, Any]] = Field(default_factory=list)


class LoadMapResponse(BaseModel):
    task_id: str
    map_id: str
    status: str


class EntityRequest(BaseModel):
    """Запит розміщення entity: точка у світі + тип (+ опційний каталог типів)"""
    x: float
    y: float
    type: str = Field(min_length=1)
    level: int = 0
    definitions: Optional[Dict[str, Any]] = None


@app.get("/")
async def root():
    return {"message": "Tile Map Editor API", "version": "1.0.0"}


@app.post("/api/maps", response_model=LoadMapResponse)
async def load_map(document: MapDocument, background_tasks: BackgroundTasks):
    """
    Створює задачу завантаження карти (асети вантажаться у фоні)
    """
    map_doc = document.model_dump()
    try:
        validate_map_document(map_doc)
    except MapError as e:
        raise HTTPException(status_code=422, detail=str(e))

    task_id = str(uuid.uuid4())
    map_id = str(uuid.uuid4())
    maps[map_id] = MapSession(map_id, TileMap(create_asset_loader()))
    tasks[task_id] = LoadTask(task_id=task_id, map_id=map_id)

    background_tasks.add_task(load_map_task, task_id, map_doc)

    return LoadMapResponse(task_id=task_id, map_id=map_id, status="processing")


async def load_map_task(task_id: str, map_doc: Dict[str, Any]):
    """
    Фонова задача завантаження карти
    """
    task = tasks[task_id]
    session = maps[task.map_id]

    task.update_status("processing", 10, "Завантаження асетів...")
    try:
        await session.tile_map.load_map(map_doc)
    except (MapError, AssetLoadError) as e:
        task.fail(str(e))
        return
    except LoadSupersededError as e:
        task.update_status("superseded", 100, str(e))
        return

    session.loaded = True
    session.history.push("Load map", session.tile_map.export())
    task.update_status("completed", 100, "Карту завантажено")


@app.get("/api/status/{task_id}")
async def get_status(task_id: str):
    """
    Отримує статус задачі завантаження
    """
    if task_id not in tasks:
        raise HTTPException(status_code=404, detail="Task not found")

    task = tasks[task_id]
    return {
        "task_id": task_id,
        "map_id": task.map_id,
        "status": task.status,
        "progress": task.progress,
        "message": task.message,
    }


def get_session(map_id: str, require_loaded: bool = True) -> MapSession:
    session = maps.get(map_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Map not found")
    if require_loaded and not session.loaded:
        raise HTTPException(status_code=400, detail="Map not ready")
    return session


@app.get("/api/maps/{map_id}")
async def get_map(map_id: str):
    return get_session(map_id).tile_map.export()


@app.post("/api/maps/{map_id}/entities")
async def add_entity(map_id: str, request: EntityRequest):
    """
    Додає entity у точку світу
    """
    session = get_session(map_id)
    catalog = EntityCatalog(request.definitions) if request.definitions is not None else None
    try:
        entity = generate_entity({"x": request.x, "y": request.y}, request.type, catalog, level=request.level)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    session.tile_map.add_entity(entity)
    session.history.push(f"Add {request.type}", session.tile_map.export())
    return {"entity": entity, "entity_count": len(session.tile_map.entities)}


@app.get("/api/maps/{map_id}/entities/{entity_index}/events")
async def entity_events(map_id: str, entity_index: int):
    """
    Дерево event-вузлів entity (settings.event)
    """
    entities = get_session(map_id).tile_map.entities
    if not 0 <= entity_index < len(entities):
        raise HTTPException(status_code=404, detail="Entity not found")
    return [node.export() for node in entities[entity_index].events()]


async def restore_snapshot(session: MapSession, step: Optional[Tuple[int, Dict[str, Any]]], what: str):
    """
    Відновлює snapshot зі step = (index, snapshot) і лише тоді рухає курсор історії.
    Якщо асети не завантажились, модель вже очищена: карта стає "not ready",
    курсор лишається на місці, тож той самий undo/redo можна повторити.
    """
    if step is None:
        raise HTTPException(status_code=400, detail=f"Nothing to {what}")
    index, snapshot = step
    try:
        await session.tile_map.load_map(snapshot)
    except AssetLoadError as e:
        session.loaded = False
        print(f"[WARN] {what} -> стан {index} не відновлено: {e}")
        raise HTTPException(status_code=502, detail=str(e))
    except LoadSupersededError as e:
        raise HTTPException(status_code=409, detail=str(e))

    session.history.commit(index)
    session.loaded = True
    return session.tile_map.export()


@app.post("/api/maps/{map_id}/undo")
async def undo(map_id: str):
    session = get_session(map_id, require_loaded=False)
    return await restore_snapshot(session, session.history.peek_undo(), "undo")


@app.post("/api/maps/{map_id}/redo")
async def redo(map_id: str):
    session = get_session(map_id, require_loaded=False)
    return await restore_snapshot(session, session.history.peek_redo(), "redo")


@app.get("/api/maps/{map_id}/history")
async def get_history(map_id: str):
    history = get_session(map_id, require_loaded=False).history
    return {
        "index": history.index,
        "states": [state.name for state in history.states],
    }


@app.post("/api/maps/{map_id}/history/{index}")
async def select_state(map_id: str, index: int):
    """
    Переходить до довільного стану історії
    """
    session = get_session(map_id, require_loaded=False)
    try:
        step = session.history.peek(index)
    except IndexError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return await restore_snapshot(session, step, "select")


def get_layer_sides(map_id: str, layer_index: int, normals: str):
    session = get_session(map_id)
    layers = session.tile_map.layers
    if not 0 <= layer_index < len(layers):
        raise HTTPException(status_code=404, detail="Layer not found")
    layer = layers[layer_index]
    try:
        return layer, generate_layer_sides(session.tile_map, layer, normals=normals)
    except GeometryError as e:
        raise HTTPException(status_code=422, detail=str(e))


@app.get("/api/maps/{map_id}/layers/{layer_index}/sides")
def layer_sides(
    map_id: str,
    layer_index: int,
    normals: str = Query(default="up", description="up або computed"),
):
    """
    Плоскі буфери бокових стін шару (positions/indices/normals/uvs)
    """
    if normals not in NORMAL_MODES:
        raise HTTPException(status_code=400, detail=f"Unknown normals mode: {normals}")
    _, buffers = get_layer_sides(map_id, layer_index, normals)
    return buffers.to_dict()


@app.get("/api/maps/{map_id}/layers/{layer_index}/sides/download")
def download_layer_sides(
    map_id: str,
    layer_index: int,
    format: str = Query(default="glb", description="glb, obj або stl"),
    normals: str = Query(default="up", description="up або computed"),
):
    """
    Експортує стіни шару у файл
    """
    fmt = format.lower().strip(".")
    if fmt not in EXPORT_FORMATS:
        raise HTTPException(status_code=400, detail=f"Unknown format: {format}")
    if normals not in NORMAL_MODES:
        raise HTTPException(status_code=400, detail=f"Unknown normals mode: {normals}")

    layer, buffers = get_layer_sides(map_id, layer_index, normals)
    file_path = OUTPUT_DIR / f"{map_id}_layer{layer_index}.{fmt}"
    try:
        export_layer_meshes([(layer.details.get("name") or f"layer{layer_index}", buffers)], str(file_path), fmt)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    media_type = "model/gltf-binary" if fmt == "glb" else "application/octet-stream"
    return FileResponse(str(file_path), media_type=media_type, filename=file_path.name)
