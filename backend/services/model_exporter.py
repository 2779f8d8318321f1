"""
Сервіс для експорту згенерованих стін шарів у файли (GLB / OBJ / STL)
GLB та OBJ зберігають UV, STL - лише геометрію
"""
import os
from typing import List, Tuple

import trimesh

from services.side_mesh_generator import MeshBuffers

EXPORT_FORMATS = ("glb", "obj", "stl")


def export_layer_meshes(
    mesh_items: List[Tuple[str, MeshBuffers]],
    filename: str,
    format: str = "glb",
) -> str:
    """
    Експортує меші шарів у файл

    Args:
        mesh_items: Список (ім'я шару, буфери)
        filename: Шлях до файлу для збереження
        format: "glb", "obj" або "stl"

    Returns:
        Шлях до збереженого файлу
    """
    fmt = format.lower().strip(".")
    if fmt not in EXPORT_FORMATS:
        raise ValueError(f"Невідомий формат: {format}")

    # Порожні шари (без суцільних тайлів) пропускаємо
    meshes: List[Tuple[str, trimesh.Trimesh]] = []
    for name, buffers in mesh_items:
        if buffers is None or not buffers.indices:
            print(f"[WARN] Шар {name} порожній, пропущено")
            continue
        meshes.append((name, buffers.to_trimesh()))

    if not meshes:
        raise ValueError("Немає геометрії для експорту")

    total_vertices = sum(len(m.vertices) for _, m in meshes)
    total_faces = sum(len(m.faces) for _, m in meshes)
    print(f"Експорт {len(meshes)} мешів: {total_vertices} вершин, {total_faces} граней")

    if fmt == "stl":
        # STL не знає про окремі об'єкти - об'єднуємо
        combined = trimesh.util.concatenate([m for _, m in meshes])
        combined.export(filename, file_type="stl")
    else:
        scene = trimesh.Scene()
        for name, mesh in meshes:
            scene.add_geometry(mesh, geom_name=name)
        scene.export(filename, file_type=fmt)

    file_size = os.path.getsize(filename)
    if file_size == 0:
        raise ValueError("Файл порожній, експорт не вдався")
    print(f"Файл збережено: {filename} ({file_size} байт)")
    return filename
