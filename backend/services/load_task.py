"""
Статус фонової задачі завантаження карти (для /api/status)
"""
from typing import Optional


class LoadTask:
    def __init__(self, task_id: str, map_id: str):
        self.task_id = task_id
        self.map_id = map_id
        self.status = "pending"
        self.progress = 0
        self.message = ""
        self.error: Optional[str] = None

    def update_status(self, status: str, progress: int, message: str = "") -> None:
        self.status = status
        self.progress = progress
        self.message = message
        print(f"[{self.task_id[:8]}] {status} {progress}% {message}")

    def fail(self, message: str) -> None:
        self.error = message
        self.update_status("failed", self.progress, message)
