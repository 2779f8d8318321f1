"""
Вертикальні зсуви рівнів висоти (height levels).

Рівень - це індекс у впорядкованому списку `levels` карти, кожен має `height` у пікселях.
Зсув у тайлах = height / TILE_SIZE. Зсуви строго зростають з індексом рівня.
"""
from typing import List, Optional, Sequence

from services import config


def validate_levels(levels: Sequence[dict]) -> List[float]:
    """
    Повертає висоти рівнів (px) і перевіряє, що вони строго зростають.

    Raises:
        ValueError: якщо висоти не строго зростають
    """
    heights = [float(level.get("height", 0)) for level in levels]
    for i in range(1, len(heights)):
        if heights[i] <= heights[i - 1]:
            raise ValueError(
                f"Висоти рівнів мають строго зростати: level {i - 1}={heights[i - 1]}, level {i}={heights[i]}"
            )
    return heights


class LevelOffsetResolver:
    """
    Pure mapping: level index -> вертикальний зсув у тайлах.

    Рівні поза списком екстраполюються останнім (або першим) кроком між рівнями,
    або DEFAULT_LEVEL_HEIGHT, якщо рівень у списку лише один.
    Це потрібно, бо heightOffset2 верхнього рівня читає offset(level + 1).
    """

    def __init__(
        self,
        levels: Sequence[dict],
        tile_size: Optional[int] = None,
        default_level_height: Optional[float] = None,
    ):
        self.tile_size = int(tile_size or config.TILE_SIZE)
        self.default_level_height = float(default_level_height or config.DEFAULT_LEVEL_HEIGHT)
        self.heights = validate_levels(levels)

    def _step(self, top: bool) -> float:
        if len(self.heights) < 2:
            return self.default_level_height
        if top:
            return self.heights[-1] - self.heights[-2]
        return self.heights[1] - self.heights[0]

    def offset_px(self, level: int) -> float:
        level = int(level)
        if not self.heights:
            return level * self.default_level_height
        if level < 0:
            return self.heights[0] + level * self._step(top=False)
        last = len(self.heights) - 1
        if level > last:
            return self.heights[last] + (level - last) * self._step(top=True)
        return self.heights[level]

    def offset(self, level: int) -> float:
        """Зсув рівня у тайлах (floor height шару у world units)"""
        return self.offset_px(level) / self.tile_size

    def height_offsets(self, level: int):
        """
        (heightOffset, heightOffset2) для шару на рівні `level`:
        висота підлоги і висота стіни до наступного рівня.
        """
        height_offset = self.offset(level)
        height_offset2 = self.offset(level + 1) - height_offset
        return height_offset, height_offset2
