"""
Завантажувач асетів (tileset-зображень) пакетами.

Семантика як у Phaser loader: load_image() лише ставить запит у чергу,
start() завантажує всю чергу паралельно і завершується ОДИН раз для всього batch.
Будь-яка помилка валить весь batch одним AssetLoadError (без retry).
"""
import asyncio
from typing import Callable, Dict, List, Optional, Tuple

import requests

from services import config


class AssetLoadError(RuntimeError):
    """Batch асетів не завантажився; failed - ключі, що впали"""

    def __init__(self, failed: List[str], message: Optional[str] = None):
        self.failed = list(failed)
        super().__init__(message or f"Не вдалося завантажити асети: {', '.join(self.failed)}")


def fetch_url(url: str, timeout: Optional[float] = None) -> bytes:
    """Завантажує один асет по HTTP"""
    response = requests.get(url, timeout=timeout or config.ASSET_TIMEOUT)
    response.raise_for_status()
    return response.content


class AssetLoader:
    """
    Черга запитів асетів + кеш завантажених байтів.

    Дублікати ключів не відсіюються: той самий tileset з кількох шарів
    просто завантажиться кілька разів (кеш тримає останній результат).
    """

    def __init__(self, fetch: Optional[Callable[[str], bytes]] = None):
        self.fetch = fetch or fetch_url
        self.cache: Dict[str, bytes] = {}
        self._queue: List[Tuple[str, str]] = []

    def load_image(self, key: str, url: str) -> None:
        self._queue.append((key, url))

    @property
    def pending(self) -> int:
        return len(self._queue)

    async def _fetch_one(self, key: str, url: str):
        return key, await asyncio.to_thread(self.fetch, url)

    async def start(self) -> Dict[str, bytes]:
        """
        Завантажує всю чергу і повертає кеш. Черга очищується одразу,
        тому наступний batch починається з нуля.
        """
        batch, self._queue = self._queue, []
        if not batch:
            return self.cache

        print(f"[INFO] Завантаження асетів: {len(batch)} запитів")
        results = await asyncio.gather(
            *(self._fetch_one(key, url) for key, url in batch),
            return_exceptions=True,
        )

        failed = []
        for (key, url), result in zip(batch, results):
            if isinstance(result, BaseException):
                print(f"[WARN] Асет {key} ({url}) не завантажено: {result}")
                failed.append(key)
                continue
            self.cache[result[0]] = result[1]

        if failed:
            raise AssetLoadError(failed)

        print(f"[INFO] Асети завантажено: {len(batch)}")
        return self.cache
