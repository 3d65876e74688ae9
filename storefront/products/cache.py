"""
Cache lecture par processus (read-through), à durée de vie courte.
- Chaque instance serveur garde son propre cache: péremption bornée par le TTL.
- Les résultats None (produit absent) ne sont pas mis en cache.
"""
from typing import Any, Callable, Dict, Hashable, Optional, Tuple
import threading
import time

class TTLCache:
    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[Hashable, Tuple[float, Any]] = {}
        self._lock = threading.Lock()

    def get(self, key: Hashable) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            stored_at, value = entry
            if self._clock() - stored_at >= self.ttl_seconds:
                del self._entries[key]
                return None
            return value

    def set(self, key: Hashable, value: Any) -> None:
        with self._lock:
            self._entries[key] = (self._clock(), value)

    def get_or_load(self, key: Hashable, loader: Callable[[Hashable], Optional[Any]]) -> Optional[Any]:
        """Valeur en cache si fraîche, sinon loader(key) (mise en cache si non None)."""
        value = self.get(key)
        if value is not None:
            return value
        value = loader(key)
        if value is not None:
            self.set(key, value)
        return value

    def invalidate(self, key: Optional[Hashable] = None) -> None:
        """Invalide une clé, ou tout le cache si key est None."""
        with self._lock:
            if key is None:
                self._entries.clear()
            else:
                self._entries.pop(key, None)

    def __len__(self) -> int:
        return len(self._entries)
