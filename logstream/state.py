"""In-memory key/value state for per-document preferences."""

from typing import Any, Dict, List, Optional


class MementoStore:
    """Key/value store; ``get`` falls back to the default only for absent keys."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        """Initialize the store, optionally with initial values."""
        self._storage: Dict[str, Any] = dict(initial or {})

    def get(self, key: str, default: Any = None) -> Any:
        """Get a stored value; falsy stored values such as False, 0 and "" are returned as stored."""
        if key in self._storage:
            return self._storage[key]
        return default

    def update(self, key: str, value: Any) -> None:
        """Store a value."""
        self._storage[key] = value

    def delete(self, key: str) -> bool:
        """Remove a key; returns False if it was absent."""
        return self._storage.pop(key, _MISSING) is not _MISSING

    def keys(self) -> List[str]:
        """Get all stored keys."""
        return list(self._storage.keys())


_MISSING = object()
