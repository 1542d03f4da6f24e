"""
State persistence abstraction.

Holds one JSON-compatible document (a seen map or a preference profile).
Implementations: in-memory (tests, ephemeral sessions) and JSON file (local
device storage). Swap by passing a different instance to the owning component.

Backends raise on I/O or parse errors; the seen tracker and recommendation
engine decide how to recover.
"""

import json
from pathlib import Path
from typing import Any, Optional, Protocol, Union


class StatePersistence(Protocol):
    """Protocol for loading and saving one persisted document."""

    def load(self) -> Optional[Any]:
        """Return the stored document, or None when nothing has been saved yet."""
        ...

    def save(self, data: Any) -> None:
        """Replace the stored document."""
        ...


class InMemoryPersistence:
    """
    Persistence that keeps the document in memory (round-tripped through JSON).
    Used for local testing and single-process sessions.
    """

    def __init__(self, initial: Optional[Any] = None):
        self._raw: Optional[str] = json.dumps(initial) if initial is not None else None

    def load(self) -> Optional[Any]:
        return json.loads(self._raw) if self._raw is not None else None

    def save(self, data: Any) -> None:
        self._raw = json.dumps(data)


class JsonFilePersistence:
    """Persistence backed by a JSON file (e.g. data/profile.json)."""

    def __init__(self, path: Union[Path, str]):
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Optional[Any]:
        if not self._path.exists():
            return None
        with open(self._path) as f:
            return json.load(f)

    def save(self, data: Any) -> None:
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        with open(tmp, "w") as f:
            json.dump(data, f, indent=2)
        tmp.replace(self._path)
