"""Persistent key/value storage backed by a single JSON file."""

import json
from pathlib import Path

import structlog

from .errors import StorageError

log = structlog.stdlib.get_logger()

STORAGE_FILE_NAME = "local_storage.json"


class LocalStorageService:
    """String key/value store persisted across sessions.

    Every value is a string, mirroring browser local storage. The whole store
    lives in one JSON object on disk and is rewritten atomically on each change.
    A missing or unreadable file behaves like an empty store.
    """

    def __init__(self, storage_dir: Path, file_name: str = STORAGE_FILE_NAME) -> None:
        """Initialize the storage service.

        Args:
            storage_dir: Directory holding the storage file
            file_name: Name of the storage file inside the directory
        """
        self.path: Path = storage_dir / file_name
        self._items: dict[str, str] | None = None
        log.debug("Local storage initialized", path=str(self.path))

    def get_item(self, key: str) -> str | None:
        """Get the value stored under a key, None if absent."""
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one.

        Raises:
            StorageError: If the storage file cannot be written
        """
        items = dict(self._load())
        items[key] = value
        self._save(items)

    def remove_item(self, key: str) -> None:
        """Remove a key if present.

        Raises:
            StorageError: If the storage file cannot be written
        """
        items = dict(self._load())
        if items.pop(key, None) is not None:
            self._save(items)

    def _load(self) -> dict[str, str]:
        if self._items is not None:
            return self._items

        items: dict[str, str] = {}
        if self.path.exists():
            try:
                with open(self.path, "r", encoding="utf-8") as f:
                    data = json.load(f)
                if isinstance(data, dict):
                    items = {str(k): v for k, v in data.items() if isinstance(v, str)}
                else:
                    log.warning(
                        "Local storage is not a JSON object, starting empty",
                        path=str(self.path),
                        found=type(data).__name__,
                    )
            except (OSError, ValueError) as e:
                log.warning("Failed to read local storage, starting empty", path=str(self.path), error=str(e))

        self._items = items
        return items

    def _save(self, items: dict[str, str]) -> None:
        temp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(items, f, ensure_ascii=False)
            temp_path.replace(self.path)
        except OSError as e:
            log.error("Failed to write local storage", path=str(self.path), error=str(e))
            if temp_path.exists():
                try:
                    temp_path.unlink()
                except OSError:
                    log.warning("Failed to clean up temporary storage file", path=str(temp_path))
            raise StorageError(
                "Could not save data to local storage.",
                original_error=e,
                path=str(self.path),
            ) from e

        self._items = items
        log.debug("Local storage saved", path=str(self.path), keys=len(items))
