"""
Local filesystem storage provider.
Each key is a JSON file under the data directory; this is the authoritative copy.
"""
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

from .provider import StorageProvider


logger = logging.getLogger(__name__)


class LocalStorageProvider(StorageProvider):
    """Local filesystem storage provider."""

    def __init__(self, base_dir: str = "var/storage"):
        self.base_dir = Path(base_dir)
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def _get_path(self, key: str) -> Path:
        """Get the local filesystem path for a given key."""
        # Remove leading slash and sanitize
        clean_key = key.lstrip("/").replace("..", "").replace("\\", "/").replace("/", "_")
        return self.base_dir / f"{clean_key}.json"

    def get(self, key: str) -> Optional[str]:
        path = self._get_path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def put(self, key: str, value: str) -> None:
        path = self._get_path(key)
        # write-then-rename so a crash never leaves a half-written document;
        # one temp file per write, concurrent writers must not share it
        with tempfile.NamedTemporaryFile(
            "w", encoding="utf-8", dir=self.base_dir, prefix=f"{path.stem}.", suffix=".tmp", delete=False
        ) as tmp:
            tmp.write(value)
        try:
            os.replace(tmp.name, path)
        except OSError:
            os.unlink(tmp.name)
            raise

    def exists(self, key: str) -> bool:
        return self._get_path(key).exists()

    def delete(self, key: str) -> None:
        path = self._get_path(key)
        try:
            if path.exists():
                path.unlink()
        except OSError as exc:
            logger.warning(f"LocalStorageProvider: could not delete {path}: {exc}")
