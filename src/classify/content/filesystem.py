"""
Filesystem Content Storage
One pretty-printed JSON file per record, named <id>.json under a base directory
"""

import asyncio
import logging
import os
import tempfile
from pathlib import Path
from typing import List, Optional

from ..errors import StorageError
from .models import Content
from .storage import ContentStorage, canonical_id, decode_content

logger = logging.getLogger(__name__)


class FilesystemContentStorage(ContentStorage):
    """Stores each record in its own file; list and find_by_hash scan the directory"""

    backend = "filesystem"

    def __init__(self, base_dir: str, timeout: Optional[float] = None):
        super().__init__(timeout=timeout)
        self.base_dir = Path(base_dir)
        try:
            self.base_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Failed to create directory {self.base_dir}: {e}", self.backend, "init")

    def _file_path(self, content_id: str) -> Path:
        return self.base_dir / f"{content_id}.json"

    # =============================================
    # Blocking helpers, run in a worker thread
    # =============================================
    def _write_file(self, path: Path, data: str) -> None:
        # Write a sibling temp file then rename, so readers never see a partial record
        fd, tmp_path = tempfile.mkstemp(dir=self.base_dir, prefix=".tmp-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(data)
            os.replace(tmp_path, path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def _read_file(self, path: Path) -> Optional[str]:
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def _remove_file(self, path: Path) -> bool:
        try:
            path.unlink()
            return True
        except FileNotFoundError:
            return False

    def _scan_ids(self) -> List[str]:
        return [
            entry.stem
            for entry in self.base_dir.iterdir()
            if entry.is_file() and entry.suffix == ".json" and canonical_id(entry.stem) == entry.stem
        ]

    # =============================================
    # ContentStorage implementation
    # =============================================
    async def _store(self, content: Content) -> None:
        path = self._file_path(str(content.id))
        data = content.model_dump_json(indent=2)
        await asyncio.to_thread(self._write_file, path, data)
        logger.debug(f"[Filesystem] Stored content {content.id} at {path}")

    async def _get(self, content_id: str) -> Optional[Content]:
        path = self._file_path(content_id)
        raw = await asyncio.to_thread(self._read_file, path)
        if raw is None:
            return None
        return decode_content(raw, str(path))

    async def _list(self) -> List[Content]:
        contents = []
        for content_id in await asyncio.to_thread(self._scan_ids):
            # A file removed mid-scan is skipped
            content = await self._get(content_id)
            if content is not None:
                contents.append(content)
        return contents

    async def _delete(self, content_id: str) -> bool:
        removed = await asyncio.to_thread(self._remove_file, self._file_path(content_id))
        if removed:
            logger.debug(f"[Filesystem] Deleted content {content_id}")
        return removed
