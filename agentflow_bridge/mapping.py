"""SKU to variant id mapping served to the storefront.

The mapping lives in a JSON file on disk. Readers always see a complete
snapshot: ``reload`` builds a new read-only mapping and swaps it in.
"""

from __future__ import annotations

import json
import logging
import threading
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Any

logger = logging.getLogger(__name__)

_EMPTY: Mapping[str, Any] = MappingProxyType({})


class MappingFileError(ValueError):
    pass


class MappingStore:
    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._lock = threading.Lock()
        self._snapshot: Mapping[str, Any] = _EMPTY

    @property
    def mapping(self) -> Mapping[str, Any]:
        return self._snapshot

    def reload(self) -> int:
        with self._lock:
            try:
                loaded = self._read_file()
            except (OSError, ValueError) as exc:
                logger.error(
                    "mapping.load_failed",
                    extra={"path": str(self._path), "error": str(exc)},
                )
                loaded = {}
            self._snapshot = MappingProxyType(loaded)
            count = len(loaded)
        logger.info("mapping.loaded", extra={"path": str(self._path), "count": count})
        return count

    def _read_file(self) -> dict[str, Any]:
        raw = self._path.read_text(encoding="utf-8")
        try:
            parsed = json.loads(raw)
        except ValueError as exc:
            raise MappingFileError(f"mapping file is not valid JSON: {exc}") from exc
        if not isinstance(parsed, dict):
            raise MappingFileError("mapping file must contain a JSON object of {SKU: id}")
        return parsed
