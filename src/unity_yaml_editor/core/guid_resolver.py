"""
Asset GUID to file path resolution.

Unity records each asset's GUID in the ``.meta`` file next to it::

    fileFormatVersion: 2
    guid: 5f3c2a1b9d8e4f7a6b5c4d3e2f1a0b9c

A :class:`GuidResolver` scans a project's ``Assets/`` and ``Packages/``
folders for these files the first time a GUID is looked up. The map can be
persisted as JSON under ``.unity-yaml/guid-cache.json``, guarded by a
``filelock.FileLock`` so concurrent tool runs do not interleave writes.
"""

import json
import logging
import re
from pathlib import Path
from typing import Dict, Optional, Union

from filelock import FileLock

logger = logging.getLogger(__name__)

CACHE_DIR_NAME = ".unity-yaml"
CACHE_FILE_NAME = "guid-cache.json"
SCAN_ROOTS = ("Assets", "Packages")

_GUID_LINE = re.compile(r"^guid:\s*([0-9a-fA-F]{32})\s*$", re.MULTILINE)


def find_project_root(start: Optional[Union[str, Path]] = None) -> Optional[Path]:
    """Walk up from ``start`` to the first directory holding ``Assets/`` or ``.unity-yaml/``."""
    current = Path(start or Path.cwd()).resolve()
    if current.is_file():
        current = current.parent
    for directory in (current, *current.parents):
        if (directory / CACHE_DIR_NAME).is_dir() or (directory / "Assets").is_dir():
            return directory
    return None


def read_meta_guid(meta_path: Path) -> Optional[str]:
    """GUID declared in a ``.meta`` file, or None."""
    try:
        text = meta_path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        logger.debug("Skipping unreadable meta file %s: %s", meta_path, e)
        return None
    match = _GUID_LINE.search(text)
    return match.group(1).lower() if match else None


class GuidResolver:
    """Maps asset GUIDs to paths inside one Unity project.

    The map is built lazily on the first :meth:`resolve` call (or loaded from
    the persisted cache when ``persist`` is set) and held by this instance
    only.
    """

    def __init__(
        self,
        project_root: Union[str, Path],
        cache_path: Optional[Union[str, Path]] = None,
        persist: bool = False,
    ):
        self.project_root = Path(project_root)
        self.cache_path = (
            Path(cache_path)
            if cache_path is not None
            else self.project_root / CACHE_DIR_NAME / CACHE_FILE_NAME
        )
        self.persist = persist
        self._map: Optional[Dict[str, str]] = None

    def __repr__(self) -> str:
        return f"GuidResolver({str(self.project_root)!r})"

    @property
    def lock_path(self) -> Path:
        return self.cache_path.with_suffix(".lock")

    def resolve(self, guid: str) -> Optional[Path]:
        """Absolute path of the asset with ``guid``, or None.

        A persisted entry whose file has since disappeared triggers one
        rescan before giving up.
        """
        key = guid.strip().lower()
        mapping = self._ensure_map()
        relative = mapping.get(key)
        if relative is not None and not (self.project_root / relative).exists() and self.persist:
            mapping = self.rebuild()
            relative = mapping.get(key)
        if relative is None:
            logger.debug("GUID %s not found under %s", key, self.project_root)
            return None
        return self.project_root / relative

    def rebuild(self) -> Dict[str, str]:
        """Rescan the project and, when persisting, rewrite the cache file."""
        self._map = self._scan()
        if self.persist:
            self.save()
        return dict(self._map)

    def _ensure_map(self) -> Dict[str, str]:
        if self._map is None:
            loaded = self.load() if self.persist else None
            self._map = loaded if loaded is not None else self._scan()
            if loaded is None and self.persist:
                self.save()
        return self._map

    def _scan(self) -> Dict[str, str]:
        mapping: Dict[str, str] = {}
        for root_name in SCAN_ROOTS:
            root = self.project_root / root_name
            if not root.is_dir():
                continue
            for meta_path in sorted(root.rglob("*.meta")):
                guid = read_meta_guid(meta_path)
                if guid is None:
                    continue
                asset = meta_path.with_suffix("")
                mapping.setdefault(guid, asset.relative_to(self.project_root).as_posix())
        logger.info("Indexed %d asset GUIDs under %s", len(mapping), self.project_root)
        return mapping

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def load(self) -> Optional[Dict[str, str]]:
        """Read the persisted cache, or None if it is missing or unreadable."""
        if not self.cache_path.is_file():
            return None
        self.cache_path.parent.mkdir(parents=True, exist_ok=True)
        with FileLock(self.lock_path, timeout=10):
            try:
                data = json.loads(self.cache_path.read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError) as e:
                logger.warning("Ignoring unreadable GUID cache %s: %s", self.cache_path, e)
                return None
        if not isinstance(data, dict):
            logger.warning("Ignoring GUID cache %s: not a JSON object", self.cache_path)
            return None
        return {str(k).lower(): str(v) for k, v in data.items()}

    def save(self) -> Path:
        """Write the current map to the cache file."""
        mapping = self._map if self._map is not None else self._scan()
        self.cache_path.parent.mkdir(parents=True, exist_ok=True)
        with FileLock(self.lock_path, timeout=10):
            temp_file = self.cache_path.with_suffix(".tmp")
            try:
                temp_file.write_text(json.dumps(mapping, indent=2, sort_keys=True), encoding="utf-8")
                temp_file.replace(self.cache_path)
            except OSError:
                if temp_file.exists():
                    temp_file.unlink()
                raise
        logger.debug("Wrote GUID cache %s (%d entries)", self.cache_path, len(mapping))
        return self.cache_path
