from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Sequence, Tuple

import httpx

from .catalog import Catalog
from .config import VectricLSConfig

log = logging.getLogger(__name__)

INDEX_FILENAME = "index.json"
BUNDLED_CATALOG_DIR = Path(__file__).resolve().parent / "data" / "vectric-api"


class CatalogLoader:
    """Builds a ``Catalog`` from the categorized JSON files on disk.

    Each catalog directory holds an ``index.json`` naming the global-function and
    class category files. Several directories may be configured; when a name
    repeats, the directory listed first wins. Unreadable files are logged and
    skipped, so ``load`` always returns a catalog.
    """

    def __init__(self, config: VectricLSConfig):
        self._config = config

    @property
    def directories(self) -> Tuple[Path, ...]:
        return self._config.catalog_paths or (BUNDLED_CATALOG_DIR,)

    def load(self) -> Catalog:
        functions: list[Any] = []
        classes: list[Any] = []
        for directory in self.directories:
            dir_functions, dir_classes = load_catalog_dir(directory)
            functions.extend(dir_functions)
            classes.extend(dir_classes)
        catalog = Catalog.from_data(functions, classes)
        log.info("Loaded %d global functions and %d classes", len(catalog.functions), len(catalog.classes))
        return catalog


def load_catalog_dir(directory: Path) -> Tuple[List[Any], List[Any]]:
    index = _read_json_file(directory / INDEX_FILENAME)
    if not isinstance(index, dict):
        return [], []

    functions: list[Any] = []
    for file_name in _category_files(index, "globals"):
        data = _read_json_file(directory / file_name)
        if isinstance(data, dict):
            functions.extend(_as_list(data.get("functions")))

    classes: list[Any] = []
    for file_name in _category_files(index, "classes"):
        data = _read_json_file(directory / file_name)
        if isinstance(data, dict):
            classes.extend(_as_list(data.get("classes")))

    log.debug("Catalog %s: %d functions, %d classes", directory, len(functions), len(classes))
    return functions, classes


class CatalogFetcher:
    """Downloads the catalog from a remote mirror of the same file layout."""

    def __init__(self, config: VectricLSConfig):
        self._config = config

    @property
    def enabled(self) -> bool:
        return bool(self._config.enable_catalog_fetch and self._config.service.base_url)

    async def fetch(self) -> Catalog | None:
        if not self.enabled:
            log.debug("Catalog fetch disabled or no base URL configured")
            return None

        base_url = str(self._config.service.base_url).rstrip("/")
        headers: dict[str, str] = {}
        if self._config.service.token:
            headers["Authorization"] = str(self._config.service.token)

        try:
            async with httpx.AsyncClient(timeout=self._config.service.timeout) as client:
                index = await _get_json(client, f"{base_url}/{INDEX_FILENAME}", headers)
                if not isinstance(index, dict):
                    log.error("Catalog index unavailable from %s", base_url)
                    return None
                functions = await _fetch_entries(client, base_url, _category_files(index, "globals"), "functions", headers)
                classes = await _fetch_entries(client, base_url, _category_files(index, "classes"), "classes", headers)
        except (httpx.HTTPError, ValueError) as exc:
            log.error("Catalog fetch from %s failed: %s", base_url, exc)
            return None

        catalog = Catalog.from_data(functions, classes)
        log.info("Fetched %d global functions and %d classes from %s", len(catalog.functions), len(catalog.classes), base_url)
        return catalog


async def _fetch_entries(
    client: httpx.AsyncClient,
    base_url: str,
    files: Iterable[str],
    key: str,
    headers: Dict[str, str],
) -> List[Any]:
    entries: list[Any] = []
    for file_name in files:
        data = await _get_json(client, f"{base_url}/{file_name}", headers)
        if isinstance(data, dict):
            entries.extend(_as_list(data.get(key)))
    return entries


async def _get_json(client: httpx.AsyncClient, url: str, headers: Dict[str, str]) -> Any:
    log.debug("Catalog fetching %s", url)
    resp = await client.get(url, headers=headers)
    if resp.status_code != 200:
        log.warning("Catalog fetch returned %s for %s (body: %s)", resp.status_code, url, (resp.text or "").strip())
        return None
    return resp.json()


def _category_files(index: Dict[str, Any], section: str) -> Sequence[str]:
    block = index.get(section)
    if not isinstance(block, dict):
        return []
    files: list[str] = []
    for category in _as_list(block.get("categories")):
        if isinstance(category, dict) and isinstance(category.get("file"), str):
            files.append(category["file"])
    return files


def _as_list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


def _read_json_file(path: Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        log.debug("Catalog file not found: %s", path)
        return None
    except OSError as exc:
        log.warning("Failed to read catalog file %s: %s", path, exc)
        return None

    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        log.warning("Failed to parse catalog file %s: %s", path, exc)
        return None
