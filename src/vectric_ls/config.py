from __future__ import annotations

import json
import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Tuple

log = logging.getLogger(__name__)

CONFIG_FILENAME = ".vectric-ls.json"
DEFAULT_WINDOW_LINES = 100

ENV_VAR_RE = re.compile(r"\$\{(\w+)\}|\$(\w+)")
TRUE_STRINGS = frozenset({"true", "1"})
FALSE_STRINGS = frozenset({"false", "0"})


@dataclass
class CatalogServiceConfig:
    base_url: str | None = None
    token: str | None = None
    timeout: float = 10.0


@dataclass
class InferenceSettings:
    window_lines: int = DEFAULT_WINDOW_LINES
    trace: bool = False


@dataclass
class VectricLSConfig:
    workspace_root: Path
    catalog_paths: Tuple[Path, ...] = ()
    enable_catalog_fetch: bool = False
    service: CatalogServiceConfig = field(default_factory=CatalogServiceConfig)
    inference: InferenceSettings = field(default_factory=InferenceSettings)

    @classmethod
    def default(cls, workspace_root: Path) -> "VectricLSConfig":
        return cls(workspace_root=workspace_root)


def load_config(workspace_root: Path) -> Tuple[VectricLSConfig, List[str]]:
    """Read ``.vectric-ls.json`` from the workspace root.

    Problems are returned as warning strings and the affected settings keep their
    defaults; a missing file yields the default config with no warnings.
    """
    cfg = VectricLSConfig.default(workspace_root)
    warnings: list[str] = []
    path = workspace_root / CONFIG_FILENAME
    if not path.exists():
        return cfg, warnings

    try:
        raw = json.loads(path.read_text())
    except (OSError, json.JSONDecodeError) as exc:
        warnings.append(f"Failed to read {path}: {exc}")
        return cfg, warnings
    if not isinstance(raw, dict):
        warnings.append(f"{path} must contain a JSON object")
        return cfg, warnings

    data = _substitute(raw, workspace_root, warnings)

    paths = data.get("catalogPaths")
    if isinstance(paths, list):
        cfg.catalog_paths = tuple(_resolve_path(workspace_root, p) for p in paths if isinstance(p, str) and p)
    elif paths is not None:
        warnings.append("catalogPaths must be a list of directories")

    cfg.enable_catalog_fetch = _parse_bool(
        data.get("enableCatalogFetch"), "enableCatalogFetch", cfg.enable_catalog_fetch, warnings
    )

    service = data.get("catalogService") or {}
    if isinstance(service, dict):
        if service.get("baseUrl"):
            cfg.service.base_url = str(service["baseUrl"])
        if service.get("token"):
            cfg.service.token = str(service["token"])
        timeout = service.get("timeout")
        if isinstance(timeout, (int, float)) and timeout > 0:
            cfg.service.timeout = float(timeout)

    inference = data.get("inference") or {}
    if isinstance(inference, dict):
        window = inference.get("windowLines")
        if isinstance(window, int) and not isinstance(window, bool) and window >= 0:
            cfg.inference.window_lines = window
        elif window is not None:
            warnings.append(f"inference.windowLines must be a non-negative integer, got {window!r}")
        cfg.inference.trace = _parse_bool(inference.get("trace"), "inference.trace", cfg.inference.trace, warnings)

    for warning in warnings:
        log.debug("Config warning: %s", warning)
    return cfg, warnings


def _parse_bool(value: Any, key: str, default: bool, warnings: List[str]) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in TRUE_STRINGS:
            return True
        if lowered in FALSE_STRINGS:
            return False
    warnings.append(f"{key} must be true or false, got {value!r}")
    return default


def _resolve_path(workspace_root: Path, value: str) -> Path:
    path = Path(value).expanduser()
    return path if path.is_absolute() else workspace_root / path


def _substitute(value: Any, workspace_root: Path, warnings: List[str]) -> Any:
    if isinstance(value, dict):
        return {key: _substitute(item, workspace_root, warnings) for key, item in value.items()}
    if isinstance(value, list):
        return [_substitute(item, workspace_root, warnings) for item in value]
    if isinstance(value, str):
        return _expand_string(value, workspace_root, warnings)
    return value


def _expand_string(text: str, workspace_root: Path, warnings: List[str]) -> str | None:
    missing: list[str] = []

    def _replace(match: re.Match[str]) -> str:
        name = match.group(1) or match.group(2)
        if name == "workspaceRoot":
            return str(workspace_root)
        env_value = os.environ.get(name)
        if env_value is None:
            missing.append(name)
            return ""
        return env_value

    expanded = ENV_VAR_RE.sub(_replace, text)
    if missing:
        for name in missing:
            warnings.append(f"Environment variable '{name}' is not set (used in {text!r})")
        return None
    return expanded
