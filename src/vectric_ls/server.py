from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional

from lsprotocol import types
from pygls.lsp.server import LanguageServer

from . import __version__
from .catalog import Catalog
from .completions import completion_list_for_position
from .config import VectricLSConfig, load_config
from .hover import hover_for_position
from .loader import CatalogFetcher, CatalogLoader
from .signature_help import signature_help_for_code
from .tracing import TraceSink, logging_sink

log = logging.getLogger(__name__)

RELOAD_CATALOG_COMMAND = "vectric-ls.reloadCatalog"
COMPLETION_TRIGGERS = [".", ":", "(", ","]
SIGNATURE_TRIGGERS = ["(", ","]


class VectricLanguageServer(LanguageServer):
    def __init__(self) -> None:
        super().__init__("vectric-ls", __version__)
        self._config = VectricLSConfig.default(Path.cwd())
        self._catalog = Catalog.empty()
        self._trace_sink: TraceSink = logging_sink()

    @property
    def config(self) -> VectricLSConfig:
        return self._config

    @property
    def catalog(self) -> Catalog:
        return self._catalog

    @property
    def trace_sink(self) -> TraceSink:
        return self._trace_sink

    def load_workspace(self, root: Path) -> None:
        config, warnings = load_config(root)
        for warning in warnings:
            log.warning(warning)
        self._config = config
        self._trace_sink = logging_sink(logging.INFO if config.inference.trace else logging.DEBUG)
        self.replace_catalog(CatalogLoader(config).load())

    def replace_catalog(self, catalog: Catalog) -> None:
        # requests read self._catalog once, so swapping the reference is atomic for them
        self._catalog = catalog

    def document_source(self, uri: str) -> str:
        return self.workspace.get_text_document(uri).source


def on_initialized(server: VectricLanguageServer, params: types.InitializedParams) -> None:
    root = server.workspace.root_path
    server.load_workspace(Path(root) if root else Path.cwd())


def on_completion(server: VectricLanguageServer, params: types.CompletionParams) -> types.CompletionList:
    source = server.document_source(params.text_document.uri)
    return completion_list_for_position(
        source,
        params.position.line,
        params.position.character,
        server.catalog,
        window=server.config.inference.window_lines,
        sink=server.trace_sink,
    )


def on_hover(server: VectricLanguageServer, params: types.HoverParams) -> Optional[types.Hover]:
    source = server.document_source(params.text_document.uri)
    return hover_for_position(source, params.position.line, params.position.character, server.catalog)


def on_signature_help(server: VectricLanguageServer, params: types.SignatureHelpParams) -> Optional[types.SignatureHelp]:
    source = server.document_source(params.text_document.uri)
    return signature_help_for_code(source, params.position.line, params.position.character, server.catalog)


async def reload_catalog(server: VectricLanguageServer, *args: Any) -> Dict[str, Any]:
    """Reload config and catalog from disk, then from the remote service when enabled.

    Accepts an optional ``{"fetch": false}`` argument to skip the remote step.
    """
    options = next((arg for arg in args if isinstance(arg, dict)), {})
    server.load_workspace(server.config.workspace_root)
    source = "disk"

    fetcher = CatalogFetcher(server.config)
    if options.get("fetch", True) and fetcher.enabled:
        fetched = await fetcher.fetch()
        if fetched is not None:
            server.replace_catalog(fetched)
            source = "remote"
        else:
            log.warning("Keeping catalog loaded from disk; remote fetch failed")

    catalog = server.catalog
    return {"source": source, "functions": len(catalog.functions), "classes": len(catalog.classes)}


def create_server() -> VectricLanguageServer:
    server = VectricLanguageServer()
    server.feature(types.INITIALIZED)(on_initialized)
    server.feature(
        types.TEXT_DOCUMENT_COMPLETION,
        types.CompletionOptions(trigger_characters=COMPLETION_TRIGGERS),
    )(on_completion)
    server.feature(types.TEXT_DOCUMENT_HOVER)(on_hover)
    server.feature(
        types.TEXT_DOCUMENT_SIGNATURE_HELP,
        types.SignatureHelpOptions(trigger_characters=SIGNATURE_TRIGGERS),
    )(on_signature_help)
    server.command(RELOAD_CATALOG_COMMAND)(reload_catalog)
    return server
