from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional, Sequence, Tuple

from .catalog import Catalog
from .tracing import TraceSink, emit

DEFAULT_WINDOW = 100
# nested chain lookups per request; each starts at least one line higher
MAX_CHAIN_DEPTH = 150


@dataclass
class _Scan:
    """State shared by every lookup made for one ``infer_type`` call."""

    lines: Sequence[str]
    catalog: Catalog
    floor: int
    sink: Optional[TraceSink]
    memo: Dict[Tuple[str, int], Optional[str]] = field(default_factory=dict)
    depth: int = 0


BindingRule = Callable[[str, int, str, _Scan], Optional[str]]


def infer_type(
    lines: Sequence[str],
    line: int,
    name: str,
    catalog: Catalog,
    *,
    window: int = DEFAULT_WINDOW,
    sink: Optional[TraceSink] = None,
) -> Optional[str]:
    """Infer the class bound to ``name`` by scanning backward from ``line``.

    Each line is checked against the binding rules in order; the first rule that
    resolves to a known class wins and the search stops there. A ``for``/``function``
    declaration of the name ends the search without a type. Chained lookups
    (``a = b.Prop``, ``a = b:Method()``) never look above the first line of the
    original window.
    """
    if not name or not lines:
        return None
    line = min(line, len(lines) - 1)
    scan = _Scan(lines=lines, catalog=catalog, floor=max(0, line - max(window, 0)), sink=sink)
    return _lookup(scan, name, line)


def _lookup(scan: _Scan, name: str, line: int) -> Optional[str]:
    key = (name, line)
    if key in scan.memo:
        return scan.memo[key]
    if scan.depth >= MAX_CHAIN_DEPTH:
        return None
    scan.depth += 1
    try:
        resolved = _scan_back(scan, name, line)
    finally:
        scan.depth -= 1
    scan.memo[key] = resolved
    return resolved


def _scan_back(scan: _Scan, name: str, line: int) -> Optional[str]:
    ident = re.escape(name)
    for line_num in range(line, scan.floor - 1, -1):
        text = scan.lines[line_num]
        if name not in text:
            continue
        if _not_first_binding(ident, text):
            emit(scan.sink, "infer.skip", name=name, line=line_num, reason="not-first-binding")
            continue
        for rule_name, rule in _RULES:
            resolved = rule(text, line_num, ident, scan)
            if resolved:
                emit(scan.sink, "infer.bind", name=name, line=line_num, rule=rule_name, type=resolved)
                return resolved
        if re.search(rf"\b(?:for|function)\s+{ident}\b", text):
            emit(scan.sink, "infer.stop", name=name, line=line_num)
            return None
    return None


def _not_first_binding(ident: str, text: str) -> bool:
    return re.search(rf"\w+\s*,\s*.*\b{ident}\b.*=", text) is not None


def _owner_type(scan: _Scan, object_name: str, line_num: int) -> Optional[str]:
    # the right-hand side refers to bindings made before this line
    if line_num <= scan.floor:
        return None
    return _lookup(scan, object_name, line_num - 1)


def _local_constructor(text: str, line_num: int, ident: str, scan: _Scan) -> Optional[str]:
    match = re.search(rf"local\s+{ident}\s*(?:,\s*\w+)?\s*=\s*(\w+)\s*\(", text)
    if match and scan.catalog.is_class(match.group(1)):
        return match.group(1)
    return None


def _constructor(text: str, line_num: int, ident: str, scan: _Scan) -> Optional[str]:
    match = re.search(rf"\b{ident}\s*(?:,\s*\w+)?\s*=\s*(\w+)\s*\(", text)
    if match and scan.catalog.is_class(match.group(1)):
        return match.group(1)
    return None


def _property_chain(text: str, line_num: int, ident: str, scan: _Scan) -> Optional[str]:
    match = re.search(rf"\b{ident}\s*=\s*(\w+)\.(\w+)", text)
    if not match:
        return None
    object_name, prop_name = match.groups()
    members = scan.catalog.class_members(_owner_type(scan, object_name, line_num))
    if members is None:
        return None
    prop = members.find_property(prop_name)
    if prop and scan.catalog.is_class(prop.detail):
        return prop.detail
    return None


def _function_return(text: str, line_num: int, ident: str, scan: _Scan) -> Optional[str]:
    match = re.search(rf"(?:local\s+)?\b{ident}\s*(?:,\s*\w+)?\s*=\s*(\w+)\s*\(", text)
    if not match:
        return None
    fn = scan.catalog.function(match.group(1))
    if fn and scan.catalog.is_class(fn.return_type):
        return fn.return_type
    return None


def _method_return(text: str, line_num: int, ident: str, scan: _Scan) -> Optional[str]:
    match = re.search(rf"(?:local\s+)?\b{ident}\s*(?:,\s*\w+)?\s*=\s*(\w+):(\w+)\s*\(", text)
    if not match:
        return None
    object_name, method_name = match.groups()
    members = scan.catalog.class_members(_owner_type(scan, object_name, line_num))
    if members is None:
        return None
    method = members.find_method(method_name)
    if method and scan.catalog.is_class(method.return_type):
        return method.return_type
    return None


_RULES: tuple[tuple[str, BindingRule], ...] = (
    ("local-constructor", _local_constructor),
    ("constructor", _constructor),
    ("property", _property_chain),
    ("function-return", _function_return),
    ("method-return", _method_return),
)
