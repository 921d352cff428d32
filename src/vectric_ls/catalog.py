from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, List, Optional, Tuple

log = logging.getLogger(__name__)

EXTENDS_RE = re.compile(r"extends\s+(\w+)")


@dataclass(frozen=True)
class Parameter:
    label: str
    documentation: str = ""


@dataclass(frozen=True)
class Signature:
    label: str
    documentation: str = ""
    parameters: Tuple[Parameter, ...] = ()
    returns: Optional[str] = None

    @property
    def name(self) -> str:
        return self.label.split("(")[0].strip()

    @property
    def first_return(self) -> Optional[str]:
        """First entry of a comma-separated return list, the only one used for typing."""
        if not self.returns:
            return None
        first = self.returns.split(",")[0].strip()
        return first or None


@dataclass(frozen=True)
class FunctionDescriptor:
    name: str
    detail: str = ""
    documentation: str = ""
    signature: Optional[Signature] = None

    @property
    def return_type(self) -> Optional[str]:
        return self.signature.first_return if self.signature else None


@dataclass(frozen=True)
class Constructor:
    label: str
    documentation: str = ""
    parameters: Tuple[Parameter, ...] = ()


@dataclass(frozen=True)
class Property:
    name: str
    detail: str = ""
    documentation: str = ""
    read_only: bool = False


@dataclass(frozen=True)
class Constant:
    name: str
    value: str = ""


@dataclass(frozen=True)
class ClassDescriptor:
    name: str
    detail: str = ""
    documentation: str = ""
    constructors: Tuple[Constructor, ...] = ()
    properties: Tuple[Property, ...] = ()
    methods: Tuple[FunctionDescriptor, ...] = ()
    constants: Tuple[Constant, ...] = ()

    @property
    def base_name(self) -> Optional[str]:
        match = EXTENDS_RE.search(self.detail)
        return match.group(1) if match else None

    def find_property(self, name: str) -> Optional[Property]:
        return next((prop for prop in self.properties if prop.name == name), None)

    def find_method(self, name: str) -> Optional[FunctionDescriptor]:
        return next((meth for meth in self.methods if meth.name == name), None)

    def find_constant(self, name: str) -> Optional[Constant]:
        return next((const for const in self.constants if const.name == name), None)


@dataclass(frozen=True)
class Catalog:
    """Read-only table of global functions and classes.

    Functions and classes are separate namespaces. Lookups are exact and
    case-sensitive; when a name repeats, the first descriptor wins.
    """

    functions: Tuple[FunctionDescriptor, ...] = ()
    classes: Tuple[ClassDescriptor, ...] = ()
    _function_index: Dict[str, FunctionDescriptor] = field(init=False, repr=False, compare=False)
    _class_index: Dict[str, ClassDescriptor] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        function_index: dict[str, FunctionDescriptor] = {}
        for fn in self.functions:
            function_index.setdefault(fn.name, fn)
        class_index: dict[str, ClassDescriptor] = {}
        for cls in self.classes:
            class_index.setdefault(cls.name, cls)
        object.__setattr__(self, "_function_index", function_index)
        object.__setattr__(self, "_class_index", class_index)

    @classmethod
    def empty(cls) -> "Catalog":
        return cls()

    @classmethod
    def from_data(cls, functions: Iterable[Any], classes: Iterable[Any]) -> "Catalog":
        parsed_functions = [fn for fn in (_parse_function(item) for item in functions or ()) if fn]
        parsed_classes = [c for c in (_parse_class(item) for item in classes or ()) if c]
        return cls(functions=tuple(parsed_functions), classes=tuple(parsed_classes))

    def function(self, name: str | None) -> Optional[FunctionDescriptor]:
        if not name:
            return None
        return self._function_index.get(name)

    def cls(self, name: str | None) -> Optional[ClassDescriptor]:
        if not name:
            return None
        return self._class_index.get(name)

    def is_class(self, name: str | None) -> bool:
        return self.cls(name) is not None

    def with_inheritance(self, cls: ClassDescriptor) -> ClassDescriptor:
        """Return ``cls`` with base-class members merged in front of its own."""
        chain: list[ClassDescriptor] = []
        seen: set[str] = set()
        current: ClassDescriptor | None = cls
        while current is not None and current.name not in seen:
            seen.add(current.name)
            chain.append(current)
            current = self.cls(current.base_name)
        if len(chain) == 1:
            return cls

        properties: list[Property] = []
        methods: list[FunctionDescriptor] = []
        constants: list[Constant] = []
        for ancestor in reversed(chain):
            properties.extend(ancestor.properties)
            methods.extend(ancestor.methods)
            constants.extend(ancestor.constants)
        return replace(cls, properties=tuple(properties), methods=tuple(methods), constants=tuple(constants))

    def class_members(self, name: str | None) -> Optional[ClassDescriptor]:
        cls = self.cls(name)
        if cls is None:
            return None
        return self.with_inheritance(cls)


def _text(data: Dict[str, Any], key: str) -> str:
    value = data.get(key)
    return value if isinstance(value, str) else ""


def _parse_parameters(raw: Any) -> Tuple[Parameter, ...]:
    if not isinstance(raw, list):
        return ()
    params: list[Parameter] = []
    for item in raw:
        if isinstance(item, dict):
            params.append(Parameter(label=_text(item, "label"), documentation=_text(item, "documentation")))
        elif isinstance(item, str):
            params.append(Parameter(label=item))
    return tuple(params)


def _parse_signature(raw: Any) -> Optional[Signature]:
    if not isinstance(raw, dict):
        return None
    returns = raw.get("returns")
    return Signature(
        label=_text(raw, "label"),
        documentation=_text(raw, "documentation"),
        parameters=_parse_parameters(raw.get("parameters")),
        returns=returns if isinstance(returns, str) and returns.strip() else None,
    )


def _parse_function(raw: Any) -> Optional[FunctionDescriptor]:
    if not isinstance(raw, dict) or not _text(raw, "name"):
        log.debug("Skipping catalog function without a name: %r", raw)
        return None
    return FunctionDescriptor(
        name=raw["name"],
        detail=_text(raw, "detail"),
        documentation=_text(raw, "documentation"),
        signature=_parse_signature(raw.get("signature")),
    )


def _parse_class(raw: Any) -> Optional[ClassDescriptor]:
    if not isinstance(raw, dict) or not _text(raw, "name"):
        log.debug("Skipping catalog class without a name: %r", raw)
        return None

    constructors: list[Constructor] = []
    for item in _list(raw.get("constructors")):
        if isinstance(item, dict):
            constructors.append(
                Constructor(
                    label=_text(item, "label"),
                    documentation=_text(item, "documentation"),
                    parameters=_parse_parameters(item.get("parameters")),
                )
            )

    properties: list[Property] = []
    for item in _list(raw.get("properties")):
        if isinstance(item, dict) and _text(item, "name"):
            properties.append(
                Property(
                    name=item["name"],
                    detail=_text(item, "detail"),
                    documentation=_text(item, "documentation"),
                    read_only=bool(item.get("readOnly", False)),
                )
            )

    methods = [m for m in (_parse_function(item) for item in _list(raw.get("methods"))) if m]

    constants: list[Constant] = []
    for item in _list(raw.get("constants")):
        if isinstance(item, dict) and _text(item, "name"):
            value = item.get("value")
            constants.append(Constant(name=item["name"], value="" if value is None else str(value)))

    return ClassDescriptor(
        name=raw["name"],
        detail=_text(raw, "detail"),
        documentation=_text(raw, "documentation"),
        constructors=tuple(constructors),
        properties=tuple(properties),
        methods=tuple(methods),
        constants=tuple(constants),
    )


def _list(raw: Any) -> List[Any]:
    return raw if isinstance(raw, list) else []
