from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from .catalog import Catalog, ClassDescriptor, Constructor, Parameter
from .document import lines_to_cursor, text_before_cursor, word_at
from .inference import DEFAULT_WINDOW, infer_type
from .tracing import TraceSink, emit

LUA_BUILTIN_TYPES = frozenset({"boolean", "number", "string", "function", "userdata", "thread", "table"})

LUA_KEYWORDS = frozenset(
    {
        "and",
        "break",
        "do",
        "else",
        "elseif",
        "end",
        "false",
        "for",
        "function",
        "if",
        "in",
        "local",
        "nil",
        "not",
        "or",
        "repeat",
        "return",
        "then",
        "true",
        "until",
        "while",
    }
)

PRIMITIVE_TYPES = frozenset({"number", "string", "boolean", "double", "int", "float", "integer", "bool"})

LOCAL_NAME_RE = re.compile(r"\blocal\s+\w*$")
KEYWORD_CONTEXT_PATTERNS = (
    re.compile(r"[=<>!]=?\s*\d+\s+\w*$"),  # == 2 t
    re.compile(r"[=<>!]=?\s*[\"'][^\"']*[\"']\s+\w*$"),  # == 'x' t
    re.compile(r"[=<>!]=?\s*\w+\s+\w*$"),  # == var t
    re.compile(r"\b(?:and|or|not)\s+\w*$"),
    re.compile(r"\)\s+\w*$"),
)
MEMBER_RE = re.compile(r"(\w+)\.(\w*)$")
METHOD_RE = re.compile(r"(\w+):(\w*)$")
CALL_TARGET_RE = re.compile(r"(\w+)$")
TYPE_ANNOTATION_RE = re.compile(r":\s*(\w+)")
DOC_TYPE_RE = re.compile(r"(?::\s*)?(\w+)(?:\s*-|$)")
CAPITALIZED_RE = re.compile(r"^[A-Z]")
LABEL_PARAMS_RE = re.compile(r"\([^)]*\)")


class ContextKind(str, Enum):
    KEYWORD = "keyword"
    MEMBER_ACCESS = "member-access"
    METHOD_ACCESS = "method-access"
    CALL_ARGUMENT = "call-argument"
    IDENTIFIER = "identifier"


@dataclass(frozen=True)
class CompletionContext:
    kind: ContextKind
    object_name: Optional[str] = None
    class_name: Optional[str] = None
    resolved_type: Optional[str] = None
    prefix: str = ""
    function_name: Optional[str] = None
    argument_index: Optional[int] = None
    expected_type: Optional[str] = None


@dataclass(frozen=True)
class CallSite:
    name: str
    argument_index: int
    open_paren: int


def classify(
    code: str,
    line: int,
    character: int,
    catalog: Catalog,
    *,
    window: int = DEFAULT_WINDOW,
    sink: Optional[TraceSink] = None,
) -> CompletionContext:
    """Work out what is being typed at the cursor; the first matching rule wins."""
    before = text_before_cursor(code, line, character)
    ctx = _classify(code, before, line, character, catalog, window, sink)
    emit(
        sink,
        "classify",
        kind=ctx.kind.value,
        object=ctx.object_name,
        cls=ctx.class_name,
        function=ctx.function_name,
        argument=ctx.argument_index,
        expected=ctx.expected_type,
    )
    return ctx


def _classify(
    code: str,
    before: str,
    line: int,
    character: int,
    catalog: Catalog,
    window: int,
    sink: Optional[TraceSink],
) -> CompletionContext:
    if is_keyword_context(before, word_at(code, line, character)):
        return CompletionContext(kind=ContextKind.KEYWORD)

    for pattern, kind in ((MEMBER_RE, ContextKind.MEMBER_ACCESS), (METHOD_RE, ContextKind.METHOD_ACCESS)):
        match = pattern.search(before)
        if match:
            object_name, prefix = match.group(1), match.group(2) or ""
            lines = lines_to_cursor(code, line, character)
            resolved = infer_type(lines, line, object_name, catalog, window=window, sink=sink)
            return CompletionContext(
                kind=kind,
                object_name=object_name,
                class_name=resolved or object_name,
                resolved_type=resolved,
                prefix=prefix,
            )

    call = find_open_call(before)
    if call:
        expected = expected_argument_type(call.name, call.argument_index, catalog)
        if expected:
            return CompletionContext(
                kind=ContextKind.CALL_ARGUMENT,
                function_name=call.name,
                argument_index=call.argument_index,
                expected_type=expected,
            )

    return CompletionContext(kind=ContextKind.IDENTIFIER, prefix=_identifier_prefix(before))


def is_keyword_context(before: str, word: str) -> bool:
    lowered = word.lower()
    if lowered in LUA_BUILTIN_TYPES or lowered in LUA_KEYWORDS:
        return True
    if LOCAL_NAME_RE.search(before):
        return True
    return any(pattern.search(before) for pattern in KEYWORD_CONTEXT_PATTERNS)


def find_open_call(before: str) -> Optional[CallSite]:
    """Locate the innermost unclosed call in ``before`` and the argument slot of the cursor."""
    depth = 0
    open_paren = -1
    for idx in range(len(before) - 1, -1, -1):
        ch = before[idx]
        if ch == ")":
            depth += 1
        elif ch == "(":
            if depth == 0:
                open_paren = idx
                break
            depth -= 1
    if open_paren < 0:
        return None
    match = CALL_TARGET_RE.search(before[:open_paren])
    if not match:
        return None
    # flat count; commas inside closed sub-calls are counted too
    argument_index = before[open_paren + 1 :].count(",")
    return CallSite(name=match.group(1), argument_index=argument_index, open_paren=open_paren)


def select_constructor(cls: ClassDescriptor, argument_index: int) -> Optional[Constructor]:
    if not cls.constructors:
        return None
    for ctor in cls.constructors:
        if len(ctor.parameters) > argument_index:
            return ctor
    return cls.constructors[0]


def expected_argument_type(name: str, argument_index: int, catalog: Catalog) -> Optional[str]:
    fn = catalog.function(name)
    if fn and fn.signature:
        expected = parameter_type(fn.signature.label, fn.signature.parameters, argument_index)
        if expected:
            return expected

    cls = catalog.cls(name)
    if cls:
        ctor = select_constructor(cls, argument_index)
        if ctor:
            return parameter_type(ctor.label, ctor.parameters, argument_index)
    return None


def parameter_type(label: str, parameters: Sequence[Parameter], index: int) -> Optional[str]:
    """Expected type of the parameter at ``index``.

    Tries the ``name: Type`` annotation in the signature label, then in the
    parameter's own label, then a capitalized or primitive word in its docs.
    """
    if index >= len(parameters):
        return None

    label_params = LABEL_PARAMS_RE.search(label or "")
    if label_params:
        entries = [entry.strip() for entry in label_params.group(0)[1:-1].split(",")]
        if index < len(entries):
            match = TYPE_ANNOTATION_RE.search(entries[index])
            if match:
                return match.group(1)

    param = parameters[index]
    match = TYPE_ANNOTATION_RE.search(param.label)
    if match:
        return match.group(1)

    match = DOC_TYPE_RE.search(param.documentation)
    if match:
        candidate = match.group(1)
        if CAPITALIZED_RE.match(candidate) or candidate.lower() in PRIMITIVE_TYPES:
            return candidate
    return None


def is_primitive(type_name: str | None) -> bool:
    return bool(type_name) and type_name.lower() in PRIMITIVE_TYPES


def _identifier_prefix(before: str) -> str:
    match = re.search(r"[A-Za-z_]\w*$", before)
    return match.group(0) if match else ""
