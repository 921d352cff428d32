from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Sequence

from lsprotocol import types

from .catalog import Catalog, ClassDescriptor, Constructor, FunctionDescriptor, Parameter
from .inference import DEFAULT_WINDOW
from .lexical import CompletionContext, ContextKind, classify, is_primitive
from .tracing import TraceSink

log = logging.getLogger(__name__)

# "!" sorts before identifiers, "~" after them
PREFERRED_SORT = "!"
TRAILING_SORT = "~"


class CandidateKind(str, Enum):
    FUNCTION = "function"
    CLASS = "class"
    PROPERTY = "property"
    METHOD = "method"
    CONSTANT = "constant"
    CONSTRUCTOR = "constructor"


LSP_KINDS = {
    CandidateKind.FUNCTION: types.CompletionItemKind.Function,
    CandidateKind.CLASS: types.CompletionItemKind.Class,
    CandidateKind.PROPERTY: types.CompletionItemKind.Property,
    CandidateKind.METHOD: types.CompletionItemKind.Method,
    CandidateKind.CONSTANT: types.CompletionItemKind.Constant,
    CandidateKind.CONSTRUCTOR: types.CompletionItemKind.Constructor,
}


@dataclass(frozen=True)
class Candidate:
    name: str
    kind: CandidateKind
    detail: str = ""
    documentation: str = ""
    insert_text: Optional[str] = None
    is_snippet: bool = False
    preselect: bool = False
    sort_text: str = ""


@dataclass(frozen=True)
class CandidateList:
    """Ranked candidates for one request.

    ``intentional`` marks an empty list that is the answer (a keyword is being
    typed, or the argument slot wants a primitive) rather than a lack of matches,
    so the editor should not fall back to its own word suggestions.
    """

    items: tuple[Candidate, ...] = ()
    is_incomplete: bool = False
    intentional: bool = False


def select_candidates(context: CompletionContext, catalog: Catalog) -> CandidateList:
    if context.kind is ContextKind.KEYWORD:
        return CandidateList(intentional=True)
    if context.kind is ContextKind.MEMBER_ACCESS:
        return CandidateList(items=tuple(_member_candidates(context, catalog)))
    if context.kind is ContextKind.METHOD_ACCESS:
        return CandidateList(items=tuple(_method_candidates(context, catalog)))
    if context.kind is ContextKind.CALL_ARGUMENT:
        return _argument_candidates(context, catalog)
    return CandidateList(items=tuple(_identifier_candidates(context.prefix, catalog)))


def _member_candidates(context: CompletionContext, catalog: Catalog) -> List[Candidate]:
    cls = catalog.class_members(context.class_name)
    if cls is None:
        return []
    items: list[Candidate] = []
    for prop in cls.properties:
        if context.prefix and not prop.name.startswith(context.prefix):
            continue
        access = "*(Read-only)*" if prop.read_only else "*(Read/write)*"
        items.append(
            Candidate(
                name=prop.name,
                kind=CandidateKind.PROPERTY,
                detail=prop.detail,
                documentation=f"{prop.documentation}\n\n{access}",
                insert_text=prop.name,
                sort_text=f"{TRAILING_SORT}{prop.name}",
            )
        )
    for const in cls.constants:
        if context.prefix and not const.name.startswith(context.prefix):
            continue
        items.append(
            Candidate(
                name=const.name,
                kind=CandidateKind.CONSTANT,
                detail=const.value,
                documentation=const.value,
                insert_text=const.name,
                sort_text=f"{TRAILING_SORT}{const.name}",
            )
        )
    return items


def _method_candidates(context: CompletionContext, catalog: Catalog) -> List[Candidate]:
    cls = catalog.class_members(context.class_name)
    if cls is None:
        return []
    items: list[Candidate] = []
    for method in cls.methods:
        if context.prefix and not method.name.startswith(context.prefix):
            continue
        params = method.signature.parameters if method.signature else ()
        items.append(
            Candidate(
                name=method.name,
                kind=CandidateKind.METHOD,
                detail=method.detail,
                documentation=method.documentation,
                insert_text=call_snippet(method.name, params),
                is_snippet=True,
                sort_text=f"{TRAILING_SORT}{method.name}",
            )
        )
    return items


def _argument_candidates(context: CompletionContext, catalog: Catalog) -> CandidateList:
    expected = context.expected_type
    if not expected:
        return CandidateList()
    if is_primitive(expected):
        log.debug("Primitive argument type %s for %s; no object suggestions", expected, context.function_name)
        return CandidateList(is_incomplete=False, intentional=True)

    items: list[Candidate] = []
    cls = catalog.cls(expected)
    if cls and cls.constructors:
        items.append(
            Candidate(
                name=cls.name,
                kind=CandidateKind.CONSTRUCTOR,
                detail=f"{cls.detail} (constructor)",
                documentation=f"Expected type: **{expected}**\n\n{cls.documentation}",
                insert_text=constructor_snippet(cls.name, cls.constructors[0]),
                is_snippet=True,
                preselect=True,
                sort_text=f"{PREFERRED_SORT}{cls.name}",
            )
        )

    for fn in catalog.functions:
        if fn.return_type != expected:
            continue
        items.append(
            Candidate(
                name=fn.name,
                kind=CandidateKind.FUNCTION,
                detail=f"{fn.detail} → {expected}",
                documentation=f"Expected type: **{expected}**\n\n{fn.documentation}",
                insert_text=function_snippet(fn),
                is_snippet=fn.signature is not None,
                preselect=True,
                sort_text=f"{PREFERRED_SORT}{fn.name}",
            )
        )
    return CandidateList(items=tuple(items))


def _identifier_candidates(prefix: str, catalog: Catalog) -> List[Candidate]:
    items: list[Candidate] = []
    for fn in catalog.functions:
        if prefix and not fn.name.startswith(prefix):
            continue
        items.append(
            Candidate(
                name=fn.name,
                kind=CandidateKind.FUNCTION,
                detail=fn.detail,
                documentation=fn.documentation,
                insert_text=function_snippet(fn),
                is_snippet=fn.signature is not None,
                sort_text=f"{TRAILING_SORT}{fn.name}",
            )
        )
    for cls in catalog.classes:
        if prefix and not cls.name.startswith(prefix):
            continue
        items.append(_class_candidate(cls))
    return items


def _class_candidate(cls: ClassDescriptor) -> Candidate:
    if cls.constructors:
        insert_text: Optional[str] = constructor_snippet(cls.name, cls.constructors[0])
    else:
        insert_text = None
    return Candidate(
        name=cls.name,
        kind=CandidateKind.CLASS,
        detail=cls.detail,
        documentation=cls.documentation,
        insert_text=insert_text,
        is_snippet=insert_text is not None,
        sort_text=f"{TRAILING_SORT}{cls.name}",
    )


def call_snippet(name: str, parameters: Sequence[Parameter]) -> str:
    placeholders = ", ".join(
        f"${{{idx}:{_escape_placeholder(param.label)}}}" for idx, param in enumerate(parameters, start=1)
    )
    return f"{name}({placeholders})$0"


def constructor_snippet(name: str, ctor: Constructor) -> str:
    return call_snippet(name, ctor.parameters)


def function_snippet(fn: FunctionDescriptor) -> Optional[str]:
    if fn.signature is None:
        return None
    name = fn.signature.name or fn.name
    return call_snippet(name, fn.signature.parameters)


def _escape_placeholder(text: str) -> str:
    return text.replace("\\", "\\\\").replace("$", "\\$").replace("}", "\\}")


def completion_list_for_position(
    code: str,
    line: int,
    character: int,
    catalog: Catalog,
    *,
    window: int = DEFAULT_WINDOW,
    sink: Optional[TraceSink] = None,
) -> types.CompletionList:
    context = classify(code, line, character, catalog, window=window, sink=sink)
    result = select_candidates(context, catalog)
    return types.CompletionList(is_incomplete=result.is_incomplete, items=completion_items(result.items))


def completion_items(candidates: Iterable[Candidate]) -> List[types.CompletionItem]:
    items: list[types.CompletionItem] = []
    for cand in candidates:
        items.append(
            types.CompletionItem(
                label=cand.name,
                kind=LSP_KINDS[cand.kind],
                detail=cand.detail or None,
                documentation=(
                    types.MarkupContent(kind=types.MarkupKind.Markdown, value=cand.documentation)
                    if cand.documentation
                    else None
                ),
                insert_text=cand.insert_text,
                insert_text_format=types.InsertTextFormat.Snippet if cand.is_snippet else None,
                preselect=cand.preselect or None,
                sort_text=cand.sort_text or None,
            )
        )
    return items
