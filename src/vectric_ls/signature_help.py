from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from lsprotocol import types

from .catalog import Catalog, Parameter
from .document import text_before_cursor
from .lexical import find_open_call


@dataclass(frozen=True)
class CallableSig:
    label: str
    documentation: str = ""
    parameters: Tuple[Parameter, ...] = ()


def signatures_named(name: str, catalog: Catalog) -> List[CallableSig]:
    """Every function, constructor and method signature whose name is exactly ``name``."""
    sigs: list[CallableSig] = []
    fn = catalog.function(name)
    if fn and fn.signature:
        sigs.append(CallableSig(fn.signature.label, fn.signature.documentation, fn.signature.parameters))

    cls = catalog.cls(name)
    if cls:
        for ctor in cls.constructors:
            sigs.append(CallableSig(ctor.label, ctor.documentation, ctor.parameters))

    for owner in catalog.classes:
        method = owner.find_method(name)
        if method and method.signature:
            sigs.append(CallableSig(method.signature.label, method.signature.documentation, method.signature.parameters))
    return sigs


def active_signature_index(sigs: List[CallableSig], argument_index: int) -> int:
    for idx, sig in enumerate(sigs):
        if len(sig.parameters) > argument_index:
            return idx
    return 0


def signature_help_for_code(code: str, line: int, character: int, catalog: Catalog) -> Optional[types.SignatureHelp]:
    call = find_open_call(text_before_cursor(code, line, character))
    if call is None:
        return None

    sigs = signatures_named(call.name, catalog)
    if not sigs:
        return None

    active = active_signature_index(sigs, call.argument_index)
    active_param = min(call.argument_index, max(len(sigs[active].parameters) - 1, 0))
    return types.SignatureHelp(
        signatures=[
            types.SignatureInformation(
                label=sig.label,
                documentation=sig.documentation or None,
                parameters=[
                    types.ParameterInformation(label=param.label, documentation=param.documentation or None)
                    for param in sig.parameters
                ],
            )
            for sig in sigs
        ],
        active_signature=active,
        active_parameter=active_param,
    )
