from __future__ import annotations

from typing import Optional

from lsprotocol import types

from .catalog import Catalog, ClassDescriptor, Constant, FunctionDescriptor, Property, Signature
from .document import word_at


def hover_for_position(code: str, line: int, character: int, catalog: Catalog) -> Optional[types.Hover]:
    word = word_at(code, line, character)
    if not word:
        return None
    contents = hover_markdown(word, catalog)
    if contents is None:
        return None
    return types.Hover(contents=types.MarkupContent(kind=types.MarkupKind.Markdown, value=contents))


def hover_markdown(name: str, catalog: Catalog) -> Optional[str]:
    """Exact-name lookup: global functions, classes, then each class's members."""
    fn = catalog.function(name)
    if fn:
        return _function_markdown(fn)

    cls = catalog.cls(name)
    if cls:
        return _class_markdown(cls)

    for owner in catalog.classes:
        method = owner.find_method(name)
        if method:
            return _method_markdown(owner.name, method)
        prop = owner.find_property(name)
        if prop:
            return _property_markdown(owner.name, prop)
        const = owner.find_constant(name)
        if const:
            return _constant_markdown(owner.name, const)
    return None


def _function_markdown(fn: FunctionDescriptor) -> str:
    text = f"### {fn.name}\n\n{fn.documentation}\n\n"
    if fn.signature:
        text += _signature_markdown(fn.signature)
        if fn.signature.returns:
            text += f"**Returns:** {fn.signature.returns}\n"
    return text


def _method_markdown(class_name: str, method: FunctionDescriptor) -> str:
    text = f"### {class_name}:{method.name}\n\n{method.documentation}\n\n"
    sig = method.signature
    if sig is None:
        return text
    text += _signature_markdown(sig)
    if sig.returns:
        text += f"**Returns:** {sig.returns}\n\n"
        returns = [entry.strip() for entry in sig.returns.split(",")]
        if len(returns) > 1:
            names = ", ".join(f"val{idx}" for idx in range(1, len(returns) + 1))
            text += "**Usage Example:**\n```lua\n"
            text += f"local {names} = {class_name.lower()}:{method.name}(...)\n"
            text += "```\n"
    return text


def _signature_markdown(sig: Signature) -> str:
    text = f"**Signature:**\n```lua\n{sig.label}\n```\n\n"
    if sig.parameters:
        text += "**Parameters:**\n"
        for param in sig.parameters:
            text += f"- `{param.label}`: {param.documentation}\n"
        text += "\n"
    return text


def _class_markdown(cls: ClassDescriptor) -> str:
    text = f"### {cls.name}\n\n{cls.documentation}\n\n"
    if cls.constructors:
        text += "**Constructors:**\n"
        for ctor in cls.constructors:
            text += f"```lua\n{ctor.label}\n```\n{ctor.documentation}\n\n"
    if cls.base_name:
        text += f"**Extends:** {cls.base_name}\n\n"
    if cls.properties:
        text += f"**Properties:** {len(cls.properties)}\n\n"
    if cls.methods:
        text += f"**Methods:** {len(cls.methods)}\n\n"
    if cls.constants:
        text += f"**Constants:** {len(cls.constants)}\n\n"
    return text


def _property_markdown(class_name: str, prop: Property) -> str:
    access = "Read-only" if prop.read_only else "Read/write"
    return f"### {class_name}.{prop.name}\n\n{prop.documentation}\n\n**Type:** {prop.detail}\n\n**Access:** {access}"


def _constant_markdown(class_name: str, const: Constant) -> str:
    return f"### {class_name}.{const.name}\n\n{const.value}"
