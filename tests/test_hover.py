from lsprotocol import types

from vectric_ls.hover import hover_for_position, hover_markdown


def _hover_text(code: str, line: int, character: int, catalog) -> str:
    hover = hover_for_position(code, line, character, catalog)
    assert hover is not None
    assert isinstance(hover.contents, types.MarkupContent)
    assert hover.contents.kind == types.MarkupKind.Markdown
    return hover.contents.value


def test_hover_global_function(catalog):
    code = "local c = CreateCircle(0, 0, 5)"
    text = _hover_text(code, 0, code.index("Circle"), catalog)
    assert text.startswith("### CreateCircle")
    assert "Create a circular contour." in text
    assert "```lua\nCreateCircle(xc: number, yc: number, radius: number)\n```" in text
    assert "- `xc`: xc: number - centre x" in text
    assert "**Returns:** Contour" in text


def test_hover_function_without_signature(catalog):
    text = hover_markdown("NoSignature", catalog)
    assert text is not None
    assert "**Signature:**" not in text


def test_hover_class_lists_constructors_and_base(catalog):
    text = hover_markdown("B", catalog)
    assert text is not None
    assert text.startswith("### B")
    assert "**Constructors:**" in text
    assert "B(a: A, count: number)" in text
    assert "**Extends:** A" in text
    assert "**Properties:** 1" in text


def test_hover_method_with_multiple_returns(catalog):
    code = "local d, ok = c:Offset(1)"
    text = _hover_text(code, 0, code.index("Offset") + 2, catalog)
    assert text.startswith("### Contour:Offset")
    assert "**Returns:** Contour, boolean" in text
    assert "local val1, val2 = contour:Offset(...)" in text


def test_hover_method_single_return_has_no_usage_example(catalog):
    text = hover_markdown("GetBounds", catalog)
    assert text is not None
    assert "**Returns:** Box2D" in text
    assert "Usage Example" not in text


def test_hover_property(catalog):
    text = hover_markdown("BLC", catalog)
    assert text is not None
    assert text.startswith("### Box2D.BLC")
    assert "**Type:** Point2D" in text
    assert "**Access:** Read-only" in text


def test_hover_writable_property(catalog):
    text = hover_markdown("OnlyB", catalog)
    assert "**Access:** Read/write" in text


def test_hover_constant(catalog):
    assert hover_markdown("A_MAX", catalog) == "### A.A_MAX\n\n10"


def test_hover_is_case_sensitive(catalog):
    assert hover_markdown("createcircle", catalog) is None


def test_hover_miss_returns_none(catalog):
    assert hover_for_position("local value = 1", 0, 8, catalog) is None
    assert hover_for_position("   ", 0, 1, catalog) is None
