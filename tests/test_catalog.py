from vectric_ls.catalog import Catalog, Signature


def test_entries_without_names_are_skipped():
    catalog = Catalog.from_data(
        [{"detail": "nameless"}, "junk", {"name": "Ok"}],
        [{"name": ""}, None, {"name": "Thing", "properties": [{"detail": "no name"}, {"name": "P"}]}],
    )

    assert [fn.name for fn in catalog.functions] == ["Ok"]
    assert [cls.name for cls in catalog.classes] == ["Thing"]
    assert [prop.name for prop in catalog.cls("Thing").properties] == ["P"]


def test_functions_and_classes_are_separate_namespaces():
    catalog = Catalog.from_data([{"name": "Point"}], [{"name": "Point", "detail": "class Point"}])

    assert catalog.function("Point").detail == ""
    assert catalog.cls("Point").detail == "class Point"


def test_lookup_is_case_sensitive(catalog):
    assert catalog.function("CreateCircle") is not None
    assert catalog.function("createcircle") is None
    assert catalog.cls("box2d") is None
    assert catalog.function(None) is None


def test_first_return_of_multi_return():
    assert Signature("F()", returns="Contour, boolean").first_return == "Contour"
    assert Signature("F()", returns="  ").first_return is None
    assert Signature("F()").first_return is None


def test_blank_returns_parse_as_none():
    catalog = Catalog.from_data([{"name": "F", "signature": {"label": "F()", "returns": ""}}], [])
    assert catalog.function("F").return_type is None


def test_signature_name_from_label():
    assert Signature("Contour:Offset(distance)").name == "Contour:Offset"
    assert Signature("CreateCircle(x, y)").name == "CreateCircle"


def test_constant_values_are_strings():
    catalog = Catalog.from_data([], [{"name": "K", "constants": [{"name": "ONE", "value": 1}, {"name": "NONE"}]}])
    assert [c.value for c in catalog.cls("K").constants] == ["1", ""]


def test_inheritance_puts_base_members_first(catalog):
    merged = catalog.class_members("B")

    assert [p.name for p in merged.properties] == ["OnlyA", "OnlyB"]
    assert [c.name for c in merged.constants] == ["A_MAX"]
    assert merged.constructors == catalog.cls("B").constructors


def test_class_without_base_is_unchanged(catalog):
    box = catalog.cls("Box2D")
    assert catalog.with_inheritance(box) is box


def test_inheritance_cycle_terminates():
    catalog = Catalog.from_data(
        [],
        [
            {"name": "X", "detail": "class X extends Y", "properties": [{"name": "px"}]},
            {"name": "Y", "detail": "class Y extends X", "properties": [{"name": "py"}]},
        ],
    )

    merged = catalog.class_members("X")

    assert [p.name for p in merged.properties] == ["py", "px"]


def test_unknown_base_is_ignored():
    catalog = Catalog.from_data([], [{"name": "X", "detail": "class X extends Missing", "properties": [{"name": "p"}]}])
    assert [p.name for p in catalog.class_members("X").properties] == ["p"]


def test_class_members_unknown_name(catalog):
    assert catalog.class_members("Nope") is None
    assert catalog.class_members(None) is None
