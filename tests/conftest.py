from pathlib import Path

import pytest

from vectric_ls.catalog import Catalog
from vectric_ls.config import VectricLSConfig
from vectric_ls.loader import CatalogLoader

FUNCTIONS = [
    {
        "name": "CreateCircle",
        "detail": "CreateCircle(xc, yc, radius)",
        "documentation": "Create a circular contour.",
        "signature": {
            "label": "CreateCircle(xc: number, yc: number, radius: number)",
            "documentation": "",
            "parameters": [
                {"label": "xc", "documentation": "xc: number - centre x"},
                {"label": "yc", "documentation": "yc: number - centre y"},
                {"label": "radius", "documentation": "radius: number - radius"},
            ],
            "returns": "Contour",
        },
    },
    {
        "name": "Foo",
        "detail": "Foo()",
        "documentation": "Returns an A and a count.",
        "signature": {"label": "Foo()", "documentation": "", "parameters": [], "returns": "A, number"},
    },
    {
        "name": "MakeA",
        "detail": "MakeA(box)",
        "documentation": "Build an A from a box.",
        "signature": {
            "label": "MakeA(box)",
            "documentation": "",
            "parameters": [{"label": "box", "documentation": "Box2D - source box"}],
            "returns": "A",
        },
    },
    {"name": "NoSignature", "detail": "NoSignature", "documentation": "Entry without a signature."},
]

CLASSES = [
    {
        "name": "Box2D",
        "detail": "class Box2D",
        "documentation": "A box.",
        "properties": [
            {"name": "BLC", "detail": "Point2D", "documentation": "Bottom left.", "readOnly": True},
            {"name": "BRC", "detail": "Point2D", "documentation": "Bottom right.", "readOnly": True},
            {"name": "Centre", "detail": "Point2D", "documentation": "Centre.", "readOnly": True},
        ],
        "methods": [
            {
                "name": "Inflate",
                "detail": "Inflate(amount)",
                "documentation": "Grow the box.",
                "signature": {"label": "Inflate(amount: number)", "parameters": [{"label": "amount", "documentation": ""}]},
            }
        ],
    },
    {
        "name": "Point2D",
        "detail": "class Point2D",
        "documentation": "A point.",
        "constructors": [
            {"label": "Point2D()", "documentation": "Origin.", "parameters": []},
            {
                "label": "Point2D(x: number, y: number)",
                "documentation": "Point at x, y.",
                "parameters": [{"label": "x", "documentation": ""}, {"label": "y", "documentation": ""}],
            },
        ],
        "properties": [
            {"name": "x", "detail": "number", "documentation": "", "readOnly": False},
            {"name": "y", "detail": "number", "documentation": "", "readOnly": False},
        ],
    },
    {
        "name": "Contour",
        "detail": "class Contour",
        "documentation": "A contour.",
        "properties": [
            {"name": "Length", "detail": "number", "documentation": "Length.", "readOnly": True},
            {"name": "BoundingBox2D", "detail": "Box2D", "documentation": "Bounds.", "readOnly": True},
        ],
        "methods": [
            {
                "name": "Offset",
                "detail": "Offset(distance)",
                "documentation": "Offset the contour.",
                "signature": {
                    "label": "Offset(distance: number)",
                    "parameters": [{"label": "distance", "documentation": ""}],
                    "returns": "Contour, boolean",
                },
            },
            {
                "name": "GetBounds",
                "detail": "GetBounds()",
                "documentation": "Bounds of the contour.",
                "signature": {"label": "GetBounds()", "parameters": [], "returns": "Box2D"},
            },
        ],
    },
    {
        "name": "A",
        "detail": "class A",
        "documentation": "Class A.",
        "constructors": [{"label": "A()", "documentation": "", "parameters": []}],
        "properties": [{"name": "OnlyA", "detail": "number", "documentation": "", "readOnly": True}],
        "constants": [{"name": "A_MAX", "value": "10"}],
    },
    {
        "name": "B",
        "detail": "class B extends A",
        "documentation": "Class B.",
        "constructors": [
            {
                "label": "B(a: A, count: number)",
                "documentation": "",
                "parameters": [{"label": "a", "documentation": ""}, {"label": "count", "documentation": ""}],
            }
        ],
        "properties": [{"name": "OnlyB", "detail": "A", "documentation": "", "readOnly": False}],
    },
]


@pytest.fixture
def catalog() -> Catalog:
    return Catalog.from_data(FUNCTIONS, CLASSES)


@pytest.fixture(scope="session")
def bundled_catalog() -> Catalog:
    return CatalogLoader(VectricLSConfig.default(Path("."))).load()
