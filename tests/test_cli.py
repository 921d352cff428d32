import json
from pathlib import Path

import pytest
from lsprotocol import types

from vectric_ls.__main__ import _cursor_position, _discover_workspace_root, _print_completions, _run_completion, main
from vectric_ls.config import CONFIG_FILENAME


def test_run_completion_prints_members(tmp_path: Path, capsys):
    script = tmp_path / "gadget.lua"
    script.write_text("local c = CreateCircle(0, 0, 5)\nlocal box = c:GetBoundingBox()\nc.")

    code = _run_completion(script, 3, None)

    out = capsys.readouterr().out
    assert code == 0
    assert "BoundingBox2D [property]" in out
    assert "Length [property]" in out


def test_run_completion_marks_preselected_items(tmp_path: Path, capsys):
    script = tmp_path / "gadget.lua"
    script.write_text("local m = TranslationMatrix2D()")

    code = _run_completion(script, 1, len("local m = TranslationMatrix2D(") + 1)

    out = capsys.readouterr().out
    assert code == 0
    assert out.startswith("* Vector2D [constructor]")


def test_run_completion_reports_empty_result(tmp_path: Path, capsys):
    script = tmp_path / "gadget.lua"
    script.write_text("local p = Point2D(")

    code = _run_completion(script, 1, None)

    assert code == 1
    assert "no completions" in capsys.readouterr().out


def test_run_completion_missing_file(tmp_path: Path, capsys):
    assert _run_completion(tmp_path / "missing.lua", 1, None) == 2
    assert "File not found" in capsys.readouterr().err


def test_discover_workspace_root_finds_config(tmp_path: Path):
    (tmp_path / CONFIG_FILENAME).write_text(json.dumps({}))
    nested = tmp_path / "gadgets" / "tools"
    nested.mkdir(parents=True)
    script = nested / "tool.lua"
    script.write_text("")

    assert _discover_workspace_root(script) == tmp_path


def test_cursor_position_defaults_to_end_of_line():
    assert _cursor_position("local a\nlocal bb", 2, None) == (1, len("local bb"))
    assert _cursor_position("local a", 1, 4) == (0, 3)
    assert _cursor_position("local a", 9, None) == (8, 0)


def test_print_completions_formats_items(capsys):
    items = [
        types.CompletionItem(label="Vector2D", kind=types.CompletionItemKind.Constructor, detail="class Vector2D", preselect=True),
        types.CompletionItem(label="Plain"),
    ]

    _print_completions("gadget.lua:1:5", items)

    assert capsys.readouterr().out.splitlines() == ["* Vector2D [constructor]  class Vector2D", "  Plain [text]"]


def test_main_complete_exits_with_status(tmp_path: Path, capsys):
    script = tmp_path / "gadget.lua"
    script.write_text("local b = Box2D()\nb.")

    with pytest.raises(SystemExit) as exc:
        main(["--complete", str(script), "--line", "2"])

    assert exc.value.code == 0
    assert "Centre [property]" in capsys.readouterr().out


def test_main_rejects_complete_with_tcp(tmp_path: Path):
    with pytest.raises(SystemExit) as exc:
        main(["--complete", str(tmp_path / "gadget.lua"), "--tcp"])

    assert exc.value.code == 2
