import json

from luamin.bootstrap import LOADER_HEAD
from luamin.cli import main, output_paths


def test_output_paths(tmp_path):
    minified, source_map = output_paths(tmp_path / "main.lua")
    assert minified.name == "main.min.lua"
    assert source_map.name == "main.lua.map"


def test_writes_minified_file_and_map(tmp_path):
    script = tmp_path / "main.lua"
    script.write_text("local value = 1 + 2\nprint(value)\n", encoding="utf-8")

    assert main([str(script)]) == 0

    code = (tmp_path / "main.min.lua").read_text(encoding="utf-8")
    assert code.startswith("local a=1+2 print(a)")
    assert code.endswith("//# sourceMappingURL=main.lua.map\n]]")
    data = json.loads((tmp_path / "main.lua.map").read_text(encoding="utf-8"))
    assert data["version"] == 3
    assert data["file"] == "main.min.lua"
    assert data["sources"] == ["main.lua"]
    assert data["sourcesContent"] == ["local value = 1 + 2\nprint(value)\n"]
    assert data["names"] == ["value"]


def test_no_map_comment(tmp_path):
    script = tmp_path / "main.lua"
    script.write_text("local x = 1", encoding="utf-8")
    assert main([str(script), "--no-map-comment", "--no-sources-content"]) == 0
    assert (tmp_path / "main.min.lua").read_text(encoding="utf-8") == "local a=1"
    data = json.loads((tmp_path / "main.lua.map").read_text(encoding="utf-8"))
    assert "sourcesContent" not in data


def test_missing_file_does_not_stop_the_others(tmp_path, capsys):
    script = tmp_path / "ok.lua"
    script.write_text("local x = 1", encoding="utf-8")

    assert main([str(tmp_path / "absent.lua"), str(script)]) == 1

    assert "No such file" in capsys.readouterr().err
    assert (tmp_path / "ok.min.lua").exists()


def test_errors_are_reported_per_file(tmp_path, capsys):
    broken = tmp_path / "broken.lua"
    broken.write_text("local = = =", encoding="utf-8")
    assert main([str(broken)]) == 1
    assert "[luamin] error:" in capsys.readouterr().err
    assert not (tmp_path / "broken.min.lua").exists()


def test_module_like_bundles_nested_modules(tmp_path, capsys):
    (tmp_path / "lib").mkdir()
    (tmp_path / "lib" / "util.lua").write_text("return { answer = 42 }", encoding="utf-8")
    script = tmp_path / "main.lua"
    script.write_text('local util = require("lib.util")\nprint(util.answer)', encoding="utf-8")

    assert main(["-m", "-v", str(script)]) == 0

    code = (tmp_path / "main.min.lua").read_text(encoding="utf-8")
    assert code.startswith(LOADER_HEAD)
    assert 'm=="lib.util"' in code
    assert "return{answer=42}" in code
    data = json.loads((tmp_path / "main.lua.map").read_text(encoding="utf-8"))
    assert sorted(data["sources"]) == ["lib/util.lua", "main.lua"]
    assert "Minified main.lua written to:" in capsys.readouterr().out
