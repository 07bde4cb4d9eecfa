from __future__ import annotations

import json

import pytest
from conftest import SHA_NEW, SHA_OLD, porcelain, porcelain_block

from blame_heatmap import blame as blame_module
from blame_heatmap.cli import main
from blame_heatmap.config import get_global_config, get_project_config

TRANSCRIPT = porcelain(
    porcelain_block(SHA_OLD, 1, 1, time=1000),
    porcelain_block(SHA_NEW, 1, 2, time=2000),
    porcelain_block(SHA_OLD, 2, 3, group=None),
)


@pytest.fixture
def blame_calls(monkeypatch):
    calls: list[str] = []

    def fake_blame(file_path: str) -> str | None:
        calls.append(file_path)
        return TRANSCRIPT

    monkeypatch.setattr(blame_module, "git_blame_porcelain", fake_blame)
    return calls


@pytest.fixture
def source_file(tmp_path, monkeypatch, blame_calls):
    path = tmp_path / "src" / "example.py"
    path.parent.mkdir()
    path.write_text("import os\nprint(os.getcwd())\nx = 1\n")
    monkeypatch.chdir(tmp_path)
    return path


def test_show_json(source_file, blame_calls, capsys) -> None:
    main(["show", str(source_file), "--json", "--levels", "2"])
    data = json.loads(capsys.readouterr().out)
    assert data["levels"] == 2
    assert [s["level"] for s in data["styles"]] == [0, 1]
    assert data["styles"][1]["background"] == "#c80000ff"
    assert data["buckets"] == [
        {"level": 0, "ranges": [[1, 1], [3, 3]]},
        {"level": 1, "ranges": [[2, 2]]},
    ]
    assert blame_calls == [str(source_file)]


def test_show_terminal_colours_lines(source_file, capsys) -> None:
    main(["show", str(source_file), "--heat", "#ff0000", "--ruler"])
    out = capsys.readouterr().out
    assert "\033[48;2;255;0;0m" in out
    assert "█" in out
    assert "print(os.getcwd())" in out


def test_show_uses_project_config_set_from_cwd(source_file, capsys) -> None:
    main(["config", "set", "heatLevels", "3", "--project"])
    capsys.readouterr()
    main(["show", "src/example.py", "--json"])
    assert json.loads(capsys.readouterr().out)["levels"] == 3


def test_project_config_resolves_to_repository_root(git_repo, monkeypatch, capsys) -> None:
    target = git_repo.commit("src/example.py", b"a\nb\n", "@1000000000 +0000")
    git_repo.commit("src/example.py", b"a\nb\nc\n", "@1000086400 +0000")

    monkeypatch.chdir(target.parent)
    main(["config", "set", "heatLevels", "3", "--project"])
    assert get_project_config(str(git_repo.root)) == {"heatLevels": 3}
    capsys.readouterr()

    monkeypatch.chdir(git_repo.root)
    main(["show", "src/example.py", "--json"])
    data = json.loads(capsys.readouterr().out)
    assert data["levels"] == 3
    assert data["buckets"][0]["ranges"] == [[1, 2]]
    assert data["buckets"][2]["ranges"] == [[3, 3]]


def test_show_reads_dotenv(source_file, isolated_config, monkeypatch, capsys) -> None:
    monkeypatch.setenv("BLAME_HEATMAP_LEVELS", "")
    monkeypatch.delenv("BLAME_HEATMAP_LEVELS")
    isolated_config.mkdir(parents=True)
    (isolated_config / ".env").write_text("# levels\nBLAME_HEATMAP_LEVELS=4\n")
    main(["show", str(source_file), "--json"])
    assert json.loads(capsys.readouterr().out)["levels"] == 4


def test_show_untracked_file_prints_plain(source_file, monkeypatch, capsys) -> None:
    monkeypatch.setattr(blame_module, "git_blame_porcelain", lambda path: None)
    main(["show", str(source_file)])
    captured = capsys.readouterr()
    assert "no heatmap available" in captured.err
    assert "\033[48;2" not in captured.out
    assert "x = 1" in captured.out


def test_show_missing_file_exits(tmp_path, capsys) -> None:
    with pytest.raises(SystemExit) as exc:
        main(["show", str(tmp_path / "missing.py")])
    assert exc.value.code == 1
    assert "file not found" in capsys.readouterr().err


def test_show_invalid_levels_exits(source_file, capsys) -> None:
    with pytest.raises(SystemExit) as exc:
        main(["show", str(source_file), "--levels", "0"])
    assert exc.value.code == 1
    assert "heat levels" in capsys.readouterr().err


def test_config_set_and_unset_global(isolated_config, capsys) -> None:
    main(["config", "set", "heatLevels", "6"])
    assert get_global_config() == {"heatLevels": 6}
    main(["config", "unset", "heatLevels"])
    assert get_global_config() == {}
    main(["config", "unset", "heatLevels"])
    assert "is not set" in capsys.readouterr().out


def test_config_set_project(tmp_path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    main(["config", "set", "showInRuler", "on", "--project"])
    assert get_project_config(str(tmp_path)) == {"showInRuler": True}


def test_config_set_rejects_bad_value(capsys) -> None:
    with pytest.raises(SystemExit) as exc:
        main(["config", "set", "heatLevels", "zero"])
    assert exc.value.code == 1
    assert get_global_config() == {}


def test_config_show(tmp_path, monkeypatch, capsys) -> None:
    monkeypatch.chdir(tmp_path)
    main(["config", "set", "heatColour", "#00f", "--project"])
    capsys.readouterr()
    main(["config", "show"])
    out = capsys.readouterr().out
    assert "heatColour" in out
    assert "(project)" in out
    assert "Hot:  #0000ffff" in out
    assert "Cool: #0000ff00" in out


def test_no_command_prints_help(capsys) -> None:
    with pytest.raises(SystemExit) as exc:
        main([])
    assert exc.value.code == 0
    assert "blame-heatmap" in capsys.readouterr().out
