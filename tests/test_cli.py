"""
Tests for the command-line entry point.
"""

import pytest

from polycode.config import get_settings
from polycode.main import build_parser, main


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("DATA_DIR", str(tmp_path / "data"))
    monkeypatch.delenv("CEREBRAS_API_KEY", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestDetect:
    def test_by_extension(self, tmp_path, capsys):
        path = tmp_path / "main.rs"
        path.write_text("anything")

        assert main(["detect", str(path)]) == 0
        assert capsys.readouterr().out.strip() == "Rust"

    def test_by_content(self, tmp_path, capsys):
        path = tmp_path / "snippet.txt"
        path.write_text("console.log('hi')")

        assert main(["detect", str(path)]) == 0
        assert capsys.readouterr().out.strip() == "JavaScript"

    def test_unknown(self, tmp_path, capsys):
        path = tmp_path / "notes.txt"
        path.write_text("hello world")

        assert main(["detect", str(path)]) == 1
        assert capsys.readouterr().out.strip() == "unknown"


class TestMissingFile:
    @pytest.mark.parametrize(
        "argv",
        [["detect"], ["explain"], ["convert", "--to", "Go"]],
    )
    def test_reports_and_exits_1(self, tmp_path, capsys, argv):
        missing = str(tmp_path / "nope.py")

        assert main([argv[0], missing, *argv[1:]]) == 1

        err = capsys.readouterr().err
        assert f"Cannot read {missing}" in err
        assert "Traceback" not in err

    def test_binary_file(self, tmp_path, capsys):
        path = tmp_path / "blob.py"
        path.write_bytes(b"\xff\xfe\x00")

        assert main(["detect", str(path)]) == 1
        assert "not UTF-8 text" in capsys.readouterr().err


class TestHistory:
    def test_empty(self, capsys):
        assert main(["history"]) == 0
        assert capsys.readouterr().out.strip() == "No history yet"

    def test_lists_saved_records(self, tmp_path, capsys):
        state = tmp_path / "data" / "state"
        state.mkdir(parents=True)
        (state / "polycode_history").write_text(
            '[{"sourceCode": "x = 1", "sourceLang": "Python", "targetLang": "Go",'
            ' "output": "x := 1", "timestamp": 1000}]'
        )

        assert main(["history"]) == 0
        out = capsys.readouterr().out
        assert "[0] Python → Go" in out
        assert "x = 1" in out

    def test_clear(self, tmp_path, capsys):
        assert main(["history", "--clear"]) == 0
        assert (tmp_path / "data" / "state" / "polycode_history").read_text() == "[]"


class TestServe:
    def test_refuses_without_credential(self):
        assert main(["serve"]) == 1


class TestParser:
    def test_convert_requires_target(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["convert", "a.py"])

    def test_convert_options(self):
        args = build_parser().parse_args(["convert", "a.py", "--to", "go", "--from", "python"])
        assert (args.target, args.source, args.out) == ("go", "python", None)
