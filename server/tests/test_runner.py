"""
Tests for the command line runner.
"""

import json

import pytest

from refactor_engine.runner import build_parser, main, parse_position, unified_diff


@pytest.fixture
def source_file(tmp_path):
    path = tmp_path / "sample.js"
    path.write_text("const v = a + b;\nconst r = v * 2;\n", encoding="utf-8")
    return path


class TestParsePosition:
    """Byte offsets and LINE:COL positions."""

    def test_byte_offset(self):
        assert parse_position("a.js", "abc", "2") == 2

    def test_line_col(self):
        text = "const a = 1;\nconst b = 2;\n"
        assert parse_position("a.js", text, "2:7") == text.index("b =")

    def test_line_col_needs_known_language(self):
        with pytest.raises(ValueError):
            parse_position("a.txt", "abc", "1:1")

    def test_not_a_number(self):
        with pytest.raises(ValueError):
            parse_position("a.js", "abc", "first")


class TestCommands:
    """End-to-end runs of the CLI commands."""

    def test_list(self, source_file, capsys):
        assert main(["list", str(source_file), "--position", "1:7"]) == 0
        output = json.loads(capsys.readouterr().out)
        assert output["position"] == 6
        names = [r["name"] for r in output["refactors"]]
        assert "Inline local" in names

    def test_apply_prints_new_text(self, source_file, capsys):
        code = main(["apply", str(source_file), "-p", "6", "-r", "Inline local", "-a", "Inline all"])
        assert code == 0
        assert capsys.readouterr().out == "const r = (a + b) * 2;\n"
        assert source_file.read_text(encoding="utf-8") == "const v = a + b;\nconst r = v * 2;\n"

    def test_apply_diff(self, source_file, capsys):
        code = main(["apply", str(source_file), "-p", "6", "-r", "Inline local", "-a", "Inline all", "--diff"])
        assert code == 0
        out = capsys.readouterr().out
        assert "-const v = a + b;\n" in out
        assert "+const r = (a + b) * 2;\n" in out

    def test_apply_write(self, source_file, capsys):
        code = main(["apply", str(source_file), "-p", "6", "-r", "Inline local", "-a", "Inline all", "--write"])
        assert code == 0
        assert source_file.read_text(encoding="utf-8") == "const r = (a + b) * 2;\n"
        assert "Wrote" in capsys.readouterr().err

    def test_diagnostics(self, tmp_path, capsys):
        path = tmp_path / "typo.js"
        path.write_text("const value = 1;\nconsole.log(valeu);\n", encoding="utf-8")
        assert main(["diagnostics", str(path)]) == 0
        output = json.loads(capsys.readouterr().out)
        assert len(output) == 1
        assert output[0]["code"] == 2552
        assert (output[0]["line"], output[0]["column"]) == (2, 13)

    def test_fix_everything(self, tmp_path, capsys):
        path = tmp_path / "typo.js"
        path.write_text("const value = 1;\nconsole.log(valeu);\n", encoding="utf-8")
        assert main(["fix", str(path)]) == 0
        captured = capsys.readouterr()
        assert captured.out == "const value = 1;\nconsole.log(value);\n"
        assert "fixSpelling" in captured.err

    def test_fix_with_unknown_id_fails(self, source_file, capsys):
        assert main(["fix", str(source_file), "--fix-id", "fixNothing"]) == 1
        assert "Invalid action 'fixNothing'" in capsys.readouterr().err

    def test_unavailable_action_fails(self, source_file, capsys):
        code = main(["apply", str(source_file), "-p", "0", "-r", "Inline local", "-a", "Inline all"])
        assert code == 1
        assert capsys.readouterr().err.startswith("Error:")

    def test_missing_file(self, tmp_path, capsys):
        assert main(["diagnostics", str(tmp_path / "missing.js")]) == 1
        assert "File not found" in capsys.readouterr().err

    def test_unsupported_extension(self, tmp_path, capsys):
        path = tmp_path / "notes.txt"
        path.write_text("hello\n", encoding="utf-8")
        assert main(["diagnostics", str(path)]) == 1
        assert "No language adapter" in capsys.readouterr().err

    def test_config_file_sets_quote_preference(self, tmp_path, capsys):
        config = tmp_path / "custom.yml"
        config.write_text("quote_preference: single\n", encoding="utf-8")
        path = tmp_path / "t.js"
        path.write_text("const s = `a${b}`;\n", encoding="utf-8")
        code = main(["--config", str(config), "apply", str(path), "-p", "10",
                     "-r", "Convert string concatenation or template literal",
                     "-a", "Convert to string concatenation"])
        assert code == 0
        assert capsys.readouterr().out == "const s = 'a' + b;\n"


class TestParser:
    """Argument parsing."""

    def test_write_and_diff_are_exclusive(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["fix", "a.js", "--write", "--diff"])

    def test_unified_diff_headers(self):
        diff = unified_diff("a.js", "x\n", "y\n")
        assert diff.startswith("--- a/a.js\n+++ b/a.js\n")
