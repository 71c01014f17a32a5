"""
Tests for engine configuration loading.
"""

from refactor_engine.config import EngineConfig, find_config_file, get_default_config, load_config, save_config


class TestLoadConfig:
    """YAML config files and defaults."""

    def test_defaults(self):
        config = get_default_config()
        assert config.enabled_refactors == ["*"]
        assert config.enabled_code_fixes == ["*"]
        assert config.quote_preference == "auto"
        assert config.indent_size == 4
        assert config.globals == []

    def test_missing_file_uses_defaults(self, tmp_path):
        config = load_config(str(tmp_path / "nope.yml"))
        assert config == get_default_config()

    def test_values_from_file(self, tmp_path):
        path = tmp_path / ".refactor.yml"
        path.write_text(
            "enabled_refactors:\n  - Inline local\nquote_preference: single\nglobals:\n  - jQuery\n",
            encoding="utf-8",
        )
        config = load_config(str(path))
        assert config.enabled_refactors == ["Inline local"]
        assert config.quote_preference == "single"
        assert config.globals == ["jQuery"]
        assert config.enabled_code_fixes == ["*"]

    def test_unknown_keys_are_ignored(self, tmp_path, caplog):
        path = tmp_path / ".refactor.yml"
        path.write_text("indent_size: 2\nshiny: true\n", encoding="utf-8")
        config = load_config(str(path))
        assert config.indent_size == 2
        assert "shiny" in caplog.text

    def test_invalid_yaml_falls_back_to_defaults(self, tmp_path):
        path = tmp_path / ".refactor.yml"
        path.write_text("quote_preference: [unclosed\n", encoding="utf-8")
        assert load_config(str(path)) == get_default_config()

    def test_bad_quote_preference_becomes_auto(self):
        assert EngineConfig(quote_preference="backtick").quote_preference == "auto"

    def test_enabled_checks(self):
        config = EngineConfig(enabled_refactors=["Inline local"], enabled_code_fixes=["*"])
        assert config.is_refactor_enabled("Inline local")
        assert not config.is_refactor_enabled("Inline function")
        assert config.is_code_fix_enabled("fixSpelling")


class TestSaveAndFind:
    """Writing config files and locating them."""

    def test_save_then_load(self, tmp_path):
        path = tmp_path / "nested" / "refactor.yml"
        original = EngineConfig(quote_preference="double", globals=["$"], indent_size=2)
        save_config(original, str(path))
        assert load_config(str(path)) == original

    def test_find_walks_up(self, tmp_path):
        config_path = tmp_path / ".refactor.yaml"
        config_path.write_text("indent_size: 2\n", encoding="utf-8")
        source_dir = tmp_path / "src" / "deep"
        source_dir.mkdir(parents=True)
        source = source_dir / "a.ts"
        source.write_text("", encoding="utf-8")
        assert find_config_file(str(source)) == str(config_path)

    def test_dotfile_wins_over_plain_name(self, tmp_path):
        (tmp_path / "refactor.yml").write_text("{}\n", encoding="utf-8")
        (tmp_path / ".refactor.yml").write_text("{}\n", encoding="utf-8")
        assert find_config_file(str(tmp_path)) == str(tmp_path / ".refactor.yml")
