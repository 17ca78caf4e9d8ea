"""Unit tests for ParserConfig and its YAML loader."""

import pytest
from pydantic import ValidationError

from block_parser import ConfigurationError, ParserConfig, load_parser_config


class TestParserConfig:
    def test_defaults(self):
        config = ParserConfig()

        assert config.field_key_prefix == "_"
        assert config.field_reference_prefix == "field_"
        assert config.excluded_field_types == ["accordion", "tab"]
        assert "true_false" in config.formatted_field_types
        assert config.internal_attributes == ["data", "name", "mode"]
        assert config.include_rendered is True

    def test_kind_lists_deduplicated(self):
        config = ParserConfig(excluded_field_types=["tab", "message", "tab"])

        assert config.excluded_field_types == ["tab", "message"]

    def test_empty_prefix_rejected(self):
        with pytest.raises(ValidationError):
            ParserConfig(field_key_prefix="")


class TestLoadParserConfig:
    def test_load_partial_file(self, tmp_path):
        path = tmp_path / "parser.yaml"
        path.write_text("include_rendered: false\nexcluded_field_types: [tab, message]\n")

        config = load_parser_config(path)

        assert config.include_rendered is False
        assert config.excluded_field_types == ["tab", "message"]
        assert config.data_attribute == "data"

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "parser.yaml"
        path.write_text("")

        assert load_parser_config(str(path)) == ParserConfig()

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            load_parser_config(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "parser.yaml"
        path.write_text("include_rendered: [unclosed\n")

        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            load_parser_config(path)

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "parser.yaml"
        path.write_text("- a\n- b\n")

        with pytest.raises(ConfigurationError, match="must be a mapping"):
            load_parser_config(path)

    def test_invalid_values(self, tmp_path):
        path = tmp_path / "parser.yaml"
        path.write_text("include_rendered: maybe\n")

        with pytest.raises(ConfigurationError, match="Invalid parser config"):
            load_parser_config(path)
