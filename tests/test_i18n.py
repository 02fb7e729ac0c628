"""Tests for translation callbacks and message catalogs."""

from pathlib import Path

import pytest
import yaml

from src.utils.i18n import load_messages, make_translator


class TestMakeTranslator:
    """Tests for the make_translator function."""

    def test_default_day_names(self) -> None:
        translate = make_translator()
        assert translate("common.days.monday", {}) == "Monday"

    def test_formats_parameters(self) -> None:
        translate = make_translator()
        text = translate(
            "heatmap.weekly.percentage.tooltip",
            {"day": "Monday", "hour": 14, "utilization": 25},
        )
        assert text == "Monday 14:00 - 25% occupied"

    def test_unknown_key_returns_key(self) -> None:
        assert make_translator()("missing.key", {"a": 1}) == "missing.key"

    def test_missing_placeholder_kept(self) -> None:
        translate = make_translator({"greeting": "Hello {name}"})
        assert translate("greeting", {}) == "Hello {name}"

    def test_custom_messages_override_defaults(self) -> None:
        translate = make_translator({"common.days.monday": "Pondeli"})
        assert translate("common.days.monday", {}) == "Pondeli"
        assert translate("common.days.tuesday", {}) == "Tuesday"


class TestLoadMessages:
    """Tests for the load_messages function."""

    def test_nested_keys_flattened(self, tmp_path: Path) -> None:
        path = tmp_path / "cs.yaml"
        path.write_text(yaml.dump({"common": {"days": {"monday": "Pondeli"}}}))
        assert load_messages(str(path)) == {"common.days.monday": "Pondeli"}

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_messages(str(path)) == {}

    def test_not_a_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text(yaml.dump(["a", "b"]))
        with pytest.raises(ValueError, match="expected a mapping"):
            load_messages(str(path))

    def test_missing_file(self) -> None:
        with pytest.raises(FileNotFoundError):
            load_messages("/nonexistent/messages.yaml")
