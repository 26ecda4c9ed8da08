from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from mallgrid.exceptions import ConfigurationError
from mallgrid.settings import RulesSettings
from mallgrid.validate.switchboard import OOB_CONTENT, UNENCLOSED_FLOORS, RulesSwitchboard


def _write_yaml(path: Path, payload: dict) -> Path:
    path.write_text(yaml.safe_dump(payload), encoding="utf-8")
    return path


def test_defaults_enable_both_rules_in_warn_mode() -> None:
    switchboard = RulesSwitchboard()
    assert switchboard.rule_ids() == [UNENCLOSED_FLOORS, OOB_CONTENT]
    for rule_id in switchboard.rule_ids():
        assert switchboard.is_enabled(rule_id)
        assert switchboard.mode(rule_id) == "warn"
    assert switchboard.max_examples == 3


def test_unknown_rule_reads_as_disabled() -> None:
    switchboard = RulesSwitchboard()
    assert not switchboard.is_enabled("no-such-rule")
    assert switchboard.mode("no-such-rule") == "warn"


def test_dev_config_overrides_defaults(tmp_path: Path) -> None:
    path = _write_yaml(
        tmp_path / "rules.dev.yaml",
        {UNENCLOSED_FLOORS: {"enabled": False}, OOB_CONTENT: {"mode": "block"}, "made-up": {"enabled": True}},
    )
    switchboard = RulesSwitchboard()
    assert switchboard.load_dev_config(path) is True
    assert not switchboard.is_enabled(UNENCLOSED_FLOORS)
    assert switchboard.mode(UNENCLOSED_FLOORS) == "warn"
    assert switchboard.is_enabled(OOB_CONTENT)
    assert switchboard.mode(OOB_CONTENT) == "block"
    assert "made-up" not in switchboard.rule_ids()


def test_missing_dev_config_keeps_defaults(tmp_path: Path) -> None:
    switchboard = RulesSwitchboard()
    assert switchboard.load_dev_config(tmp_path / "absent.yaml") is False
    assert switchboard.is_enabled(UNENCLOSED_FLOORS)


def test_dev_config_path_from_settings(tmp_path: Path) -> None:
    path = _write_yaml(tmp_path / "rules.yaml", {OOB_CONTENT: {"enabled": False}})
    switchboard = RulesSwitchboard(RulesSettings(dev_config_path=path))
    assert not switchboard.is_enabled(OOB_CONTENT)
    assert switchboard.is_enabled(UNENCLOSED_FLOORS)


def test_invalid_mode_raises(tmp_path: Path) -> None:
    path = _write_yaml(tmp_path / "rules.yaml", {OOB_CONTENT: {"mode": "explode"}})
    with pytest.raises(ConfigurationError):
        RulesSwitchboard().load_dev_config(path)


def test_non_mapping_dev_config_raises(tmp_path: Path) -> None:
    path = tmp_path / "rules.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        RulesSwitchboard().load_dev_config(path)


def test_switchboards_are_independent() -> None:
    a = RulesSwitchboard(RulesSettings(rules={OOB_CONTENT: {"enabled": False}}))
    b = RulesSwitchboard()
    assert not a.is_enabled(OOB_CONTENT)
    assert b.is_enabled(OOB_CONTENT)
