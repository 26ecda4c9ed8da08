"""Rule enable/mode switchboard.

Each rule has ``enabled`` and ``mode`` (``warn``/``block``). Defaults come
from :class:`~mallgrid.settings.RulesSettings`; an optional YAML dev file
overrides them, e.g.::

    unenclosed-floors:
      enabled: false
    oob-content:
      mode: block

The switchboard is a plain object handed to whoever evaluates rules. Rules
themselves only report; acting on ``block`` is up to the caller.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from loguru import logger
from pydantic import ValidationError

from mallgrid.exceptions import ConfigurationError
from mallgrid.settings import RuleConfig, RulesSettings

UNENCLOSED_FLOORS = "unenclosed-floors"
OOB_CONTENT = "oob-content"
KNOWN_RULES = (UNENCLOSED_FLOORS, OOB_CONTENT)

_DISABLED = RuleConfig(enabled=False, mode="warn")


class RulesSwitchboard:
    def __init__(self, settings: RulesSettings | None = None) -> None:
        settings = settings or RulesSettings()
        self.max_examples = settings.max_examples
        self._rules: dict[str, RuleConfig] = {rule_id: RuleConfig() for rule_id in KNOWN_RULES}
        self._merge(settings.rules, source="settings")
        if settings.dev_config_path is not None:
            self.load_dev_config(settings.dev_config_path)

    def _merge(self, overrides: dict[str, Any], source: str) -> None:
        for rule_id, cfg in overrides.items():
            if rule_id not in self._rules:
                logger.warning(f"[RULES] Unknown rule ID in {source}: {rule_id}")
                continue
            if isinstance(cfg, RuleConfig):
                cfg = cfg.model_dump()
            if not isinstance(cfg, dict):
                raise ConfigurationError(f"Rule '{rule_id}' config must be a mapping", {"source": source})
            try:
                self._rules[rule_id] = RuleConfig(**{**self._rules[rule_id].model_dump(), **cfg})
            except ValidationError as exc:
                raise ConfigurationError(
                    f"Invalid config for rule '{rule_id}': {exc}", {"source": source, "rule": rule_id}
                ) from exc

    def load_dev_config(self, path: Path | str) -> bool:
        """Merge a YAML dev override file. A missing file keeps the current rules.

        Returns True when a file was applied.
        """
        path = Path(path)
        if not path.exists():
            logger.info(f"[RULES] No dev config at {path}, using defaults")
            self.log_summary()
            return False
        with path.open("r", encoding="utf-8") as fp:
            payload = yaml.safe_load(fp) or {}
        if not isinstance(payload, dict):
            raise ConfigurationError(f"Rules dev config must be a mapping: {path}", {"path": str(path)})
        self._merge(payload, source=str(path))
        logger.info(f"[RULES] Loaded dev config from {path}")
        self.log_summary()
        return True

    def rule_config(self, rule_id: str) -> RuleConfig:
        return self._rules.get(rule_id, _DISABLED)

    def is_enabled(self, rule_id: str) -> bool:
        return self.rule_config(rule_id).enabled

    def mode(self, rule_id: str) -> str:
        return self.rule_config(rule_id).mode

    def rule_ids(self) -> list[str]:
        return list(self._rules)

    def log_summary(self) -> None:
        for rule_id, cfg in self._rules.items():
            logger.info(f"[RULES] {rule_id}: enabled={cfg.enabled}, mode={cfg.mode}")
