from __future__ import annotations

from pathlib import Path

import pytest

from vcs_update.core.config import UpdateConfig, load_config
from vcs_update.core.errors import ConfigError
from vcs_update.core.types import OperationKind, ScopeMode


def _write(tmp_path: Path, text: str) -> Path:
    p = tmp_path / "update.yaml"
    p.write_text(text.lstrip(), encoding="utf-8")
    return p


def test_load_config_reads_update_section(tmp_path: Path) -> None:
    p = _write(
        tmp_path,
        """
update:
  operation: integrate
  scope: strict
  name: Integrate Branch
logging:
  level: debug
""",
    )

    cfg = load_config(p)

    assert cfg.update.operation is OperationKind.INTEGRATE
    assert cfg.update.scope is ScopeMode.STRICT
    assert cfg.update.display_name == "Integrate Branch"
    assert cfg.logging.level == "DEBUG"


def test_empty_file_uses_defaults(tmp_path: Path) -> None:
    cfg = load_config(_write(tmp_path, ""))

    assert cfg == UpdateConfig()
    assert cfg.update.display_name == "Update"


def test_load_config_expands_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("VCS_UPDATE_SCOPE", "any")

    cfg = load_config(_write(tmp_path, "update:\n  scope: ${VCS_UPDATE_SCOPE}\n"))

    assert cfg.update.scope is ScopeMode.ANY


def test_load_config_missing_env_raises(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("VCS_UPDATE_SCOPE", raising=False)

    with pytest.raises(ConfigError) as ei:
        load_config(_write(tmp_path, "update:\n  scope: ${VCS_UPDATE_SCOPE}\n"))

    assert "VCS_UPDATE_SCOPE" in str(ei.value)
    assert ei.value.path == "update.scope"


def test_unknown_operation_names_the_key(tmp_path: Path) -> None:
    with pytest.raises(ConfigError) as ei:
        load_config(_write(tmp_path, "update:\n  operation: checkout\n"))

    assert ei.value.path == "update.operation"


def test_section_must_be_mapping(tmp_path: Path) -> None:
    with pytest.raises(ConfigError) as ei:
        load_config(_write(tmp_path, "update: [1, 2]\n"))

    assert ei.value.path == "update"


def test_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        load_config(tmp_path / "nope.yaml")


def test_repo_configs_update_yaml_loadable() -> None:
    cfg = load_config(Path(__file__).resolve().parents[1] / "configs" / "update.yaml")

    assert cfg.update.operation is OperationKind.UPDATE
    assert cfg.update.scope is ScopeMode.ROOT_MEMBERSHIP
