from __future__ import annotations

from pathlib import Path

import pytest

from sheetsync.config.loader import ConfigError, SyncConfig, load_config, require_credentials


def test_load_config_success(write_config: Path):
    cfg = load_config(write_config, env={})
    assert cfg.project_id == 42
    assert cfg.api_token == "secret-token"
    assert cfg.base_url == "https://tms.test/api/v2"
    assert cfg.workbook == "data/strings.xlsx"
    assert cfg.source_marker == "English"
    assert cfg.page_size == 2
    assert cfg.rate_limit.item_delay == 0
    assert cfg.rate_limit.group_every == 0


def test_defaults_for_minimal_file(temp_workdir: Path):
    path = temp_workdir / "config" / "sync.yml"
    path.write_text("project_id: 7\n", encoding="utf-8")
    cfg = load_config(path, env={})
    assert cfg.api_token is None
    assert cfg.base_url == "https://api.crowdin.com/api/v2"
    assert cfg.page_size == 500
    assert cfg.rate_limit.item_delay == 0.2
    assert cfg.rate_limit.group_delay == 1.0
    assert cfg.locale_overrides == {}


def test_load_config_missing_file(temp_workdir: Path):
    with pytest.raises(ConfigError) as e:
        load_config(temp_workdir / "config" / "not_exists.yml")
    assert "not found" in str(e.value)


def test_environment_wins_for_secrets(write_config: Path):
    env = {"TMS_API_TOKEN": "from-env", "TMS_PROJECT_ID": "99", "TMS_BASE_URL": "https://other.test/api/v2"}
    cfg = load_config(write_config, env=env)
    assert cfg.api_token == "from-env"
    assert cfg.project_id == 99
    assert cfg.base_url == "https://other.test/api/v2"


def test_non_numeric_project_id(write_config: Path):
    with pytest.raises(ConfigError) as e:
        load_config(write_config, env={"TMS_PROJECT_ID": "my-project"})
    assert "numeric" in str(e.value)


def test_project_id_as_quoted_string(temp_workdir: Path):
    path = temp_workdir / "config" / "sync.yml"
    path.write_text('project_id: "123"\napi_token: t\n', encoding="utf-8")
    assert load_config(path, env={}).project_id == 123


def test_extra_field_rejected(write_config: Path):
    write_config.write_text(write_config.read_text(encoding="utf-8") + "extra_field: 1\n", encoding="utf-8")
    with pytest.raises(ConfigError) as e:
        load_config(write_config, env={})
    assert "config validation failed" in str(e.value)


@pytest.mark.parametrize(
    "snippet",
    ["page_size: 0\n", "page_size: 501\n", "base_url: ftp://x\n", "rate_limit:\n  item_delay: -1\n"],
)
def test_invalid_values_rejected(temp_workdir: Path, snippet: str):
    path = temp_workdir / "config" / "sync.yml"
    path.write_text("project_id: 1\n" + snippet, encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(path, env={})


def test_invalid_yaml(temp_workdir: Path):
    path = temp_workdir / "config" / "sync.yml"
    path.write_text("project_id: [1\n", encoding="utf-8")
    with pytest.raises(ConfigError) as e:
        load_config(path, env={})
    assert "invalid yaml" in str(e.value)


def test_root_must_be_mapping(temp_workdir: Path):
    path = temp_workdir / "config" / "sync.yml"
    path.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(path, env={})


def test_require_credentials():
    assert require_credentials(SyncConfig(project_id=1, api_token="t")) == (1, "t")
    with pytest.raises(ConfigError) as e:
        require_credentials(SyncConfig(project_id=1, api_token=None))
    assert "TMS_API_TOKEN" in str(e.value)
    with pytest.raises(ConfigError) as e:
        require_credentials(SyncConfig(project_id=None, api_token="t"))
    assert "TMS_PROJECT_ID" in str(e.value)
