from __future__ import annotations

from pathlib import Path

import pytest

from pharmacy_retriever.config.loader import (
    DEFAULT_GEOCODE_URL,
    ConfigError,
    ConfigMissingError,
    load_reward_tables,
    load_settings,
    load_sources,
)


def test_load_sources_success(write_config: dict[str, Path]):
    sources = load_sources(write_config["sources"])
    assert len(sources) == 2
    first, second = sources
    assert first.department == "関東信越厚生局"
    assert first.excel_urls == ("https://example.jp/kanto/tokyo.xlsx",)
    assert first.reward_id == "2022"
    assert first.origin_url.startswith("https://kouseikyoku")
    assert first.desc == "東京都の一部の薬局は掲載されていません"
    assert second.desc == ""
    assert second.origin_url == ""


def test_load_sources_missing_file(temp_workdir: Path):
    with pytest.raises(ConfigMissingError):
        load_sources(temp_workdir / "not_exists.yml")


def test_load_sources_invalid_yaml(temp_workdir: Path):
    p = temp_workdir / "xls_urls.yml"
    p.write_text("- department: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="invalid yaml"):
        load_sources(p)


def test_load_sources_requires_excel_url(write_config: dict[str, Path]):
    p = write_config["sources"]
    text = p.read_text(encoding="utf-8").replace(
        "  excel_url:\n    - https://example.jp/kinki/all.zip\n", ""
    )
    p.write_text(text, encoding="utf-8")
    with pytest.raises(ConfigError) as e:
        load_sources(p)
    assert "config validation failed" in str(e.value) and "required property" in str(e.value)


def test_load_sources_rejects_extra_field(write_config: dict[str, Path]):
    p = write_config["sources"]
    p.write_text(p.read_text(encoding="utf-8") + "  extra_field: x\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="config validation failed"):
        load_sources(p)


def test_load_sources_empty_file(temp_workdir: Path):
    p = temp_workdir / "xls_urls.yml"
    p.write_text("", encoding="utf-8")
    with pytest.raises(ConfigError, match="config validation failed"):
        load_sources(p)


def test_load_reward_tables_success(write_config: dict[str, Path]):
    tables = load_reward_tables(write_config["rewards"])
    assert [t.id for t in tables] == ["2022", "2020"]
    assert tables[0].reward["地域支援体制加算１"] == 39


def test_load_reward_tables_integer_id(temp_workdir: Path):
    p = temp_workdir / "reward.yml"
    p.write_text("- id: 2022\n  reward:\n    a: 1\n", encoding="utf-8")
    assert load_reward_tables(p)[0].id == "2022"


def test_load_reward_tables_rejects_non_integer_points(temp_workdir: Path):
    p = temp_workdir / "reward.yml"
    p.write_text("- id: '2022'\n  reward:\n    a: many\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="config validation failed"):
        load_reward_tables(p)


def test_load_reward_tables_missing_file(temp_workdir: Path):
    with pytest.raises(ConfigMissingError, match="config file not found"):
        load_reward_tables(temp_workdir / "reward.yml")


def test_load_settings_defaults():
    settings = load_settings({})
    assert settings.sources_path == Path("xls_urls.yml")
    assert settings.reward_path == Path("reward.yml")
    assert settings.output_path == Path("pharmacy.json")
    assert settings.geocode_url == DEFAULT_GEOCODE_URL
    assert settings.geocode_retry == 10
    assert settings.geocode_backoff == 10.0


def test_load_settings_from_env():
    settings = load_settings(
        {
            "PHARMACY_SOURCES": "conf/src.yml",
            "PHARMACY_OUTPUT": "out/pharmacy.json",
            "PHARMACY_GEOCODE_URL": "http://localhost/geo",
            "PHARMACY_GEOCODE_RETRY": "3",
            "PHARMACY_GEOCODE_BACKOFF": "0.5",
            "PHARMACY_HTTP_TIMEOUT": "5",
        }
    )
    assert settings.sources_path == Path("conf/src.yml")
    assert settings.output_path == Path("out/pharmacy.json")
    assert settings.geocode_url == "http://localhost/geo"
    assert settings.geocode_retry == 3
    assert settings.geocode_backoff == 0.5
    assert settings.http_timeout == 5.0


@pytest.mark.parametrize(
    "env",
    [
        {"PHARMACY_GEOCODE_RETRY": "ten"},
        {"PHARMACY_GEOCODE_RETRY": "0"},
        {"PHARMACY_GEOCODE_BACKOFF": "-1"},
    ],
)
def test_load_settings_invalid_numbers(env):
    with pytest.raises(ConfigError):
        load_settings(env)
