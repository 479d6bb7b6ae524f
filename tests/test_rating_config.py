"""Tests for TOML-based rating system and arena settings loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from domain.ratings import DEFAULT_RANKS, get_rating_system_config, load_rating_system_configs
from domain.settings import ArenaSettings, load_arena_settings

ROOT_DIR = Path(__file__).resolve().parents[1]


def test_load_rating_system_configs_from_directory(tmp_path: Path) -> None:
    config_path = tmp_path / "default.toml"
    config_path.write_text(
        """
[system]
name = "arena_a"
description = "A test system"

[rating]
initial_mmr = 1200.0
k_factor = 24.0
scale_factor = 420.0
hard_multiplier = 1.5
rank_protection_losses = 2
rp_win_gain = 20

[[ranks]]
name = "Silver"
min_mmr = 1100

[[ranks]]
name = "Bronze"
min_mmr = 0
""".strip()
    )

    configs = load_rating_system_configs(tmp_path)
    assert len(configs) == 1

    system = configs[0]
    assert system.name == "arena_a"
    assert system.description == "A test system"
    assert system.parameters.initial_mmr == pytest.approx(1200.0)
    assert system.parameters.k_factor == pytest.approx(24.0)
    assert system.parameters.scale_factor == pytest.approx(420.0)
    assert system.parameters.hard_multiplier == pytest.approx(1.5)
    assert system.parameters.medium_multiplier == pytest.approx(1.0)
    assert system.parameters.rank_protection_losses == 2
    assert system.parameters.rp_win_gain == 20
    assert [tier.name for tier in system.parameters.ranks] == ["Bronze", "Silver"]
    assert system.as_config_json()["ranks"][0] == {"name": "Bronze", "min_mmr": 0.0}


def test_missing_ranks_use_default_ladder(tmp_path: Path) -> None:
    (tmp_path / "plain.toml").write_text('[system]\nname = "plain"\n')

    system = get_rating_system_config(tmp_path)

    assert system.parameters.ranks == DEFAULT_RANKS


def test_duplicate_names_raise_error(tmp_path: Path) -> None:
    (tmp_path / "a.toml").write_text('[system]\nname = "dup"\n')
    (tmp_path / "b.toml").write_text('[system]\nname = "dup"\n')

    with pytest.raises(ValueError, match="Duplicate rating system names"):
        load_rating_system_configs(tmp_path)


@pytest.mark.parametrize(
    ("body", "message"),
    [
        ('[rating]\nk_factor = 0', "k_factor must be > 0"),
        ('[rating]\nmin_performance = 1.3', "min_performance must be <= max_performance"),
        ('[rating]\nrp_loss = -1', "rp_loss must be >= 0"),
        ('[[ranks]]\nmin_mmr = 10', "missing a name"),
        ('[[ranks]]\nname = "A"\n[[ranks]]\nname = "A"', "Duplicate rank names"),
    ],
)
def test_invalid_parameters_name_the_file(tmp_path: Path, body: str, message: str) -> None:
    config_path = tmp_path / "bad.toml"
    config_path.write_text(f'[system]\nname = "bad"\n\n{body}\n')

    with pytest.raises(ValueError, match=message) as excinfo:
        load_rating_system_configs(tmp_path)
    assert str(config_path) in str(excinfo.value)


def test_get_rating_system_config_by_name(tmp_path: Path) -> None:
    (tmp_path / "a.toml").write_text('[system]\nname = "a"\n')
    (tmp_path / "b.toml").write_text('[system]\nname = "b"\n')

    assert get_rating_system_config(tmp_path, "b").name == "b"
    with pytest.raises(ValueError, match="Multiple rating systems"):
        get_rating_system_config(tmp_path)
    with pytest.raises(KeyError):
        get_rating_system_config(tmp_path, "c")


def test_shipped_rating_config_matches_defaults() -> None:
    system = get_rating_system_config(ROOT_DIR / "configs" / "rating", "cyber_elo")

    assert system.parameters.k_factor == pytest.approx(30.0)
    assert system.parameters.ranks == DEFAULT_RANKS


def test_arena_settings_resolve_relative_rating_dir(tmp_path: Path) -> None:
    settings_path = tmp_path / "arena.toml"
    settings_path.write_text(
        """
[engine]
base_url = "http://engine:7000/"
request_timeout = 2.5

[tracking]
poll_interval = 1.0

[matches]
max_concurrent = 8

[rating]
config_dir = "rating"
system = "cyber_elo"
""".strip()
    )

    settings = load_arena_settings(settings_path, environ={})

    assert settings.engine_url == "http://engine:7000"
    assert settings.engine_timeout == pytest.approx(2.5)
    assert settings.poll_interval == pytest.approx(1.0)
    assert settings.max_concurrent_matches == 8
    assert settings.rating_config_dir == tmp_path / "rating"
    assert settings.rating_system == "cyber_elo"


def test_arena_settings_environment_overrides() -> None:
    settings = load_arena_settings(
        None,
        environ={
            "ARENA_DB_URL": "sqlite://",
            "ARENA_ENGINE_URL": "http://other:9000/",
            "ARENA_MAX_CONCURRENT_MATCHES": "3",
        },
    )

    assert settings.db_url == "sqlite://"
    assert settings.engine_url == "http://other:9000"
    assert settings.max_concurrent_matches == 3


def test_arena_settings_reject_bad_values(tmp_path: Path) -> None:
    settings_path = tmp_path / "arena.toml"
    settings_path.write_text("[tracking]\npoll_interval = 0\n")

    with pytest.raises(ValueError, match="poll_interval must be > 0"):
        load_arena_settings(settings_path, environ={})
    with pytest.raises(FileNotFoundError):
        load_arena_settings(tmp_path / "missing.toml", environ={})


def test_default_settings_are_sane() -> None:
    settings = ArenaSettings()
    assert settings.max_concurrent_matches == 50
    assert settings.poll_interval == pytest.approx(3.0)
