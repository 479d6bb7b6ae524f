"""Load rating system definitions from TOML files."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from domain.config_base import BaseSystemConfig, load_system_configs, parse_system_metadata
from domain.ratings.calculator import RatingParameters
from domain.ratings.ranks import DEFAULT_RANKS, RankTier


@dataclass(frozen=True)
class RatingSystemConfig(BaseSystemConfig):
    """Configuration for one rating system."""

    parameters: RatingParameters

    def as_config_json(self) -> dict[str, Any]:
        return {
            "initial_mmr": self.parameters.initial_mmr,
            "k_factor": self.parameters.k_factor,
            "scale_factor": self.parameters.scale_factor,
            "easy_multiplier": self.parameters.easy_multiplier,
            "medium_multiplier": self.parameters.medium_multiplier,
            "hard_multiplier": self.parameters.hard_multiplier,
            "insane_multiplier": self.parameters.insane_multiplier,
            "flag_share_weight": self.parameters.flag_share_weight,
            "uptime_share_weight": self.parameters.uptime_share_weight,
            "downtime_share_weight": self.parameters.downtime_share_weight,
            "min_performance": self.parameters.min_performance,
            "max_performance": self.parameters.max_performance,
            "rank_protection_losses": self.parameters.rank_protection_losses,
            "rp_win_gain": self.parameters.rp_win_gain,
            "rp_loss": self.parameters.rp_loss,
            "rp_streak_loss": self.parameters.rp_streak_loss,
            "rp_protected_loss": self.parameters.rp_protected_loss,
            "ranks": [
                {"name": tier.name, "min_mmr": tier.min_mmr} for tier in self.parameters.ranks
            ],
        }


def load_rating_system_configs(config_dir: Path) -> list[RatingSystemConfig]:
    """Load and validate all rating system TOML config files in a directory."""
    return load_system_configs(
        config_dir,
        _parse_rating_system_config,
        duplicate_name_label="rating",
    )


def get_rating_system_config(config_dir: Path, name: str | None = None) -> RatingSystemConfig:
    """Return the named config, or the only one when no name is given."""
    configs = load_rating_system_configs(config_dir)
    if name is None:
        if len(configs) != 1:
            names = [config.name for config in configs]
            raise ValueError(f"Multiple rating systems in {config_dir}, pick one of {names}")
        return configs[0]
    for config in configs:
        if config.name == name:
            return config
    raise KeyError(f"No rating system named '{name}' in {config_dir}")


def _parse_rating_system_config(raw: dict[str, Any], file_path: Path) -> RatingSystemConfig:
    name, description = parse_system_metadata(raw, file_path)
    rating_raw = raw.get("rating", {})
    ranks = _parse_ranks(raw.get("ranks"), file_path)

    try:
        parameters = RatingParameters(
            initial_mmr=float(rating_raw.get("initial_mmr", 1000.0)),
            k_factor=float(rating_raw.get("k_factor", 30.0)),
            scale_factor=float(rating_raw.get("scale_factor", 400.0)),
            easy_multiplier=float(rating_raw.get("easy_multiplier", 0.6)),
            medium_multiplier=float(rating_raw.get("medium_multiplier", 1.0)),
            hard_multiplier=float(rating_raw.get("hard_multiplier", 1.35)),
            insane_multiplier=float(rating_raw.get("insane_multiplier", 1.7)),
            flag_share_weight=float(rating_raw.get("flag_share_weight", 0.2)),
            uptime_share_weight=float(rating_raw.get("uptime_share_weight", 0.15)),
            downtime_share_weight=float(rating_raw.get("downtime_share_weight", 0.1)),
            min_performance=float(rating_raw.get("min_performance", 0.8)),
            max_performance=float(rating_raw.get("max_performance", 1.2)),
            rank_protection_losses=int(rating_raw.get("rank_protection_losses", 3)),
            rp_win_gain=int(rating_raw.get("rp_win_gain", 15)),
            rp_loss=int(rating_raw.get("rp_loss", 15)),
            rp_streak_loss=int(rating_raw.get("rp_streak_loss", 30)),
            rp_protected_loss=int(rating_raw.get("rp_protected_loss", 25)),
            ranks=ranks,
        )
    except ValueError as exc:
        raise ValueError(f"{file_path}: {exc}") from exc
    _validate_parameters(file_path=file_path, parameters=parameters)

    return RatingSystemConfig(
        name=name,
        description=description,
        file_path=file_path,
        parameters=parameters,
    )


def _parse_ranks(raw_ranks: Any, file_path: Path) -> tuple[RankTier, ...]:
    if raw_ranks is None:
        return DEFAULT_RANKS
    if not isinstance(raw_ranks, list):
        raise ValueError(f"{file_path}: [[ranks]] must be an array of tables")

    tiers: list[RankTier] = []
    for index, entry in enumerate(raw_ranks):
        tier_name = str(entry.get("name", "")).strip()
        if not tier_name:
            raise ValueError(f"{file_path}: [[ranks]] entry {index} is missing a name")
        tiers.append(RankTier(name=tier_name, min_mmr=float(entry.get("min_mmr", 0.0))))
    return tuple(tiers)


def _validate_parameters(*, file_path: Path, parameters: RatingParameters) -> None:
    if parameters.initial_mmr < 0.0:
        raise ValueError(f"{file_path}: [rating].initial_mmr must be >= 0")
    if parameters.k_factor <= 0.0:
        raise ValueError(f"{file_path}: [rating].k_factor must be > 0")
    if parameters.scale_factor <= 0.0:
        raise ValueError(f"{file_path}: [rating].scale_factor must be > 0")
    for label in ("easy", "medium", "hard", "insane"):
        if getattr(parameters, f"{label}_multiplier") <= 0.0:
            raise ValueError(f"{file_path}: [rating].{label}_multiplier must be > 0")
    if parameters.min_performance > parameters.max_performance:
        raise ValueError(f"{file_path}: [rating].min_performance must be <= max_performance")
    if parameters.rank_protection_losses < 1:
        raise ValueError(f"{file_path}: [rating].rank_protection_losses must be >= 1")
    for label in ("rp_win_gain", "rp_loss", "rp_streak_loss", "rp_protected_loss"):
        if getattr(parameters, label) < 0:
            raise ValueError(f"{file_path}: [rating].{label} must be >= 0")
