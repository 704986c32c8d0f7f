"""
Configuration for ranking runs.

RankingConfig holds everything a run depends on besides the result corpus:
level weights, enabled levels, time window, aggregation and decay settings.
Configs can be loaded from TOML files laid out like this:

    finish_decay = 1.1
    age_decay = 1.1
    record_length = 10

    [levels]
    small = 50.0
    medium = 125.0
    major = 200.0
    championship = 250.0
"""

import dataclasses
import datetime
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal

from pydantic import ConfigDict, TypeAdapter, ValidationError as PydanticValidationError, with_config
from typing_extensions import NotRequired, TypedDict

from .exceptions import ConfigurationError
from .interfaces import ScoringCurve
from .logging_config import get_logger
from .models import AggregationMode, Level
from .ranking.aggregator import RECORD_LENGTH
from .scoring.curves import FINISH_DECAY, DecayCurve
from .scoring.points import AGE_DECAY

DEFAULT_LEVEL_WEIGHTS: dict[Level, float] = {
    Level.SMALL: 50.0,
    Level.MEDIUM: 125.0,
    Level.MAJOR: 200.0,
    Level.CHAMPIONSHIP: 250.0,
}


@with_config(ConfigDict(extra="forbid"))
class LevelWeightsFile(TypedDict):
    """Optional per-level weights in a config file."""
    small: NotRequired[float]
    medium: NotRequired[float]
    major: NotRequired[float]
    championship: NotRequired[float]


@with_config(ConfigDict(extra="forbid"))
class RankingConfigFile(TypedDict):
    """Type definition for a TOML config file."""
    finish_decay: NotRequired[float]
    age_decay: NotRequired[float]
    record_length: NotRequired[int]
    aggregation: NotRequired[Literal["sum", "best_k"]]
    window_days: NotRequired[int]
    max_workers: NotRequired[int]
    levels: NotRequired[LevelWeightsFile]


@dataclass(frozen=True)
class RankingConfig:
    """Configuration for a ranking run."""

    level_weights: dict[Level, float] = field(default_factory=lambda: dict(DEFAULT_LEVEL_WEIGHTS))
    levels: frozenset[Level] = frozenset(Level)
    as_of: datetime.date = field(default_factory=datetime.date.today)
    window_days: int | None = None  # None = every tournament up to as_of
    window_from: datetime.date | None = None  # explicit lower bound, overrides window_days
    aggregation: AggregationMode = AggregationMode.BEST_K
    best_k: int = RECORD_LENGTH
    finish_decay: float = FINISH_DECAY
    age_decay: float = AGE_DECAY
    max_workers: int = 4

    def __post_init__(self) -> None:
        """Validate configuration and fill in missing level weights."""
        weights = dict(DEFAULT_LEVEL_WEIGHTS)
        try:
            for level, weight in self.level_weights.items():
                weights[Level(level)] = float(weight)
            levels = frozenset(Level(lvl) for lvl in self.levels)
            aggregation = AggregationMode(self.aggregation)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e
        for level, weight in weights.items():
            if weight < 0:
                raise ConfigurationError(f"weight for {level.value} must be >= 0, got {weight}")
        object.__setattr__(self, "level_weights", weights)
        object.__setattr__(self, "levels", levels)
        object.__setattr__(self, "aggregation", aggregation)

        if self.window_days is not None and self.window_days < 0:
            raise ConfigurationError(f"window_days must be >= 0, got {self.window_days}")
        if self.window_from is not None and self.window_from > self.as_of:
            raise ConfigurationError(
                f"window_from {self.window_from} is after as_of {self.as_of}"
            )
        if self.best_k < 1:
            raise ConfigurationError(f"best_k must be >= 1, got {self.best_k}")
        if self.finish_decay < 1.0:
            raise ConfigurationError(f"finish_decay must be >= 1, got {self.finish_decay}")
        if self.age_decay < 1.0:
            raise ConfigurationError(f"age_decay must be >= 1, got {self.age_decay}")
        if self.max_workers <= 0:
            raise ConfigurationError(f"max_workers must be positive, got {self.max_workers}")

    def window_start(self) -> datetime.date | None:
        """Earliest included tournament date, or None when unbounded."""
        if self.window_from is not None:
            return self.window_from
        if self.window_days is None:
            return None
        return self.as_of - datetime.timedelta(days=self.window_days)

    def in_window(self, date: datetime.date) -> bool:
        """Whether a tournament on this date counts towards the ranking."""
        start = self.window_start()
        if start is not None and date < start:
            return False
        return date <= self.as_of

    def weight_for(self, level: Level) -> float:
        return self.level_weights[level]

    def with_overrides(self, **overrides: Any) -> "RankingConfig":
        """Copy of this config with some fields replaced, e.g. from CLI flags."""
        return dataclasses.replace(self, **overrides)


def build_curve(config: RankingConfig) -> ScoringCurve:
    """Default scoring curve for a config."""
    return DecayCurve(finish_decay=config.finish_decay)


def config_from_dict(raw: dict[str, Any], **overrides: Any) -> RankingConfig:
    """
    Build a RankingConfig from a parsed config document.

    Raises:
        ConfigurationError: If the document has unknown keys or bad types
    """
    try:
        data = TypeAdapter(RankingConfigFile).validate_python(raw)
    except PydanticValidationError as e:
        raise ConfigurationError(f"Invalid config: {e}") from e

    kwargs = dict[str, Any]()
    if "finish_decay" in data:
        kwargs["finish_decay"] = data["finish_decay"]
    if "age_decay" in data:
        kwargs["age_decay"] = data["age_decay"]
    if "record_length" in data:
        kwargs["best_k"] = data["record_length"]
    if "aggregation" in data:
        kwargs["aggregation"] = AggregationMode(data["aggregation"])
    if "window_days" in data:
        kwargs["window_days"] = data["window_days"]
    if "max_workers" in data:
        kwargs["max_workers"] = data["max_workers"]
    if "levels" in data:
        kwargs["level_weights"] = {Level(name): weight for name, weight in data["levels"].items()}

    kwargs.update(overrides)
    return RankingConfig(**kwargs)


def load_config(path: Path, **overrides: Any) -> RankingConfig:
    """
    Load a RankingConfig from a TOML file.

    Args:
        path: Path to the TOML file
        **overrides: RankingConfig fields that take precedence over the file

    Raises:
        ConfigurationError: If the file is missing, not TOML, or invalid
    """
    logger = get_logger("config")
    path = Path(path)
    try:
        with open(path, "rb") as f:
            raw = tomllib.load(f)
    except OSError as e:
        raise ConfigurationError(f"Could not read config {path}: {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Could not parse config {path}: {e}") from e

    config = config_from_dict(raw, **overrides)
    logger.info(f"Loaded config from {path}")
    return config
