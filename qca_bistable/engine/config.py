import logging
from dataclasses import dataclass, fields, replace
from typing import Mapping, Optional

from ..constants import (
    DEFAULT_NUMBER_OF_SAMPLES, DEFAULT_CONVERGENCE_TOLERANCE, DEFAULT_RADIUS_OF_EFFECT,
    DEFAULT_EPSILON_R, DEFAULT_CLOCK_HIGH, DEFAULT_CLOCK_LOW, DEFAULT_CLOCK_SHIFT,
    DEFAULT_CLOCK_AMPLITUDE_FACTOR, DEFAULT_MAX_ITERATIONS_PER_SAMPLE,
    DEFAULT_LAYER_SEPARATION, DEFAULT_RANDOMIZE_CELLS,
)
from ..exceptions import EngineError

logger = logging.getLogger(__name__)

SETTINGS_SECTION = "BISTABLE_OPTIONS"

# Engine-config key -> BistableConfig field.
SETTING_KEYS = {
    "number_of_samples": "number_of_samples",
    "convergence_tolerance": "convergence_tolerance",
    "radius_of_effect": "radius_of_effect",
    "epsilonR": "epsilon_r",
    "clock_high": "clock_high",
    "clock_low": "clock_low",
    "clock_shift": "clock_shift",
    "clock_amplitude_factor": "clock_amplitude_factor",
    "max_iterations_per_sample": "max_iterations_per_sample",
    "layer_separation": "layer_separation",
    "randomize_cells": "randomize_cells",
    "random_seed": "random_seed",
}


def _parse_bool(value: str) -> bool:
    return value.strip().lower() == "true"


@dataclass(frozen=True)
class BistableConfig:
    """Settings of the bistable engine. Distances are in nanometres, energies in joules."""

    number_of_samples: int = DEFAULT_NUMBER_OF_SAMPLES
    convergence_tolerance: float = DEFAULT_CONVERGENCE_TOLERANCE
    radius_of_effect: float = DEFAULT_RADIUS_OF_EFFECT
    epsilon_r: float = DEFAULT_EPSILON_R
    clock_high: float = DEFAULT_CLOCK_HIGH
    clock_low: float = DEFAULT_CLOCK_LOW
    clock_shift: float = DEFAULT_CLOCK_SHIFT
    clock_amplitude_factor: float = DEFAULT_CLOCK_AMPLITUDE_FACTOR
    max_iterations_per_sample: int = DEFAULT_MAX_ITERATIONS_PER_SAMPLE
    layer_separation: float = DEFAULT_LAYER_SEPARATION
    randomize_cells: bool = DEFAULT_RANDOMIZE_CELLS
    random_seed: Optional[int] = None

    def __post_init__(self):
        if self.number_of_samples <= 0:
            raise ValueError(f"number_of_samples must be positive, got {self.number_of_samples}.")
        if self.convergence_tolerance < 0:
            raise ValueError(f"convergence_tolerance can't be negative, got {self.convergence_tolerance}.")
        if self.radius_of_effect <= 0:
            raise ValueError(f"radius_of_effect must be positive, got {self.radius_of_effect}.")
        if self.epsilon_r <= 0:
            raise ValueError(f"epsilonR must be positive, got {self.epsilon_r}.")
        if self.layer_separation <= 0:
            raise ValueError(f"layer_separation must be positive, got {self.layer_separation}.")
        if self.max_iterations_per_sample < 0:
            raise ValueError(
                f"max_iterations_per_sample can't be negative, got {self.max_iterations_per_sample}."
            )
        if not 0 < self.clock_low <= self.clock_high:
            raise ValueError(
                f"Clock levels must satisfy 0 < clock_low <= clock_high, got {self.clock_low}, {self.clock_high}."
            )

    @classmethod
    def from_settings(cls, settings: Mapping[str, str]) -> "BistableConfig":
        """Builds a config from a flat key -> value block; missing keys keep their defaults."""
        types = {f.name: f.type for f in fields(cls)}
        kwargs = {}
        for key, raw in settings.items():
            name = SETTING_KEYS.get(key)
            if name is None:
                logger.warning(f"Ignoring unknown bistable setting '{key}'.")
                continue
            try:
                kwargs[name] = cls._convert(name, types[name], raw)
            except ValueError as e:
                raise ValueError(f"Invalid value for '{key}': {raw!r}") from e
        return cls(**kwargs)

    @staticmethod
    def _convert(name: str, field_type, raw: str):
        if name == "randomize_cells":
            return _parse_bool(raw)
        if name == "random_seed":
            return int(raw) if raw.strip() else None
        if field_type is int:
            return int(raw)
        return float(raw)

    @classmethod
    def from_file(cls, filename: str) -> "BistableConfig":
        from ..formats.sections import parse_sections

        with open(filename, "r", encoding="utf-8") as f:
            root = parse_sections(f)

        sections = root.subsections.get(SETTINGS_SECTION)
        if not sections or not sections[0].settings:
            raise EngineError(f"Bistable engine config file {filename} needs a [{SETTINGS_SECTION}] settings section.")
        logger.info(f"Loaded bistable settings from {filename}")
        return cls.from_settings(sections[0].settings)

    def with_overrides(self, **overrides) -> "BistableConfig":
        """Copy with the given fields replaced; None values are skipped."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})
