"""Configuration for the Scalable Bloom Filter.

A ``Config`` carries the four parameters that shape every generation of a
``ScalableBloomFilter``:

    - initial_fp: false positive rate of the first filter, in (0, 1)
    - growth_factor: capacity multiplier between generations, > 1
    - tightening_ratio: error rate multiplier between generations, in (0, 1)
    - initial_capacity: expected element count of the first filter, > 0

Generation ``i`` is built with capacity ``ceil(initial_capacity * growth_factor ** i)``
and error rate ``initial_fp * tightening_ratio ** i``.

The field names match the keys of the JSON configuration file read by
``load_config``::

    {
        "initial_fp": 0.01,
        "growth_factor": 2.0,
        "tightening_ratio": 0.5,
        "initial_capacity": 1000
    }
"""
import json
import math
import sys
from dataclasses import dataclass, fields
from numbers import Real


def _is_number(value):
    return isinstance(value, Real) and not isinstance(value, bool)


class ConfigError(ValueError):
    """Base class for rejected Scalable Bloom Filter configurations."""


class InvalidTighteningRatio(ConfigError):
    pass


class InvalidGrowthFactor(ConfigError):
    pass


class InvalidInitialFP(ConfigError):
    pass


class InvalidInitialCapacity(ConfigError):
    pass


@dataclass(frozen=True)
class Config:
    initial_fp: float
    growth_factor: float
    tightening_ratio: float
    initial_capacity: int

    def validate(self):
        """Check every parameter and return ``self``.

        Raises:
            InvalidTighteningRatio: If tightening_ratio is not a number in (0, 1).
            InvalidGrowthFactor: If growth_factor is not a finite number > 1.
            InvalidInitialFP: If initial_fp is not a number in (0, 1).
            InvalidInitialCapacity: If initial_capacity is not a positive int.
        """
        if not _is_number(self.tightening_ratio) or not (0 < self.tightening_ratio < 1):
            raise InvalidTighteningRatio(
                "tightening_ratio must be between 0 and 1, got %r" % (self.tightening_ratio,))
        if (not _is_number(self.growth_factor) or not math.isfinite(self.growth_factor)
                or not self.growth_factor > 1):
            raise InvalidGrowthFactor(
                "growth_factor must be a finite number greater than 1, got %r"
                % (self.growth_factor,))
        if not _is_number(self.initial_fp) or not (0 < self.initial_fp < 1):
            raise InvalidInitialFP(
                "initial_fp must be between 0 and 1, got %r" % (self.initial_fp,))
        capacity = self.initial_capacity
        if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity <= 0:
            raise InvalidInitialCapacity(
                "initial_capacity must be an integer greater than 0, got %r" % (capacity,))
        return self

    def error_rate(self, generation):
        """Target false positive rate of the given generation.

        Clamped to the smallest positive normal float so deep generations
        never underflow to zero.
        """
        return max(self.initial_fp * self.tightening_ratio ** generation, sys.float_info.min)

    def capacity(self, generation):
        """Target capacity of the given generation, rounded up."""
        return int(math.ceil(self.initial_capacity * self.growth_factor ** generation))

    @classmethod
    def from_dict(cls, data):
        """Build a config from a mapping, ignoring unknown keys.

        Raises:
            ConfigError: If a required key is missing.
        """
        names = [f.name for f in fields(cls)]
        missing = [name for name in names if name not in data]
        if missing:
            raise ConfigError("missing configuration keys: %s" % ", ".join(missing))
        return cls(**{name: data[name] for name in names})


DEFAULT_CONFIG = Config(
    initial_fp=0.01,        # 1% false positive rate
    growth_factor=2.0,      # capacity doubles with each new filter
    tightening_ratio=0.5,   # error rate halves with each new filter
    initial_capacity=1000,
)


def load_config(path):
    """Read a ``Config`` from a JSON file.

    The returned config is not validated; ``ScalableBloomFilter.from_config``
    does that.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        json.JSONDecodeError: If the file is not valid JSON.
        ConfigError: If the document is not an object or lacks a key.
    """
    with open(path, encoding='utf-8') as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ConfigError("configuration must be a JSON object")
    return Config.from_dict(data)
