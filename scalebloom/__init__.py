from scalebloom.config import (
    DEFAULT_CONFIG,
    Config,
    ConfigError,
    InvalidGrowthFactor,
    InvalidInitialCapacity,
    InvalidInitialFP,
    InvalidTighteningRatio,
    load_config,
)
from scalebloom.pybloom import BloomFilter, ScalableBloomFilter

__all__ = [
    'BloomFilter',
    'Config',
    'ConfigError',
    'DEFAULT_CONFIG',
    'InvalidGrowthFactor',
    'InvalidInitialCapacity',
    'InvalidInitialFP',
    'InvalidTighteningRatio',
    'ScalableBloomFilter',
    'load_config',
]
