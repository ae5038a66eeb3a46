"""
Configuration management and loading.

Handles the data directory location, the subscription baseline, and
pricing overrides, from a YAML file and environment variables.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from claude_metrics.core.pricing import (
    PRICING_TABLE,
    SUBSCRIPTION_COST,
    PricingEntry,
    PricingTable,
)

ENV_CLAUDE_DIR = "CLAUDE_METRICS_DIR"
ENV_CONFIG_PATH = "CLAUDE_METRICS_CONFIG"

DEFAULT_CLAUDE_DIR = "~/.claude"

HISTORY_FILENAME = "history.jsonl"
STATS_FILENAME = "stats-cache.json"
PROJECTS_DIRNAME = "projects"


@dataclass(frozen=True)
class MetricsConfig:
    """Resolved configuration for one run."""
    claude_dir: Path
    subscription_cost: float = SUBSCRIPTION_COST
    pricing: PricingTable = field(default=PRICING_TABLE)

    def __post_init__(self):
        """Validate the subscription baseline."""
        if self.subscription_cost < 0:
            raise ValueError("subscription_cost cannot be negative")

    @property
    def history_file(self) -> Path:
        return self.claude_dir / HISTORY_FILENAME

    @property
    def stats_file(self) -> Path:
        return self.claude_dir / STATS_FILENAME

    @property
    def projects_dir(self) -> Path:
        return self.claude_dir / PROJECTS_DIRNAME


def _default_claude_dir() -> Path:
    return Path(os.environ.get(ENV_CLAUDE_DIR) or DEFAULT_CLAUDE_DIR).expanduser()


def load_config(path: Optional[str] = None) -> MetricsConfig:
    """Load and validate configuration.

    With no path, ``CLAUDE_METRICS_CONFIG`` is consulted; if that is unset
    too, built-in defaults are used. ``CLAUDE_METRICS_DIR`` sets the data
    directory unless the file sets ``claude_dir``.

    Args:
        path: Optional path to a YAML configuration file

    Returns:
        Validated MetricsConfig

    Raises:
        FileNotFoundError: If the config file doesn't exist
        yaml.YAMLError: If YAML is invalid
        ValueError: If configuration is invalid
    """
    path = path or os.environ.get(ENV_CONFIG_PATH)
    if not path:
        return MetricsConfig(claude_dir=_default_claude_dir())

    config_path = Path(path).expanduser()
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(config_path, 'r', encoding='utf-8') as f:
        try:
            raw_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise yaml.YAMLError(f"Invalid YAML in config file {path}: {e}")

    if not raw_config:
        raise ValueError("Configuration file is empty")
    if not isinstance(raw_config, dict):
        raise ValueError("Configuration must be a mapping")

    allowed_top_keys = {'claude_dir', 'subscription_cost', 'pricing'}
    unknown_keys = set(raw_config.keys()) - allowed_top_keys
    if unknown_keys:
        raise ValueError(f"Unknown configuration keys: {unknown_keys}")

    claude_dir = _default_claude_dir()
    if 'claude_dir' in raw_config:
        value = raw_config['claude_dir']
        if not isinstance(value, str) or not value.strip():
            raise ValueError("'claude_dir' must be a non-empty string")
        claude_dir = Path(value).expanduser()

    subscription_cost = SUBSCRIPTION_COST
    if 'subscription_cost' in raw_config:
        subscription_cost = _parse_amount(raw_config['subscription_cost'], 'subscription_cost')

    pricing = PRICING_TABLE
    if 'pricing' in raw_config:
        pricing_data = raw_config['pricing']
        if not isinstance(pricing_data, dict):
            raise ValueError("'pricing' must be a dictionary")
        overrides = {}
        for model, entry_data in pricing_data.items():
            if not isinstance(entry_data, dict):
                raise ValueError(f"Pricing for '{model}' must be a dictionary")
            overrides[str(model)] = _parse_pricing_entry(entry_data, f"pricing.{model}")
        pricing = PRICING_TABLE.merged(overrides)

    return MetricsConfig(
        claude_dir=claude_dir,
        subscription_cost=subscription_cost,
        pricing=pricing,
    )


def _parse_amount(value: Any, path: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
        raise ValueError(f"'{path}' must be a number >= 0")
    return float(value)


def _parse_pricing_entry(data: Dict, path: str) -> PricingEntry:
    """Parse and validate one pricing entry.

    Args:
        data: Pricing entry data
        path: Path for error messages

    Returns:
        Validated PricingEntry

    Raises:
        ValueError: If the entry is invalid
    """
    required_keys = {'input', 'output', 'cache_read', 'cache_write'}
    unknown_keys = set(data.keys()) - required_keys
    if unknown_keys:
        raise ValueError(f"Unknown keys in {path}: {unknown_keys}")

    missing_keys = required_keys - set(data.keys())
    if missing_keys:
        raise ValueError(f"Missing required keys in {path}: {sorted(missing_keys)}")

    return PricingEntry(
        input=_parse_amount(data['input'], f"{path}.input"),
        output=_parse_amount(data['output'], f"{path}.output"),
        cache_read=_parse_amount(data['cache_read'], f"{path}.cache_read"),
        cache_write=_parse_amount(data['cache_write'], f"{path}.cache_write"),
    )
