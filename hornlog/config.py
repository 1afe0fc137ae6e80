"""
hornlog Configuration System

Manages configuration for query evaluation, clause validation, the runtime
wrapper and logging. Supports both YAML and JSON formats.
"""

import json
from pathlib import Path
from typing import Dict, Any, Optional, Union
from dataclasses import dataclass, field, asdict

import yaml

from .evaluator import DEFAULT_MAX_DEPTH, STRATEGIES, RENAMING_MODES

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class QueryConfig:
    """Query evaluation configuration"""
    max_depth: int = DEFAULT_MAX_DEPTH
    strategy: str = "constrained"  # "constrained" or "baseline"
    renaming: str = "application"  # "application" or "depth"
    occurs_check: bool = True
    trace_enabled: bool = False

    def __post_init__(self):
        if self.strategy not in STRATEGIES:
            raise ValueError(f"Unknown strategy {self.strategy!r}, expected one of {STRATEGIES}")
        if self.renaming not in RENAMING_MODES:
            raise ValueError(f"Unknown renaming mode {self.renaming!r}, expected one of {RENAMING_MODES}")
        if self.max_depth < 0:
            raise ValueError("max_depth must be non-negative")


@dataclass
class ValidationConfig:
    """Clause validation configuration"""
    strict: bool = False  # Reject unsafe rules / non-ground facts instead of warning
    warn_singletons: bool = True


@dataclass
class RuntimeConfig:
    """Runtime wrapper configuration"""
    enable_logic: bool = True


@dataclass
class HornlogConfig:
    """Main hornlog configuration"""
    query: QueryConfig = field(default_factory=QueryConfig)
    validation: ValidationConfig = field(default_factory=ValidationConfig)
    runtime: RuntimeConfig = field(default_factory=RuntimeConfig)

    # Logging
    log_level: str = "WARNING"
    log_file: Optional[str] = None

    def __post_init__(self):
        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"Unknown log level {self.log_level!r}, expected one of {LOG_LEVELS}")

    @classmethod
    def load(cls, path: Optional[Union[str, Path]] = None) -> "HornlogConfig":
        """
        Load configuration from file.

        Args:
            path: Path to config file. If None, searches for:
                  1. ~/.hornlog/config.yaml (or .yml)
                  2. ~/.hornlog/config.json
                  3. ./hornlog_config.yaml (or .yml)
                  4. ./hornlog_config.json

        Returns:
            HornlogConfig instance
        """
        if path:
            return cls._load_from_file(Path(path))

        search_paths = [
            Path.home() / ".hornlog" / "config.yaml",
            Path.home() / ".hornlog" / "config.yml",
            Path.home() / ".hornlog" / "config.json",
            Path("hornlog_config.yaml"),
            Path("hornlog_config.yml"),
            Path("hornlog_config.json"),
        ]

        for config_path in search_paths:
            if config_path.exists():
                return cls._load_from_file(config_path)

        # Return default config if no file found
        return cls()

    @classmethod
    def _load_from_file(cls, path: Path) -> "HornlogConfig":
        """Load config from specific file"""
        with open(path, 'r') as f:
            if path.suffix in ['.yaml', '.yml']:
                data = yaml.safe_load(f)
            else:
                data = json.load(f)

        return cls.from_dict(data or {})

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HornlogConfig":
        """Create config from dictionary"""
        config = cls()

        if 'query' in data:
            config.query = QueryConfig(**data['query'])

        if 'validation' in data:
            config.validation = ValidationConfig(**data['validation'])

        if 'runtime' in data:
            config.runtime = RuntimeConfig(**data['runtime'])

        for key in ['log_level', 'log_file']:
            if key in data:
                setattr(config, key, data[key])

        return config

    def save(self, path: Union[str, Path]) -> None:
        """
        Save configuration to file.

        Args:
            path: Path to save config (extension determines format)
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        data = self.to_dict()

        with open(path, 'w') as f:
            if path.suffix in ['.yaml', '.yml']:
                yaml.dump(data, f, default_flow_style=False, sort_keys=False)
            else:
                json.dump(data, f, indent=2)

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary"""
        return {
            'query': asdict(self.query),
            'validation': asdict(self.validation),
            'runtime': asdict(self.runtime),
            'log_level': self.log_level,
            'log_file': self.log_file
        }
