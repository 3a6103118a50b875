"""Configuration management for the JSON workbench."""

from .models import (
    AnalyzerConfig,
    HistoryConfig,
    QueryConfig,
    RedisConfig,
    WorkbenchConfig
)
from .loader import (
    ConfigLoader,
    ConfigurationError,
    load_config,
    create_example_config
)

__all__ = [
    'AnalyzerConfig',
    'HistoryConfig',
    'QueryConfig',
    'RedisConfig',
    'WorkbenchConfig',
    'ConfigLoader',
    'ConfigurationError',
    'load_config',
    'create_example_config'
]
