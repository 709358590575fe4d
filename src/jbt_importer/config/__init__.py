"""Configuration models."""

from .config import (
    Config,
    ExportConfig,
    JiraInstanceConfig,
    LoggingConfig,
    ProxyConfig,
    RunMode,
)

__all__ = [
    'Config',
    'ExportConfig',
    'JiraInstanceConfig',
    'LoggingConfig',
    'ProxyConfig',
    'RunMode',
]
