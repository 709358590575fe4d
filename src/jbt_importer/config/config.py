"""Configuration management for the JBT importer."""

from enum import Enum
from typing import Optional, Dict, Any
from pathlib import Path
from urllib.parse import urlparse
import os

from pydantic import BaseModel, Field, validator
import yaml
from dotenv import load_dotenv

from ..exceptions import ConfigurationError


class RunMode(str, Enum):
    """Operation performed by one run."""

    IMPORT = 'import'
    TRANSFORM = 'transform'
    REVERT = 'revert'


class ProxyConfig(BaseModel):
    """HTTP and HTTPS proxy settings."""

    http_host: Optional[str] = Field(default=None, description='HTTP proxy host')
    http_port: Optional[int] = Field(default=None, description='HTTP proxy port')
    https_host: Optional[str] = Field(default=None, description='HTTPS proxy host')
    https_port: Optional[int] = Field(default=None, description='HTTPS proxy port')

    def proxies_for(self, url: str) -> Dict[str, str]:
        """Return requests proxy settings for the scheme of ``url``.

        A proxy is only used when its host is set and its port is positive.
        """
        scheme = urlparse(url).scheme or 'http'
        if scheme == 'https':
            host, port = self.https_host, self.https_port
        else:
            host, port = self.http_host, self.http_port

        if not host or not host.strip() or not port or port <= 0:
            return {}
        return {scheme: f'http://{host.strip()}:{port}'}


class JiraInstanceConfig(BaseModel):
    """Configuration for the target Jira instance."""

    url: str = Field(default='http://localhost:8080', description='Jira base URL')
    username: Optional[str] = Field(default=None, description='Jira username')
    password: Optional[str] = Field(default=None, description='Jira password')
    timeout: int = Field(default=60, description='Request timeout in seconds')
    proxy: ProxyConfig = Field(default_factory=ProxyConfig, description='Proxy settings')

    @validator('url')
    def validate_url(cls, v):
        """Validate Jira URL format."""
        if not v.startswith(('http://', 'https://')):
            raise ValueError('URL must start with http:// or https://')
        return v.rstrip('/')

    @validator('timeout')
    def validate_timeout(cls, v):
        """Validate timeout is positive."""
        if v <= 0:
            raise ValueError('Timeout must be positive')
        return v


class ExportConfig(BaseModel):
    """BugTrack export and transformation settings."""

    directory: str = Field(..., description='BugTrack export directory')
    stylesheet: Optional[str] = Field(
        default=None, description='XSLT file applied by a transform run'
    )
    revert: bool = Field(default=False, description='Revert previous transforms')
    character_map: Optional[str] = Field(
        default=None, description='YAML file replacing the default character map'
    )

    @validator('directory')
    def validate_directory(cls, v):
        """Validate the export directory is not blank."""
        if not v or not v.strip():
            raise ValueError('A valid export directory is required')
        return v


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default='INFO', description='Log level')
    file: Optional[str] = Field(default=None, description='Log file path')
    format: Optional[str] = Field(default=None, description='Console log format')

    @validator('level')
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f'Log level must be one of: {valid_levels}')
        return v.upper()


class Config(BaseModel):
    """Main configuration class for the JBT importer."""

    jira: JiraInstanceConfig = Field(
        default_factory=JiraInstanceConfig, description='Target Jira instance'
    )
    export: ExportConfig = Field(..., description='Export settings')
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description='Logging settings'
    )

    class Config:
        """Pydantic configuration."""

        extra = 'forbid'  # Don't allow extra fields

    @property
    def run_mode(self) -> RunMode:
        """Operation selected by the configuration."""
        if self.export.revert:
            return RunMode.REVERT
        if self.export.stylesheet:
            return RunMode.TRANSFORM
        return RunMode.IMPORT

    def check_mode_requirements(self) -> None:
        """Check the settings the selected run mode depends on.

        Raises:
            ConfigurationError: If a required setting is missing
        """
        if not Path(self.export.directory).is_dir():
            raise ConfigurationError(
                f'Export directory not found: {self.export.directory}'
            )

        mode = self.run_mode
        if mode == RunMode.IMPORT:
            if not self.jira.username or not self.jira.username.strip():
                raise ConfigurationError('A valid username is required')
            if not self.jira.password or not self.jira.password.strip():
                raise ConfigurationError('A valid password is required')
        elif mode == RunMode.TRANSFORM:
            if not Path(self.export.stylesheet).is_file():
                raise ConfigurationError(
                    f'Style sheet not found: {self.export.stylesheet}'
                )

    @classmethod
    def from_file(
        cls, config_path: str, overrides: Optional[Dict[str, Any]] = None
    ) -> 'Config':
        """Load configuration from YAML file."""
        config_file = Path(config_path)

        if not config_file.exists():
            raise FileNotFoundError(f'Configuration file not found: {config_path}')

        with open(config_file, 'r', encoding='utf-8') as f:
            config_data = yaml.safe_load(f) or {}

        return cls(**cls._merge(config_data, overrides or {}))

    @classmethod
    def from_env(cls, overrides: Optional[Dict[str, Any]] = None) -> 'Config':
        """Load configuration from environment variables."""
        # Load .env file if it exists
        load_dotenv()

        config_data = {
            'jira': {
                'url': os.getenv('JIRA_URL'),
                'username': os.getenv('JIRA_USERNAME'),
                'password': os.getenv('JIRA_PASSWORD'),
                'timeout': os.getenv('JIRA_TIMEOUT'),
                'proxy': {
                    'http_host': os.getenv('HTTP_PROXY_HOST'),
                    'http_port': _parse_port(os.getenv('HTTP_PROXY_PORT')),
                    'https_host': os.getenv('HTTPS_PROXY_HOST'),
                    'https_port': _parse_port(os.getenv('HTTPS_PROXY_PORT')),
                },
            },
            'export': {
                'directory': os.getenv('BUGTRACK_EXPORT_DIR'),
                'stylesheet': os.getenv('BUGTRACK_STYLESHEET'),
                'revert': os.getenv('BUGTRACK_REVERT', 'false').lower() == 'true',
                'character_map': os.getenv('BUGTRACK_CHARACTER_MAP'),
            },
            'logging': {
                'level': os.getenv('LOG_LEVEL', 'INFO'),
                'file': os.getenv('LOG_FILE'),
            },
        }

        # Remove None values
        config_data = cls._remove_none_values(config_data)

        return cls(**cls._merge(config_data, overrides or {}))

    @staticmethod
    def _remove_none_values(data: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively remove None values from dictionary."""
        if isinstance(data, dict):
            return {
                k: Config._remove_none_values(v)
                for k, v in data.items()
                if v is not None
            }
        return data

    @staticmethod
    def _merge(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively merge non-None override values into ``base``."""
        merged = dict(base)
        for key, value in overrides.items():
            if value is None:
                continue
            if isinstance(value, dict) and isinstance(merged.get(key), dict):
                merged[key] = Config._merge(merged[key], value)
            elif isinstance(value, dict):
                merged[key] = Config._merge({}, value)
            else:
                merged[key] = value
        return merged

    def to_file(self, config_path: str) -> None:
        """Save configuration to YAML file."""
        config_file = Path(config_path)
        config_file.parent.mkdir(parents=True, exist_ok=True)

        with open(config_file, 'w', encoding='utf-8') as f:
            yaml.dump(
                self.dict(), f, default_flow_style=False, indent=2, sort_keys=False
            )

    @staticmethod
    def create_template(output_path: str) -> None:
        """Create a configuration template file."""
        template_config = {
            'jira': {
                'url': 'http://localhost:8080',
                'username': 'jira-admin',
                'password': 'your-jira-password',
                'timeout': 60,
                'proxy': {
                    'http_host': None,
                    'http_port': None,
                    'https_host': None,
                    'https_port': None,
                },
            },
            'export': {
                'directory': '/path/to/bugtrack/export',
                'stylesheet': None,
                'revert': False,
                'character_map': None,
            },
            'logging': {
                'level': 'INFO',
                'file': 'jbt-importer.log',
            },
        }

        config_file = Path(output_path)
        config_file.parent.mkdir(parents=True, exist_ok=True)

        with open(config_file, 'w', encoding='utf-8') as f:
            yaml.dump(
                template_config, f, default_flow_style=False, indent=2, sort_keys=False
            )


def _parse_port(value: Optional[str]) -> Optional[int]:
    """Parse a proxy port, treating anything non-numeric as unset."""
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None
