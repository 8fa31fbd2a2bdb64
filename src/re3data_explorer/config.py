"""
Configuration management using Pydantic Settings.

Automatically loads configuration from config/use_cases.yaml and environment variables.
Provides type-safe access to:
- re3data API endpoints and request settings
- Aggregation presets (listing query + field extraction spec per use case)
- Output locations for CSV files and charts
"""

from pathlib import Path
from typing import Any, Dict, Optional, TYPE_CHECKING
import yaml
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from re3data_explorer.validators import validate_url_template

if TYPE_CHECKING:
    from re3data_explorer.models.extraction import UseCase


__version__ = "0.1.0"


class UseCasesConfig(BaseSettings):
    """
    Configuration automatically loaded from config/use_cases.yaml.

    Holds the XML namespace prefixes used by the extraction XPaths and the raw
    aggregation presets. Presets are validated lazily by get_use_case() so a
    single broken preset does not prevent the others from loading.

    Attributes:
        namespaces: Namespace prefix → URI used in XPath expressions
        use_cases: Preset name → raw preset dictionary

    Example:
        >>> config = UseCasesConfig()
        >>> config.is_valid_use_case('certificates_by_type')
        True
        >>> config.namespaces['r3d']
        'http://www.re3data.org/schema/2-2'
    """

    namespaces: Dict[str, str] = Field(
        default_factory=dict,
        description="XML namespace prefixes available to extraction XPaths"
    )
    use_cases: Dict[str, Dict[str, Any]] = Field(
        default_factory=dict,
        description="Aggregation presets keyed by name"
    )

    model_config = SettingsConfigDict(
        extra='ignore'
    )

    @model_validator(mode='before')
    @classmethod
    def load_yaml_config(cls, data: dict) -> dict:
        """
        Load configuration from config/use_cases.yaml if not already provided.

        This validator runs before field validation and loads the YAML file
        if the data dict is empty (i.e., no values were provided).
        """
        # If data already has values (e.g., from tests), don't override
        if data:
            return data

        # src/re3data_explorer/config.py -> root
        project_root = Path(__file__).parent.parent.parent
        config_path = project_root / 'config' / 'use_cases.yaml'

        if not config_path.exists():
            config_path = Path('config/use_cases.yaml')

        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found at {config_path}. "
                f"Ensure config/use_cases.yaml exists in project root."
            )

        with open(config_path, 'r', encoding='utf-8') as f:
            yaml_data = yaml.safe_load(f) or {}

        return {
            'namespaces': yaml_data.get('namespaces', {}),
            'use_cases': yaml_data.get('use_cases', {})
        }

    def is_valid_use_case(self, name: Optional[str]) -> bool:
        """
        Check if a preset with this name exists.

        Args:
            name: Preset name (e.g., 'api_endpoints')

        Returns:
            True if the preset is configured, False otherwise
        """
        if name is None:
            return False
        return name in self.use_cases

    def get_use_case_description(self, name: str) -> str:
        """
        Get the human-readable description of a preset.

        Raises:
            KeyError: If name is not found in configuration
        """
        if name not in self.use_cases:
            raise KeyError(f"Unknown use case: {name}")
        return self.use_cases[name].get('description', '')


# Singleton pattern - loaded once, cached forever
_config: Optional[UseCasesConfig] = None


def get_config() -> UseCasesConfig:
    """
    Get global use case config instance (lazy-loaded singleton).

    Returns:
        Singleton UseCasesConfig instance

    Example:
        >>> config = get_config()
        >>> config2 = get_config()
        >>> config is config2  # Same instance
        True
    """
    global _config
    if _config is None:
        _config = UseCasesConfig()
    return _config


def get_use_case(name: str) -> 'UseCase':
    """
    Build a validated UseCase from the named preset.

    Args:
        name: Preset name from config/use_cases.yaml

    Returns:
        Frozen UseCase model

    Raises:
        KeyError: If the preset does not exist
        pydantic.ValidationError: If the preset is malformed

    Example:
        >>> use_case = get_use_case('certificates_by_type')
        >>> use_case.normalization.explode
        'type'
    """
    from re3data_explorer.models.extraction import UseCase

    config = get_config()
    if not config.is_valid_use_case(name):
        raise KeyError(
            f"Use case '{name}' not found in configuration. "
            f"Available use cases: {sorted(config.use_cases.keys())}"
        )

    return UseCase.model_validate({'name': name, **config.use_cases[name]})


class AppConfig(BaseSettings):
    """
    Application configuration loaded from environment variables.

    Environment Variables (from .env):
        REGISTRY_LISTING_URL: Listing endpoint queried during discovery
        REGISTRY_DETAIL_URL_TEMPLATE: Detail URL with an {identifier} placeholder
        REQUEST_TIMEOUT: Per-request timeout in seconds
        USER_AGENT: User-Agent header sent with every request
        OUTPUT_DIR: Directory for CSV files and charts
        MULTIVALUE_DELIMITER: Separator used when writing list cells to CSV

    Example:
        >>> config = get_app_config()
        >>> config.request_timeout
        30.0
    """

    registry_listing_url: str = Field(
        default="https://www.re3data.org/api/beta/repositories",
        description="Listing endpoint of the re3data API"
    )

    registry_detail_url_template: str = Field(
        default="https://www.re3data.org/api/v1/repository/{identifier}",
        description="Detail endpoint; {identifier} is replaced by the re3data ID"
    )

    request_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Timeout in seconds applied to every HTTP request"
    )

    user_agent: str = Field(
        default=f"re3data-explorer/{__version__}",
        description="User-Agent header for registry requests"
    )

    output_dir: str = Field(
        default="data/output",
        description="Directory path for result CSV files and charts"
    )

    multivalue_delimiter: str = Field(
        default=" || ",
        min_length=1,
        description="Separator for multi-valued cells in CSV output"
    )

    _validate_detail_template = field_validator('registry_detail_url_template')(
        validate_url_template
    )

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore'
    )


# Singleton pattern - loaded once, cached forever
_app_config: Optional[AppConfig] = None


def get_app_config() -> AppConfig:
    """
    Get global application config instance (lazy-loaded singleton).

    Configuration is loaded from environment variables and .env file.
    Cached after first access for efficiency.
    """
    global _app_config
    if _app_config is None:
        _app_config = AppConfig()
    return _app_config
