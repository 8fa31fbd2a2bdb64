"""
Discovery helper classes for exploring configured aggregation presets.

Provides user-facing APIs to discover the available use cases from
config/use_cases.yaml.
"""

from typing import Dict
from re3data_explorer.config import get_config


class UseCases:
    """
    Helper class for discovering configured aggregation presets.

    All methods use the centralized configuration from use_cases.yaml
    and return copies to prevent accidental mutations.

    Example:
        >>> UseCases.list_available()
        {'certificates_by_type': 'Repository types and ...', ...}

        >>> UseCases.is_valid('api_endpoints')
        True
    """

    @staticmethod
    def list_available() -> Dict[str, str]:
        """
        List all preset names with their descriptions.

        Returns:
            Dictionary mapping preset names to descriptions
        """
        use_cases = get_config().use_cases
        return {name: preset.get('description', '') for name, preset in use_cases.items()}

    @staticmethod
    def get_description(name: str) -> str:
        """
        Get the description of a preset.

        Raises:
            ValueError: If name is not found

        Example:
            >>> UseCases.get_description('medical_repositories')
            'Repositories covering the medical research subject area'
        """
        try:
            return get_config().get_use_case_description(name)
        except KeyError as e:
            raise ValueError(f"Unknown use case: {name}") from e

    @staticmethod
    def is_valid(name: str) -> bool:
        """Check if a preset name is configured."""
        return get_config().is_valid_use_case(name)

    @staticmethod
    def namespaces() -> Dict[str, str]:
        """Namespace prefixes available to preset XPaths."""
        return get_config().namespaces.copy()
