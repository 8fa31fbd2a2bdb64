"""
Pydantic models for request and preset validation.

This module contains type-safe models that integrate validators
and provide clean interfaces for service layer operations.
"""

from re3data_explorer.models.requests import ListingRequest
from re3data_explorer.models.extraction import (
    FieldSpec,
    RepeatingGroupSpec,
    ExtractionSpec,
    NormalizationSpec,
    UseCase,
)

__all__ = [
    'ListingRequest',
    'FieldSpec',
    'RepeatingGroupSpec',
    'ExtractionSpec',
    'NormalizationSpec',
    'UseCase',
]
