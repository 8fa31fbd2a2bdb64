"""
Field extraction and normalization models.

An aggregation preset is the combination of:
- ListingRequest: which repositories to enumerate
- ExtractionSpec: which XPath fills which output column
- NormalizationSpec: which boolean columns to derive and which column to explode

All models are frozen so a preset cannot change while a run is in progress.
"""

from typing import Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from re3data_explorer.models.requests import ListingRequest
from re3data_explorer.validators import (
    INDEX_PLACEHOLDER,
    validate_column_name,
    validate_xpath
)


class FieldSpec(BaseModel):
    """
    One output column and the XPath that fills it.

    Attributes:
        name: Output column name
        xpath: XPath evaluated against the detail document
        multiple: Keep every match as a list (True) or only the first one (False)
        deduplicate: Drop repeated identical values, keeping first-seen order

    Example:
        >>> FieldSpec(name='type', xpath='//r3d:type', multiple=True)
        FieldSpec(name='type', xpath='//r3d:type', multiple=True, deduplicate=True)
    """

    name: str
    xpath: str
    multiple: bool = False
    deduplicate: bool = True

    _validate_name = field_validator('name')(validate_column_name)
    _validate_xpath = field_validator('xpath')(validate_xpath)

    model_config = ConfigDict(frozen=True)


class RepeatingGroupSpec(BaseModel):
    """
    Fields that fan out into one record per occurrence.

    The group's occurrences are counted with count_xpath, then each field's
    XPath is evaluated with {index} replaced by 1..N. A document exposing
    two APIs therefore yields two records.

    Attributes:
        count_xpath: XPath whose match count is the number of occurrences
        fields: Per-occurrence fields; each xpath must contain {index}
        key_field: Field that must yield a value for an occurrence to be kept
                   (defaults to the first field)

    Example:
        >>> group = RepeatingGroupSpec(
        ...     count_xpath='//r3d:api',
        ...     fields=[
        ...         FieldSpec(name='api_endpoint', xpath='(//r3d:api)[{index}]'),
        ...         FieldSpec(name='api_type', xpath='(//r3d:api)[{index}]/@apiType'),
        ...     ]
        ... )
        >>> group.key
        'api_endpoint'
    """

    count_xpath: str
    fields: List[FieldSpec] = Field(..., min_length=1)
    key_field: Optional[str] = None

    _validate_count_xpath = field_validator('count_xpath')(validate_xpath)

    model_config = ConfigDict(frozen=True)

    @field_validator('fields')
    @classmethod
    def validate_indexed_fields(cls, v: List[FieldSpec]) -> List[FieldSpec]:
        """Every group field must address a single occurrence."""
        missing = [f.name for f in v if INDEX_PLACEHOLDER not in f.xpath]
        if missing:
            raise ValueError(
                f"Repeating group fields must contain an {INDEX_PLACEHOLDER} placeholder: {missing}"
            )
        multiple = [f.name for f in v if f.multiple]
        if multiple:
            raise ValueError(
                f"Repeating group fields hold one value per occurrence, "
                f"multiple=True is not allowed: {multiple}"
            )
        return v

    @model_validator(mode='after')
    def validate_key_field(self) -> 'RepeatingGroupSpec':
        if self.key_field is not None and self.key_field not in self.field_names:
            raise ValueError(
                f"key_field '{self.key_field}' is not one of the group fields {self.field_names}"
            )
        return self

    @property
    def field_names(self) -> List[str]:
        return [f.name for f in self.fields]

    @property
    def key(self) -> str:
        """Name of the field that decides whether an occurrence is kept."""
        return self.key_field or self.fields[0].name


class ExtractionSpec(BaseModel):
    """
    Mapping from output columns to XPath queries against a detail document.

    The identifier column is declared separately because it is the only
    column guaranteed to be present in every record.

    Attributes:
        id_field: Field holding the registry identifier
        fields: Per-document fields (one value or a list of values each)
        repeating_group: Optional fields emitted once per occurrence

    Example:
        >>> spec = ExtractionSpec(
        ...     id_field=FieldSpec(name='re3data_id', xpath='//r3d:re3data.orgIdentifier'),
        ...     fields=[FieldSpec(name='repository_name', xpath='//r3d:repositoryName')]
        ... )
        >>> spec.columns
        ['re3data_id', 'repository_name']
    """

    id_field: FieldSpec
    fields: List[FieldSpec] = Field(default_factory=list)
    repeating_group: Optional[RepeatingGroupSpec] = None

    model_config = ConfigDict(frozen=True)

    @field_validator('id_field')
    @classmethod
    def validate_single_identifier(cls, v: FieldSpec) -> FieldSpec:
        if v.multiple:
            raise ValueError("id_field must be single-valued (multiple=False)")
        return v

    @model_validator(mode='after')
    def validate_unique_columns(self) -> 'ExtractionSpec':
        columns = self.columns
        duplicates = sorted({c for c in columns if columns.count(c) > 1})
        if duplicates:
            raise ValueError(f"Duplicate output columns: {duplicates}")
        return self

    @property
    def columns(self) -> List[str]:
        """Declared output columns in order: identifier, fields, group fields."""
        columns = [self.id_field.name] + [f.name for f in self.fields]
        if self.repeating_group is not None:
            columns.extend(self.repeating_group.field_names)
        return columns

    @property
    def multi_value_columns(self) -> List[str]:
        return [f.name for f in self.fields if f.multiple]


class NormalizationSpec(BaseModel):
    """
    Optional steps applied after all records are collected.

    Attributes:
        flags: Derived boolean column → source column (True when the source is present)
        explode: Column split into one row per value

    Example:
        >>> NormalizationSpec(flags={'has_certificate': 'certificate'}, explode='type')
        NormalizationSpec(flags={'has_certificate': 'certificate'}, explode='type')
    """

    flags: Dict[str, str] = Field(default_factory=dict)
    explode: Optional[str] = None

    model_config = ConfigDict(frozen=True)

    @field_validator('flags')
    @classmethod
    def validate_flag_names(cls, v: Dict[str, str]) -> Dict[str, str]:
        for target, source in v.items():
            validate_column_name(target)
            validate_column_name(source)
        return v


class UseCase(BaseModel):
    """
    A complete aggregation preset: listing query, extraction and normalization.

    Example:
        >>> from re3data_explorer.config import get_use_case
        >>> use_case = get_use_case('ess_repositories')
        >>> use_case.listing.mode
        'links'
    """

    name: str
    description: str = ""
    listing: ListingRequest = Field(default_factory=ListingRequest)
    extraction: ExtractionSpec
    normalization: NormalizationSpec = Field(default_factory=NormalizationSpec)

    model_config = ConfigDict(frozen=True)

    @model_validator(mode='after')
    def validate_normalization_columns(self) -> 'UseCase':
        columns = self.extraction.columns

        if self.normalization.explode is not None and self.normalization.explode not in columns:
            raise ValueError(
                f"Explode column '{self.normalization.explode}' is not an output column: {columns}"
            )

        unknown_sources = [s for s in self.normalization.flags.values() if s not in columns]
        if unknown_sources:
            raise ValueError(
                f"Flag source columns {unknown_sources} are not output columns: {columns}"
            )

        clashing = [t for t in self.normalization.flags if t in columns]
        if clashing:
            raise ValueError(f"Flag columns {clashing} would overwrite output columns")

        return self

    @property
    def columns(self) -> List[str]:
        """Columns of the Result Table: extraction columns plus derived flags."""
        return self.extraction.columns + list(self.normalization.flags)
