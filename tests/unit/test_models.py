"""
Unit tests for Pydantic request and preset models.

Tests models that integrate validators and describe the listing query,
field extraction and normalization of a use case.
"""

import pytest
from pydantic import ValidationError


def _id_field():
    from re3data_explorer.models import FieldSpec
    return FieldSpec(name='re3data_id', xpath='//r3d:re3data.orgIdentifier')


def _api_group(**kwargs):
    from re3data_explorer.models import FieldSpec, RepeatingGroupSpec
    return RepeatingGroupSpec(
        count_xpath='//r3d:api',
        fields=[
            FieldSpec(name='api_endpoint', xpath='(//r3d:api)[{index}]'),
            FieldSpec(name='api_type', xpath='(//r3d:api)[{index}]/@apiType'),
        ],
        **kwargs
    )


class TestListingRequest:
    """Test suite for ListingRequest model."""

    def test_defaults(self):
        from re3data_explorer.models import ListingRequest

        request = ListingRequest()

        assert request.facets == {}
        assert request.mode == 'links'
        assert request.selector_xpath == '//@href'
        assert request.query_params() == []

    def test_query_params_repeat_keys_per_value(self):
        from re3data_explorer.models import ListingRequest

        request = ListingRequest(facets={
            'subjects[]': '34 Geosciences (including Geography)',
            'pidSystems[]': ['DOI', 'hdl'],
        })

        assert request.query_params() == [
            ('subjects[]', '34 Geosciences (including Geography)'),
            ('pidSystems[]', 'DOI'),
            ('pidSystems[]', 'hdl'),
        ]

    def test_identifier_mode_uses_identifier_xpath(self):
        from re3data_explorer.models import ListingRequest

        request = ListingRequest(mode='identifiers', identifier_xpath='//repository/id')

        assert request.selector_xpath == '//repository/id'

    def test_rejects_unknown_mode(self):
        from re3data_explorer.models import ListingRequest

        with pytest.raises(ValidationError) as exc_info:
            ListingRequest(mode='pages')

        assert any(e['loc'] == ('mode',) for e in exc_info.value.errors())

    def test_rejects_template_without_placeholder(self):
        from re3data_explorer.models import ListingRequest

        with pytest.raises(ValidationError) as exc_info:
            ListingRequest(detail_url_template='https://www.re3data.org/api/v1/repository/')

        assert any(e['loc'] == ('detail_url_template',) for e in exc_info.value.errors())

    def test_rejects_non_mapping_facets(self):
        from re3data_explorer.models import ListingRequest

        with pytest.raises(ValidationError):
            ListingRequest(facets=['subjects[]'])

    def test_is_frozen(self):
        from re3data_explorer.models import ListingRequest

        request = ListingRequest()

        with pytest.raises(ValidationError):
            request.mode = 'identifiers'


class TestFieldSpec:
    """Test suite for FieldSpec model."""

    def test_defaults_to_single_value_with_deduplication(self):
        from re3data_explorer.models import FieldSpec

        spec = FieldSpec(name='repository_name', xpath='//r3d:repositoryName')

        assert spec.multiple is False
        assert spec.deduplicate is True

    def test_rejects_invalid_xpath(self):
        from re3data_explorer.models import FieldSpec

        with pytest.raises(ValidationError) as exc_info:
            FieldSpec(name='type', xpath='//r3d:type[')

        assert any(e['loc'] == ('xpath',) for e in exc_info.value.errors())

    def test_rejects_invalid_column_name(self):
        from re3data_explorer.models import FieldSpec

        with pytest.raises(ValidationError):
            FieldSpec(name='repository name', xpath='//r3d:repositoryName')


class TestRepeatingGroupSpec:
    """Test suite for RepeatingGroupSpec model."""

    def test_key_defaults_to_first_field(self):
        group = _api_group()

        assert group.key == 'api_endpoint'
        assert group.field_names == ['api_endpoint', 'api_type']

    def test_explicit_key_field(self):
        group = _api_group(key_field='api_type')

        assert group.key == 'api_type'

    def test_rejects_unknown_key_field(self):
        with pytest.raises(ValidationError, match="key_field"):
            _api_group(key_field='endpoint')

    def test_rejects_field_without_index_placeholder(self):
        from re3data_explorer.models import FieldSpec, RepeatingGroupSpec

        with pytest.raises(ValidationError, match="placeholder"):
            RepeatingGroupSpec(
                count_xpath='//r3d:api',
                fields=[FieldSpec(name='api_endpoint', xpath='//r3d:api')]
            )

    def test_rejects_empty_fields(self):
        from re3data_explorer.models import RepeatingGroupSpec

        with pytest.raises(ValidationError):
            RepeatingGroupSpec(count_xpath='//r3d:api', fields=[])


class TestExtractionSpec:
    """Test suite for ExtractionSpec model."""

    def test_columns_order(self):
        from re3data_explorer.models import ExtractionSpec, FieldSpec

        spec = ExtractionSpec(
            id_field=_id_field(),
            fields=[
                FieldSpec(name='repository_name', xpath='//r3d:repositoryName'),
                FieldSpec(name='type', xpath='//r3d:type', multiple=True),
            ],
            repeating_group=_api_group()
        )

        assert spec.columns == [
            're3data_id', 'repository_name', 'type', 'api_endpoint', 'api_type'
        ]
        assert spec.multi_value_columns == ['type']

    def test_rejects_duplicate_columns(self):
        from re3data_explorer.models import ExtractionSpec, FieldSpec

        with pytest.raises(ValidationError, match="Duplicate output columns"):
            ExtractionSpec(
                id_field=_id_field(),
                fields=[FieldSpec(name='re3data_id', xpath='//r3d:repositoryName')]
            )

    def test_rejects_multi_valued_identifier(self):
        from re3data_explorer.models import ExtractionSpec, FieldSpec

        with pytest.raises(ValidationError, match="id_field"):
            ExtractionSpec(
                id_field=FieldSpec(
                    name='re3data_id', xpath='//r3d:re3data.orgIdentifier', multiple=True
                )
            )


class TestUseCase:
    """Test suite for UseCase model."""

    def _extraction(self):
        from re3data_explorer.models import ExtractionSpec, FieldSpec
        return ExtractionSpec(
            id_field=_id_field(),
            fields=[
                FieldSpec(name='type', xpath='//r3d:type', multiple=True),
                FieldSpec(name='certificate', xpath='//r3d:certificate', multiple=True),
            ]
        )

    def test_columns_include_flags(self):
        from re3data_explorer.models import NormalizationSpec, UseCase

        use_case = UseCase(
            name='custom',
            extraction=self._extraction(),
            normalization=NormalizationSpec(
                flags={'has_certificate': 'certificate'}, explode='type'
            )
        )

        assert use_case.columns == ['re3data_id', 'type', 'certificate', 'has_certificate']
        assert use_case.listing.mode == 'links'

    def test_rejects_unknown_explode_column(self):
        from re3data_explorer.models import NormalizationSpec, UseCase

        with pytest.raises(ValidationError, match="Explode column"):
            UseCase(
                name='custom',
                extraction=self._extraction(),
                normalization=NormalizationSpec(explode='subject')
            )

    def test_rejects_unknown_flag_source(self):
        from re3data_explorer.models import NormalizationSpec, UseCase

        with pytest.raises(ValidationError, match="Flag source"):
            UseCase(
                name='custom',
                extraction=self._extraction(),
                normalization=NormalizationSpec(flags={'has_api': 'api_type'})
            )

    def test_rejects_flag_overwriting_column(self):
        from re3data_explorer.models import NormalizationSpec, UseCase

        with pytest.raises(ValidationError, match="overwrite"):
            UseCase(
                name='custom',
                extraction=self._extraction(),
                normalization=NormalizationSpec(flags={'type': 'certificate'})
            )

    def test_model_validate_from_preset_dict(self):
        """Presets from YAML are plain dicts validated into nested models."""
        from re3data_explorer.models import UseCase

        use_case = UseCase.model_validate({
            'name': 'from_yaml',
            'listing': {'mode': 'identifiers', 'facets': {'subjects[]': '205 Medicine'}},
            'extraction': {
                'id_field': {'name': 're3data_id', 'xpath': '//r3d:re3data.orgIdentifier'},
                'fields': [{'name': 'type', 'xpath': '//r3d:type', 'multiple': True}],
            },
            'normalization': {'explode': 'type'},
        })

        assert use_case.listing.facets == {'subjects[]': ['205 Medicine']}
        assert use_case.extraction.fields[0].multiple is True
