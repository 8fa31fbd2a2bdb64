"""
Unit tests for DiscoveryService.

Uses a mocked RegistryClient serving in-memory listing documents.
"""

import pytest

from registry_documents import (
    LISTING_URL,
    build_listing_xml,
    detail_url,
    mock_client,
)


class TestDiscoveryService:
    """Test suite for DiscoveryService."""

    def test_discover_links_mode(self, app_config):
        from re3data_explorer.models import ListingRequest
        from re3data_explorer.services import DiscoveryService

        client = mock_client({LISTING_URL: build_listing_xml(['X1', 'X2'])})
        service = DiscoveryService(client=client, config=app_config)

        urls = service.discover(ListingRequest(mode='links'))

        assert urls == [detail_url('X1'), detail_url('X2')]

    def test_discover_identifiers_mode(self, app_config):
        from re3data_explorer.models import ListingRequest
        from re3data_explorer.services import DiscoveryService

        client = mock_client({LISTING_URL: build_listing_xml(['X1', 'X2'], with_links=False)})
        service = DiscoveryService(client=client, config=app_config)

        urls = service.discover(ListingRequest(mode='identifiers'))

        assert urls == [detail_url('X1'), detail_url('X2')]

    def test_sends_single_request_with_facet_params(self, app_config):
        from re3data_explorer.models import ListingRequest
        from re3data_explorer.services import DiscoveryService

        client = mock_client({LISTING_URL: build_listing_xml(['X1'])})
        service = DiscoveryService(client=client, config=app_config)
        request = ListingRequest(facets={
            'subjects[]': '34 Geosciences (including Geography)',
            'dataUploads[]': 'open',
        })

        service.discover(request)

        client.get_document.assert_called_once_with(
            LISTING_URL,
            params=[
                ('subjects[]', '34 Geosciences (including Geography)'),
                ('dataUploads[]', 'open'),
            ]
        )

    def test_no_facets_sends_no_params(self, app_config):
        from re3data_explorer.models import ListingRequest
        from re3data_explorer.services import DiscoveryService

        client = mock_client({LISTING_URL: build_listing_xml(['X1'])})
        service = DiscoveryService(client=client, config=app_config)

        service.discover(ListingRequest())

        client.get_document.assert_called_once_with(LISTING_URL, params=None)

    def test_request_overrides_listing_url_and_template(self, app_config):
        from re3data_explorer.models import ListingRequest
        from re3data_explorer.services import DiscoveryService

        other_listing = 'https://mirror.test/repositories'
        client = mock_client({other_listing: build_listing_xml(['X1'], with_links=False)})
        service = DiscoveryService(client=client, config=app_config)
        request = ListingRequest(
            mode='identifiers',
            listing_url=other_listing,
            detail_url_template='https://mirror.test/repository/{identifier}'
        )

        urls = service.discover(request)

        assert urls == ['https://mirror.test/repository/X1']

    def test_empty_listing_is_not_an_error(self, app_config, caplog):
        from re3data_explorer.models import ListingRequest
        from re3data_explorer.services import DiscoveryService

        client = mock_client({LISTING_URL: build_listing_xml([])})
        service = DiscoveryService(client=client, config=app_config)

        with caplog.at_level('WARNING'):
            urls = service.discover(ListingRequest())

        assert urls == []
        assert 'returned no repositories' in caplog.text

    def test_transport_failure_raises_discovery_error(self, app_config):
        from re3data_explorer.models import ListingRequest
        from re3data_explorer.services import DiscoveryError, DiscoveryService, RegistryAPIError

        client = mock_client({})
        service = DiscoveryService(client=client, config=app_config)

        with pytest.raises(DiscoveryError, match="RegistryAPIError") as exc_info:
            service.discover(ListingRequest())

        assert isinstance(exc_info.value.__cause__, RegistryAPIError)

    def test_malformed_listing_raises_discovery_error(self, app_config):
        from re3data_explorer.models import ListingRequest
        from re3data_explorer.parsers import DocumentParseError
        from re3data_explorer.services import DiscoveryError, DiscoveryService

        client = mock_client({LISTING_URL: b'<list><repository>'})
        service = DiscoveryService(client=client, config=app_config)

        with pytest.raises(DiscoveryError) as exc_info:
            service.discover(ListingRequest())

        assert isinstance(exc_info.value.__cause__, DocumentParseError)

    def test_template_with_unknown_placeholder_raises_discovery_error(self, app_config):
        from re3data_explorer.models import ListingRequest
        from re3data_explorer.services import DiscoveryError, DiscoveryService

        client = mock_client({LISTING_URL: build_listing_xml(['X1', 'X2'], with_links=False)})
        service = DiscoveryService(client=client, config=app_config)
        request = ListingRequest(
            mode='identifiers',
            detail_url_template='https://registry.test/{version}/repository/{identifier}'
        )

        with pytest.raises(DiscoveryError, match="unknown placeholder") as exc_info:
            service.discover(request)

        assert isinstance(exc_info.value.__cause__, ValueError)

    def test_unvalidated_template_without_placeholder_raises_discovery_error(self, app_config):
        """Identifiers are never collapsed onto a single detail URL."""
        from re3data_explorer.models import ListingRequest
        from re3data_explorer.services import DiscoveryError, DiscoveryService

        client = mock_client({LISTING_URL: build_listing_xml(['X1', 'X2', 'X3'], with_links=False)})
        config = app_config.model_copy(
            update={'registry_detail_url_template': 'https://registry.test/api/v1/repository/'}
        )
        service = DiscoveryService(client=client, config=config)

        with pytest.raises(DiscoveryError, match="identifier"):
            service.discover(ListingRequest(mode='identifiers'))
