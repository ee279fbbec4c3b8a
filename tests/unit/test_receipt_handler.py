"""Unit tests for the receipt API handler."""

import json
import signal
import pytest
from unittest.mock import Mock, patch
import sys
import os

# Add src directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..', 'src'))

from receipts import handler
from receipts.handler import ReceiptApi
from receipts.service import ReceiptService
from shared.config import Settings
from shared.exceptions import NotFoundError, StoreUnavailableError, ValidationError


def post_event(body):
    """Build a POST /receipts/process event."""
    return {'httpMethod': 'POST', 'path': '/receipts/process', 'body': body}


def points_event(receipt_id, method='GET'):
    """Build a GET /receipts/{id}/points event."""
    return {
        'httpMethod': method,
        'path': f'/receipts/{receipt_id}/points',
        'pathParameters': {'id': receipt_id}
    }


class TestReceiptApi:
    """Test cases for ReceiptApi routing."""

    @pytest.fixture
    def api(self):
        """Create API with a mocked service."""
        return ReceiptApi(Mock(spec=ReceiptService))

    def test_process_returns_id(self, api):
        """Test successful receipt submission."""
        api.service.process_receipt.return_value = 'receipt-1'

        response = api.handle(post_event('{"retailer": "Target"}'))

        assert response['statusCode'] == 200
        assert response['headers']['Content-Type'] == 'application/json'
        assert json.loads(response['body']) == {'id': 'receipt-1'}
        api.service.process_receipt.assert_called_once_with({'retailer': 'Target'})

    def test_process_invalid_json(self, api):
        """Test that a non-JSON body is a bad request."""
        response = api.handle(post_event('{oops'))

        assert response['statusCode'] == 400
        assert json.loads(response['body'])['error']['code'] == 'VALIDATION_ERROR'
        api.service.process_receipt.assert_not_called()

    def test_process_invalid_shape(self, api):
        """Test that a receipt validation failure is a bad request."""
        api.service.process_receipt.side_effect = ValidationError(
            "Invalid receipt", details=[{'field': 'total', 'message': 'Field required'}]
        )

        response = api.handle(post_event('{}'))
        body = json.loads(response['body'])

        assert response['statusCode'] == 400
        assert body['error']['details'] == [{'field': 'total', 'message': 'Field required'}]

    def test_process_store_failure(self, api):
        """Test that a failed write is a server error."""
        api.service.process_receipt.side_effect = StoreUnavailableError("Failed to put item")

        response = api.handle(post_event('{}'))

        assert response['statusCode'] == 500

    def test_points_success(self, api):
        """Test successful points lookup."""
        api.service.get_points.return_value = 28

        response = api.handle(points_event('receipt-1'))

        assert response['statusCode'] == 200
        assert json.loads(response['body']) == {'points': 28}
        api.service.get_points.assert_called_once_with('receipt-1')

    def test_points_without_path_parameters(self, api):
        """Test that the id is taken from the path when not provided separately."""
        api.service.get_points.return_value = 5

        response = api.handle({'httpMethod': 'GET', 'path': '/receipts/abc/points'})

        assert response['statusCode'] == 200
        api.service.get_points.assert_called_once_with('abc')

    def test_points_not_found(self, api):
        """Test lookup of an unknown receipt."""
        api.service.get_points.side_effect = NotFoundError()

        response = api.handle(points_event('missing'))

        assert response['statusCode'] == 404
        assert json.loads(response['body'])['error']['message'] == 'Receipt not found'

    def test_points_store_failure(self, api):
        """Test that a failed read is a server error."""
        api.service.get_points.side_effect = StoreUnavailableError("Failed to get item")

        response = api.handle(points_event('receipt-1'))

        assert response['statusCode'] == 500

    def test_unknown_route(self, api):
        """Test that unknown paths are not found."""
        response = api.handle({'httpMethod': 'GET', 'path': '/expenses'})

        assert response['statusCode'] == 404

    @pytest.mark.parametrize('event', [
        {'httpMethod': 'GET', 'path': '/receipts/process'},
        {'httpMethod': 'POST', 'path': '/receipts/abc/points'},
    ])
    def test_wrong_method(self, api, event):
        """Test that known paths reject other methods."""
        response = api.handle(event)

        assert response['statusCode'] == 405

    def test_unexpected_error(self, api):
        """Test that unexpected exceptions become a generic server error."""
        api.service.get_points.side_effect = RuntimeError("boom")

        response = api.handle(points_event('receipt-1'))

        assert response['statusCode'] == 500
        assert json.loads(response['body'])['error']['message'] == 'Internal server error'


class TestLambdaHandler:
    """Test cases for the Lambda entry point."""

    @pytest.fixture(autouse=True)
    def reset_api(self):
        """Drop any API built by a previous test and capture signal registration."""
        handler._api = None
        with patch('receipts.handler.signal.signal') as register, \
                patch('receipts.handler.signal.getsignal', return_value=signal.SIG_DFL):
            yield register
        handler._api = None

    @staticmethod
    def registered_hook(register):
        """Return the SIGTERM handler installed by the entry point."""
        register.assert_called_once()
        signum, hook = register.call_args[0]
        assert signum == signal.SIGTERM
        return hook

    def test_api_is_built_once(self):
        """Test that the service is constructed once per environment."""
        service = Mock(spec=ReceiptService)
        service.get_points.return_value = 7

        with patch('receipts.handler.ReceiptService.from_settings', return_value=service) as from_settings:
            handler.lambda_handler(points_event('a'), None)
            handler.lambda_handler(points_event('b'), None)

        from_settings.assert_called_once()
        assert isinstance(from_settings.call_args[0][0], Settings)
        assert service.get_points.call_count == 2

    def test_service_is_opened_at_start(self):
        """Test that the store is checked when the API is built."""
        service = Mock(spec=ReceiptService)
        service.get_points.return_value = 7

        with patch('receipts.handler.ReceiptService.from_settings', return_value=service):
            handler.lambda_handler(points_event('a'), None)

        service.open.assert_called_once()
        service.close.assert_not_called()

    def test_sigterm_hook_closes_service(self, reset_api):
        """Test that the registered SIGTERM handler releases the store and exits."""
        service = Mock(spec=ReceiptService)
        service.get_points.return_value = 7

        with patch('receipts.handler.ReceiptService.from_settings', return_value=service):
            handler.lambda_handler(points_event('a'), None)

        hook = self.registered_hook(reset_api)

        with pytest.raises(SystemExit):
            hook(signal.SIGTERM, None)

        service.close.assert_called_once()
        assert handler._api is None

    def test_sigterm_hook_chains_previous_handler(self, reset_api):
        """Test that an existing SIGTERM handler still runs."""
        previous = Mock()
        service = Mock(spec=ReceiptService)

        with patch('receipts.handler.signal.getsignal', return_value=previous), \
                patch('receipts.handler.ReceiptService.from_settings', return_value=service):
            handler.get_api()

        self.registered_hook(reset_api)(signal.SIGTERM, None)

        service.close.assert_called_once()
        previous.assert_called_once_with(signal.SIGTERM, None)

    def test_unreachable_store_at_start(self, reset_api):
        """Test that a failed start check is a server error and releases the client."""
        service = Mock(spec=ReceiptService)
        service.open.side_effect = StoreUnavailableError("Could not reach table")

        with patch('receipts.handler.ReceiptService.from_settings', return_value=service):
            response = handler.lambda_handler(points_event('a'), None)

        assert response['statusCode'] == 500
        service.close.assert_called_once()
        assert handler._api is None
        reset_api.assert_not_called()

    def test_shutdown_closes_service(self):
        """Test that shutdown releases the service."""
        service = Mock(spec=ReceiptService)

        with patch('receipts.handler.ReceiptService.from_settings', return_value=service):
            handler.get_api()

        handler.shutdown()

        service.close.assert_called_once()
        assert handler._api is None


class TestSettings:
    """Test cases for Settings."""

    def test_defaults(self):
        """Test settings with an empty environment."""
        settings = Settings.from_env({})

        assert settings.receipts_table == 'receipt-processor-receipts'
        assert settings.region_name == 'us-east-1'
        assert settings.endpoint_url is None
        assert settings.log_level == 'INFO'

    def test_localstack(self):
        """Test LocalStack endpoint override."""
        settings = Settings.from_env({
            'RECEIPTS_TABLE': 'receipts',
            'AWS_REGION': 'eu-west-1',
            'USE_LOCALSTACK': 'true',
            'LOCALSTACK_ENDPOINT': 'http://localstack:4566',
            'LOG_LEVEL': 'debug'
        })

        assert settings.receipts_table == 'receipts'
        assert settings.region_name == 'eu-west-1'
        assert settings.endpoint_url == 'http://localstack:4566'
        assert settings.log_level == 'DEBUG'
