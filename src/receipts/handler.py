"""Lambda handler for receipt operations."""

import re
import sys
import signal
import logging
from typing import Dict, Any, Optional

from shared.config import Settings
from shared.response import json_response, error_response, validation_error_response, not_found_response
from shared.validators import parse_json_body
from shared.exceptions import ReceiptProcessorException, ValidationError, NotFoundError
from receipts.service import ReceiptService

# Configure logging
logger = logging.getLogger()
logger.setLevel(Settings.from_env().log_level)

PROCESS_PATH = '/receipts/process'
POINTS_PATH = re.compile(r'^/receipts/([^/]+)/points/?$')


class ReceiptApi:
    """API Gateway routing for the receipt endpoints."""

    def __init__(self, service: ReceiptService):
        self.service = service

    def handle(self, event: Dict[str, Any], context: Any = None) -> Dict[str, Any]:
        """
        Handle an API Gateway proxy event.

        Handles:
        - POST /receipts/process - Score and store a receipt
        - GET /receipts/{id}/points - Get points for a receipt

        Args:
            event: Lambda event
            context: Lambda context

        Returns:
            API Gateway response
        """
        http_method = event.get('httpMethod')
        path = event.get('path') or ''

        try:
            logger.info(f"Request: {http_method} {path}")

            if path.rstrip('/') == PROCESS_PATH:
                if http_method != 'POST':
                    return error_response("Method not allowed", status_code=405)
                return self.handle_process(event)

            match = POINTS_PATH.match(path)
            if match:
                if http_method != 'GET':
                    return error_response("Method not allowed", status_code=405)
                return self.handle_points(event, match.group(1))

            return not_found_response("Route not found")

        except ReceiptProcessorException as e:
            logger.error(f"Application error: {str(e)}")
            return error_response(e.message, status_code=e.status_code)
        except Exception as e:
            logger.error(f"Unexpected error: {str(e)}", exc_info=True)
            return error_response("Internal server error", status_code=500)

    def handle_process(self, event: Dict[str, Any]) -> Dict[str, Any]:
        """
        Handle receipt submission.

        Args:
            event: Lambda event

        Returns:
            API Gateway response with the new receipt ID
        """
        try:
            payload = parse_json_body(event)
            receipt_id = self.service.process_receipt(payload)
        except ValidationError as e:
            logger.info(f"Rejected receipt: {e.message}")
            return validation_error_response(e.message, details=e.details)

        return json_response({'id': receipt_id})

    def handle_points(self, event: Dict[str, Any], path_id: str) -> Dict[str, Any]:
        """
        Handle points lookup.

        Args:
            event: Lambda event
            path_id: Receipt ID matched from the path

        Returns:
            API Gateway response with the receipt points
        """
        path_params = event.get('pathParameters') or {}
        receipt_id = path_params.get('id') or path_id

        try:
            points = self.service.get_points(receipt_id)
        except NotFoundError as e:
            return not_found_response(e.message)

        return json_response({'points': points})


_api: Optional[ReceiptApi] = None


def get_api() -> ReceiptApi:
    """Build and open the API once per execution environment."""
    global _api
    if _api is None:
        service = ReceiptService.from_settings(Settings.from_env())
        try:
            service.open()
        except ReceiptProcessorException:
            service.close()
            raise
        _api = ReceiptApi(service)
        register_shutdown_hook()
    return _api


def shutdown() -> None:
    """Release the API's store connection, if one was built."""
    global _api
    if _api is not None:
        _api.service.close()
        _api = None
        logger.info("Released receipts table connection")


def register_shutdown_hook() -> None:
    """
    Release the store connection when Lambda sends SIGTERM at environment shutdown.

    Any handler installed before is chained; otherwise the process exits.
    """
    previous = signal.getsignal(signal.SIGTERM)

    def on_sigterm(signum, frame):
        shutdown()
        if callable(previous):
            previous(signum, frame)
        elif previous != signal.SIG_IGN:
            sys.exit(0)

    signal.signal(signal.SIGTERM, on_sigterm)


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """Lambda entry point for receipt operations."""
    try:
        api = get_api()
    except ReceiptProcessorException as e:
        logger.error(f"Receipt service unavailable: {str(e)}")
        return error_response(e.message, status_code=e.status_code)

    return api.handle(event, context)
