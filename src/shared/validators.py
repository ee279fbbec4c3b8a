"""Validation utilities for the receipt processor application."""

import base64
import binascii
import json
from typing import Any, Dict, List, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from .exceptions import ValidationError

ModelT = TypeVar('ModelT', bound=BaseModel)


def parse_json_body(event: Dict[str, Any]) -> Any:
    """
    Parse the JSON body of an API Gateway proxy event.

    Args:
        event: Lambda event

    Returns:
        Decoded JSON value

    Raises:
        ValidationError: If the body is missing or is not valid JSON
    """
    body = event.get('body')

    if body is None or body == '':
        raise ValidationError("Request body is required")

    if event.get('isBase64Encoded'):
        try:
            body = base64.b64decode(body, validate=True).decode('utf-8')
        except (binascii.Error, UnicodeDecodeError):
            raise ValidationError("Invalid JSON")

    try:
        return json.loads(body)
    except (json.JSONDecodeError, TypeError):
        raise ValidationError("Invalid JSON")


def validate_model(model: Type[ModelT], data: Any) -> ModelT:
    """
    Validate data against a pydantic model.

    Args:
        model: Model class to validate against
        data: Decoded JSON data

    Returns:
        Model instance

    Raises:
        ValidationError: If data does not match the model
    """
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(
            f"Invalid {model.__name__.lower()}",
            details=format_errors(e)
        )


def format_errors(error: PydanticValidationError) -> List[Dict[str, str]]:
    """Flatten pydantic errors into JSON-safe field/message pairs."""
    return [
        {
            'field': '.'.join(str(part) for part in err['loc']) or '__root__',
            'message': err['msg']
        }
        for err in error.errors()
    ]
