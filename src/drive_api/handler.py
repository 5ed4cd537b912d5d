"""Lambda handler for the remote OTM document store API."""

import base64
import json
import os
import logging
from typing import Dict, Any
from urllib.parse import parse_qs
import sys

# Add parent directory to path for imports
sys.path.append(os.path.join(os.path.dirname(__file__), '..'))

from shared.response import success_response, error_response, validation_error_response, not_found_response
from shared.validators import validate_required_fields
from shared.exceptions import SicoemException, ValidationError, NotFoundError
from drive_api.service import DocumentStoreService

# Configure logging
logger = logging.getLogger()
logger.setLevel(os.environ.get('LOG_LEVEL', 'INFO'))

_service = None


def get_service() -> DocumentStoreService:
    """Document store shared across warm invocations."""
    global _service
    if _service is None:
        _service = DocumentStoreService()
    return _service


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Lambda handler for the document store.

    Handles:
    - POST action=upload - Store a document
    - GET ?action=list&equipmentCode= - List documents of an equipment
    - GET ?action=getContent&fileId= - Document content as base64
    - GET ?action=download&fileId= - Presigned download link

    Args:
        event: API Gateway proxy event
        context: Lambda context

    Returns:
        API Gateway response
    """
    try:
        http_method = event.get('httpMethod')
        logger.info(f"Request: {http_method} {event.get('path')}")

        if http_method == 'POST':
            return handle_upload(parse_body(event))
        elif http_method == 'GET':
            params = event.get('queryStringParameters') or {}
            action = params.get('action')

            if action == 'list':
                return handle_list(params)
            elif action == 'getContent':
                return handle_get_content(params)
            elif action == 'download':
                return handle_download(params)
            return validation_error_response(f"Unknown action: {action}")
        else:
            return error_response("Method not allowed", status_code=405)

    except ValidationError as e:
        return validation_error_response(e.message)
    except NotFoundError as e:
        return not_found_response(e.message)
    except SicoemException as e:
        logger.error(f"Application error: {str(e)}")
        return error_response(e.message, status_code=e.status_code)
    except Exception as e:
        logger.error(f"Unexpected error: {str(e)}", exc_info=True)
        return error_response("Internal server error", status_code=500)


def parse_body(event: Dict[str, Any]) -> Dict[str, Any]:
    """
    Parse a JSON or form-encoded request body.

    Raises:
        ValidationError: If the body cannot be parsed
    """
    body = event.get('body') or ''
    if event.get('isBase64Encoded'):
        body = base64.b64decode(body).decode('utf-8')

    headers = {k.lower(): v for k, v in (event.get('headers') or {}).items()}
    content_type = headers.get('content-type', '')

    if 'application/json' in content_type or body.lstrip().startswith('{'):
        try:
            data = json.loads(body or '{}')
        except json.JSONDecodeError:
            raise ValidationError("Invalid JSON body")
        if not isinstance(data, dict):
            raise ValidationError("Invalid JSON body")
        return data

    return {key: values[0] for key, values in parse_qs(body, keep_blank_values=True).items()}


def handle_upload(body: Dict[str, Any]) -> Dict[str, Any]:
    """Store an uploaded document."""
    action = body.get('action', 'upload')
    if action != 'upload':
        return validation_error_response(f"Unknown action: {action}")

    validate_required_fields(body, ['equipmentCode', 'fileName', 'fileData'])

    result = get_service().store_document(
        equipment_code=body['equipmentCode'],
        file_name=body['fileName'],
        file_data=body['fileData'],
        technician=body.get('technician', ''),
        date=body.get('date', '')
    )

    logger.info(f"Document uploaded successfully: {result['fileId']}")
    return success_response(data=result, status_code=201)


def handle_list(params: Dict[str, str]) -> Dict[str, Any]:
    """List documents of an equipment."""
    validate_required_fields(params, ['equipmentCode'])
    otms = get_service().list_documents(params['equipmentCode'])
    return success_response(data={'otms': otms, 'count': len(otms)})


def handle_get_content(params: Dict[str, str]) -> Dict[str, Any]:
    """Return a document as base64."""
    validate_required_fields(params, ['fileId'])
    return success_response(data=get_service().get_content(params['fileId']))


def handle_download(params: Dict[str, str]) -> Dict[str, Any]:
    """Return a presigned download link."""
    validate_required_fields(params, ['fileId'])
    return success_response(data={'url': get_service().get_download_url(params['fileId'])})
