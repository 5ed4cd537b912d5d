"""Integration tests for the document store Lambda."""

import base64
import json
from urllib.parse import urlencode

import pytest
import sys
import os

# Add src directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..', 'src'))

from drive_api import handler

CODE = '123456789012'
BUCKET = 'test-otm-documents'


@pytest.fixture
def s3_client(aws_resources):
    handler._service = None
    yield aws_resources['s3']
    handler._service = None


@pytest.fixture
def upload_body(sample_pdf):
    return {
        'action': 'upload',
        'equipmentCode': CODE,
        'fileName': 'OTM_123456789012_19-10-2026.pdf',
        'fileData': base64.b64encode(sample_pdf).decode('utf-8'),
        'technician': 'José Pérez',
        'date': '19/10/2026'
    }


def post(body, content_type='application/x-www-form-urlencoded'):
    encoded = json.dumps(body) if content_type == 'application/json' else urlencode(body)
    return handler.lambda_handler({
        'httpMethod': 'POST',
        'path': '/exec',
        'headers': {'Content-Type': content_type},
        'body': encoded
    }, None)


def get(**params):
    return handler.lambda_handler({
        'httpMethod': 'GET',
        'path': '/exec',
        'queryStringParameters': params
    }, None)


def body_of(response):
    return json.loads(response['body'])


class TestDocumentStoreAPI:
    """Document store requests against a mocked bucket."""

    def test_upload_form_encoded(self, s3_client, upload_body, sample_pdf):
        response = post(upload_body)

        assert response['statusCode'] == 201
        body = body_of(response)
        assert body['success'] is True
        assert body['fileId'].startswith(f"otm/{CODE}/")
        assert body['fileId'].endswith("/OTM_123456789012_19-10-2026.pdf")
        assert body['fileName'] == 'OTM_123456789012_19-10-2026.pdf'

        stored = s3_client.get_object(Bucket=BUCKET, Key=body['fileId'])
        assert stored['Body'].read() == sample_pdf
        assert stored['ContentType'] == 'application/pdf'

    def test_upload_same_name_keeps_both(self, s3_client, upload_body):
        """Two uploads with the same file name are stored as separate documents."""
        first = body_of(post(upload_body))['fileId']
        upload_body['fileData'] = base64.b64encode(b'%PDF-second').decode('utf-8')
        second = body_of(post(upload_body))['fileId']

        assert first != second
        assert body_of(get(action='list', equipmentCode=CODE))['count'] == 2
        assert base64.b64decode(body_of(get(action='getContent', fileId=second))['content']) == b'%PDF-second'
        assert base64.b64decode(body_of(get(action='getContent', fileId=first))['content']) != b'%PDF-second'

    def test_upload_json(self, s3_client, upload_body):
        response = post(upload_body, content_type='application/json')

        assert response['statusCode'] == 201

    def test_upload_base64_encoded_event(self, s3_client, upload_body):
        """API Gateway may deliver the form body base64-encoded."""
        response = handler.lambda_handler({
            'httpMethod': 'POST',
            'headers': {'content-type': 'application/x-www-form-urlencoded'},
            'isBase64Encoded': True,
            'body': base64.b64encode(urlencode(upload_body).encode('utf-8')).decode('ascii')
        }, None)

        assert response['statusCode'] == 201

    def test_upload_missing_fields(self, s3_client, upload_body):
        del upload_body['fileData']

        response = post(upload_body)

        assert response['statusCode'] == 400
        assert 'fileData' in body_of(response)['error']

    def test_upload_invalid_base64(self, s3_client, upload_body):
        upload_body['fileData'] = 'not base64!!'

        response = post(upload_body)

        assert response['statusCode'] == 400
        assert body_of(response)['success'] is False

    def test_upload_rejects_path_in_file_name(self, s3_client, upload_body):
        upload_body['fileName'] = '../escape.pdf'

        assert post(upload_body)['statusCode'] == 400

    def test_list_documents(self, s3_client, upload_body):
        file_id = body_of(post(upload_body))['fileId']
        upload_body['equipmentCode'] = '999999999999'
        post(upload_body)

        response = get(action='list', equipmentCode=CODE)

        assert response['statusCode'] == 200
        body = body_of(response)
        assert body['count'] == 1
        assert body['otms'] == [{
            'fileId': file_id,
            'fileName': 'OTM_123456789012_19-10-2026.pdf',
            'date': '19/10/2026'
        }]

    def test_list_unknown_equipment(self, s3_client):
        body = body_of(get(action='list', equipmentCode=CODE))

        assert body['otms'] == []

    def test_get_content(self, s3_client, upload_body, sample_pdf):
        file_id = body_of(post(upload_body))['fileId']

        body = body_of(get(action='getContent', fileId=file_id))

        assert base64.b64decode(body['content']) == sample_pdf
        assert body['mimeType'] == 'application/pdf'
        assert body['fileName'] == 'OTM_123456789012_19-10-2026.pdf'

    def test_get_content_missing(self, s3_client):
        response = get(action='getContent', fileId=f"otm/{CODE}/missing.pdf")

        assert response['statusCode'] == 404

    def test_get_content_outside_prefix(self, s3_client):
        assert get(action='getContent', fileId='secrets/key.pem')['statusCode'] == 400

    def test_download(self, s3_client, upload_body):
        file_id = body_of(post(upload_body))['fileId']

        body = body_of(get(action='download', fileId=file_id))

        assert file_id in body['url']

    def test_download_missing(self, s3_client):
        assert get(action='download', fileId=f"otm/{CODE}/missing.pdf")['statusCode'] == 404

    def test_unknown_action(self, s3_client):
        response = get(action='delete', fileId='x')

        assert response['statusCode'] == 400
        assert 'Unknown action' in body_of(response)['error']

    def test_method_not_allowed(self, s3_client):
        response = handler.lambda_handler({'httpMethod': 'DELETE'}, None)

        assert response['statusCode'] == 405


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
