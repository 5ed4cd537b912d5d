"""DynamoDB table and S3 bucket definitions for the OTM stores."""

import logging
from typing import Any, Dict

from botocore.exceptions import ClientError

from .storage import EQUIPMENT_CODE_INDEX, DATE_INDEX

logger = logging.getLogger(__name__)


def reports_table_definition(table_name: str) -> Dict[str, Any]:
    """OTM reports keyed by numeric id, indexed by equipment code and by day."""
    return {
        'TableName': table_name,
        'KeySchema': [
            {'AttributeName': 'report_id', 'KeyType': 'HASH'}
        ],
        'AttributeDefinitions': [
            {'AttributeName': 'report_id', 'AttributeType': 'N'},
            {'AttributeName': 'equipment_code', 'AttributeType': 'S'},
            {'AttributeName': 'captured_at', 'AttributeType': 'S'},
            {'AttributeName': 'date_formatted', 'AttributeType': 'S'}
        ],
        'BillingMode': 'PAY_PER_REQUEST',
        'GlobalSecondaryIndexes': [
            {
                'IndexName': EQUIPMENT_CODE_INDEX,
                'KeySchema': [
                    {'AttributeName': 'equipment_code', 'KeyType': 'HASH'},
                    {'AttributeName': 'captured_at', 'KeyType': 'RANGE'}
                ],
                'Projection': {'ProjectionType': 'ALL'}
            },
            {
                'IndexName': DATE_INDEX,
                'KeySchema': [
                    {'AttributeName': 'date_formatted', 'KeyType': 'HASH'},
                    {'AttributeName': 'captured_at', 'KeyType': 'RANGE'}
                ],
                'Projection': {'ProjectionType': 'ALL'}
            }
        ]
    }


def pending_table_definition(table_name: str) -> Dict[str, Any]:
    """Pending upload tasks keyed by task id."""
    return {
        'TableName': table_name,
        'KeySchema': [
            {'AttributeName': 'task_id', 'KeyType': 'HASH'}
        ],
        'AttributeDefinitions': [
            {'AttributeName': 'task_id', 'AttributeType': 'S'}
        ],
        'BillingMode': 'PAY_PER_REQUEST'
    }


def create_table(dynamodb, definition: Dict[str, Any]):
    """Create a table unless it already exists and wait until it is active."""
    try:
        table = dynamodb.create_table(**definition)
        table.wait_until_exists()
        logger.info(f"Created table {definition['TableName']}")
        return table
    except ClientError as e:
        if e.response.get('Error', {}).get('Code') != 'ResourceInUseException':
            raise
        logger.info(f"Table {definition['TableName']} already exists")
        return dynamodb.Table(definition['TableName'])


def create_bucket(s3, bucket_name: str, region: str = 'us-east-1') -> None:
    """Create a bucket unless it already exists."""
    kwargs = {'Bucket': bucket_name}
    if region != 'us-east-1':
        kwargs['CreateBucketConfiguration'] = {'LocationConstraint': region}

    try:
        s3.create_bucket(**kwargs)
        logger.info(f"Created bucket {bucket_name}")
    except ClientError as e:
        if e.response.get('Error', {}).get('Code') not in ('BucketAlreadyOwnedByYou', 'BucketAlreadyExists'):
            raise
        logger.info(f"Bucket {bucket_name} already exists")
