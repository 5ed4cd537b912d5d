"""DynamoDB table wrapper shared by the OTM report and pending upload stores."""

import boto3
from typing import Any, Dict, Iterator, List, Optional
from decimal import Decimal
from botocore.exceptions import ClientError
import logging

from .config import get_aws_endpoint
from .exceptions import DatabaseError

logger = logging.getLogger(__name__)


def to_dynamodb(obj: Any) -> Any:
    """Floats become Decimal, recursively; boto3 rejects float attributes."""
    if isinstance(obj, dict):
        return {k: to_dynamodb(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [to_dynamodb(v) for v in obj]
    if isinstance(obj, float):
        return Decimal(str(obj))
    return obj


def from_dynamodb(obj: Any) -> Any:
    """Decimals become int or float, recursively."""
    if isinstance(obj, dict):
        return {k: from_dynamodb(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [from_dynamodb(v) for v in obj]
    if isinstance(obj, Decimal):
        return int(obj) if obj % 1 == 0 else float(obj)
    return obj


class DynamoDBClient:
    """One table; ClientErrors surface as DatabaseError, numbers as plain Python types."""

    def __init__(self, table_name: str, endpoint_url: Optional[str] = None):
        """
        Initialize DynamoDB client.

        Args:
            table_name: Name of the DynamoDB table
            endpoint_url: Optional endpoint override (DynamoDB Local, LocalStack)
        """
        self.table_name = table_name
        self.dynamodb = boto3.resource('dynamodb', endpoint_url=endpoint_url or get_aws_endpoint())
        self.table = self.dynamodb.Table(table_name)

    def _call(self, operation: str, **params) -> Dict[str, Any]:
        try:
            return getattr(self.table, operation)(**params)
        except ClientError as e:
            logger.error(f"DynamoDB {operation} failed on {self.table_name}: {e}")
            raise DatabaseError(f"Database operation {operation} failed: {str(e)}")

    def put_item(self, item: Dict[str, Any]) -> Dict[str, Any]:
        """Write a whole item, replacing any item with the same key."""
        item = to_dynamodb(item)
        self._call('put_item', Item=item)
        return from_dynamodb(item)

    def get_item(self, key: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        item = self._call('get_item', Key=key).get('Item')
        return from_dynamodb(item) if item else None

    def update_item(
        self,
        key: Dict[str, Any],
        update_expression: str,
        expression_values: Dict[str, Any],
        expression_names: Optional[Dict[str, str]] = None
    ) -> Dict[str, Any]:
        """
        Apply an update expression.

        Args:
            key: Primary key of the item
            update_expression: Update expression
            expression_values: Expression attribute values
            expression_names: Optional expression attribute names

        Returns:
            The item as it is after the update

        Raises:
            DatabaseError: If the operation fails
        """
        params = {
            'Key': key,
            'UpdateExpression': update_expression,
            'ExpressionAttributeValues': to_dynamodb(expression_values),
            'ReturnValues': 'ALL_NEW'
        }
        if expression_names:
            params['ExpressionAttributeNames'] = expression_names

        return from_dynamodb(self._call('update_item', **params)['Attributes'])

    def increment_counter(self, key: Dict[str, Any], attribute: str) -> int:
        """
        Atomically increment a numeric attribute and return its new value.

        The item is created on first use, so the first value returned is 1.
        """
        item = self.update_item(
            key=key,
            update_expression="ADD #counter :one",
            expression_values={':one': 1},
            expression_names={'#counter': attribute}
        )
        return int(item[attribute])

    def delete_item(self, key: Dict[str, Any]) -> None:
        self._call('delete_item', Key=key)

    def query_all(
        self,
        key_condition_expression: Any,
        index_name: Optional[str] = None,
        scan_forward: bool = True
    ) -> List[Dict[str, Any]]:
        """
        Every item matching a key condition, across all result pages.

        Args:
            key_condition_expression: boto3 Key condition
            index_name: Optional GSI to query
            scan_forward: Ascending sort key order when True

        Raises:
            DatabaseError: If the operation fails
        """
        params = {
            'KeyConditionExpression': key_condition_expression,
            'ScanIndexForward': scan_forward
        }
        if index_name:
            params['IndexName'] = index_name

        return list(self._paginate('query', params))

    def scan_all(self, filter_expression: Optional[Any] = None) -> List[Dict[str, Any]]:
        """Every item of the table, optionally filtered."""
        params = {}
        if filter_expression is not None:
            params['FilterExpression'] = filter_expression

        return list(self._paginate('scan', params))

    def _paginate(self, operation: str, params: Dict[str, Any]) -> Iterator[Dict[str, Any]]:
        while True:
            response = self._call(operation, **params)
            for item in response.get('Items', []):
                yield from_dynamodb(item)

            last_key = response.get('LastEvaluatedKey')
            if not last_key:
                return
            params['ExclusiveStartKey'] = last_key
