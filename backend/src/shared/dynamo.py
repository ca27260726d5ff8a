"""
DynamoDB utility functions shared by the handlers.
Errors are logged and re-raised so handlers can surface them to the caller.
"""
import boto3
from botocore.exceptions import ClientError
from typing import List, Dict, Any, Optional
from boto3.dynamodb.conditions import Attr
from .config import config
from .logging import logger

CONDITIONAL_CHECK_FAILED = 'ConditionalCheckFailedException'

# Initialize resource lazily
_dynamodb = None


def get_dynamodb():
    """Get or create the DynamoDB resource."""
    global _dynamodb
    if _dynamodb is None:
        _dynamodb = boto3.resource('dynamodb', region_name=config.AWS_REGION)
    return _dynamodb


def get_table(table_name: str):
    return get_dynamodb().Table(table_name)


def batch_write_items(table_name: str, items: List[Dict[str, Any]]) -> int:
    """
    Write multiple items to DynamoDB using batch_write_item.
    Handles batching (max 25 items per batch) automatically.

    Args:
        table_name: Name of the DynamoDB table
        items: List of items to write

    Returns:
        Number of items written
    """
    try:
        table = get_table(table_name)

        with table.batch_writer() as batch:
            for item in items:
                batch.put_item(Item=item)

        logger.info(f"Successfully wrote {len(items)} items to {table_name}")
        return len(items)

    except Exception as e:
        logger.error(f"Error batch writing to {table_name}: {e}")
        raise


def scan_all(table_name: str, filter_expression: Optional[Any] = None) -> List[Dict[str, Any]]:
    """
    Scan a table, following LastEvaluatedKey until exhausted.
    In production, prefer a GSI query for hot paths.
    """
    try:
        table = get_table(table_name)
        params = {}
        if filter_expression is not None:
            params['FilterExpression'] = filter_expression

        items = []
        while True:
            response = table.scan(**params)
            items.extend(response.get('Items', []))
            last_key = response.get('LastEvaluatedKey')
            if not last_key:
                break
            params['ExclusiveStartKey'] = last_key
        return items

    except Exception as e:
        logger.error(f"Error scanning {table_name}: {e}")
        raise


def find_by(table_name: str, **conditions) -> List[Dict[str, Any]]:
    """Scan for items whose attributes equal the given values."""
    expression = None
    for name, value in conditions.items():
        clause = Attr(name).eq(value)
        expression = clause if expression is None else expression & clause
    return scan_all(table_name, expression)


def get_item(table_name: str, key: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Get a single item from DynamoDB."""
    try:
        table = get_table(table_name)
        response = table.get_item(Key=key)
        return response.get('Item')
    except Exception as e:
        logger.error(f"Error getting item from {table_name}: {e}")
        raise


def put_item(table_name: str, item: Dict[str, Any]) -> Dict[str, Any]:
    """Create or replace a single item."""
    try:
        get_table(table_name).put_item(Item=item)
        return item
    except Exception as e:
        logger.error(f"Error putting item into {table_name}: {e}")
        raise


def update_item(
    table_name: str,
    key: Dict[str, Any],
    update_expression: str,
    expression_values: Dict[str, Any],
    expression_names: Optional[Dict[str, str]] = None,
    condition_expression: Optional[str] = None
) -> Dict[str, Any]:
    """
    Update an item in DynamoDB and return its new attributes.
    A failed `condition_expression` surfaces as botocore's ClientError
    (ConditionalCheckFailedException) for the caller to handle.
    """
    try:
        table = get_table(table_name)

        params = {
            'Key': key,
            'UpdateExpression': update_expression,
            'ExpressionAttributeValues': expression_values,
            'ReturnValues': 'ALL_NEW'
        }

        if expression_names:
            params['ExpressionAttributeNames'] = expression_names
        if condition_expression:
            params['ConditionExpression'] = condition_expression

        response = table.update_item(**params)
        return response.get('Attributes', {})

    except ClientError as e:
        if e.response['Error']['Code'] != CONDITIONAL_CHECK_FAILED:
            logger.error(f"Error updating item in {table_name}: {e}")
        raise
    except Exception as e:
        logger.error(f"Error updating item in {table_name}: {e}")
        raise


def update_fields(
    table_name: str,
    key: Dict[str, Any],
    fields: Dict[str, Any],
    expected: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """
    SET each of `fields` on the item, leaving its other attributes untouched.
    Attribute names are always aliased so reserved words such as `status` are safe.

    Args:
        expected: Optional attribute values the stored item must still hold
            (e.g. {'status': 'draft'}); the write is rejected otherwise.
    """
    if not fields:
        return get_item(table_name, key) or {}

    names = {}
    values = {}
    assignments = []
    for idx, (name, value) in enumerate(fields.items()):
        names[f'#f{idx}'] = name
        values[f':v{idx}'] = value
        assignments.append(f'#f{idx} = :v{idx}')

    conditions = []
    for idx, (name, value) in enumerate((expected or {}).items()):
        names[f'#c{idx}'] = name
        values[f':c{idx}'] = value
        conditions.append(f'#c{idx} = :c{idx}')

    return update_item(
        table_name,
        key,
        'SET ' + ', '.join(assignments),
        values,
        names,
        ' AND '.join(conditions) or None
    )


def is_conditional_failure(error: Exception) -> bool:
    return isinstance(error, ClientError) and error.response['Error']['Code'] == CONDITIONAL_CHECK_FAILED
