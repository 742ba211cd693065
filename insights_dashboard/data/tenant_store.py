"""
DynamoDB-backed tenant metadata store.

Tenants live in one table keyed by ``tenant_id``; sites live in a second
table keyed by ``tenant_id`` (hash) and ``site_id`` (range). This layer
only ever reads from them.
"""

from decimal import Decimal
from typing import Any, Dict, List, Optional
import logging

import boto3
from boto3.dynamodb.conditions import Key
from botocore.config import Config
from botocore.exceptions import ClientError

from ..core.config import AppConfig

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def from_dynamodb(value: Any) -> Any:
    """Recursively convert DynamoDB Decimals into floats."""
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, dict):
        return {k: from_dynamodb(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [from_dynamodb(v) for v in value]
    if isinstance(value, set):
        return [from_dynamodb(v) for v in sorted(value, key=str)]
    return value


class TenantMetadataStore:
    """
    Read access to tenant and site documents.
    """

    def __init__(self, config: Optional[AppConfig] = None, dynamodb=None):
        """Initialize DynamoDB resource."""
        self.config = config or AppConfig.load()

        if dynamodb is None:
            # Configure timeouts to prevent hanging on network issues
            boto_config = Config(
                connect_timeout=5,
                read_timeout=10,
                retries={'max_attempts': 2}
            )

            session_kwargs = {'region_name': self.config.aws_region, 'config': boto_config}
            if self.config.aws_access_key and self.config.aws_secret_key:
                session_kwargs['aws_access_key_id'] = self.config.aws_access_key
                session_kwargs['aws_secret_access_key'] = self.config.aws_secret_key

            dynamodb = boto3.resource('dynamodb', **session_kwargs)

        self.dynamodb = dynamodb
        self.tenants_table = self.dynamodb.Table(self.config.tenants_table)
        self.sites_table = self.dynamodb.Table(self.config.sites_table)

    def get_tenant(self, tenant_id: str) -> Optional[Dict]:
        """
        Fetch a tenant document.

        Returns:
            Tenant document, or None if it does not exist
        """
        try:
            response = self.tenants_table.get_item(Key={'tenant_id': tenant_id})
        except ClientError as e:
            logger.error(f"Error reading tenant {tenant_id}: {e}")
            raise

        item = response.get('Item')
        return from_dynamodb(item) if item else None

    def list_sites(self, tenant_id: str) -> List[Dict]:
        """Fetch every site document owned by a tenant."""
        try:
            response = self.sites_table.query(
                KeyConditionExpression=Key('tenant_id').eq(tenant_id)
            )
            items = response.get('Items', [])

            # Handle pagination
            while 'LastEvaluatedKey' in response:
                response = self.sites_table.query(
                    KeyConditionExpression=Key('tenant_id').eq(tenant_id),
                    ExclusiveStartKey=response['LastEvaluatedKey']
                )
                items.extend(response.get('Items', []))
        except ClientError as e:
            logger.error(f"Error listing sites for tenant {tenant_id}: {e}")
            raise

        return [from_dynamodb(item) for item in items]

    def get_site(self, tenant_id: str, site_id: str) -> Optional[Dict]:
        """
        Fetch a single site document.

        Returns:
            Site document, or None if it does not exist
        """
        try:
            response = self.sites_table.get_item(
                Key={'tenant_id': tenant_id, 'site_id': site_id}
            )
        except ClientError as e:
            logger.error(f"Error reading site {tenant_id}/{site_id}: {e}")
            raise

        item = response.get('Item')
        return from_dynamodb(item) if item else None
