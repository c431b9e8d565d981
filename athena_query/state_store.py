# Copyright Amazon.com and its affiliates; all rights reserved. This file is Amazon Web Services Content and may not be duplicated or distributed without permission.
# SPDX-License-Identifier: MIT-0
import logging
from typing import Optional
import boto3
import botocore

from .exceptions import StoreAccessError, StoreProvisionError
from .models import FingerprintRecord
from .tagging import get_tags

logger = logging.getLogger(__name__)

PARTITION_KEY = 'id'
TABLE_NOT_FOUND = 'ResourceNotFoundException'
TABLE_IN_USE = 'ResourceInUseException'
TABLE_ACTIVE = 'ACTIVE'

# Table activation wait, 5s apart
TABLE_WAIT_DELAY = 5
TABLE_WAIT_MAX_ATTEMPTS = 25


def error_code(error: botocore.exceptions.ClientError) -> str:
    return error.response.get('Error', {}).get('Code', '')


class DynamoDbStateStore:
    def __init__(self, dynamodb=None, wait_delay: int = TABLE_WAIT_DELAY,
            wait_max_attempts: int = TABLE_WAIT_MAX_ATTEMPTS):
        """Fingerprint storage in DynamoDB tables keyed by a string 'id'

        Parameters
        ----------
        dynamodb: optional
            boto3 DynamoDB service resource, created from the default session if not provided
        wait_delay: optional
            Seconds between table status checks after creating a table, default 5
        wait_max_attempts: optional
            Maximum table status checks after creating a table, default 25
        """
        self.dynamodb = dynamodb or boto3.resource('dynamodb')
        self.wait_delay = wait_delay
        self.wait_max_attempts = wait_max_attempts

    @property
    def client(self):
        return self.dynamodb.meta.client

    def ensure_store(self, table_name: str):
        """Check that the state table exists, creating it if it does not, and
        block until the table is active

        Parameters
        ----------
        table_name
            Name of DynamoDB table

        Raises
        ------
        StoreAccessError
            If the table cannot be described for any reason other than not existing
        StoreProvisionError
            If the table cannot be created or does not become active
        """
        try:
            table = self.client.describe_table(TableName=table_name)['Table']
        except botocore.exceptions.ClientError as error:
            if error_code(error) != TABLE_NOT_FOUND:
                # Most likely a permissions issue
                raise StoreAccessError(
                    f'Error accessing DynamoDB table: {error_code(error)}') from error
            table = None
        except botocore.exceptions.BotoCoreError as error:
            raise StoreAccessError(f'Error accessing DynamoDB table: {error}') from error

        if table is not None:
            logger.info(f'DynamoDB table {table_name} found.')
            if table.get('TableStatus') != TABLE_ACTIVE:
                # Created by another run that has not finished provisioning it
                logger.info(f'DynamoDB table {table_name} is {table.get("TableStatus")}, waiting for it to become active.')
                self.wait_until_active(table_name)
            return

        logger.info(f'DynamoDB table {table_name} not found, attempting to create.')
        try:
            self.client.create_table(
                TableName=table_name,
                AttributeDefinitions=[
                    { 'AttributeName': PARTITION_KEY, 'AttributeType': 'S' }
                ],
                KeySchema=[
                    { 'AttributeName': PARTITION_KEY, 'KeyType': 'HASH' }
                ],
                BillingMode='PAY_PER_REQUEST',
                Tags=get_tags(),
            )
            logger.info(f'DynamoDB table {table_name} created, waiting for it to become active.')
        except botocore.exceptions.ClientError as error:
            if error_code(error) != TABLE_IN_USE:
                raise StoreProvisionError(
                    f'Error creating DynamoDB table: {error_code(error)}') from error
            logger.info(f'DynamoDB table {table_name} is being created by another run, waiting for it to become active.')
        except botocore.exceptions.BotoCoreError as error:
            raise StoreProvisionError(f'Error creating DynamoDB table: {error}') from error

        self.wait_until_active(table_name)

    def wait_until_active(self, table_name: str):
        """Block until the table status is ACTIVE

        Raises
        ------
        StoreProvisionError
            If the table does not become active within the configured attempts
        """
        try:
            self.client.get_waiter('table_exists').wait(
                TableName=table_name,
                WaiterConfig={
                    'Delay': self.wait_delay,
                    'MaxAttempts': self.wait_max_attempts,
                }
            )
        except botocore.exceptions.WaiterError as error:
            raise StoreProvisionError(
                f'DynamoDB table {table_name} did not become active: {error}') from error
        except (botocore.exceptions.ClientError, botocore.exceptions.BotoCoreError) as error:
            raise StoreProvisionError(
                f'Error waiting for DynamoDB table {table_name}: {error}') from error

        logger.info(f'DynamoDB table {table_name} is active.')

    def get(self, table_name: str, record_id: str) -> Optional[FingerprintRecord]:
        """Look up the stored fingerprint for a record ID

        Returns
        -------
        FingerprintRecord
            The stored record, or None if no record exists
        """
        try:
            result = self.dynamodb.Table(table_name).get_item(
                Key={ PARTITION_KEY: record_id },
                ConsistentRead=True,
            )
        except (botocore.exceptions.ClientError, botocore.exceptions.BotoCoreError) as error:
            raise StoreAccessError(f'DynamoDB get_item failed: {error}') from error

        logger.debug(f'DynamoDB get_item response: {result}')
        item = result.get('Item')
        if item is None:
            return None

        return FingerprintRecord(
            record_id=item[PARTITION_KEY],
            hash=item.get('hash', ''),
            # Resource API returns numbers as Decimal
            timestamp=int(item.get('timestamp', 0)),
        )

    def put(self, table_name: str, record: FingerprintRecord):
        """Write the fingerprint record, replacing any existing record with the same ID
        """
        try:
            self.dynamodb.Table(table_name).put_item(
                Item={
                    PARTITION_KEY: record.record_id,
                    'hash': record.hash,
                    'timestamp': record.timestamp,
                }
            )
        except (botocore.exceptions.ClientError, botocore.exceptions.BotoCoreError) as error:
            raise StoreAccessError(f'DynamoDB put_item failed: {error}') from error

        logger.info('DynamoDB updated with latest query hash.')
