# Copyright Amazon.com and its affiliates; all rights reserved. This file is Amazon Web Services Content and may not be duplicated or distributed without permission.
# SPDX-License-Identifier: MIT-0
import logging
import boto3
import botocore

from .exceptions import ExecutionStatusError, SubmissionError
from .models import ExecutionHandle, QueryRequest, QUEUED

logger = logging.getLogger(__name__)


class AthenaQueryExecutor:
    def __init__(self, athena=None):
        """Start Athena queries and fetch their status

        Parameters
        ----------
        athena: optional
            boto3 Athena client, created from the default session if not provided
        """
        self.athena = athena or boto3.client('athena')

    def submit(self, request: QueryRequest) -> ExecutionHandle:
        """Start the query and return immediately without waiting for it to finish

        Raises
        ------
        SubmissionError
            If Athena rejects the query for any reason
        """
        parameters = { 'QueryString': request.text }
        if request.workgroup:
            parameters['WorkGroup'] = request.workgroup
        if request.output_location:
            parameters['ResultConfiguration'] = { 'OutputLocation': request.output_location }
        if request.database:
            parameters['QueryExecutionContext'] = { 'Database': request.database }

        try:
            query_response = self.athena.start_query_execution(**parameters)
        except (botocore.exceptions.ClientError, botocore.exceptions.BotoCoreError) as error:
            raise SubmissionError(f'Error running Athena query: {error}') from error

        logger.debug(f'Executed query response: {query_response}')
        return ExecutionHandle(id=query_response['QueryExecutionId'], state=QUEUED)

    def poll(self, handle: ExecutionHandle) -> ExecutionHandle:
        """Fetch the current status of a started query

        Raises
        ------
        ExecutionStatusError
            If the query status cannot be retrieved
        """
        try:
            query_details = self.athena.get_query_execution(QueryExecutionId=handle.id)
        except (botocore.exceptions.ClientError, botocore.exceptions.BotoCoreError) as error:
            raise ExecutionStatusError(f'Error getting Athena query status: {error}') from error

        logger.debug(f'Get query execution response: {query_details}')
        status = query_details['QueryExecution']['Status']
        return ExecutionHandle(
            id=handle.id,
            state=status['State'],
            state_change_reason=status.get('StateChangeReason'),
        )
