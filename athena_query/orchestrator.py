# Copyright Amazon.com and its affiliates; all rights reserved. This file is Amazon Web Services Content and may not be duplicated or distributed without permission.
# SPDX-License-Identifier: MIT-0
import os
import math
import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional
import dateutil.tz

from .configuration import (
    SQL_INPUT, SQL_FILE, OUTPUT_LOCATION, WORKGROUP, DATABASE, DDB_TABLE, DDB_ID, WAIT,
    POLL_INTERVAL, MAX_ATTEMPTS, DEFAULT_POLL_INTERVAL, DEFAULT_MAX_ATTEMPTS,
)
from .exceptions import (
    ExecutionTerminalFailure, PollInterruptedError, PollTimeoutError, ValidationError,
)
from .fingerprint import fingerprint
from .models import ExecutionHandle, FingerprintRecord, QueryRequest, TrackingKey

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Invocation:
    request: QueryRequest
    tracking_key: Optional[TrackingKey] = None
    wait: bool = False
    poll_interval: float = DEFAULT_POLL_INTERVAL
    max_attempts: int = DEFAULT_MAX_ATTEMPTS


@dataclass(frozen=True)
class RunResult:
    execution_id: Optional[str] = None
    skipped: bool = False
    state: Optional[str] = None


def current_epoch_seconds() -> int:
    return int(datetime.now(tz=dateutil.tz.gettz('UTC')).timestamp())


def _parse_number(inputs: dict, name: str, default, convert):
    value = inputs.get(name)
    if not value:
        return default
    try:
        number = convert(value)
    except ValueError:
        raise ValidationError(f'{name} must be a number, got {value}')
    if not math.isfinite(number):
        raise ValidationError(f'{name} must be a finite number, got {value}')
    if number < 0:
        raise ValidationError(f'{name} cannot be negative, got {value}')
    return number


def validate_inputs(inputs: dict) -> Invocation:
    """Validates action inputs, resolves the query text, and builds the invocation.
    Checks run in a fixed order and the first violation is raised.

    Parameters
    ----------
    inputs
        Input name to string value, as returned by configuration.get_action_inputs()

    Raises
    ------
    ValidationError
        If the inputs are missing, contradictory, or the query is empty

    Returns
    -------
    Invocation
        Validated query request, tracking key (or None) and wait options
    """
    sql_input = inputs.get(SQL_INPUT)
    sql_file = inputs.get(SQL_FILE)

    if not sql_input and not sql_file:
        raise ValidationError('Either sql-input or sql-file must be set.')

    if sql_input and sql_file:
        raise ValidationError('Accepts input for either sql-input or sql-file, but not both.')

    if not inputs.get(WORKGROUP) and not inputs.get(OUTPUT_LOCATION):
        raise ValidationError('Either output-location, workgroup, or both must be set.')

    if sql_input:
        query = sql_input
        logger.info('Query loaded from input.')
    else:
        if not os.path.isfile(sql_file):
            raise ValidationError(f'Unable to locate {sql_file}')
        try:
            with open(sql_file, encoding='utf-8') as query_file:
                query = query_file.read()
        except (OSError, UnicodeDecodeError) as error:
            raise ValidationError(f'Unable to read {sql_file}: {error}') from error
        logger.info(f'Query loaded from file {sql_file}.')

    if len(query) < 1:
        raise ValidationError('Empty query.')

    ddb_table = inputs.get(DDB_TABLE)
    ddb_id = inputs.get(DDB_ID)
    if bool(ddb_table) != bool(ddb_id):
        raise ValidationError('If using state tracking, both ddb-id and ddb-table must be set.')

    return Invocation(
        request=QueryRequest(
            text=query,
            workgroup=inputs.get(WORKGROUP) or None,
            output_location=inputs.get(OUTPUT_LOCATION) or None,
            database=inputs.get(DATABASE) or None,
        ),
        tracking_key=TrackingKey(store_id=ddb_table, record_id=ddb_id) if ddb_table else None,
        wait=inputs.get(WAIT) == 'true',
        poll_interval=_parse_number(inputs, POLL_INTERVAL, DEFAULT_POLL_INTERVAL, float),
        max_attempts=_parse_number(inputs, MAX_ATTEMPTS, DEFAULT_MAX_ATTEMPTS, int),
    )


class QueryOrchestrator:
    def __init__(self, query_executor, state_store=None,
            on_submitted: Callable[[str], None] = None, stop_event: threading.Event = None):
        """Runs one query with optional fingerprint tracking so that an unchanged
        query under the same tracking key is not executed again.

        Concurrent runs sharing a tracking key are not coordinated; the last
        successful writer's fingerprint is kept.

        Parameters
        ----------
        query_executor
            Object with submit(QueryRequest) and poll(ExecutionHandle), e.g. AthenaQueryExecutor
        state_store: optional
            Object with ensure_store(), get() and put(), e.g. DynamoDbStateStore;
            required only for invocations with a tracking key
        on_submitted: optional
            Called with the query execution ID as soon as the query is started
        stop_event: optional
            Event that interrupts waiting for the query when set
        """
        self.query_executor = query_executor
        self.state_store = state_store
        self.on_submitted = on_submitted
        self.stop_event = stop_event or threading.Event()

    def run(self, invocation: Invocation) -> RunResult:
        """Skip, or submit the query, optionally wait for it, and record its fingerprint

        Raises
        ------
        QueryActionError
            Any failure; no later step is attempted
        """
        request = invocation.request
        tracking_key = invocation.tracking_key
        query_hash = fingerprint(request.text)

        if tracking_key:
            if self.state_store is None:
                raise ValidationError('State tracking requested but no state store is configured.')

            self.state_store.ensure_store(tracking_key.store_id)
            record = self.state_store.get(tracking_key.store_id, tracking_key.record_id)
            if record is not None and record.hash == query_hash:
                logger.info('Query has not changed, nothing to do.')
                return RunResult(skipped=True)

        logger.info(f'Running Query: {request.text}')
        handle = self.query_executor.submit(request)
        logger.info(f'Query ID: {handle.id}')
        if self.on_submitted:
            self.on_submitted(handle.id)

        if invocation.wait:
            handle = self.wait_for_completion(
                handle, invocation.poll_interval, invocation.max_attempts)
        else:
            # Fingerprint is still recorded below without confirming the query succeeded
            logger.info('Not waiting for query execution to finish.')

        if tracking_key:
            self.state_store.put(
                tracking_key.store_id,
                FingerprintRecord(
                    record_id=tracking_key.record_id,
                    hash=query_hash,
                    timestamp=current_epoch_seconds(),
                )
            )

        return RunResult(execution_id=handle.id, state=handle.state if invocation.wait else None)

    def wait_for_completion(self, handle: ExecutionHandle, poll_interval: float = DEFAULT_POLL_INTERVAL,
            max_attempts: int = DEFAULT_MAX_ATTEMPTS) -> ExecutionHandle:
        """Poll the query status until it succeeds

        Parameters
        ----------
        handle
            Handle of the started query
        poll_interval: optional
            Seconds between status checks, default 5
        max_attempts: optional
            Number of status checks before giving up, default 0 (no limit)

        Raises
        ------
        ExecutionTerminalFailure
            If the query ends FAILED or CANCELLED
        PollTimeoutError
            If max_attempts status checks did not find a terminal state
        PollInterruptedError
            If the stop event is set while waiting

        Returns
        -------
        ExecutionHandle
            Handle in SUCCEEDED state
        """
        attempts = 0
        while True:
            handle = self.query_executor.poll(handle)
            attempts += 1

            if handle.failed:
                raise ExecutionTerminalFailure(handle.state, handle.state_change_reason)
            if handle.succeeded:
                logger.info(f'Query {handle.id} finished with state {handle.state}.')
                return handle

            if max_attempts and attempts >= max_attempts:
                raise PollTimeoutError(
                    f'Query {handle.id} still {handle.state} after {attempts} status checks')

            logger.info(f'Waiting for query execution to finish, sleeping for {poll_interval} seconds.')
            if self.stop_event.wait(poll_interval):
                raise PollInterruptedError(f'Stopped waiting for query {handle.id} in state {handle.state}')
