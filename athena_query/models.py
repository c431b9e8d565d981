# Copyright Amazon.com and its affiliates; all rights reserved. This file is Amazon Web Services Content and may not be duplicated or distributed without permission.
# SPDX-License-Identifier: MIT-0
from dataclasses import dataclass
from typing import Optional

# Valid Athena "State" values: QUEUED | RUNNING | SUCCEEDED | FAILED | CANCELLED
QUEUED = 'QUEUED'
RUNNING = 'RUNNING'
SUCCEEDED = 'SUCCEEDED'
FAILED = 'FAILED'
CANCELLED = 'CANCELLED'

FAILURE_STATES = [ FAILED, CANCELLED ]


@dataclass(frozen=True)
class QueryRequest:
    text: str
    workgroup: Optional[str] = None
    output_location: Optional[str] = None
    database: Optional[str] = None


@dataclass(frozen=True)
class TrackingKey:
    """DynamoDB table and partition key value under which the query
    fingerprint is stored
    """
    store_id: str
    record_id: str


@dataclass(frozen=True)
class FingerprintRecord:
    record_id: str
    hash: str
    timestamp: int


@dataclass(frozen=True)
class ExecutionHandle:
    id: str
    state: str = QUEUED
    state_change_reason: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.state == SUCCEEDED

    @property
    def failed(self) -> bool:
        return self.state in FAILURE_STATES

    @property
    def terminal(self) -> bool:
        return self.succeeded or self.failed
