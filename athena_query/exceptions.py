# Copyright Amazon.com and its affiliates; all rights reserved. This file is Amazon Web Services Content and may not be duplicated or distributed without permission.
# SPDX-License-Identifier: MIT-0


class QueryActionError(RuntimeError):
    """Base class for errors that fail the invocation"""


class ValidationError(QueryActionError):
    """Inputs are missing or contradictory; raised before any AWS call"""


class StoreAccessError(QueryActionError):
    """DynamoDB state table could not be read or written"""


class StoreProvisionError(QueryActionError):
    """DynamoDB state table could not be created or did not become active"""


class SubmissionError(QueryActionError):
    """Athena rejected the query at StartQueryExecution"""


class ExecutionStatusError(QueryActionError):
    """Athena query status could not be retrieved"""


class ExecutionTerminalFailure(QueryActionError):
    """Athena query finished in a failed state

    Parameters
    ----------
    state
        Terminal query state reported by Athena (FAILED or CANCELLED)
    reason: optional
        State change reason reported by Athena
    """
    def __init__(self, state: str, reason: str = None):
        self.state = state
        self.reason = reason
        message = f'Athena query error: {state}'
        if reason:
            message += f' ({reason})'
        super().__init__(message)


class PollTimeoutError(QueryActionError):
    """Query did not reach a terminal state within the allowed attempts"""


class PollInterruptedError(QueryActionError):
    """Waiting for the query was stopped by a termination signal"""
