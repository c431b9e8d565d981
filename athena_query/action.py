# Copyright Amazon.com and its affiliates; all rights reserved. This file is Amazon Web Services Content and may not be duplicated or distributed without permission.
# SPDX-License-Identifier: MIT-0
"""
Pipeline step entry point: reads the action inputs from the environment, runs
the query, publishes the query execution ID as the query-id output, and
reports failure through a workflow error command and a non-zero exit code.
"""
import sys
import signal
import logging
import threading
import botocore

from .configuration import QUERY_ID, get_action_inputs, get_output_file
from .exceptions import QueryActionError
from .orchestrator import QueryOrchestrator, validate_inputs
from .query_execution import AthenaQueryExecutor
from .state_store import DynamoDbStateStore

# Logger initiation
logger = logging.getLogger()
logger.setLevel(logging.INFO)


def set_output(name: str, value: str, environ: dict = None):
    """Write a step output to the runner's output file

    Parameters
    ----------
    name
        Output name
    value
        Output value (single line)
    environ: optional
        Optional override of os.environ; used for testing
    """
    output_file = get_output_file(environ)
    if output_file is None:
        logger.warning(f'No output file available; {name} not published')
        return

    with open(output_file, 'a', encoding='utf-8') as output:
        output.write(f'{name}={value}\n')


def set_failed(message: str):
    """Report a failed step with the message as the visible reason
    """
    print(f'::error::{message}', flush=True)


def install_stop_handlers(stop_event: threading.Event) -> dict:
    """Set the stop event when the runner cancels the step, so waiting ends cleanly

    Returns
    -------
    dict
        Previous handler for each signal, to restore afterwards
    """
    def handler(signum, _):
        logger.warning(f'Received signal {signum}, stopping')
        stop_event.set()

    return {
        signum: signal.signal(signum, handler)
        for signum in [ signal.SIGTERM, signal.SIGINT ]
    }


def main(environ: dict = None) -> int:
    """Run the action once

    Returns
    -------
    int
        Process exit code, 0 on success and 1 on any failure
    """
    logging.basicConfig(format='%(levelname)s %(name)s: %(message)s', stream=sys.stdout)

    stop_event = threading.Event()
    previous_handlers = install_stop_handlers(stop_event)

    try:
        invocation = validate_inputs(get_action_inputs(environ))

        orchestrator = QueryOrchestrator(
            query_executor=AthenaQueryExecutor(),
            state_store=DynamoDbStateStore() if invocation.tracking_key else None,
            on_submitted=lambda execution_id: set_output(QUERY_ID, execution_id, environ),
            stop_event=stop_event,
        )
        result = orchestrator.run(invocation)
    except QueryActionError as error:
        set_failed(str(error))
        return 1
    except botocore.exceptions.BotoCoreError as error:
        # Raised while creating clients, e.g. no region configured
        set_failed(f'AWS client error: {error}')
        return 1
    finally:
        for signum, previous in previous_handlers.items():
            # None means the previous handler was not installed from Python
            if previous is not None:
                signal.signal(signum, previous)

    if result.skipped:
        logger.info('Query skipped; stored fingerprint matches.')
    else:
        logger.info(f'Query {result.execution_id} submitted successfully.')
    return 0


if __name__ == '__main__':
    sys.exit(main())
