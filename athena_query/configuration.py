# Copyright Amazon.com and its affiliates; all rights reserved. This file is Amazon Web Services Content and may not be duplicated or distributed without permission.
# SPDX-License-Identifier: MIT-0
import os

# Action inputs (names as declared for the pipeline step)
SQL_INPUT = 'sql-input'
SQL_FILE = 'sql-file'
OUTPUT_LOCATION = 'output-location'
WORKGROUP = 'workgroup'
DATABASE = 'database'
DDB_TABLE = 'ddb-table'
DDB_ID = 'ddb-id'
WAIT = 'wait'
POLL_INTERVAL = 'poll-interval'
MAX_ATTEMPTS = 'max-attempts'

ALL_INPUTS = [
    SQL_INPUT, SQL_FILE, OUTPUT_LOCATION, WORKGROUP, DATABASE,
    DDB_TABLE, DDB_ID, WAIT, POLL_INTERVAL, MAX_ATTEMPTS,
]

# Action outputs
QUERY_ID = 'query-id'

# Seconds between query status checks
DEFAULT_POLL_INTERVAL = 5
# 0 keeps checking until the query reaches a terminal state
DEFAULT_MAX_ATTEMPTS = 0

OUTPUT_FILE_VARIABLE = 'GITHUB_OUTPUT'


def get_input_variable(name: str) -> str:
    """Environment variable name the runner uses for an action input
    """
    return 'INPUT_' + name.replace(' ', '_').upper()


def get_action_inputs(environ: dict = None) -> dict:
    """Collects all action inputs from the environment. Missing inputs are
    returned as empty strings.

    Parameters
    ----------
    environ: optional
        Optional override of os.environ; used for testing

    Returns
    -------
    dict
        Input name to stripped string value
    """
    if environ is None:
        environ = os.environ

    return {
        name: environ.get(get_input_variable(name), '').strip()
        for name in ALL_INPUTS
    }


def get_output_file(environ: dict = None) -> str:
    """Path of the file the runner reads step outputs from, or None outside a runner
    """
    if environ is None:
        environ = os.environ
    return environ.get(OUTPUT_FILE_VARIABLE) or None
