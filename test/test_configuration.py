# Copyright Amazon.com and its affiliates; all rights reserved. This file is Amazon Web Services Content and may not be duplicated or distributed without permission.
# SPDX-License-Identifier: MIT-0
import athena_query.configuration as configuration
from athena_query.configuration import (
    ALL_INPUTS, SQL_INPUT, SQL_FILE, DDB_TABLE, WAIT, OUTPUT_FILE_VARIABLE,
)


def test_get_input_variable_uses_runner_convention():
    assert configuration.get_input_variable(SQL_INPUT) == 'INPUT_SQL-INPUT'
    assert configuration.get_input_variable('output location') == 'INPUT_OUTPUT_LOCATION'


def test_get_action_inputs_returns_all_inputs():
    inputs = configuration.get_action_inputs(environ={})

    assert set(inputs) == set(ALL_INPUTS)
    assert all(value == '' for value in inputs.values()), \
        'Expected missing inputs to be empty strings'


def test_get_action_inputs_strips_values():
    inputs = configuration.get_action_inputs(environ={
        'INPUT_SQL-INPUT': '  SELECT 1\n',
        'INPUT_DDB-TABLE': 'state-table',
        'INPUT_WAIT': 'true ',
    })

    assert inputs[SQL_INPUT] == 'SELECT 1'
    assert inputs[DDB_TABLE] == 'state-table'
    assert inputs[WAIT] == 'true'
    assert inputs[SQL_FILE] == ''


def test_get_action_inputs_reads_process_environment(monkeypatch):
    monkeypatch.setenv('INPUT_WORKGROUP', 'wg1')

    assert configuration.get_action_inputs()[configuration.WORKGROUP] == 'wg1'


def test_get_output_file():
    assert configuration.get_output_file(environ={}) is None
    assert configuration.get_output_file(environ={ OUTPUT_FILE_VARIABLE: '' }) is None
    assert configuration.get_output_file(environ={ OUTPUT_FILE_VARIABLE: '/tmp/out' }) == '/tmp/out'
