# Copyright Amazon.com and its affiliates; all rights reserved. This file is Amazon Web Services Content and may not be duplicated or distributed without permission.
# SPDX-License-Identifier: MIT-0
import pytest
from moto import mock_aws
import boto3
import os
import signal
import threading

from test.boto_mocking_helper import *
import athena_query.action as action
from athena_query.query_execution import AthenaQueryExecutor
from athena_query.configuration import OUTPUT_FILE_VARIABLE, QUERY_ID
from athena_query.fingerprint import fingerprint

test_table_name = 'test-athena-query-state'
test_record_id = 'daily-report-view'


@pytest.fixture
def use_moto():
    @mock_aws
    def athena_workgroup():
        athena_client = boto3.client('athena')
        athena_client.create_work_group(
            Name=mock_workgroup,
            Description='Test workgroup for unit tests',
            Configuration={
                'ResultConfiguration': {
                    'OutputLocation': mock_output_location
                }
            }
        )
    return athena_workgroup


def test_set_output_appends_to_output_file(tmp_path):
    output_file = tmp_path / 'output'
    output_file.write_text('existing=value\n')

    action.set_output(QUERY_ID, mock_query_execution_id, { OUTPUT_FILE_VARIABLE: str(output_file) })

    assert output_file.read_text() == f'existing=value\n{QUERY_ID}={mock_query_execution_id}\n'


def test_set_output_without_output_file_does_not_fail():
    action.set_output(QUERY_ID, mock_query_execution_id, {})


def test_set_failed_prints_error_command(capsys):
    action.set_failed('Empty query.')

    assert capsys.readouterr().out == '::error::Empty query.\n'


def test_main_validation_error_fails_step(capsys):
    exit_code = action.main({ 'INPUT_WORKGROUP': mock_workgroup })

    assert exit_code == 1
    assert '::error::Either sql-input or sql-file must be set.' in capsys.readouterr().out


@mock_aws
def test_main_runs_query_and_sets_output(monkeypatch, tmp_path, use_moto):
    monkeypatch.setenv('AWS_DEFAULT_REGION', mock_region)
    use_moto()
    output_file = tmp_path / 'output'

    exit_code = action.main({
        'INPUT_SQL-INPUT': 'SELECT 1',
        'INPUT_WORKGROUP': mock_workgroup,
        'INPUT_WAIT': 'true',
        OUTPUT_FILE_VARIABLE: str(output_file),
    })

    assert exit_code == 0
    assert output_file.read_text().startswith(f'{QUERY_ID}=')


@mock_aws
def test_main_tracks_query_from_file(monkeypatch, tmp_path, use_moto):
    monkeypatch.setenv('AWS_DEFAULT_REGION', mock_region)
    use_moto()
    sql_file = tmp_path / 'query.sql'
    sql_file.write_text('create view test_view as select 1 as c1')
    output_file = tmp_path / 'output'
    environ = {
        'INPUT_SQL-FILE': str(sql_file),
        'INPUT_WORKGROUP': mock_workgroup,
        'INPUT_DDB-TABLE': test_table_name,
        'INPUT_DDB-ID': test_record_id,
        'INPUT_WAIT': 'true',
        OUTPUT_FILE_VARIABLE: str(output_file),
    }

    assert action.main(environ) == 0
    assert action.main(environ) == 0

    # Second run is skipped, so only one query ID is published
    assert len(output_file.read_text().splitlines()) == 1
    item = boto3.resource('dynamodb').Table(test_table_name).get_item(Key={ 'id': test_record_id })['Item']
    assert item['hash'] == fingerprint('create view test_view as select 1 as c1')


def test_main_undecodable_query_file_fails_step(capsys, tmp_path):
    sql_file = tmp_path / 'binary.sql'
    sql_file.write_bytes(b'SELECT \xff\xfe')

    exit_code = action.main({ 'INPUT_SQL-FILE': str(sql_file), 'INPUT_WORKGROUP': mock_workgroup })

    assert exit_code == 1
    assert f'::error::Unable to read {sql_file}' in capsys.readouterr().out


def test_main_missing_credentials_fails_step(monkeypatch, capsys, tmp_path):
    monkeypatch.setattr(action, 'AthenaQueryExecutor',
        lambda: AthenaQueryExecutor(mock_client_athena_no_credentials))
    output_file = tmp_path / 'output'

    exit_code = action.main({
        'INPUT_SQL-INPUT': 'SELECT 1',
        'INPUT_WORKGROUP': mock_workgroup,
        OUTPUT_FILE_VARIABLE: str(output_file),
    })

    assert exit_code == 1
    assert '::error::Error running Athena query: Unable to locate credentials' in capsys.readouterr().out
    assert not output_file.exists()


def test_install_stop_handlers_sets_stop_event_on_sigterm():
    stop_event = threading.Event()
    original_handler = signal.getsignal(signal.SIGTERM)

    previous_handlers = action.install_stop_handlers(stop_event)
    try:
        os.kill(os.getpid(), signal.SIGTERM)
        assert stop_event.wait(1), 'Expected SIGTERM to set the stop event'
    finally:
        for signum, previous in previous_handlers.items():
            signal.signal(signum, previous)

    assert previous_handlers[signal.SIGTERM] == original_handler
    assert signal.getsignal(signal.SIGTERM) == original_handler


def test_main_restores_signal_handlers():
    original_handlers = {
        signum: signal.getsignal(signum) for signum in [ signal.SIGTERM, signal.SIGINT ]
    }

    action.main({ 'INPUT_WORKGROUP': mock_workgroup })

    for signum, original in original_handlers.items():
        assert signal.getsignal(signum) == original
