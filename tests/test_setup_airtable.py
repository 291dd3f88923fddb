from io import StringIO
from unittest.mock import patch

import pytest
from django.core.management import CommandError, call_command

from core.airtable import AirtableError
from rebus.progress import field_definitions


@pytest.fixture
def table(fake_table):
    fake_table.table_id = 'tblIdeas'
    with patch('rebus.management.commands.setup_airtable.progress_table', return_value=fake_table):
        yield fake_table


def run(**options):
    out = StringIO()
    call_command('setup_airtable', delay=0, stdout=out, stderr=StringIO(), **options)
    return out.getvalue()


def test_field_definitions_cover_every_slot():
    names = [d['name'] for d in field_definitions()]
    assert len(names) == 15
    assert names[:3] == ['rebus1_solved', 'rebus1_date', 'rebus1_time']
    assert {d['type'] for d in field_definitions()} == {'checkbox', 'date', 'singleLineText'}


def test_creates_missing_fields(table):
    table.schema_fields.return_value = [{'name': 'Tittel'}, {'name': 'rebus1_solved'}]
    output = run()
    created = [c[0][0]['name'] for c in table.create_field.call_args_list]
    assert len(created) == 14
    assert 'rebus1_solved' not in created
    assert 'Created 14, skipped 1, failed 0' in output


def test_nothing_to_do(table):
    table.schema_fields.return_value = [{'name': d['name']} for d in field_definitions()]
    output = run()
    table.create_field.assert_not_called()
    assert 'Created 0, skipped 15, failed 0' in output


def test_failed_field_does_not_stop_the_rest(table):
    table.schema_fields.return_value = []
    table.create_field.side_effect = [AirtableError(422, 'INVALID_FIELD_TYPE')] + [{}] * 14
    with pytest.raises(CommandError):
        run()
    assert table.create_field.call_count == 15


def test_schema_read_failure(table):
    table.schema_fields.side_effect = AirtableError(404, 'Table tblIdeas not found')
    with pytest.raises(CommandError):
        run()
    table.create_field.assert_not_called()


def test_not_configured(settings):
    settings.AIRTABLE_TOKEN = ''
    with pytest.raises(CommandError):
        run()
