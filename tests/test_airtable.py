from unittest.mock import MagicMock

import pytest
import requests
from django.core.exceptions import ImproperlyConfigured

from core.airtable import NO_CACHE_HEADERS, AirtableError, AirtableTable


def response(status=200, payload=None, text=''):
    resp = MagicMock(spec=requests.Response)
    resp.status_code = status
    resp.ok = status < 400
    resp.text = text
    if payload is None:
        resp.content = text.encode()
        resp.json.side_effect = ValueError('no json')
    else:
        resp.content = b'{...}'
        resp.json.return_value = payload
    return resp


@pytest.fixture
def session():
    s = MagicMock()
    s.request.return_value = response(payload={'records': []})
    return s


@pytest.fixture
def table(session):
    return AirtableTable('pat-test', 'appBase', 'tblIdeas', session=session, timeout=5)


def test_requires_configuration():
    with pytest.raises(ImproperlyConfigured):
        AirtableTable('', 'appBase', 'tblIdeas')
    with pytest.raises(ImproperlyConfigured):
        AirtableTable('pat', 'appBase', None)


def test_from_settings(configured):
    t = AirtableTable.from_settings()
    assert t.url.endswith('/appTest/tblIdeas')
    assert t.headers['Authorization'] == 'Bearer pat-test'
    other = AirtableTable.from_settings('tblOther')
    assert other.url.endswith('/appTest/tblOther')


def test_tables_share_one_session():
    ideas = AirtableTable('pat-a', 'appBase', 'tblIdeas')
    progress = AirtableTable('pat-b', 'appBase', 'tblProgress')
    assert ideas.session is progress.session
    assert 'Authorization' not in ideas.session.headers
    assert progress.headers['Authorization'] == 'Bearer pat-b'


def test_list_builds_query(table, session):
    table.list(max_records=20, page_size=20, offset='itr1', by_field_id=True, fresh=True)
    method, url = session.request.call_args[0]
    kwargs = session.request.call_args[1]
    assert method == 'GET'
    assert url == 'https://api.airtable.com/v0/appBase/tblIdeas'
    assert kwargs['params'] == {
        'maxRecords': 20, 'pageSize': 20, 'offset': 'itr1', 'returnFieldsByFieldId': 'true',
    }
    assert kwargs['headers'] == {
        'Authorization': 'Bearer pat-test', 'Content-Type': 'application/json', **NO_CACHE_HEADERS,
    }
    assert kwargs['timeout'] == 5


def test_first_returns_single_record(table, session):
    session.request.return_value = response(payload={'records': [{'id': 'rec1', 'fields': {}}]})
    assert table.first() == {'id': 'rec1', 'fields': {}}
    assert session.request.call_args[1]['params'] == {'maxRecords': 1}


def test_first_on_empty_table(table):
    assert table.first() is None


def test_create_with_typecast(table, session):
    session.request.return_value = response(payload={'records': [{'id': 'recNew'}]})
    assert table.create({'fldA': 'x'}, typecast=True) == {'id': 'recNew'}
    kwargs = session.request.call_args[1]
    assert kwargs['json'] == {'records': [{'fields': {'fldA': 'x'}}]}
    assert kwargs['params'] == {'typecast': 'true'}


def test_update_and_delete_target_record(table, session):
    table.update('rec123', {'fldA': 'y'})
    assert session.request.call_args[0] == ('PATCH', table.url + '/rec123')
    assert session.request.call_args[1]['json'] == {'fields': {'fldA': 'y'}}

    session.request.return_value = response(payload={'id': 'rec123', 'deleted': True})
    assert table.delete('rec123') == {'id': 'rec123', 'deleted': True}
    assert session.request.call_args[0] == ('DELETE', table.url + '/rec123')


def test_error_message_is_extracted(table, session):
    session.request.return_value = response(
        422, payload={'error': {'type': 'INVALID_VALUE_FOR_COLUMN', 'message': 'Bad stage'}}
    )
    with pytest.raises(AirtableError) as exc:
        table.list()
    assert exc.value.status == 422
    assert exc.value.message == 'Bad stage'


def test_error_without_json(table, session):
    session.request.return_value = response(502, text='Bad gateway')
    with pytest.raises(AirtableError) as exc:
        table.list()
    assert exc.value.status == 502
    assert exc.value.message == 'Bad gateway'


def test_network_failure_is_unavailable(table, session):
    session.request.side_effect = requests.ConnectionError('down')
    with pytest.raises(AirtableError) as exc:
        table.first()
    assert exc.value.status == 503


def test_schema_fields_reads_metadata(table, session):
    session.request.return_value = response(payload={'tables': [
        {'id': 'tblOther', 'fields': [{'name': 'x'}]},
        {'id': 'tblIdeas', 'fields': [{'name': 'Tittel'}, {'name': 'rebus1_solved'}]},
    ]})
    assert [f['name'] for f in table.schema_fields()] == ['Tittel', 'rebus1_solved']
    assert session.request.call_args[0] == (
        'GET', 'https://api.airtable.com/v0/meta/bases/appBase/tables',
    )


def test_schema_fields_unknown_table(table, session):
    session.request.return_value = response(payload={'tables': [{'id': 'tblOther'}]})
    with pytest.raises(AirtableError) as exc:
        table.schema_fields()
    assert exc.value.status == 404


def test_create_field(table, session):
    session.request.return_value = response(payload={'id': 'fldNew', 'name': 'rebus1_time'})
    definition = {'name': 'rebus1_time', 'type': 'singleLineText'}
    assert table.create_field(definition)['id'] == 'fldNew'
    assert session.request.call_args[0] == (
        'POST', 'https://api.airtable.com/v0/meta/bases/appBase/tables/tblIdeas/fields',
    )
    assert session.request.call_args[1]['json'] == definition
