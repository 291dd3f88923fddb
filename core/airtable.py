"""Thin Airtable REST client: one instance talks to one table."""

import logging

import requests
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

logger = logging.getLogger(__name__)

AIRTABLE_API_URL = 'https://api.airtable.com/v0'

NO_CACHE_HEADERS = {
    'Cache-Control': 'no-cache, no-store, must-revalidate',
    'Pragma': 'no-cache',
    'Expires': '0',
}


# One pooled session per process; credentials go on each request
_session = requests.Session()


class AirtableError(Exception):
    def __init__(self, status, message):
        super().__init__(message)
        self.status = status
        self.message = message

    def __str__(self):
        return f'Airtable {self.status}: {self.message}'


class AirtableTable:
    def __init__(self, token, base_id, table_id, session=None, timeout=15.0):
        if not token or not base_id or not table_id:
            raise ImproperlyConfigured('Missing Airtable configuration')
        self.table_id = table_id
        self.url = f'{AIRTABLE_API_URL}/{base_id}/{table_id}'
        self.meta_url = f'{AIRTABLE_API_URL}/meta/bases/{base_id}/tables'
        self.timeout = timeout
        self.session = session or _session
        self.headers = {
            'Authorization': f'Bearer {token}',
            'Content-Type': 'application/json',
        }

    @classmethod
    def from_settings(cls, table_id=None):
        return cls(
            settings.AIRTABLE_TOKEN,
            settings.AIRTABLE_BASE_ID,
            table_id or settings.AIRTABLE_TABLE_ID,
            timeout=settings.AIRTABLE_TIMEOUT,
        )

    def request(self, method, path='', params=None, json=None, headers=None, base_url=None):
        url = (base_url or self.url) + path
        logger.debug('Airtable %s %s params=%s', method, url, params)
        try:
            resp = self.session.request(
                method, url, params=params, json=json,
                headers={**self.headers, **(headers or {})}, timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise AirtableError(503, f'Could not reach Airtable: {e}')

        if not resp.ok:
            try:
                body = resp.json()
            except ValueError:
                body = {'error': resp.text[:300] or 'Unknown error'}
            error = body.get('error') if isinstance(body, dict) else body
            if isinstance(error, dict):
                message = error.get('message') or error.get('type') or str(error)
            else:
                message = str(error or 'Airtable API error')
            logger.error('Airtable API error %s: %s', resp.status_code, body)
            raise AirtableError(resp.status_code, message)

        if not resp.content:
            return {}
        return resp.json()

    def list(self, max_records=None, page_size=None, offset=None, by_field_id=False, fresh=False):
        params = {}
        if max_records is not None:
            params['maxRecords'] = max_records
        if page_size is not None:
            params['pageSize'] = page_size
        if offset:
            params['offset'] = offset
        if by_field_id:
            params['returnFieldsByFieldId'] = 'true'
        return self.request('GET', params=params, headers=NO_CACHE_HEADERS if fresh else None)

    def first(self):
        data = self.list(max_records=1, fresh=True)
        records = data.get('records') or []
        return records[0] if records else None

    def create(self, fields, typecast=False):
        params = {'typecast': 'true'} if typecast else None
        data = self.request('POST', params=params, json={'records': [{'fields': fields}]})
        records = data.get('records') or []
        return records[0] if records else data

    def update(self, record_id, fields, typecast=False):
        params = {'typecast': 'true'} if typecast else None
        return self.request('PATCH', f'/{record_id}', params=params, json={'fields': fields})

    def delete(self, record_id):
        return self.request('DELETE', f'/{record_id}')

    def schema_fields(self):
        """Field definitions of this table, from the metadata API."""
        data = self.request('GET', base_url=self.meta_url)
        for table in data.get('tables') or []:
            if table.get('id') == self.table_id:
                return table.get('fields') or []
        raise AirtableError(404, f'Table {self.table_id} not found')

    def create_field(self, definition):
        return self.request('POST', f'/{self.table_id}/fields', json=definition, base_url=self.meta_url)
