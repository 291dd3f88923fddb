import json
from unittest.mock import MagicMock

import pytest

from core.airtable import AirtableTable
from rebus.catalog import get_puzzle


@pytest.fixture
def bowling():
    """Pizza, øl og konkurranse på Oslo bowling."""
    return get_puzzle(1)


@pytest.fixture
def fake_table():
    return MagicMock(spec=AirtableTable)


@pytest.fixture
def configured(settings):
    settings.AIRTABLE_TOKEN = 'pat-test'
    settings.AIRTABLE_BASE_ID = 'appTest'
    settings.AIRTABLE_TABLE_ID = 'tblIdeas'
    settings.AIRTABLE_PROGRESS_TABLE_ID = 'tblIdeas'
    settings.OPENAI_API_KEY = 'sk-test'
    settings.LLM_PROVIDER = 'openai'
    settings.CLOUDINARY_CLOUD_NAME = 'demo'
    settings.CLOUDINARY_UPLOAD_PRESET = 'unsigned'
    settings.AI_ANALYZE_ENABLED = True
    return settings


def post_json(rf, path, payload, method='post', **extra):
    return getattr(rf, method)(
        path, data=json.dumps(payload), content_type='application/json', **extra
    )


def body(response):
    return json.loads(response.content.decode('utf-8'))
