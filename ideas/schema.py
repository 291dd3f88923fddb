"""Ideas table layout in the record store.

``FIELD_IDS`` is the only place that knows the opaque Airtable field IDs;
everything else uses the form field names.
"""

from datetime import date

from core.text import fold

TYPE_INSPIRATION = 'Inspirasjon'
TYPE_PORTFOLIO = 'Ide klar for vurdering til innovasjonsporteføljen'

TYPE_CHOICES = [
    (TYPE_INSPIRATION, TYPE_INSPIRATION),
    (TYPE_PORTFOLIO, TYPE_PORTFOLIO),
]

ARCHIVED_STAGE = 'Arkivert'

STAGES = [
    'Idégenerering',
    'Idéutforsking',
    'Problem/Løsning',
    'Produkt/Marked',
    'Skalering',
    ARCHIVED_STAGE,
]

STAGE_CHOICES = [(s, s) for s in STAGES]

RATING_FIELDS = [
    'strategic_fit',
    'consumer_need',
    'business_potential',
    'feasibility',
    'launch_time',
]

FIELD_IDS = {
    'title': 'fldKXo4ub5pqqTjG9',
    'description': 'fld0mPPNrE5pRxENI',
    'type': 'fldhBleuXFNt9bWLP',
    'stage': 'fldTOdb9VgP0MdtNN',
    'images': 'fldz4NQq8uolOnbRY',
    'submitter': 'fldfG5fBJ8E9iNVa1',
    'date_submitted': 'fld9Hi3Emxlhoi9GE',
    'target_audience': 'fldPchK9TQYU6Ohtb',
    'needs_problem': 'fldzjuFp9VpT7OYEG',
    'value_proposition': 'fldxJ85CvJoyjdZEL',
    'strategic_fit': 'fldkbyMg9d5ujd0h3',
    'consumer_need': 'fldNNHrSoKmEc1mh2',
    'business_potential': 'fldLQPswmcUbOLqdm',
    'feasibility': 'fldiapbgGw4wyY2B6',
    'launch_time': 'fldGfvOxKOKvRt4XO',
    # computed in the table, read only
    'average_score': 'fldI1o5fXeWLTP5e0',
}

TEXT_FIELDS = [
    'title',
    'description',
    'type',
    'stage',
    'submitter',
    'target_audience',
    'needs_problem',
    'value_proposition',
]


def _stage_key(value):
    return ''.join(ch for ch in fold(value) if ch.isalnum())


_STAGE_ALIASES = {_stage_key(s): s for s in STAGES}
_STAGE_ALIASES.update({
    'idegen': 'Idégenerering',
    'utforsking': 'Idéutforsking',
    'problemloesning': 'Problem/Løsning',
})


def normalize_stage(raw):
    """Map a free-text stage name to its canonical label, or ``None``.

    Case, diacritics, spacing and the slash are ignored, so ``problem losning``
    and ``PROBLEM/LØSNING`` both give ``Problem/Løsning``.
    """
    if not isinstance(raw, str):
        return None
    key = _stage_key(raw)
    if not key:
        return None
    return _STAGE_ALIASES.get(key)


def image_attachments(urls, stamp=None):
    stamp = stamp or date.today().strftime('%Y%m%d')
    return [
        {'url': url, 'filename': f'idea-{stamp}-{i}.jpg'}
        for i, url in enumerate(urls)
    ]


def to_fields(data, image_urls=None, created=None):
    """Translate cleaned idea data to ``{field_id: value}``.

    Only keys present in ``data`` are written, so the same function serves
    create and partial update. ``created`` adds the submission date.
    """
    fields = {}
    for name in TEXT_FIELDS + RATING_FIELDS:
        if name in data and data[name] not in (None, ''):
            fields[FIELD_IDS[name]] = data[name]
    if image_urls:
        fields[FIELD_IDS['images']] = image_attachments(image_urls)
    if created:
        fields[FIELD_IDS['date_submitted']] = created.isoformat()
    return fields


def idea_from_record(record):
    """Decode a record fetched with ``returnFieldsByFieldId`` to readable keys."""
    raw = record.get('fields') or {}
    idea = {'id': record.get('id'), 'created_time': record.get('createdTime')}
    for name, field_id in FIELD_IDS.items():
        if field_id not in raw:
            continue
        value = raw[field_id]
        if name == 'images':
            value = [a.get('url') for a in value if isinstance(a, dict) and a.get('url')]
        idea[name] = value
    return idea
