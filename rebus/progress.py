"""Rebus progress kept in a single shared record-store row.

The row has three columns per puzzle slot: ``rebus{n}_solved`` (checkbox),
``rebus{n}_date`` (date) and ``rebus{n}_time`` (text). It is created on the
first write and patched in place afterwards; the last writer wins.
"""

import logging
from dataclasses import asdict, dataclass

from django.conf import settings

from core.airtable import AirtableTable

logger = logging.getLogger(__name__)

SLOTS = (1, 2, 3, 4, 5)


@dataclass
class ProgressSlot:
    id: int
    solved: bool = False
    scheduled_date: str = ''
    scheduled_time: str = ''

    def as_json(self):
        data = asdict(self)
        return {
            'id': data['id'],
            'solved': data['solved'],
            'scheduledDate': data['scheduled_date'],
            'scheduledTime': data['scheduled_time'],
        }


def field_names(slot):
    return f'rebus{slot}_solved', f'rebus{slot}_date', f'rebus{slot}_time'


def field_definitions():
    """Column definitions for the metadata API, three per slot."""
    definitions = []
    for slot in SLOTS:
        solved, date, time = field_names(slot)
        definitions += [
            {
                'name': solved,
                'type': 'checkbox',
                'description': f'Om rebus {slot} er løst',
                'options': {'icon': 'check', 'color': 'greenBright'},
            },
            {
                'name': date,
                'type': 'date',
                'description': f'Planlagt dato for rebus {slot}',
                'options': {'dateFormat': {'name': 'local', 'format': 'l'}},
            },
            {
                'name': time,
                'type': 'singleLineText',
                'description': f'Planlagt tidspunkt for rebus {slot}',
            },
        ]
    return definitions


def progress_table():
    return AirtableTable.from_settings(settings.AIRTABLE_PROGRESS_TABLE_ID)


class ProgressStore:
    def __init__(self, table):
        self.table = table

    def get(self):
        record = self.table.first()
        fields = (record or {}).get('fields') or {}
        slots = []
        for slot in SLOTS:
            solved, date, time = field_names(slot)
            slots.append(ProgressSlot(
                id=slot,
                solved=bool(fields.get(solved, False)),
                scheduled_date=fields.get(date) or '',
                scheduled_time=fields.get(time) or '',
            ))
        return slots

    def set(self, slot, solved, scheduled_date=None, scheduled_time=None):
        """Write one slot; the other slots' columns are left untouched."""
        if slot not in SLOTS:
            raise ValueError(f'Unknown progress slot: {slot}')
        solved_f, date_f, time_f = field_names(slot)
        fields = {solved_f: bool(solved)}
        if scheduled_date:
            fields[date_f] = scheduled_date
        if scheduled_time:
            fields[time_f] = scheduled_time

        record = self.table.first()
        if record:
            self.table.update(record['id'], fields)
            logger.debug('Progress slot %s updated on %s', slot, record['id'])
        else:
            created = self.table.create(fields)
            logger.info('Progress row created: %s', created.get('id'))
