import pytest

from rebus.progress import SLOTS, ProgressStore, field_names


def test_defaults_without_row(fake_table):
    fake_table.first.return_value = None
    slots = ProgressStore(fake_table).get()
    assert [s.as_json() for s in slots] == [
        {'id': n, 'solved': False, 'scheduledDate': '', 'scheduledTime': ''} for n in SLOTS
    ]


def test_reads_slot_columns(fake_table):
    fake_table.first.return_value = {
        'id': 'recRow',
        'fields': {'rebus2_solved': True, 'rebus2_date': '2026-03-14', 'rebus2_time': '18:30'},
    }
    slots = ProgressStore(fake_table).get()
    assert slots[1].as_json() == {
        'id': 2, 'solved': True, 'scheduledDate': '2026-03-14', 'scheduledTime': '18:30',
    }
    assert not slots[0].solved


def test_set_creates_row_when_missing(fake_table):
    fake_table.first.return_value = None
    fake_table.create.return_value = {'id': 'recNew'}
    ProgressStore(fake_table).set(3, True, '2026-05-01', '19:00')
    fake_table.create.assert_called_once_with(
        {'rebus3_solved': True, 'rebus3_date': '2026-05-01', 'rebus3_time': '19:00'}
    )
    fake_table.update.assert_not_called()


def test_set_patches_only_its_slot(fake_table):
    fake_table.first.return_value = {'id': 'recRow', 'fields': {'rebus1_solved': True}}
    ProgressStore(fake_table).set(4, False)
    fake_table.update.assert_called_once_with('recRow', {'rebus4_solved': False})
    fake_table.create.assert_not_called()


@pytest.mark.parametrize('slot', [0, 6, '1'])
def test_set_rejects_unknown_slot(fake_table, slot):
    with pytest.raises(ValueError):
        ProgressStore(fake_table).set(slot, True)
    fake_table.first.assert_not_called()


def test_field_names():
    assert field_names(5) == ('rebus5_solved', 'rebus5_date', 'rebus5_time')
