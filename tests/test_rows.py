import pytest

from editstate import RowTable
from editstate import rows as R
from errors import InvalidRowOperation


def _hydrated(*serials):
    t = RowTable()
    for n in serials:
        t = R.append_hydrated(t, f"id-{n}", {"serverName": f"SRV-{n}"}, n)
    return t


def _serials(table):
    return [r.serial_no for r in table.visible_rows()]


def test_add_row_is_pending_and_new():
    t = _hydrated(1, 2)
    t2 = R.add_row(t, {"serverName": "SRV-X"})

    row = t2.rows[-1]
    assert row.identity.is_persisted is False
    assert row.flags.is_new is True
    assert row.serial_no == 3
    assert len(t.rows) == 2  # input untouched


def test_new_rows_never_collide_with_persisted_ids():
    t = R.add_row(R.add_row(_hydrated(1), None), None)
    ids = [r.identity.row_id for r in t.rows]
    assert ids == ["id-1", None, None]
    assert len({r.handle for r in t.rows}) == 3


def test_edit_persisted_row_tracks_changed_fields():
    t = _hydrated(1)
    h = t.rows[0].handle
    t = R.edit_field(t, h, "result", "pass-id")
    t = R.edit_field(t, h, "result", "fail-id")

    row = t.find(h)
    assert row.flags.is_modified is True
    assert row.changed == ["result"]
    assert row.fields["result"] == "fail-id"


def test_edit_pending_row_keeps_flags():
    t = R.add_row(RowTable())
    h = t.rows[0].handle
    t = R.edit_field(t, h, "serverName", "SRV-9")
    assert t.find(h).flags.is_new is True
    assert t.find(h).flags.is_modified is False


def test_delete_pending_row_removes_it():
    t = R.add_row(_hydrated(1))
    h = t.rows[-1].handle
    t = R.soft_delete(t, h)
    assert t.find(h) is None
    assert R.diff(t).is_empty


def test_restore_after_delete_is_identity():
    t = _hydrated(1, 2, 3)
    h = t.rows[1].handle
    restored = R.restore(R.soft_delete(t, h), h)
    assert restored == t

    edited = R.edit_field(t, h, "serverName", "SRV-B")
    assert R.restore(R.soft_delete(edited, h), h) == edited


def test_stable_renumbering_out_of_order_feed():
    t = R.renumber(R.sort_by_serial(_hydrated(3, 1, 2)))
    assert _serials(t) == [1, 2, 3]
    assert [r.identity.row_id for r in t.visible_rows()] == ["id-1", "id-2", "id-3"]

    h2 = t.handle_for_serial(2)
    deleted = R.renumber(R.soft_delete(t, h2))
    assert _serials(deleted) == [1, 2]
    assert deleted.find(h2).serial_no == 2  # frozen

    back = R.renumber(R.restore(deleted, h2))
    assert _serials(back) == [1, 2, 3]
    assert [r.identity.row_id for r in back.visible_rows()] == ["id-1", "id-2", "id-3"]


def test_diff_is_minimal():
    t = _hydrated(1, 2, 3)
    h1, h2 = t.rows[0].handle, t.rows[1].handle
    t = R.edit_field(t, h1, "result", "pass-id")
    t = R.soft_delete(t, h2)
    t = R.add_row(t, {"serverName": "SRV-NEW"})
    t = R.add_row(t, {"serverName": "DEFAULT"}, synthesized=True)

    d = R.diff(t)
    assert [r.identity.row_id for r in d.updates] == ["id-1"]
    assert [r.identity.row_id for r in d.deletes] == ["id-2"]
    assert [r.fields["serverName"] for r in d.creates] == ["SRV-NEW"]


def test_invalid_operations_raise():
    t = _hydrated(1)
    h = t.rows[0].handle
    with pytest.raises(InvalidRowOperation):
        R.restore(t, h)
    with pytest.raises(InvalidRowOperation):
        R.edit_field(t, 999, "serverName", "x")

    deleted = R.soft_delete(t, h)
    with pytest.raises(InvalidRowOperation):
        R.soft_delete(deleted, h)
    with pytest.raises(ValueError):
        R.edit_field(deleted, h, "serverName", "x")


def test_moved_persisted_rows_are_sent_with_their_new_serial():
    t = _hydrated(1, 2, 3)
    h1 = t.rows[0].handle
    t = R.renumber(R.soft_delete(t, h1))
    t = R.add_row(t, {"serverName": "SRV-NEW"})

    d = R.diff(t)
    assert [(r.identity.row_id, r.serial_no) for r in d.updates] == [("id-2", 1), ("id-3", 2)]
    assert [r.serial_no for r in d.creates] == [3]
    assert [r.identity.row_id for r in d.deletes] == ["id-1"]


def test_gapped_feed_without_edits_sends_nothing():
    t = R.renumber(R.sort_by_serial(_hydrated(7, 1, 4)))
    assert _serials(t) == [1, 2, 3]
    assert R.diff(t).is_empty
