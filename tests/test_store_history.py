from editstate import Store
from editstate import LoadReport, HydrateSection, SetScalarField, AddRow, NextStep


def test_store_apply_undo_redo(registry, raw_report):
    store = Store(registry=registry)

    store.apply(LoadReport("rf-1", raw_report), record=False)
    store.apply(HydrateSection("serverHealth", raw_report), record=False)
    assert store.can_undo is False

    store.apply(AddRow("serverHealth", "servers", {"serverName": "SRV-D"}))
    store.apply(SetScalarField("serverHealth", "remarks", "rack 2 added"))

    servers = store.state.sections["serverHealth"].collections["servers"]
    assert len(servers.visible_rows()) == 4

    store.undo()
    assert store.state.sections["serverHealth"].remarks == "all good"

    store.undo()
    servers = store.state.sections["serverHealth"].collections["servers"]
    assert len(servers.visible_rows()) == 3

    store.redo()
    servers = store.state.sections["serverHealth"].collections["servers"]
    assert len(servers.visible_rows()) == 4
    assert store.can_redo is True


def test_new_edit_clears_redo(registry, raw_report):
    store = Store(registry=registry)
    store.apply(LoadReport("rf-1", raw_report), record=False)
    store.apply(HydrateSection("signOff", raw_report), record=False)

    store.apply(SetScalarField("signOff", "remarks", "a"))
    store.undo()
    store.apply(SetScalarField("signOff", "remarks", "b"))
    assert store.can_redo is False


def test_reset_drops_session(registry, raw_report):
    store = Store(registry=registry)
    store.apply(LoadReport("rf-1", raw_report))
    store.apply(NextStep())
    store.reset()
    assert store.state.report_id is None
    assert store.can_undo is False


def test_history_keeps_only_the_last_snapshots(registry, raw_report):
    store = Store(registry=registry, max_history=3)
    store.apply(LoadReport("rf-1", raw_report), record=False)
    store.apply(HydrateSection("signOff", raw_report), record=False)
    for i in range(5):
        store.apply(SetScalarField("signOff", "remarks", f"r{i}"))

    undos = 0
    while store.can_undo:
        store.undo()
        undos += 1
    assert undos == 3
    assert store.state.sections["signOff"].remarks == "r1"

    assert Store(registry=registry).max_history == 10
