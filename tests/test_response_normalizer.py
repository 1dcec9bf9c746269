from editstate import SectionPhase, SetScalarField, EditRowField, reduce_section
from lookups import LookupOption
from sections import detect_shape, normalize, denormalize, extract_metadata


def test_detects_current_legacy_and_empty(registry, raw_report):
    assert detect_shape(raw_report, registry.get_spec("serverHealth")).kind == "current"
    assert detect_shape(raw_report, registry.get_spec("networkHealth")).kind == "legacy"
    assert detect_shape(raw_report, registry.get_spec("timeSync")).kind == "empty"
    assert detect_shape(None, registry.get_spec("timeSync")).kind == "empty"
    # sign-off record is a single object, not a list
    assert detect_shape(raw_report, registry.get_spec("signOff")).kind == "current"


def test_legacy_object_without_content_is_empty(registry):
    raw = {"networkHealthData": {"dateChecked": "", "yesNoStatusID": None, "remarks": ""}}
    assert detect_shape(raw, registry.get_spec("networkHealth")).kind == "empty"


def test_current_shape_sorted_and_renumbered(registry, raw_report):
    sec = normalize(raw_report, "serverHealth", registry)
    assert sec.phase == SectionPhase.HYDRATED
    assert sec.source_shape == "current"
    assert sec.record_id == "sh-1"
    assert sec.remarks == "all good"

    rows = sec.collections["servers"].visible_rows()
    assert [r.serial_no for r in rows] == [1, 2, 3]
    assert [r.fields["serverName"] for r in rows] == ["SRV-A", "SRV-B", "SRV-C"]
    assert all(r.identity.is_persisted and not r.flags.is_new for r in rows)


def test_legacy_shape_reads_flat_object(registry, raw_report):
    sec = normalize(raw_report, "networkHealth", registry)
    assert sec.source_shape == "legacy"
    assert sec.scalar_fields == {"dateChecked": "2025-01-02", "result": "yes-id", "remarks": "legacy feed"}


def test_legacy_rows_fall_back_to_local_names(registry):
    raw = {"timeSyncData": {"remarks": "", "timeSyncData": [
        {"machineName": "HIS-1", "timeSyncResult": "Pass"},
        {"machineName": "HIS-2"},
    ]}}
    sec = normalize(raw, "timeSync", registry)
    rows = sec.collections["machines"].visible_rows()
    assert [r.fields["machineName"] for r in rows] == ["HIS-1", "HIS-2"]
    assert rows[0].fields["timeSyncResult"] == "Pass"
    assert rows[1].fields["timeSyncResult"] == ""
    # no id from the backend: these are still to be created
    assert all(r.flags.is_new for r in rows)


def test_empty_shape_synthesizes_default_rows(registry):
    sec = normalize({}, "asaFirewall", registry)
    rows = sec.collections["commands"].visible_rows()
    assert [r.fields["commandInput"] for r in rows] == ["show cpu usage", "show environment"]
    assert all(r.synthesized for r in rows)
    # untouched defaults are not sent
    assert denormalize(sec, "asaFirewall", registry) == {}


def test_edited_default_row_becomes_a_create(registry):
    sec = normalize({}, "autoFailOver", registry)
    handle = sec.collections["scenarios"].rows[0].handle
    sec = reduce_section(sec, EditRowField("autoFailOver", "scenarios", handle, "result", "yes-id"), registry)

    out = denormalize(sec, "autoFailOver", registry)
    assert len(out["Details"]) == 1
    create = out["Details"][0]
    assert create["ID"] is None
    assert create["IsNew"] is True
    assert create["FromServer"] == "SCA-SR1"
    assert create["YesNoStatusID"] == "yes-id"


def test_zero_edits_round_trip_is_empty(registry, raw_report):
    for key in registry.steps():
        assert denormalize(normalize(raw_report, key, registry), key, registry) == {}


def test_one_edit_gives_one_update(registry, raw_report):
    sec = normalize(raw_report, "serverHealth", registry)
    handle = sec.collections["servers"].handle_for_serial(2)
    sec = reduce_section(sec, EditRowField("serverHealth", "servers", handle, "result", "fail-id"), registry)

    out = denormalize(sec, "serverHealth", registry)
    assert out == {
        "ID": "sh-1",
        "Details": [{"ID": "d-2", "SerialNo": "2", "ResultStatusID": "fail-id"}],
    }


def test_changed_scalar_only(registry, raw_report):
    sec = normalize(raw_report, "signOff", registry)
    sec = reduce_section(sec, SetScalarField("signOff", "witnessedBy", "K. Lim"), registry)
    assert denormalize(sec, "signOff", registry) == {"ID": "pm-1", "WitnessedBy": "K. Lim"}


def test_status_names_resolve_to_ids(registry, raw_report):
    sec = normalize(raw_report, "networkHealth", registry)
    sec = reduce_section(sec, SetScalarField("networkHealth", "result", "no"), registry)
    vocab = {"YesNoStatus": (LookupOption("yes-id", "Yes"), LookupOption("no-id", "No"))}
    assert denormalize(sec, "networkHealth", registry, vocab) == {"YesNoStatusID": "no-id"}


def test_metadata_fallbacks(raw_report):
    md = extract_metadata(raw_report)
    assert md["reportFormID"] == "rf-1"
    assert md["jobNo"] == "JOB-001"
    assert md["stationName"] == "Station A"
    assert md["systemDescription"] == "SCADA"
    assert md["customer"] == "PUB"

    bare = extract_metadata({"pmReportFormServer": {"stationName": "Depot", "reportFormID": "rf-9"}})
    assert bare["stationName"] == "Depot"
    assert bare["reportFormID"] == "rf-9"
    assert bare["reportTitle"] == "Server Preventive Maintenance Report"
