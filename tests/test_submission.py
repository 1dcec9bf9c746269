from editstate import ReportEditState, LoadReport, HydrateSection, SetScalarField, AddRow, EditRowField, reduce
from lookups import LookupOption
from submission import SubmissionBuilder


def _loaded(registry, raw):
    s = reduce(ReportEditState(), LoadReport("rf-1", raw), registry)
    for key in s.steps:
        s = reduce(s, HydrateSection(key, raw), registry)
    return s


def test_unedited_report_is_header_only(registry, raw_report):
    sb = SubmissionBuilder(registry)
    data = sb.build(_loaded(registry, raw_report))
    assert data == {
        "PMReportFormTypeID": "type-1",
        "ProjectNo": "P-9",
        "Customer": "PUB",
        "ReportTitle": "Server PM Report",
    }
    assert sb.is_empty(data)


def test_sections_fold_under_their_submit_keys(registry, raw_report):
    s = _loaded(registry, raw_report)
    s = reduce(s, SetScalarField("signOff", "witnessedBy", "K. Lim"), registry)
    s = reduce(s, AddRow("hotFixes", "hotfixes", {"machineName": "SCA-SR1", "done": "Pass"}), registry)

    vocab = {"ResultStatus": (LookupOption("pass-id", "Pass"), LookupOption("fail-id", "Fail"))}
    data = SubmissionBuilder(registry).build(s, vocab)

    assert data["SignOffData"] == {"ID": "pm-1", "WitnessedBy": "K. Lim"}
    rows = data["hotFixesData"]["Details"]
    assert rows == [{
        "ID": None, "SerialNo": "1", "ServerName": "SCA-SR1", "LatestHotFixsApplied": "",
        "ResultStatusID": "pass-id", "Remarks": "", "IsNew": True,
    }]
    assert "serverHealthData" not in data


def test_validate_reports_missing_key_fields(registry, raw_report):
    s = _loaded(registry, raw_report)
    s = reduce(s, AddRow("diskUsage", "disks", {"serverName": "SRV-A"}), registry)
    handle = s.sections["serverHealth"].collections["servers"].handle_for_serial(1)
    s = reduce(s, EditRowField("serverHealth", "servers", handle, "serverName", " "), registry)

    ok, errors = SubmissionBuilder(registry).validate(s)
    assert not ok
    assert "Server Health Check row 1: missing required 'Server Name'" in errors
    assert "Disk Usage Check row 1: missing required 'Disk'" in errors


def test_dumps_compact_and_pretty(registry):
    sb = SubmissionBuilder(registry)
    assert sb.dumps({"a": 1}, pretty=False) == '{"a":1}'
    assert sb.dumps({"a": 1}) == '{\n  "a": 1\n}'
