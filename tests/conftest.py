# tests/conftest.py
import copy
import json
import sys
from pathlib import Path

import httpx
import pytest

# Make "src" importable
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from api_client import ReportApiClient
from lookups import LookupCache
from sections import SectionRegistry
from wizard import WizardController


RAW_REPORT = {
    "reportForm": {"id": "rf-1", "jobNo": "JOB-001"},
    "stationNameWarehouseName": "Station A",
    "systemNameWarehouseName": "SCADA",
    "pmReportFormServer": {
        "id": "pm-1",
        "reportFormID": "rf-1",
        "projectNo": "P-9",
        "customer": "PUB",
        "reportTitle": "Server PM Report",
        "pmReportFormTypeID": "type-1",
        "pmReportFormTypeName": "Server",
        "dateOfService": "2025-01-02T09:00:00",
        "attendedBy": "J. Tan",
        "witnessedBy": "",
        "startDate": "2025-01-02T09:00:00",
        "completionDate": None,
        "remarks": "",
    },
    # current shape, serials out of order
    "pmServerHealths": [{
        "id": "sh-1",
        "remarks": "all good",
        "details": [
            {"id": "d-3", "serialNo": "3", "serverName": "SRV-C", "resultStatusID": "pass-id", "remarks": ""},
            {"id": "d-1", "serialNo": "1", "serverName": "SRV-A", "resultStatusID": "pass-id", "remarks": ""},
            {"id": "d-2", "serialNo": "2", "serverName": "SRV-B", "resultStatusID": "", "remarks": ""},
        ],
    }],
    "pmServerFailOvers": [{
        "id": "fo-1",
        "remarks": "",
        "details": [
            {"id": "r1", "serialNo": "1", "fromServer": "SCA-SR1", "toServer": "SCA-SR2",
             "expectedResult": "SCA-SR2 will become master", "yesNoStatusID": ""},
        ],
    }],
    # legacy shape
    "networkHealthData": {"dateChecked": "2025-01-02", "yesNoStatusID": "yes-id", "remarks": "legacy feed"},
}

VOCABULARIES = {
    "YesNoStatus": [{"id": "yes-id", "name": "Yes"}, {"id": "no-id", "name": "No"}],
    "ResultStatus": [{"id": "pass-id", "name": "Pass"}, {"id": "fail-id", "name": "Fail"}],
    "ServerDiskStatus": [{"id": "ok-id", "name": "Healthy"}, {"id": "bad-id", "name": "Unhealthy"}],
    "ASAFirewallStatus": [{"id": "norm-id", "name": "Normal"}, {"id": "abn-id", "name": "Abnormal"}],
}


class FakeBackend:
    """Records requests and answers like the report API."""

    def __init__(self, report=None, vocabularies=None):
        self.report = copy.deepcopy(RAW_REPORT if report is None else report)
        self.vocabularies = copy.deepcopy(VOCABULARIES if vocabularies is None else vocabularies)
        self.requests = []
        self.put_status = 200
        self.fail_report = False

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.replace("/api", "", 1)
        name = path.strip("/")
        if request.method == "GET" and name in self.vocabularies:
            return httpx.Response(200, json=self.vocabularies[name])
        if request.method == "GET" and path.startswith("/pmreportformserver/"):
            if self.fail_report:
                return httpx.Response(500, json={"message": "boom"})
            return httpx.Response(200, json=self.report)
        if request.method == "PUT" and path.startswith("/pmreportformserver/"):
            if self.put_status != 200:
                return httpx.Response(self.put_status, text="rejected")
            return httpx.Response(200, json={"ok": True})
        if request.method == "POST" and path == "/reportformimage/upload":
            return httpx.Response(200, json={"id": "img-1"})
        if request.method == "DELETE" and path.startswith("/reportformimage/"):
            return httpx.Response(204)
        return httpx.Response(404)

    def puts(self):
        return [json.loads(r.content) for r in self.requests if r.method == "PUT"]


@pytest.fixture(scope="session")
def registry():
    # Built-in section specs from sections/specs.py
    return SectionRegistry()


@pytest.fixture
def raw_report():
    return copy.deepcopy(RAW_REPORT)


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def api(backend):
    client = ReportApiClient("http://test/api", transport=httpx.MockTransport(backend.handler))
    yield client
    client.close()


@pytest.fixture
def controller(api, registry):
    ctl = WizardController(api, registry, lookups=LookupCache(api.get_vocabulary))
    ctl.load("rf-1")
    return ctl
