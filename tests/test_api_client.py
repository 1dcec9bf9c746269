import httpx
import pytest

from api_client import ReportApiClient
from errors import ApiError


def test_get_report_and_vocabulary(api):
    report = api.get_server_pm_report("rf-1")
    assert report["reportForm"]["jobNo"] == "JOB-001"
    assert api.get_vocabulary("ASAFirewallStatus")[0]["name"] == "Normal"
    with pytest.raises(KeyError):
        api.get_vocabulary("Colour")


def test_update_sends_json(api, backend):
    api.update_server_pm_report("rf-1", {"ProjectNo": "P-9"})
    assert backend.puts() == [{"ProjectNo": "P-9"}]
    assert backend.requests[-1].url.path == "/api/pmreportformserver/rf-1"


def test_http_errors_propagate(api, backend):
    backend.fail_report = True
    with pytest.raises(httpx.HTTPStatusError):
        api.get_server_pm_report("rf-1")


def test_non_object_report_is_an_api_error():
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json=[1, 2]))
    with ReportApiClient("http://test/api", transport=transport) as client:
        with pytest.raises(ApiError):
            client.get_server_pm_report("rf-1")


def test_bearer_token_header():
    seen = {}

    def handler(request):
        seen["auth"] = request.headers.get("Authorization")
        return httpx.Response(200, json=[])

    with ReportApiClient("http://test/api", token="t0k", transport=httpx.MockTransport(handler)) as client:
        client.get_vocabulary("YesNoStatus")
    assert seen["auth"] == "Bearer t0k"


def test_upload_replaces_previous_image(api, backend):
    out = api.upload_image("rf-1", "img-type", b"\x89PNG", "rack.png",
                           section_name="serverHealth", replaces_image_id="old-1")
    assert out == {"id": "img-1"}
    methods = [(r.method, r.url.path) for r in backend.requests]
    assert methods == [("DELETE", "/api/reportformimage/old-1"), ("POST", "/api/reportformimage/upload")]
    body = backend.requests[-1].content
    assert b'name="ReportFormId"' in body
    assert b'name="SectionName"' in body
    assert b'filename="rack.png"' in body


def test_non_json_get_is_an_api_error():
    transport = httpx.MockTransport(lambda request: httpx.Response(200, text="<html>gateway</html>"))
    with ReportApiClient("http://test/api", transport=transport) as client:
        with pytest.raises(ApiError):
            client.get_server_pm_report("rf-1")


def test_update_accepts_plain_text_success_body():
    transport = httpx.MockTransport(lambda request: httpx.Response(200, text="Updated"))
    with ReportApiClient("http://test/api", transport=transport) as client:
        assert client.update_server_pm_report("rf-1", {"ProjectNo": "P-9"}) == "Updated"
