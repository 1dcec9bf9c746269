from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from errors import ApiError

log = logging.getLogger(__name__)

DEFAULT_TIMEOUT = httpx.Timeout(10.0, connect=5.0)

VOCABULARY_ENDPOINTS = {
    "YesNoStatus": "/YesNoStatus",
    "ResultStatus": "/ResultStatus",
    "ServerDiskStatus": "/ServerDiskStatus",
    "ASAFirewallStatus": "/ASAFirewallStatus",
}


class ReportApiClient:
    """Thin wrapper around httpx for the report backend; pass a transport to fake it in tests."""

    def __init__(self, base_url: str, token: Optional[str] = None,
                 timeout: Any = DEFAULT_TIMEOUT, transport: Optional[httpx.BaseTransport] = None) -> None:
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.Client(base_url=base_url, timeout=timeout, headers=headers, transport=transport)

    def get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        r = self._client.get(path, params=params)
        r.raise_for_status()
        try:
            return r.json()
        except ValueError as e:
            raise ApiError(f"GET {path}: response is not JSON ({r.headers.get('content-type', 'no content type')})") from e

    # ----- lookups -----

    def get_vocabulary(self, name: str) -> List[Dict[str, Any]]:
        path = VOCABULARY_ENDPOINTS.get(name)
        if path is None:
            raise KeyError(f"No endpoint for vocabulary {name}")
        data = self.get_json(path)
        if not isinstance(data, list):
            raise ApiError(f"{name}: expected a list, got {type(data).__name__}")
        return data

    # ----- report -----

    def get_server_pm_report(self, report_id: str) -> Dict[str, Any]:
        data = self.get_json(f"/pmreportformserver/{report_id}")
        if not isinstance(data, dict):
            raise ApiError(f"Report {report_id}: expected an object, got {type(data).__name__}")
        return data

    def update_server_pm_report(self, report_id: str, payload: Dict[str, Any]) -> Any:
        r = self._client.put(f"/pmreportformserver/{report_id}", json=payload)
        r.raise_for_status()
        log.info("report %s updated (%d)", report_id, r.status_code)
        return _body(r)

    # ----- images (side channel, not reconciled) -----

    def upload_image(self, report_id: str, image_type_id: str, content: bytes, filename: str,
                     section_name: Optional[str] = None, replaces_image_id: Optional[str] = None) -> Any:
        """Upload a report image; when replacing, the old image is deleted first."""
        if replaces_image_id:
            self.delete_image(replaces_image_id)
        data = {"ReportFormId": str(report_id), "ReportFormImageTypeId": str(image_type_id)}
        if section_name:
            data["SectionName"] = section_name
        files = {"ImageFile": (filename, content)}
        r = self._client.post("/reportformimage/upload", data=data, files=files)
        r.raise_for_status()
        return _body(r)

    def delete_image(self, image_id: str) -> None:
        r = self._client.delete(f"/reportformimage/{image_id}")
        r.raise_for_status()

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "ReportApiClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


def _body(r: httpx.Response) -> Any:
    """Success body of a write: parsed JSON, the plain text when it isn't JSON, None when empty."""
    if not r.content:
        return None
    try:
        return r.json()
    except ValueError:
        return r.text
