import base64
import json

import pytest
import requests

from tyredesk.core.errors import ExtractionError
from tyredesk.ingestion import extraction_client as ec
from tyredesk.ingestion.extraction_client import ExtractionClient


class FakeResponse:
    def __init__(self, payload=None, status_code=200, text=None):
        self._payload = payload
        self.status_code = status_code
        self.text = text if text is not None else json.dumps(payload)

    def json(self):
        if self._payload is None:
            raise json.JSONDecodeError("Expecting value", self.text, 0)
        return self._payload


@pytest.fixture
def captured(monkeypatch):
    calls = []

    def install(response=None, exc=None):
        def fake_post(url, json=None, headers=None, timeout=None):
            calls.append({"url": url, "json": json, "headers": headers, "timeout": timeout})
            if exc is not None:
                raise exc
            return response

        monkeypatch.setattr(ec.requests, "post", fake_post)
        return calls

    return install


def client(api_key="svc-key"):
    return ExtractionClient(url="http://extract.test/process-price-list", api_key=api_key, timeout=5)


OK_PAYLOAD = {
    "success": True,
    "message": "Successfully processed 2 tyre prices",
    "data": {
        "rows": [
            {"size": "205/55R16", "brand": "Michelin", "model": "Primacy 4", "cost": 89.5},
            {"size": "bad", "brand": "X", "model": "Y", "cost": 1},
        ],
        "invalidRows": ["row 7: missing cost"],
        "total": 3,
    },
}


def test_request_body_and_headers(captured):
    calls = captured(FakeResponse(OK_PAYLOAD))
    client().extract(b"%PDF-1.4 data", "sup-1", "prijslijst.pdf")

    call = calls[0]
    assert call["url"] == "http://extract.test/process-price-list"
    assert call["timeout"] == 5
    assert call["headers"]["Authorization"] == "Bearer svc-key"
    body = call["json"]
    assert body["supplierId"] == "sup-1"
    assert body["fileName"] == "prijslijst.pdf"
    prefix, payload = body["file"].split(",", 1)
    assert prefix == "data:application/pdf;base64"
    assert base64.b64decode(payload) == b"%PDF-1.4 data"


def test_explicit_content_type_and_no_key(captured):
    calls = captured(FakeResponse(OK_PAYLOAD))
    client(api_key=None).extract(b"a;b", "sup-1", "list.csv", content_type="text/csv")
    assert calls[0]["json"]["file"].startswith("data:text/csv;base64,")
    assert "Authorization" not in calls[0]["headers"]


def test_rows_are_returned_untouched(captured):
    captured(FakeResponse(OK_PAYLOAD))
    result = client().extract(b"x", "sup-1", "list.xlsx")
    # validation happens later, so the bad row is still here
    assert len(result.rows) == 2
    assert result.total == 3
    assert result.service_invalid_rows == ["row 7: missing cost"]
    assert result.message == "Successfully processed 2 tyre prices"


def test_service_failure_message_is_kept(captured):
    captured(FakeResponse({"success": False, "message": "OpenAI API error: quota"}, status_code=500))
    with pytest.raises(ExtractionError) as exc:
        client().extract(b"x", "sup-1", "list.pdf")
    assert exc.value.message == "OpenAI API error: quota"
    assert exc.value.meta["status_code"] == 500


def test_empty_rows(captured):
    captured(FakeResponse({"success": True, "message": "", "data": {"rows": [], "total": 0}}))
    with pytest.raises(ExtractionError):
        client().extract(b"x", "sup-1", "list.pdf")


def test_missing_data(captured):
    captured(FakeResponse({"success": True, "message": "done"}))
    with pytest.raises(ExtractionError):
        client().extract(b"x", "sup-1", "list.pdf")


@pytest.mark.parametrize(
    "payload",
    [
        {"message": "no success flag"},
        {"success": True, "data": {"rows": "not a list"}},
        ["not", "an", "object"],
    ],
)
def test_unexpected_envelope(captured, payload):
    captured(FakeResponse(payload))
    with pytest.raises(ExtractionError) as exc:
        client().extract(b"x", "sup-1", "list.pdf")
    assert "unexpected format" in exc.value.message


def test_non_json_body(captured):
    captured(FakeResponse(None, status_code=502, text="<html>Bad gateway</html>"))
    with pytest.raises(ExtractionError) as exc:
        client().extract(b"x", "sup-1", "list.pdf")
    assert "HTTP 502" in exc.value.message


def test_timeout(captured):
    calls = captured(exc=requests.Timeout("read timed out"))
    with pytest.raises(ExtractionError) as exc:
        client().extract(b"x", "sup-1", "list.pdf")
    assert "in time" in exc.value.message
    # single attempt
    assert len(calls) == 1


def test_connection_error(captured):
    captured(exc=requests.ConnectionError("refused"))
    with pytest.raises(ExtractionError) as exc:
        client().extract(b"x", "sup-1", "list.pdf")
    assert "unreachable" in exc.value.message
