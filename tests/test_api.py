from fastapi.testclient import TestClient

from hl7_processor.config import BuildInfo, Settings
from hl7_processor.core.codec import parse
from hl7_processor.main import create_app


def test_parse_endpoint_returns_segments(client: TestClient, sample_adt: str):
    r = client.post("/parse", content=sample_adt, headers={"Content-Type": "application/hl7-v2"})
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["message"] == "HL7 message parsed successfully"
    segments = body["data"]["segments"]
    assert [s["type"] for s in segments] == ["MSH", "PID", "PV1"]
    assert segments[1]["fields"][4] == "Doe^John"


def test_parse_endpoint_tolerates_extra_separators(client: TestClient):
    r = client.post("/parse", content="MSH|a|b\r\rPID|c\r")
    assert r.status_code == 200
    assert r.json()["data"] == {
        "segments": [
            {"type": "MSH", "fields": ["a", "b"]},
            {"type": "PID", "fields": ["c"]},
        ]
    }


def test_parse_endpoint_empty_body(client: TestClient):
    r = client.post("/parse", content=b"")
    assert r.status_code == 200
    assert r.json()["data"] == {"segments": []}


def test_parse_endpoint_rejects_undecodable_body(client: TestClient):
    r = client.post("/parse", content=b"MSH|\xff\xfe\r")
    assert r.status_code == 400
    body = r.json()
    assert body["success"] is False
    assert body["message"].startswith("Error parsing HL7 message: error decoding HL7 input")
    assert "data" not in body


def test_parse_endpoint_rejects_oversized_body():
    client = TestClient(create_app(settings=Settings(MAX_MESSAGE_BYTES=16)))
    r = client.post("/parse", content="MSH|" + "x" * 32)
    assert r.status_code == 413
    assert r.json() == {"success": False, "message": "Request body too large"}


def test_parse_endpoint_rejects_oversized_chunked_body():
    client = TestClient(create_app(settings=Settings(MAX_MESSAGE_BYTES=16)))
    chunks = iter([b"MSH|", b"x" * 8, b"x" * 8, b"x" * 8])
    r = client.post("/parse", content=chunks)
    assert r.status_code == 413
    assert r.json() == {"success": False, "message": "Request body too large"}


def test_parse_endpoint_accepts_chunked_body_within_limit(client: TestClient):
    r = client.post("/parse", content=iter([b"MSH|a", b"|b\r", b"PID|c\r"]))
    assert r.status_code == 200
    assert [s["type"] for s in r.json()["data"]["segments"]] == ["MSH", "PID"]


def test_parse_wrong_method(client: TestClient):
    r = client.get("/parse")
    assert r.status_code == 405
    assert r.json() == {"success": False, "message": "Method not allowed"}


def test_generate_wrong_method(client: TestClient):
    r = client.post("/generate")
    assert r.status_code == 405
    assert r.json()["message"] == "Method not allowed"


def test_unknown_route(client: TestClient):
    r = client.get("/nope")
    assert r.status_code == 404
    assert r.json() == {"success": False, "message": "Not found"}


def test_generate_json(client: TestClient):
    r = client.get("/generate")
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["message"] == "HL7 message generated successfully"
    msh, pid = body["data"]["segments"]
    assert msh["type"] == "MSH"
    assert msh["fields"][0] == "^~\\&"
    assert msh["fields"][7] == "ADT^A01"
    assert pid == {"type": "PID", "fields": ["", "12345", "", "", "Doe^John", "", "19800101", "M"]}


def test_generate_text_is_wire_format(client: TestClient):
    r = client.get("/generate", params={"format": "text"})
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("application/hl7-v2")
    assert r.text.startswith("MSH|^~\\&|SENDING_APP|")
    assert r.text.endswith("\r")
    message = parse(r.text)
    assert [s.type for s in message] == ["MSH", "PID"]


def test_generate_unknown_format(client: TestClient):
    r = client.get("/generate", params={"format": "xml"})
    assert r.status_code == 422
    body = r.json()
    assert body["success"] is False
    assert body["message"].startswith("Invalid request body")


def test_serialize_endpoint(client: TestClient):
    payload = {
        "segments": [
            {"type": "MSH", "fields": ["^~\\&", "APP", "FAC"]},
            {"type": "PID", "fields": ["", "123", "", "", "Doe^John"]},
        ]
    }
    r = client.post("/serialize", json=payload)
    assert r.status_code == 200
    assert r.text == "MSH|^~\\&|APP|FAC\rPID||123|||Doe^John\r"


def test_serialize_accepts_capitalised_keys(client: TestClient):
    payload = {
        "Segments": [
            {"Type": "MSH", "Fields": ["^~\\&", "APP"]},
            {"Type": "PID", "Fields": ["", "123"]},
        ]
    }
    r = client.post("/serialize", json=payload)
    assert r.status_code == 200
    assert r.text == "MSH|^~\\&|APP\rPID||123\r"


def test_serialize_then_parse_round_trip(client: TestClient):
    generated = client.get("/generate").json()["data"]
    text = client.post("/serialize", json=generated).text
    reparsed = client.post("/parse", content=text).json()["data"]
    assert reparsed == generated


def test_serialize_rejects_invalid_body(client: TestClient):
    r = client.post("/serialize", json={"segments": [{"fields": ["x"]}]})
    assert r.status_code == 422
    assert r.json()["success"] is False


def test_health(client: TestClient):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"success": True, "message": "Service is healthy"}


def test_version_reports_injected_build_info():
    build_info = BuildInfo(version="2.3.4", build_date="2024-01-01_00:00:00")
    client = TestClient(create_app(build_info=build_info))
    r = client.get("/version")
    assert r.status_code == 200
    assert r.json() == {"version": "2.3.4", "buildDate": "2024-01-01_00:00:00"}


def test_version_from_settings():
    settings = Settings(HL7_VERSION="9.9.9", HL7_BUILD_DATE="today")
    client = TestClient(create_app(settings=settings))
    assert client.get("/version").json() == {"version": "9.9.9", "buildDate": "today"}


def test_metrics_count_parses(client: TestClient, sample_adt: str):
    client.post("/parse", content=sample_adt)
    client.post("/parse", content=b"\xff")
    client.get("/generate", params={"format": "text"})

    r = client.get("/metrics")
    assert r.status_code == 200
    assert 'hl7_messages_parsed_total{status="ok"} 1.0' in r.text
    assert 'hl7_messages_parsed_total{status="error"} 1.0' in r.text
    assert 'hl7_segments_parsed_total{segment_type="PID"} 1.0' in r.text
    assert 'hl7_messages_generated_total{format="text"} 1.0' in r.text
    assert "hl7_parse_duration_seconds_count 2.0" in r.text


def test_segment_type_series_stay_bounded(client: TestClient):
    for batch in range(5):
        body = "".join(f"Z{batch:02d}{i:05d}|x\r" for i in range(200))
        body += "".join(f"Q{batch:02d}{i:05d}|x\r" for i in range(200))
        assert client.post("/parse", content=body).status_code == 200
    client.post("/parse", content="MSH|a\rPID|b\r")

    text = client.get("/metrics").text
    series = [line for line in text.splitlines() if line.startswith("hl7_segments_parsed_total{")]
    assert sorted(series) == sorted([
        'hl7_segments_parsed_total{segment_type="MSH"} 1.0',
        'hl7_segments_parsed_total{segment_type="PID"} 1.0',
        'hl7_segments_parsed_total{segment_type="Z"} 1000.0',
        'hl7_segments_parsed_total{segment_type="other"} 1000.0',
    ])


def test_correlation_id_echoed(client: TestClient):
    r = client.get("/health", headers={"X-Correlation-ID": "abc-123"})
    assert r.headers["X-Correlation-ID"] == "abc-123"


def test_request_id_header_used_as_correlation_id(client: TestClient):
    r = client.get("/health", headers={"X-Request-ID": "req-456"})
    assert r.headers["X-Correlation-ID"] == "req-456"


def test_correlation_id_preferred_over_request_id(client: TestClient):
    r = client.get("/health", headers={"X-Correlation-ID": "corr-1", "X-Request-ID": "req-2"})
    assert r.headers["X-Correlation-ID"] == "corr-1"


def test_correlation_id_generated(client: TestClient):
    r = client.get("/health")
    assert len(r.headers["X-Correlation-ID"]) == 36
