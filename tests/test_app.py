from io import BytesIO
from urllib.parse import quote

from werkzeug.http import parse_options_header

import app as app_module
from app import create_app
from detection.config import AppConfig
from detection.report import ReportSigner
from detection.summary import generate_summary


def test_index_page(client):
    res = client.get("/")
    assert res.status_code == 200
    assert b"IoT Botnet Detection" in res.data


def test_health_endpoint(client):
    data = client.get("/api/health").get_json()
    assert data["status"] == "healthy"
    assert data["processing_delay_seconds"] == 0


def test_results_default_file(client):
    res = client.get("/api/results")
    assert res.status_code == 200

    data = res.get_json()
    assert data["fileName"] == "default.csv"
    assert data["totalDevices"] == 326
    assert data["cleanDevices"] + data["blockedDevices"] == data["totalDevices"]


def test_results_match_generator(client):
    data = client.get("/api/results?fileName=lab_capture.pcap").get_json()
    assert data == generate_summary("lab_capture.pcap").to_dict()


def test_analysis_with_json_payload(client):
    res = client.post("/api/analysis", json={
        "fileName": "traffic.csv",
        "size": 1536,
        "type": "text/csv",
        "config": {"model": "vgg-16", "confidence": 0.9, "batchSize": 64},
    })
    assert res.status_code == 200

    data = res.get_json()
    assert data["fileName"] == "traffic.csv"
    assert data["file"]["sizeLabel"] == "1.5 KB"
    assert data["config"] == {"model": "vgg-16", "confidence": 0.9, "batchSize": 64}
    assert data["summary"] == generate_summary("traffic.csv").to_dict()


def test_analysis_with_multipart_upload(client):
    res = client.post(
        "/api/analysis",
        data={"file": (BytesIO(b"a,b\n1,2\n"), "upload.csv"), "batchSize": "16"},
        content_type="multipart/form-data",
    )
    assert res.status_code == 200

    data = res.get_json()
    assert data["fileName"] == "upload.csv"
    assert data["file"]["size"] == 8
    assert data["config"]["batchSize"] == 16
    assert data["config"]["model"] == "resnet-50"


def test_analysis_accepts_empty_file_name(client):
    res = client.post("/api/analysis", json={"fileName": ""})
    assert res.status_code == 200
    assert res.get_json()["summary"]["scenario"] == "high-threat"


def test_analysis_without_file_is_rejected(client):
    res = client.post("/api/analysis", json={})
    assert res.status_code == 400
    assert res.get_json()["error"] == "No file uploaded"


def test_analysis_rejects_invalid_config(client):
    res = client.post("/api/analysis", json={
        "fileName": "traffic.csv",
        "config": {"model": "gpt", "confidence": 2, "batchSize": 500},
    })
    assert res.status_code == 400
    error = res.get_json()["error"]
    assert "Unknown model" in error
    assert "Batch size" in error


def test_analysis_rejects_unparseable_config(client):
    res = client.post("/api/analysis", json={"fileName": "a.csv", "config": {"batchSize": "lots"}})
    assert res.status_code == 400


def test_devices_fallback_counts(client):
    data = client.get("/api/devices").get_json()

    assert data["totalDevices"] == 287
    assert data["counts"] == {"all": 41, "blocked": 14, "clean": 27}
    assert data["showing"] == 41
    assert data["devices"][0]["id"] == "device_1"


def test_devices_tab_and_search(client):
    data = client.get("/api/devices?fileName=default.csv&totalDevices=326&blockedDevices=20&tab=blocked").get_json()
    assert data["showing"] == 20
    assert all(d["threatLevel"] != "CLEAN" for d in data["devices"])

    data = client.get("/api/devices?tab=clean&q=CAMERA").get_json()
    assert data["devices"]
    assert all(d["threatLevel"] == "CLEAN" and d["deviceType"] == "Camera" for d in data["devices"])


def test_devices_clamps_counts(client):
    data = client.get("/api/devices?totalDevices=5&blockedDevices=50").get_json()
    assert data["counts"] == {"all": 5, "blocked": 5, "clean": 0}


def test_devices_rejects_bad_parameters(client):
    assert client.get("/api/devices?totalDevices=many").status_code == 400
    assert client.get("/api/devices?tab=quarantined").status_code == 400


def test_export_is_signed_csv(client, signing_key):
    res = client.get("/api/results/export?fileName=lab_capture.pcap")
    assert res.status_code == 200
    assert res.mimetype == "text/csv"
    disposition, options = parse_options_header(res.headers["Content-Disposition"])
    assert disposition == "attachment"
    assert options["filename"] == "lab_capture_report.csv"
    assert ReportSigner(signing_key).verify(res.data, res.headers["X-Report-Signature"])


def test_unknown_route_returns_json_404(client):
    res = client.get("/does-not-exist")
    assert res.status_code == 404
    assert res.get_json()["path"] == "/does-not-exist"


def test_security_headers(client):
    res = client.get("/api/results")
    assert res.headers["X-Frame-Options"] == "DENY"
    assert res.headers["X-Content-Type-Options"] == "nosniff"
    assert "Strict-Transport-Security" not in res.headers


def test_rate_limit(signing_key):
    config = AppConfig(processing_delay_seconds=0, rate_limit_requests=2, report_signing_key=signing_key)
    client = create_app(config).test_client()

    assert client.get("/api/results").status_code == 200
    assert client.get("/api/results").status_code == 200

    res = client.get("/api/results")
    assert res.status_code == 429
    assert res.get_json()["retry_after"] == config.rate_limit_window_seconds


def test_rate_limit_can_be_disabled():
    config = AppConfig(processing_delay_seconds=0, rate_limit_enabled=False, rate_limit_requests=1)
    client = create_app(config).test_client()

    for _ in range(3):
        assert client.get("/api/results").status_code == 200


def test_export_replaces_newline_in_download_name(client, signing_key):
    res = client.get("/api/results/export?fileName=a%0Ab.csv")
    assert res.status_code == 200

    disposition = res.headers["Content-Disposition"]
    assert "\n" not in disposition
    assert parse_options_header(disposition)[1]["filename"] == "a_b_report.csv"
    assert ReportSigner(signing_key).verify(res.data, res.headers["X-Report-Signature"])


def test_export_escapes_quote_in_download_name(client):
    res = client.get("/api/results/export?fileName=a%22b.csv")
    assert res.status_code == 200
    assert parse_options_header(res.headers["Content-Disposition"])[1]["filename"] == 'a"b_report.csv'


def test_export_non_latin_download_name(client):
    res = client.get("/api/results/export", query_string={"fileName": "报告.csv"})
    assert res.status_code == 200

    disposition = res.headers["Content-Disposition"]
    disposition.encode("latin-1")
    assert f"filename*=UTF-8''{quote('报告')}" in disposition
    assert "报告.csv".encode("utf-8") in res.data


def test_devices_rejects_counts_above_ceiling(client):
    limit = app_module.MAX_DEVICE_COUNT

    assert client.get(f"/api/devices?totalDevices={limit}&blockedDevices=5").status_code == 200
    res = client.get(f"/api/devices?totalDevices={limit + 1}")
    assert res.status_code == 400
    assert "totalDevices" in res.get_json()["error"]
    assert client.get("/api/devices?totalDevices=1000000000").status_code == 400
    assert client.get(f"/api/devices?blockedDevices={limit + 1}").status_code == 400


def test_rate_limit_forgets_idle_clients(monkeypatch, app_config):
    flask_app = create_app(app_config)
    client = flask_app.test_client()
    clock = [1000.0]
    monkeypatch.setattr(app_module.time, "time", lambda: clock[0])

    client.get("/api/results", environ_base={"REMOTE_ADDR": "10.0.0.1"})
    clock[0] += app_config.rate_limit_window_seconds + 1
    client.get("/api/results", environ_base={"REMOTE_ADDR": "10.0.0.2"})

    assert set(flask_app.extensions["rate_limit_storage"]) == {"10.0.0.2"}


def test_unhandled_error_returns_json_500(app_config):
    flask_app = create_app(app_config)

    def explode():
        raise RuntimeError("boom")

    flask_app.add_url_rule("/explode", view_func=explode)
    res = flask_app.test_client().get("/explode")

    assert res.status_code == 500
    assert res.get_json() == {"error": "Internal server error"}
