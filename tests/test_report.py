from io import BytesIO

import pandas as pd
import pytest

from detection.report import REPORT_COLUMNS, ReportSigner, build_report_frame, export_report
from detection.roster import generate_roster
from detection.summary import generate_summary


@pytest.fixture()
def summary():
    return generate_summary("default.csv")


def test_report_frame_has_one_row_per_device(summary):
    roster = generate_roster("default.csv", summary.total_devices, summary.blocked_devices)
    df = build_report_frame(summary, roster)

    assert list(df.columns) == REPORT_COLUMNS
    assert len(df) == len(roster)
    assert (df["total_devices"] == 326).all()
    assert df.iloc[0]["id"] == "device_1"
    assert (df["threat_level"] == "CLEAN").sum() == 30


def test_empty_roster_still_has_columns(summary):
    df = build_report_frame(summary, [])
    assert list(df.columns) == REPORT_COLUMNS
    assert df.empty


def test_export_report_is_csv(summary):
    roster = generate_roster("default.csv", summary.total_devices, summary.blocked_devices)
    body = export_report(summary, roster)

    df = pd.read_csv(BytesIO(body))
    assert len(df) == 50
    assert df["file_name"].unique().tolist() == ["default.csv"]
    assert export_report(summary, roster) == body


def test_signer_round_trip():
    signer = ReportSigner(b"k" * 32)
    signature = signer.sign(b"report body")

    assert len(signature) == 64
    assert signer.verify(b"report body", signature)
    assert not signer.verify(b"report body!", signature)
    assert not ReportSigner(b"other" * 8).verify(b"report body", signature)


def test_signer_rejects_malformed_signature():
    assert not ReportSigner(b"k" * 32).verify(b"data", "not-hex")


def test_signer_requires_key():
    with pytest.raises(ValueError):
        ReportSigner(b"")


def test_export_report_with_lone_surrogate_file_name():
    name = b"\xff.csv".decode("utf-8", "surrogateescape")
    summary = generate_summary(name)
    roster = generate_roster(name, summary.total_devices, summary.blocked_devices)

    body = export_report(summary, roster)
    body.decode("utf-8")
    assert b"\\udcff.csv" in body
    assert export_report(summary, roster) == body
