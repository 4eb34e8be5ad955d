"""
Report Export Module
====================
Flattens a summary and its device roster into a CSV report and signs it.

Integrity:
- HMAC-SHA256 over the exact CSV bytes
- Signature travels as hex next to the report (HTTP header or .sig file)
"""

from io import StringIO
from typing import Iterable

import pandas as pd
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, hmac

from .models import AnalysisSummary, DeviceRecord

REPORT_COLUMNS = [
    "file_name",
    "scenario",
    "total_devices",
    "blocked_devices",
    "clean_devices",
    "avg_confidence",
    "id",
    "name",
    "ip_address",
    "device_type",
    "confidence_percent",
    "last_seen_date",
    "threat_level",
]


class ReportSigner:
    """
    HMAC-based integrity check for exported reports.

    Anyone holding the key can confirm a report was produced by this
    service and not edited afterwards.
    """

    def __init__(self, key: bytes):
        """
        Initialize the signer.

        Args:
            key: Secret key for HMAC (should be at least 32 bytes)
        """
        if not key:
            raise ValueError("Report signing key must not be empty")
        self.key = key

    def _mac(self) -> hmac.HMAC:
        return hmac.HMAC(self.key, hashes.SHA256())

    def sign(self, data: bytes) -> str:
        """Return the hex HMAC-SHA256 of data."""
        h = self._mac()
        h.update(data)
        return h.finalize().hex()

    def verify(self, data: bytes, signature: str) -> bool:
        """
        Verify a hex signature produced by sign().

        Returns:
            True if valid, False otherwise (including malformed hex)
        """
        try:
            expected = bytes.fromhex(signature)
        except ValueError:
            return False

        h = self._mac()
        h.update(data)
        try:
            h.verify(expected)
            return True
        except InvalidSignature:
            return False


def build_report_frame(summary: AnalysisSummary, roster: Iterable[DeviceRecord]) -> pd.DataFrame:
    """
    One row per device, with the summary totals repeated on every row.

    An empty roster still yields a frame with all report columns.
    """
    rows = [
        {
            "id": device.id,
            "name": device.name,
            "ip_address": device.ip_address,
            "device_type": device.device_type,
            "confidence_percent": device.confidence_percent,
            "last_seen_date": device.last_seen_date,
            "threat_level": device.threat_level,
        }
        for device in roster
    ]
    df = pd.DataFrame(rows, columns=REPORT_COLUMNS[6:])

    df.insert(0, "file_name", summary.file_name)
    df.insert(1, "scenario", summary.scenario)
    df.insert(2, "total_devices", summary.total_devices)
    df.insert(3, "blocked_devices", summary.blocked_devices)
    df.insert(4, "clean_devices", summary.clean_devices)
    df.insert(5, "avg_confidence", summary.avg_confidence)
    return df


def export_report(summary: AnalysisSummary, roster: Iterable[DeviceRecord]) -> bytes:
    """
    Render the report CSV as UTF-8 bytes.

    Lone surrogates (undecodable bytes from a command line file name) are
    written as backslash escapes, so every file name exports.
    """
    buffer = StringIO()
    build_report_frame(summary, roster).to_csv(buffer, index=False)
    return buffer.getvalue().encode("utf-8", errors="backslashreplace")
