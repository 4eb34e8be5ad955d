"""
Device Roster Generator
=======================
Expands summary counts into individual device records for the device
details view.

The roster is every blocked device followed by a sample of the clean ones.
Each field of a record is a function of (file hash, index), so the same
arguments always give the same roster.
"""

from datetime import date
from typing import Iterable, Iterator, List, Tuple

from .formatting import format_ip_address, format_last_seen
from .hashing import filename_hash
from .models import BLOCKED_THREAT_LEVELS, THREAT_CLEAN, DeviceRecord

DEVICE_TYPES = ("Smart TV", "IoT Device", "Router", "Wearable Device", "Camera", "Smart Lock")

# Clean devices shown: at least this many, or CLEAN_DISPLAY_PERCENT of them if that is more
CLEAN_DISPLAY_MINIMUM = 10
CLEAN_DISPLAY_PERCENT = 10

LAST_SEEN_MONTH = date(2025, 9, 1)
LAST_SEEN_WINDOW_DAYS = 5


def clean_display_count(clean_devices: int) -> int:
    """How many clean records the roster materializes for a clean total."""
    clean_devices = max(0, clean_devices)
    cap = max(CLEAN_DISPLAY_MINIMUM, clean_devices * CLEAN_DISPLAY_PERCENT // 100)
    return min(clean_devices, cap)


def _clamp_counts(total_devices: int, blocked_devices: int) -> Tuple[int, int]:
    total_devices = max(0, total_devices)
    blocked_devices = min(max(0, blocked_devices), total_devices)
    return total_devices, blocked_devices


def _synthesize(hash_value: int, index: int, record_id: str, clean: bool) -> DeviceRecord:
    device_type = DEVICE_TYPES[(hash_value + index) % len(DEVICE_TYPES)]
    ip_address = format_ip_address(
        (hash_value * 31 + index * 17) % 254 + 1,
        (hash_value * 7 + index * 131 + 11) % 254 + 1,
    )
    last_seen = LAST_SEEN_MONTH.replace(day=1 + (hash_value + index * 3) % LAST_SEEN_WINDOW_DAYS)

    if clean:
        confidence = 80 + (hash_value + index * 11) % 20
        threat_level = THREAT_CLEAN
    else:
        confidence = 70 + (hash_value + index * 11) % 30
        threat_level = BLOCKED_THREAT_LEVELS[(hash_value + index * 5) % len(BLOCKED_THREAT_LEVELS)]

    return DeviceRecord(
        id=record_id,
        name=f"{device_type} {index + 1}",
        ip_address=ip_address,
        device_type=device_type,
        confidence_percent=confidence,
        last_seen_date=format_last_seen(last_seen),
        threat_level=threat_level,
    )


def generate_roster(filename: str, total_devices: int, blocked_devices: int) -> List[DeviceRecord]:
    """
    Build the device list for a file name and its summary counts.

    Args:
        filename: Name of the analysed file
        total_devices: Total device count from the summary
        blocked_devices: Blocked device count from the summary

    Returns:
        Blocked records (HIGH/MEDIUM/LOW) followed by clean records.
        Counts outside 0 <= blocked <= total are clamped into range.
    """
    total_devices, blocked_devices = _clamp_counts(total_devices, blocked_devices)
    hash_value = filename_hash(filename)

    roster = [
        _synthesize(hash_value, i, f"device_{i + 1}", clean=False)
        for i in range(blocked_devices)
    ]

    clean_to_show = clean_display_count(total_devices - blocked_devices)
    roster.extend(
        _synthesize(hash_value, i + blocked_devices, f"clean_device_{i + 1}", clean=True)
        for i in range(clean_to_show)
    )
    return roster


def _matches(device: DeviceRecord, needle: str, needle_lower: str) -> bool:
    return (
        needle_lower in device.name.lower()
        or needle in device.ip_address
        or needle_lower in device.device_type.lower()
    )


def iter_matches(roster: Iterable[DeviceRecord], search_text: str) -> Iterator[DeviceRecord]:
    """Lazily yield roster entries matching the search box text, in roster order."""
    if not search_text:
        yield from roster
        return

    needle_lower = search_text.lower()
    for device in roster:
        if _matches(device, search_text, needle_lower):
            yield device


def filter_roster(roster: Iterable[DeviceRecord], search_text: str) -> List[DeviceRecord]:
    """
    Case-insensitive search over name and device type, literal search over IP.
    Empty text returns the whole roster.
    """
    return list(iter_matches(roster, search_text))


def partition_roster(roster: Iterable[DeviceRecord]) -> Tuple[List[DeviceRecord], List[DeviceRecord]]:
    """Split a roster into (blocked, clean), keeping order within each."""
    blocked, clean = [], []
    for device in roster:
        (clean if device.is_clean else blocked).append(device)
    return blocked, clean
