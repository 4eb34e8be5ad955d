"""
Summary Generator
=================
Turns a file name into the aggregate numbers of the results view.

The file name is hashed, the hash picks one of five scenario profiles, and
each figure is the profile's base value plus a hash-derived jitter. The
jitter for each figure comes from its own combination of the hash so two
figures never share a residue.
"""

from dataclasses import dataclass
from typing import Sequence, Tuple

from .hashing import filename_hash
from .models import AnalysisSummary, BreakdownEntry


@dataclass(frozen=True)
class ScenarioProfile:
    """Base value and jitter range (exclusive) for each summary figure."""
    name: str
    total_base: int
    total_range: int
    blocked_base: int
    blocked_range: int
    confidence_base: int
    confidence_range: int


SCENARIO_PROFILES: Tuple[ScenarioProfile, ...] = (
    ScenarioProfile("high-threat", 450, 100, 45, 25, 85, 10),
    ScenarioProfile("medium-threat", 320, 80, 18, 15, 78, 12),
    ScenarioProfile("low-threat", 200, 60, 8, 10, 92, 8),
    ScenarioProfile("large-network", 600, 150, 35, 30, 76, 15),
    ScenarioProfile("mixed", 287, 90, 14, 18, 82, 18),
)

STATUS_COLORS = {"Clean": "#22c55e", "Blocked": "#ef4444"}

# (label, per-mille of blocked devices, colour)
THREAT_SHARES = (
    ("High", 600, "#ef4444"),
    ("Medium", 300, "#f97316"),
    ("Low", 100, "#eab308"),
)

# (label, per-mille of total devices); truncated counts can fall short of the total
TYPE_SHARES = (
    ("Smart TV", 200),
    ("IoT Device", 250),
    ("Router", 150),
    ("Wearable", 120),
    ("Camera", 100),
    ("Lock", 180),
)
TYPE_COLOR = "#22d3ee"


def select_scenario(hash_value: int) -> ScenarioProfile:
    return SCENARIO_PROFILES[hash_value % len(SCENARIO_PROFILES)]


def _share(count: int, per_mille: int) -> int:
    # floor(count * fraction) without float rounding
    return count * per_mille // 1000


def _breakdown(parent: int, shares: Sequence[Tuple[str, int, str]]) -> Tuple[BreakdownEntry, ...]:
    return tuple(BreakdownEntry(label, _share(parent, per_mille), color) for label, per_mille, color in shares)


def generate_summary(filename: str) -> AnalysisSummary:
    """
    Build the results summary for a file name.

    Args:
        filename: Name of the uploaded file; the contents are never read

    Returns:
        AnalysisSummary; identical for identical file names
    """
    hash_value = filename_hash(filename)
    profile = select_scenario(hash_value)

    total_devices = profile.total_base + hash_value % profile.total_range
    blocked_devices = profile.blocked_base + (hash_value * 7 + 3) % profile.blocked_range
    avg_confidence = profile.confidence_base + (hash_value * 13 + 5) % profile.confidence_range
    clean_devices = total_devices - blocked_devices

    return AnalysisSummary(
        file_name=filename,
        scenario=profile.name,
        total_devices=total_devices,
        blocked_devices=blocked_devices,
        clean_devices=clean_devices,
        avg_confidence=avg_confidence,
        status_breakdown=(
            BreakdownEntry("Clean", clean_devices, STATUS_COLORS["Clean"]),
            BreakdownEntry("Blocked", blocked_devices, STATUS_COLORS["Blocked"]),
        ),
        threat_breakdown=_breakdown(blocked_devices, THREAT_SHARES),
        type_breakdown=_breakdown(
            total_devices, [(label, per_mille, TYPE_COLOR) for label, per_mille in TYPE_SHARES]
        ),
    )
