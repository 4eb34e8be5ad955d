"""
Value objects passed between the generators and the presentation layer.

Everything here is immutable: a summary or roster is built once for a view
and never changed afterwards.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from .formatting import format_file_size, format_percent

THREAT_HIGH = "HIGH"
THREAT_MEDIUM = "MEDIUM"
THREAT_LOW = "LOW"
THREAT_CLEAN = "CLEAN"

BLOCKED_THREAT_LEVELS = (THREAT_HIGH, THREAT_MEDIUM, THREAT_LOW)

MODEL_CHOICES = {
    "resnet-50": "ResNet-50 (Deep Residual Network)",
    "resnet-101": "ResNet-101",
    "vgg-16": "VGG-16",
}


@dataclass(frozen=True)
class BreakdownEntry:
    """One bar or slice of a results chart."""
    label: str
    count: int
    color: str

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.label, "value": self.count, "color": self.color}


@dataclass(frozen=True)
class AnalysisSummary:
    """
    Aggregate numbers for one analysed file.

    The breakdown counts are truncated fractions of their parent total, so
    they don't always add up to it exactly.
    """
    file_name: str
    scenario: str
    total_devices: int
    blocked_devices: int
    clean_devices: int
    avg_confidence: int
    status_breakdown: Tuple[BreakdownEntry, ...]
    threat_breakdown: Tuple[BreakdownEntry, ...]
    type_breakdown: Tuple[BreakdownEntry, ...]

    @property
    def avg_confidence_label(self) -> str:
        return format_percent(self.avg_confidence)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fileName": self.file_name,
            "scenario": self.scenario,
            "totalDevices": self.total_devices,
            "blockedDevices": self.blocked_devices,
            "cleanDevices": self.clean_devices,
            "avgConfidence": self.avg_confidence,
            "avgConfidenceLabel": self.avg_confidence_label,
            "deviceStatus": [entry.to_dict() for entry in self.status_breakdown],
            "threatLevels": [entry.to_dict() for entry in self.threat_breakdown],
            "deviceTypes": [entry.to_dict() for entry in self.type_breakdown],
        }


@dataclass(frozen=True)
class DeviceRecord:
    """A single synthesized device shown in the device details view."""
    id: str
    name: str
    ip_address: str
    device_type: str
    confidence_percent: int
    last_seen_date: str
    threat_level: str

    @property
    def is_clean(self) -> bool:
        return self.threat_level == THREAT_CLEAN

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "ipAddress": self.ip_address,
            "deviceType": self.device_type,
            "confidence": self.confidence_percent,
            "lastSeen": self.last_seen_date,
            "threatLevel": self.threat_level,
        }


@dataclass(frozen=True)
class UploadedFile:
    """The file picked for analysis. Only the name feeds the generators."""
    name: str
    size: int = 0
    type: str = ""

    @property
    def size_label(self) -> str:
        return format_file_size(self.size)

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "size": self.size, "sizeLabel": self.size_label, "type": self.type}


@dataclass(frozen=True)
class AnalysisConfig:
    """
    Detection parameters chosen on the analysis screen.

    Attributes:
        model: Model architecture key, one of MODEL_CHOICES
        confidence: Detection confidence threshold, 0.1 to 1.0
        batch_size: Batch size, 1 to 128
    """
    model: str = "resnet-50"
    confidence: float = 0.7
    batch_size: int = 32

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "AnalysisConfig":
        """
        Build a config from a request payload.
        Missing keys keep their defaults; values that can't be converted raise ValueError.
        """
        if not data:
            return cls()
        if not isinstance(data, dict):
            raise ValueError("config must be an object")

        defaults = cls()
        try:
            return cls(
                model=str(data.get("model", defaults.model)),
                confidence=float(data.get("confidence", defaults.confidence)),
                batch_size=int(data.get("batchSize", defaults.batch_size)),
            )
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid config value: {e}") from e

    def validate(self) -> list[str]:
        """
        Validate the detection parameters.
        Returns list of problems; empty when the config is usable.
        """
        issues = []

        if self.model not in MODEL_CHOICES:
            issues.append(f"Unknown model '{self.model}' - choose one of {', '.join(MODEL_CHOICES)}")

        if not 0.1 <= self.confidence <= 1.0:
            issues.append("Confidence threshold must be between 0.1 and 1.0")

        if not 1 <= self.batch_size <= 128:
            issues.append("Batch size must be between 1 and 128")

        return issues

    def to_dict(self) -> Dict[str, Any]:
        return {"model": self.model, "confidence": self.confidence, "batchSize": self.batch_size}


@dataclass(frozen=True)
class AnalysisSession:
    """View state handed from the upload screen to the results screens."""
    uploaded_file: UploadedFile
    config: AnalysisConfig = field(default_factory=AnalysisConfig)

    @property
    def file_name(self) -> str:
        return self.uploaded_file.name
