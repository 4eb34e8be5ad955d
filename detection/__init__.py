# Detection Module for IoT Botnet Detection Simulator
# Derives reproducible analysis results and device rosters from a file name

from .config import AppConfig
from .hashing import filename_hash
from .models import AnalysisConfig, AnalysisSession, AnalysisSummary, DeviceRecord, UploadedFile
from .summary import generate_summary
from .roster import generate_roster, filter_roster, partition_roster
from .report import ReportSigner, export_report

__all__ = [
    'AppConfig',
    'filename_hash',
    'AnalysisConfig',
    'AnalysisSession',
    'AnalysisSummary',
    'DeviceRecord',
    'UploadedFile',
    'generate_summary',
    'generate_roster',
    'filter_roster',
    'partition_roster',
    'ReportSigner',
    'export_report'
]
