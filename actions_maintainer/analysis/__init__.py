"""Issue detection for action references."""

from .analyzer import Analyzer
from .models import (
    Issue,
    IssueType,
    RepositoryScanResult,
    ScanResult,
    ScanSummary,
    Severity,
    WorkflowFileResult,
)

__all__ = [
    "Analyzer",
    "Issue",
    "IssueType",
    "RepositoryScanResult",
    "ScanResult",
    "ScanSummary",
    "Severity",
    "WorkflowFileResult",
]
