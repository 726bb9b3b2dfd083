"""
Litterbugs - Reports Module
Report and draft data model. The lifecycle manager lives in
``litterbugs.reports.lifecycle``.
"""

from litterbugs.reports.models import (
    Draft,
    Report,
    Severity,
)

__all__ = [
    "Draft",
    "Report",
    "Severity",
]
