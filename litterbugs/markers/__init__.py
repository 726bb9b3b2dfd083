"""
Litterbugs - Marker Module
On-map projection of reports and its reconciliation store.
"""

from litterbugs.markers.store import (
    Marker,
    MarkerStore,
    MarkerStyle,
    marker_style,
)

__all__ = [
    "Marker",
    "MarkerStore",
    "MarkerStyle",
    "marker_style",
]
