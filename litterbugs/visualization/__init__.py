"""
Litterbugs - Visualization Module
Folium rendering of the report map.
"""

from litterbugs.visualization.map_generator import (
    create_report_map,
    render_snapshot,
    save_report_map,
    zoom_for_region,
)

__all__ = [
    "create_report_map",
    "render_snapshot",
    "save_report_map",
    "zoom_for_region",
]
