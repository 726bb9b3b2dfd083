"""
Map Visualization Module for Litterbugs

Renders the report map with Folium: one marker per visible report,
coloured by severity, plus the pin of an unsaved draft.
"""

import html
import logging
import math
from typing import List, Optional

import folium

from litterbugs.core.constants import DRAFT_PIN_COLOR, SEVERITY_STYLES
from litterbugs.core.geo import Coordinate, Region
from litterbugs.markers.store import Marker
from litterbugs.screen.controller import MapSnapshot
from litterbugs.screen.map_types import MapType

logger = logging.getLogger(__name__)

ESRI_IMAGERY = (
    "https://server.arcgisonline.com/ArcGIS/rest/services/World_Imagery/MapServer/tile/{z}/{y}/{x}"
)
ESRI_LABELS = (
    "https://server.arcgisonline.com/ArcGIS/rest/services/Reference/"
    "World_Boundaries_and_Places/MapServer/tile/{z}/{y}/{x}"
)


def zoom_for_region(region: Region) -> int:
    """Approximate web-map zoom level showing the region's span."""
    span = max(region.latitude_delta, region.longitude_delta, 1e-6)
    return max(1, min(18, round(math.log2(360 / span))))


def add_base_layers(report_map: folium.Map, map_type: MapType) -> None:
    """Tile layers for a map type."""
    if map_type == MapType.STANDARD:
        folium.TileLayer(tiles="OpenStreetMap", name="Standard").add_to(report_map)
    elif map_type == MapType.TERRAIN:
        folium.TileLayer(tiles="OpenTopoMap", name="Terrain").add_to(report_map)
    else:
        folium.TileLayer(tiles=ESRI_IMAGERY, name="Satellite", attr="Esri").add_to(report_map)
        if map_type == MapType.HYBRID:
            folium.TileLayer(
                tiles=ESRI_LABELS,
                name="Labels",
                attr="Esri",
                overlay=True,
            ).add_to(report_map)


def marker_popup_html(marker: Marker) -> str:
    """Popup summary for a report marker."""
    report = marker.report
    style = marker.style
    rows = [
        f'<h4 style="margin: 0; color: {style.color};">{html.escape(report.title or "Litter report")}</h4>',
        '<hr style="margin: 5px 0;">',
        f"<b>Location:</b> {marker.coordinate.latitude:.4f}, {marker.coordinate.longitude:.4f}<br>",
        f"<b>Severity:</b> {report.severity.value if report.severity else 'Not set'}<br>",
    ]
    if report.litter_types or report.types:
        types = list(report.litter_types or [])
        if report.types:
            types.append(report.types)
        rows.append(f"<b>Litter:</b> {html.escape(', '.join(types))}<br>")
    if report.notes_presets or report.notes_other:
        notes = list(report.notes_presets or [])
        if report.notes_other:
            notes.append(report.notes_other)
        rows.append(f"<b>Notes:</b> {html.escape(', '.join(notes))}<br>")
    if report.photo_paths:
        rows.append(f"<b>Photos:</b> {len(report.photo_paths)}<br>")
    if report.created_at:
        rows.append(f"<b>Reported:</b> {report.created_at.strftime('%Y-%m-%d %H:%M')}<br>")
    if report.expires_at:
        rows.append(f"<b>Expires:</b> {report.expires_at.strftime('%Y-%m-%d')}")

    return '<div style="font-family: Arial; min-width: 200px;">' + "".join(rows) + "</div>"


def create_report_map(
    markers: List[Marker],
    region: Optional[Region] = None,
    map_type: MapType = MapType.STANDARD,
    draft_coordinate: Optional[Coordinate] = None,
    title: str = "Litterbugs - Litter Reports",
) -> folium.Map:
    """
    Create an interactive map of litter reports.

    Args:
        markers: Markers to draw
        region: Visible region (fallback region if None)
        map_type: Base layer style
        draft_coordinate: Pin of an unsaved draft, if any
        title: Map title

    Returns:
        Folium Map object
    """
    region = region or Region.fallback()

    report_map = folium.Map(
        location=(region.latitude, region.longitude),
        zoom_start=zoom_for_region(region),
        tiles=None,
    )
    add_base_layers(report_map, map_type)

    marker_group = folium.FeatureGroup(name="Litter reports")
    for marker in markers:
        style = marker.style
        folium.CircleMarker(
            location=[marker.coordinate.latitude, marker.coordinate.longitude],
            radius=10,
            popup=folium.Popup(marker_popup_html(marker), max_width=300),
            tooltip=marker.report.title or None,
            color=style.color,
            fill=True,
            fill_color=style.color,
            fill_opacity=0.85,
            weight=2,
        ).add_to(marker_group)
    marker_group.add_to(report_map)

    if draft_coordinate is not None:
        folium.CircleMarker(
            location=[draft_coordinate.latitude, draft_coordinate.longitude],
            radius=8,
            tooltip="Draft report",
            popup="Fill the form below to save",
            color=DRAFT_PIN_COLOR,
            fill=True,
            fill_color=DRAFT_PIN_COLOR,
            fill_opacity=1.0,
        ).add_to(report_map)

    folium.LayerControl(position="topright").add_to(report_map)

    title_html = f'''
    <div style="position: fixed;
                top: 10px; left: 50px;
                background-color: rgba(255,255,255,0.9);
                padding: 10px 20px;
                border-radius: 5px;
                z-index: 9999;
                font-family: Arial;">
        <h3 style="margin: 0; color: #2F7D32;">{html.escape(title)}</h3>
        <p style="margin: 5px 0 0 0; color: #555; font-size: 12px;">
            {len(markers)} active reports
        </p>
    </div>
    '''
    report_map.get_root().html.add_child(folium.Element(title_html))

    low, medium, high = (SEVERITY_STYLES[k][0] for k in ("low", "medium", "high"))
    legend_html = f'''
    <div style="position: fixed;
                bottom: 30px; right: 30px;
                background-color: rgba(255,255,255,0.9);
                padding: 10px;
                border-radius: 5px;
                z-index: 9999;
                font-family: Arial;
                font-size: 12px;">
        <b>Severity</b><br>
        <span style="color: {low};">●</span> Low<br>
        <span style="color: {medium};">●</span> Medium / not set<br>
        <span style="color: {high};">●</span> High
    </div>
    '''
    report_map.get_root().html.add_child(folium.Element(legend_html))

    logger.info(f"Created map with {len(markers)} markers")
    return report_map


def render_snapshot(snapshot: MapSnapshot, **kwargs) -> folium.Map:
    """Render the controller's current map state."""
    return create_report_map(
        markers=snapshot.markers,
        region=snapshot.region,
        map_type=snapshot.map_type,
        draft_coordinate=snapshot.draft_coordinate,
        **kwargs,
    )


def save_report_map(
    snapshot: MapSnapshot,
    output_path: str = "litter_reports.html",
) -> str:
    """
    Render and save the report map as HTML.

    Args:
        snapshot: Map state to render
        output_path: Path to save HTML file

    Returns:
        Path to saved file
    """
    report_map = render_snapshot(snapshot)
    report_map.save(output_path)
    logger.info(f"Map saved to {output_path}")
    return output_path
