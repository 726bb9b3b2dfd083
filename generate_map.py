#!/usr/bin/env python3
"""
Litterbugs - Generate Interactive Report Map
Loads unexpired litter reports from the configured backend and writes an
interactive HTML map.
"""
import asyncio
import os
import sys
from datetime import datetime, timezone

from dotenv import load_dotenv

# Load environment variables before settings are read
load_dotenv()

from litterbugs.backend.supabase import SupabaseGateway
from litterbugs.core.config import settings
from litterbugs.core.errors import LitterbugsError
from litterbugs.core.geo import Region
from litterbugs.core.identity import SessionIdentity
from litterbugs.core.logging import setup_logging
from litterbugs.database import DatabaseConnection, SqlGateway
from litterbugs.markers.store import MarkerStore
from litterbugs.screen.controller import MapSnapshot
from litterbugs.screen.map_types import MapType
from litterbugs.visualization.map_generator import save_report_map


def build_gateway(identity=None):
    """Pick the hosted backend when configured, else the SQL store."""
    identity = identity or SessionIdentity(access_token=os.getenv("SUPABASE_ACCESS_TOKEN"))
    if settings.supabase_configured:
        return SupabaseGateway.from_settings(access_token=identity.current_access_token)
    if settings.database_url:
        db = DatabaseConnection(settings.database_url)
        db.create_tables()
        return SqlGateway(db, caller=lambda: identity.user_id)
    return None


async def load_markers(gateway) -> MarkerStore:
    store = MarkerStore()
    async with gateway:
        await store.load(gateway, datetime.now(timezone.utc))
    return store


def main():
    setup_logging()

    gateway = build_gateway()
    if gateway is None:
        print("ERROR: set SUPABASE_URL and SUPABASE_ANON_KEY, or DATABASE_URL, in .env")
        sys.exit(1)

    print("=" * 60)
    print("Litterbugs - Generating Report Map")
    print("=" * 60)

    try:
        store = asyncio.run(load_markers(gateway))
    except LitterbugsError as e:
        print(f"ERROR: could not load reports: {e}")
        sys.exit(1)

    markers = store.markers
    print(f"\nActive reports: {len(markers)}")

    counts = {"Low": 0, "Medium": 0, "High": 0, "Not set": 0}
    for marker in markers:
        severity = marker.report.severity
        counts[severity.value if severity else "Not set"] += 1

    print("\nBy severity:")
    for label, count in counts.items():
        print(f"  - {label + ':':<9} {count}")

    snapshot = MapSnapshot(
        region=Region.fallback(),
        map_type=MapType.STANDARD,
        markers=markers,
    )
    output_path = os.path.join(os.path.dirname(os.path.abspath(__file__)), "litter_reports.html")
    save_report_map(snapshot, output_path)

    print(f"\nMap saved to: {output_path}")
    print("=" * 60)


if __name__ == "__main__":
    main()
