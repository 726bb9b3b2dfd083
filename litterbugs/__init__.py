"""
Litterbugs - community litter reporting core.

Report lifecycle, marker reconciliation and photo attachment for a
map-based litter reporting client.
"""

__version__ = "0.4.0"
