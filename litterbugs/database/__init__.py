"""
Database module for Litterbugs
SQL persistence for self-hosted report and photo storage
"""

from .connection import DatabaseConnection
from .models import Base, ReportRow, StoredPhoto
from .gateway import SqlGateway, sign_path, verify_signed_path

__all__ = [
    "DatabaseConnection",
    "Base",
    "ReportRow",
    "StoredPhoto",
    "SqlGateway",
    "sign_path",
    "verify_signed_path",
]
