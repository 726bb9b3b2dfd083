"""
Tests for the map generation script
"""
import asyncio
from unittest.mock import patch, MagicMock

import generate_map
from fakes import NOW, FakeGateway
from litterbugs.backend.supabase import SupabaseGateway
from litterbugs.core.identity import SessionIdentity
from litterbugs.database import SqlGateway


class TestBuildGateway:
    """Test backend selection."""

    @patch("generate_map.settings")
    def test_prefers_supabase(self, mock_settings):
        mock_settings.supabase_configured = True

        with patch.object(SupabaseGateway, "from_settings", return_value=MagicMock()) as factory:
            gateway = generate_map.build_gateway()

        factory.assert_called_once()
        assert gateway is factory.return_value

    @patch("generate_map.settings")
    def test_supabase_uses_session_token(self, mock_settings):
        mock_settings.supabase_configured = True
        identity = SessionIdentity("user-1", access_token="jwt-123")

        with patch.object(SupabaseGateway, "from_settings", return_value=MagicMock()) as factory:
            generate_map.build_gateway(identity)

        token = factory.call_args.kwargs["access_token"]
        assert token() == "jwt-123"
        identity.sign_out()
        assert token() is None

    @patch("generate_map.settings")
    def test_falls_back_to_database(self, mock_settings, tmp_path):
        mock_settings.supabase_configured = False
        mock_settings.database_url = f"sqlite:///{tmp_path / 'reports.db'}"

        gateway = generate_map.build_gateway()

        assert isinstance(gateway, SqlGateway)
        assert gateway.caller() is None
        assert gateway.db.check_connection() is True
        gateway.db.close()

    @patch("generate_map.settings")
    def test_nothing_configured(self, mock_settings):
        mock_settings.supabase_configured = False
        mock_settings.database_url = None

        assert generate_map.build_gateway() is None


class TestLoadMarkers:
    """Test loading markers through a gateway."""

    def test_load_markers(self, sample_rows):
        gateway = FakeGateway()
        gateway.add_row(**dict(sample_rows[0], expires_at="2999-01-01T00:00:00+00:00"))
        gateway.add_row(**dict(sample_rows[1], expires_at=NOW.replace(year=2000).isoformat()))

        store = asyncio.run(generate_map.load_markers(gateway))

        assert [m.id for m in store.markers] == ["a1"]
