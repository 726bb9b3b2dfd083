"""
Tests for the Supabase gateway
"""
import asyncio
import json

import httpx
import pytest

from fakes import NOW
from litterbugs.backend.supabase import SupabaseGateway, error_for_response
from litterbugs.core.errors import (
    NotFoundError,
    PermissionDeniedError,
    TransientError,
    UploadError,
    ValidationError,
)

BASE_URL = "https://demo.supabase.co"


class MockBackend:
    """Routes requests to canned responses and records them."""

    def __init__(self):
        self.requests = []
        self.responses = []

    def queue(self, status_code=200, body=None):
        self.responses.append((status_code, body))

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        status_code, body = self.responses.pop(0)
        if isinstance(body, Exception):
            raise body
        return httpx.Response(status_code, json=body)


def row(**overrides):
    data = {
        "id": "a1",
        "title": "Litter report",
        "litter_types": ["Cans"],
        "severity": "High",
        "latitude": 35.6012,
        "longitude": -82.5531,
        "user_id": "user-1",
        "photo_paths": [],
        "created_at": "2026-10-17T12:00:00+00:00",
        "expires_at": "2026-11-16T12:00:00+00:00",
    }
    data.update(overrides)
    return data


class TestErrorMapping:
    """Test HTTP status to error taxonomy mapping."""

    @pytest.mark.parametrize("status,error_type", [
        (400, ValidationError),
        (409, ValidationError),
        (422, ValidationError),
        (401, PermissionDeniedError),
        (403, PermissionDeniedError),
        (404, NotFoundError),
        (500, TransientError),
        (503, TransientError),
    ])
    def test_status_mapping(self, status, error_type):
        response = httpx.Response(status, json={"message": "nope"})

        error = error_for_response(response)

        assert isinstance(error, error_type)
        assert error.message == "nope"

    def test_plain_text_body(self):
        response = httpx.Response(502, text="Bad Gateway")

        assert error_for_response(response).message == "Bad Gateway"


class TestSupabaseGateway:
    """Test requests against a mocked Supabase project."""

    def setup_method(self):
        self.backend = MockBackend()
        self.token = None
        self.gateway = SupabaseGateway(
            BASE_URL,
            "anon-key",
            access_token=lambda: self.token,
            table="reports",
            bucket="report_photos",
            transport=httpx.MockTransport(self.backend),
        )

    def run(self, coro):
        async def wrapper():
            try:
                return await coro
            finally:
                await self.gateway.close()
        return asyncio.run(wrapper())

    def test_requires_url_and_key(self):
        with pytest.raises(ValueError):
            SupabaseGateway("", "anon-key")
        with pytest.raises(ValueError):
            SupabaseGateway(BASE_URL, "")

    def test_list_unexpired_filters_on_server(self):
        self.backend.queue(200, [row(), row(id="b2", severity="low")])

        reports = self.run(self.gateway.list_unexpired(NOW))

        request = self.backend.requests[0]
        assert request.method == "GET"
        assert request.url.path == "/rest/v1/reports"
        assert request.url.params["expires_at"] == "gt.2026-10-18T12:00:00+00:00"
        assert request.url.params["select"] == "*"
        assert [r.id for r in reports] == ["a1", "b2"]

    def test_anonymous_requests_use_anon_key(self):
        self.backend.queue(200, [])

        self.run(self.gateway.list_unexpired(NOW))

        headers = self.backend.requests[0].headers
        assert headers["apikey"] == "anon-key"
        assert headers["authorization"] == "Bearer anon-key"

    def test_signed_in_requests_use_access_token(self):
        self.token = "jwt-123"
        self.backend.queue(200, [])

        self.run(self.gateway.list_unexpired(NOW))

        assert self.backend.requests[0].headers["authorization"] == "Bearer jwt-123"

    def test_insert_returns_stored_row(self):
        self.backend.queue(201, [row()])
        payload = {"title": "Litter report", "latitude": 35.6012, "longitude": -82.5531}

        report = self.run(self.gateway.insert(payload))

        request = self.backend.requests[0]
        assert request.method == "POST"
        assert request.headers["prefer"] == "return=representation"
        assert json.loads(request.content) == payload
        assert report.id == "a1"

    def test_insert_rejected(self):
        self.backend.queue(400, {"message": "invalid input syntax"})

        with pytest.raises(ValidationError, match="invalid input syntax"):
            self.run(self.gateway.insert({"latitude": "x"}))

    def test_update_targets_one_row(self):
        self.backend.queue(200, [row(severity="Low")])

        report = self.run(self.gateway.update("a1", {"severity": "Low"}))

        request = self.backend.requests[0]
        assert request.method == "PATCH"
        assert request.url.params["id"] == "eq.a1"
        assert report.severity.value == "Low"

    def test_update_of_someone_elses_row(self):
        self.backend.queue(200, [])
        self.backend.queue(200, [{"id": "a1"}])

        with pytest.raises(PermissionDeniedError):
            self.run(self.gateway.update("a1", {"severity": "Low"}))

        assert self.backend.requests[1].method == "GET"

    def test_update_of_missing_row(self):
        self.backend.queue(200, [])
        self.backend.queue(200, [])

        with pytest.raises(NotFoundError):
            self.run(self.gateway.update("zz", {"severity": "Low"}))

    def test_delete(self):
        self.backend.queue(200, [row()])

        self.run(self.gateway.delete("a1"))

        request = self.backend.requests[0]
        assert request.method == "DELETE"
        assert request.url.params["id"] == "eq.a1"

    def test_delete_of_someone_elses_row(self):
        self.backend.queue(200, [])
        self.backend.queue(200, [{"id": "a1"}])

        with pytest.raises(PermissionDeniedError):
            self.run(self.gateway.delete("a1"))

    def test_upload_never_overwrites(self):
        self.backend.queue(200, {"Key": "report_photos/user-1/a1/1-0.jpg"})

        self.run(self.gateway.upload_blob("user-1/a1/1-0.jpg", b"jpeg", "image/jpeg"))

        request = self.backend.requests[0]
        assert request.url.path == "/storage/v1/object/report_photos/user-1/a1/1-0.jpg"
        assert request.headers["x-upsert"] == "false"
        assert request.headers["content-type"] == "image/jpeg"
        assert request.content == b"jpeg"

    def test_upload_conflict_is_upload_error(self):
        self.backend.queue(409, {"error": "Duplicate", "message": "The resource already exists"})

        with pytest.raises(UploadError):
            self.run(self.gateway.upload_blob("user-1/a1/1-0.jpg", b"jpeg", "image/jpeg"))

    def test_signed_read_url(self):
        self.backend.queue(200, {
            "signedURL": "/object/sign/report_photos/user-1/a1/1-0.jpg?token=abc"
        })

        url = self.run(self.gateway.signed_read_url("user-1/a1/1-0.jpg", 3600))

        request = self.backend.requests[0]
        assert request.url.path == "/storage/v1/object/sign/report_photos/user-1/a1/1-0.jpg"
        assert json.loads(request.content) == {"expiresIn": 3600}
        assert url == (
            "https://demo.supabase.co/storage/v1/object/sign/report_photos/"
            "user-1/a1/1-0.jpg?token=abc"
        )

    def test_signed_read_url_for_missing_object(self):
        self.backend.queue(400, {"message": "Object not found"})

        with pytest.raises(NotFoundError):
            self.run(self.gateway.signed_read_url("user-1/a1/9-0.jpg", 3600))

    def test_network_failure_is_transient(self):
        self.backend.queue(0, httpx.ConnectError("connection refused"))

        with pytest.raises(TransientError):
            self.run(self.gateway.list_unexpired(NOW))

    def test_server_error_is_transient(self):
        self.backend.queue(503, {"message": "Service unavailable"})

        with pytest.raises(TransientError):
            self.run(self.gateway.list_unexpired(NOW))
