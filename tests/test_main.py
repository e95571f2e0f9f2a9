"""
Tests for the main module.
"""

from main import validate_cors_origins


def test_read_root(client):
    """Test the root endpoint returns the expected response."""
    response = client.get("/")
    assert response.status_code == 200
    assert response.json() == {"message": "UIGen generation server"}


def test_unknown_route_uses_error_envelope(client):
    response = client.get("/api/does-not-exist")

    assert response.status_code == 404
    assert response.json() == {"error": "Not Found"}


def test_wrong_method_uses_error_envelope(client):
    response = client.get("/api/generate")

    assert response.status_code == 405
    assert response.json() == {"error": "Method Not Allowed"}


class TestCORSConfiguration:
    """CORS is applied outermost and exposes the correlation header."""

    def test_preflight_from_allowed_origin(self, client):
        response = client.options(
            "/api/generate",
            headers={
                "Origin": "http://localhost:5173",
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "Content-Type",
            },
        )

        assert response.status_code == 200
        assert (
            response.headers["Access-Control-Allow-Origin"] == "http://localhost:5173"
        )

    def test_simple_request_exposes_correlation_id(self, client):
        response = client.post(
            "/api/generate",
            json={"prompt": "A card"},
            headers={"Origin": "http://localhost:5173"},
        )

        assert response.headers["Access-Control-Allow-Origin"] == (
            "http://localhost:5173"
        )
        exposed = response.headers["Access-Control-Expose-Headers"]
        assert "x-correlation-id" in exposed.lower()

    def test_disallowed_origin_gets_no_allow_header(self, client):
        response = client.get(
            "/api/health", headers={"Origin": "http://malicious-site.com"}
        )

        assert response.status_code == 200
        assert (
            response.headers.get("Access-Control-Allow-Origin")
            != "http://malicious-site.com"
        )


def test_validate_cors_origins_drops_invalid_entries():
    origins = ["http://localhost:5173", "not-a-url", "*", "ftp://example.com"]

    assert validate_cors_origins(origins) == ["http://localhost:5173", "*"]
