"""Tests for the index page, CORS policy and metrics endpoint"""


def test_index_lists_providers(client):
    response = client.get("/")

    assert response.status_code == 200
    assert "text/html" in response.headers["content-type"]
    assert '<a href="/auth/google">Log in with Google</a>' in response.text


def test_cors_preflight_allowed_origin(client):
    response = client.options(
        "/auth/me",
        headers={
            "Origin": "http://localhost:5173",
            "Access-Control-Request-Method": "GET",
            "Access-Control-Request-Headers": "Authorization",
        },
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "http://localhost:5173"
    assert response.headers["access-control-allow-credentials"] == "true"
    assert response.headers["access-control-max-age"] == "300"
    assert "PATCH" in response.headers["access-control-allow-methods"]


def test_cors_rejects_other_origin(client):
    response = client.get("/health", headers={"Origin": "https://evil.example.com"})

    assert response.status_code == 200
    assert "access-control-allow-origin" not in response.headers


def test_cors_preflight_rejects_unlisted_header(client):
    response = client.options(
        "/auth/me",
        headers={
            "Origin": "http://localhost:3000",
            "Access-Control-Request-Method": "GET",
            "Access-Control-Request-Headers": "X-Custom",
        },
    )

    assert response.status_code == 400


def test_metrics_exposes_login_counters(client, fake_google):
    client.get("/auth/google")

    response = client.get("/metrics")

    assert response.status_code == 200
    assert 'auth_login_started_total{provider="google"}' in response.text
    assert "http_requests_total" in response.text
