import re

from sqlalchemy.exc import OperationalError

from tinylink import crud


def create(client, **body):
    return client.post("/api/links", json=body)


def test_create_with_custom_code(client):
    response = create(client, longUrl="https://example.com/page", customCode="abc123")

    assert response.status_code == 201
    data = response.json()
    assert data["code"] == "abc123"
    assert data["target_url"] == "https://example.com/page"
    assert data["total_clicks"] == 0
    assert data["last_clicked_time"] is None
    assert data["short_url"] == "http://sho.rt/abc123"


def test_create_generates_code(client):
    response = create(client, longUrl="https://example.com/page")

    assert response.status_code == 201
    assert re.fullmatch(r"[A-Za-z0-9]{6,8}", response.json()["code"])


def test_create_normalizes_url(client):
    response = create(client, longUrl="HTTP://Example.com:80")
    assert response.json()["target_url"] == "http://example.com/"


def test_create_accepts_other_schemes(client):
    response = create(client, longUrl="ftp://example.com/file")

    assert response.status_code == 201
    assert response.json()["target_url"] == "ftp://example.com/file"


def test_create_invalid_url(client):
    response = create(client, longUrl="not-a-url")

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid URL provided"}


def test_create_missing_url(client):
    response = create(client)

    assert response.status_code == 400
    assert response.json() == {"error": "longUrl is required"}


def test_create_malformed_body(client):
    response = client.post("/api/links", content="{nope", headers={"content-type": "application/json"})
    assert response.status_code == 400
    assert "error" in response.json()


def test_create_bad_custom_code(client):
    response = create(client, longUrl="https://example.com/", customCode="ab")

    assert response.status_code == 400
    assert response.json() == {"error": "customCode must match [A-Za-z0-9]{6,8}"}
    assert client.get("/api/links").json() == []


def test_create_duplicate_custom_code(client):
    create(client, longUrl="https://example.com/", customCode="abc123")
    response = create(client, longUrl="https://example.org/", customCode="abc123")

    assert response.status_code == 409
    assert response.json() == {"error": "Code already exists"}


def test_create_reserved_code_keeps_health_route(client):
    response = create(client, longUrl="https://example.com/", customCode="healthz")

    assert response.status_code == 409
    assert response.json() == {"error": "Code already exists"}
    assert client.get("/healthz").json()["total_links"] == 0


def test_create_exhausted(client, monkeypatch):
    monkeypatch.setattr(crud, "code_exists", lambda db, code: True)
    response = create(client, longUrl="https://example.com/")

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to generate unique short_code, try again"}


def test_list_links(client):
    create(client, longUrl="https://example.com/a", customCode="aaaaaa")
    create(client, longUrl="https://example.com/b", customCode="bbbbbb")

    response = client.get("/api/links")

    assert response.status_code == 200
    data = response.json()
    assert [item["code"] for item in data] == ["aaaaaa", "bbbbbb"]
    assert set(data[0]) >= {"code", "target_url", "total_clicks", "last_clicked_time"}


def test_get_link_not_found(client):
    response = client.get("/api/links/abc123")

    assert response.status_code == 404
    assert response.json() == {"error": "Not found"}


def test_redirect_counts_clicks(client):
    create(client, longUrl="https://example.com/page", customCode="abc123")

    response = client.get("/abc123", follow_redirects=False)

    assert response.status_code == 302
    assert response.headers["location"] == "https://example.com/page"

    data = client.get("/api/links/abc123").json()
    assert data["total_clicks"] == 1
    assert data["last_clicked_time"] is not None
    assert data["last_clicked_time"].endswith(("Z", "+00:00"))
    assert data["created_at"].endswith(("Z", "+00:00"))


def test_redirect_many_times(client):
    create(client, longUrl="https://example.com/page", customCode="abc123")
    for _ in range(3):
        client.get("/abc123", follow_redirects=False)
    assert client.get("/api/links/abc123").json()["total_clicks"] == 3


def test_redirect_unknown_code(client):
    response = client.get("/zzz999", follow_redirects=False)

    assert response.status_code == 404
    assert response.text == "Not found"
    assert response.headers["content-type"].startswith("text/plain")


def test_redirect_malformed_code(client):
    response = client.get("/not-a-code!", follow_redirects=False)
    assert response.status_code == 404
    assert response.text == "Not found"


def test_delete_link(client):
    create(client, longUrl="https://example.com/", customCode="abc123")

    response = client.delete("/api/links/abc123")
    assert response.status_code == 204
    assert response.content == b""

    assert client.get("/api/links/abc123").status_code == 404
    assert client.delete("/api/links/abc123").status_code == 404


def test_store_failure_is_generic_500(client, monkeypatch):
    def boom(db):
        raise OperationalError("SELECT * FROM links", {}, Exception("disk on fire"))

    monkeypatch.setattr(crud, "get_links", boom)
    response = client.get("/api/links")

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}


def test_healthz(client):
    create(client, longUrl="https://example.com/", customCode="abc123")

    response = client.get("/healthz")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["version"] == "1.0.0"
    assert data["total_links"] == 1
    assert data["uptime_seconds"] >= 0
    assert re.fullmatch(r"\d+d \d+h \d+m \d+s", data["uptime_formatted"])


def test_healthz_database_error(client, monkeypatch):
    def boom(db):
        raise OperationalError("SELECT count(*) FROM links", {}, Exception("gone"))

    monkeypatch.setattr(crud, "count_links", boom)
    response = client.get("/healthz")

    assert response.status_code == 500
    assert response.json() == {"status": "unhealthy", "error": "Database error"}
