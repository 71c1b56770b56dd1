def test_health(client) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_api_root(client) -> None:
    assert client.get("/api").json()["service"] == "Vitraya Health API"
