from fastapi.testclient import TestClient


def sign_up(client: TestClient, username: str, password: str = "secret123", **profile):
    """Create an account through the API; the client ends up signed in as it"""
    response = client.post("/api/users", json={"username": username, "password": password, **profile})
    assert response.status_code == 201, response.json()
    return response.json()["user"]


def sign_in(client: TestClient, username: str, password: str = "secret123"):
    response = client.post("/api/users/session", json={"username": username, "password": password})
    assert response.status_code == 201, response.json()
    return response.json()["user"]


def sign_out(client: TestClient):
    response = client.delete("/api/users/session")
    assert response.status_code == 200, response.json()
