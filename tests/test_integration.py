import asyncio

import pytest
from fastapi.testclient import TestClient

from src.route_engine.config import settings
from src.route_engine.main import create_app
from src.route_engine.services.routing.maps_client import ProviderFailure, ProviderSuccess
from src.route_engine.services.routing.models import MatrixCell

AUTH = {"Authorization": "Bearer test-token"}


class DummyMaps:
    def __init__(self, geocodes: dict | None = None, matrix_outcome=None, delay: float = 0.0):
        self.geocodes = geocodes or {}
        self.matrix_outcome = matrix_outcome
        self.delay = delay
        self.geocode_calls: list[str] = []
        self.matrix_calls = 0

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return None

    async def geocode(self, address, region=None):
        self.geocode_calls.append(address)
        await asyncio.sleep(self.delay)
        location = self.geocodes.get(address)
        return ProviderSuccess(payload=[location] if location else [])

    async def distance_matrix(self, origins, destinations, mode=None):
        self.matrix_calls += 1
        if self.matrix_outcome is not None:
            return self.matrix_outcome
        # square grid sized to the request
        rows = [
            [MatrixCell(distance_meters=1000 * (i + j + 1), duration_seconds=60 * (i + j + 1)) for j in range(len(destinations))]
            for i in range(len(origins))
        ]
        return ProviderSuccess(payload=rows)


@pytest.fixture
def maps(monkeypatch: pytest.MonkeyPatch) -> DummyMaps:
    from src.route_engine.services.routing import service as routing_service

    dummy = DummyMaps(geocodes={"Karol Bagh, Delhi": (28.65, 77.19)})
    monkeypatch.setattr(routing_service, "GoogleMapsClient", lambda *args, **kwargs: dummy)
    monkeypatch.setattr(settings, "api_tokens", ())
    return dummy


@pytest.fixture
def api_client() -> TestClient:
    return TestClient(create_app())


def _payload(deliveries: list[dict]) -> dict:
    return {
        "deliveries": deliveries,
        "startLocation": {"latitude": 28.6139, "longitude": 77.209, "address": "Company Location"},
    }


def test_health(api_client: TestClient):
    response = api_client.get("/api/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_maps_health_without_key(api_client: TestClient, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(settings, "google_maps_api_key", None)

    response = api_client.get("/api/health/maps")

    assert response.status_code == 200
    assert response.json()["configured"] is False


def test_optimize_endpoint(api_client: TestClient, maps: DummyMaps):
    deliveries = [
        {"id": "d1", "address": "Connaught Place", "latitude": 28.63, "longitude": 77.22},
        {"id": "d2", "address": "Karol Bagh, Delhi"},
        {"id": "d3", "address": "Unknown lane"},
        {"id": "d4", "address": "Saket", "latitude": 28.52, "longitude": 77.21},
    ]

    response = api_client.post("/api/routes/optimize", json=_payload(deliveries), headers=AUTH)

    assert response.status_code == 200
    payload = response.json()
    assert payload["geocodingFailures"] == 1
    assert [d["id"] for d in payload["deliveries"]] == ["d1", "d2", "d4"]
    assert payload["geocodingFailures"] + len(payload["deliveries"]) == len(deliveries)
    order = payload["optimizedOrder"]
    assert len(order) == len(set(order)) <= 3
    assert all(0 <= index < 3 for index in order)
    assert isinstance(payload["totalDistance"], float)
    assert isinstance(payload["totalDuration"], int)
    assert payload["navigationUrl"].startswith("https://www.google.com/maps/dir/28.6139,77.209/")
    assert maps.matrix_calls == 1


def test_single_stop_fast_path(api_client: TestClient, maps: DummyMaps):
    deliveries = [{"id": "d1", "address": "Connaught Place", "latitude": 28.63, "longitude": 77.22}]

    response = api_client.post("/api/routes/optimize", json=_payload(deliveries), headers=AUTH)

    assert response.status_code == 200
    payload = response.json()
    assert payload["optimizedOrder"] == [0]
    assert payload["totalDistance"] == 0
    assert payload["totalDuration"] == 0
    assert payload["geocodingFailures"] == 0
    assert maps.matrix_calls == 0


def test_missing_credentials_issue_no_downstream_calls(api_client: TestClient, maps: DummyMaps):
    deliveries = [{"id": "d1", "address": "Karol Bagh, Delhi"}, {"id": "d2", "address": "Saket"}]

    response = api_client.post("/api/routes/optimize", json=_payload(deliveries))

    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"
    assert maps.geocode_calls == []
    assert maps.matrix_calls == 0


def test_empty_request_is_rejected(api_client: TestClient, maps: DummyMaps):
    response = api_client.post("/api/routes/optimize", json=_payload([]), headers=AUTH)

    assert response.status_code == 400
    assert response.json()["detail"] == "No deliveries provided"


def test_no_valid_destinations(api_client: TestClient, maps: DummyMaps):
    deliveries = [{"id": "d1", "address": "Unknown lane"}, {"id": "d2", "address": "Nowhere"}]

    response = api_client.post("/api/routes/optimize", json=_payload(deliveries), headers=AUTH)

    assert response.status_code == 400
    assert response.json() == {"detail": "No valid delivery locations found"}
    assert maps.matrix_calls == 0


def test_provider_error_hides_provider_text(api_client: TestClient, maps: DummyMaps):
    maps.matrix_outcome = ProviderFailure(status="REQUEST_DENIED", message="The provided API key is invalid.")
    deliveries = [
        {"id": "d1", "address": "Connaught Place", "latitude": 28.63, "longitude": 77.22},
        {"id": "d2", "address": "Saket", "latitude": 28.52, "longitude": 77.21},
    ]

    response = api_client.post("/api/routes/optimize", json=_payload(deliveries), headers=AUTH)

    assert response.status_code == 502
    assert response.json() == {"detail": "Routing provider unavailable"}


def test_half_coordinates_are_invalid(api_client: TestClient, maps: DummyMaps):
    deliveries = [{"id": "d1", "address": "Connaught Place", "latitude": 28.63}]

    response = api_client.post("/api/routes/optimize", json=_payload(deliveries), headers=AUTH)

    assert response.status_code == 422
    assert maps.geocode_calls == []


def test_timeout_abandons_the_request(api_client: TestClient, maps: DummyMaps, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(settings, "optimization_timeout_seconds", 0.05)
    maps.delay = 1.0

    response = api_client.post(
        "/api/routes/optimize", json=_payload([{"id": "d1", "address": "Karol Bagh, Delhi"}]), headers=AUTH
    )

    assert response.status_code == 504


def test_credentials_are_checked_before_body_validation(api_client: TestClient, maps: DummyMaps):
    half_coordinates = {
        "deliveries": [{"id": "a", "address": "x", "latitude": 1.0}],
        "startLocation": {"latitude": 28.6139, "longitude": 77.209, "address": "Depot"},
    }

    first = api_client.post("/api/routes/optimize", json=half_coordinates)
    second = api_client.post("/api/routes/optimize", json={"deliveries": []})

    assert first.status_code == 401
    assert second.status_code == 401
    assert first.headers["www-authenticate"] == "Bearer"
    assert maps.geocode_calls == []


def test_rejected_token_is_unauthorized(api_client: TestClient, maps: DummyMaps, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(settings, "api_tokens", ("expected-token",))

    response = api_client.post(
        "/api/routes/optimize", json=_payload([{"id": "d1", "address": "Karol Bagh, Delhi"}]), headers=AUTH
    )

    assert response.status_code == 401
    assert maps.geocode_calls == []


def test_null_deliveries_is_an_empty_request(api_client: TestClient, maps: DummyMaps):
    body = _payload([])
    body["deliveries"] = None

    response = api_client.post("/api/routes/optimize", json=body, headers=AUTH)

    assert response.status_code == 400
    assert response.json() == {"detail": "No deliveries provided"}
