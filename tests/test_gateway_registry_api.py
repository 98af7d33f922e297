"""API tests for the gateway registry service."""

from collections.abc import Generator
from contextlib import contextmanager

from fastapi.testclient import TestClient
from sqlalchemy import create_engine, select
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from gateway_registry.config import Settings, get_settings
from gateway_registry.db import Base, get_db_session, init_db
from gateway_registry.main import app
from gateway_registry.models import GatewayLog

API = "/api/v1"
MISSING_ID = "6f1c1f0e-0000-4000-8000-000000000000"


@contextmanager
def _build_test_client(**settings_overrides) -> Generator[tuple[TestClient, sessionmaker], None, None]:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    testing_session_local = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)
    init_db(bind=engine, seed=True)

    def override_get_db() -> Generator[Session, None, None]:
        session = testing_session_local()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db_session] = override_get_db
    if settings_overrides:
        app.dependency_overrides[get_settings] = lambda: Settings(**settings_overrides)
    try:
        with TestClient(app) as client:
            yield client, testing_session_local
    finally:
        app.dependency_overrides.clear()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


def _create_gateway(client: TestClient, serial: str = "GW-1", ip: str = "10.0.0.1", **extra) -> dict:
    response = client.post(
        f"{API}/gateways",
        json={"serialNumber": serial, "name": f"Gateway {serial}", "ipv4Address": ip, **extra},
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


def _attach(client: TestClient, gateway_id: str, uid: int):
    return client.post(
        f"{API}/gateways/{gateway_id}/devices",
        json={"uid": uid, "vendor": "Acme", "deviceTypeId": 1},
    )


def _detach(client: TestClient, gateway_id: str, device_id: str):
    return client.request("DELETE", f"{API}/gateways/{gateway_id}/devices", json={"deviceId": device_id})


def test_health() -> None:
    with _build_test_client() as (client, _):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["service"] == "gateway-registry-service"


def test_create_and_get_gateway_uses_camel_case() -> None:
    with _build_test_client() as (client, _):
        created = _create_gateway(client, location="Rack 2")
        assert created["serialNumber"] == "GW-1"
        assert created["ipv4Address"] == "10.0.0.1"
        assert created["status"] == "active"
        assert created["location"] == "Rack 2"
        assert created["devices"] == []

        first = client.get(f"{API}/gateways/{created['id']}")
        second = client.get(f"{API}/gateways/{created['id']}")
        assert first.status_code == 200
        assert first.json() == second.json()


def test_create_gateway_conflicts_return_409() -> None:
    with _build_test_client() as (client, _):
        _create_gateway(client, "GW-1", "10.0.0.1")

        same_serial = client.post(
            f"{API}/gateways", json={"serialNumber": "GW-1", "name": "Other", "ipv4Address": "10.0.0.2"}
        )
        same_ip = client.post(
            f"{API}/gateways", json={"serialNumber": "GW-2", "name": "Other", "ipv4Address": "10.0.0.1"}
        )

        assert same_serial.status_code == 409
        assert same_serial.json()["error"] == {"code": "CONFLICT", "message": "Serial number already exists"}
        assert same_ip.status_code == 409
        assert same_ip.json()["error"]["message"] == "IP address already exists"


def test_invalid_input_returns_400() -> None:
    with _build_test_client() as (client, _):
        bad_ip = client.post(f"{API}/gateways", json={"serialNumber": "GW-1", "name": "N", "ipv4Address": "10.0.1"})
        assert bad_ip.status_code == 400
        body = bad_ip.json()["error"]
        assert body["code"] == "BAD_REQUEST"
        assert any(detail["field"].endswith("ipv4Address") for detail in body["details"])

        bad_status = client.post(
            f"{API}/gateways",
            json={"serialNumber": "GW-1", "name": "N", "ipv4Address": "10.0.0.1", "status": "broken"},
        )
        assert bad_status.status_code == 400

        bad_id = client.get(f"{API}/gateways/not-a-uuid")
        assert bad_id.status_code == 400

        bad_uid = client.post(f"{API}/devices", json={"uid": 0, "vendor": "Acme", "deviceTypeId": 1})
        assert bad_uid.status_code == 400


def test_update_gateway() -> None:
    with _build_test_client() as (client, session_factory):
        gateway = _create_gateway(client, "GW-1", "10.0.0.1")
        _create_gateway(client, "GW-2", "10.0.0.2")
        url = f"{API}/gateways/{gateway['id']}"

        renamed = client.put(url, json={"name": "Core", "status": "inactive"})
        assert renamed.status_code == 200
        assert renamed.json()["data"]["name"] == "Core"
        assert renamed.json()["data"]["status"] == "inactive"
        assert renamed.json()["data"]["ipv4Address"] == "10.0.0.1"

        assert client.put(url, json={"ipv4Address": "10.0.0.1"}).status_code == 200
        assert client.put(url, json={"ipv4Address": "10.0.0.2"}).status_code == 409
        assert client.put(url, json={"serialNumber": "GW-NEW"}).status_code == 400
        assert client.put(url, json={"name": None}).status_code == 400
        assert client.put(f"{API}/gateways/{MISSING_ID}", json={"name": "x"}).status_code == 404

        with session_factory() as session:
            actions = list(
                session.scalars(
                    select(GatewayLog.action)
                    .where(GatewayLog.gateway_id == gateway["id"])
                    .order_by(GatewayLog.id)
                )
            )
        assert actions == ["CREATED", "UPDATED", "UPDATED"]


def test_gateway_device_lifecycle() -> None:
    with _build_test_client() as (client, session_factory):
        gateway = _create_gateway(client, "GW-1", "10.0.0.1")
        gateway_id = gateway["id"]

        devices = []
        for uid in range(1, 11):
            response = _attach(client, gateway_id, uid)
            assert response.status_code == 201, response.text
            devices.append(response.json()["data"])
        assert all(device["gatewayId"] == gateway_id for device in devices)

        overflow = _attach(client, gateway_id, 11)
        assert overflow.status_code == 400
        assert overflow.json()["error"]["code"] == "BAD_REQUEST"

        fifth = devices[4]
        detached = _detach(client, gateway_id, fifth["id"])
        assert detached.status_code == 200

        assert client.get(f"{API}/devices/{fifth['id']}").json()["data"]["gatewayId"] is None
        remaining = client.get(f"{API}/gateways/{gateway_id}").json()["data"]["devices"]
        assert len(remaining) == 9
        assert all(device["deviceType"]["name"] == "sensor" for device in remaining)

        assert client.delete(f"{API}/gateways/{gateway_id}").status_code == 200
        assert client.get(f"{API}/gateways/{gateway_id}").status_code == 404

        for device in remaining:
            fetched = client.get(f"{API}/devices/{device['id']}")
            assert fetched.status_code == 200
            assert fetched.json()["data"]["gatewayId"] is None

        with session_factory() as session:
            logs = list(session.scalars(select(GatewayLog).where(GatewayLog.gateway_id == gateway_id)))
        assert [log.action for log in logs] == ["DELETED"]


def test_attach_conflicts_and_missing_gateway() -> None:
    with _build_test_client() as (client, _):
        gateway = _create_gateway(client)
        assert _attach(client, gateway["id"], 5).status_code == 201
        assert _attach(client, gateway["id"], 5).status_code == 409
        assert _attach(client, MISSING_ID, 6).status_code == 404


def test_detach_errors() -> None:
    with _build_test_client() as (client, _):
        first = _create_gateway(client, "GW-1", "10.0.0.1")
        second = _create_gateway(client, "GW-2", "10.0.0.2")
        device = _attach(client, first["id"], 1).json()["data"]

        wrong_gateway = _detach(client, second["id"], device["id"])
        assert wrong_gateway.status_code == 400
        assert wrong_gateway.json()["error"]["message"] == "Device is not attached to this gateway"

        assert _detach(client, first["id"], MISSING_ID).status_code == 404
        assert _detach(client, MISSING_ID, device["id"]).status_code == 404


def test_device_cap_follows_settings() -> None:
    with _build_test_client(max_devices_per_gateway=1) as (client, _):
        gateway = _create_gateway(client)
        assert _attach(client, gateway["id"], 1).status_code == 201
        response = _attach(client, gateway["id"], 2)
        assert response.status_code == 400
        assert response.json()["error"]["message"] == "Gateway has reached maximum device limit (1)"


def test_standalone_device_crud() -> None:
    with _build_test_client() as (client, _):
        created = client.post(f"{API}/devices", json={"uid": 9001, "vendor": "Acme", "deviceTypeId": 2})
        assert created.status_code == 201
        device = created.json()["data"]
        assert device["gatewayId"] is None
        assert device["status"] == "offline"
        assert device["deviceType"]["name"] == "actuator"

        duplicate = client.post(f"{API}/devices", json={"uid": 9001, "vendor": "Other", "deviceTypeId": 1})
        assert duplicate.status_code == 409

        unknown_type = client.post(f"{API}/devices", json={"uid": 9002, "vendor": "Acme", "deviceTypeId": 99})
        assert unknown_type.status_code == 404

        url = f"{API}/devices/{device['id']}"
        updated = client.put(url, json={"uid": 9001, "status": "maintenance"})
        assert updated.status_code == 200
        assert updated.json()["data"]["status"] == "maintenance"

        assert client.delete(url).status_code == 200
        assert client.get(url).status_code == 404
        assert client.delete(url).status_code == 404


def test_list_endpoints_paginate_on_request() -> None:
    with _build_test_client() as (client, _):
        for index in range(1, 26):
            _create_gateway(client, f"GW-{index}", f"10.0.1.{index}")

        everything = client.get(f"{API}/gateways").json()
        assert everything["count"] == 25
        assert everything["pagination"] is None

        last = client.get(f"{API}/gateways", params={"page": 3, "limit": 10}).json()
        assert last["count"] == 5
        assert last["pagination"] == {
            "page": 3,
            "limit": 10,
            "total": 25,
            "totalPages": 3,
            "hasNext": False,
            "hasPrevious": True,
        }

        clamped = client.get(f"{API}/gateways", params={"page": 0, "limit": 500}).json()
        assert clamped["count"] == 25
        assert clamped["pagination"]["page"] == 1
        assert clamped["pagination"]["limit"] == 100

        devices = client.get(f"{API}/devices", params={"page": 1}).json()
        assert devices["count"] == 0
        assert devices["pagination"]["totalPages"] == 0
        assert devices["pagination"]["hasNext"] is False
        assert devices["pagination"]["hasPrevious"] is False


def test_device_type_catalog() -> None:
    with _build_test_client() as (client, _):
        response = client.get(f"{API}/device-types")
        assert response.status_code == 200
        names = [item["name"] for item in response.json()["data"]]
        assert names == ["sensor", "actuator", "camera", "controller"]
