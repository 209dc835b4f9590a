"""Shared fixtures: an in-memory database reset for every test and a client for the app."""

import os

os.environ.setdefault("BREWLOG_DATABASE_URL", "sqlite://")
os.environ.setdefault("BREWLOG_LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient

from brewlog.backend.db import engine
from brewlog.backend.main import app
from brewlog.backend.models import Base


@pytest.fixture(autouse=True)
def fresh_database():
    Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)
    yield
    Base.metadata.drop_all(engine)


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def create_bean(client):
    def _create(**overrides):
        payload = {"name": "Yirgacheffe", "brand": "Onyx", "roastLevel": "Light", "origin": "Ethiopia"}
        payload.update(overrides)
        response = client.post("/api/coffeebeans", json=payload)
        assert response.status_code == 201, response.text
        return response.json()

    return _create


@pytest.fixture
def create_grind_setting(client):
    def _create(**overrides):
        payload = {"grindSize": 15, "grindTime": "00:00:12", "grindWeight": 18.0, "grinderType": "Comandante C40"}
        payload.update(overrides)
        response = client.post("/api/grindsettings", json=payload)
        assert response.status_code == 201, response.text
        return response.json()

    return _create


@pytest.fixture
def create_equipment(client):
    def _create(**overrides):
        payload = {
            "vendor": "Breville",
            "model": "Barista Express",
            "type": "EspressoMachine",
            "specifications": {"Pressure": "15 bar"},
        }
        payload.update(overrides)
        response = client.post("/api/equipment", json=payload)
        assert response.status_code == 201, response.text
        return response.json()

    return _create


@pytest.fixture
def create_brew_session(client):
    def _create(bean, grind_setting, equipment=None, **overrides):
        payload = {
            "method": "Espresso",
            "waterTemperature": 93.0,
            "brewTime": "00:00:28",
            "tastingNotes": "Bright and sweet",
            "rating": 8,
            "isFavorite": False,
            "coffeeBeanId": bean["id"],
            "grindSettingId": grind_setting["id"],
            "brewingEquipmentId": equipment["id"] if equipment else None,
        }
        payload.update(overrides)
        response = client.post("/api/brewsessions", json=payload)
        assert response.status_code == 201, response.text
        return response.json()

    return _create
