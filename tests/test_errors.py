import pytest
from fastapi.testclient import TestClient

from brewlog.backend.errors import error_response
from brewlog.backend.exceptions import FieldError, FieldValidationError, NotFoundError, ReferentialIntegrityError
from brewlog.backend.main import app


def test_health(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "Healthy"
    assert body["version"] == "1.0.0"
    assert body["timestamp"]


def test_malformed_body_lists_fields(client):
    response = client.post("/api/grindsettings", json={"grindSize": "fine", "grinderType": "Niche"})

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert error["message"] == "One or more validation errors occurred"
    assert {detail["field"] for detail in error["details"]} >= {"grindSize", "grindTime", "grindWeight"}


def test_non_numeric_id_is_a_validation_error(client):
    response = client.get("/api/brewsessions/abc")

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


def test_unexpected_error_is_hidden(client, mocker):
    mocker.patch(
        "brewlog.backend.services.coffee_beans.CoffeeBeanService.find",
        side_effect=RuntimeError("database is on fire"),
    )

    with TestClient(app, raise_server_exceptions=False) as failing_client:
        response = failing_client.get("/api/coffeebeans")

    assert response.status_code == 500
    assert response.json() == {
        "error": {"code": "INTERNAL_SERVER_ERROR", "message": "An unexpected error occurred", "details": []}
    }


def test_error_response_mapping():
    not_found = error_response(NotFoundError("BrewSession", 3))
    conflict = error_response(ReferentialIntegrityError("still in use"))
    invalid = error_response(FieldValidationError([FieldError("count", "Count must be between 1 and 100")]))

    assert not_found.status_code == 404
    assert conflict.status_code == 409
    assert invalid.status_code == 400
    assert b'"field":"count"' in invalid.body


@pytest.mark.parametrize(
    "prefix", ["/api/coffeebeans", "/api/grindsettings", "/api/equipment", "/api/brewsessions"]
)
def test_delete_missing_record_is_not_found(client, prefix):
    response = client.delete(f"{prefix}/999")

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "NOT_FOUND"


def test_id_beyond_integer_range_is_a_validation_error(client):
    response = client.get("/api/coffeebeans/99999999999999999999")

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert error["details"][0]["field"] == "bean_id"


def test_unknown_route_uses_error_shape(client):
    response = client.get("/api/nope")

    assert response.status_code == 404
    error = response.json()["error"]
    assert error["code"] == "NOT_FOUND"
    assert error["details"] == []


def test_wrong_method_uses_error_shape(client):
    response = client.patch("/api/coffeebeans")

    assert response.status_code == 405
    assert response.json()["error"]["code"] == "METHOD_NOT_ALLOWED"
    assert "GET" in response.headers["allow"]
