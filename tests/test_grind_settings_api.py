def test_grind_size_out_of_range_rejected(client):
    response = client.post(
        "/api/grindsettings",
        json={"grindSize": 35, "grindTime": "00:00:12", "grindWeight": 18.0, "grinderType": "Comandante C40"},
    )

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "BUSINESS_VALIDATION_ERROR"
    assert "Grind size must be between 1 and 30" in error["message"]


def test_valid_setting_round_trips(client):
    payload = {
        "grindSize": 15,
        "grindTime": "00:00:12",
        "grindWeight": 18.5,
        "grinderType": "Comandante C40",
        "notes": "Medium fine",
    }

    created = client.post("/api/grindsettings", json=payload)
    assert created.status_code == 201

    fetched = client.get(f"/api/grindsettings/{created.json()['id']}").json()
    for key, value in payload.items():
        assert fetched[key] == value


def test_grind_time_accepts_seconds(client):
    response = client.post(
        "/api/grindsettings",
        json={"grindSize": 10, "grindTime": 75, "grindWeight": 15.0, "grinderType": "Baratza Encore"},
    )

    assert response.status_code == 201
    assert response.json()["grindTime"] == "00:01:15"


def test_malformed_grind_time_is_a_field_error(client):
    response = client.post(
        "/api/grindsettings",
        json={"grindSize": 10, "grindTime": "soon", "grindWeight": 15.0, "grinderType": "Baratza Encore"},
    )

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert error["details"][0]["field"] == "grindTime"


def test_filters_by_size_range(client, create_grind_setting):
    for size in (5, 15, 25):
        create_grind_setting(grindSize=size)

    response = client.get("/api/grindsettings", params={"minGrindSize": 10, "maxGrindSize": 30})

    assert [setting["grindSize"] for setting in response.json()] == [15, 25]


def test_grinder_types_are_distinct_and_sorted(client, create_grind_setting):
    create_grind_setting(grinderType="Niche Zero")
    create_grind_setting(grinderType="Baratza Encore")
    create_grind_setting(grinderType="Niche Zero", grindSize=12)

    response = client.get("/api/grindsettings/grinder-types")

    assert response.json() == ["Baratza Encore", "Niche Zero"]


def test_recent_only_lists_used_settings(client, create_bean, create_grind_setting, create_brew_session):
    bean = create_bean()
    unused = create_grind_setting(grindSize=3)
    first = create_grind_setting(grindSize=8)
    second = create_grind_setting(grindSize=12)
    create_brew_session(bean, first)
    create_brew_session(bean, second)

    ids = [setting["id"] for setting in client.get("/api/grindsettings/recent").json()]

    assert ids == [second["id"], first["id"]]
    assert unused["id"] not in ids


def test_update_missing_setting_is_not_found(client):
    response = client.put(
        "/api/grindsettings/42",
        json={"grindSize": 10, "grindTime": "00:00:10", "grindWeight": 15.0, "grinderType": "Baratza Encore"},
    )

    assert response.status_code == 404
    assert response.json()["error"]["message"] == "GrindSetting with ID 42 was not found."


def test_delete_referenced_setting_conflicts(client, create_bean, create_grind_setting, create_brew_session):
    grind = create_grind_setting()
    create_brew_session(create_bean(), grind)

    response = client.delete(f"/api/grindsettings/{grind['id']}")

    assert response.status_code == 409
    assert response.json()["error"]["message"].startswith("Cannot delete grind setting because it is referenced")


def test_huge_grind_time_is_a_field_error(client):
    response = client.post(
        "/api/grindsettings",
        json={"grindSize": 10, "grindTime": 1e20, "grindWeight": 15.0, "grinderType": "Niche"},
    )

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert error["details"][0]["field"] == "grindTime"


def test_nan_grind_weight_is_a_field_error(client):
    response = client.post(
        "/api/grindsettings",
        content='{"grindSize": 10, "grindTime": "00:00:10", "grindWeight": NaN, "grinderType": "Niche"}',
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert [detail["field"] for detail in error["details"]] == ["grindWeight"]
