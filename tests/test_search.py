def test_search_requires_lat_and_lon(client):
    for params in ({}, {"lat": "-19.9"}, {"lon": "-43.9"}, {"lat": "", "lon": "-43.9"}):
        res = client.get("/professionals/search", params=params)

        assert res.status_code == 400, params
        body = res.json()
        assert body["error"] == "MissingParameter"
        assert body["required"] == ["lat", "lon"]
        assert "lat" in body["example"] and "lon" in body["example"]


def test_search_applies_default_radius(client):
    res = client.get("/professionals/search", params={"lat": "-19.9", "lon": "-43.9"})

    assert res.status_code == 200
    body = res.json()
    assert body["params"]["radius"] == 8
    assert body["params"]["lat"] == -19.9
    assert body["params"]["lon"] == -43.9
    assert body["params"]["serviceId"] is None
    assert "Haversine" in body["note"]


def test_search_passes_service_filter_through(client):
    by_id = client.get(
        "/professionals/search",
        params={"lat": "1", "lon": "2", "radius": "15", "serviceId": "eletrica"},
    ).json()
    legacy = client.get(
        "/professionals/search", params={"lat": "1", "lon": "2", "servico_id": "7"}
    ).json()

    assert by_id["params"]["radius"] == 15
    assert by_id["params"]["serviceId"] == "eletrica"
    assert legacy["params"]["serviceId"] == "7"


def test_search_rejects_non_numeric_and_out_of_range(client):
    cases = [
        {"lat": "abc", "lon": "1"},
        {"lat": "1", "lon": "nan"},
        {"lat": "91", "lon": "1"},
        {"lat": "1", "lon": "-181"},
        {"lat": "1", "lon": "1", "radius": "0"},
    ]
    for params in cases:
        res = client.get("/professionals/search", params=params)
        assert res.status_code == 400, params
        assert res.json()["error"] == "InvalidParameter"
