import pytest

from maonamassa.schemas.contract import VALID_STATUS
from tests.conftest import auth


@pytest.fixture
def strict(settings):
    settings.STRICT_STATUS_TRANSITIONS = True
    settings.STRICT_RATING = True
    return settings


def test_new_contract_starts_as_criado(contract):
    record = contract["record"]
    assert record["status"] == "criado"
    assert record["clientId"] == contract["client_id"]
    assert record["professionalId"] == contract["professional_id"]


def test_both_parties_can_read_and_update(client, contract):
    path = f"/contracts/{contract['record']['id']}"

    for token in (contract["client"], contract["professional"]):
        assert client.get(path, headers=auth(token)).status_code == 200
        res = client.patch(path, json={"description": "Atualizado"}, headers=auth(token))
        assert res.status_code == 200

    listing = client.get("/contracts", headers=auth(contract["professional"])).json()
    assert [c["id"] for c in listing] == [contract["record"]["id"]]


def test_third_party_cannot_touch_contract(client, contract):
    path = f"/contracts/{contract['record']['id']}"
    stranger = auth(contract["stranger"])

    assert client.get(path, headers=stranger).status_code == 403
    assert client.patch(path, json={"description": "x"}, headers=stranger).status_code == 403
    assert client.put(f"{path}/status", json={"status": "aceito"}, headers=stranger).status_code == 403
    assert client.get("/contracts", headers=stranger).json() == []


def test_professional_cannot_steal_contract(client, contract):
    path = f"/contracts/{contract['record']['id']}"
    res = client.patch(
        path,
        json={"clientId": 999, "professionalId": 999},
        headers=auth(contract["professional"]),
    )
    assert res.json()["clientId"] == contract["client_id"]
    assert res.json()["professionalId"] == contract["professional_id"]


def test_plain_update_cannot_set_unknown_status(client, contract):
    path = f"/contracts/{contract['record']['id']}"
    token = auth(contract["client"])

    bad = client.patch(path, json={"status": "pago"}, headers=token)
    assert bad.status_code == 400
    assert bad.json()["error"] == "InvalidStatus"

    replaced = client.put(path, json={"description": "Novo"}, headers=token)
    assert replaced.json()["status"] == "criado"


def test_invalid_status_lists_valid_values(client):
    res = client.put("/contracts/1/status", json={"status": "foo"})

    assert res.status_code == 400
    body = res.json()
    assert body["error"] == "InvalidStatus"
    assert body["validStatus"] == ["criado", "aceito", "em_andamento", "concluido", "cancelado"]
    assert VALID_STATUS == body["validStatus"]


def test_missing_status_is_invalid(client):
    res = client.put("/contracts/1/status", json={})
    assert res.status_code == 400
    assert res.json()["error"] == "InvalidStatus"


def test_status_change_is_persisted(client, contract, store):
    contract_id = contract["record"]["id"]

    res = client.put(
        f"/contracts/{contract_id}/status",
        json={"status": "aceito"},
        headers=auth(contract["professional"]),
    )

    assert res.status_code == 200
    body = res.json()
    assert body["status"] == "aceito"
    assert "aceito" in body["message"]
    stored = store.get("contracts", contract_id)
    assert stored["status"] == "aceito"
    assert stored["acceptedAt"] == body["timestamp"]
    assert stored["updatedAt"] == body["timestamp"]
    assert stored["createdAt"] == contract["record"]["createdAt"]


def test_loose_mode_accepts_any_known_status(client, contract, store):
    contract_id = contract["record"]["id"]

    res = client.put(
        f"/contracts/{contract_id}/status",
        json={"status": "concluido"},
        headers=auth(contract["client"]),
    )

    assert res.status_code == 200
    assert store.get("contracts", contract_id)["completedAt"] == res.json()["timestamp"]


def test_status_requires_authentication(client, contract):
    res = client.put(f"/contracts/{contract['record']['id']}/status", json={"status": "aceito"})
    assert res.status_code == 401


def test_status_of_unknown_contract(client, contract):
    res = client.put(
        "/contracts/999/status", json={"status": "aceito"}, headers=auth(contract["client"])
    )
    assert res.status_code == 404


def test_strict_mode_walks_the_lifecycle(client, contract, strict):
    path = f"/contracts/{contract['record']['id']}/status"
    pro = auth(contract["professional"])

    jump = client.put(path, json={"status": "concluido"}, headers=pro)
    assert jump.status_code == 400
    assert jump.json()["error"] == "InvalidTransition"
    assert jump.json()["allowed"] == ["aceito", "cancelado"]

    for status in ("aceito", "em_andamento", "em_andamento", "concluido"):
        assert client.put(path, json={"status": status}, headers=pro).status_code == 200

    back = client.put(path, json={"status": "cancelado"}, headers=pro)
    assert back.status_code == 400


def test_rating_out_of_range(client):
    for rating in (0, 6, 5.5, "5", True, None):
        res = client.put("/contracts/1/avaliar", json={"rating": rating})
        assert res.status_code == 400, rating
        assert res.json()["error"] == "InvalidRating"


def test_rating_is_echoed_and_persisted(client, contract, store):
    contract_id = contract["record"]["id"]

    res = client.put(
        f"/contracts/{contract_id}/avaliar",
        json={"rating": 3, "comment": "ok"},
        headers=auth(contract["client"]),
    )

    assert res.status_code == 200
    body = res.json()
    assert body["rating"] == 3
    assert body["comment"] == "ok"
    assert body["timestamp"]
    stored = store.get("contracts", contract_id)
    assert stored["rating"] == 3
    assert stored["comment"] == "ok"
    assert stored["ratedAt"] == body["timestamp"]


def test_rating_accepts_legacy_field_names(client, contract):
    res = client.put(
        f"/contracts/{contract['record']['id']}/avaliar",
        json={"nota": 5, "comentario": "Excelente"},
        headers=auth(contract["client"]),
    )
    assert res.status_code == 200
    assert res.json()["rating"] == 5
    assert res.json()["comment"] == "Excelente"


def test_strict_rating_requires_concluded_and_once(client, contract, strict):
    contract_id = contract["record"]["id"]
    token = auth(contract["client"])
    rate = lambda: client.put(  # noqa: E731
        f"/contracts/{contract_id}/avaliar", json={"rating": 4}, headers=token
    )

    early = rate()
    assert early.status_code == 400
    assert early.json()["error"] == "InvalidRating"

    for status in ("aceito", "em_andamento", "concluido"):
        client.put(f"/contracts/{contract_id}/status", json={"status": status}, headers=token)

    assert rate().status_code == 200
    again = rate()
    assert again.status_code == 409
    assert again.json()["error"] == "AlreadyRated"


def test_loose_mode_keeps_a_valid_initial_status(client, register):
    token, _ = register("ana@maonamassa.com.br")
    res = client.post("/contracts", json={"status": "aceito"}, headers=auth(token))
    assert res.json()["status"] == "aceito"


def test_strict_mode_always_creates_criado(client, register, store, strict):
    token, _ = register("ana@maonamassa.com.br")

    res = client.post("/contracts", json={"status": "concluido"}, headers=auth(token))

    assert res.status_code == 201
    contract_id = res.json()["id"]
    assert store.get("contracts", contract_id)["status"] == "criado"
    rated = client.put(
        f"/contracts/{contract_id}/avaliar", json={"rating": 5}, headers=auth(token)
    )
    assert rated.status_code == 400
    assert rated.json()["error"] == "InvalidRating"


def test_strict_mode_applies_to_plain_updates(client, contract, store, strict):
    contract_id = contract["record"]["id"]
    path = f"/contracts/{contract_id}"
    token = auth(contract["client"])

    jump = client.patch(path, json={"status": "concluido"}, headers=token)
    assert jump.status_code == 400
    assert jump.json()["error"] == "InvalidTransition"
    assert jump.json()["from"] == "criado"
    assert store.get("contracts", contract_id)["status"] == "criado"

    step = client.patch(path, json={"status": "aceito"}, headers=token)
    assert step.status_code == 200
    assert step.json()["status"] == "aceito"


def test_non_text_comment_is_stored_as_text(client, contract, store):
    contract_id = contract["record"]["id"]

    res = client.put(
        f"/contracts/{contract_id}/avaliar",
        json={"rating": 3, "comment": 5},
        headers=auth(contract["client"]),
    )

    assert res.status_code == 200
    assert res.json()["comment"] == "5"
    assert store.get("contracts", contract_id)["comment"] == "5"
