import pytest
import requests

from conftest import FakeResponse, FakeSession
from smbdash.domain.errors import ApiError
from smbdash.repositories.api_repo import ApiRepository


def _repo(*responses):
    session = FakeSession(*responses)
    return ApiRepository("http://api.test/api/", timeout=3, session=session), session


def test_list_transactions_parses_page_and_nested_product():
    body = {
        "transactions": [
            {
                "id": 1,
                "type": "sale",
                "amount": "120.5",
                "description": "Counter",
                "date": "2024-06-01T10:00:00.000Z",
                "product": {"id": 4, "name": "Mug"},
            },
            {"id": 2, "type": "capital", "amount": 50, "description": "Seed", "date": "2024-06-02T10:00:00.000Z"},
        ],
        "total": 12,
    }
    repo, session = _repo(FakeResponse(200, body))

    page = repo.list_transactions(2, 2)

    req = session.requests[0]
    assert req["method"] == "GET"
    assert req["url"] == "http://api.test/api/transactions"
    assert req["params"] == {"page": 2, "limit": 2}
    assert req["timeout"] == 3
    assert page.total == 12
    assert page.is_full
    assert page.transactions[0].amount == 120.5
    assert page.transactions[0].product_id == 4
    assert page.transactions[0].product_name == "Mug"
    assert page.transactions[1].product_id is None


def test_create_transaction_omits_missing_product_fields():
    repo, session = _repo(FakeResponse(201, {"id": 9}))

    created = repo.create_transaction("capital", 100.0, "Seed")

    assert created == {"id": 9}
    assert session.requests[0]["json"] == {"type": "capital", "amount": 100.0, "description": "Seed"}


def test_create_sale_sends_camel_case_product_id():
    repo, session = _repo(FakeResponse(201, {"id": 10}))

    repo.create_transaction("sale", 37.5, "Walk-in", product_id=7, quantity=3)

    assert session.requests[0]["json"] == {
        "type": "sale",
        "amount": 37.5,
        "description": "Walk-in",
        "productId": 7,
        "quantity": 3,
    }


def test_update_product_payload_uses_api_field_names():
    repo, session = _repo(FakeResponse(200, {"id": 3}))

    repo.update_product(
        3,
        name="Cake",
        profit_margin=25.0,
        raw_materials=[{"raw_material_id": 1, "quantity": 4}],
        stock_to_add=2,
    )

    req = session.requests[0]
    assert req["method"] == "PATCH"
    assert req["url"].endswith("/products/3")
    assert req["json"] == {
        "name": "Cake",
        "profitMargin": 25.0,
        "rawMaterials": [{"rawMaterialId": 1, "quantity": 4.0}],
        "stockToAdd": 2,
    }


def test_server_error_message_is_surfaced_with_status():
    repo, _ = _repo(FakeResponse(400, {"error": "Insufficient cash balance"}))

    with pytest.raises(ApiError) as exc:
        repo.create_transaction("purchase", 1e9, "Too much")

    assert str(exc.value) == "Insufficient cash balance"
    assert exc.value.status_code == 400


def test_http_error_without_json_body_still_raises_api_error():
    repo, _ = _repo(FakeResponse(500, raw=b"<html>boom</html>"))

    with pytest.raises(ApiError) as exc:
        repo.list_products()
    assert exc.value.status_code == 500


def test_unreachable_server_raises_api_error():
    repo, _ = _repo(requests.ConnectionError("connection refused"))

    with pytest.raises(ApiError, match="API request failed"):
        repo.list_products()


def test_delete_accepts_empty_response():
    repo, session = _repo(FakeResponse(204))

    assert repo.delete_raw_material(5) is None
    assert session.requests[0]["method"] == "DELETE"
    assert session.requests[0]["url"].endswith("/raw-materials/5")


def test_get_cash_parses_movements_and_rejects_empty_body():
    body = {
        "id": 1,
        "balance": "250.75",
        "lastUpdated": "2024-06-15T08:00:00.000Z",
        "movements": [
            {"id": 1, "type": "addition", "amount": 300, "description": "Seed", "date": "2024-06-01T08:00:00.000Z"},
        ],
    }
    repo, _ = _repo(FakeResponse(200, body), FakeResponse(200))

    cash = repo.get_cash()
    assert cash.balance == 250.75
    assert cash.movements[0].type == "addition"

    with pytest.raises(ApiError, match="Cash record not available"):
        repo.get_cash()


def test_stock_movements_are_filtered_by_kind():
    rows = [
        {"id": 1, "date": "2024-06-01T08:00:00.000Z", "description": "Production", "quantity": 5, "type": "in",
         "product": {"name": "Cake"}},
    ]
    repo, session = _repo(FakeResponse(200, rows))

    movements = repo.list_stock_movements("product")

    assert session.requests[0]["params"] == {"type": "product"}
    assert movements[0].product_name == "Cake"
    assert movements[0].quantity == 5.0


@pytest.mark.parametrize(
    "body",
    [
        [{"name": "No id", "stock": 1}],
        [{"id": 1, "name": "Bad price", "sellingPrice": "twelve"}],
        {"unexpected": "shape"},
    ],
)
def test_malformed_product_rows_raise_api_error(body):
    repo, _ = _repo(FakeResponse(200, body))

    with pytest.raises(ApiError, match="malformed products"):
        repo.list_products()
