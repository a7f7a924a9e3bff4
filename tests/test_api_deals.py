from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from crm_ledger.models import Deal


def _create_deal(client, seed, **overrides):
    body = {
        "customerId": seed.customer_id,
        "requirement": "Core switch upgrade",
        "dealValue": 10000,
        "dealApprovalValue": 9000,
        "advancePayment": 2000,
    }
    body.update(overrides)
    return client.post(f"/{seed.company_id}/deals", json=body)


def _payment(deal_id, amount, **overrides):
    body = {"dealId": deal_id, "amount": amount, "paymentDate": "2026-10-19T10:00:00Z", "paymentType": "Cash"}
    body.update(overrides)
    return body


def test_deal_and_payment_walkthrough(client, seed):
    created = _create_deal(client, seed)
    assert created.status_code == 201
    deal = created.json()["data"]
    assert created.json()["success"] is True
    assert deal["dealID"].startswith("ACME")
    assert deal["balanceAmount"] == 7000.0
    assert deal["customer"]["customerName"] == "Acme Corp."

    recorded = client.post(
        f"/{seed.company_id}/deals/payments",
        json={
            "dealId": deal["id"],
            "amount": 3000,
            "paymentDate": datetime.now(timezone.utc).isoformat(),
            "paymentType": "Bank Transfer",
            "createdById": seed.employee_id,
        },
    )
    assert recorded.status_code == 201
    payment_id = recorded.json()["data"]["id"]

    history = client.get(f"/{seed.company_id}/deals/payments", params={"dealId": deal["id"]}).json()["data"]
    assert history["balanceAmount"] == 4000.0
    assert history["totalPaid"] == 5000.0
    assert len(history["payments"]) == 2
    newest = history["payments"][0]
    assert newest["paymentType"] == "Bank Transfer"
    assert newest["createdBy"] == {"id": seed.employee_id, "name": "Dana Reyes", "email": "dana@northwind.test"}
    assert newest["balanceAfter"] == 4000.0
    assert datetime.fromisoformat(newest["paymentDate"].replace("Z", "+00:00")).utcoffset() == timedelta(0)
    assert datetime.fromisoformat(deal["createdAt"].replace("Z", "+00:00")).utcoffset() == timedelta(0)

    deleted = client.request("DELETE", f"/{seed.company_id}/deals/payments", json={"id": payment_id})
    assert deleted.status_code == 200
    history = client.get(f"/{seed.company_id}/deals/payments", params={"dealId": deal["id"]}).json()["data"]
    assert history["balanceAmount"] == 7000.0
    assert len(history["payments"]) == 1


def test_overpayment_returns_400(client, seed):
    deal = _create_deal(client, seed).json()["data"]

    response = client.post(f"/{seed.company_id}/deals/payments", json=_payment(deal["id"], 7000.01))

    assert response.status_code == 400
    assert response.json()["success"] is False


@pytest.mark.parametrize("missing", ["paymentDate", "paymentType"])
def test_payment_without_date_or_type_is_400(client, seed, missing):
    deal = _create_deal(client, seed).json()["data"]
    body = _payment(deal["id"], 100)
    del body[missing]

    response = client.post(f"/{seed.company_id}/deals/payments", json=body)

    assert response.status_code == 400
    assert response.json()["success"] is False
    history = client.get(f"/{seed.company_id}/deals/payments", params={"dealId": deal["id"]}).json()["data"]
    assert history["balanceAmount"] == 7000.0


def test_cross_company_payment_delete_is_forbidden(client, seed, db_session):
    deal = _create_deal(client, seed).json()["data"]
    payment = client.post(f"/{seed.company_id}/deals/payments", json=_payment(deal["id"], 500)).json()

    response = client.request(
        "DELETE", f"/{seed.other_company_id}/deals/payments", json={"id": payment["data"]["id"]}
    )

    assert response.status_code == 403
    assert response.json()["error"]
    db_session.expire_all()
    assert db_session.get(Deal, deal["id"]).balance_amount == Decimal("6500")


def test_non_numeric_company_id_is_400(client, seed):
    response = client.get("/acme/deals")

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid companyId"


def test_malformed_body_and_sort_key_are_400(client, seed):
    assert _create_deal(client, seed, dealValue="lots").status_code == 400
    assert client.get(f"/{seed.company_id}/deals", params={"orderBy": "password"}).status_code == 400


def test_approval_above_value_is_rejected(client, seed):
    response = _create_deal(client, seed, dealApprovalValue=12000)

    assert response.status_code == 400
    assert "dealApprovalValue" in response.json()["error"]


def test_missing_deal_is_404(client, seed):
    response = client.put(f"/{seed.company_id}/deals", json={"id": 9999, "requirement": "x"})

    assert response.status_code == 404


def test_list_deals_second_page(client, seed):
    for _ in range(12):
        assert _create_deal(client, seed, advancePayment=0).status_code == 201

    body = client.get(f"/{seed.company_id}/deals", params={"page": 2, "rowsPerPage": 10}).json()

    assert body["total"] == 12
    assert body["page"] == 2
    assert body["totalPages"] == 2
    assert len(body["data"]) == 2
    assert body["data"][-1]["dealID"].endswith("012")


def test_zero_rows_per_page_is_400(client, seed):
    response = client.get(f"/{seed.company_id}/deals", params={"rowsPerPage": 0, "pageSize": 10})

    assert response.status_code == 400


def test_update_and_delete_deal(client, seed):
    deal = _create_deal(client, seed).json()["data"]

    updated = client.put(
        f"/{seed.company_id}/deals",
        json={"id": deal["id"], "dealApprovalValue": 9500, "requirement": "Core + edge switches"},
    )
    assert updated.status_code == 200
    assert updated.json()["data"]["balanceAmount"] == 7500.0

    deleted = client.request("DELETE", f"/{seed.company_id}/deals", json={"id": deal["id"]})
    assert deleted.status_code == 200
    assert client.get(f"/{seed.company_id}/deals").json()["total"] == 0


def test_export_returns_csv(client, seed):
    _create_deal(client, seed)

    response = client.get(f"/{seed.company_id}/deals/export")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert response.text.splitlines()[0].startswith("Deal ID,Customer")
