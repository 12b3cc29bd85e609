import pytest
from flatflow.services.household_service import HouseholdService


@pytest.mark.integration
class TestChoreEndpoints:
    """Integration tests for chores."""

    def test_chore_rotation(self, client, shared_household, admin_user, member_user, headers_for):
        base = f"/api/v1/households/{shared_household.id}/chores"
        headers = headers_for(member_user)

        created = client.post(base, json={"name": "Bins", "frequency": "Weekly"}, headers=headers)
        assert created.status_code == 201
        chore = created.json()["data"]
        assert chore["assigned_user_id"] == admin_user.id

        first = client.post(f"{base}/{chore['id']}/complete", headers=headers).json()["data"]
        assert first["current_turn"] == 1
        assert first["assigned_user_id"] == member_user.id
        assert first["last_completed"] is not None

        second = client.post(f"{base}/{chore['id']}/complete", headers=headers).json()["data"]
        assert second["current_turn"] == 0
        assert second["assigned_user_id"] == admin_user.id

    def test_crud(self, client, shared_household, admin_user, headers_for):
        base = f"/api/v1/households/{shared_household.id}/chores"
        headers = headers_for(admin_user)
        chore_id = client.post(base, json={"name": "Bins"}, headers=headers).json()["data"]["id"]

        updated = client.put(f"{base}/{chore_id}", json={"description": "Tuesday night"}, headers=headers)
        assert updated.json()["data"]["description"] == "Tuesday night"

        assert len(client.get(base, headers=headers).json()["data"]) == 1
        assert client.get(f"{base}/{chore_id}", headers=headers).status_code == 200
        assert client.delete(f"{base}/{chore_id}", headers=headers).status_code == 200
        assert client.get(f"{base}/{chore_id}", headers=headers).status_code == 404

    def test_list_pages(self, client, household, admin_user, headers_for):
        base = f"/api/v1/households/{household.id}/chores"
        headers = headers_for(admin_user)
        for name in ("Bins", "Dishes", "Hoover"):
            client.post(base, json={"name": name}, headers=headers)

        page = client.get(base, params={"skip": 1, "limit": 1}, headers=headers).json()["data"]
        assert [c["name"] for c in page] == ["Dishes"]

        assert client.get(base, params={"limit": 0}, headers=headers).status_code == 422

    def test_outsider(self, client, household, outsider, headers_for):
        response = client.get(f"/api/v1/households/{household.id}/chores", headers=headers_for(outsider))

        assert response.status_code == 403


@pytest.mark.integration
class TestShoppingEndpoints:
    """Integration tests for the shopping list."""

    def test_flag_and_purchase(self, client, shared_household, admin_user, member_user, headers_for):
        base = f"/api/v1/households/{shared_household.id}/shopping"
        headers = headers_for(member_user)
        item = client.post(base, json={"name": "Milk", "category": "Dairy"}, headers=headers).json()["data"]

        flagged = client.post(f"{base}/{item['id']}/flag", headers=headers).json()["data"]
        assert flagged["is_low"] is True
        assert flagged["flagged_by_id"] == member_user.id

        low = client.get(base, params={"low_only": True}, headers=headers).json()["data"]
        assert [i["name"] for i in low] == ["Milk"]

        bought = client.post(f"{base}/{item['id']}/purchase", headers=headers).json()["data"]
        assert bought["is_low"] is False
        assert bought["flagged_by_id"] is None
        assert bought["assigned_user_id"] == member_user.id

        assert client.get(base, params={"low_only": True}, headers=headers).json()["data"] == []

    def test_update_and_delete(self, client, shared_household, admin_user, headers_for):
        base = f"/api/v1/households/{shared_household.id}/shopping"
        headers = headers_for(admin_user)
        item_id = client.post(base, json={"name": "Milk"}, headers=headers).json()["data"]["id"]

        updated = client.put(f"{base}/{item_id}", json={"quantity": 2}, headers=headers)
        assert updated.json()["data"]["quantity"] == 2

        assert client.delete(f"{base}/{item_id}", headers=headers).status_code == 200
        assert client.get(base, headers=headers).json()["data"] == []

    def test_list_pages(self, client, household, admin_user, headers_for):
        base = f"/api/v1/households/{household.id}/shopping"
        headers = headers_for(admin_user)
        for name in ("Bread", "Eggs", "Milk"):
            client.post(base, json={"name": name}, headers=headers)

        page = client.get(base, params={"skip": 2, "limit": 5}, headers=headers).json()["data"]
        assert [i["name"] for i in page] == ["Milk"]


@pytest.mark.integration
class TestExpenseEndpoints:
    """Integration tests for the expense ledger."""

    def test_three_way_split(
        self, client, db_session, shared_household, admin_user, member_user, make_user, headers_for
    ):
        erin = make_user("erin@example.com")
        HouseholdService(db_session).add_member(shared_household.id, erin)
        base = f"/api/v1/households/{shared_household.id}/expenses"

        response = client.post(
            base,
            json={"description": "Groceries", "amount": "45.50", "date": "2024-05-01"},
            headers=headers_for(admin_user),
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["date"] == "2024-05-01"
        assert {s["user_id"]: s["amount"] for s in data["shares"]} == {
            member_user.id: "15.17",
            erin.id: "15.17",
        }

        balances = client.get(f"{base}/balances", headers=headers_for(erin)).json()["data"]
        by_user = {b["user_id"]: b for b in balances}
        assert by_user[admin_user.id]["net"] == "30.34"
        assert by_user[erin.id]["owes"] == "15.17"

    def test_list_get_delete(self, client, shared_household, admin_user, member_user, headers_for):
        base = f"/api/v1/households/{shared_household.id}/expenses"
        headers = headers_for(member_user)
        expense_id = client.post(
            base,
            json={"description": "Internet", "amount": 30, "split_type": "individual", "bank_details": "IBAN"},
            headers=headers,
        ).json()["data"]["id"]

        listed = client.get(base, headers=headers).json()["data"]
        assert [e["id"] for e in listed] == [expense_id]
        assert listed[0]["shares"] == []

        assert client.get(f"{base}/{expense_id}", headers=headers).status_code == 200
        assert client.delete(f"{base}/{expense_id}", headers=headers_for(admin_user)).status_code == 200
        assert client.get(f"{base}/{expense_id}", headers=headers).status_code == 404

    def test_negative_amount(self, client, shared_household, admin_user, headers_for):
        response = client.post(
            f"/api/v1/households/{shared_household.id}/expenses",
            json={"description": "Refund", "amount": "-5"},
            headers=headers_for(admin_user),
        )

        assert response.status_code == 422
