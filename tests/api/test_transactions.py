"""
Tests for the posting endpoints.
"""


def create_account(client, name, currency="AED"):
    return client.post("/accounts", json={"name": name, "currency": currency}).json()


class TestPostingEndpoints:

    def test_deposit(self, client):
        cash = create_account(client, "Cash")

        response = client.post("/transactions/deposit", json={
            "account_id": cash["id"],
            "amount": "100",
            "currency": "aed",
            "remarks": "Counter",
            "posted_by": "cashier",
        })

        assert response.status_code == 201
        assert response.json()["currency"] == "AED"

    def test_deposit_to_unknown_account_is_404(self, client):
        response = client.post("/transactions/deposit", json={
            "account_id": 123,
            "amount": "100",
            "currency": "AED",
            "remarks": "Counter",
            "posted_by": "cashier",
        })
        assert response.status_code == 404

    def test_withdrawal_currency_mismatch_is_400(self, client):
        cash = create_account(client, "Cash")
        response = client.post("/transactions/withdraw", json={
            "account_id": cash["id"],
            "amount": "100",
            "currency": "USD",
            "remarks": "Petty cash",
            "posted_by": "cashier",
        })
        assert response.status_code == 400

    def test_transfer(self, client):
        cash = create_account(client, "Cash")
        bank = create_account(client, "Bank")

        response = client.post("/transactions/transfer", json={
            "from_account_id": cash["id"],
            "to_account_id": bank["id"],
            "amount": "200",
            "amount_confirm": "200",
            "charges": "2.5",
            "trx": "TRX-77",
            "posted_by": "cashier",
        })

        assert response.status_code == 201
        data = response.json()
        assert data["trx"] == "TRX-77"
        assert data["from_account"] == cash["id"]

    def test_transfer_confirmation_mismatch_is_422(self, client):
        response = client.post("/transactions/transfer", json={
            "from_account_id": 1,
            "to_account_id": 2,
            "amount": "200",
            "amount_confirm": "20",
            "posted_by": "cashier",
        })
        assert response.status_code == 422
