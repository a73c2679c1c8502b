"""
Tests for the HTTP API.

Runs the portfolio and tax routers against an in-memory database.
"""
import pytest


def _seed(client, user_id="user-1"):
    """A portfolio with a stock, an Italian bond and a crypto holding."""
    portfolio = client.post("/portfolio/", json={"user_id": user_id, "name": "Main"}).json()

    stock = client.post("/portfolio/assets", json={
        "portfolio_id": portfolio["id"],
        "asset_type": "stock",
        "name": "ACME Corp",
        "symbol": "ACME",
    }).json()
    bond = client.post("/portfolio/assets", json={
        "portfolio_id": portfolio["id"],
        "asset_type": "bond",
        "name": "BTP 2030",
        "metadata": {"country": "IT"},
    }).json()
    crypto = client.post("/portfolio/assets", json={
        "portfolio_id": portfolio["id"],
        "asset_type": "crypto",
        "name": "Bitcoin",
        "quantity": "0.1",
        "current_price": "40000",
    }).json()

    for payload in [
        {"asset_id": stock["id"], "transaction_type": "buy", "transaction_date": "2024-01-15",
         "quantity": "10", "price": "100"},
        {"asset_id": stock["id"], "transaction_type": "sell", "transaction_date": "2024-06-15",
         "quantity": "10", "price": "150"},
        {"asset_id": bond["id"], "transaction_type": "buy", "transaction_date": "2023-05-01",
         "quantity": "1000", "price": "98"},
        {"asset_id": bond["id"], "transaction_type": "sell", "transaction_date": "2024-09-01",
         "quantity": "1000", "price": "99"},
    ]:
        assert client.post("/portfolio/transactions", json=payload).status_code == 200

    for payload in [
        {"portfolio_id": portfolio["id"], "asset_id": stock["id"], "flow_type": "dividend",
         "amount": "200", "payment_date": "2024-03-01"},
        {"portfolio_id": portfolio["id"], "flow_type": "interest",
         "amount": "100", "payment_date": "2024-12-31"},
        {"portfolio_id": portfolio["id"], "flow_type": "dividend",
         "amount": "500", "payment_date": "2024-12-15", "is_forecasted": True},
    ]:
        assert client.post("/portfolio/cash-flows", json=payload).status_code == 200

    return portfolio, stock, bond, crypto


class TestPortfolioRoutes:
    """Test portfolio data entry."""

    def test_create_and_list(self, client):
        portfolio, stock, bond, crypto = _seed(client)

        portfolios = client.get("/portfolio/", params={"user_id": "user-1"}).json()
        assert [p["id"] for p in portfolios] == [portfolio["id"]]

        assets = client.get(f"/portfolio/{portfolio['id']}/assets").json()
        assert [a["name"] for a in assets] == ["ACME Corp", "BTP 2030", "Bitcoin"]
        assert assets[1]["metadata"] == {"country": "IT"}

        transactions = client.get("/portfolio/transactions", params={"asset_id": stock["id"]}).json()
        assert len(transactions) == 2

        flows = client.get(
            f"/portfolio/{portfolio['id']}/cash-flows", params={"include_forecasted": False}
        ).json()
        assert len(flows) == 2

    def test_negative_quantity_rejected(self, client):
        portfolio, stock, _, _ = _seed(client)

        response = client.post("/portfolio/transactions", json={
            "asset_id": stock["id"], "transaction_type": "buy", "transaction_date": "2024-01-15",
            "quantity": "-10", "price": "100",
        })

        assert response.status_code == 422

    def test_unknown_portfolio(self, client):
        response = client.post("/portfolio/assets", json={
            "portfolio_id": 999, "asset_type": "stock", "name": "Nothing",
        })

        assert response.status_code == 404

    def test_unknown_asset(self, client):
        response = client.post("/portfolio/transactions", json={
            "asset_id": 999, "transaction_type": "buy", "transaction_date": "2024-01-15",
            "quantity": "1", "price": "1",
        })

        assert response.status_code == 404


class TestTaxRoutes:
    """Test tax calculation endpoints."""

    def test_calculate(self, client):
        _seed(client)

        data = client.get("/tax/calculate/2024", params={"user_id": "user-1"}).json()

        assert data["tax_year"] == 2024
        assert len(data["capital_gains"]) == 2
        assert data["total_capital_gains"] == pytest.approx(1500.0)
        assert data["dividend_income"] == pytest.approx(200.0)
        assert data["interest_income"] == pytest.approx(100.0)
        assert data["total_taxable_income"] == pytest.approx(1800.0)
        assert data["breakdown"]["capital_gains_tax"] == pytest.approx(255.0)
        assert data["total_tax_owed"] == pytest.approx(333.0)
        assert data["capital_gains"][0]["tax_rate"] == pytest.approx(0.125)
        assert data["crypto_threshold"]["exceeded"] is True
        assert "report" not in data

    def test_calculate_with_report(self, client):
        _seed(client)

        data = client.get(
            "/tax/calculate/2024", params={"user_id": "user-1", "format": "report"}
        ).json()

        assert "Imposte dovute: EUR 333.00" in data["report"]

    def test_unknown_user_gets_zero_result(self, client):
        _seed(client)

        data = client.get("/tax/calculate/2024", params={"user_id": "nobody"}).json()

        assert data["capital_gains"] == []
        assert data["total_tax_owed"] == 0
        assert data["crypto_threshold"]["exceeded"] is False

    def test_portfolio_filter(self, client):
        _seed(client)
        other = client.post("/portfolio/", json={"user_id": "user-1", "name": "Empty"}).json()

        data = client.get(
            "/tax/calculate/2024", params={"user_id": "user-1", "portfolio_ids": [other["id"]]}
        ).json()

        assert data["capital_gains"] == []

    def test_invalid_tax_year(self, client):
        response = client.get("/tax/calculate/0", params={"user_id": "user-1"})

        assert response.status_code == 422

    def test_download_report(self, client):
        _seed(client)

        response = client.get("/tax/report/2024", params={"user_id": "user-1"})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert "tax_report_2024.txt" in response.headers["content-disposition"]
        assert response.text.startswith("DICHIARAZIONE REDDITI 2024")

    def test_save_and_list_events(self, client):
        _, stock, bond, _ = _seed(client)

        saved = client.post("/tax/events/2024", params={"user_id": "user-1"}).json()

        assert [e["event_type"] for e in saved] == ["capital_gain", "capital_gain", "dividend", "interest"]
        assert saved[0]["asset_id"] == bond["id"]
        assert saved[1]["asset_id"] == stock["id"]
        assert saved[3]["asset_id"] is None

        listed = client.get("/tax/events/2024", params={"user_id": "user-1"}).json()
        assert [e["id"] for e in listed] == [e["id"] for e in saved]

    def test_saving_twice_replaces_events(self, client):
        _seed(client)

        client.post("/tax/events/2024", params={"user_id": "user-1"})
        second = client.post("/tax/events/2024", params={"user_id": "user-1"}).json()

        listed = client.get("/tax/events/2024", params={"user_id": "user-1"}).json()
        assert len(listed) == 4
        assert [e["id"] for e in listed] == [e["id"] for e in second]

    def test_calculate_with_save(self, client):
        _seed(client)

        data = client.get(
            "/tax/calculate/2024", params={"user_id": "user-1", "save": True}
        ).json()

        listed = client.get("/tax/events/2024", params={"user_id": "user-1"}).json()
        assert len(listed) == 4
        assert sum(float(e["tax_owed"]) for e in listed) == pytest.approx(data["total_tax_owed"])

    def test_calculate_without_save_stores_nothing(self, client):
        _seed(client)

        client.get("/tax/calculate/2024", params={"user_id": "user-1"})

        assert client.get("/tax/events/2024", params={"user_id": "user-1"}).json() == []

    def test_malformed_metadata_does_not_break_calculation(self, client):
        portfolio = client.post("/portfolio/", json={"user_id": "user-3", "name": "Odd"}).json()
        bond = client.post("/portfolio/assets", json={
            "portfolio_id": portfolio["id"],
            "asset_type": "bond",
            "name": "BTP 2030",
            "metadata": {"country": "IT", "maturity_date": "31/12/2030"},
        }).json()
        client.post("/portfolio/assets", json={
            "portfolio_id": portfolio["id"],
            "asset_type": "real_estate",
            "name": "Flat",
            "metadata": {"square_meters": "n/a"},
        })
        for kind, when, price in [("buy", "2023-05-01", "98"), ("sell", "2024-09-01", "99")]:
            client.post("/portfolio/transactions", json={
                "asset_id": bond["id"], "transaction_type": kind, "transaction_date": when,
                "quantity": "1000", "price": price,
            })

        response = client.get("/tax/calculate/2024", params={"user_id": "user-3"})

        assert response.status_code == 200
        assert response.json()["capital_gains"][0]["tax_rate"] == pytest.approx(0.125)
        assert response.json()["total_tax_owed"] == pytest.approx(125.0)

    def test_crypto_threshold(self, client):
        _seed(client)

        data = client.get("/tax/crypto-threshold", params={"user_id": "user-1"}).json()

        assert data == {"exceeded": True, "total_value": 4000.0, "threshold": 2000.0}

    def test_fifo_mode_override(self, client):
        portfolio = client.post("/portfolio/", json={"user_id": "user-2", "name": "Multi-year"}).json()
        asset = client.post("/portfolio/assets", json={
            "portfolio_id": portfolio["id"], "asset_type": "stock", "name": "ACME Corp",
        }).json()
        for kind, when, price in [
            ("buy", "2022-03-01", "100"),
            ("sell", "2023-03-01", "110"),
            ("buy", "2023-06-01", "200"),
            ("sell", "2024-03-01", "250"),
        ]:
            client.post("/portfolio/transactions", json={
                "asset_id": asset["id"], "transaction_type": kind, "transaction_date": when,
                "quantity": "10", "price": price,
            })

        drained = client.get(
            "/tax/calculate/2024", params={"user_id": "user-2", "fifo_mode": "drain_all_sales"}
        ).json()
        legacy = client.get(
            "/tax/calculate/2024", params={"user_id": "user-2", "fifo_mode": "target_year_only"}
        ).json()

        assert drained["total_capital_gains"] == pytest.approx(500.0)
        assert legacy["total_capital_gains"] == pytest.approx(1500.0)


class TestAppRoutes:
    """Test informational endpoints."""

    def test_root(self, client):
        data = client.get("/").json()
        assert data["name"] == "Wealth Tax Engine"

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy"}
