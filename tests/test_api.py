"""API endpoint tests using FastAPI TestClient."""

import pytest

from conftest import OTHER_OWNER, make_client

API = "/api/v1"


class TestMeta:
    def test_root(self, api_client):
        response = api_client.get("/")
        assert response.status_code == 200
        assert response.json()["docs"] == "/docs"

    def test_health(self, api_client):
        assert api_client.get("/health").json() == {"status": "healthy"}

    @pytest.mark.parametrize("method, path", [
        ("POST", f"{API}/classify"),
        ("GET", f"{API}/transactions"),
        ("GET", f"{API}/learning-stats"),
        ("GET", f"{API}/tax-profile"),
    ])
    def test_requires_user_header(self, api_client, method, path):
        response = api_client.request(method, path, json={"description": "x"})
        assert response.status_code == 401

    def test_blank_user_header_rejected(self, api_client):
        response = api_client.get(f"{API}/learning-stats", headers={"X-User-Id": "  "})
        assert response.status_code == 401


class TestClassification:
    def test_classify(self, api_client, auth_headers):
        response = api_client.post(
            f"{API}/classify",
            headers=auth_headers,
            json={"description": "Adobe Creative Cloud subscription", "amount": -54.99},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["matches"] == []
        result = body["result"]
        assert result["purpose"] == "business"
        assert result["confidence"] == pytest.approx(0.8)
        assert result["write_off"] == {"is_write_off": True, "reason": "Business software"}
        assert result["needs_review"] is False
        assert result["learning_note"] is None

    def test_classify_learns_from_posted_correction(self, api_client, auth_headers):
        created = api_client.post(
            f"{API}/corrections",
            headers=auth_headers,
            json={
                "transaction_description": "Adobe Photoshop monthly",
                "original_purpose": "personal",
                "corrected_purpose": "business",
                "corrected_reason": "Client design work",
            },
        )
        assert created.status_code == 201
        assert created.json()["id"] is not None

        response = api_client.post(
            f"{API}/classify",
            headers=auth_headers,
            json={"description": "Adobe Creative Cloud subscription"},
        )

        body = response.json()
        assert body["result"]["learned_from"] == 1
        assert body["result"]["learning_note"] == "AI used 1 of your past correction"
        assert body["matches"][0]["correction"]["transaction_description"] == "Adobe Photoshop monthly"

    def test_classify_survives_unreadable_tax_profile(self, api_client, auth_headers, db, monkeypatch):
        def broken(owner):
            raise RuntimeError("database is locked")

        monkeypatch.setattr(db, "get_tax_profile", broken)

        response = api_client.post(
            f"{API}/classify",
            headers=auth_headers,
            json={"description": "Adobe Creative Cloud subscription"},
        )

        assert response.status_code == 200
        assert response.json()["result"]["confidence"] == pytest.approx(0.8)

    def test_write_off(self, api_client, auth_headers):
        response = api_client.post(
            f"{API}/write-off",
            headers=auth_headers,
            json={"description": "Adobe Creative Cloud", "purpose": "business"},
        )

        assert response.status_code == 200
        assert response.json() == {"is_write_off": True, "reason": "Business software"}


class TestCorrections:
    def test_relevant_corrections_are_owner_scoped(self, api_client, auth_headers):
        api_client.post(
            f"{API}/corrections",
            headers={"X-User-Id": OTHER_OWNER},
            json={"transaction_description": "Uber ride to airport", "corrected_purpose": "business"},
        )
        api_client.post(
            f"{API}/corrections",
            headers=auth_headers,
            json={"transaction_description": "Uber ride home", "corrected_purpose": "personal"},
        )

        response = api_client.get(
            f"{API}/corrections/relevant",
            headers=auth_headers,
            params={"description": "Uber ride"},
        )

        assert response.status_code == 200
        matches = response.json()["matches"]
        assert [m["correction"]["transaction_description"] for m in matches] == ["Uber ride home"]

    def test_invalid_purpose_rejected(self, api_client, auth_headers):
        response = api_client.post(
            f"{API}/corrections",
            headers=auth_headers,
            json={"transaction_description": "Gym", "corrected_purpose": "mixed"},
        )

        assert response.status_code == 422
        assert response.json()["error_type"] == "ValidationError"

    def test_learning_stats(self, api_client, auth_headers):
        for description in ("Software license", "Adobe subscription", "Restaurant"):
            api_client.post(
                f"{API}/corrections",
                headers=auth_headers,
                json={"transaction_description": description, "corrected_purpose": "business"},
            )

        body = api_client.get(f"{API}/learning-stats", headers=auth_headers).json()

        assert body["total_corrections"] == 3
        assert body["recent_corrections"] == 3
        assert body["top_categories"][0] == {"category": "Software", "corrections": 2}
        assert body["learning_trends"]["weekly_corrections"][-1] == 3


class TestTransactions:
    def create(self, api_client, headers, **overrides):
        payload = {"description": "Adobe Creative Cloud", "amount": -54.99, "date": "2024-03-01"}
        payload.update(overrides)
        return api_client.post(f"{API}/transactions", headers=headers, json=payload)

    def test_create_and_read(self, api_client, auth_headers):
        created = self.create(api_client, auth_headers)
        assert created.status_code == 201
        tx = created.json()
        assert tx["purpose"] == "business"
        assert tx["date"] == "2024-03-01"

        listed = api_client.get(f"{API}/transactions", headers=auth_headers).json()
        assert listed["total"] == 1

        single = api_client.get(f"{API}/transactions/{tx['id']}", headers=auth_headers)
        assert single.json()["description"] == "Adobe Creative Cloud"

    def test_other_user_gets_404(self, api_client, auth_headers):
        tx = self.create(api_client, auth_headers).json()

        response = api_client.get(f"{API}/transactions/{tx['id']}", headers={"X-User-Id": OTHER_OWNER})

        assert response.status_code == 404
        assert response.json()["error_type"] == "TransactionNotFoundError"

    def test_zero_amount_is_bad_request(self, api_client, auth_headers):
        response = self.create(api_client, auth_headers, amount=0)

        assert response.status_code == 400
        assert response.json()["error_type"] == "InvalidTransactionError"

    def test_update_classification_records_correction(self, api_client, auth_headers):
        tx = self.create(api_client, auth_headers).json()

        response = api_client.put(
            f"{API}/transactions/{tx['id']}/classification",
            headers=auth_headers,
            json={"purpose": "personal", "is_write_off": False, "reason": "Personal photos"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["transaction"]["purpose"] == "personal"
        assert body["transaction"]["reviewed"] is True
        assert body["transaction"]["write_off"] == {"is_write_off": False, "reason": "Personal photos"}
        assert body["correction"]["original_purpose"] == "business"
        assert body["correction"]["corrected_purpose"] == "personal"

    def test_import(self, api_client, auth_headers):
        response = api_client.post(
            f"{API}/transactions/import",
            headers=auth_headers,
            json={"transactions": [
                {"date": "03/01/2024", "description": "Staples", "amount": "-20.00"},
                {"date": "2024-03-01", "description": "Staples", "amount": -20},
                {"date": "garbage", "description": "Oops", "amount": -1},
            ]},
        )

        assert response.status_code == 200
        assert response.json() == {
            "imported": 1,
            "skipped": 1,
            "ai_classified": 1,
            "needs_review": 0,
            "errors": ["Invalid date format: garbage"],
        }


class TestTaxProfile:
    def test_get_put(self, api_client, auth_headers):
        assert api_client.get(f"{API}/tax-profile", headers=auth_headers).json() == {"profile": None}

        profile = {"business_type": "design studio", "has_home_office": True}
        saved = api_client.put(f"{API}/tax-profile", headers=auth_headers, json={"profile": profile})

        assert saved.status_code == 200
        assert saved.json() == {"profile": profile}
        assert api_client.get(f"{API}/tax-profile", headers=auth_headers).json() == {"profile": profile}


class TestDependencies:
    @pytest.fixture
    def cached_dependencies(self, db, fake_lm, monkeypatch):
        from api import dependencies
        from taxxy.config import get_config

        monkeypatch.setattr(get_config().mlflow, "enabled", False)
        monkeypatch.setattr(dependencies, "get_db_manager", lambda: db)
        monkeypatch.setattr(dependencies, "CompletionClient", lambda **kwargs: make_client(fake_lm))
        monkeypatch.setattr(dependencies, "get_completion_client", lambda: make_client(fake_lm))
        cached = (dependencies.get_correction_store, dependencies.get_classifier, dependencies.get_write_off_advisor)
        for func in cached:
            func.cache_clear()
        yield dependencies
        for func in cached:
            func.cache_clear()

    def test_agents_built_once(self, cached_dependencies):
        classifier = cached_dependencies.get_classifier()
        advisor = cached_dependencies.get_write_off_advisor()

        assert cached_dependencies.get_classifier() is classifier
        assert cached_dependencies.get_write_off_advisor() is advisor
        assert cached_dependencies.get_correction_store() is cached_dependencies.get_correction_store()
