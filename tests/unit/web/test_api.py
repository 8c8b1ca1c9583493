#!/usr/bin/env python3
"""
Unit tests for the HTTP API.
Runs the FastAPI app on an in-memory database through TestClient.
"""

import unittest
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from core.config_loader import AppConfig
from database.models import SkillType, ProficiencyLevel
from web.backend.app import create_app
from web.backend.models.responses import MatchSummary
from tests import make_test_database, seed_user, seed_listing, seed_review

VALID_CARD = {
    "card_number": "4242 4242 4242 4242",
    "expiry_month": "12",
    "expiry_year": "2030",
    "cvv": "123",
    "cardholder_name": "Ana Silva"
}


@pytest.mark.db
class TestApi(unittest.TestCase):

    def setUp(self):
        self.database = make_test_database()
        with self.database.session_scope() as s:
            ana = seed_user(s, "ana@example.com", name="Ana", bio="Developer", location="Porto")
            bea = seed_user(s, "bea@example.com", name="Bea", time_credits="25")
            cy = seed_user(s, "cy@example.com", name="Cy")
            seed_listing(s, ana, "JavaScript", SkillType.OFFER, ProficiencyLevel.EXPERT)
            seed_listing(s, ana, "Yoga", SkillType.SEEK)
            seed_listing(s, bea, "Yoga", SkillType.OFFER, ProficiencyLevel.INTERMEDIATE)
            seed_listing(s, bea, "JavaScript", SkillType.SEEK)
            seed_listing(s, cy, "Cooking", SkillType.OFFER)
            seed_review(s, cy, bea, 4, exchange_id=1)
            self.ana_id, self.bea_id, self.cy_id = ana.id, bea.id, cy.id

        self.app = create_app(config=AppConfig(), database=self.database)
        self.client = TestClient(self.app)
        self.client.__enter__()

    def tearDown(self):
        self.client.__exit__(None, None, None)
        self.database.dispose()

    def test_health(self):
        response = self.client.get("/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "healthy")

    def test_find_matches(self):
        response = self.client.get(f"/api/matching/find/{self.ana_id}")

        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertTrue(data["success"])
        self.assertEqual(data["count"], 2)
        top = data["matches"][0]
        self.assertEqual(top["user"]["id"], self.bea_id)
        self.assertEqual(top["user"]["time_credits"], 25.0)
        self.assertEqual(top["complementary_skills"], ["Yoga", "JavaScript"])
        self.assertEqual(top["rating"], 4.0)
        self.assertEqual(top["review_count"], 1)
        self.assertIn("Well rated by community", top["match_reasons"])

    def test_find_matches_filters(self):
        response = self.client.get(
            f"/api/matching/find/{self.ana_id}",
            params={"skill": "cook", "type": "offer", "limit": 5}
        )
        self.assertEqual([m["user"]["id"] for m in response.json()["matches"]], [self.cy_id])

        response = self.client.get(f"/api/matching/find/{self.ana_id}", params={"min_rating": 4.5})
        # Bea is rated 4.0; Cy has no reviews and stays
        self.assertEqual([m["user"]["id"] for m in response.json()["matches"]], [self.cy_id])

    def test_find_matches_unknown_user(self):
        response = self.client.get("/api/matching/find/999")

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["type"], "UserNotFoundException")
        self.assertFalse(response.json()["success"])

    def test_find_matches_bad_type(self):
        response = self.client.get(f"/api/matching/find/{self.ana_id}", params={"type": "teach"})
        self.assertEqual(response.status_code, 422)

    def test_recommendations(self):
        response = self.client.get(f"/api/matching/recommendations/{self.ana_id}")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["recommendations"], ["Cooking"])

    def test_balance(self):
        response = self.client.get(f"/api/timebanking/balance/{self.bea_id}")
        self.assertEqual(response.json(), {"success": True, "user_id": self.bea_id, "balance": 25.0})

        self.assertEqual(self.client.get("/api/timebanking/balance/999").status_code, 404)

    def test_topup(self):
        response = self.client.post("/api/timebanking/topup", json={
            "user_id": self.ana_id,
            "amount": 15.5,
            "payment_method": VALID_CARD
        })

        self.assertEqual(response.status_code, 200)
        transaction = response.json()["transaction"]
        self.assertEqual(transaction["type"], "topup")
        self.assertEqual(transaction["status"], "completed")
        self.assertEqual(transaction["balance_after"], 25.5)
        self.assertEqual(transaction["payment_method"], "Card ending in 4242")

    def test_topup_declined(self):
        response = self.client.post("/api/timebanking/topup", json={
            "user_id": self.ana_id,
            "amount": 50,
            "payment_method": {**VALID_CARD, "card_number": "4000000000000002"}
        })

        self.assertEqual(response.status_code, 402)
        body = response.json()
        self.assertEqual(body["type"], "PaymentDeclinedException")
        self.assertEqual(body["reason"], "Card declined - insufficient funds")

        history = self.client.get(f"/api/timebanking/transactions/{self.ana_id}").json()
        self.assertEqual(history["count"], 1)
        self.assertEqual(history["transactions"][0]["status"], "failed")
        self.assertEqual(history["transactions"][0]["id"], body["transaction_id"])

    def test_topup_over_limit(self):
        response = self.client.post("/api/timebanking/topup", json={
            "user_id": self.ana_id,
            "amount": "1000.01",
            "payment_method": VALID_CARD
        })
        self.assertEqual(response.status_code, 400)

    def test_topup_huge_amount(self):
        response = self.client.post("/api/timebanking/topup", json={
            "user_id": self.ana_id,
            "amount": "1e30",
            "payment_method": VALID_CARD
        })
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["type"], "InvalidTransferException")

    def test_topup_missing_card_field(self):
        response = self.client.post("/api/timebanking/topup", json={
            "user_id": self.ana_id,
            "amount": 10,
            "payment_method": {**VALID_CARD, "cvv": ""}
        })
        self.assertEqual(response.status_code, 422)

    def test_spend(self):
        response = self.client.post("/api/timebanking/spend", json={
            "from_user_id": self.bea_id,
            "to_user_id": self.ana_id,
            "amount": 3,
            "description": "JavaScript lesson",
            "skill_name": "JavaScript"
        })

        self.assertEqual(response.status_code, 200)
        spend, earn = response.json()["transactions"]
        self.assertEqual((spend["type"], earn["type"]), ("spend", "earn"))
        self.assertEqual(spend["balance_after"], 22.0)
        self.assertEqual(earn["balance_after"], 13.0)

    def test_spend_errors(self):
        self_transfer = self.client.post("/api/timebanking/spend", json={
            "from_user_id": self.ana_id,
            "to_user_id": self.ana_id,
            "amount": 5,
            "description": "x"
        })
        self.assertEqual(self_transfer.status_code, 400)
        self.assertEqual(self_transfer.json()["type"], "InvalidTransferException")

        overdraft = self.client.post("/api/timebanking/spend", json={
            "from_user_id": self.ana_id,
            "to_user_id": self.bea_id,
            "amount": 11,
            "description": "x"
        })
        self.assertEqual(overdraft.status_code, 400)
        self.assertEqual(overdraft.json()["type"], "InsufficientFundsException")


class TestMatchSummaryModel(unittest.TestCase):
    """Tests for MatchSummary Pydantic model."""

    def test_rating_absent(self):
        summary = MatchSummary(
            user={"id": 2, "name": "Bea", "bio": None, "location": None, "time_credits": 0},
            match_score=40,
            match_reasons=["They can teach you: Yoga"],
            common_skills=[],
            complementary_skills=["Yoga"],
            rating=None
        )

        data = summary.model_dump()
        self.assertIsNone(data["rating"])
        self.assertEqual(data["review_count"], 0)
        self.assertEqual(data["user"]["time_credits"], 0.0)


if __name__ == "__main__":
    unittest.main()
