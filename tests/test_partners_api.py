import pytest

from conftest import unwrap

TIER = {"model": "iPhone 15", "storage": "128GB", "duration_days": 180,
        "total_amount": 1200000, "daily_deduction": 6700}


@pytest.fixture
def partner(client):
    return unwrap(client.post("/api/partners/", json={"name": "Busan Telecom", "price_list": [TIER]}))


@pytest.fixture
def template(client):
    return unwrap(client.post("/api/partners/", json={
        "name": "Standard prices",
        "is_template": True,
        "price_list": [
            TIER,
            {**TIER, "storage": "256GB", "total_amount": 1400000, "daily_deduction": 7800},
        ],
    }))


class TestPartners:

    def test_create_assigns_tier_ids(self, partner):
        assert partner["name"] == "Busan Telecom"
        assert partner["is_template"] is False
        assert len(partner["price_list"]) == 1
        assert partner["price_list"][0]["id"]
        assert partner["price_list"][0]["total_amount"] == 1200000

    def test_legacy_camel_case_tiers(self, client):
        data = unwrap(client.post("/api/partners/", json={"name": "Legacy", "price_list": [{
            "model": "Galaxy", "storage": "512GB", "durationDays": 90,
            "totalAmount": 900000, "dailyDeduction": 10000}]}))
        assert data["price_list"][0]["duration_days"] == 90

    def test_list_filters(self, client, partner, template):
        assert unwrap(client.get("/api/partners/all"))["total"] == 2

        templates = unwrap(client.get("/api/partners/all", params={"is_template": True}))
        assert [p["name"] for p in templates["partners"]] == ["Standard prices"]

        found = unwrap(client.get("/api/partners/all", params={"search": "busan"}))
        assert found["total"] == 1

    def test_lookup_excludes_templates(self, client, partner, template):
        lookup = unwrap(client.get("/api/partners/partner-lookup"))
        assert [p["name"] for p in lookup] == ["Busan Telecom"]

    def test_update(self, client, partner):
        data = unwrap(client.put("/api/partners/", json={"id": partner["id"], "address": "Haeundae-gu"}))
        assert data["address"] == "Haeundae-gu"
        assert data["name"] == "Busan Telecom"

    def test_delete(self, client, partner):
        assert client.delete(f"/api/partners/{partner['id']}").status_code == 200
        assert client.get(f"/api/partners/{partner['id']}").status_code == 404

    def test_delete_in_use(self, client, partner):
        client.post("/api/contracts/", json={
            "partner_id": partner["id"], "contract_date": "2024-01-01", "duration_days": 180,
            "model": "iPhone 15", "storage": "128GB"})

        response = client.delete(f"/api/partners/{partner['id']}")
        assert response.status_code == 400
        assert "cannot be deleted" in response.json()["message"]

    def test_duplicate_tiers_rejected(self, client):
        response = client.post("/api/partners/", json={"name": "Dupes", "price_list": [TIER, TIER]})
        assert response.status_code == 400


class TestPriceTiers:

    def test_add_update_delete(self, client, partner):
        added = unwrap(client.post(f"/api/partners/{partner['id']}/price-tiers",
                                   json={**TIER, "duration_days": 365}))
        assert len(added["price_list"]) == 2
        tier_id = added["price_list"][1]["id"]

        updated = unwrap(client.put(f"/api/partners/{partner['id']}/price-tiers/{tier_id}",
                                    json={**TIER, "duration_days": 365, "daily_deduction": 3500}))
        assert updated["price_list"][1]["daily_deduction"] == 3500
        assert updated["price_list"][1]["id"] == tier_id

        deleted = unwrap(client.delete(f"/api/partners/{partner['id']}/price-tiers/{tier_id}"))
        assert [t["duration_days"] for t in deleted["price_list"]] == [180]

    def test_add_duplicate(self, client, partner):
        response = client.post(f"/api/partners/{partner['id']}/price-tiers", json=TIER)
        assert response.status_code == 400

    def test_unknown_tier(self, client, partner):
        assert client.delete(f"/api/partners/{partner['id']}/price-tiers/nope").status_code == 404
        assert client.put(f"/api/partners/{partner['id']}/price-tiers/nope", json=TIER).status_code == 404

    def test_invalid_tier(self, client, partner):
        response = client.post(f"/api/partners/{partner['id']}/price-tiers",
                               json={**TIER, "total_amount": 0})
        assert response.status_code == 422

    def test_copy_from_template_skips_existing(self, client, partner, template):
        data = unwrap(client.post(f"/api/partners/{partner['id']}/copy-template",
                                  json={"template_id": template["id"]}))

        assert sorted(t["storage"] for t in data["price_list"]) == ["128GB", "256GB"]
        template_ids = {t["id"] for t in template["price_list"]}
        assert not template_ids & {t["id"] for t in data["price_list"]}

    def test_copy_requires_template(self, client, partner):
        other = unwrap(client.post("/api/partners/", json={"name": "Other"}))
        response = client.post(f"/api/partners/{other['id']}/copy-template",
                               json={"template_id": partner["id"]})
        assert response.status_code == 400


class TestLookups:

    def test_cascading_lookups(self, client, template):
        pid = template["id"]

        assert unwrap(client.get(f"/api/partners/{pid}/model-lookup")) == ["iPhone 15"]
        assert unwrap(client.get(f"/api/partners/{pid}/storage-lookup",
                                 params={"model": "iPhone 15"})) == ["128GB", "256GB"]
        assert unwrap(client.get(f"/api/partners/{pid}/duration-lookup",
                                 params={"model": "iPhone 15", "storage": "256GB"})) == [180]

    def test_resolve(self, client, template):
        tier = unwrap(client.get(f"/api/partners/{template['id']}/price-tier", params={
            "model": "iPhone 15", "storage": "256GB", "duration_days": 180}))
        assert tier["total_amount"] == 1400000

        missing = client.get(f"/api/partners/{template['id']}/price-tier", params={
            "model": "iPhone 15", "storage": "1TB", "duration_days": 180})
        assert missing.status_code == 404
