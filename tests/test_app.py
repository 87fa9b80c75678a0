"""
Tests for the Flask JSON service.
"""


class TestAnalyze:

    def test_scores_a_product(self, client) -> None:
        response = client.post("/analyze", json={
            "product_name": "Hot Dogs",
            "brand": "Oscar",
            "category": "Meat",
            "ingredients": ["Sodium Nitrite", "High Fructose Corn Syrup", "Citric Acid"],
        })
        assert response.status_code == 200
        data = response.get_json()
        assert data["overall_score"] == 32
        assert data["rating"] == "poor"
        assert data["product_category"] == "Meat"
        assert data["concerns"]["preservatives"]["count"] == 2
        assert len(data["profile_alerts"]) == 3
        assert "scanned_at" in data

    def test_legacy_product_type(self, client) -> None:
        response = client.post("/analyze", json={"ingredients": ["Water"], "product_type": "drink"})
        assert response.get_json()["product_category"] == "Beverage"

    def test_unrecognized_category(self, client) -> None:
        response = client.post("/analyze", json={"ingredients": [], "category": "Cosmetics"})
        data = response.get_json()
        assert data["product_category"] == "Other"
        assert data["overall_score"] == 50

    def test_missing_ingredients(self, client) -> None:
        response = client.post("/analyze", json={"product_name": "Mystery"})
        assert response.status_code == 400
        assert response.get_json()["error"] == "Invalid input"

    def test_non_string_ingredient(self, client) -> None:
        response = client.post("/analyze", json={"ingredients": ["Water", 3]})
        assert response.status_code == 400

    def test_non_json_body(self, client) -> None:
        response = client.post("/analyze", data="Water, Salt", content_type="text/plain")
        assert response.status_code == 400


class TestIngredients:

    def test_detail(self, client) -> None:
        response = client.get("/ingredients/red-40")
        assert response.status_code == 200
        assert response.get_json()["e_number"] == "E129"

    def test_unknown_detail(self, client) -> None:
        response = client.get("/ingredients/unobtainium")
        assert response.status_code == 404
        assert "unobtainium" in response.get_json()["error"]

    def test_list_all(self, client) -> None:
        data = client.get("/ingredients").get_json()
        assert data["count"] == len(data["ingredients"])
        assert data["ingredients"][0]["id"] == "sodium-nitrite"

    def test_filter_by_concern(self, client) -> None:
        data = client.get("/ingredients?concern=high").get_json()
        assert {item["concern"] for item in data["ingredients"]} == {"high"}

    def test_bad_concern(self, client) -> None:
        assert client.get("/ingredients?concern=severe").status_code == 400

    def test_filter_by_alert(self, client) -> None:
        data = client.get("/ingredients?alert=heart_health").get_json()
        assert all(item["alert_flags"]["heart_health"] for item in data["ingredients"])

    def test_bad_alert(self, client) -> None:
        response = client.get("/ingredients?alert=to_dict")
        assert response.status_code == 400
        assert "kid" in response.get_json()["message"]

    def test_search(self, client) -> None:
        data = client.get("/ingredients/search?q=splenda").get_json()
        assert data["count"] == 1
        assert data["results"][0]["id"] == "sucralose"

    def test_search_needs_query(self, client) -> None:
        assert client.get("/ingredients/search").status_code == 400

    def test_lookup_known(self, client) -> None:
        data = client.get("/ingredients/lookup", query_string={"name": "Prague Powder #1"}).get_json()
        assert data["id"] == "sodium-nitrite"
        assert data["found_in_database"] is True

    def test_lookup_unknown(self, client) -> None:
        data = client.get("/ingredients/lookup", query_string={"name": "Cane Sugar"}).get_json()
        assert data["found_in_database"] is False
        assert data["category"] == "Hidden Sugar"

    def test_lookup_needs_name(self, client) -> None:
        assert client.get("/ingredients/lookup").status_code == 400


class TestAlternatives:

    def test_ranking(self, client) -> None:
        response = client.get("/alternatives?category=Beverage&score=80")
        assert response.status_code == 200
        data = response.get_json()
        assert [item["brand"] for item in data["alternatives"]] == ["Spindrift", "Harmless Harvest", "GT's"]
        assert data["has_catalog"] is True

    def test_view(self, client) -> None:
        data = client.get("/alternatives?category=Beverage&score=80&view=budget").get_json()
        assert [item["brand"] for item in data["alternatives"]] == ["GT's"]

    def test_unknown_category(self, client) -> None:
        data = client.get("/alternatives?category=Cosmetics&score=50").get_json()
        assert data["category"] == "Other"
        assert data["has_catalog"] is False

    def test_bad_score(self, client) -> None:
        assert client.get("/alternatives?category=Meat&score=high").status_code == 400
        assert client.get("/alternatives?category=Meat").status_code == 400

    def test_non_finite_score(self, client) -> None:
        for score in ("nan", "inf", "-Infinity"):
            response = client.get(f"/alternatives?category=Meat&score={score}")
            assert response.status_code == 400
            assert response.get_json()["error"] == "Invalid input"

    def test_category_is_exact(self, client) -> None:
        data = client.get("/alternatives?category=meat&score=60").get_json()
        assert data["category"] == "Other"
        assert data["has_catalog"] is False

    def test_bad_view(self, client) -> None:
        assert client.get("/alternatives?category=Meat&score=60&view=cheapest").status_code == 400


class TestService:

    def test_categories(self, client) -> None:
        categories = client.get("/categories").get_json()["categories"]
        assert categories[0] == "Beverage"
        assert categories[-1] == "Other"

    def test_health(self, client) -> None:
        response = client.get("/health")
        data = response.get_json()
        assert data["status"] in ("healthy", "high_memory", "critical_memory")
        assert data["ingredient_count"] > 0
        assert "database_version" in data
        assert "memory_mb" in data

    def test_unknown_route_is_json(self, client) -> None:
        response = client.get("/nope")
        assert response.status_code == 404
        assert response.get_json()["error"] == "Not Found"
