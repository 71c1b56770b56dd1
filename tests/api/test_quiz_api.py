from uuid import uuid4

from conftest import DEFAULT_PASSWORD, FakeScenario

ANSWERS = {
    "1": "30",
    "2": "male",
    "3": "170",
    "4": "70",
    "5": "4-5",
    "6": "moderate",
    "7": "2-3",
    "8": "6-8",
    "9": "7-8",
    "10": "no",
    "11": "low",
}


def test_questions_catalogue(client) -> None:
    response = client.get("/quiz/questions")
    assert response.status_code == 200
    body = response.json()
    assert len(body["questions"]) == 11
    assert body["questions"][2]["unit"] == "cm"
    assert body["default_answers"]["3"] == "175"


def test_metrics_preview(client) -> None:
    response = client.post("/quiz/metrics", json={"answers": ANSWERS})
    assert response.status_code == 200
    body = response.json()
    assert body["bmi"] == 24.2
    assert body["bmi_category"] == "Healthy Weight"
    assert body["bmr"] == 2507
    assert body["water_needed"] == 2.3
    assert body["activity_level"] == "moderate"
    assert body["unanswered"] == []


def test_submit_requires_auth(client) -> None:
    assert client.post("/quiz/submit", json={"answers": ANSWERS}).status_code == 401


def test_submit_with_model_analysis(client, auth_headers, override_llm) -> None:
    fake = override_llm(FakeScenario.ANALYSIS_OK)
    response = client.post("/quiz/submit", headers=auth_headers, json={"answers": ANSWERS})
    assert response.status_code == 201
    body = response.json()
    assert body["metrics"]["ideal_weight_min"] == 53
    assert body["metrics"]["ideal_weight_max"] == 72
    assert body["risk_level"] == "Low"
    assert body["risk_score"] == 22
    assert body["ai_analyzed"] is True
    assert body["analysis_source"] == "model"
    assert body["analysis"]["recommendations"]["mentalHealth"].startswith("Take a 10-minute walk")
    assert body["analysis"]["healthInsights"]["strengths"][0] == "Healthy BMI"

    prompt = fake.calls[0]["messages"][1]["content"]
    assert "BMI Category: Healthy Weight" in prompt
    assert "Smoking status: no" in prompt


def test_submit_malformed_analysis_stores_keyword_fallback(client, auth_headers, override_llm) -> None:
    override_llm(FakeScenario.MALFORMED_JSON)
    answers = dict(ANSWERS, **{"4": "95", "10": "yes"})
    response = client.post("/quiz/submit", headers=auth_headers, json={"answers": answers})
    assert response.status_code == 201
    body = response.json()
    assert body["analysis_source"] == "fallback"
    assert body["ai_analyzed"] is True
    assert body["risk_level"] == "High"
    assert body["risk_score"] == 75
    assert body["analysis"]["healthInsights"]["longTermRisks"][1].startswith("High risk of respiratory")


def test_submit_missing_keys_uses_fallback(client, auth_headers, override_llm) -> None:
    override_llm(FakeScenario.MISSING_KEYS)
    response = client.post("/quiz/submit", headers=auth_headers, json={"answers": ANSWERS})
    assert response.status_code == 201
    assert response.json()["analysis_source"] == "fallback"
    assert response.json()["risk_level"] == "Low"


def test_submit_infinite_score_uses_fallback(client, auth_headers, override_llm) -> None:
    override_llm(FakeScenario.NON_FINITE_SCORE)
    response = client.post("/quiz/submit", headers=auth_headers, json={"answers": ANSWERS})
    assert response.status_code == 201
    body = response.json()
    assert body["analysis_source"] == "fallback"
    assert body["risk_level"] == "Low"
    assert body["risk_score"] == 30


def test_submit_when_model_unavailable_saves_unanalysed(client, auth_headers, override_llm) -> None:
    override_llm(FakeScenario.TIMEOUT)
    response = client.post("/quiz/submit", headers=auth_headers, json={"answers": ANSWERS})
    assert response.status_code == 201
    body = response.json()
    assert body["ai_analyzed"] is False
    assert body["risk_level"] == "Low"
    assert body["risk_score"] == 0
    assert body["analysis"] is None
    assert body["analysis_error"] == "AI analysis unavailable"


def test_submit_without_analysis_skips_model(client, auth_headers, override_llm) -> None:
    fake = override_llm(FakeScenario.ANALYSIS_OK)
    response = client.post("/quiz/submit", headers=auth_headers, json={"answers": ANSWERS, "analyze": False})
    assert response.status_code == 201
    assert response.json()["ai_analyzed"] is False
    assert fake.calls == []


def test_submit_rejects_missing_height(client, auth_headers, override_llm) -> None:
    override_llm(FakeScenario.ANALYSIS_OK)
    answers = dict(ANSWERS)
    answers.pop("3")
    response = client.post("/quiz/submit", headers=auth_headers, json={"answers": answers})
    assert response.status_code == 422


def test_history_latest_and_reanalysis(client, auth_headers, override_llm) -> None:
    override_llm(FakeScenario.TIMEOUT)
    first = client.post("/quiz/submit", headers=auth_headers, json={"answers": ANSWERS}).json()
    override_llm(FakeScenario.ANALYSIS_OK)
    second = client.post("/quiz/submit", headers=auth_headers, json={"answers": ANSWERS}).json()

    history = client.get("/quiz/history", headers=auth_headers)
    assert history.status_code == 200
    assert [item["id"] for item in history.json()] == [second["id"], first["id"]]

    latest = client.get("/quiz/latest", headers=auth_headers)
    assert latest.json()["id"] == second["id"]

    override_llm(FakeScenario.ANALYSIS_FENCED)
    rerun = client.post(f"/quiz/{first['id']}/analysis", headers=auth_headers)
    assert rerun.status_code == 200
    assert rerun.json()["risk_level"] == "High"
    assert rerun.json()["risk_score"] == 81
    assert client.get(f"/quiz/{first['id']}", headers=auth_headers).json()["ai_analyzed"] is True


def test_reanalysis_reports_unavailable_model(client, auth_headers, override_llm) -> None:
    override_llm(FakeScenario.ANALYSIS_OK)
    quiz = client.post("/quiz/submit", headers=auth_headers, json={"answers": ANSWERS, "analyze": False}).json()
    override_llm(FakeScenario.PROVIDER_ERROR)
    response = client.post(f"/quiz/{quiz['id']}/analysis", headers=auth_headers)
    assert response.status_code == 500
    assert response.json()["detail"] == "AI analysis unavailable"


def test_latest_without_results_is_404(client, auth_headers) -> None:
    assert client.get("/quiz/latest", headers=auth_headers).status_code == 404


def test_other_users_quiz_is_hidden(client, auth_headers, override_llm) -> None:
    override_llm(FakeScenario.ANALYSIS_OK)
    quiz = client.post("/quiz/submit", headers=auth_headers, json={"answers": ANSWERS}).json()

    email = f"other_{uuid4().hex[:10]}@test.com"
    client.post("/auth/signup", json={"email": email, "password": DEFAULT_PASSWORD})
    login = client.post("/auth/login", data={"username": email, "password": DEFAULT_PASSWORD})
    client.cookies.clear()
    other_headers = {"Authorization": f"Bearer {login.json()['access_token']}"}
    assert client.get(f"/quiz/{quiz['id']}", headers=other_headers).status_code == 404
