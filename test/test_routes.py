A_STROKES = [
    [{"x": 50, "y": 100}, {"x": 150, "y": 100}],
    [{"x": 100, "y": 100}, {"x": 100, "y": 200}],
]


def _drawn(strokes):
    return [{"points": s, "timestamp": i} for i, s in enumerate(strokes)]


def _create_a(client):
    resp = client.post("/strokes/templates", json={"id": "char-a", "character": '"', "strokes": A_STROKES})
    assert resp.status_code == 200
    return resp.json()


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}


def test_create_and_fetch_template(client):
    created = _create_a(client)
    assert created["template"]["bounds"] == {"minX": 50.0, "maxX": 150.0, "minY": 100.0, "maxY": 200.0}

    resp = client.get("/strokes/templates/char-a")
    assert resp.status_code == 200
    assert resp.json()["template"]["character"] == '"'

    listed = client.get("/strokes/templates").json()["templates"]
    assert [t["id"] for t in listed] == ["char-a"]


def test_unknown_template_is_404(client):
    assert client.get("/strokes/templates/char-x").status_code == 404
    resp = client.post("/strokes/validate", json={"templateId": "char-x", "strokes": _drawn(A_STROKES)})
    assert resp.status_code == 404


def test_validate_records_progress(client):
    _create_a(client)
    resp = client.post("/strokes/validate", json={
        "templateId": "char-a",
        "strokes": _drawn(A_STROKES),
        "userId": "u1",
        "timeSpent": 4.0,
    })
    assert resp.status_code == 200
    body = resp.json()
    assert body["result"]["grade"] == "excellent"
    assert body["result"]["passed"] is True
    assert body["result"]["deviations"] is None
    assert body["progress"]["status"] == "LEARNED"

    history = client.get("/progress/u1/char-a/history").json()["attempts"]
    assert len(history) == 1
    assert history[0]["grade"] == "excellent"

    summary = client.get("/progress/u1").json()
    assert summary["learned"] == 1


def test_validate_without_user_does_not_record(client, db):
    _create_a(client)
    resp = client.post("/strokes/validate", json={"templateId": "char-a", "strokes": _drawn(A_STROKES)})
    assert "progress" not in resp.json()
    assert db["stroke_attempts"].count_documents({}) == 0


def test_template_without_strokes_uses_basic_check(client):
    client.post("/strokes/templates", json={"id": "char-new", "character": "?", "strokes": []})
    resp = client.post("/strokes/validate", json={
        "templateId": "char-new",
        "strokes": _drawn([[{"x": 0, "y": 0}, {"x": 1000, "y": 0}]]),
    })
    result = resp.json()["result"]
    assert result["accuracy"] == 100
    assert result["grade"] == "excellent"


def test_validate_inline_reports_extra_stroke(client):
    extra = A_STROKES + [[{"x": 0, "y": 0}, {"x": 5, "y": 5}]]
    resp = client.post("/strokes/validate-inline", json={
        "template": {"id": "char-a", "character": '"', "strokes": A_STROKES},
        "strokes": _drawn(extra),
    })
    result = resp.json()["result"]
    assert result["passed"] is False
    assert result["deviations"] == [{"strokeIndex": 2, "issue": "extra stroke"}]


def test_validate_inline_template_without_strokes_uses_basic_check(client):
    resp = client.post("/strokes/validate-inline", json={
        "template": {"id": "char-new", "character": "?", "strokes": []},
        "strokes": _drawn([[{"x": 0, "y": 0}, {"x": 1000, "y": 0}]]),
    })
    result = resp.json()["result"]
    assert result["accuracy"] == 100
    assert result["grade"] == "excellent"
    assert result["deviations"] is None


def test_validate_empty_attempt(client):
    _create_a(client)
    resp = client.post("/strokes/validate", json={"templateId": "char-a", "strokes": []})
    result = resp.json()["result"]
    assert result == {
        "accuracy": 0.0,
        "passed": False,
        "grade": "retry",
        "feedback": "Please draw the character to continue.",
        "deviations": None,
    }


def test_normalize_endpoint(client):
    resp = client.post("/strokes/normalize", json={"points": [{"x": 0, "y": 0}, {"x": 10, "y": 0}]})
    path = resp.json()["path"]
    assert path["center"] == {"x": 5.0, "y": 0.0}
    assert path["scale"] == 5.0


def test_normalize_empty_points_is_422(client):
    resp = client.post("/strokes/normalize", json={"points": []})
    assert resp.status_code == 422
    assert resp.json()["ok"] is False


def test_normalize_rejects_non_finite_coordinates(client):
    # json.dumps writes NaN / Infinity literals, which the server parses
    for bad in (float("nan"), float("inf")):
        resp = client.post("/strokes/normalize", json={"points": [{"x": bad, "y": 0}, {"x": 1, "y": 1}]})
        assert resp.status_code == 422


def test_malformed_body_is_422(client):
    resp = client.post("/strokes/validate", json={"strokes": "nope"})
    assert resp.status_code == 422
