def test_health_endpoints(client):
    assert client.get("/api/health").json() == {"status": "ok"}
    live = client.get("/api/health/live")
    assert live.status_code == 200
    assert live.json()["status"] == "ok"


def test_decode_endpoint(client):
    response = client.post(
        "/api/schedule/slots/decode",
        json={
            "tokens": [
                "242508001_2_P1_0900_0940_rajeshmaths080910_8_MATH",
                "LUNCH_242510001_LUNCH",
                "EXAM_MATH_morning",
                "broken",
            ]
        },
    )
    assert response.status_code == 200
    tokens = response.json()["tokens"]
    assert [token["kind"] for token in tokens] == ["regular", "lunch", "exam", "unrecognized"]
    assert tokens[0]["subject_code"] == "8_MATH"
    assert tokens[1] == {"kind": "lunch", "start_time": "11:40", "end_time": "12:20"}
    assert tokens[3]["raw"] == "broken"


def test_encode_endpoint(client):
    response = client.post(
        "/api/schedule/slots/encode",
        json={
            "class_id": "242510001",
            "tokens": [
                {"kind": "exam", "subject_code": "MATH", "session_type": "morning"},
                {"kind": "lunch", "start_time": "11:40", "end_time": "12:20"},
            ],
        },
    )
    assert response.status_code == 200
    assert response.json()["tokens"] == ["EXAM_MATH_morning", "LUNCH_242510001_LUNCH"]

    rejected = client.post(
        "/api/schedule/slots/encode",
        json={"tokens": [{"kind": "lunch", "start_time": "12:00", "end_time": "12:30"}]},
    )
    assert rejected.status_code == 422


def test_week_endpoint(client):
    response = client.get("/api/schedule/week", params={"offset": -1, "reference_date": "2025-01-01"})
    assert response.status_code == 200
    payload = response.json()
    assert payload["start_date"] == "2024-12-23"
    assert payload["end_date"] == "2024-12-28"
    assert payload["label"] == "Previous Week"
    assert len(payload["days"]) == 6

    assert client.get("/api/schedule/week").status_code == 200


def test_week_grid_endpoint(client):
    response = client.post(
        "/api/schedule/week-grid",
        json={
            "week_offset": 0,
            "reference_date": "2025-03-05",
            "class_id": "242508001",
            "days": [
                {
                    "date": "2025-03-03",
                    "day_type": "normal",
                    "morning_slots": '["242508001_1_P1_0900_0940_rajeshmaths080910_8_MATH", "LUNCH_242508001_LUNCH"]',
                    "afternoon_slots": [],
                },
                {
                    "date": "2025-03-04",
                    "day_type": "FullHoliday",
                    "holiday_name": "Holi",
                    "morning_slots": ["242508001_2_P1_0900_0940_rajeshmaths080910_8_MATH"],
                },
            ],
        },
    )
    assert response.status_code == 200
    grid = response.json()
    assert grid["academic_year"] == "2024-2025"
    assert len(grid["periods"]) == 10
    monday, tuesday = grid["rows"][0], grid["rows"][1]
    assert monday["cells"][0]["kind"] == "class"
    assert monday["cells"][0]["subject_name"] == "Mathematics"
    assert monday["cells"][4]["kind"] == "lunch"
    assert monday["cells"][1]["kind"] == "empty"
    assert {cell["kind"] for cell in tuesday["cells"]} == {"holiday"}
    assert tuesday["cells"][0]["holiday_name"] == "Holi"
    assert {cell["kind"] for cell in grid["rows"][5]["cells"]} == {"empty"}


def test_exam_plan_endpoints(client):
    response = client.post(
        "/api/plans/exams",
        json={"start_date": "2025-03-03", "end_date": "2025-03-04", "exam_type": "2_per_day", "class_id": "9A"},
    )
    assert response.status_code == 200
    sessions = response.json()["sessions"]
    assert [(s["date"], s["session"]) for s in sessions] == [
        ("2025-03-03", "morning"),
        ("2025-03-03", "afternoon"),
        ("2025-03-04", "morning"),
        ("2025-03-04", "afternoon"),
    ]

    incomplete = client.post("/api/plans/exams/validate", json={"sessions": sessions})
    assert incomplete.status_code == 422
    body = incomplete.json()
    assert body["details"]["incomplete_indexes"] == [0, 1, 2, 3]
    assert "message" in body

    for index, session in enumerate(sessions):
        session["subject_code"] = ["MATH", "SCI", "ENG", "SOC"][index]
    complete = client.post("/api/plans/exams/validate", json={"sessions": sessions})
    assert complete.status_code == 200
    assert complete.json()["valid"] is True


def test_exam_plan_rejects_reversed_range(client):
    response = client.post(
        "/api/plans/exams",
        json={"start_date": "2025-03-05", "end_date": "2025-03-03", "exam_type": "one_per_day"},
    )
    assert response.status_code == 422
    assert response.json()["details"]["issues"]


def test_apply_exam_endpoint(client):
    response = client.post(
        "/api/plans/exams/apply",
        json={"session": {"date": "2025-03-03", "session": "afternoon", "class_id": "9A", "subject_code": "ENG"}},
    )
    assert response.status_code == 200
    day = response.json()
    assert day["afternoon_slots"] == ["EXAM_ENG_afternoon"] * 5
    assert day["day_name"] == "Monday"


def test_exam_sessions_that_cannot_be_stored_are_rejected(client):
    session = {"date": "2025-03-03", "session": "morning", "class_id": "9A", "subject_code": "SCI_morning"}
    validated = client.post("/api/plans/exams/validate", json={"sessions": [session]})
    assert validated.status_code == 422
    assert validated.json()["details"]["invalid_indexes"] == [0]

    applied = client.post("/api/plans/exams/apply", json={"session": session})
    assert applied.status_code == 422
    assert applied.json()["details"]["issues"]

    underscored = dict(session, subject_code="SCI", class_id="9_A")
    assert client.post("/api/plans/exams/apply", json={"session": underscored}).status_code == 422

    expanded = client.post(
        "/api/plans/exams/validate",
        json={"sessions": [dict(session, subject_code="SCI", class_id="all")], "known_class_ids": ["9A", "9_B"]},
    )
    assert expanded.status_code == 422


def test_holiday_plan_endpoint(client):
    response = client.post(
        "/api/plans/holidays",
        json={
            "holiday_name": "Pongal",
            "start_date": "2025-01-01",
            "end_date": "2025-01-03",
            "duration": "half_day",
            "class_id": "all",
            "known_class_ids": ["1", "2"],
        },
    )
    assert response.status_code == 200
    entries = response.json()["entries"]
    assert len(entries) == 6
    assert {entry["holiday_name"] for entry in entries} == {"Pongal"}

    single = client.post(
        "/api/plans/holidays",
        json={"holiday_name": "Pongal", "start_date": "2025-01-14", "class_id": "7B"},
    )
    assert [entry["date"] for entry in single.json()["entries"]] == ["2025-01-14"]

    reversed_range = client.post(
        "/api/plans/holidays",
        json={"holiday_name": "Pongal", "start_date": "2025-01-14", "end_date": "2025-01-13", "class_id": "7B"},
    )
    assert reversed_range.status_code == 422
