import unittest
from datetime import datetime, timedelta, timezone

from fastapi.testclient import TestClient

from conftest import register


def bench_day(date=None, weight=85):
    payload = {
        "workout_type": "Push",
        "duration": 3600,
        "exercises": [
            {
                "name": "Bench Press",
                "muscle_group": "Chest",
                "equipment": "Barbell",
                "sets": [{"reps": 10, "weight": 80}, {"reps": 8, "weight": weight}],
            }
        ],
    }
    if date:
        payload["date"] = date
    return payload


def test_manual_workout_requires_exercises(client, auth_headers):
    assert client.post("/api/v1/workouts", json={}, headers=auth_headers).status_code == 400
    assert client.post("/api/v1/workouts", json={"exercises": []}, headers=auth_headers).status_code == 400


def test_manual_workout_volume(client, auth_headers):
    resp = client.post("/api/v1/workouts", json=bench_day("2024-05-01"), headers=auth_headers)
    assert resp.status_code == 201
    data = resp.json()["data"]
    assert data["status"] == "completed"
    assert data["total_volume"] == 1480
    assert data["total_sets"] == 2
    assert data["exercises"][0]["sets"][1] == {
        "reps": 8, "weight": 85, "rest_time": None, "rpe": None, "completed": True,
    }


def test_progression_endpoint(client, auth_headers):
    today = datetime.now(timezone.utc).date()
    client.post("/api/v1/workouts", json=bench_day((today - timedelta(days=3)).isoformat()), headers=auth_headers)
    client.post("/api/v1/workouts", json=bench_day(today.isoformat(), weight=90), headers=auth_headers)
    # Outside the default 90 day window
    client.post("/api/v1/workouts", json=bench_day((today - timedelta(days=200)).isoformat()), headers=auth_headers)

    data = client.get("/api/v1/workouts/analytics/progression", params={"exercise_name": "bench press"},
                      headers=auth_headers).json()
    series = data["exercise_progress"]["Bench Press"]
    assert len(series) == 2
    assert series[0]["estimated_1rm"] == 113.33
    assert series[1]["max_weight"] == 90
    assert data["muscle_group_distribution"]["Chest"] == 1480 + 1520
    assert sum(w["volume"] for w in data["weekly_volume"]) == 3000


def test_prs_endpoint(client, auth_headers):
    for day, weight in (("2024-05-01", 100), ("2024-05-08", 110), ("2024-05-15", 100)):
        client.post("/api/v1/workouts", json={"exercises": [
            {"name": "Squat", "muscle_group": "Legs", "sets": [{"reps": 5, "weight": weight}]},
        ], "date": day}, headers=auth_headers)

    data = client.get("/api/v1/workouts/prs", headers=auth_headers).json()
    assert data["prs"]["Squat"]["max_weight"] == 110
    assert data["prs"]["Squat"]["max_weight_date"] == "2024-05-08"
    assert [h["is_pr"]["weight"] for h in data["exercise_history"]["Squat"]] == [False, True, False]


def test_list_filters_and_sorting(client, auth_headers):
    client.post("/api/v1/workouts", json=bench_day("2024-05-01"), headers=auth_headers)
    client.post("/api/v1/workouts", json={"date": "2024-05-02", "exercises": [
        {"name": "Squat", "muscle_group": "Legs", "sets": [{"reps": 5, "weight": 400}]},
    ]}, headers=auth_headers)

    workouts = client.get("/api/v1/workouts", headers=auth_headers).json()["workouts"]
    assert [w["date"] for w in workouts] == ["2024-05-02", "2024-05-01"]

    by_search = client.get("/api/v1/workouts?search=bench", headers=auth_headers).json()["workouts"]
    assert len(by_search) == 1

    by_group = client.get("/api/v1/workouts?muscle_group=Legs", headers=auth_headers).json()["workouts"]
    assert [w["date"] for w in by_group] == ["2024-05-02"]

    by_volume = client.get("/api/v1/workouts?sort_by=volume", headers=auth_headers).json()["workouts"]
    assert by_volume[0]["total_volume"] == 2000

    ranged = client.get("/api/v1/workouts?start_date=2024-05-02&end_date=2024-05-31",
                        headers=auth_headers).json()["workouts"]
    assert len(ranged) == 1


def test_exercise_library_counts_usage(client, auth_headers):
    client.post("/api/v1/workouts", json=bench_day("2024-05-01"), headers=auth_headers)
    client.post("/api/v1/workouts", json=bench_day("2024-05-02"), headers=auth_headers)

    entries = client.get("/api/v1/workouts/exercises/library?search=bench", headers=auth_headers).json()["exercises"]
    assert entries == [{"name": "Bench Press", "muscle_group": "Chest", "equipment": "Barbell", "usage_count": 2}]


def test_seeded_library_is_searchable(client, auth_headers, db_session):
    from seed_library import seed_library, DEFAULT_EXERCISES

    assert seed_library(db_session) == len(DEFAULT_EXERCISES)
    assert seed_library(db_session) == 0

    entries = client.get("/api/v1/workouts/exercises/library?muscle_group=Legs",
                         headers=auth_headers).json()["exercises"]
    assert {"Squat", "Leg Press", "Romanian Deadlift"} <= {e["name"] for e in entries}


def test_stats_summary(client, auth_headers):
    today = datetime.now(timezone.utc).date().isoformat()
    client.post("/api/v1/workouts", json={**bench_day(today), "calories_burned": 250}, headers=auth_headers)

    data = client.get("/api/v1/workouts/stats/summary", headers=auth_headers).json()
    assert data["total_workouts"] == 1
    assert data["this_week_workouts"] == 1
    assert data["total_duration"] == 3600
    assert data["total_calories"] == 250
    assert data["streak"] == 1



def test_blank_exercise_name_rejected(client, auth_headers):
    blank = {"exercises": [{"name": "", "sets": [{"reps": 5, "weight": 50}]}]}
    assert client.post("/api/v1/workouts", json=blank, headers=auth_headers).status_code == 400
    spaces = {"exercises": [{"name": "   ", "sets": [{"reps": 5, "weight": 50}]}]}
    assert client.post("/api/v1/workouts", json=spaces, headers=auth_headers).status_code == 400

    wid = client.post("/api/v1/workouts", json=bench_day("2024-05-01"), headers=auth_headers).json()["data"]["id"]
    resp = client.put(f"/api/v1/workouts/{wid}", json=spaces, headers=auth_headers)
    assert resp.status_code == 400
    assert client.get(f"/api/v1/workouts/{wid}", headers=auth_headers).json()["data"]["exercises"][0]["name"] == "Bench Press"

    names = [e["name"] for e in client.get("/api/v1/workouts/exercises/library", headers=auth_headers).json()["exercises"]]
    assert names == ["Bench Press"]


def test_open_workouts_excluded_from_analytics(client, auth_headers):
    today = datetime.now(timezone.utc).date().isoformat()
    client.post("/api/v1/workouts", json=bench_day(today), headers=auth_headers)

    wid = client.post("/api/v1/workouts/start", headers=auth_headers).json()["data"]["id"]
    client.post(f"/api/v1/workouts/{wid}/exercises", json={"name": "Bench Press", "muscle_group": "Chest"},
                headers=auth_headers)
    client.post(f"/api/v1/workouts/{wid}/exercises/0/sets", json={"reps": 5, "weight": 200}, headers=auth_headers)

    for state in ("active", "paused"):
        if state == "paused":
            assert client.post(f"/api/v1/workouts/{wid}/pause", headers=auth_headers).status_code == 200

        prs = client.get("/api/v1/workouts/prs", headers=auth_headers).json()
        assert prs["prs"]["Bench Press"]["max_weight"] == 85

        progress = client.get("/api/v1/workouts/analytics/progression", headers=auth_headers).json()
        assert [p["max_weight"] for p in progress["exercise_progress"]["Bench Press"]] == [85]

        summary = client.get("/api/v1/workouts/stats/summary", headers=auth_headers).json()
        assert summary["total_workouts"] == 1


class WorkoutLifecycleTestCase(unittest.TestCase):
    """Live workout flow: start -> exercises/sets -> pause -> resume -> end."""

    def setUp(self) -> None:
        import models  # noqa: F401
        from database import Base, engine
        from main import app

        Base.metadata.drop_all(bind=engine)
        Base.metadata.create_all(bind=engine)
        self.client = TestClient(app)
        self.headers = register(self.client)

    def tearDown(self) -> None:
        self.client.close()

    def post(self, path, json=None):
        return self.client.post(f"/api/v1/workouts{path}", json=json, headers=self.headers)

    def test_full_lifecycle(self) -> None:
        resp = self.post("/start", {"workout_type": "Pull"})
        self.assertEqual(resp.status_code, 201)
        workout = resp.json()["data"]
        wid = workout["id"]
        self.assertEqual(workout["status"], "active")

        resp = self.post(f"/{wid}/exercises", {"name": "Pull-Up", "muscle_group": "Back"})
        self.assertEqual(resp.status_code, 200)
        resp = self.post(f"/{wid}/exercises/0/sets", {"reps": 8, "weight": 10, "rpe": 8})
        self.assertEqual(resp.json()["data"]["exercises"][0]["sets"][0]["reps"], 8)

        active = self.client.get("/api/v1/workouts/active/current", headers=self.headers).json()["workout"]
        self.assertEqual(active["id"], wid)
        self.assertGreaterEqual(active["elapsed_duration"], 0)

        resp = self.post(f"/{wid}/pause")
        self.assertEqual(resp.json()["data"]["status"], "paused")
        self.assertIsNotNone(resp.json()["data"]["paused_at"])
        self.assertEqual(self.post(f"/{wid}/pause").status_code, 400)

        resp = self.post(f"/{wid}/resume")
        self.assertEqual(resp.json()["data"]["status"], "active")
        self.assertIsNone(resp.json()["data"]["paused_at"])
        self.assertEqual(self.post(f"/{wid}/resume").status_code, 400)

        resp = self.post(f"/{wid}/end")
        data = resp.json()["data"]
        self.assertEqual(data["status"], "completed")
        self.assertIsNotNone(data["end_time"])
        self.assertEqual(self.post(f"/{wid}/end").status_code, 400)

        active = self.client.get("/api/v1/workouts/active/current", headers=self.headers).json()
        self.assertIsNone(active["workout"])

    def test_only_one_open_workout(self) -> None:
        first = self.post("/start").json()["data"]
        resp = self.post("/start")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["active_workout_id"], first["id"])

        # A paused workout still blocks a new start
        self.post(f"/{first['id']}/pause")
        self.assertEqual(self.post("/start").status_code, 400)

        self.post(f"/{first['id']}/end")
        self.assertEqual(self.post("/start").status_code, 201)

    def test_set_validation(self) -> None:
        wid = self.post("/start").json()["data"]["id"]
        self.assertEqual(self.post(f"/{wid}/exercises/0/sets", {"reps": 5, "weight": 50}).status_code, 400)
        self.assertEqual(self.post(f"/{wid}/exercises", {"name": ""}).status_code, 400)

        self.post(f"/{wid}/exercises", {"name": "Row"})
        self.assertEqual(self.post(f"/{wid}/exercises/0/sets", {"reps": 5}).status_code, 400)
        self.assertEqual(self.post(f"/{wid}/exercises/3/sets", {"reps": 5, "weight": 50}).status_code, 400)

    def test_open_workout_cannot_be_edited(self) -> None:
        wid = self.post("/start").json()["data"]["id"]
        resp = self.client.put(f"/api/v1/workouts/{wid}", json={"notes": "x"}, headers=self.headers)
        self.assertEqual(resp.status_code, 400)

        self.post(f"/{wid}/end")
        resp = self.client.put(f"/api/v1/workouts/{wid}", json={
            "notes": "felt strong",
            "exercises": [{"name": "Deadlift", "sets": [{"reps": 3, "weight": 200}]}],
        }, headers=self.headers)
        self.assertEqual(resp.status_code, 200)
        data = resp.json()["data"]
        self.assertEqual(data["notes"], "felt strong")
        self.assertEqual(data["total_volume"], 600)

    def test_other_users_cannot_touch_workout(self) -> None:
        wid = self.post("/start").json()["data"]["id"]
        intruder = register(self.client, email="intruder@example.com")
        self.assertEqual(self.client.get(f"/api/v1/workouts/{wid}", headers=intruder).status_code, 404)
        self.assertEqual(self.client.post(f"/api/v1/workouts/{wid}/end", headers=intruder).status_code, 404)
        self.assertEqual(self.client.delete(f"/api/v1/workouts/{wid}", headers=intruder).status_code, 404)

        self.assertEqual(self.client.delete(f"/api/v1/workouts/{wid}", headers=self.headers).status_code, 200)
        self.assertEqual(self.client.get(f"/api/v1/workouts/{wid}", headers=self.headers).status_code, 404)
