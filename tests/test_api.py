import pytest
from fastapi.testclient import TestClient
from regsim import api

SECTIONS = [
    {"SectionID": "MATH 105-1", "CourseCode": "MATH 105", "Department": "MATH", "CourseLevel": 105,
     "Component": "Lecture", "EnrollmentCap": 30},
    {"SectionID": "HIST 240-1", "CourseCode": "HIST 240", "Department": "HIST", "CourseLevel": 240,
     "Component": "Lecture", "EnrollmentCap": 30},
    {"SectionID": "MATH 457-1", "CourseCode": "MATH 457", "Department": "MATH", "CourseLevel": 457,
     "Component": "Independent Study"},
]
SMALL_RUN = {"n_total_students": 40, "n_thesis_seniors": 2}

@pytest.fixture
def client():
    api.jobs.clear()
    api.active_job_id = None
    return TestClient(api.app)

def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["status"] == "online"

def test_simulation_job_completes(client):
    response = client.post("/simulate", json={"config": SMALL_RUN, "sections": SECTIONS})
    assert response.status_code == 200
    job_id = response.json()["job_id"]

    # TestClient runs background tasks before returning
    progress = client.get(f"/progress/{job_id}").json()
    assert progress["status"] == "completed"
    assert progress["progress"] == 100
    result = progress["result"]
    assert result["conflicts"] == []
    assert set(result["summary"]) == {"allocation_shortfalls", "enrollment_shortfalls", "thesis_fallbacks"}
    assert [row["SectionID"] for row in result["schedule"]][-1] == "MATH 457-1"
    assert api.active_job_id is None

def test_invalid_catalog_rejected_before_job(client):
    bad = [dict(SECTIONS[0], EnrollmentCap=0)]
    response = client.post("/simulate", json={"config": {"n_thesis_seniors": 0}, "sections": bad})
    assert response.status_code == 422
    assert any("non-positive EnrollmentCap" in p for p in response.json()["detail"])
    assert api.jobs == {}

def test_missing_thesis_section_rejected(client):
    response = client.post("/simulate", json={"config": SMALL_RUN, "sections": SECTIONS[:2]})
    assert response.status_code == 422

def test_busy_server_refuses_second_job(client):
    api.jobs["running"] = {"status": "running", "phase": "scheduling", "progress": 0, "result": None}
    api.active_job_id = "running"
    response = client.post("/simulate", json={"config": SMALL_RUN, "sections": SECTIONS})
    assert response.status_code == 503

def test_unknown_job(client):
    assert client.get("/progress/nope").status_code == 404

def test_negative_thesis_count_rejected(client):
    response = client.post("/simulate", json={"config": {"n_thesis_seniors": -1}, "sections": SECTIONS})
    assert response.status_code == 422
    assert any("n_thesis_seniors" in p for p in response.json()["detail"])
    assert api.jobs == {}
