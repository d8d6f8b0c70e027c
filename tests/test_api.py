import json

import pytest
from fastapi.testclient import TestClient

from conftest import FakeLLM
from recruitform.api.main import app
from recruitform.service.blob_store import LocalBlobStore
from recruitform.service.evaluation_service import EvaluationService
from recruitform.service.ranking_service import RankingService
from recruitform.service.repository import FormRepository, SubmissionRepository

HR = {"X-HR-User-Id": "hr-1"}

FORM = {
    "title": "Backend Engineer",
    "description": "Apply now",
    "fields": [
        {"id": "1", "type": "text", "label": "Full Name", "required": True},
        {"id": "2", "type": "email", "label": "Email Address", "required": True},
    ],
}


@pytest.fixture
def llm():
    return FakeLLM()


@pytest.fixture
def client(tmp_path, llm):
    submissions = SubmissionRepository(tmp_path)
    app.state.form_repository = FormRepository(tmp_path)
    app.state.evaluation_service = EvaluationService(
        llm_manager=llm,
        blob_store=LocalBlobStore(tmp_path / "blobs", "http://files.test"),
        submissions=submissions,
    )
    app.state.ranking_service = RankingService(submissions)
    yield TestClient(app)
    app.state.form_repository = None
    app.state.evaluation_service = None
    app.state.ranking_service = None


def _create_form(client, requirements=None):
    body = dict(FORM)
    if requirements is not None:
        body["job_requirements"] = requirements.model_dump()
    response = client.post("/api/forms", json=body, headers=HR)
    assert response.status_code == 201
    return response.json()


def _submit(client, form_id, name, resume=None):
    responses = json.dumps([{"fieldId": "1", "value": name}, {"field_id": "2", "value": "x@y.z"}])
    files = {"resume": ("cv.pdf", resume, "application/pdf")} if resume is not None else None
    return client.post(f"/api/submit/{form_id}", data={"responses": responses}, files=files)


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_create_and_list_forms_requires_hr_identity(client):
    assert client.post("/api/forms", json=FORM).status_code == 401

    form = _create_form(client)

    assert form["owner_id"] == "hr-1"
    assert form["public_link"].startswith("/form/")
    listed = client.get("/api/forms", headers=HR).json()
    assert [f["id"] for f in listed] == [form["id"]]
    assert client.get("/api/forms", headers={"X-HR-User-Id": "hr-2"}).json() == []


def test_public_form_hides_job_requirements(client, requirements):
    form = _create_form(client, requirements)
    unique_id = form["public_link"].rsplit("/", 1)[-1]

    public = client.get(f"/api/forms/public/{unique_id}").json()

    assert public["title"] == "Backend Engineer"
    assert "job_requirements" not in public
    assert "owner_id" not in public
    assert client.get("/api/forms/public/nope").status_code == 404


def test_submit_with_resume_is_scored(client, requirements, resume_pdf):
    form = _create_form(client, requirements)

    response = _submit(client, form["id"], "Jane Doe", resume_pdf)

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["resume_url"].startswith("http://files.test/resumes/")

    ranked = client.get(f"/api/submissions/{form['id']}", headers=HR).json()
    evaluation = ranked["submissions"][0]["ai_evaluation"]
    assert evaluation["final_score"] == 75
    assert set(evaluation["detailed_reasoning"]) == {
        "skills_analysis",
        "experience_analysis",
        "education_analysis",
        "notice_period_analysis",
        "overall_analysis",
    }
    assert ranked["submissions"][0]["responses"][0] == {"field_id": "1", "value": "Jane Doe"}


def test_ai_failure_does_not_reject_submission(client, llm, requirements):
    form = _create_form(client, requirements)

    response = _submit(client, form["id"], "Jane Doe", b"this is not a pdf")

    assert response.status_code == 201
    assert llm.prompts == []
    ranked = client.get(f"/api/submissions/{form['id']}", headers=HR).json()
    assert ranked["submissions"][0]["ai_evaluation"] is None


def test_submit_without_resume(client, requirements):
    form = _create_form(client, requirements)

    response = _submit(client, form["id"], "No CV")

    assert response.status_code == 201
    assert response.json()["resume_url"] is None


@pytest.mark.parametrize("responses", [None, "not json", json.dumps({"field_id": "1"}), "[{}]"])
def test_bad_responses_are_rejected(client, responses):
    form = _create_form(client)
    data = {"responses": responses} if responses is not None else {}

    assert client.post(f"/api/submit/{form['id']}", data=data).status_code == 400


def test_unknown_form_is_rejected(client):
    assert _submit(client, "missing", "Jane").status_code == 404


def test_submissions_are_ranked_for_the_owner_only(client, llm, requirements, resume_pdf):
    form = _create_form(client, requirements)
    _submit(client, form["id"], "No CV")
    _submit(client, form["id"], "Jane Doe", resume_pdf)

    assert client.get(f"/api/submissions/{form['id']}").status_code == 401
    other = client.get(f"/api/submissions/{form['id']}", headers={"X-HR-User-Id": "hr-2"})
    assert other.status_code == 403

    ranked = client.get(f"/api/submissions/{form['id']}", headers=HR).json()
    assert ranked["dimension"] == "finalScore"
    assert [s["responses"][0]["value"] for s in ranked["submissions"]] == ["Jane Doe", "No CV"]
    assert ranked["job_requirements_summary"]["role"] == "Backend Engineer"

    by_date = client.get(
        f"/api/submissions/{form['id']}", params={"dimension": "submissionDate"}, headers=HR
    ).json()
    assert by_date["dimension"] == "submissionDate"
    assert [s["responses"][0]["value"] for s in by_date["submissions"]] == ["Jane Doe", "No CV"]

    bad = client.get(f"/api/submissions/{form['id']}", params={"dimension": "height"}, headers=HR)
    assert bad.status_code == 422


def test_services_unavailable(client):
    app.state.evaluation_service = None

    assert client.get("/health").json() == {"status": "degraded"}
    assert _submit(client, "any", "Jane").status_code == 503
