"""
Integration tests for POST /api/process-resume and POST /api/update-resume.
"""
import json

import httpx
import pytest

from resume_enhancer.main import app
from resume_enhancer.api.dependencies import get_document_ai, get_resume_enhancer
from resume_enhancer.core.exceptions import EnhancementError
from resume_enhancer.db.models.profile import Profile
from resume_enhancer.db.models.resume import Resume
from resume_enhancer.services.document_ai import DocumentAIClient

ENHANCED = {
    "name": "Ada Lovelace",
    "title": "Analyst",
    "location": "",
    "contacts": [{"type": "email", "value": "ada@example.com"}],
    "education": [],
    "experience": [],
    "skills": ["Mathematics"],
    "design": {"layout": {"columns": 2}},
}


class FakeEnhancer:
    def __init__(self, result=None, error=None):
        self.result = result or ENHANCED
        self.error = error
        self.calls = []

    def enhance(self, resume_text, styles=None, custom_instructions=None):
        self.calls.append((resume_text, styles, custom_instructions))
        if self.error:
            raise self.error
        return dict(self.result)


@pytest.fixture
def enhancer():
    fake = FakeEnhancer()
    app.dependency_overrides[get_resume_enhancer] = lambda: fake
    app.dependency_overrides[get_document_ai] = lambda: None
    return fake


@pytest.fixture
def uploaded_resume(profile, make_resume, storage):
    path = f"uploads/{profile.id}/resume.txt"
    storage.files[path] = b"Ada Lovelace\nAnalyst\nada@example.com"
    return make_resume(profile.id, original_file_path=path)


def test_process_resume_end_to_end(client, auth_headers, profile, uploaded_resume, storage, enhancer, db_session):
    response = client.post(
        "/api/process-resume",
        json={"resumeId": uploaded_resume.id, "enhancementStyles": ["professional"], "customInstructions": "Be brief"},
        headers=auth_headers,
    )

    assert response.status_code == 200
    text_path = f"processed/{profile.id}/{uploaded_resume.id}.txt"
    assert response.json() == {
        "success": True,
        "resumeId": uploaded_resume.id,
        "status": "completed",
        "processedPath": text_path,
    }
    assert enhancer.calls == [("Ada Lovelace\nAnalyst\nada@example.com", ["professional"], "Be brief")]
    assert storage.files[text_path].decode().startswith("ADA LOVELACE\nAnalyst")

    db_session.expire_all()
    resume = db_session.get(Resume, uploaded_resume.id)
    assert resume.status == "completed"
    assert resume.processed_file_path == text_path
    assert resume.resume_preview_json["name"] == "Ada Lovelace"
    assert resume.enhancement_styles == ["professional"]
    assert db_session.get(Profile, profile.id).resumes_used == 1


def test_extract_only_returns_text(client, auth_headers, profile, uploaded_resume, enhancer, db_session):
    response = client.post(
        "/api/process-resume",
        json={"resumeId": uploaded_resume.id, "extractOnly": True},
        headers=auth_headers,
    )

    assert response.status_code == 200
    assert response.json() == {"success": True, "extractedText": "Ada Lovelace\nAnalyst\nada@example.com"}
    assert enhancer.calls == []
    db_session.expire_all()
    assert db_session.get(Resume, uploaded_resume.id).status == "uploaded"
    assert db_session.get(Profile, profile.id).resumes_used == 0


def test_resume_limit_reached(client, auth_headers, profile, uploaded_resume, enhancer, db_session):
    stored = db_session.get(Profile, profile.id)
    stored.resumes_used = stored.resumes_limit
    db_session.commit()

    response = client.post("/api/process-resume", json={"resumeId": uploaded_resume.id}, headers=auth_headers)

    assert response.status_code == 403
    assert response.json() == {"error": "Resume limit reached for your subscription"}
    assert enhancer.calls == []


def test_unsupported_file_type(client, auth_headers, profile, make_resume, storage, enhancer, db_session):
    path = f"uploads/{profile.id}/resume.docx"
    storage.files[path] = b"PK\x03\x04"
    resume = make_resume(profile.id, original_file_path=path)

    response = client.post("/api/process-resume", json={"resumeId": resume.id}, headers=auth_headers)

    assert response.status_code == 415
    assert "not currently supported" in response.json()["error"]
    db_session.expire_all()
    assert db_session.get(Resume, resume.id).status == "failed"


def test_empty_text_fails(client, auth_headers, profile, make_resume, storage, enhancer, db_session):
    path = f"uploads/{profile.id}/blank.txt"
    storage.files[path] = b"   \n"
    resume = make_resume(profile.id, original_file_path=path)

    response = client.post("/api/process-resume", json={"resumeId": resume.id}, headers=auth_headers)

    assert response.status_code == 500
    db_session.expire_all()
    assert db_session.get(Resume, resume.id).status == "failed"


def test_missing_file_fails(client, auth_headers, profile, make_resume, storage, enhancer, db_session):
    resume = make_resume(profile.id, original_file_path=f"uploads/{profile.id}/gone.pdf")

    response = client.post("/api/process-resume", json={"resumeId": resume.id}, headers=auth_headers)

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to download resume file"}
    db_session.expire_all()
    assert db_session.get(Resume, resume.id).status == "failed"


def test_enhancement_failure_marks_failed(client, auth_headers, profile, uploaded_resume, storage, db_session):
    app.dependency_overrides[get_resume_enhancer] = lambda: FakeEnhancer(error=EnhancementError("bad json"))
    app.dependency_overrides[get_document_ai] = lambda: None

    response = client.post("/api/process-resume", json={"resumeId": uploaded_resume.id}, headers=auth_headers)

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to process resume with AI"}
    db_session.expire_all()
    assert db_session.get(Resume, uploaded_resume.id).status == "failed"
    assert db_session.get(Profile, profile.id).resumes_used == 0


def test_foreign_resume(client, auth_headers, other_profile, make_resume, storage, enhancer):
    resume = make_resume(other_profile.id, original_file_path="uploads/x/resume.txt")

    response = client.post("/api/process-resume", json={"resumeId": resume.id}, headers=auth_headers)

    assert response.status_code == 404
    assert response.json() == {"error": "Resume not found"}


def test_instructions_too_long(client, auth_headers, uploaded_resume, enhancer):
    response = client.post(
        "/api/process-resume",
        json={"resumeId": uploaded_resume.id, "customInstructions": "x" * 2001},
        headers=auth_headers,
    )

    assert response.status_code == 400
    assert "error" in response.json()


def test_document_ai_outage_marks_failed(client, auth_headers, profile, make_resume, storage, credentials, db_session):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    document_ai = DocumentAIClient(credentials, "proc-123", transport=httpx.MockTransport(handler))
    app.dependency_overrides[get_document_ai] = lambda: document_ai
    app.dependency_overrides[get_resume_enhancer] = lambda: FakeEnhancer()
    path = f"uploads/{profile.id}/resume.pdf"
    storage.files[path] = b"%PDF-1.4 data"
    resume = make_resume(profile.id, original_file_path=path)

    response = client.post("/api/process-resume", json={"resumeId": resume.id}, headers=auth_headers)

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to extract text from resume"}
    db_session.expire_all()
    assert db_session.get(Resume, resume.id).status == "failed"
    assert db_session.get(Profile, profile.id).resumes_used == 0


# --- update-resume ---

def test_update_replaces_content_keeps_design(client, auth_headers, profile, make_resume, db_session):
    resume = make_resume(profile.id, resume_preview_json={"design": {"layout": "two-column"}, "content": {"name": "Old"}})
    new_content = {"name": "New Name", "title": "Engineer"}

    response = client.post(
        "/api/update-resume",
        json={"resumeId": resume.id, "updatedContent": new_content},
        headers=auth_headers,
    )

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["message"] == "Resume updated successfully"
    assert data["updatedData"] == {"design": {"layout": "two-column"}, "content": new_content}

    db_session.expire_all()
    assert db_session.get(Resume, resume.id).resume_preview_json["content"] == new_content


def test_update_accepts_string_preview(client, auth_headers, profile, make_resume):
    resume = make_resume(profile.id, resume_preview_json=json.dumps({"design": {"layout": "single-column"}}))

    response = client.post(
        "/api/update-resume",
        json={"resumeId": resume.id, "updatedContent": {"name": "Ada"}},
        headers=auth_headers,
    )

    assert response.status_code == 200
    assert response.json()["updatedData"]["design"] == {"layout": "single-column"}


def test_update_requires_fields(client, auth_headers):
    response = client.post("/api/update-resume", json={"resumeId": "abc"}, headers=auth_headers)

    assert response.status_code == 400
    assert response.json() == {"error": "Resume ID and updated content are required"}


def test_update_foreign_resume(client, auth_headers, other_profile, make_resume):
    resume = make_resume(other_profile.id, resume_preview_json={"content": {}})

    response = client.post(
        "/api/update-resume",
        json={"resumeId": resume.id, "updatedContent": {"name": "Mallory"}},
        headers=auth_headers,
    )

    assert response.status_code == 404
