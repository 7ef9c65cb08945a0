from datetime import timedelta

from fastapi import status
from jose import jwt

from app.core.clock import utcnow
from app.core.config import settings
from app.models import JobStatus, UserRole


def test_list_envelope_carries_pagination(client, company, make_job):
    make_job(company, title="Listed")
    response = client.get("/api/jobs")
    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "Jobs retrieved successfully"
    assert "timestamp" in body
    assert body["pagination"] == {
        "total": 1,
        "page": 1,
        "limit": 10,
        "totalPages": 1,
        "hasNext": False,
        "hasPrev": False,
    }
    job = body["data"][0]
    assert job["title"] == "Listed"
    assert job["company"]["name"] == "Acme"
    assert job["applicationCount"] == 0


def test_page_window_is_clamped(client):
    body = client.get("/api/jobs", params={"page": "0", "limit": "1000"}).json()
    assert body["pagination"]["page"] == 1
    assert body["pagination"]["limit"] == 50


def test_unknown_sort_key_is_a_400(client):
    response = client.get("/api/jobs", params={"sortBy": "hashed_password"})
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    body = response.json()
    assert body["success"] is False
    assert body["error"]["code"] == "INVALID_INPUT"
    assert "data" not in body


def test_search_with_camel_case_filters(client, company, make_job, make_skill):
    python, go = make_skill("Python"), make_skill("Go")
    remote = make_job(company, title="Remote Python", is_remote=True, salary_max=7000, skills=[python])
    make_job(company, title="Office Go", location="Paris", salary_max=7000, skills=[go])

    body = client.get(
        "/api/jobs/search",
        params={"isRemote": "true", "location": "Paris", "salaryMin": "5000", "skills": f"{python.id},{go.id}"},
    ).json()
    assert [job["id"] for job in body["data"]] == [remote.id]


def test_repeated_skill_params(client, company, make_job, make_skill):
    python, go = make_skill("Python"), make_skill("Go")
    job = make_job(company, skills=[go])
    response = client.get(f"/api/jobs/search?skills={python.id}&skills={go.id}")
    assert [j["id"] for j in response.json()["data"]] == [job.id]


def test_bad_skill_id_is_a_400(client):
    response = client.get("/api/jobs/search", params={"skills": "1,abc"})
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_invalid_job_type_is_a_400(client):
    response = client.get("/api/jobs/search", params={"type": "GIG"})
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_missing_job_is_a_404(client):
    response = client.get("/api/jobs/999")
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["error"] == {"code": "NOT_FOUND", "message": "Job not found"}


def test_body_validation_is_a_400(client, company, employer, auth_headers):
    response = client.post("/api/jobs", json={"title": "x"}, headers=auth_headers(employer))
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    body = response.json()
    assert body["error"]["message"] == "Validation failed"
    assert "title" in {detail["field"] for detail in body["error"]["details"]}


def test_write_requires_token(client):
    response = client.post("/api/jobs", json={})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["error"]["code"] == "AUTH_FAILED"


def test_expired_token_is_rejected(client, employer):
    token = jwt.encode(
        {"sub": str(employer.id), "type": "access", "exp": utcnow() - timedelta(minutes=1)},
        settings.secret_key,
        algorithm=settings.token_algorithm,
    )
    response = client.get("/api/jobs/my-jobs", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["error"]["message"] == "TOKEN_EXPIRED"


def test_inactive_user_is_forbidden(client, make_user, auth_headers):
    user = make_user(is_active=False)
    response = client.get("/api/applications/me", headers=auth_headers(user))
    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_hiring_flow_over_http(client, company, employer, seeker, make_skill, auth_headers):
    python = make_skill("Python")
    employer_headers = auth_headers(employer)

    created = client.post(
        "/api/jobs",
        json={
            "title": "Data Engineer",
            "description": "Design and operate our data pipelines",
            "type": "FULL_TIME",
            "experienceLevel": "MID",
            "salaryMin": 4000,
            "salaryMax": 6000,
            "skills": [python.id],
        },
        headers=employer_headers,
    )
    assert created.status_code == status.HTTP_201_CREATED
    job = created.json()["data"]
    assert job["status"] == JobStatus.DRAFT.value
    assert [link["skill"]["name"] for link in job["jobSkills"]] == ["Python"]

    published = client.patch(f"/api/jobs/{job['id']}/publish", headers=employer_headers)
    assert published.json()["data"]["status"] == "PUBLISHED"

    applied = client.post(
        f"/api/jobs/{job['id']}/apply",
        json={"coverLetter": "Pipelines are my thing"},
        headers=auth_headers(seeker),
    )
    assert applied.status_code == status.HTTP_201_CREATED

    duplicate = client.post(f"/api/jobs/{job['id']}/apply", json={}, headers=auth_headers(seeker))
    assert duplicate.status_code == status.HTTP_409_CONFLICT

    applications = client.get(f"/api/jobs/{job['id']}/applications", headers=employer_headers).json()
    assert applications["pagination"]["total"] == 1
    assert "email" not in applications["data"][0]["applicant"]

    stats = client.get(f"/api/jobs/{job['id']}/stats", headers=employer_headers).json()["data"]
    assert stats["totalApplications"] == 1
    assert stats["applicationsByStatus"] == {"PENDING": 1}


def test_register_and_read_profile(client, auth_headers):
    registered = client.post(
        "/api/users/register",
        json={"email": "new@example.com", "password": "Password123!", "firstName": "Nia"},
    )
    assert registered.status_code == status.HTTP_201_CREATED
    user_id = registered.json()["data"]["id"]

    public = client.get(f"/api/users/{user_id}").json()["data"]
    assert public["profile"]["firstName"] == "Nia"


def test_admin_registration_is_forbidden(client):
    response = client.post(
        "/api/users/register",
        json={"email": "root@example.com", "password": "Password123!", "role": UserRole.ADMIN.value},
    )
    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_account_deletion_returns_files(client, seeker, auth_headers):
    headers = auth_headers(seeker)
    client.put("/api/users/me/resume", json={"url": "https://cdn.example.com/cv.pdf"}, headers=headers)

    response = client.delete("/api/users/me", headers=headers)
    assert response.json()["data"] == {"filesToDelete": ["https://cdn.example.com/cv.pdf"]}


def test_company_logo_update(client, company, employer, auth_headers):
    response = client.put(
        "/api/companies/me/logo",
        json={"logoUrl": "https://cdn.example.com/logo.png"},
        headers=auth_headers(employer),
    )
    assert response.json()["data"] == {"logoUrl": "https://cdn.example.com/logo.png", "previousLogoUrl": None}


def test_company_search_route_is_not_an_id(client, company):
    response = client.get("/api/companies/search", params={"q": "acme"})
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["data"][0]["id"] == company.id


def test_popular_skills_include_counts(client, company, make_job, make_skill):
    python = make_skill("Python")
    make_job(company, skills=[python])
    data = client.get("/api/skills/popular").json()["data"]
    assert data[0]["name"] == "Python"
    assert data[0]["jobCount"] == 1
    assert data[0]["userCount"] == 0


def test_categories_list_job_counts(client, category, company, make_job):
    make_job(company, category_id=category.id)
    data = client.get("/api/categories").json()["data"]
    assert data == [
        {
            "id": category.id,
            "name": "Engineering",
            "slug": "engineering",
            "description": None,
            "createdAt": data[0]["createdAt"],
            "jobCount": 1,
        }
    ]


def test_request_id_is_echoed(client):
    response = client.get("/", headers={"X-Request-ID": "abc-123"})
    assert response.headers["X-Request-ID"] == "abc-123"
    assert "X-Process-Time" in response.headers


def test_company_deletion_returns_logo(client, company, employer, auth_headers):
    headers = auth_headers(employer)
    client.put("/api/companies/me/logo", json={"logoUrl": "https://cdn.example.com/logo.png"}, headers=headers)
    response = client.delete(f"/api/companies/{company.id}", headers=headers)
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["data"] == {"filesToDelete": ["https://cdn.example.com/logo.png"]}
