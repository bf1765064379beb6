"""Tests for the HTTP API."""
import pytest

from sitecms.config import settings

SERVICE_FORM = {
    "title": "Web Development",
    "description": "Sites and apps",
    "price": "From $1,000",
    "features[0]": "Responsive",
    "features[1]": "Fast",
}


def create_service(client, auth_headers, **extra):
    response = client.post("/api/services", data={**SERVICE_FORM, **extra}, headers=auth_headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


class TestRoot:
    """Test the root endpoint."""

    def test_root(self, client):
        """Test the welcome message."""
        response = client.get("/")

        assert response.status_code == 200
        assert "Site CMS API" in response.json()["message"]


class TestAuthentication:
    """Test admin protection of write endpoints."""

    def test_missing_token(self, client):
        """Test writes without a token are rejected."""
        response = client.post("/api/services", data=SERVICE_FORM)

        assert response.status_code == 401
        assert response.json() == {"success": False, "message": "Not authorized, no token"}

    def test_unknown_token(self, client):
        """Test unknown tokens are rejected."""
        response = client.post("/api/services", data=SERVICE_FORM, headers={"Authorization": "Bearer nope"})

        assert response.status_code == 401
        assert response.json()["message"] == "Not authorized, token failed"

    def test_malformed_header(self, client):
        """Test non-bearer credentials are rejected."""
        response = client.delete("/api/services/x", headers={"Authorization": "Basic abc"})

        assert response.status_code == 401
        assert response.json()["message"] == "Not authorized, malformed token"

    def test_reads_are_public(self, client):
        """Test public lists need no token."""
        assert client.get("/api/services").status_code == 200


class TestServicesEndpoints:
    """Test the services resource."""

    def test_create_from_multipart(self, client, auth_headers, image_file):
        """Test a bracket-notation form with images creates a service."""
        response = client.post(
            "/api/services",
            data={**SERVICE_FORM, "popular": "true"},
            files=[("images", image_file("a.png")), ("images", image_file("b.png"))],
            headers=auth_headers,
        )

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Service created successfully"
        service = body["data"]
        assert service["features"] == ["Responsive", "Fast"]
        assert service["popular"] is True
        assert [image["alt"] for image in service["images"]] == ["a.png", "b.png"]

    def test_create_from_json(self, client, auth_headers):
        """Test JSON bodies are accepted as well."""
        response = client.post(
            "/api/services",
            json={"title": "API", "description": "D", "price": "$1", "features": ["One"]},
            headers=auth_headers,
        )

        assert response.status_code == 201
        assert response.json()["data"]["features"] == ["One"]

    def test_validation_error_envelope(self, client, auth_headers):
        """Test missing fields come back with per-field errors."""
        response = client.post("/api/services", data={"title": "X"}, headers=auth_headers)

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["message"] == "Validation error"
        assert {error["field"] for error in body["errors"]} == {"description", "price"}

    def test_invalid_upload_type(self, client, auth_headers):
        """Test rejected uploads report an error code."""
        response = client.post(
            "/api/services",
            data=SERVICE_FORM,
            files=[("images", ("cv.pdf", b"%PDF", "application/pdf"))],
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["error"] == "INVALID_FILE_TYPE"

    def test_unexpected_upload_field(self, client, auth_headers, image_file):
        """Test files under a wrong key are rejected."""
        response = client.post(
            "/api/services", data=SERVICE_FORM, files=[("photo", image_file())], headers=auth_headers
        )

        assert response.status_code == 400
        assert response.json()["error"] == "UNEXPECTED_FILE_FIELD"

    def test_too_many_files(self, client, auth_headers, image_file):
        """Test the per-resource file limit."""
        files = [("images", image_file(f"{index}.png")) for index in range(6)]

        response = client.post("/api/services", data=SERVICE_FORM, files=files, headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["error"] == "TOO_MANY_FILES"
        assert response.json()["message"] == "Too many files. Maximum 5 files allowed."

    def test_list_filters(self, client, auth_headers):
        """Test query parameters filter the list."""
        create_service(client, auth_headers, active="false")
        create_service(client, auth_headers, title="Visible")

        response = client.get("/api/services", params={"active": "true"})

        assert [item["title"] for item in response.json()["data"]] == ["Visible"]

    @pytest.mark.parametrize("value", ["all", "maybe"])
    def test_non_boolean_filter_is_ignored(self, client, auth_headers, value):
        """Test filter values that are not booleans list everything."""
        create_service(client, auth_headers, active="false")
        create_service(client, auth_headers, title="Visible")

        response = client.get("/api/services", params={"active": value})

        assert response.status_code == 200
        assert len(response.json()["data"]) == 2

    def test_update_partial_and_clear(self, client, auth_headers, image_file):
        """Test omitted fields stay and "features[]" empties the list."""
        service = create_service(client, auth_headers)

        response = client.put(
            f"/api/services/{service['id']}",
            data={"price": "$99", "features[]": ""},
            headers=auth_headers,
        )

        assert response.status_code == 200
        updated = response.json()["data"]
        assert updated["price"] == "$99"
        assert updated["features"] == []
        assert updated["title"] == "Web Development"

    def test_popular_is_exclusive(self, client, auth_headers):
        """Test only one service is popular at a time."""
        first = create_service(client, auth_headers, popular="true")
        create_service(client, auth_headers, title="Design", popular="true")

        assert client.get(f"/api/services/{first['id']}").json()["data"]["popular"] is False

    def test_toggle(self, client, auth_headers):
        """Test toggling reports the new state."""
        service = create_service(client, auth_headers)

        response = client.patch(f"/api/services/{service['id']}/toggle", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["message"] == "Service deactivated successfully"
        assert response.json()["data"]["active"] is False

    def test_reorder(self, client, auth_headers):
        """Test services can be reordered in one call."""
        first = create_service(client, auth_headers)
        second = create_service(client, auth_headers, title="Design")

        response = client.post(
            "/api/services/reorder",
            json={"serviceOrders": [{"id": first["id"], "order": 5}, {"id": second["id"], "order": 1}]},
            headers=auth_headers,
        )

        assert response.status_code == 200
        titles = [item["title"] for item in client.get("/api/services").json()["data"]]
        assert titles == ["Design", "Web Development"]

    def test_get_missing(self, client):
        """Test unknown ids are a 404 envelope."""
        response = client.get("/api/services/missing")

        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Service not found"}

    def test_delete(self, client, auth_headers):
        """Test deletion."""
        service = create_service(client, auth_headers)

        response = client.delete(f"/api/services/{service['id']}", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["message"] == "Service deleted successfully"
        assert client.get(f"/api/services/{service['id']}").status_code == 404


class TestAchievementsEndpoints:
    """Test the nested envelope of achievements."""

    FORM = {"title": "Best Startup", "description": "Awarded", "date": "2024-02-01"}

    def test_nested_envelopes(self, client, auth_headers):
        """Test achievements nest under data.achievement(s) with pagination."""
        created = client.post("/api/achievements", data=self.FORM, headers=auth_headers)
        achievement = created.json()["data"]["achievement"]

        listed = client.get("/api/achievements").json()["data"]
        single = client.get(f"/api/achievements/{achievement['id']}").json()["data"]

        assert [item["id"] for item in listed["achievements"]] == [achievement["id"]]
        assert listed["pagination"] == {"page": 1, "pages": 1, "total": 1, "limit": 50}
        assert single["achievement"]["title"] == "Best Startup"

    def test_documents_are_accepted(self, client, auth_headers):
        """Test achievements accept PDF documents next to images."""
        response = client.post(
            "/api/achievements",
            data=self.FORM,
            files=[("images", ("cert.pdf", b"%PDF-1.4", "application/pdf"))],
            headers=auth_headers,
        )

        assert response.status_code == 201
        assert response.json()["data"]["achievement"]["documents"][0]["name"] == "cert.pdf"


class TestProjectsEndpoints:
    """Test the projects resource."""

    def test_create_and_paginate(self, client, auth_headers):
        """Test typed project fields and explicit pagination."""
        for index in range(3):
            response = client.post(
                "/api/projects",
                data={"title": f"P{index}", "description": "D", "startDate": f"2024-0{index + 1}-01",
                      "progress": "50", "technologies[0]": "Python"},
                headers=auth_headers,
            )
            assert response.status_code == 201

        body = client.get("/api/projects", params={"page": 1, "limit": 2}).json()

        assert [item["title"] for item in body["data"]] == ["P2", "P1"]
        assert body["pagination"]["pages"] == 2
        assert body["data"][0]["progress"] == 50

    def test_progress_out_of_range(self, client, auth_headers):
        """Test numeric bounds are enforced."""
        response = client.post(
            "/api/projects",
            data={"title": "P", "description": "D", "startDate": "2024-01-01", "progress": "150"},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "progress"


class TestTeamEndpoints:
    """Test team members and departments."""

    def test_portrait_and_departments(self, client, auth_headers, image_file):
        """Test portraits and the active-department list."""
        created = client.post(
            "/api/team",
            data={"name": "Ada", "position": "CTO", "department": "Engineering",
                  "socialLinks[github]": "https://github.com/ada"},
            files=[("image", image_file("ada.png"))],
            headers=auth_headers,
        )
        client.post(
            "/api/team",
            data={"name": "Bob", "position": "Intern", "department": "Archive", "isActive": "false"},
            headers=auth_headers,
        )

        member = created.json()["data"]
        assert member["image"]["alt"] == "Ada - CTO"
        assert member["socialLinks"]["github"] == "https://github.com/ada"
        assert client.get("/api/team/departments").json()["data"] == ["Engineering"]
        assert [m["name"] for m in client.get("/api/team", params={"active": "true"}).json()["data"]] == ["Ada"]


class TestContentEndpoints:
    """Test page sections."""

    def test_upsert_and_read(self, client, auth_headers):
        """Test a section is created on first save and read by name."""
        response = client.put(
            "/api/content/hero",
            data={"title": "Welcome", "metadata[cta]": "Contact us"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json()["message"] == "Content updated successfully"
        section = client.get("/api/content/hero").json()["data"]
        assert section["metadata"] == {"cta": "Contact us"}
        assert len(client.get("/api/content").json()["data"]) == 1

    def test_unknown_section(self, client, auth_headers):
        """Test unknown sections are rejected and missing ones are a 404."""
        assert client.put("/api/content/footer", data={"title": "X"}, headers=auth_headers).status_code == 400
        assert client.get("/api/content/about").status_code == 404


class TestCustomizationEndpoints:
    """Test the site customization."""

    def test_defaults_update_and_reset(self, client, auth_headers):
        """Test the full customization lifecycle."""
        initial = client.get("/api/customizations").json()["data"]

        updated = client.put(
            "/api/customizations", data={"colors[primary]": "#111111"}, headers=auth_headers
        ).json()["data"]
        reset = client.post("/api/customizations/reset", headers=auth_headers).json()["data"]

        assert updated["colors"]["primary"] == "#111111"
        assert updated["colors"]["accent"] == initial["colors"]["accent"]
        assert updated["version"] == initial["version"] + 1
        assert reset["colors"]["primary"] == initial["colors"]["primary"]

    def test_logo_upload(self, client, auth_headers, image_file):
        """Test a logo upload sets its URL and is served back."""
        response = client.put("/api/customizations", files=[("logo", image_file("logo.png"))], headers=auth_headers)

        logo = response.json()["data"]["logo"]
        served = client.get(logo["url"])
        assert served.status_code == 200
        assert served.headers["content-type"] == "image/png"

    def test_fonts(self, client):
        """Test the font list is public."""
        fonts = client.get("/api/customizations/fonts").json()["data"]

        assert fonts[0] == {"name": "Inter", "value": "Inter", "category": "Sans Serif"}


class TestContactEndpoints:
    """Test the contact form and inbox."""

    MESSAGE = {"name": "Grace", "email": "grace@example.com", "message": "Hello", "urgency": "critical"}

    def test_public_submission(self, client):
        """Test visitors can send messages without a token."""
        response = client.post("/api/contact", json=self.MESSAGE)

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Message sent successfully! We'll get back to you soon."
        assert set(body["data"]) == {"id", "name", "email"}

    def test_submission_missing_fields(self, client):
        """Test schema errors use the standard error envelope."""
        response = client.post("/api/contact", json={"email": "grace@example.com"})

        assert response.status_code == 400
        assert response.json()["message"] == "Validation error"

    def test_inbox_requires_admin(self, client):
        """Test the inbox is not public."""
        assert client.get("/api/contact").status_code == 401

    def test_inbox_flow(self, client, auth_headers):
        """Test listing, status updates, stats and deletion."""
        contact_id = client.post("/api/contact", json=self.MESSAGE).json()["data"]["id"]
        client.post("/api/contact", json=self.MESSAGE)

        status = client.put(f"/api/contact/{contact_id}/status", json={"status": "in-progress"}, headers=auth_headers)
        stats = client.get("/api/contact/stats", headers=auth_headers).json()["data"]
        inbox = client.get("/api/contact", params={"status": "new"}, headers=auth_headers).json()
        deleted = client.delete(f"/api/contact/{contact_id}", headers=auth_headers)

        assert status.json()["data"]["status"] == "in-progress"
        assert stats == {"total": 2, "new": 1, "in-progress": 1, "resolved": 0}
        assert inbox["pagination"]["total"] == 1
        assert deleted.status_code == 200
        assert client.get(f"/api/contact/{contact_id}", headers=auth_headers).status_code == 404


class TestRateLimits:
    """Test per-client request limits."""

    MESSAGE = {"name": "Grace", "email": "grace@example.com", "message": "Hello"}

    def test_contact_form_limit(self, client):
        """Test the fourth contact submission within the hour is refused."""
        for _ in range(3):
            assert client.post("/api/contact", json=self.MESSAGE).status_code == 201

        response = client.post("/api/contact", json=self.MESSAGE)

        assert response.status_code == 429
        assert response.json() == {
            "success": False,
            "message": "Too many contact form submissions, please try again later.",
        }

    def test_upload_limit_is_shared_across_resources(self, client, auth_headers, monkeypatch):
        """Test every form-submitting route counts against one upload limit."""
        monkeypatch.setattr(settings, "RATE_LIMIT_UPLOADS", "2/hour")
        create_service(client, auth_headers)
        client.put("/api/content/hero", data={"title": "Hi"}, headers=auth_headers)

        response = client.post(
            "/api/team", data={"name": "Ada", "position": "CTO"}, headers=auth_headers
        )

        assert response.status_code == 429
        assert response.json()["message"] == "Too many file uploads, please try again later."

    def test_reads_are_not_limited(self, client, monkeypatch):
        """Test public reads ignore the upload limit."""
        monkeypatch.setattr(settings, "RATE_LIMIT_UPLOADS", "1/hour")

        statuses = {client.get("/api/services").status_code for _ in range(5)}

        assert statuses == {200}


class TestUploadsEndpoint:
    """Test serving stored files."""

    def test_serves_stored_file(self, client, auth_headers, image_file):
        """Test uploaded images are served under their URL."""
        service = create_service(client, auth_headers)
        response = client.put(
            f"/api/services/{service['id']}", files=[("images", image_file())], headers=auth_headers
        )
        url = response.json()["data"]["images"][0]["url"]

        served = client.get(url)

        assert served.status_code == 200
        assert served.content == image_file()[1]

    @pytest.mark.parametrize("path", ["/uploads/images/missing.png", "/uploads/..%2Fsecret.txt"])
    def test_missing_or_outside(self, client, path):
        """Test unknown and escaping paths are a 404."""
        assert client.get(path).status_code == 404
