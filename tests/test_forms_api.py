"""Tests for the /api/forms and /api/admin endpoints."""

import csv
import io
import json

import pytest

from bibforms.services.admin_service import CSV_HEADERS, responses_to_csv, summarize_stats

from conftest import ADMIN_USER, CLIENT_USER


@pytest.fixture(autouse=True)
def seeded_forms(stores):
    stores.forms.add("F1", title="Library survey", status="published")
    stores.forms.add("F2", title="Draft survey", status="draft")


class TestPaginatedResponses:

    def test_pagination(self, make_client, stores):
        for i in range(45):
            stores.responses.add("F1", "user-1", {"q1": f"answer {i}"})

        with make_client(user=ADMIN_USER) as client:
            response = client.get("/api/forms/F1/responses", params={"page": 3, "limit": 20})

        assert response.status_code == 200
        body = response.json()
        assert len(body["responses"]) == 5
        assert body["pagination"] == {"page": 3, "limit": 20, "total": 45, "totalPages": 3}

    def test_defaults_to_first_page_of_twenty(self, make_client, stores):
        for i in range(3):
            stores.responses.add("F1", "user-1", {"q1": i})

        with make_client(user=ADMIN_USER) as client:
            body = client.get("/api/forms/F1/responses").json()

        assert body["pagination"] == {"page": 1, "limit": 20, "total": 3, "totalPages": 1}
        assert all(isinstance(r["response_data"], dict) for r in body["responses"])

    def test_admin_only(self, make_client):
        with make_client(user=CLIENT_USER) as client:
            assert client.get("/api/forms/F1/responses").status_code == 403

    def test_store_failure_is_500(self, make_client, stores):
        async def broken(form_id, page, limit):
            raise RuntimeError("timeout")

        stores.responses.list_form_responses = broken
        with make_client(user=ADMIN_USER) as client:
            assert client.get("/api/forms/F1/responses").status_code == 500


class TestFormsCrud:

    def test_list_and_filter(self, make_client):
        with make_client(user=None) as client:
            assert len(client.get("/api/forms").json()) == 2
            published = client.get("/api/forms", params={"status": "published"}).json()

        assert [f["id"] for f in published] == ["F1"]

    def test_get_unknown_form(self, make_client):
        with make_client(user=None) as client:
            assert client.get("/api/forms/nope").status_code == 404

    def test_create_requires_admin(self, make_client):
        body = {"title": "New", "json_schema": {"pages": []}}
        with make_client(user=CLIENT_USER) as client:
            assert client.post("/api/forms", json=body).status_code == 403

    def test_create(self, make_client):
        with make_client(user=ADMIN_USER) as client:
            response = client.post("/api/forms", json={"title": "  New form ", "json_schema": {"pages": [1]}})

        assert response.status_code == 201
        form = response.json()
        assert form["title"] == "New form"
        assert form["status"] == "draft"
        assert form["json_schema"] == {"pages": [1]}

    def test_create_rejects_bad_status(self, make_client):
        with make_client(user=ADMIN_USER) as client:
            response = client.post("/api/forms", json={"title": "x", "json_schema": {}, "status": "live"})
        assert response.status_code == 422

    def test_update_publishes(self, make_client, stores):
        with make_client(user=ADMIN_USER) as client:
            response = client.put("/api/forms/F2", json={"status": "published"})

        assert response.status_code == 200
        assert stores.forms.forms["F2"]["status"] == "published"
        assert stores.forms.forms["F2"]["title"] == "Draft survey"

    def test_update_unknown_form(self, make_client):
        with make_client(user=ADMIN_USER) as client:
            assert client.put("/api/forms/nope", json={"title": "x"}).status_code == 404

    def test_delete_refused_when_responses_exist(self, make_client, stores):
        stores.responses.add("F1", "user-1", {"q1": "x"})

        with make_client(user=ADMIN_USER) as client:
            assert client.get("/api/forms/F1/has-responses").json() == {"hasResponses": True}
            response = client.delete("/api/forms/F1")

        assert response.status_code == 400
        assert "F1" in stores.forms.forms

    def test_delete(self, make_client, stores):
        with make_client(user=ADMIN_USER) as client:
            response = client.delete("/api/forms/F2")

        assert response.json()["deletedId"] == "F2"
        assert "F2" not in stores.forms.forms


class TestAdmin:

    def test_stats(self, make_client, stores):
        stores.responses.add("F1", "user-1", {"q1": "x"})

        with make_client(user=ADMIN_USER) as client:
            stats = client.get("/api/admin/stats").json()

        assert stats == {
            "totalForms": 2,
            "publishedForms": 1,
            "draftForms": 1,
            "archivedForms": 0,
            "totalResponses": 1,
            "totalUsers": 3,
            "adminUsers": 1,
            "clientUsers": 2,
        }

    def test_export_csv(self, make_client, stores):
        stores.responses.emails["user-1"] = "u@example.com"
        stores.responses.add("F1", "user-1", {"q1": "hello"})

        with make_client(user=ADMIN_USER) as client:
            response = client.get("/api/admin/forms/F1/export")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert "attachment; filename=responses-F1-" in response.headers["content-disposition"]
        lines = response.text.strip().split("\n")
        assert lines[0] == ",".join(CSV_HEADERS)
        assert "u@example.com" in lines[1]

    def test_export_without_responses(self, make_client):
        with make_client(user=ADMIN_USER) as client:
            assert client.get("/api/admin/forms/F1/export").status_code == 404

    def test_summarize_stats_empty(self):
        assert summarize_stats([], 0, [])["totalForms"] == 0

    def test_csv_flattens_newlines_and_quotes(self):
        csv_text = responses_to_csv([{
            "id": "r1",
            "user_email": None,
            "submitted_at": "2026-01-01T00:00:00Z",
            "response_data": {"comment": "line one\nline \"two\""},
        }])

        lines = csv_text.strip().split("\n")
        assert len(lines) == 2
        assert lines[1].startswith("r1,N/A,2026-01-01T00:00:00Z,")

    def test_csv_keeps_backslashes_intact(self):
        answers = {"path": "C:\\new\\table", "note": "first\nsecond"}
        csv_text = responses_to_csv([{
            "id": "r1",
            "user_email": "u@example.com",
            "submitted_at": "2026-01-01T00:00:00Z",
            "response_data": answers,
        }])

        rows = list(csv.reader(io.StringIO(csv_text)))
        assert len(rows) == 2
        assert json.loads(rows[1][3]) == {"path": "C:\\new\\table", "note": "first second"}
