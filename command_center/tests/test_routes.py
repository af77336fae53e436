import io

from command_center.db.session import get_session
from command_center.services.backend import SqlBackend
from command_center.tests.conftest import TEST_EMAIL


def create(client, **overrides):
    payload = {
        "category": "Pumping",
        "utility": "Duke Energy",
        "substation": "Riverside",
        "order": "24-1001",
        "landing": "10/20/2025",
    }
    payload.update(overrides)
    response = client.post("/projects", json=payload)
    assert response.status_code == 201, response.get_json()
    return response.get_json()["project"]


class TestAuth:

    def test_requires_login(self, client):
        response = client.get("/projects")
        assert response.status_code == 401
        assert response.get_json()["errorType"] == "AUTH_ERROR"

    def test_wrong_password(self, client):
        response = client.post("/login", json={"email": TEST_EMAIL, "password": "nope"})
        assert response.status_code == 401
        assert response.get_json()["error"] == (
            "Invalid email or password. Please use authorized credentials."
        )
        assert client.get("/me").get_json()["user"] is None

    def test_login_logout(self, auth_client):
        assert auth_client.get("/me").get_json()["user"] == TEST_EMAIL
        auth_client.post("/logout")
        assert auth_client.get("/me").get_json()["user"] is None
        assert auth_client.get("/projects").status_code == 401

    def test_sso_disabled_in_password_mode(self, client):
        response = client.post("/login/sso", json={"idToken": "a.b.c"})
        assert response.status_code == 400


class TestProjects:

    def test_create_list_and_filter(self, auth_client):
        create(auth_client)
        create(auth_client, category="EHV", utility="Dominion", substation="North Anna", order="A-118")

        body = auth_client.get("/projects").get_json()
        assert body["total"] == 2
        assert body["projects"][0]["fatDate"] == "N/A"
        assert body["projects"][0]["stepper"][0]["key"] == "design"

        assert auth_client.get("/projects?category=EHV").get_json()["total"] == 1
        assert auth_client.get("/projects?search=north").get_json()["total"] == 1
        assert auth_client.get("/projects?search=24-10").get_json()["total"] == 1
        assert auth_client.get("/projects?status=Critical").get_json()["total"] == 0

    def test_create_invalid(self, auth_client):
        response = auth_client.post("/projects", json={"category": "Nope", "utility": "x", "substation": "y"})
        assert response.status_code == 400
        assert response.get_json()["errorType"] == "VALIDATION_ERROR"

    def test_detail_and_history(self, auth_client):
        project = create(auth_client)
        body = auth_client.get(f"/projects/{project['id']}").get_json()

        assert body["project"]["utility"] == "Duke Energy"
        assert [e["action"] for e in body["changeLog"]] == ["Created New Project"]
        assert auth_client.get("/projects/999").status_code == 404

    def test_put_save(self, auth_client):
        project = create(auth_client)
        project["status"] = "Late"

        body = auth_client.put(f"/projects/{project['id']}", json=project).get_json()
        assert body["changes"] == ['Status: "Active" -> "Late"']
        assert body["localOnly"] is False
        assert body["entry"]["action"] == "Updated Project Details"

    def test_delete(self, auth_client):
        project = create(auth_client)
        body = auth_client.delete(f"/projects/{project['id']}").get_json()

        assert body["entry"]["changes"] == "Deleted: Duke Energy - Riverside | Order: 24-1001"
        assert auth_client.get("/projects").get_json()["total"] == 0
        assert auth_client.delete(f"/projects/{project['id']}").status_code == 404

    def test_dashboard(self, auth_client):
        create(auth_client)
        body = auth_client.get("/projects/dashboard").get_json()
        assert body["stats"]["total"] == 1
        assert body["categories"]["Pumping"] == 1
        assert body["fatProjectsWithPunchList"] == []

    def test_export(self, auth_client):
        create(auth_client)
        response = auth_client.get("/projects/export")
        assert response.status_code == 200
        assert response.mimetype.endswith("spreadsheetml.sheet")


class TestEditor:

    def test_edit_session(self, auth_client, app):
        project = create(auth_client)
        base = f"/projects/{project['id']}/edit"

        assert auth_client.post(base).status_code == 200
        assert auth_client.post(f"{base}/punch-list", json={"description": "Paint"}).status_code == 400

        for _ in range(4):
            body = auth_client.post(f"{base}/milestones/fat").get_json()
        assert body["changes"] == []
        for _ in range(3):
            body = auth_client.post(f"{base}/milestones/fat").get_json()
        assert body["punchListEnabled"] is True

        body = auth_client.post(f"{base}/punch-list", json={"description": "Replace gasket"}).get_json()
        item_id = body["draft"]["punchList"][0]["id"]

        response = auth_client.post(
            f"{base}/punch-list/{item_id}/attachments",
            data={"file": (io.BytesIO(b"\x89PNG data"), "door.png", "image/png")},
            content_type="multipart/form-data",
        )
        assert response.status_code == 200, response.get_json()
        assert response.get_json()["attachment"]["fileName"] == "door.png"
        assert len(app.extensions["blob_store"].files) == 1

        body = auth_client.patch(base, json={"fatDate": "Nov. 2025", "progress": 60}).get_json()
        assert 'FatDate: "N/A" -> "Nov. 2025"' in body["changes"]

        body = auth_client.post(f"{base}/save").get_json()
        assert body["entry"]["changes"] == (
            'Progress: "0" -> "60" | FatDate: "N/A" -> "Nov. 2025" | '
            'FAT: Not Started -> Completed | Punch List: Added "Replace gasket"'
        )
        # 草稿已丢弃
        assert auth_client.get(base).status_code == 404

        punch = auth_client.get("/punch-list").get_json()["projects"]
        assert punch[0]["punchList"][0]["attachments"][0]["fileName"] == "door.png"

        toggled = auth_client.post(f"/projects/{project['id']}/punch-list/{item_id}/toggle").get_json()
        assert toggled["entry"]["action"] == "Punch List Updated"

    def test_rejected_attachment(self, auth_client):
        project = create(auth_client)
        base = f"/projects/{project['id']}/edit"
        auth_client.post(base)
        for _ in range(3):
            auth_client.post(f"{base}/milestones/fat")
        item_id = auth_client.post(f"{base}/punch-list", json={"description": "Paint"}).get_json()["draft"]["punchList"][0]["id"]

        response = auth_client.post(
            f"{base}/punch-list/{item_id}/attachments",
            data={"file": (io.BytesIO(b"%PDF"), "spec.pdf", "application/pdf")},
            content_type="multipart/form-data",
        )
        assert response.status_code == 400
        assert response.get_json()["error"].startswith("Invalid file type")

    def test_cancel(self, auth_client):
        project = create(auth_client)
        base = f"/projects/{project['id']}/edit"
        auth_client.post(base)
        auth_client.patch(base, json={"status": "Late"})
        auth_client.delete(base)

        assert auth_client.post(f"{base}/save").status_code == 404
        assert auth_client.get(f"/projects/{project['id']}").get_json()["project"]["status"] == "Active"

    def test_bad_field(self, auth_client):
        project = create(auth_client)
        base = f"/projects/{project['id']}/edit"
        auth_client.post(base)
        assert auth_client.patch(base, json={"utility": "Other"}).status_code == 400
        assert auth_client.patch(base, json={"progress": 150}).status_code == 400


class TestCalendarAndAudit:

    def test_month_view(self, auth_client):
        create(auth_client)
        body = auth_client.get("/calendar/month?year=2025&month=10").get_json()

        assert body["monthName"] == "Oct"
        assert body["days"][0]["date"] is None
        day = next(d for d in body["days"] if d["date"] == "2025-10-20")
        assert day["projects"][0]["isLanding"] is True

        assert auth_client.get("/calendar/month?month=13").status_code == 400

    def test_year_view(self, auth_client):
        create(auth_client)
        create(auth_client, substation="Hillcrest", landing="TBD")
        body = auth_client.get("/calendar/year?year=2025").get_json()

        assert len(body["months"][9]["projects"]) == 1
        assert len(body["other"]) == 1

    def test_audit_log(self, auth_client):
        project = create(auth_client)
        auth_client.put(f"/projects/{project['id']}", json={**project, "status": "Late"})

        body = auth_client.get("/audit-logs").get_json()
        assert body["total"] == 2
        assert body["entries"][0]["action"] == "Updated Project Details"
        assert body["entries"][0]["fragments"][0]["kind"] == "text"

        filtered = auth_client.get("/audit-logs?action=Created%20New%20Project").get_json()
        assert filtered["total"] == 1
        assert auth_client.get("/audit-logs?project_id=abc").status_code == 400

        response = auth_client.get("/audit-logs/export")
        assert response.status_code == 200


class TestReadBoundary:

    def test_create_with_legacy_milestones(self, auth_client):
        project = create(auth_client, milestones={"fat": True, "design": False})
        assert project["milestones"]["fat"] == "completed"
        assert project["milestones"]["design"] == "not_started"

    def test_put_with_legacy_milestones(self, auth_client):
        project = create(auth_client)
        project["milestones"] = {stage: True for stage in ("design", "mat", "fab", "fat", "ship")}

        response = auth_client.put(f"/projects/{project['id']}", json=project)

        assert response.status_code == 200, response.get_json()
        assert "FAT: Not Started -> Completed" in response.get_json()["changes"]

    def test_dirty_stored_row_does_not_break_reads(self, auth_client):
        db = get_session()
        try:
            SqlBackend(db).insert_project({
                "category": "Bogus",
                "utility": "Entergy",
                "substation": "Waterford",
                "date_created": "1/1/2026",
                "order_number": "FS-9",
                "status": "Unknown",
                "progress": 120,
                "milestones": {"fat": True},
                "punch_list": [{"id": "x", "description": "", "completed": False}],
            })
        finally:
            db.close()

        assert auth_client.get("/projects/dashboard").status_code == 200
        body = auth_client.get("/projects").get_json()
        assert body["projects"][0]["progress"] == 100
        assert body["projects"][0]["punchList"][0]["description"] == "(no description)"
        assert auth_client.get("/calendar/year?year=2025").status_code == 200

    def test_calendar_year_out_of_range(self, auth_client):
        assert auth_client.get("/calendar/month?year=0&month=1").status_code == 400
        assert auth_client.get("/calendar/year?year=10000").status_code == 400
