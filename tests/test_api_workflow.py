from models.audit_log import AuditLog

SIGNATURE = "data:image/png;base64,iVBORw0KGgo="


def test_health_endpoints(client):
    assert client.get("/health").json()["status"] == "healthy"
    assert client.get("/api/health").json()["status"] == "operational"


def test_loader_workflow_end_to_end(client_for, project, db_session):
    client = client_for("LOADER")
    code = project.code

    staged = client.post(f"/api/loader/inventory/{code}/skids", json={"width": 4, "length": 4})
    assert staged.status_code == 200
    inv_skid_id = staged.json()["id"]
    assert staged.json()["weight"] == 320.0

    inventory = client.get(f"/api/loader/inventory/{code}").json()
    assert inventory["skid_count"] == 1

    start = client.post(f"/api/loader/truck/{code}/start")
    assert start.status_code == 200
    load_id = start.json()["load_id"]

    truck_info = client.put(
        f"/api/loader/truck/{code}/loads/{load_id}/truck-info",
        json={"truck_id": "TRK-1", "length": 53, "width": 8.5, "weight_capacity": 48000},
    )
    assert truck_info.status_code == 200
    assert truck_info.json()["truck_id"] == "TRK-1"

    pulled = client.post(
        f"/api/loader/truck/{code}/loads/{load_id}/pull-from-inventory",
        json={"skid_ids": [inv_skid_id]},
    )
    assert pulled.status_code == 200
    assert pulled.json()["added"] == 1
    assert pulled.json()["total_weight"] == 320.0

    view = client.get(f"/api/loader/truck/{code}/loads/{load_id}").json()
    assert view["inventories"][0]["skids"][0]["already_on_truck"] is True
    assert view["space_utilization"]["formatted_percentage"] == "3.6%"

    signed = client.put(
        f"/api/loader/truck/{code}/loads/{load_id}/packing-list",
        json={"carrier": "Acme", "signature": SIGNATURE},
    )
    assert signed.status_code == 200
    assert signed.json()["status"] == "Loaded"

    summary = client.get(f"/api/loader/truck/{code}/loads/{load_id}/summary").json()
    assert summary["formatted_total_weight"] == "320.00 lbs"
    assert summary["project_name"] == project.name

    assert db_session.query(AuditLog).filter(AuditLog.action == "load.pulled_from_inventory").count() == 1


def test_typed_errors_map_to_http_statuses(client, project):
    code = project.code
    assert client.get("/api/loader/inventory/NOPE").status_code == 404

    load_id = client.post(f"/api/loader/truck/{code}/start").json()["load_id"]
    bad_skid = client.post(f"/api/loader/truck/{code}/loads/{load_id}/skids", json={"width": 0, "length": 4, "weight": 1})
    assert bad_skid.status_code == 422

    assert client.get(f"/api/loader/truck/{code}/loads/not-a-uuid").status_code == 422

    client.put(f"/api/loads/{load_id}/status", json={"status": "Delivered"})
    blocked = client.post(f"/api/loader/truck/{code}/loads/{load_id}/skids", json={"width": 1, "length": 1})
    assert blocked.status_code == 409

    refused = client.delete(f"/api/projects/{code}")
    assert refused.status_code == 409
    assert "associated load(s)" in refused.json()["detail"]


def test_viewer_cannot_stage_inventory(client_for, project):
    viewer = client_for("VIEWER")
    response = viewer.post(f"/api/loader/inventory/{project.code}/skids", json={"width": 1, "length": 1})
    assert response.status_code == 403
    assert viewer.get("/api/loads/").status_code == 200


def test_loader_cannot_manage_projects_or_override_status(client_for, project):
    loader = client_for("LOADER")
    assert loader.post("/api/projects/", json={"code": "X-1", "name": "X"}).status_code == 403
    load_id = loader.post(f"/api/loader/truck/{project.code}/start").json()["load_id"]
    assert loader.put(f"/api/loads/{load_id}/status", json={"status": "Delivered"}).status_code == 403


def test_admin_load_management(client, project):
    created = client.post(
        "/api/loads/",
        json={"project_code": project.code, "truck_id": "TRK-9", "length": 40, "width": 8, "weight_capacity": 30000},
    )
    assert created.status_code == 200
    load_id = created.json()["id"]

    listing = client.get("/api/loads/", params={"project_code": project.code}).json()
    assert listing["total"] == 1
    assert client.get("/api/loads/count", params={"project_code": project.code}).json()["count"] == 1

    detail = client.get(f"/api/loads/{load_id}").json()
    assert detail["load"]["truck_id"] == "TRK-9"
    assert detail["is_overweight"] is False

    assert client.delete(f"/api/loads/{load_id}").status_code == 200
    assert client.get(f"/api/loads/{load_id}").status_code == 404


def test_delivered_load_cannot_be_deleted(client, project):
    load_id = client.post(f"/api/loader/truck/{project.code}/start").json()["load_id"]
    client.put(f"/api/loads/{load_id}/status", json={"status": "Delivered"})
    assert client.delete(f"/api/loads/{load_id}").status_code == 409


def test_me_reports_capabilities(client_for):
    profile = client_for("VIEWER").get("/auth/me").json()
    assert profile["role"] == "VIEWER"
    assert sorted(profile["capabilities"]) == ["view_loads", "view_projects"]


def test_audit_log_listing(client, project):
    load_id = client.post(f"/api/loader/truck/{project.code}/start").json()["load_id"]
    logs = client.get("/api/admin/audit/logs", params={"load_id": load_id}).json()
    assert logs["total"] == 1
    assert logs["logs"][0]["action"] == "load.created"
    assert logs["logs"][0]["project_code"] == project.code


def test_admin_edits_a_load(client_for, project):
    client = client_for("ADMIN")
    load_id = client.post(
        "/api/loads/",
        json={"project_code": project.code, "truck_id": "TRK-9", "length": 40, "width": 8, "weight_capacity": 30000},
    ).json()["id"]
    edit = {"project_code": project.code, "truck_id": "TRK-10", "length": 48, "width": 8.5, "weight_capacity": 40000}

    updated = client.put(
        f"/api/loads/{load_id}",
        json={**edit, "skids": [{"width": 4, "length": 4}, {"width": 2, "length": 2, "weight": 100}]},
    )
    assert updated.status_code == 200
    assert updated.json()["truck_id"] == "TRK-10"
    assert updated.json()["skid_count"] == 2
    assert updated.json()["total_weight"] == 420.0

    assert client.put(f"/api/loads/{load_id}", json={**edit, "weight_capacity": 999}).status_code == 422
    assert client.put(f"/api/loads/{load_id}", json={**edit, "project_code": "NOPE"}).status_code == 404
    rejected = client.put(
        f"/api/loads/{load_id}",
        json={**edit, "truck_id": "TRK-11", "skids": [{"width": 0, "length": 4, "weight": 10}]},
    )
    assert rejected.status_code == 422
    detail = client.get(f"/api/loads/{load_id}").json()["load"]
    assert (detail["truck_id"], detail["skid_count"]) == ("TRK-10", 2)
    assert client_for("LOADER").put(f"/api/loads/{load_id}", json=edit).status_code == 403

    client = client_for("ADMIN")
    client.put(f"/api/loads/{load_id}/status", json={"status": "Delivered"})
    assert client.put(f"/api/loads/{load_id}", json=edit).status_code == 409


def test_loader_dashboard(client_for, project):
    loader = client_for("LOADER")
    loader.post(f"/api/loader/truck/{project.code}/start")

    viewer = client_for("VIEWER")
    recent = viewer.get("/api/loader/recent-projects")
    assert recent.status_code == 200
    assert [item["code"] for item in recent.json()] == [project.code]

    stats = viewer.get("/api/loader/stats")
    assert stats.status_code == 200
    assert stats.json()["planned_loads"] == 1
