from swimdesk.core.config import settings


def test_health(client):
    response = client.get("/api/v1/health")

    assert response.status_code == 200
    assert response.json() == {
        "status": "healthy",
        "service": settings.app_name,
        "environment": settings.environment,
    }


def test_prometheus_exposes_workflow_metrics(client, class_session, client_headers):
    client.post(f"/api/v1/sessions/{class_session.id}/enroll", headers=client_headers)
    client.post(f"/api/v1/sessions/{class_session.id}/cancel", headers=client_headers)

    response = client.get("/api/v1/metrics/prometheus")

    assert response.status_code == 200
    assert "swimdesk_catch_up_transitions_total" in response.text
    assert "swimdesk_service_operations_total" in response.text


def test_admin_dispatches_outbox(client, class_session, client_headers, admin_headers):
    client.post(f"/api/v1/sessions/{class_session.id}/enroll", headers=client_headers)
    client.post(f"/api/v1/sessions/{class_session.id}/cancel", headers=client_headers)

    first = client.post("/api/v1/notifications/dispatch", headers=admin_headers)
    second = client.post("/api/v1/notifications/dispatch", headers=admin_headers)

    assert first.status_code == 200
    assert len(first.json()["sent"]) == 1
    assert second.json() == {"sent": [], "retried": [], "failed": []}
