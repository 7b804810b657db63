import asyncio

from fastapi.testclient import TestClient

from customs_ops.application.failure_log import FailureLog
from customs_ops.application.interfaces.screening_gateway import ProviderResult
from customs_ops.domain.value_objects.provider_endpoint import ProviderEndpoint
from customs_ops.main import app
from tests.factories import OTHER_USER_ID, USER_ID, screening_row

UNAVAILABLE = ProviderResult.failed("503", "Service unavailable", http_status=503)


def _seed(app_bundle, external_id="EXT-1", endpoint=ProviderEndpoint.PACKAGE_SCREEN, **kwargs) -> int:
    failure_log = FailureLog(app_bundle["failure_repo"], app_bundle["clock"])
    record = asyncio.run(
        failure_log.record(
            user_id=kwargs.pop("user_id", USER_ID),
            endpoint=endpoint.value,
            environment="sandbox",
            request_body=screening_row(external_id),
            result=UNAVAILABLE,
            external_id=external_id,
            **kwargs,
        )
    )
    return record.id


def test_user_header_is_required(app_bundle):
    with TestClient(app) as anonymous:
        res = anonymous.get("/api/v1/failures")
    assert res.status_code == 422

    with TestClient(app, headers={"X-User-Id": ""}) as blank:
        res = blank.get("/api/v1/failures")
    assert res.status_code == 400


def test_list_and_get_failures(client, app_bundle):
    first = _seed(app_bundle, "EXT-1", upload_id=5)
    _seed(app_bundle, "EXT-2")
    _seed(app_bundle, "EXT-3", user_id=OTHER_USER_ID)

    res = client.get("/api/v1/failures")
    assert res.status_code == 200
    body = res.json()
    assert body["total"] == 2
    assert body["limit"] == 50
    assert {f["external_id"] for f in body["failures"]} == {"EXT-1", "EXT-2"}

    res = client.get("/api/v1/failures", params={"upload_id": 5, "status": "pending"})
    assert [f["id"] for f in res.json()["failures"]] == [first]

    res = client.get(f"/api/v1/failures/{first}")
    assert res.status_code == 200
    data = res.json()
    assert data["retry_status"] == "pending"
    assert data["error_message"] == "Service unavailable"
    assert data["request_body"]["externalId"] == "EXT-1"


def test_unknown_status_filter_is_rejected(client):
    res = client.get("/api/v1/failures", params={"status": "bogus"})
    assert res.status_code == 422


def test_failure_of_another_user_is_not_found(client, app_bundle):
    other = _seed(app_bundle, user_id=OTHER_USER_ID)

    res = client.get(f"/api/v1/failures/{other}")

    assert res.status_code == 404
    assert res.json()["code"] == "FAILURE_NOT_FOUND"


def test_stats(client, app_bundle):
    _seed(app_bundle, "EXT-1")
    _seed(app_bundle, "EXT-2", endpoint=ProviderEndpoint.DUTY_PAY, max_retries=1)

    res = client.get("/api/v1/failures/stats")

    assert res.status_code == 200
    stats = res.json()
    assert stats["total"] == 2
    assert stats["pending"] == 2
    assert stats["resolved"] == 0


def test_retry_success_returns_package(client, app_bundle):
    failure_id = _seed(app_bundle, "EXT-1")

    res = client.post(f"/api/v1/failures/{failure_id}/retry")

    assert res.status_code == 200
    body = res.json()
    assert body["success"] is True
    assert body["retry_status"] == "success"
    assert body["retry_count"] == 1
    assert body["error"] is None
    assert body["package"]["external_id"] == "EXT-1"
    assert body["package"]["status"] == "accepted"

    again = client.post(f"/api/v1/failures/{failure_id}/retry")
    assert again.status_code == 400
    assert again.json()["code"] == "FAILURE_ALREADY_RESOLVED"


def test_retry_failure_reports_next_attempt(client, app_bundle, app_gateway):
    failure_id = _seed(app_bundle, "EXT-1")
    app_gateway.queue("screen_package", UNAVAILABLE)

    res = client.post(f"/api/v1/failures/{failure_id}/retry")

    assert res.status_code == 200
    body = res.json()
    assert body["success"] is False
    assert body["retry_status"] == "pending"
    assert body["error"] == "Service unavailable"
    assert body["next_retry_at"] is not None


def test_retry_unknown_failure(client):
    res = client.post("/api/v1/failures/999/retry")
    assert res.status_code == 404


def test_retry_with_spent_budget_is_bad_request(client, app_bundle, app_gateway):
    failure_id = _seed(app_bundle, "EXT-1", max_retries=0)

    res = client.post(f"/api/v1/failures/{failure_id}/retry")

    assert res.status_code == 400
    body = res.json()
    assert body["success"] is False
    assert body["message"] == "Maximum retry attempts reached"
    assert body["retry_status"] == "exhausted"
    assert app_gateway.calls_to("screen_package") == []
    assert client.get(f"/api/v1/failures/{failure_id}").json()["retry_status"] == "exhausted"


def test_retry_of_duty_payment_is_bad_request(client, app_bundle, app_gateway):
    failure_id = _seed(app_bundle, "EXT-1", endpoint=ProviderEndpoint.DUTY_PAY, max_retries=1)

    res = client.post(f"/api/v1/failures/{failure_id}/retry")

    assert res.status_code == 400
    body = res.json()
    assert body["message"] == "Unsupported endpoint for automatic retry"
    assert body["retry_status"] == "manual_required"
    assert app_gateway.calls_to("pay_duty") == []
    assert client.get(f"/api/v1/failures/{failure_id}").json()["retry_status"] == "manual_required"


def test_batch_retry(client, app_bundle, app_gateway):
    ok = _seed(app_bundle, "EXT-1", upload_id=9)
    bad = _seed(app_bundle, "EXT-2", upload_id=9)
    app_gateway.queue("screen_package", ProviderResult.ok({"code": 1, "packageId": "SP-OK"}), UNAVAILABLE)

    res = client.post("/api/v1/failures/batch-retry", json={"upload_id": 9})

    assert res.status_code == 200
    body = res.json()
    assert body["summary"] == {"total": 2, "successful": 1, "failed": 1}
    assert {item["failure_id"] for item in body["results"]} == {ok, bad}


def test_batch_retry_requires_ids_or_upload(client):
    res = client.post("/api/v1/failures/batch-retry", json={})
    assert res.status_code == 422


def test_batch_retry_with_nothing_eligible(client):
    res = client.post("/api/v1/failures/batch-retry", json={"failure_ids": [404]})

    assert res.status_code == 200
    assert res.json()["message"] == "No failures to retry"
    assert res.json()["summary"]["total"] == 0


def test_resolve_failure(client, app_bundle):
    failure_id = _seed(app_bundle, endpoint=ProviderEndpoint.DUTY_PAY)

    res = client.post(f"/api/v1/failures/{failure_id}/resolve", json={"notes": "Paid by phone"})

    assert res.status_code == 200
    body = res.json()
    assert body["retry_status"] == "manual_required"
    assert body["resolved_by"] == USER_ID
    assert body["resolution_notes"] == "Paid by phone"

    entries = app_bundle["audit_log_repo"].entries
    assert entries[-1].action.value == "failure_resolved"


def test_resolve_without_body(client, app_bundle):
    failure_id = _seed(app_bundle)

    res = client.post(f"/api/v1/failures/{failure_id}/resolve")

    assert res.status_code == 200
    assert res.json()["resolution_notes"]
