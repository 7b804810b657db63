import asyncio
import base64

from customs_ops.application.interfaces.screening_gateway import ProviderResult
from customs_ops.domain.entities.shipment import Shipment
from tests.factories import USER_ID, screening_row


def _accepted_package_ids(client, count=2) -> list[int]:
    rows = [screening_row(f"EXT-{n}") for n in range(1, count + 1)]
    upload = client.post("/api/v1/uploads", json={"filename": "manifest.csv", "rows": rows}).json()
    client.post(f"/api/v1/uploads/{upload['id']}/process")
    packages = client.get("/api/v1/packages", params={"upload_id": upload["id"]}).json()["packages"]
    return [p["id"] for p in packages]


def _register_payload(package_ids) -> dict:
    return {
        "external_id": "SHIP-1",
        "master_bill": {"prefix": "123", "serialNumber": "45678901"},
        "shipper": {"name": "Shenzhen Widgets"},
        "consignee": {"name": "Austin Imports"},
        "transportation": {"mode": "air", "carrier": "XX"},
        "package_ids": package_ids,
    }


def _register(client) -> dict:
    res = client.post("/api/v1/shipments", json=_register_payload(_accepted_package_ids(client)))
    assert res.status_code == 201, res.json()
    return res.json()["shipment"]


def test_register_shipment(client, app_gateway):
    package_ids = _accepted_package_ids(client)

    res = client.post("/api/v1/shipments", json=_register_payload(package_ids))

    assert res.status_code == 201
    shipment = res.json()["shipment"]
    assert shipment["status"] == "registered"
    assert shipment["master_bill_number"] == "123-45678901"
    assert shipment["provider_shipment_id"].startswith("SH-")

    [request] = app_gateway.calls_to("register_shipment")
    assert request["masterBill"] == {"prefix": "123", "serialNumber": "45678901"}

    detail = client.get(f"/api/v1/shipments/{shipment['id']}").json()
    assert sorted(p["id"] for p in detail["packages"]) == sorted(package_ids)


def test_register_failure_is_bad_gateway(client, app_gateway):
    package_ids = _accepted_package_ids(client, count=1)
    app_gateway.queue("register_shipment", ProviderResult.failed("500", "Upstream error", http_status=500))

    res = client.post("/api/v1/shipments", json=_register_payload(package_ids))

    assert res.status_code == 502
    body = res.json()
    assert body["success"] is False
    assert body["failure_id"] is not None


def test_register_requires_known_packages(client):
    res = client.post("/api/v1/shipments", json=_register_payload([999]))
    assert res.status_code == 404


def test_list_shipments(client):
    _register(client)

    res = client.get("/api/v1/shipments", params={"page": 1, "page_size": 10})

    assert res.status_code == 200
    body = res.json()
    assert body["total"] == 1
    assert body["page_size"] == 10


def test_verify_and_download_document(client):
    shipment = _register(client)

    res = client.post(f"/api/v1/shipments/{shipment['id']}/verify")

    assert res.status_code == 200
    assert res.json()["shipment"]["status"] == "verified"

    doc = client.get(f"/api/v1/shipments/{shipment['id']}/document")
    assert doc.status_code == 200
    assert doc.headers["content-type"] == "image/png"
    assert doc.headers["content-disposition"] == 'attachment; filename="cbp-document-SHIP-1.png"'
    assert doc.content == base64.b64decode("iVBORw0KGgo=")


def test_verify_failure_is_bad_gateway(client, app_gateway):
    shipment = _register(client)
    app_gateway.queue("verify_shipment", ProviderResult.failed("503", "Service unavailable", http_status=503))

    res = client.post(f"/api/v1/shipments/{shipment['id']}/verify")

    assert res.status_code == 502
    assert res.json()["success"] is False


def test_document_missing_before_verification(client):
    shipment = _register(client)

    res = client.get(f"/api/v1/shipments/{shipment['id']}/document")

    assert res.status_code == 404
    assert res.json()["code"] == "DOCUMENT_NOT_FOUND"


def test_shipment_tracking(client):
    shipment = _register(client)

    res = client.get(f"/api/v1/shipments/{shipment['id']}/tracking")

    assert res.status_code == 200
    assert res.json()["provider_id"] == shipment["provider_shipment_id"]


def test_delete_only_pending_shipments(client, app_bundle):
    registered = _register(client)
    res = client.delete(f"/api/v1/shipments/{registered['id']}")
    assert res.status_code == 400

    pending = asyncio.run(
        app_bundle["shipment_repo"].add(
            Shipment(user_id=USER_ID, external_id="SHIP-2", master_bill_prefix="123", master_bill_serial="45678902")
        )
    )
    res = client.delete(f"/api/v1/shipments/{pending.id}")
    assert res.status_code == 204
    assert client.get(f"/api/v1/shipments/{pending.id}").status_code == 404
