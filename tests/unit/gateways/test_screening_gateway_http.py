import unittest
from unittest.mock import AsyncMock, MagicMock, patch

import httpx

from customs_ops.infrastructure.circuit_breaker import FAIL_MAX, reset_breakers
from customs_ops.infrastructure.gateways.screening_gateway_http import ScreeningGatewayHTTP


def _response(status_code, body=None, reason_phrase="OK"):
    resp = MagicMock()
    resp.status_code = status_code
    resp.reason_phrase = reason_phrase
    resp.text = ""
    if body is None:
        resp.json.side_effect = ValueError("no json")
    else:
        resp.json.return_value = body
    return resp


class TestScreeningGatewayHTTP(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        reset_breakers()
        self.gateway = ScreeningGatewayHTTP(
            base_url="https://sandbox.test.local/",
            api_key="secret-key",
            environment="sandbox",
            timeout_seconds=5,
        )
        self.request = {"externalId": "EXT-1", "barcode": "BC-1"}

    def tearDown(self):
        reset_breakers()

    def _client(self, mock_client_cls):
        mock_client = AsyncMock()
        mock_client.__aenter__.return_value = mock_client
        mock_client_cls.return_value = mock_client
        return mock_client

    @patch("httpx.AsyncClient")
    async def test_screen_package_success(self, mock_client_cls):
        mock_client = self._client(mock_client_cls)
        mock_client.request.return_value = _response(200, {"packageId": "SP-1", "code": 1})

        result = await self.gateway.screen_package(self.request)

        self.assertTrue(result.success)
        self.assertEqual(result.data["packageId"], "SP-1")
        self.assertEqual(result.http_status, 200)

        args, kwargs = mock_client.request.call_args
        self.assertEqual(args, ("POST", "https://sandbox.test.local/v1/package/screen"))
        self.assertEqual(kwargs["json"], self.request)
        self.assertEqual(kwargs["headers"]["Authorization"], "ApiKey secret-key")
        self.assertEqual(kwargs["headers"]["Content-Type"], "application/json")
        mock_client_cls.assert_called_once_with(timeout=5)

    @patch("httpx.AsyncClient")
    async def test_error_response_keeps_message_and_details(self, mock_client_cls):
        mock_client = self._client(mock_client_cls)
        body = {"message": "Validation failed", "errors": [{"field": "barcode"}]}
        mock_client.request.return_value = _response(422, body, reason_phrase="Unprocessable Entity")

        result = await self.gateway.screen_package(self.request)

        self.assertFalse(result.success)
        self.assertEqual(result.error.code, "422")
        self.assertEqual(result.error.message, "Validation failed")
        self.assertEqual(result.error.details, body)
        self.assertEqual(result.http_status, 422)

    @patch("httpx.AsyncClient")
    async def test_error_response_without_body_uses_reason_phrase(self, mock_client_cls):
        mock_client = self._client(mock_client_cls)
        mock_client.request.return_value = _response(503, None, reason_phrase="Service Unavailable")

        result = await self.gateway.pay_duty({"packageId": "SP-1"})

        self.assertFalse(result.success)
        self.assertEqual(result.error.code, "503")
        self.assertEqual(result.error.message, "Service Unavailable")
        self.assertIsNone(result.error.details)

    @patch("httpx.AsyncClient")
    async def test_timeout(self, mock_client_cls):
        mock_client = self._client(mock_client_cls)
        mock_client.request.side_effect = httpx.ReadTimeout("read timed out")

        result = await self.gateway.screen_package(self.request)

        self.assertFalse(result.success)
        self.assertEqual(result.error.code, "TIMEOUT")
        self.assertIsNone(result.http_status)

    @patch("httpx.AsyncClient")
    async def test_connection_error(self, mock_client_cls):
        mock_client = self._client(mock_client_cls)
        mock_client.request.side_effect = httpx.ConnectError("connection refused")

        result = await self.gateway.screen_package(self.request)

        self.assertFalse(result.success)
        self.assertEqual(result.error.code, "NETWORK_ERROR")
        self.assertEqual(result.error.message, "connection refused")

    @patch("httpx.AsyncClient")
    async def test_verify_and_tracking_payloads(self, mock_client_cls):
        mock_client = self._client(mock_client_cls)
        mock_client.request.return_value = _response(200, {"status": "accepted"})

        await self.gateway.verify_shipment("SH-9")
        args, kwargs = mock_client.request.call_args
        self.assertEqual(args[1], "https://sandbox.test.local/v1/shipment/verify")
        self.assertEqual(kwargs["json"], {"shipmentId": "SH-9"})

        await self.gateway.get_package_tracking("SP-3")
        args, kwargs = mock_client.request.call_args
        self.assertEqual(args[1], "https://sandbox.test.local/v1/package/tracking")
        self.assertEqual(kwargs["json"], {"packageId": "SP-3"})

    @patch("httpx.AsyncClient")
    async def test_platforms_is_a_get(self, mock_client_cls):
        mock_client = self._client(mock_client_cls)
        mock_client.request.return_value = _response(200, [{"id": "amazon", "url": "https://amazon.com"}])

        result = await self.gateway.get_platforms()

        self.assertTrue(result.success)
        args, kwargs = mock_client.request.call_args
        self.assertEqual(args, ("GET", "https://sandbox.test.local/v1/platform"))
        self.assertIsNone(kwargs["json"])

    @patch("httpx.AsyncClient")
    async def test_circuit_opens_after_repeated_transport_failures(self, mock_client_cls):
        mock_client = self._client(mock_client_cls)
        mock_client.request.side_effect = httpx.ConnectError("connection refused")

        for _ in range(FAIL_MAX):
            result = await self.gateway.screen_package(self.request)
            self.assertEqual(result.error.code, "NETWORK_ERROR")

        result = await self.gateway.screen_package(self.request)

        self.assertEqual(result.error.code, "CIRCUIT_OPEN")
        self.assertEqual(mock_client.request.call_count, FAIL_MAX)

    @patch("httpx.AsyncClient")
    async def test_error_responses_do_not_trip_the_circuit(self, mock_client_cls):
        mock_client = self._client(mock_client_cls)
        mock_client.request.return_value = _response(500, {"error": "Internal error"})

        for _ in range(FAIL_MAX + 1):
            result = await self.gateway.screen_package(self.request)

        self.assertEqual(result.error.code, "500")
        self.assertEqual(result.error.message, "Internal error")
