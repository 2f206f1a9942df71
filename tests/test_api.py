import unittest
from unittest.mock import patch

from fastapi.testclient import TestClient

from app.errors import GatewayError
from app.main import create_app
from app.services.verification_service import compute_signature
from tests.fake_gateway import TEST_SECRET, FakeGateway, gateway_down, make_settings

ORDER_ID = "order_Test123"
PAYMENT_ID = "pay_Test456"


def valid_signature():
    return compute_signature(ORDER_ID, PAYMENT_ID, TEST_SECRET.encode())


class ApiTestCase(unittest.TestCase):
    settings_overrides = {}

    def setUp(self):
        self.gateway = self.make_gateway()
        self.app = create_app(make_settings(**self.settings_overrides), gateway=self.gateway)
        self.client = TestClient(self.app, raise_server_exceptions=False)

    def make_gateway(self):
        return FakeGateway()


class TestHealth(ApiTestCase):
    def test_root(self):
        res = self.client.get("/")
        self.assertEqual(res.status_code, 200)
        body = res.json()
        self.assertEqual(body["status"], "healthy")
        self.assertEqual(body["message"], "Razorpay API is running")
        self.assertIn("timestamp", body)

    def test_request_id_header(self):
        res = self.client.get("/", headers={"X-Request-ID": "req-42"})
        self.assertEqual(res.headers["X-Request-ID"], "req-42")
        self.assertTrue(self.client.get("/").headers["X-Request-ID"])

    def test_unsafe_request_id_replaced(self):
        res = self.client.get("/", headers={"X-Request-ID": "x" * 200})
        self.assertNotEqual(res.headers["X-Request-ID"], "x" * 200)
        self.assertEqual(len(res.headers["X-Request-ID"]), 36)

    def test_unknown_route(self):
        res = self.client.get("/api/nope")
        self.assertEqual(res.status_code, 404)
        self.assertEqual(res.json(), {"error": "Endpoint not found"})

    def test_wrong_method(self):
        res = self.client.get("/api/create-payment-order")
        self.assertEqual(res.status_code, 404)
        self.assertEqual(res.json(), {"error": "Endpoint not found"})

    def test_cors_preflight(self):
        res = self.client.options(
            "/api/create-payment-order",
            headers={"Origin": "https://shop.example", "Access-Control-Request-Method": "POST"},
        )
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.headers["access-control-max-age"], "86400")


class TestCreatePaymentOrder(ApiTestCase):
    def test_create_order(self):
        res = self.client.post("/api/create-payment-order", json={"amount": 500, "currency": "INR", "receipt": "r_1"})
        self.assertEqual(res.status_code, 200)
        body = res.json()
        self.assertTrue(body["success"])
        self.assertEqual(body["order"], {
            "id": "order_Test123",
            "currency": "INR",
            "amount": 50000,
            "receipt": "r_1",
            "created_at": 1700000000,
        })
        self.assertEqual(self.gateway.orders[0]["amount"], 50000)
        self.assertEqual(self.gateway.orders[0]["notes"]["environment"], "test")

    def test_rounding_and_defaults(self):
        res = self.client.post("/api/create-payment-order", json={"amount": 1.005})
        self.assertEqual(res.status_code, 200)
        order = res.json()["order"]
        self.assertEqual(order["amount"], 101)
        self.assertEqual(order["currency"], "INR")
        self.assertTrue(order["receipt"].startswith("receipt_"))

    def test_numeric_string_amount(self):
        res = self.client.post("/api/create-payment-order", json={"amount": "99.99"})
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json()["order"]["amount"], 9999)

    def test_invalid_amounts(self):
        for amount in (0, -5, "abc", None, True):
            with self.subTest(amount=amount):
                res = self.client.post("/api/create-payment-order", json={"amount": amount})
                self.assertEqual(res.status_code, 400)
                self.assertEqual(res.json(), {
                    "success": False,
                    "error": "Invalid amount. Please provide a positive number.",
                })
        self.assertEqual(self.gateway.orders, [])

    def test_nan_amount(self):
        res = self.client.post(
            "/api/create-payment-order",
            content=b'{"amount": NaN}',
            headers={"Content-Type": "application/json"},
        )
        self.assertEqual(res.status_code, 400)
        self.assertEqual(self.gateway.orders, [])

    def test_missing_body(self):
        res = self.client.post("/api/create-payment-order")
        self.assertEqual(res.status_code, 400)
        self.assertFalse(res.json()["success"])

    def test_malformed_json(self):
        res = self.client.post(
            "/api/create-payment-order",
            content=b'{"amount": ',
            headers={"Content-Type": "application/json"},
        )
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.json(), {"success": False, "error": "Invalid request body"})

    def test_amount_exponent_overflow(self):
        res = self.client.post("/api/create-payment-order", json={"amount": "1e999999"})
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.json(), {
            "success": False,
            "error": "Invalid amount. Please provide a positive number.",
        })
        self.assertEqual(self.gateway.orders, [])

    def test_form_encoded_body(self):
        res = self.client.post("/api/create-payment-order", data={"amount": "500", "currency": "inr", "receipt": "r_form"})
        self.assertEqual(res.status_code, 200)
        order = res.json()["order"]
        self.assertEqual(order["amount"], 50000)
        self.assertEqual(order["currency"], "INR")
        self.assertEqual(order["receipt"], "r_form")

    def test_json_array_body(self):
        res = self.client.post("/api/create-payment-order", json=[500])
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.json(), {"success": False, "error": "Invalid request body"})

    def test_invalid_currency(self):
        res = self.client.post("/api/create-payment-order", json={"amount": 10, "currency": "RUPEES"})
        self.assertEqual(res.status_code, 400)
        self.assertFalse(res.json()["success"])
        self.assertEqual(self.gateway.orders, [])


class TestCreatePaymentOrderGatewayDown(ApiTestCase):
    def make_gateway(self):
        return gateway_down()

    def test_gateway_failure_is_500(self):
        res = self.client.post("/api/create-payment-order", json={"amount": 10})
        self.assertEqual(res.status_code, 500)
        self.assertEqual(res.json(), {
            "success": False,
            "error": "Failed to create payment order",
            "message": "Authentication failed",
        })


class TestCreatePaymentOrderMalformedGatewayResponse(ApiTestCase):
    def make_gateway(self):
        gateway = FakeGateway()

        async def malformed(payload):
            return {"id": "order_1", "amount": None, "currency": "INR", "receipt": None}

        gateway.create_order = malformed
        return gateway

    def test_mapped_to_gateway_failure(self):
        res = self.client.post("/api/create-payment-order", json={"amount": 10})
        self.assertEqual(res.status_code, 500)
        self.assertEqual(res.json(), {
            "success": False,
            "error": "Failed to create payment order",
            "message": "Invalid order response",
        })


class TestUnexpectedFailure(ApiTestCase):
    def make_gateway(self):
        return FakeGateway(order_error=RuntimeError("boom " + TEST_SECRET))

    def test_generic_500(self):
        res = self.client.post("/api/create-payment-order", json={"amount": 10})
        self.assertEqual(res.status_code, 500)
        self.assertEqual(res.json(), {"success": False, "error": "Something broke!"})
        self.assertNotIn(TEST_SECRET, res.text)

    def test_500_carries_request_id_and_logs_once(self):
        with patch("app.middleware.logger") as log:
            res = self.client.post("/api/create-payment-order", json={"amount": 10}, headers={"X-Request-ID": "req-500"})
        self.assertEqual(res.status_code, 500)
        self.assertEqual(res.headers["X-Request-ID"], "req-500")
        log.error.assert_called_once()
        self.assertEqual(log.error.call_args.args[0], "request_failed")


class TestVerifyPayment(ApiTestCase):
    def verify(self, **overrides):
        body = {"order_id": ORDER_ID, "payment_id": PAYMENT_ID, "signature": valid_signature()}
        body.update(overrides)
        return self.client.post("/api/verify-payment", json=body)

    def test_valid_signature(self):
        res = self.verify()
        self.assertEqual(res.status_code, 200)
        body = res.json()
        self.assertTrue(body["success"])
        self.assertEqual(body["message"], "Payment verified successfully")
        self.assertEqual(body["paymentDetails"], {
            "id": PAYMENT_ID,
            "amount": 50000,
            "currency": "INR",
            "status": "captured",
            "method": "upi",
        })
        self.assertNotIn("detailsUnavailable", body)

    def test_tampered_signature(self):
        signature = valid_signature()
        tampered = ("a" if signature[0] != "a" else "b") + signature[1:]
        res = self.verify(signature=tampered)
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.json(), {"success": False, "error": "Invalid payment signature"})
        self.assertEqual(self.gateway.payment_lookups, [])

    def test_missing_parameters(self):
        for field in ("order_id", "payment_id", "signature"):
            with self.subTest(field=field):
                res = self.verify(**{field: ""})
                self.assertEqual(res.status_code, 400)
                self.assertEqual(res.json(), {"success": False, "error": "Missing required parameters"})

    def test_missing_body(self):
        res = self.client.post("/api/verify-payment")
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.json()["error"], "Missing required parameters")

    def test_lone_surrogate_signature_is_mismatch(self):
        body = (
            '{"order_id": "' + ORDER_ID + '", "payment_id": "' + PAYMENT_ID + '", '
            '"signature": "\\ud800abc"}'
        ).encode()
        res = self.client.post("/api/verify-payment", content=body, headers={"Content-Type": "application/json"})
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.json(), {"success": False, "error": "Invalid payment signature"})

    def test_form_encoded_body(self):
        res = self.client.post("/api/verify-payment", data={
            "order_id": ORDER_ID, "payment_id": PAYMENT_ID, "signature": valid_signature(),
        })
        self.assertEqual(res.status_code, 200)
        self.assertTrue(res.json()["success"])

    def test_form_encoded_blank_signature(self):
        res = self.client.post("/api/verify-payment", data={
            "order_id": ORDER_ID, "payment_id": PAYMENT_ID, "signature": "",
        })
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.json()["error"], "Missing required parameters")

    def test_non_string_field(self):
        res = self.verify(order_id=12345)
        self.assertEqual(res.status_code, 400)
        self.assertFalse(res.json()["success"])


class TestVerifyPaymentDetailsUnavailable(ApiTestCase):
    def make_gateway(self):
        return FakeGateway(payment_error=GatewayError("Payment gateway unavailable"))

    def test_degraded_response(self):
        res = self.client.post("/api/verify-payment", json={
            "order_id": ORDER_ID, "payment_id": PAYMENT_ID, "signature": valid_signature(),
        })
        self.assertEqual(res.status_code, 200)
        body = res.json()
        self.assertTrue(body["success"])
        self.assertTrue(body["detailsUnavailable"])
        self.assertNotIn("paymentDetails", body)


class TestVerifyPaymentWithoutEnrichment(ApiTestCase):
    settings_overrides = {"FETCH_PAYMENT_DETAILS": False}

    def test_plain_success(self):
        res = self.client.post("/api/verify-payment", json={
            "order_id": ORDER_ID, "payment_id": PAYMENT_ID, "signature": valid_signature(),
        })
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json(), {"success": True, "message": "Payment verified successfully"})
        self.assertEqual(self.gateway.payment_lookups, [])


class TestLifespan(unittest.TestCase):
    def test_gateway_closed_on_shutdown(self):
        gateway = FakeGateway()
        app = create_app(make_settings(), gateway=gateway)
        with TestClient(app) as client:
            self.assertEqual(client.get("/").status_code, 200)
            self.assertFalse(gateway.closed)
        self.assertTrue(gateway.closed)


if __name__ == "__main__":
    unittest.main()
