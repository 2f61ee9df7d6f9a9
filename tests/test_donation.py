# tests/test_donation.py
import hashlib
import hmac
import unittest

import requests

from destitutes.donation import (
    DonationForm,
    PaymentOutcome,
    RazorpayCheckout,
    format_inr,
    parse_amount,
)
from destitutes.errors import ConfigError, PaymentError, ValidationError

from tests.fakes import FakeHTTP, FakeResponse

SECRET = "rzp_test_secret"


def signed(link_id="plink_1", reference="don_1", status="paid", payment_id="pay_1", secret=SECRET):
    message = f"{link_id}|{reference}|{status}|{payment_id}"
    return {
        "razorpay_payment_link_id": link_id,
        "razorpay_payment_link_reference_id": reference,
        "razorpay_payment_link_status": status,
        "razorpay_payment_id": payment_id,
        "razorpay_signature": hmac.new(secret.encode(), message.encode(), hashlib.sha256).hexdigest(),
    }


class TestAmounts(unittest.TestCase):
    def test_parse_amount(self):
        self.assertEqual(parse_amount(""), 0)
        self.assertEqual(parse_amount("abc"), 0)
        self.assertEqual(parse_amount("250"), 250)
        self.assertEqual(parse_amount(" 250rs"), 250)
        self.assertEqual(parse_amount("-5"), -5)

    def test_format_inr(self):
        self.assertEqual(format_inr(500), "₹500")
        self.assertEqual(format_inr(2500), "₹2,500")
        self.assertEqual(format_inr(100000), "₹1,00,000")
        self.assertEqual(format_inr(12345678), "₹1,23,45,678")


class TestDonationForm(unittest.TestCase):
    def setUp(self):
        self.form = DonationForm()

    def test_default(self):
        self.assertEqual(self.form.final_amount, 500)

    def test_over_cap_keeps_previous_amount(self):
        self.form.set_custom("750")
        with self.assertRaises(ValidationError) as cm:
            self.form.set_custom("100001")
        self.assertEqual(str(cm.exception), "Maximum donation amount is ₹1,00,000")
        self.assertEqual(self.form.final_amount, 750)

    def test_cap_itself_allowed(self):
        self.form.set_custom("100000")
        self.assertEqual(self.form.validate(), 100000)

    def test_preset_clears_custom(self):
        self.form.set_custom("750")
        self.form.select_preset(2500)
        self.assertEqual(self.form.custom_amount, "")
        self.assertEqual(self.form.final_amount, 2500)

    def test_unknown_preset(self):
        with self.assertRaises(ValidationError):
            self.form.select_preset(42)

    def test_invalid_final_amount(self):
        for value in ("0", "abc", "-20"):
            with self.subTest(value=value):
                self.form.set_custom(value)
                with self.assertRaises(ValidationError) as cm:
                    self.form.validate()
                self.assertEqual(str(cm.exception), "Please select a valid amount")


class TestRazorpayCheckout(unittest.TestCase):
    def make(self, http=None):
        return RazorpayCheckout("rzp_test_key", SECRET, callback_url="http://localhost:8501/donate", http=http or FakeHTTP())

    def test_requires_keys(self):
        with self.assertRaises(ConfigError):
            RazorpayCheckout("rzp_test_key", None)

    def test_create_session(self):
        http = FakeHTTP(FakeResponse(200, {"id": "plink_1", "short_url": "https://rzp.io/i/abc", "reference_id": "don_x"}))
        session = self.make(http).create_session(500)
        self.assertEqual((session.id, session.url, session.amount, session.currency), ("plink_1", "https://rzp.io/i/abc", 500, "INR"))

        request = http.requests[0]
        self.assertEqual(request["url"], "https://api.razorpay.com/v1/payment_links")
        self.assertEqual(request["auth"], ("rzp_test_key", SECRET))
        self.assertEqual(request["json"]["amount"], 50000)
        self.assertEqual(request["json"]["currency"], "INR")
        self.assertEqual(request["json"]["description"], "Donation for Community Support")
        self.assertEqual(request["json"]["callback_url"], "http://localhost:8501/donate")

    def test_gateway_rejection(self):
        http = FakeHTTP(FakeResponse(400, {"error": {"code": "BAD_REQUEST_ERROR", "description": "amount too low"}}))
        with self.assertRaises(PaymentError) as cm:
            self.make(http).create_session(1)
        self.assertEqual(cm.exception.code, "BAD_REQUEST_ERROR")
        self.assertEqual(str(cm.exception), "amount too low")

    def test_gateway_unreachable(self):
        http = FakeHTTP(error=requests.ConnectionError("no route"))
        with self.assertRaises(PaymentError) as cm:
            self.make(http).create_session(500)
        self.assertEqual(cm.exception.code, "NETWORK_ERROR")

    def test_verify_callback(self):
        checkout = self.make()
        self.assertIs(checkout.verify_callback(signed()), PaymentOutcome.SUCCESS)
        self.assertIs(checkout.verify_callback(signed(status="cancelled")), PaymentOutcome.CANCELLED)
        self.assertIs(checkout.verify_callback(signed(status="expired")), PaymentOutcome.CANCELLED)
        self.assertIs(checkout.verify_callback(signed(status="partially_paid")), PaymentOutcome.FAILED)
        self.assertIs(checkout.verify_callback(signed(secret="wrong")), PaymentOutcome.FAILED)
        self.assertIs(checkout.verify_callback({}), PaymentOutcome.CANCELLED)


if __name__ == "__main__":
    unittest.main()
