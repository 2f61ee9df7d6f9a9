# destitutes/donation.py
# Donation amount selection + Razorpay hosted checkout (payment links).
import hashlib
import hmac
import logging
import re
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional, Sequence

import requests

from .errors import ConfigError, PaymentError, ValidationError

log = logging.getLogger(__name__)

RAZORPAY_API = "https://api.razorpay.com/v1"
DEFAULT_PRESETS = (100, 250, 500, 1000, 2500, 5000)


def parse_amount(value: str) -> int:
    """Leading-integer parse: "250abc" -> 250, "" or junk -> 0."""
    m = re.match(r"\s*([+-]?\d+)", value or "")
    return int(m.group(1)) if m else 0


def format_inr(amount: int) -> str:
    """Indian digit grouping: 100000 -> "₹1,00,000"."""
    sign, digits = ("-", str(-amount)) if amount < 0 else ("", str(amount))
    if len(digits) > 3:
        head, tail = digits[:-3], digits[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        digits = ",".join(groups + [tail])
    return f"{sign}₹{digits}"


class DonationForm:
    def __init__(self, presets: Sequence[int] = DEFAULT_PRESETS, default: int = 500, maximum: int = 100_000):
        self.presets = tuple(presets)
        self.maximum = maximum
        self.selected_amount = default
        self.custom_amount = ""

    def select_preset(self, amount: int) -> None:
        if amount not in self.presets:
            raise ValidationError(f"{format_inr(amount)} is not one of the preset amounts")
        self.selected_amount = amount
        self.custom_amount = ""

    def set_custom(self, value: str) -> None:
        """Over-the-cap values are rejected and the previous amount stays."""
        amount = parse_amount(value)
        if amount > self.maximum:
            raise ValidationError(f"Maximum donation amount is {format_inr(self.maximum)}")
        self.custom_amount = value
        if value:
            self.selected_amount = amount

    @property
    def final_amount(self) -> int:
        return parse_amount(self.custom_amount) if self.custom_amount else self.selected_amount

    def validate(self) -> int:
        amount = self.final_amount
        if amount <= 0:
            raise ValidationError("Please select a valid amount")
        return amount


class PaymentOutcome(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class CheckoutSession:
    id: str
    url: str
    amount: int
    currency: str
    reference_id: str


class RazorpayCheckout:
    """
    Hosted checkout through Razorpay payment links. Links are created with
    the key secret, so every checkout is backed by a server-side order.
    """

    def __init__(self, key_id: Optional[str], key_secret: Optional[str], currency: str = "INR",
                 callback_url: Optional[str] = None, http: Optional[requests.Session] = None,
                 timeout: float = 15.0, merchant_name: str = "Destitutes of India"):
        if not key_id or not key_secret:
            raise ConfigError("Missing required settings: DOI_RAZORPAY_KEY_ID, DOI_RAZORPAY_KEY_SECRET")
        self.key_id = key_id
        self.key_secret = key_secret
        self.currency = currency
        self.callback_url = callback_url
        self.http = http or requests.Session()
        self.timeout = timeout
        self.merchant_name = merchant_name

    def create_session(self, amount: int) -> CheckoutSession:
        reference = f"don_{uuid.uuid4().hex[:16]}"
        payload = {
            "amount": amount * 100,  # paise
            "currency": self.currency,
            "description": "Donation for Community Support",
            "reference_id": reference,
            "notes": {"address": "Community Support Donation", "merchant": self.merchant_name},
        }
        if self.callback_url:
            payload["callback_url"] = self.callback_url
            payload["callback_method"] = "get"

        try:
            r = self.http.post(f"{RAZORPAY_API}/payment_links", json=payload,
                               auth=(self.key_id, self.key_secret), timeout=self.timeout)
        except requests.RequestException as e:
            log.warning("razorpay unreachable: %s", e)
            raise PaymentError("Payment gateway not available", code="NETWORK_ERROR") from e

        try:
            data = r.json()
        except ValueError:
            data = {}
        if r.status_code >= 400 or "error" in data:
            err = data.get("error") or {}
            log.warning("razorpay rejected payment link: %s", err)
            raise PaymentError(err.get("description") or "Payment failed", code=err.get("code"))

        log.info("checkout created id=%s amount=%d", data.get("id"), amount)
        return CheckoutSession(
            id=data["id"],
            url=data["short_url"],
            amount=amount,
            currency=self.currency,
            reference_id=data.get("reference_id", reference),
        )

    def verify_callback(self, params: Mapping[str, str]) -> PaymentOutcome:
        """Map the redirect query string back to an outcome, checking its signature."""
        link_id = params.get("razorpay_payment_link_id")
        status = params.get("razorpay_payment_link_status")
        if not link_id or not status:
            return PaymentOutcome.CANCELLED

        message = "|".join([
            link_id,
            params.get("razorpay_payment_link_reference_id", ""),
            status,
            params.get("razorpay_payment_id", ""),
        ])
        expected = hmac.new(self.key_secret.encode("utf-8"), message.encode("utf-8"), hashlib.sha256).hexdigest()
        if not hmac.compare_digest(expected, params.get("razorpay_signature", "")):
            log.warning("razorpay callback signature mismatch for %s", link_id)
            return PaymentOutcome.FAILED

        if status == "paid":
            return PaymentOutcome.SUCCESS
        if status in ("cancelled", "expired"):
            return PaymentOutcome.CANCELLED
        return PaymentOutcome.FAILED
