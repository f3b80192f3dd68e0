"""
PhonePe business API client.

Requests are signed with the salted ``X-VERIFY`` checksum:

    sha256(base64(payload) + api_path + salt_key) + "###" + salt_index

Server-to-server notifications arrive as ``{"response": <base64 json>}``
and are signed as ``sha256(response + salt_key) + "###" + salt_index``.
"""

import base64
import hashlib
import hmac
import json
import logging
import re
import time

import requests
from django.conf import settings

logger = logging.getLogger(__name__)

PAY_PATH = "/pg/v1/pay"

MERCHANT_TXN_PATTERN = re.compile(r"^ORDER_(?P<order_id>.+?)(?:_(?P<millis>\d+))?$")


class GatewayError(Exception):

    def __init__(self, message, details=None):
        super().__init__(message)
        self.message = message
        self.details = details


class GatewayNotConfigured(GatewayError):
    pass


def encode_payload(payload):
    raw = json.dumps(payload, separators=(",", ":")).encode("utf-8")
    return base64.b64encode(raw).decode("ascii")


def decode_payload(encoded):
    try:
        return json.loads(base64.b64decode(encoded).decode("utf-8"))
    except (ValueError, TypeError) as e:
        raise GatewayError("Malformed gateway payload") from e


def checksum(value, salt_key, salt_index):
    digest = hashlib.sha256(f"{value}{salt_key}".encode("utf-8")).hexdigest()
    return f"{digest}###{salt_index}"


def merchant_transaction_id(order, now=None):
    millis = int((now if now is not None else time.time()) * 1000)
    return f"ORDER_{order.id}_{millis}"


def order_id_from_transaction(merchant_txn):
    match = MERCHANT_TXN_PATTERN.match(merchant_txn or "")
    return match.group("order_id") if match else None


def to_paise(amount):
    return int(amount * 100)


class PhonePeClient:

    def __init__(
        self,
        merchant_id=None,
        salt_key=None,
        salt_index=None,
        endpoint=None,
        timeout=None,
        session=None,
    ):
        self.merchant_id = merchant_id if merchant_id is not None else settings.PHONEPE_MERCHANT_ID
        self.salt_key = salt_key if salt_key is not None else settings.PHONEPE_SALT_KEY
        self.salt_index = salt_index if salt_index is not None else settings.PHONEPE_SALT_INDEX
        self.endpoint = (endpoint or settings.PHONEPE_API_ENDPOINT).rstrip("/")
        self.timeout = timeout or settings.PHONEPE_TIMEOUT_SECONDS
        self.session = session or requests.Session()

    @property
    def configured(self):
        return bool(self.merchant_id and self.salt_key)

    def build_pay_payload(self, order, merchant_txn):
        payload = {
            "merchantId": self.merchant_id,
            "merchantTransactionId": merchant_txn,
            "merchantUserId": f"USER_{order.id}",
            "amount": to_paise(order.total),
            "redirectUrl": f"{settings.PUBLIC_API_URL}/api/payments/gateway/callback/",
            "redirectMode": "POST",
            "callbackUrl": f"{settings.PUBLIC_API_URL}/api/payments/gateway/webhook/",
            "paymentInstrument": {"type": "PAY_PAGE"},
        }

        digits = re.sub(r"\D", "", order.customer_phone or "")
        if digits:
            payload["mobileNumber"] = digits[-10:]

        return payload

    def pay(self, order, merchant_txn):
        """
        Ask the gateway for a hosted pay page. Returns
        ``{"payment_url", "transaction_id"}``.
        """
        if not self.configured:
            raise GatewayNotConfigured("Payment gateway not configured")

        encoded = encode_payload(self.build_pay_payload(order, merchant_txn))
        headers = {
            "Content-Type": "application/json",
            "X-VERIFY": checksum(encoded + PAY_PATH, self.salt_key, self.salt_index),
        }

        try:
            resp = self.session.post(
                f"{self.endpoint}{PAY_PATH}",
                json={"request": encoded},
                headers=headers,
                timeout=self.timeout,
            )
            result = resp.json()
        except requests.RequestException as e:
            logger.error("Gateway request for %s failed: %s", merchant_txn, e)
            raise GatewayError("Payment gateway unreachable") from e
        except ValueError as e:
            raise GatewayError("Invalid response from payment gateway") from e

        data = result.get("data") or {}
        redirect = ((data.get("instrumentResponse") or {}).get("redirectInfo") or {}).get("url")

        if not (result.get("success") and redirect):
            logger.error("Gateway rejected %s: %s", merchant_txn, result)
            raise GatewayError("Payment initiation failed", details=result)

        return {
            "payment_url": redirect,
            "transaction_id": data.get("transactionId"),
        }

    def verify_notification(self, encoded_response, signature):
        if not self.salt_key:
            raise GatewayNotConfigured("Webhook secret not configured")
        expected = checksum(encoded_response, self.salt_key, self.salt_index)
        return hmac.compare_digest(expected, signature or "")
