import os
from decimal import Decimal
from typing import Any, Dict, Generator, List, Optional
from urllib.parse import parse_qsl, urlencode

import httpx
import pytest
from fastapi.testclient import TestClient

# Pas de Redis ni de Supabase pendant les tests
os.environ.setdefault("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS", "1")
os.environ.setdefault("AUDIT_LOG_BACKEND", "memory")

from confpay.app import app as fastapi_app
from confpay.audit.sink import AuditLog, MemoryAuditStore
from confpay.orders.models import LineItem, Order
from confpay.orders.repository import is_stale_update
from confpay.payments.dependencies import get_checkout
from confpay.payments.paypal_client import PayPalClient
from confpay.payments.service import PayPalCheckout
from confpay.payments.statuses import PaymentStatus

TICKETS_URL = "https://conf.example/tickets"

# Marquage automatique selon le dossier
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "tests/unit/" in nodeid:
            item.add_marker(pytest.mark.unit)
        elif "tests/integration/" in nodeid:
            item.add_marker(pytest.mark.integration)
        elif "tests/functional/" in nodeid:
            item.add_marker(pytest.mark.functional)


class FakeOrderSystem:
    """
    Système d'inscription en mémoire.
    - Enregistre chaque apply_payment_result (y compris les doublons).
    - Applique les statuts avec la même règle que le repository (is_stale_update).
    """

    def __init__(self, orders=(), currency="USD", available=True, attendees=()):
        self.orders = {o.payment_token: o for o in orders}
        self.currency = currency
        self.available = available
        self.attendees: List[Dict[str, Any]] = list(attendees)
        self.applied: List[tuple] = []
        self.statuses: Dict[str, PaymentStatus] = {}

    def get_order(self, payment_token):
        return self.orders.get(payment_token)

    def verify_order_still_available(self, order):
        return self.available

    def apply_payment_result(self, payment_token, status, payment_data=None):
        self.applied.append((payment_token, status, payment_data))
        if is_stale_update(self.statuses.get(payment_token), status):
            return
        self.statuses[payment_token] = status

    def find_order_by_transaction_id(self, transaction_id):
        for record in reversed(self.attendees):
            if record.get("transaction_id") == transaction_id:
                return record
        return None

    def get_stored_payment_token(self, record):
        return (record or {}).get("payment_token") or None

    def get_configured_currency(self):
        return self.currency

    def get_event_name(self):
        return "Event"

    def get_tickets_page_url(self):
        return TICKETS_URL


class PayPalStub:
    """
    Faux PayPal branché sur httpx.MockTransport.
    - responses: réponse NVP par METHOD (absente => ACK=Failure)
    - unreachable: METHODs qui lèvent une erreur réseau
    - ipn_reply / ipn_status: réponse à la validation IPN
    """

    def __init__(self):
        self.responses: Dict[str, Dict[str, str]] = {}
        self.unreachable = set()
        self.ipn_reply = "VERIFIED"
        self.ipn_status = 200
        self.calls: List[Dict[str, str]] = []
        self.ipn_posts: List[bytes] = []
        self.client = PayPalClient(
            "api-user", "api-pass", "api-sig", sandbox=True,
            http_client=httpx.Client(transport=httpx.MockTransport(self._handle)),
        )

    def _handle(self, request: httpx.Request) -> httpx.Response:
        body = request.read()
        if request.url.path.endswith("/webscr"):
            self.ipn_posts.append(body)
            return httpx.Response(self.ipn_status, text=self.ipn_reply)
        data = dict(parse_qsl(body.decode("utf-8"), keep_blank_values=True))
        self.calls.append(data)
        method = data.get("METHOD")
        if method in self.unreachable:
            raise httpx.ConnectError("PayPal unreachable", request=request)
        reply = self.responses.get(method, {"ACK": "Failure", "L_ERRORCODE0": "10002"})
        return httpx.Response(200, text=urlencode(reply))

    @property
    def methods(self) -> List[Optional[str]]:
        return [c.get("METHOD") for c in self.calls]

    def call(self, method: str) -> Dict[str, str]:
        return next(c for c in self.calls if c.get("METHOD") == method)


@pytest.fixture
def order() -> Order:
    return Order(
        id="42",
        payment_token="ABC",
        items=[LineItem(id="t1", name="Conference Pass", description="Full access", price=Decimal("25.00"), quantity=2)],
        total=Decimal("50.00"),
        currency="USD",
    )

@pytest.fixture
def orders(order) -> FakeOrderSystem:
    return FakeOrderSystem([order])

@pytest.fixture
def paypal() -> PayPalStub:
    return PayPalStub()

@pytest.fixture
def audit_store() -> MemoryAuditStore:
    return MemoryAuditStore()

@pytest.fixture
def checkout(paypal, orders, audit_store) -> PayPalCheckout:
    return PayPalCheckout(paypal.client, orders, AuditLog(audit_store))

@pytest.fixture
def charge_ok(paypal):
    """Réponses PayPal d'un paiement de 50.00 USD accepté (retour navigateur)."""
    paypal.responses["GetExpressCheckoutDetails"] = {
        "ACK": "Success", "PAYMENTREQUEST_0_AMT": "50.00", "PAYMENTREQUEST_0_CURRENCYCODE": "USD",
    }
    paypal.responses["DoExpressCheckoutPayment"] = {
        "ACK": "Success", "PAYMENTINFO_0_PAYMENTSTATUS": "Completed", "PAYMENTINFO_0_TRANSACTIONID": "T1",
    }
    return paypal

@pytest.fixture(scope="session")
def app():
    return fastapi_app

@pytest.fixture()
def client(app, checkout) -> Generator[TestClient, None, None]:
    app.dependency_overrides[get_checkout] = lambda: checkout
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.clear()
