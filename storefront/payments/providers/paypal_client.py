"""
Adaptateur PayPal (REST v2 Orders): centralise les appels et la configuration PayPal.
- Jeton OAuth client_credentials obtenu à chaque opération (aucun état partagé).
- Création: intent CAPTURE, montant validé, lignes validées, adresse mappée.
- Capture: POST /v2/checkout/orders/{id}/capture.
"""
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional
import logging

import httpx

from storefront import config
from storefront.errors import CaptureFailed, ProviderRejected, ProviderUnavailable
from storefront.payments.pricing import ValidatedOrder
from storefront.payments.schemas import ShippingInfo
from storefront.payments.shipping import country_code
from .base import CaptureResult, ProviderOrder

logger = logging.getLogger(__name__)


def _money(value: Decimal, currency: str) -> Dict[str, str]:
    return {"currency_code": currency, "value": f"{value:.2f}"}

def build_order_payload(order: ValidatedOrder, shipping: ShippingInfo, currency: str) -> Dict[str, Any]:
    """
    Corps de POST /v2/checkout/orders.
    Les montants viennent exclusivement de la commande validée.
    """
    return {
        "intent": "CAPTURE",
        "purchase_units": [
            {
                "amount": {
                    **_money(order.total, currency),
                    "breakdown": {"item_total": _money(order.total, currency)},
                },
                "items": [
                    {
                        "name": line.name[:127],
                        "quantity": str(line.quantity),
                        "unit_amount": _money(line.unit_price, currency),
                    }
                    for line in order.lines
                ],
                "shipping": {
                    "name": {"full_name": shipping.name},
                    "address": {
                        "address_line_1": shipping.address,
                        "admin_area_2": shipping.city,
                        "postal_code": shipping.zip,
                        "country_code": country_code(shipping.country),
                    },
                },
            }
        ],
    }

def _issue_from(response: httpx.Response) -> str:
    """Extrait le code 'issue' PayPal (ex: ORDER_ALREADY_CAPTURED) pour les logs."""
    try:
        body = response.json()
        details = body.get("details") or []
        if details:
            return str(details[0].get("issue") or body.get("name") or "")
        return str(body.get("name") or body.get("message") or "")
    except Exception:
        return response.text[:200]

def _json_object(response: httpx.Response) -> Dict[str, Any]:
    """Corps JSON objet; ValueError si le corps n'est pas du JSON ou pas un objet."""
    body = response.json()
    if not isinstance(body, dict):
        raise ValueError(f"unexpected PayPal body type {type(body).__name__}")
    return body

def parse_capture(data: Dict[str, Any], provider_order_id: str) -> CaptureResult:
    """Lit purchase_units[0].payments.captures[0] d'une réponse de capture."""
    units = data.get("purchase_units") or [{}]
    captures = ((units[0] or {}).get("payments") or {}).get("captures") or []
    if data.get("status") != "COMPLETED" or not captures:
        raise CaptureFailed(f"capture not completed status={data.get('status')}")
    capture = captures[0]
    amount = capture.get("amount") or {}
    try:
        value = Decimal(str(amount.get("value")))
    except (InvalidOperation, TypeError) as e:
        raise CaptureFailed(f"unreadable captured amount {amount!r}") from e
    return CaptureResult(
        capture_id=str(capture.get("id") or ""),
        provider_order_id=str(data.get("id") or provider_order_id),
        amount=value,
        currency=str(amount.get("currency_code") or ""),
        status=str(capture.get("status") or data.get("status")),
    )


class PayPalProvider:
    name = "paypal"

    def __init__(
        self,
        client_id: Optional[str] = None,
        secret: Optional[str] = None,
        api_base: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.client_id = client_id if client_id is not None else config.PAYPAL_CLIENT_ID
        self.secret = secret if secret is not None else config.PAYPAL_SECRET
        self.api_base = (api_base or config.PAYPAL_API_BASE).rstrip("/")
        self.timeout = timeout or config.PROVIDER_TIMEOUT_SECONDS
        self._transport = transport

    def _client(self) -> httpx.Client:
        return httpx.Client(base_url=self.api_base, timeout=self.timeout, transport=self._transport)

    def _access_token(self, client: httpx.Client) -> str:
        if not self.client_id or not self.secret:
            raise ProviderUnavailable("PayPal credentials not configured")
        response = client.post(
            "/v1/oauth2/token",
            auth=(self.client_id, self.secret),
            data={"grant_type": "client_credentials"},
        )
        if response.status_code != 200:
            logger.error("paypal.oauth failed status=%s issue=%s", response.status_code, _issue_from(response))
            raise ProviderUnavailable("Failed to get PayPal access token")
        try:
            return _json_object(response)["access_token"]
        except (ValueError, KeyError) as e:
            logger.exception("paypal.oauth unreadable token response status=%s", response.status_code)
            raise ProviderUnavailable(f"unreadable PayPal token response: {e!r}") from e

    def create_order(self, order: ValidatedOrder, shipping: ShippingInfo, currency: str) -> ProviderOrder:
        payload = build_order_payload(order, shipping, currency)
        try:
            with self._client() as client:
                token = self._access_token(client)
                response = client.post(
                    "/v2/checkout/orders",
                    json=payload,
                    headers={"Authorization": f"Bearer {token}"},
                )
        except httpx.HTTPError as e:
            logger.exception("paypal.create_order transport error")
            raise ProviderUnavailable(str(e)) from e

        if response.status_code not in (200, 201):
            issue = _issue_from(response)
            logger.error("paypal.create_order rejected status=%s issue=%s", response.status_code, issue)
            raise ProviderRejected(f"status={response.status_code} issue={issue}")
        try:
            order_id = _json_object(response).get("id")
        except ValueError as e:
            logger.exception("paypal.create_order unreadable response status=%s", response.status_code)
            raise ProviderRejected(f"unreadable PayPal response: {e}") from e
        if not order_id:
            raise ProviderRejected("missing order id in PayPal response")
        logger.info("paypal.create_order created id=%s total=%s", order_id, order.total)
        return ProviderOrder(order_id=order_id)

    def capture_order(self, provider_order_id: str) -> CaptureResult:
        try:
            with self._client() as client:
                token = self._access_token(client)
                response = client.post(
                    f"/v2/checkout/orders/{provider_order_id}/capture",
                    headers={
                        "Authorization": f"Bearer {token}",
                        "Content-Type": "application/json",
                        "Prefer": "return=representation",
                    },
                )
        except ProviderUnavailable as e:
            raise CaptureFailed(e.reason) from e
        except httpx.HTTPError as e:
            logger.exception("paypal.capture_order transport error id=%s", provider_order_id)
            raise CaptureFailed(f"provider unreachable: {e}") from e

        if response.status_code not in (200, 201):
            issue = _issue_from(response)
            logger.error("paypal.capture_order rejected id=%s status=%s issue=%s", provider_order_id, response.status_code, issue)
            raise CaptureFailed(issue or f"status={response.status_code}")
        try:
            data = _json_object(response)
        except ValueError as e:
            # Les fonds ont pu être capturés: l'identifiant doit rester dans les logs
            logger.exception(
                "paypal.capture_order unreadable response id=%s status=%s", provider_order_id, response.status_code,
            )
            raise CaptureFailed(f"unreadable capture response: {e}") from e
        return parse_capture(data, provider_order_id)

    def public_config(self) -> dict:
        return {"provider": self.name, "clientId": self.client_id}
