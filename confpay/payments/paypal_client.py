"""
Adaptateur PayPal: centralise les appels à l'API NVP (Express Checkout) et la
validation des IPN.
- Requêtes et réponses au format plat name=value (POST form-encoded).
- Le succès se lit dans le champ ACK, jamais dans le code HTTP.
- Aucun retry: un échec réseau lève TransportError et l'appelant décide.
"""
from typing import Any, Dict, Mapping, Optional
from urllib.parse import parse_qsl
import logging

import httpx

from .errors import TransportError
from .options import PayPalOptions

logger = logging.getLogger(__name__)

API_VERSION = "88.0"
DEFAULT_TIMEOUT = 20.0

NVP_URLS = {
    True: "https://api-3t.sandbox.paypal.com/nvp",
    False: "https://api-3t.paypal.com/nvp",
}
WEBSCR_URLS = {
    True: "https://www.sandbox.paypal.com/cgi-bin/webscr",
    False: "https://www.paypal.com/cgi-bin/webscr",
}

IPN_VALIDATE_PREFIX = b"cmd=_notify-validate&"

# module confpay.payments.paypal_client
def parse_nvp(body: str) -> Dict[str, str]:
    """
    Parse une réponse NVP (ex: "ACK=Success&TOKEN=EC-123") en dict.
    - Les valeurs vides sont conservées; une clé répétée garde la dernière valeur.
    """
    return dict(parse_qsl(body or "", keep_blank_values=True))

def is_success(response: Optional[Mapping[str, Any]]) -> bool:
    """True si la réponse NVP porte ACK=Success."""
    return (response or {}).get("ACK") == "Success"


class PayPalClient:
    """
    Client de l'API NVP PayPal.
    - sandbox: choisit les URLs sandbox ou production.
    - http_client: client httpx injectable (tests via httpx.MockTransport).
    """

    def __init__(
        self,
        username: str,
        password: str,
        signature: str,
        sandbox: bool = True,
        timeout: float = DEFAULT_TIMEOUT,
        http_client: Optional[httpx.Client] = None,
    ):
        self.username = username
        self.password = password
        self.signature = signature
        self.sandbox = bool(sandbox)
        self.timeout = timeout
        self._owns_http = http_client is None
        self.http = http_client or httpx.Client(timeout=timeout)

    @classmethod
    def from_options(
        cls,
        options: PayPalOptions,
        timeout: float = DEFAULT_TIMEOUT,
        http_client: Optional[httpx.Client] = None,
    ) -> "PayPalClient":
        return cls(
            username=options.api_username,
            password=options.api_password,
            signature=options.api_signature,
            sandbox=options.sandbox,
            timeout=timeout,
            http_client=http_client,
        )

    @property
    def api_url(self) -> str:
        return NVP_URLS[self.sandbox]

    @property
    def webscr_url(self) -> str:
        return WEBSCR_URLS[self.sandbox]

    def checkout_url(self, gateway_token: str) -> str:
        """URL de la page de paiement hébergée par PayPal pour un TOKEN donné."""
        url = httpx.URL(self.webscr_url, params={"cmd": "_express-checkout"})
        return str(url.copy_merge_params({"token": gateway_token}))

    def request(self, payload: Mapping[str, Any]) -> Dict[str, str]:
        """
        POST signé vers l'API NVP.
        - Les identifiants (USER, PWD, SIGNATURE, VERSION) sont fusionnés sous les champs fournis.
        - Retourne la réponse parsée (dict); peut être vide si PayPal ne renvoie rien.
        - Soulève TransportError si aucune réponse n'a pu être obtenue (réseau, timeout).
        """
        data: Dict[str, str] = {
            "USER": self.username,
            "PWD": self.password,
            "SIGNATURE": self.signature,
            "VERSION": API_VERSION,
        }
        data.update({str(k): str(v) for k, v in (payload or {}).items()})
        try:
            response = self.http.post(self.api_url, data=data, timeout=self.timeout)
        except httpx.HTTPError as e:
            logger.warning("payments.paypal request failed method=%s error=%s", data.get("METHOD"), e)
            raise TransportError(str(e)) from e
        return parse_nvp(response.text)

    def verify_notification(self, raw_body: bytes) -> bool:
        """
        Valide une IPN en renvoyant le corps reçu tel quel, préfixé de cmd=_notify-validate.
        - Vérifiée uniquement si HTTP 200 ET corps exactement "VERIFIED".
        - Toute autre combinaison (échec réseau compris) => non vérifiée.
        """
        if not raw_body:
            return False
        try:
            response = self.http.post(
                self.webscr_url,
                content=IPN_VALIDATE_PREFIX + raw_body,
                headers={"Content-Type": "application/x-www-form-urlencoded"},
                timeout=self.timeout,
            )
        except httpx.HTTPError as e:
            logger.warning("payments.paypal ipn validation unreachable error=%s", e)
            return False
        return response.status_code == 200 and response.text == "VERIFIED"

    def close(self) -> None:
        if self._owns_http:
            self.http.close()
