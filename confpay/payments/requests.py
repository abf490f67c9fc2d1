"""
Requêtes validées, une par point d'entrée, construites une seule fois à la frontière
HTTP à partir des paramètres bruts (query string + corps form-encoded).
- Les jetons sont nettoyés (espaces) et obligatoires: une valeur vide => "empty token".
"""
from typing import Any, Dict, Mapping, Type, TypeVar
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import CheckoutAbort

EMPTY_TOKEN = "empty token"

# Noms des paramètres tels qu'envoyés par le navigateur / PayPal
PAYMENT_TOKEN_PARAM = "tix_payment_token"
GATEWAY_TOKEN_PARAM = "token"
PAYER_ID_PARAM = "PayerID"


class _TokenRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    @field_validator("*", mode="before")
    def _strip_tokens(cls, v):
        if v is None:
            return ""
        return v.strip() if isinstance(v, str) else v


class InitiateRequest(_TokenRequest):
    payment_token: str = Field(min_length=1)


class ReturnRequest(_TokenRequest):
    payment_token: str = Field(min_length=1)
    gateway_token: str = Field(min_length=1)
    payer_id: str = Field(min_length=1)


class CancelRequest(_TokenRequest):
    payment_token: str = Field(min_length=1)
    gateway_token: str = Field(min_length=1)


class NotifyRequest(_TokenRequest):
    payment_token: str = Field(min_length=1)
    raw_body: bytes = b""
    fields: Dict[str, str] = Field(default_factory=dict)


class LegacyNotifyRequest(_TokenRequest):
    raw_body: bytes = b""
    fields: Dict[str, str] = Field(default_factory=dict)


T = TypeVar("T", bound=BaseModel)

# module confpay.payments.requests
def _build(model: Type[T], **values: Any) -> T:
    try:
        return model(**values)
    except ValidationError:
        raise CheckoutAbort(EMPTY_TOKEN, status_code=400)

def build_initiate_request(params: Mapping[str, str]) -> InitiateRequest:
    return _build(InitiateRequest, payment_token=params.get(PAYMENT_TOKEN_PARAM))

def build_return_request(params: Mapping[str, str]) -> ReturnRequest:
    return _build(
        ReturnRequest,
        payment_token=params.get(PAYMENT_TOKEN_PARAM),
        gateway_token=params.get(GATEWAY_TOKEN_PARAM),
        payer_id=params.get(PAYER_ID_PARAM),
    )

def build_cancel_request(params: Mapping[str, str]) -> CancelRequest:
    return _build(
        CancelRequest,
        payment_token=params.get(PAYMENT_TOKEN_PARAM),
        gateway_token=params.get(GATEWAY_TOKEN_PARAM),
    )

def build_notify_request(params: Mapping[str, str], raw_body: bytes, fields: Dict[str, str]) -> NotifyRequest:
    return _build(
        NotifyRequest,
        payment_token=params.get(PAYMENT_TOKEN_PARAM),
        raw_body=raw_body,
        fields=fields,
    )
