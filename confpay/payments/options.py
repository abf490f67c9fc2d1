"""
Réglages du moyen de paiement PayPal (identifiants API NVP + mode sandbox).
validate_options reprend la sémantique de l'écran de réglages: seules les clés
fournies sont mises à jour, sandbox est converti en booléen.
"""
from typing import Any, Dict, Optional
from pydantic import BaseModel, field_validator


class PayPalOptions(BaseModel):
    api_username: str = ""
    api_password: str = ""
    api_signature: str = ""
    sandbox: bool = True

    @field_validator("api_username", "api_password", "api_signature", mode="before")
    def _strip(cls, v):
        return str(v or "").strip()

    @property
    def has_credentials(self) -> bool:
        return bool(self.api_username and self.api_password and self.api_signature)


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def validate_options(current: Optional[PayPalOptions], incoming: Dict[str, Any]) -> PayPalOptions:
    """
    Fusionne un formulaire de réglages dans les options existantes.
    - Les clés absentes du formulaire conservent leur valeur actuelle.
    """
    output = (current or PayPalOptions()).model_dump()
    for key in ("api_username", "api_password", "api_signature"):
        if key in (incoming or {}):
            output[key] = incoming[key]
    if "sandbox" in (incoming or {}):
        output["sandbox"] = _as_bool(incoming["sandbox"])
    return PayPalOptions.model_validate(output)
