"""
URLs de rappel vers la page billets (return/cancel/notify/résultat).
Toutes embarquent le payment token et le discriminant de moyen de paiement.
"""
import httpx

PAYMENT_METHOD = "paypal"


class CallbackUrls:
    def __init__(self, tickets_page_url: str, payment_method: str = PAYMENT_METHOD):
        self.tickets_page_url = tickets_page_url
        self.payment_method = payment_method

    def _url(self, action: str, payment_token: str, **extra: str) -> str:
        params = {
            "tix_action": action,
            "tix_payment_token": payment_token,
            "tix_payment_method": self.payment_method,
        }
        params.update(extra)
        return str(httpx.URL(self.tickets_page_url).copy_merge_params(params))

    def return_url(self, payment_token: str) -> str:
        return self._url("payment_return", payment_token)

    def cancel_url(self, payment_token: str) -> str:
        return self._url("payment_cancel", payment_token)

    def notify_url(self, payment_token: str) -> str:
        return self._url("payment_notify", payment_token)

    def result_url(self, payment_token: str, status: str) -> str:
        """Page billets affichée au navigateur une fois le statut appliqué."""
        return self._url("payment_result", payment_token, tix_payment_status=status)
