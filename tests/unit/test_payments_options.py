from confpay.payments.options import PayPalOptions, validate_options
from confpay.payments.urls import CallbackUrls

def test_validate_options_only_updates_provided_keys():
    current = PayPalOptions(api_username="u", api_password="p", api_signature="s", sandbox=True)
    out = validate_options(current, {"api_password": " new ", "sandbox": "0"})
    assert out.api_username == "u"
    assert out.api_password == "new"
    assert out.api_signature == "s"
    assert out.sandbox is False

def test_validate_options_from_scratch():
    out = validate_options(None, {"api_username": "u", "sandbox": "on"})
    assert out.sandbox is True
    assert out.has_credentials is False

def test_callback_urls_carry_token_and_method():
    urls = CallbackUrls("https://conf.example/tickets")
    assert urls.notify_url("ABC") == (
        "https://conf.example/tickets?tix_action=payment_notify&tix_payment_token=ABC&tix_payment_method=paypal"
    )
    assert urls.result_url("ABC", "completed").endswith("&tix_payment_status=completed")

def test_callback_urls_keep_existing_query():
    url = CallbackUrls("https://conf.example/register?event=7").cancel_url("ABC")
    assert url.startswith("https://conf.example/register?event=7&tix_action=payment_cancel")
