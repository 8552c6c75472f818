"""Tests for request signing."""

import hashlib
from urllib.parse import parse_qsl, urlsplit

import pytest

from src.adapters.uex.signer import FORM_CONTENT_TYPE, UexSigner
from src.config.models import Credentials
from src.errors import AuthenticationError

BASE_URL = "https://open-api.uex.com/open/api"


@pytest.fixture
def signer(credentials):
    return UexSigner(credentials, BASE_URL, clock=lambda: 1533413083.9)


def test_public_request_is_unsigned(signer):
    request = signer.sign("get_ticker", params={"symbol": "ethbtc"})
    assert request.url == f"{BASE_URL}/get_ticker?symbol=ethbtc"
    assert request.method == "GET"
    assert request.body is None
    assert request.headers is None


def test_public_request_without_params(signer):
    assert signer.sign("common/symbols").url == f"{BASE_URL}/common/symbols"


def test_private_signature_matches_sorted_concatenation(signer):
    request = signer.sign("user/account", api="private", params={"symbol": "ethbtc"})

    payload = "api_keykeysymbolethbtctime1533413083secret"
    expected = hashlib.md5(payload.encode("utf-8")).hexdigest()
    query = dict(parse_qsl(urlsplit(request.url).query))
    assert query == {
        "api_key": "key",
        "symbol": "ethbtc",
        "time": "1533413083",
        "sign": expected,
    }
    assert request.url.endswith("&sign=" + expected)
    assert request.headers == {"Content-Type": FORM_CONTENT_TYPE}


def test_private_post_carries_params_in_body(signer):
    request = signer.sign(
        "create_order",
        api="private",
        method="POST",
        params={"side": "BUY", "type": "1", "symbol": "ethbtc", "volume": "1.000", "price": "0.058"},
    )
    assert request.url == f"{BASE_URL}/create_order"
    assert request.method == "POST"
    keys = [key for key, _ in parse_qsl(request.body)]
    assert keys == ["api_key", "price", "side", "symbol", "time", "type", "volume", "sign"]


def test_signature_is_deterministic(signer):
    params = {"symbol": "ethbtc", "volume": "1.000"}
    first = signer.sign("create_order", api="private", method="POST", params=params)
    second = signer.sign("create_order", api="private", method="POST", params=params)
    assert first == second


def test_changing_any_parameter_changes_signature(signer):
    params = {"symbol": "ethbtc", "volume": "1.000", "price": "0.058"}
    baseline = dict(parse_qsl(signer.sign("x", api="private", params=params).url.split("?", 1)[1]))["sign"]

    for key in params:
        changed = dict(params, **{key: params[key] + "1"})
        url = signer.sign("x", api="private", params=changed).url
        assert dict(parse_qsl(url.split("?", 1)[1]))["sign"] != baseline


def test_changing_time_or_secret_changes_signature(credentials):
    def sign_with(secret, now):
        creds = credentials.model_copy(update={"secret": secret})
        url = UexSigner(creds, BASE_URL, clock=lambda: now).sign("x", api="private").url
        return dict(parse_qsl(url.split("?", 1)[1]))["sign"]

    assert sign_with("secret", 1) != sign_with("secret", 2)
    assert sign_with("secret", 1) != sign_with("other", 1)


def test_params_are_not_mutated(signer):
    params = {"symbol": "ethbtc"}
    signer.sign("user/account", api="private", params=params)
    assert params == {"symbol": "ethbtc"}


def test_missing_credentials_raise_authentication_error():
    signer = UexSigner(Credentials(api_key="key", secret="secret"), BASE_URL)
    with pytest.raises(AuthenticationError) as exc_info:
        signer.sign("user/account", api="private")
    message = str(exc_info.value)
    assert "password" in message
    assert "country_code" in message
    assert "phone_number" in message


def test_public_request_needs_no_credentials():
    signer = UexSigner(Credentials(), BASE_URL)
    assert signer.sign("get_ticker", params={"symbol": "ethbtc"}).url.endswith("symbol=ethbtc")
