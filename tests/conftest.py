"""Shared fixtures: canned UEX payloads and a recording fake transport."""

import json
from typing import Any, Dict, List, Tuple
from urllib.parse import parse_qsl, urlsplit

import pytest

from src.adapters.uex.adapter import UexAdapter
from src.adapters.uex.markets import MarketRegistry
from src.adapters.uex.rest import UexRestClient
from src.adapters.uex.signer import RequestDescriptor
from src.config.models import ConnectionSettings, Credentials, ExchangeConfig

NOW = 1533413083.0

SYMBOLS = [
    {"symbol": "btcusdt", "count_coin": "usdt", "amount_precision": 3, "base_coin": "btc", "price_precision": 2},
    {"symbol": "ethusdt", "count_coin": "usdt", "amount_precision": 3, "base_coin": "eth", "price_precision": 2},
    {"symbol": "ethbtc", "count_coin": "btc", "amount_precision": 3, "base_coin": "eth", "price_precision": 6},
]


def ok(data: Any) -> Dict[str, Any]:
    return {"code": "0", "msg": "suc", "data": data}


class FakeRestClient(UexRestClient):
    """UexRestClient that answers from a route table instead of the network."""

    def __init__(self, routes: Dict[str, Any]):
        super().__init__(ConnectionSettings(rate_limit_ms=0))
        self.routes = dict(routes)
        self.requests: List[RequestDescriptor] = []
        self.closed = False

    @staticmethod
    def path_of(request: RequestDescriptor) -> str:
        return urlsplit(request.url).path.split("/open/api/", 1)[-1]

    @staticmethod
    def params_of(request: RequestDescriptor) -> Dict[str, str]:
        query = request.body if request.body is not None else urlsplit(request.url).query
        return dict(parse_qsl(query))

    def requests_to(self, path: str) -> List[RequestDescriptor]:
        return [r for r in self.requests if self.path_of(r) == path]

    async def _fetch(self, request: RequestDescriptor) -> Tuple[int, str]:
        self.requests.append(request)
        reply = self.routes[self.path_of(request)]
        if isinstance(reply, Exception):
            raise reply
        status, body = reply if isinstance(reply, tuple) else (200, reply)
        if not isinstance(body, str):
            body = json.dumps(body)
        return status, body

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def registry() -> MarketRegistry:
    return MarketRegistry.from_symbols(SYMBOLS)


@pytest.fixture
def credentials() -> Credentials:
    return Credentials(
        api_key="key",
        secret="secret",
        password="pass",
        country_code="86",
        phone_number="13800000000",
    )


@pytest.fixture
def make_adapter(credentials):
    """Build an adapter over a FakeRestClient; common/symbols is pre-routed."""

    def factory(routes: Dict[str, Any], config: ExchangeConfig = None, creds: Credentials = None):
        transport = FakeRestClient({"common/symbols": ok(SYMBOLS), **routes})
        adapter = UexAdapter(
            config or ExchangeConfig(),
            creds if creds is not None else credentials,
            rest_client=transport,
            clock=lambda: NOW,
        )
        return adapter, transport

    return factory
