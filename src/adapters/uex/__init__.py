"""
UEX exchange adapter package.

Components:
    - UexAdapter: ExchangeAdapter implementation (REST)
    - UexRestClient: aiohttp transport with throttling and classification
    - UexSigner: request descriptors and MD5 signing
    - UexNormalizer: payload -> model conversion
    - MarketRegistry: market id <-> canonical symbol index
    - UexErrorClassifier: response code -> error class
"""

from src.adapters.uex.adapter import UexAdapter
from src.adapters.uex.errors import EXCEPTIONS, UexErrorClassifier
from src.adapters.uex.markets import MarketRegistry, canonical_currency_code
from src.adapters.uex.normalizer import UexNormalizer
from src.adapters.uex.rest import UexRestClient
from src.adapters.uex.signer import RequestDescriptor, UexSigner
from src.adapters.uex.status import OrderStatus, parse_order_status

__all__: list[str] = [
    "UexAdapter",
    "UexRestClient",
    "UexSigner",
    "RequestDescriptor",
    "UexNormalizer",
    "MarketRegistry",
    "canonical_currency_code",
    "UexErrorClassifier",
    "EXCEPTIONS",
    "OrderStatus",
    "parse_order_status",
]
