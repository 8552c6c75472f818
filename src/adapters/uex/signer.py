"""
UEX request signer.

Builds request descriptors for the transport. Public routes are sent
unsigned; private routes are signed as follows:

    1. add ``api_key`` and ``time`` (unix seconds) to the parameters
    2. sort all parameters by key
    3. concatenate key + value for each entry, no separators
    4. append the API secret
    5. sign = md5(result) as lower-case hex

GET requests carry ``<query>&sign=<sign>`` in the URL; other methods carry
it form-encoded in the body. UEX requires five credentials for private
calls (API key, secret, trading password, country code, phone number); all
of them are checked before a request is built.
"""

import hashlib
import time
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple
from urllib.parse import urlencode

from pydantic import BaseModel

from src.adapters.uex.fields import stringify
from src.config.models import Credentials
from src.errors import AuthenticationError

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


class RequestDescriptor(BaseModel):
    """Everything the transport needs to send one request."""

    model_config = {"frozen": True, "extra": "forbid"}

    url: str
    method: str = "GET"
    body: Optional[str] = None
    headers: Optional[Dict[str, str]] = None


class UexSigner:
    """
    Builds public and signed private request descriptors.

    Example:
        >>> signer = UexSigner(credentials, "https://open-api.uex.com/open/api")
        >>> request = signer.sign("user/account", api="private")
        >>> request.url
        'https://open-api.uex.com/open/api/user/account?api_key=...&time=...&sign=...'
    """

    def __init__(
        self,
        credentials: Credentials,
        base_url: str,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize signer.

        Args:
            credentials: Account credentials.
            base_url: REST API base URL.
            clock: Returns the current unix time in seconds.
        """
        self.credentials = credentials
        self.base_url = base_url.rstrip("/")
        self._clock = clock

    def check_required_credentials(self) -> None:
        """
        Raise if any required credential is missing.

        Raises:
            AuthenticationError: Naming every missing credential.
        """
        missing = self.credentials.missing()
        if missing:
            raise AuthenticationError(
                f"uex requires the following credentials: {', '.join(missing)}"
            )

    def timestamp(self) -> str:
        return str(int(self._clock()))

    @staticmethod
    def canonical_query(params: Mapping[str, Any]) -> List[Tuple[str, str]]:
        """Parameters sorted by key with values in their canonical string form."""
        return [(key, stringify(params[key])) for key in sorted(params)]

    def signature(self, query: List[Tuple[str, str]]) -> str:
        """
        Compute the signature over an already-sorted query.

        Args:
            query: Sorted (key, value) pairs including api_key and time.

        Returns:
            str: Lower-case hex MD5 digest.
        """
        auth = "".join(key + value for key, value in query)
        payload = auth + (self.credentials.secret or "")
        return hashlib.md5(payload.encode("utf-8")).hexdigest()

    def sign(
        self,
        path: str,
        api: str = "public",
        method: str = "GET",
        params: Optional[Mapping[str, Any]] = None,
    ) -> RequestDescriptor:
        """
        Build the request descriptor for an endpoint.

        Args:
            path: Endpoint path relative to the base URL (e.g., "get_ticker").
            api: "public" or "private".
            method: HTTP method.
            params: Request parameters.

        Returns:
            RequestDescriptor: URL, method, body and headers.

        Raises:
            AuthenticationError: If a private route is requested without the
                full credential set.
        """
        params = dict(params or {})
        method = method.upper()
        url = f"{self.base_url}/{path}"

        if api == "public":
            if params:
                url += "?" + urlencode([(key, stringify(value)) for key, value in params.items()])
            return RequestDescriptor(url=url, method=method)

        self.check_required_credentials()
        params["api_key"] = self.credentials.api_key
        params["time"] = self.timestamp()
        query = self.canonical_query(params)
        signed = urlencode(query) + "&sign=" + self.signature(query)

        body: Optional[str] = None
        if method == "GET":
            url += "?" + signed
        else:
            body = signed

        return RequestDescriptor(
            url=url,
            method=method,
            body=body,
            headers={"Content-Type": FORM_CONTENT_TYPE},
        )
