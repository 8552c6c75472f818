"""
UEX error classifier.

Every UEX response carries a string ``code``; ``"0"`` means success. Any
other code is looked up in a fixed table and raised as the mapped error
class with the full parsed body attached. Unknown codes raise a generic
ExchangeError.

Error Format:
    {"code": "22", "msg": "not found", "data": null}

Bodies that are not JSON objects/arrays (or are shorter than two
characters) are not classified here; the transport reports them. A parsed
array has no ``code`` and is therefore an ExchangeError.
"""

import json
from types import MappingProxyType
from typing import Any, Mapping, Optional, Type

import structlog

from src.errors import (
    AuthenticationError,
    BaseError,
    ExchangeError,
    ExchangeNotAvailable,
    InsufficientFunds,
    InvalidOrder,
    OrderNotFound,
    PermissionDenied,
)

logger = structlog.get_logger(__name__)

SUCCESS_CODE = "0"

EXCEPTIONS: Mapping[str, Type[BaseError]] = MappingProxyType(
    {
        "4": InsufficientFunds,  # insufficient balance
        "5": ExchangeError,  # fail to order
        "6": InvalidOrder,  # quantity below the minimum
        "7": InvalidOrder,  # quantity above the maximum
        "8": ExchangeError,  # fail to cancel order
        "9": ExchangeError,  # transaction frozen
        "13": ExchangeError,  # internal error, contact the manager
        "19": InsufficientFunds,  # available balance is insufficient
        "22": OrderNotFound,  # the order does not exist
        "23": InvalidOrder,  # missing transaction volume
        "24": InvalidOrder,  # missing transaction price
        "100001": ExchangeError,  # system is abnormal
        "100002": ExchangeNotAvailable,  # system update
        "100004": ExchangeError,  # request parameter illegal
        "100005": AuthenticationError,  # request sign illegal
        "100007": PermissionDenied,  # illegal IP
        "110002": ExchangeError,  # unknown currency code
        "110003": AuthenticationError,  # fund password error
        "110004": AuthenticationError,  # fund password error
        "110005": InsufficientFunds,  # available balance is insufficient
        "110020": AuthenticationError,  # username does not exist
        "110023": AuthenticationError,  # phone number is registered
        "110024": AuthenticationError,  # email is registered
        "110025": PermissionDenied,  # account locked by administrator
        "110032": PermissionDenied,  # no authority for this operation
        "110033": ExchangeError,  # fail to recharge
        "110034": ExchangeError,  # fail to withdraw
        "-100": ExchangeError,  # request path does not exist
    }
)


class UexErrorClassifier:
    """
    Maps UEX response codes to the error taxonomy.

    Example:
        >>> classifier = UexErrorClassifier()
        >>> classifier.check('{"code":"0","msg":"suc","data":[]}')
        {'code': '0', 'msg': 'suc', 'data': []}
        >>> classifier.check('{"code":"22","msg":"not found","data":null}')
        Traceback (most recent call last):
        ...
        src.errors.OrderNotFound: uex {"code": "22", "msg": "not found", "data": null}
    """

    def __init__(
        self,
        exceptions: Mapping[str, Type[BaseError]] = EXCEPTIONS,
        exchange_id: str = "uex",
    ):
        self.exceptions = exceptions
        self.exchange_id = exchange_id

    @staticmethod
    def parse_body(body: Any) -> Optional[Any]:
        """
        Parse a body that looks like a JSON object or array.

        Returns:
            Optional[Any]: Parsed JSON, or None when the body is not a
                classifiable JSON document.
        """
        if not isinstance(body, str):
            return None
        if len(body) < 2:
            return None
        if body[0] not in "{[":
            return None
        try:
            return json.loads(body)
        except ValueError:
            return None

    def error_for(self, response: Any) -> Optional[BaseError]:
        """
        Build the error for a parsed response, or None on success.

        Args:
            response: Parsed JSON body.
        """
        code = response.get("code") if isinstance(response, dict) else None
        code = str(code) if code is not None else None
        if code == SUCCESS_CODE:
            return None

        feedback = f"{self.exchange_id} {json.dumps(response, ensure_ascii=False)}"
        error_class = self.exceptions.get(code, ExchangeError) if code is not None else ExchangeError
        return error_class(feedback, response=response)

    def check(self, body: Any) -> Optional[Any]:
        """
        Raise the mapped error if the body reports a failure.

        Args:
            body: Raw response text.

        Returns:
            Optional[Any]: The parsed body when it was classifiable and
                successful, None when classification was skipped.

        Raises:
            BaseError: The mapped error class for a non-zero code.
        """
        response = self.parse_body(body)
        if response is None:
            return None

        error = self.error_for(response)
        if error is not None:
            fields = response if isinstance(response, dict) else {}
            logger.warning(
                "exchange_error_response",
                exchange=self.exchange_id,
                code=fields.get("code"),
                error=type(error).__name__,
                msg=fields.get("msg"),
            )
            raise error
        return response
