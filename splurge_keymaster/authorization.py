"""Operator allow-list checked before any key operation."""

import logging
from typing import Iterable

from splurge_keymaster.exceptions import AuthorizationError

logger = logging.getLogger(__name__)


class AccessControl:
    """Allow-list of operator ids permitted to manage the key pool."""

    def __init__(
        self,
        allowed_operators: Iterable[str | int] = (),
        *,
        allow_all: bool = False
    ):
        """Initialize the access control.

        Args:
            allowed_operators: Operator ids permitted to use the key pool
            allow_all: Authorize every caller (local single-user use)
        """
        self._allowed = frozenset(str(operator).strip() for operator in allowed_operators)
        self._allow_all = allow_all

    def is_authorized(self, caller: str | int | None) -> bool:
        """Check whether a caller may invoke key operations.

        An empty allow-list authorizes nobody unless ``allow_all`` is set.
        """
        if self._allow_all:
            return True
        if caller is None:
            return False
        return str(caller).strip() in self._allowed

    def require(self, caller: str | int | None) -> None:
        """Ensure a caller is authorized.

        Raises:
            AuthorizationError: If the caller is not on the allow-list
        """
        if not self.is_authorized(caller):
            logger.warning("Rejected unauthorized operator", extra={
                "operator": str(caller),
                "event": "access_denied"
            })
            raise AuthorizationError(f"Operator '{caller}' is not authorized")

    @property
    def allowed_operators(self) -> frozenset[str]:
        return self._allowed
