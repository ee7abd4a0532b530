"""Per-operator progress of the multi-step add-key wizard."""

import logging
import threading
from dataclasses import dataclass, field

from splurge_keymaster.constants import Constants
from splurge_keymaster.exceptions import DuplicateKeyNameError, ValidationError
from splurge_keymaster.models import KeyStore
from splurge_keymaster.validation_utils import validate_key_name, validate_key_value

logger = logging.getLogger(__name__)

STEP_NAME = "name"
STEP_VALUE = "value"
STEP_EMAIL = "email"
STEP_PASSWORD = "password"
STEP_DONE = "done"

_NEXT_STEP = {
    STEP_NAME: STEP_VALUE,
    STEP_VALUE: STEP_EMAIL,
    STEP_EMAIL: STEP_PASSWORD,
    STEP_PASSWORD: STEP_DONE,
}

_PROMPTS = {
    STEP_NAME: "Key name (letters, digits, '_' or '-'):",
    STEP_VALUE: "Key value:",
    STEP_EMAIL: f"Account email ('{Constants.SKIP_INPUT()}' to skip):",
    STEP_PASSWORD: f"Account password ('{Constants.SKIP_INPUT()}' to skip):",
    STEP_DONE: "",
}


@dataclass
class KeyDraft:
    """Fields collected by the add-key wizard."""

    name: str | None = None
    value: str | None = None
    email: str | None = None
    password: str | None = None


@dataclass
class WizardSession:
    """Add-key wizard progress for one operator."""

    operator: str
    step: str = STEP_NAME
    draft: KeyDraft = field(default_factory=KeyDraft)

    @property
    def prompt(self) -> str:
        return _PROMPTS[self.step]

    @property
    def is_complete(self) -> bool:
        return self.step == STEP_DONE


def _optional(text: str) -> str | None:
    text = text.strip()
    if text in ("", Constants.SKIP_INPUT()):
        return None
    return text


class SessionRegistry:
    """Wizard sessions keyed by operator id.

    A session is created by ``start`` and removed by ``finish`` or ``cancel``.
    """

    def __init__(self) -> None:
        self._sessions: dict[str, WizardSession] = {}
        self._lock = threading.Lock()

    def start(self, operator: str | int) -> WizardSession:
        """Start a new wizard, replacing any unfinished one for the operator."""
        key = str(operator)
        session = WizardSession(operator=key)
        with self._lock:
            self._sessions[key] = session
        logger.debug("Add-key wizard started", extra={
            "operator": key,
            "event": "wizard_started"
        })
        return session

    def get(self, operator: str | int) -> WizardSession | None:
        with self._lock:
            return self._sessions.get(str(operator))

    def submit(
        self,
        operator: str | int,
        text: str,
        *,
        store: KeyStore | None = None
    ) -> WizardSession:
        """Apply an operator answer to the current wizard step.

        On a validation failure the session stays on the same step.

        Args:
            operator: Operator id owning the session
            text: Answer for the current step
            store: Store used to reject duplicate names early (optional)

        Returns:
            The updated session

        Raises:
            ValidationError: If no wizard is in progress or the answer is invalid
        """
        session = self.get(operator)
        if session is None:
            raise ValidationError("No add-key wizard in progress")

        if session.step == STEP_NAME:
            name = text.strip()
            validate_key_name(name)
            if store is not None and store.has_name(name):
                raise DuplicateKeyNameError(f"Key name '{name}' already exists")
            session.draft.name = name
        elif session.step == STEP_VALUE:
            # Only the line ending is dropped; secrets keep their whitespace
            value = text.rstrip("\r\n")
            validate_key_value(value)
            session.draft.value = value
        elif session.step == STEP_EMAIL:
            email = _optional(text)
            if email is not None and "@" not in email:
                raise ValidationError("Email must contain '@'")
            session.draft.email = email
        elif session.step == STEP_PASSWORD:
            session.draft.password = _optional(text)
        else:
            raise ValidationError("Add-key wizard is already complete")

        session.step = _NEXT_STEP[session.step]
        return session

    def finish(self, operator: str | int) -> KeyDraft:
        """Close a completed wizard and return its draft.

        Raises:
            ValidationError: If no wizard is in progress or it is incomplete
        """
        key = str(operator)
        with self._lock:
            session = self._sessions.get(key)
            if session is None:
                raise ValidationError("No add-key wizard in progress")
            if not session.is_complete:
                raise ValidationError(f"Add-key wizard is waiting for {session.step}")
            del self._sessions[key]
        return session.draft

    def cancel(self, operator: str | int) -> bool:
        """Discard a wizard.

        Returns:
            True if a session was discarded, False if none was in progress
        """
        with self._lock:
            removed = self._sessions.pop(str(operator), None) is not None
        if removed:
            logger.debug("Add-key wizard cancelled", extra={
                "operator": str(operator),
                "event": "wizard_cancelled"
            })
        return removed

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
