"""
QuerySession - per-login container for the pipeline's only mutable state.

The session owns the single credential slot. A new session is built on every
login; each orchestration run writes the freshly acquired credential into the
slot and hands it explicitly to every later stage of that run.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime

from models.graph import Credential
from models.stage_result import Stage, StageError


@dataclass
class QuerySession:
    """
    Session metadata plus the credential slot.

    Attributes:
        session_id: Unique identifier for this session
        account_username: Account signed in by the login that created the session
        created_at: Session creation timestamp
    """

    session_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    account_username: str | None = None
    created_at: datetime = field(default_factory=datetime.utcnow)
    _credential: Credential | None = field(default=None, repr=False)

    @property
    def credential(self) -> Credential | None:
        return self._credential

    def store_credential(self, credential: Credential) -> Credential:
        """
        Put a credential in the slot, replacing whatever was there.

        Args:
            credential: Newly acquired credential

        Returns:
            The stored credential
        """
        self._credential = credential
        if credential.account_username and not self.account_username:
            self.account_username = credential.account_username
        return credential

    def clear_credential(self) -> None:
        self._credential = None

    @property
    def is_authenticated(self) -> bool:
        return self._credential is not None


@dataclass(frozen=True)
class PipelineOutcome:
    """What one orchestration run produced and where it stopped."""

    answer: str
    stage: Stage
    error: StageError | None = None

    @property
    def completed(self) -> bool:
        return self.stage == "synthesis"

    @property
    def failure_code(self) -> str | None:
        return self.error.code if self.error else None
