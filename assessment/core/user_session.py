"""
User Session - Holds the current identity and drives the new-user flag

Authentication itself lives elsewhere; this is the point where a resolved
user is assigned or cleared. Every assignment calls the state machine hook
synchronously, so the flag matches the new identity before set_user()
returns.
"""

import logging
from dataclasses import dataclass, fields
from typing import Any, Dict, Optional

from assessment.core.new_user_state import NewUserState, NewUserStateMachine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class User:
    """
    Current user as returned by the account endpoint.

    Only id is required here; the remaining attributes are carried for
    callers that display them.
    """
    id: int
    email: str = ""
    is_active: bool = True
    is_superuser: bool = False
    is_verified: bool = False
    role_id: Optional[int] = None
    age_bracket: Optional[str] = None
    gender: Optional[str] = None
    years_experience: Optional[int] = None
    years_derm_experience: Optional[int] = None
    created_at: Optional[str] = None

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "User":
        """Build from a raw user dict, ignoring unknown keys."""
        known = {f.name for f in fields(User)}
        return User(**{k: v for k, v in data.items() if k in known})


class UserSession:
    """Identity holder for the new-user state machine"""

    def __init__(self, new_user: NewUserStateMachine):
        self.new_user = new_user
        self.user: Optional[User] = None

    @property
    def current_user_id(self) -> Optional[int]:
        return self.user.id if self.user else None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @property
    def is_new_user(self) -> bool:
        return self.new_user.is_new_user

    def set_user(self, user: Optional[User]) -> NewUserState:
        """
        Assign the current user and resync the new-user flag.

        Returns:
            NewUserState: State after the resync
        """
        self.user = user
        return self.new_user.on_identity_changed(self.current_user_id)

    def clear(self) -> None:
        """Logout: drop the persisted flag, then forget the user."""
        self.new_user.reset()
        self.set_user(None)
        logger.info("User session cleared")

    def evaluate_new_user_heuristic(
        self,
        has_completed_reports: bool,
        has_active_assignment: bool
    ) -> NewUserState:
        return self.new_user.evaluate_heuristic(
            has_completed_reports=has_completed_reports,
            has_active_assignment=has_active_assignment,
        )
