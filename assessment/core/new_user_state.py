"""
New-User State Machine - Persisted per-user onboarding flag

States:
    NEW        flag = true, onboarding shown
    RETURNING  flag = false

Invariants:
- A missing persisted value means NEW
- Persisted values are the literal strings "true" / "false"
- The heuristic only promotes NEW -> RETURNING, never the reverse
- Corrupt persisted values are removed and read as NEW (never raised)

Identity:
- load(user_id) records the identity that set()/reset() persist under
- on_identity_changed() is called explicitly by the identity holder at the
  point of assignment and completes before that assignment returns
"""

import json
import logging
from enum import Enum
from typing import Any, Optional

from assessment.persistence import KeyValueStore
from assessment.utils.helpers import js_truthy, reject_json_constant

logger = logging.getLogger(__name__)

NEW_USER_KEY_PREFIX = "new_user_flag_"


class NewUserState(str, Enum):
    NEW = "new"
    RETURNING = "returning"

    @classmethod
    def from_flag(cls, is_new: bool) -> "NewUserState":
        return cls.NEW if is_new else cls.RETURNING

    @property
    def is_new(self) -> bool:
        return self is NewUserState.NEW


class NewUserStateMachine:
    """Tracks and persists whether the current user is new"""

    def __init__(self, store: KeyValueStore, key_prefix: str = NEW_USER_KEY_PREFIX):
        """
        Args:
            store: Key-value store holding the flags
            key_prefix: Prefix of the per-user key
        """
        self.store = store
        self.key_prefix = key_prefix
        self.state = NewUserState.NEW
        self.user_id: Optional[Any] = None

        logger.info(f"NewUserStateMachine initialized (key prefix '{key_prefix}')")

    @property
    def is_new_user(self) -> bool:
        return self.state.is_new

    def key_for(self, user_id: Any) -> str:
        """
        Example:
            >>> machine.key_for(42)
            'new_user_flag_42'
        """
        return f"{self.key_prefix}{user_id}"

    # ========================
    # Store access
    # ========================

    def _read_flag(self, user_id: Any) -> bool:
        """
        Read the persisted flag for a user.

        "true"/"false" is the primary encoding. Anything else is parsed as
        JSON (older encodings) and coerced the way the client did, so empty
        lists and objects read as new. Unparseable values (including
        NaN/Infinity) are removed and read as new.
        """
        key = self.key_for(user_id)
        stored = self.store.get(key)

        if stored is None:
            return True
        if stored in ("true", "false"):
            return stored == "true"

        try:
            return js_truthy(json.loads(stored, parse_constant=reject_json_constant))
        except (TypeError, ValueError) as e:
            logger.warning(
                f"Failed to parse stored new-user flag for user {user_id} "
                f"({stored!r}), defaulting to new: {e}"
            )
            self.store.remove(key)
            return True

    # ========================
    # Transitions
    # ========================

    def load(self, user_id: Any) -> NewUserState:
        """
        Re-derive the state from the store for a user.

        Args:
            user_id: User identifier; falsy means no user (store untouched)

        Returns:
            NewUserState: Resulting state
        """
        self.user_id = user_id

        if not user_id:
            self.state = NewUserState.NEW
            return self.state

        self.state = NewUserState.from_flag(self._read_flag(user_id))
        logger.debug(f"Loaded new-user state for user {user_id}: {self.state.value}")
        return self.state

    def set(self, value: bool) -> NewUserState:
        """
        Set the flag and persist it for the loaded user.

        The in-memory state changes even when no user is loaded; only the
        store write is skipped.
        """
        self.state = NewUserState.from_flag(value)

        if self.user_id:
            flag = "true" if value else "false"
            self.store.set(self.key_for(self.user_id), flag)
            logger.info(f"Persisted new-user flag for user {self.user_id}: {flag}")

        return self.state

    def reset(self) -> NewUserState:
        """Delete the persisted flag for the loaded user and return to NEW."""
        if self.user_id:
            self.store.remove(self.key_for(self.user_id))
            logger.info(f"Reset new-user flag for user {self.user_id}")

        self.state = NewUserState.NEW
        return self.state

    def evaluate_heuristic(
        self,
        has_completed_reports: bool,
        has_active_assignment: bool
    ) -> NewUserState:
        """
        Promote a new user to returning once they have activity.

        Args:
            has_completed_reports: User has finished at least one report
            has_active_assignment: User has an assignment in progress

        Returns:
            NewUserState: Resulting state (RETURNING is never reverted)
        """
        if self.state is NewUserState.RETURNING:
            return self.state

        should_be_new = not has_completed_reports and not has_active_assignment
        if not should_be_new:
            if self.user_id:
                logger.info(f"User {self.user_id} has activity, promoting to returning")
            else:
                logger.info("Activity detected with no user loaded, promoting to returning")
            self.set(False)

        return self.state

    def on_identity_changed(self, user_id: Any) -> NewUserState:
        """
        Resync with the store when the active identity changes.

        Called by the identity holder right after it assigns a user. A new,
        non-null identity different from the current one triggers load();
        otherwise only the remembered identity is updated.
        """
        if user_id and user_id != self.user_id:
            logger.info(f"Identity changed {self.user_id} -> {user_id}, reloading new-user flag")
            return self.load(user_id)

        self.user_id = user_id
        return self.state
