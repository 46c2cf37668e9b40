"""Profile store: the one active profile and its login lifecycle."""

import json
import logging
import sqlite3

from pydantic import ValidationError

from mentor.core.db import PROFILE_RECORD, delete_record, read_record, write_record
from mentor.core.schemas import Integrations, Profile
from mentor.history.ledger import HistoryLedger

logger = logging.getLogger(__name__)


class ProfileStore:
    """Loads, saves and clears the active profile.

    Clearing the profile also resets the history ledger: no history
    outlives a dropped profile.
    """

    def __init__(self, conn: sqlite3.Connection, ledger: HistoryLedger) -> None:
        self._conn = conn
        self._ledger = ledger
        self._profile: Profile | None = None

    @property
    def current(self) -> Profile | None:
        return self._profile

    def load(self) -> Profile | None:
        """Return the saved profile, or None if absent or unreadable."""
        try:
            raw = read_record(self._conn, PROFILE_RECORD)
        except sqlite3.Error as e:
            logger.warning("Failed to read profile record: %s", e)
            return None
        if raw is None:
            return None
        try:
            self._profile = Profile.model_validate(json.loads(raw))
        except (json.JSONDecodeError, ValidationError) as e:
            logger.warning("Profile record is corrupt, treating as absent: %s", e)
            self._profile = None
        return self._profile

    def save(self, profile: Profile) -> None:
        """Replace the active profile. Storage failures are logged, not raised."""
        self._profile = profile
        try:
            write_record(self._conn, PROFILE_RECORD, profile.model_dump_json())
        except sqlite3.Error as e:
            logger.warning("Failed to persist profile: %s", e)

    def clear(self) -> None:
        """Drop the profile and every history category."""
        self._profile = None
        try:
            delete_record(self._conn, PROFILE_RECORD)
        except sqlite3.Error as e:
            logger.warning("Failed to delete profile record: %s", e)
        self._ledger.reset_all()
        logger.info("Profile cleared")

    def toggle_integration(self, name: str) -> Profile:
        """Flip one advisory integration toggle and save the profile."""
        if self._profile is None:
            msg = "no active profile"
            raise ValueError(msg)
        if name not in Integrations.model_fields:
            valid = ", ".join(sorted(Integrations.model_fields))
            msg = f"Unknown integration '{name}'. Available: {valid}"
            raise ValueError(msg)
        current = self._profile.integrations
        integrations = current.model_copy(update={name: not getattr(current, name)})
        profile = self._profile.model_copy(update={"integrations": integrations})
        self.save(profile)
        return profile
