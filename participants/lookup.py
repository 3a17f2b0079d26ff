"""Candidate lookup interface and an in-memory participant store."""

import logging
from collections import defaultdict
from pathlib import Path
from typing import Optional, Protocol, Sequence

from participants import CandidateLookupError, StoredParticipant
from participants.normalize import date_only, normalize_email
from participants.reader import read_participants

log = logging.getLogger(__name__)


class CandidateLookup(Protocol):
    """Read-only queries the resolver issues against the participant store.

    Implementations signal failures with CandidateLookupError.
    """

    def lookup_by_email(self, normalized_email: str) -> Optional[StoredParticipant]:
        ...

    def lookup_by_birth_date(self, birth_date: str) -> Sequence[StoredParticipant]:
        ...

    def count_by_email(self, normalized_email: str) -> int:
        ...


class ParticipantStore:
    """In-memory CandidateLookup backed by a list of participants.

    Stored emails are indexed in normalized form and birth dates by their
    date-only part, so timestamps coming out of a database export still
    match a plain ``YYYY-MM-DD`` query.
    """

    def __init__(self, participants: Sequence[StoredParticipant]):
        self._by_email: dict[str, list[StoredParticipant]] = defaultdict(list)
        self._by_birth_date: dict[str, list[StoredParticipant]] = defaultdict(list)
        for p in participants:
            self._by_email[normalize_email(p.email)].append(p)
            self._by_birth_date[date_only(p.birth_date)].append(p)
        self._size = len(participants)

    def __len__(self) -> int:
        return self._size

    @classmethod
    def from_csv(cls, path: str | Path) -> 'ParticipantStore':
        """Load a store from a participant file.

        Raises:
            CandidateLookupError: If the file cannot be read or lacks
                required columns.
        """
        try:
            participants = read_participants(path)
        except (OSError, ValueError) as exc:
            raise CandidateLookupError(
                f"Teilnehmerdatei {path} kann nicht gelesen werden: {exc}"
            ) from exc
        return cls(participants)

    def lookup_by_email(self, normalized_email: str) -> Optional[StoredParticipant]:
        """Return the participant registered under an email, if any.

        Raises:
            CandidateLookupError: If several participants share the email.
        """
        matches = self._by_email.get(normalized_email, [])
        if len(matches) > 1:
            raise CandidateLookupError(
                f"Mehrere Teilnehmer mit E-Mail {normalized_email!r}: "
                f"{', '.join(p.id for p in matches)}"
            )
        return matches[0] if matches else None

    def lookup_by_birth_date(self, birth_date: str) -> list[StoredParticipant]:
        return list(self._by_birth_date.get(birth_date, []))

    def count_by_email(self, normalized_email: str) -> int:
        return len(self._by_email.get(normalized_email, []))
