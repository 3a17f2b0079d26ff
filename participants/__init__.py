"""Core module for participant-resolver."""

from dataclasses import dataclass, field
from typing import Optional

from participants.normalize import date_only

# Classifications
EXACT = 'EXACT'
EMAIL_CONFLICT = 'EMAIL_CONFLICT'
AMBIGUOUS = 'AMBIGUOUS'
NONE = 'NONE'

CLASSIFICATIONS = (EXACT, EMAIL_CONFLICT, AMBIGUOUS, NONE)


class ValidationError(ValueError):
    """A registrant is missing fields or carries malformed values."""


class CandidateLookupError(LookupError):
    """The participant lookup failed or could not be reached."""


@dataclass
class Registrant:
    """A registration attempt as typed by the user."""

    first_name: str
    last_name: str
    birth_date: str   # YYYY-MM-DD
    email: str


@dataclass
class StoredParticipant:
    """A participant record owned by the participant store."""

    id: str
    first_name: str
    last_name: str
    birth_date: str
    email: str
    club: str = ''
    weight: Optional[float] = None
    grade: str = ''

    def public_fields(self, include_email: bool = False) -> dict:
        """Return the fields that may be shown to the registering user."""
        fields = {
            'id': self.id,
            'first_name': self.first_name,
            'last_name': self.last_name,
            'birth_date': date_only(self.birth_date),
        }
        if include_email:
            fields['email'] = self.email
        fields.update(club=self.club, weight=self.weight, grade=self.grade)
        return fields


@dataclass
class MatchCandidate:
    """A stored participant that scored above the threshold."""

    participant: StoredParticipant
    first_name_similarity: float
    last_name_similarity: float

    @property
    def score(self) -> float:
        return min(self.first_name_similarity, self.last_name_similarity)


@dataclass
class Resolution:
    """Outcome of resolving one registrant against the store."""

    registrant: Registrant
    classification: str           # EXACT, EMAIL_CONFLICT, AMBIGUOUS, NONE
    stage: str                    # email, exact_name, fuzzy_name, none
    existing_id: Optional[str] = None
    conflict: Optional[StoredParticipant] = None
    candidates: list[MatchCandidate] = field(default_factory=list)

    def to_payload(self) -> dict:
        """Render the payload handed back to the registration front end."""
        payload: dict = {'classification': self.classification}
        if self.classification == EXACT:
            payload['existing_id'] = self.existing_id
        elif self.classification == EMAIL_CONFLICT:
            payload['existing_user'] = self.conflict.public_fields(include_email=True)
        if self.candidates:
            payload['matches'] = [
                c.participant.public_fields() for c in self.candidates
            ]
        return payload
