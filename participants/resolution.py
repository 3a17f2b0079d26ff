"""Multi-stage identity resolution for registrants."""

import logging
from collections import Counter
from dataclasses import dataclass
from datetime import date
from typing import Sequence

from participants import (
    AMBIGUOUS,
    EMAIL_CONFLICT,
    EXACT,
    NONE,
    MatchCandidate,
    Registrant,
    Resolution,
    ValidationError,
)
from participants.lookup import CandidateLookup
from participants.normalize import date_only, normalize_email, normalize_name
from participants.scoring import SIMILARITY_THRESHOLD, names_match

log = logging.getLogger(__name__)

# Stages, in the order they run
STAGE_EMAIL = 'email'
STAGE_EXACT_NAME = 'exact_name'
STAGE_FUZZY_NAME = 'fuzzy_name'
STAGE_NONE = 'none'

REQUIRED_FIELDS = ('first_name', 'last_name', 'birth_date', 'email')


@dataclass(frozen=True)
class ResolverConfig:
    """Tunable matching policy."""

    threshold: float = SIMILARITY_THRESHOLD
    # A lone fuzzy candidate is accepted as EXACT; when False it goes to review.
    auto_accept_single_fuzzy: bool = True


DEFAULT_CONFIG = ResolverConfig()


def validate_registrant(registrant: Registrant) -> None:
    """Check that a registrant can be handed to :func:`resolve`.

    Raises:
        ValidationError: If a field is blank or the birth date is not an
            ISO calendar date.
    """
    missing = [
        name for name in REQUIRED_FIELDS
        if not str(getattr(registrant, name) or '').strip()
    ]
    if missing:
        raise ValidationError(f"Fehlende Felder: {', '.join(missing)}")
    birth_date = date_only(registrant.birth_date)
    try:
        parsed = date.fromisoformat(birth_date)
    except ValueError as exc:
        raise ValidationError(
            f"Ungueltiges Geburtsdatum: {registrant.birth_date!r}"
        ) from exc
    # Only YYYY-MM-DD, the form the store indexes birth dates by
    if parsed.isoformat() != birth_date:
        raise ValidationError(
            f"Ungueltiges Geburtsdatum: {registrant.birth_date!r} (erwartet JJJJ-MM-TT)"
        )


def _fuzzy_candidates(
    first: str,
    last: str,
    same_birth: Sequence,
    threshold: float,
) -> list[MatchCandidate]:
    candidates = []
    for p in same_birth:
        fn_sim, ln_sim, ok = names_match(
            first, last,
            normalize_name(p.first_name), normalize_name(p.last_name),
            threshold,
        )
        if ok:
            candidates.append(MatchCandidate(
                participant=p,
                first_name_similarity=fn_sim,
                last_name_similarity=ln_sim,
            ))
    return candidates


def resolve(
    registrant: Registrant,
    lookup: CandidateLookup,
    config: ResolverConfig = DEFAULT_CONFIG,
) -> Resolution:
    """Decide whether a registrant already exists in the participant store.

    Uses a short-circuiting multi-stage approach:
    1. Email lookup: same birth date and both names above the threshold
       gives EXACT, anything else EMAIL_CONFLICT
    2. Birth-date lookup, exact normalized first and last name → EXACT
    3. Fuzzy names within the birth-date set: one candidate → EXACT (or
       AMBIGUOUS when auto-accept is off), several → AMBIGUOUS
    4. Nothing found → NONE

    The birth-date lookup is only issued when the email lookup found
    nothing. Errors raised by the lookup propagate unchanged.

    Args:
        registrant: Validated registration attempt.
        lookup: Participant store queries.
        config: Matching policy.

    Returns:
        Resolution describing the decision.
    """
    email = normalize_email(registrant.email)
    first = normalize_name(registrant.first_name)
    last = normalize_name(registrant.last_name)
    birth_date = date_only(registrant.birth_date)

    # Stage 1: Email
    by_email = lookup.lookup_by_email(email)
    if by_email is not None:
        _, _, names_ok = names_match(
            first, last,
            normalize_name(by_email.first_name), normalize_name(by_email.last_name),
            config.threshold,
        )
        if date_only(by_email.birth_date) == birth_date and names_ok:
            return _decided(Resolution(
                registrant=registrant,
                classification=EXACT,
                stage=STAGE_EMAIL,
                existing_id=by_email.id,
            ))
        return _decided(Resolution(
            registrant=registrant,
            classification=EMAIL_CONFLICT,
            stage=STAGE_EMAIL,
            conflict=by_email,
        ))

    same_birth = lookup.lookup_by_birth_date(birth_date)

    # Stage 2: Exact normalized names
    for p in same_birth:
        if normalize_name(p.first_name) == first and normalize_name(p.last_name) == last:
            return _decided(Resolution(
                registrant=registrant,
                classification=EXACT,
                stage=STAGE_EXACT_NAME,
                existing_id=p.id,
            ))

    # Stage 3: Fuzzy names
    candidates = _fuzzy_candidates(first, last, same_birth, config.threshold)
    if len(candidates) == 1 and config.auto_accept_single_fuzzy:
        return _decided(Resolution(
            registrant=registrant,
            classification=EXACT,
            stage=STAGE_FUZZY_NAME,
            existing_id=candidates[0].participant.id,
            candidates=candidates,
        ))
    if candidates:
        return _decided(Resolution(
            registrant=registrant,
            classification=AMBIGUOUS,
            stage=STAGE_FUZZY_NAME,
            candidates=candidates,
        ))

    # Stage 4: No match
    return _decided(Resolution(
        registrant=registrant,
        classification=NONE,
        stage=STAGE_NONE,
    ))


def _decided(resolution: Resolution) -> Resolution:
    log.debug(
        "%s %s (%s): %s via %s",
        resolution.registrant.first_name,
        resolution.registrant.last_name,
        resolution.registrant.birth_date,
        resolution.classification,
        resolution.stage,
    )
    return resolution


def resolve_registrants(
    registrants: Sequence[Registrant],
    lookup: CandidateLookup,
    config: ResolverConfig = DEFAULT_CONFIG,
) -> list[Resolution]:
    """Resolve several registrants in order.

    Args:
        registrants: Validated registration attempts.
        lookup: Participant store queries.
        config: Matching policy.

    Returns:
        One Resolution per registrant, in input order.
    """
    results = [resolve(r, lookup, config) for r in registrants]
    counts = Counter(r.classification for r in results)
    log.info(
        "Abgleich abgeschlossen: %d Anmeldungen (%s)",
        len(results),
        ', '.join(f"{k}={counts[k]}" for k in (EXACT, EMAIL_CONFLICT, AMBIGUOUS, NONE)),
    )
    return results


def is_email_taken(email: str, lookup: CandidateLookup) -> bool:
    """Check whether an email already belongs to a stored participant.

    Only exact (normalized) email identity counts; no fuzzy matching.

    Raises:
        ValidationError: If the email is blank.
    """
    if not str(email or '').strip():
        raise ValidationError("Fehlende Felder: email")
    return lookup.count_by_email(normalize_email(str(email))) > 0
