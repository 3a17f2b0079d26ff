"""Shared test fixtures."""

from pathlib import Path

import pytest

from participants import CandidateLookupError
from participants.lookup import ParticipantStore


STORE_HEADER = 'id;first_name;last_name;birth_date;email;club;weight;grade'


class RecordingLookup:
    """Wraps a ParticipantStore and records every query."""

    def __init__(self, participants):
        self.store = ParticipantStore(participants)
        self.calls = []

    def lookup_by_email(self, normalized_email):
        self.calls.append(('email', normalized_email))
        return self.store.lookup_by_email(normalized_email)

    def lookup_by_birth_date(self, birth_date):
        self.calls.append(('birth_date', birth_date))
        return self.store.lookup_by_birth_date(birth_date)

    def count_by_email(self, normalized_email):
        self.calls.append(('count', normalized_email))
        return self.store.count_by_email(normalized_email)


class FailingLookup:
    """Lookup whose selected queries raise CandidateLookupError."""

    def __init__(self, fail_on, participants=()):
        self.fail_on = set(fail_on)
        self.store = ParticipantStore(list(participants))
        self.calls = []

    def _query(self, name, method, arg):
        self.calls.append(name)
        if name in self.fail_on:
            raise CandidateLookupError(f'{name} lookup unreachable')
        return method(arg)

    def lookup_by_email(self, normalized_email):
        return self._query('email', self.store.lookup_by_email, normalized_email)

    def lookup_by_birth_date(self, birth_date):
        return self._query('birth_date', self.store.lookup_by_birth_date, birth_date)

    def count_by_email(self, normalized_email):
        return self._query('count', self.store.count_by_email, normalized_email)


@pytest.fixture
def recording_lookup():
    """Factory for a RecordingLookup over the given participants."""
    return RecordingLookup


@pytest.fixture
def failing_lookup():
    """Factory for a FailingLookup failing on the given queries."""
    return FailingLookup


@pytest.fixture
def store_file(tmp_path) -> Path:
    """A small participant file (semicolon-delimited, UTF-8)."""
    path = tmp_path / 'participants.csv'
    path.write_text(
        '\n'.join([
            STORE_HEADER,
            '1;Jéan;Dupont;1990-05-01T00:00:00+00:00;Jean@X.com;Judo Club Lyon;73,5;Ceinture noire',
            '2;Marie;Curie;1985-11-07;marie@x.com;;;',
            '3;Jean-Baptiste;Delacroix;2001-02-03;jb@x.com;ASPTT;81;Marron',
        ]) + '\n',
        encoding='utf-8',
    )
    return path


@pytest.fixture
def registrants_file(tmp_path) -> Path:
    """Registrants covering each classification plus one invalid row."""
    path = tmp_path / 'anmeldungen.csv'
    path.write_text(
        '\n'.join([
            'first_name,last_name,birth_date,email',
            'Jean,Dupont,1990-05-01,jean@x.com',
            'Marie,Curie,1986-11-07,marie@x.com',
            'Paul,Martin,1999-09-09,paul@x.com',
            'Lucie,,2000-01-01,lucie@x.com',
        ]) + '\n',
        encoding='utf-8',
    )
    return path
