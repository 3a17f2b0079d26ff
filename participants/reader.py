"""Delimited-file reader for participants and registrants."""

import csv
import io
import logging
import re
from pathlib import Path
from typing import Optional

from participants import Registrant, StoredParticipant

log = logging.getLogger(__name__)

# Matches any sequence of whitespace (including Unicode whitespace like U+2006)
_WHITESPACE_RE = re.compile(r'\s+')

PARTICIPANT_COLUMNS = {'id', 'first_name', 'last_name', 'birth_date', 'email'}
REGISTRANT_COLUMNS = {'first_name', 'last_name', 'birth_date', 'email'}


def detect_encoding(path: Path) -> str:
    """Detect file encoding by checking for BOM bytes.

    Args:
        path: Path to the file.

    Returns:
        Encoding string suitable for open().
    """
    with open(path, 'rb') as f:
        bom = f.read(2)
    if bom == b'\xff\xfe':
        return 'utf-16-le'
    return 'utf-8-sig'


def detect_delimiter(header_line: str) -> str:
    """Pick the delimiter that occurs most often in the header line.

    Tab wins ties, then semicolon, then comma.
    """
    counts = [(header_line.count(d), -i, d) for i, d in enumerate('\t;,')]
    return max(counts)[2]


def normalize_whitespace(value: str) -> str:
    """Collapse whitespace runs into a single space and trim."""
    return _WHITESPACE_RE.sub(' ', value).strip()


def _parse_weight(value: str) -> Optional[float]:
    if not value:
        return None
    return float(value.replace(',', '.'))


def _read_rows(path: str | Path, required_cols: set[str]) -> list[tuple[int, dict]]:
    """Read a delimited file into cleaned row dicts.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file is empty or required columns are missing.
    """
    path = Path(path)
    encoding = detect_encoding(path)

    with open(path, 'r', encoding=encoding) as f:
        content = f.read()

    content = content.lstrip('\ufeff')
    header_line = content.split('\n', 1)[0]
    if not header_line.strip():
        raise ValueError(f"Datei {path} ist leer oder hat keine Header-Zeile.")

    reader = csv.DictReader(io.StringIO(content), delimiter=detect_delimiter(header_line))

    actual_cols = {normalize_whitespace(c).lower() for c in reader.fieldnames}
    missing = required_cols - actual_cols
    if missing:
        raise ValueError(
            f"Fehlende Spalten in {path}: {', '.join(sorted(missing))}"
        )

    rows = []
    for row_num, row in enumerate(reader, start=2):
        cleaned = {normalize_whitespace(k).lower(): normalize_whitespace(v or '')
                   for k, v in row.items() if k is not None}
        rows.append((row_num, cleaned))
    return rows


def read_participants(path: str | Path) -> list[StoredParticipant]:
    """Read stored participant records from a delimited file.

    Handles UTF-16LE (with BOM) and UTF-8 encoded files, with tab,
    semicolon or comma delimiters. Fields are trimmed and
    whitespace-normalized; rows that cannot be parsed are skipped.

    Args:
        path: Path to the participant file.

    Returns:
        List of StoredParticipant objects.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If required columns are missing.
    """
    participants: list[StoredParticipant] = []
    for row_num, cleaned in _read_rows(path, PARTICIPANT_COLUMNS):
        try:
            if not cleaned['id']:
                raise ValueError("leere ID")
            participants.append(StoredParticipant(
                id=cleaned['id'],
                first_name=cleaned['first_name'],
                last_name=cleaned['last_name'],
                birth_date=cleaned['birth_date'],
                email=cleaned['email'],
                club=cleaned.get('club', ''),
                weight=_parse_weight(cleaned.get('weight', '')),
                grade=cleaned.get('grade', ''),
            ))
        except (ValueError, KeyError) as exc:
            log.warning("Zeile %d in %s uebersprungen: %s", row_num, path, exc)

    log.info("%d Teilnehmer gelesen aus %s", len(participants), path)
    return participants


def read_registrants(path: str | Path) -> list[Registrant]:
    """Read registration attempts from a delimited file.

    Values are not validated here; see
    :func:`participants.resolution.validate_registrant`.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If required columns are missing.
    """
    registrants = [
        Registrant(
            first_name=cleaned.get('first_name', ''),
            last_name=cleaned.get('last_name', ''),
            birth_date=cleaned.get('birth_date', ''),
            email=cleaned.get('email', ''),
        )
        for _, cleaned in _read_rows(path, REGISTRANT_COLUMNS)
    ]
    log.info("%d Anmeldungen gelesen aus %s", len(registrants), path)
    return registrants
