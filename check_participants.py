"""participant-resolver – CLI zum Abgleich von Anmeldungen mit dem Teilnehmerbestand."""

import argparse
import logging
import sys
from pathlib import Path

from participants import CandidateLookupError, ValidationError
from participants.lookup import ParticipantStore
from participants.reader import read_registrants
from participants.reporter import print_summary, write_csv_report, write_html_report
from participants.resolution import (
    ResolverConfig,
    is_email_taken,
    resolve_registrants,
    validate_registrant,
)
from participants.scoring import SIMILARITY_THRESHOLD

log = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_EMAIL_TAKEN = 1
EXIT_LOOKUP_FAILED = 2


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        description='Abgleich von Anmeldungen gegen den Teilnehmerbestand.',
        prog='check_participants.py',
    )
    parser.add_argument(
        '--store', required=True, type=Path,
        help='Pfad zur Teilnehmer-Datei (Bestand)',
    )
    parser.add_argument(
        '--registrants', type=Path,
        help='Pfad zur Datei mit neuen Anmeldungen',
    )
    parser.add_argument(
        '--output', type=Path,
        help='Pfad fuer die Report-Ausgabe (CSV)',
    )
    parser.add_argument(
        '--check-email', metavar='EMAIL',
        help='Nur pruefen, ob die E-Mail-Adresse bereits vergeben ist',
    )
    parser.add_argument(
        '--html', action='store_true',
        help='Zusaetzlich einen HTML-Report erzeugen',
    )
    parser.add_argument(
        '--summary', action='store_true',
        help='Zusammenfassung auf stdout ausgeben',
    )
    parser.add_argument(
        '--threshold', type=float, default=SIMILARITY_THRESHOLD,
        help=f'Schwellenwert fuer Namensaehnlichkeit (Standard: {SIMILARITY_THRESHOLD})',
    )
    parser.add_argument(
        '--always-ask', action='store_true',
        help='Einzelne Fuzzy-Treffer nicht automatisch uebernehmen, sondern pruefen lassen',
    )
    parser.add_argument(
        '--verbose', action='store_true',
        help='Ausfuehrliche Ausgabe (jede Entscheidung)',
    )
    return parser


def check_email(store: ParticipantStore, email: str) -> int:
    """Report whether an email is taken; returns the exit code."""
    if is_email_taken(email, store):
        print(f"E-Mail bereits verwendet: {email}")
        return EXIT_EMAIL_TAKEN
    print(f"E-Mail verfuegbar: {email}")
    return EXIT_OK


def process_registrants(
    store: ParticipantStore,
    registrants_path: Path,
    output_path: Path,
    html: bool,
    summary: bool,
    config: ResolverConfig,
) -> None:
    """Resolve a registrant file against the store and write reports."""
    registrants = []
    for row_num, registrant in enumerate(read_registrants(registrants_path), start=2):
        try:
            validate_registrant(registrant)
        except ValidationError as exc:
            log.warning("Zeile %d in %s uebersprungen: %s", row_num, registrants_path, exc)
            continue
        registrants.append(registrant)

    resolutions = resolve_registrants(registrants, store, config)

    write_csv_report(resolutions, output_path)

    if html:
        write_html_report(resolutions, output_path.with_suffix('.html'), registrants_path.stem)

    if summary:
        print_summary(resolutions, registrants_path.name)


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(levelname)s: %(message)s',
    )

    if not args.registrants and not args.check_email:
        parser.error('Entweder --registrants oder --check-email muss angegeben werden.')

    if args.registrants and args.check_email:
        parser.error('--registrants und --check-email schliessen sich gegenseitig aus.')

    if args.registrants and not args.output:
        parser.error('--output ist erforderlich bei Verwendung von --registrants.')

    if not 0.0 <= args.threshold <= 1.0:
        parser.error('--threshold muss zwischen 0 und 1 liegen.')

    config = ResolverConfig(
        threshold=args.threshold,
        auto_accept_single_fuzzy=not args.always_ask,
    )

    try:
        store = ParticipantStore.from_csv(args.store)
        if args.check_email:
            return check_email(store, args.check_email)
        process_registrants(
            store, args.registrants, args.output,
            args.html, args.summary, config,
        )
    except ValidationError as exc:
        parser.error(str(exc))
    except CandidateLookupError as exc:
        log.error("Teilnehmerbestand nicht verfuegbar: %s", exc)
        return EXIT_LOOKUP_FAILED
    return EXIT_OK


if __name__ == '__main__':
    sys.exit(main())
