"""Report generation for resolution results (CSV, HTML, summary)."""

import csv
import logging
from pathlib import Path

from jinja2 import Environment, PackageLoader

from participants import AMBIGUOUS, EMAIL_CONFLICT, EXACT, NONE, Resolution

log = logging.getLogger(__name__)

CSV_COLUMNS = [
    'First_Name',
    'Last_Name',
    'Birth_Date',
    'Email',
    'Classification',
    'Stage',
    'Existing_ID',
    'Conflict_ID',
    'Candidate_IDs',
    'Best_Score',
]


def _resolution_to_row(resolution: Resolution) -> dict:
    """Convert a Resolution to a flat dict for CSV/HTML output."""
    reg = resolution.registrant
    best = max((c.score for c in resolution.candidates), default=None)
    return {
        'First_Name': reg.first_name,
        'Last_Name': reg.last_name,
        'Birth_Date': reg.birth_date,
        'Email': reg.email,
        'Classification': resolution.classification,
        'Stage': resolution.stage,
        'Existing_ID': resolution.existing_id or '',
        'Conflict_ID': resolution.conflict.id if resolution.conflict else '',
        'Candidate_IDs': ', '.join(c.participant.id for c in resolution.candidates),
        'Best_Score': f'{best:.4f}' if best is not None else '',
        # Full records for the review section of the HTML report
        '_conflict': resolution.conflict,
        '_candidates': resolution.candidates,
    }


def write_csv_report(resolutions: list[Resolution], output_path: Path) -> None:
    """Write resolution results as a CSV report.

    Uses UTF-8 with BOM (utf-8-sig) and semicolon delimiter for
    compatibility with Excel.

    Args:
        resolutions: List of resolutions.
        output_path: Path for the output CSV file.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, 'w', newline='', encoding='utf-8-sig') as f:
        writer = csv.DictWriter(
            f, fieldnames=CSV_COLUMNS, delimiter=';', extrasaction='ignore',
        )
        writer.writeheader()
        for resolution in resolutions:
            writer.writerow(_resolution_to_row(resolution))

    log.info("CSV-Report geschrieben: %s (%d Zeilen)", output_path, len(resolutions))


def write_html_report(
    resolutions: list[Resolution],
    output_path: Path,
    title: str = '',
) -> None:
    """Write resolution results as an HTML review report using Jinja2.

    Args:
        resolutions: List of resolutions.
        output_path: Path for the output HTML file.
        title: Name of the registrant file (for the report title).
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    env = Environment(
        loader=PackageLoader('participants', 'templates'),
        autoescape=True,
    )
    template = env.get_template('report.html')

    html = template.render(
        title=title,
        rows=[_resolution_to_row(r) for r in resolutions],
        stats=compute_stats(resolutions),
        columns=CSV_COLUMNS,
    )

    output_path.write_text(html, encoding='utf-8')
    log.info("HTML-Report geschrieben: %s", output_path)


def compute_stats(resolutions: list[Resolution]) -> dict:
    """Compute summary statistics from resolutions."""
    return {
        'total': len(resolutions),
        'exact': sum(1 for r in resolutions if r.classification == EXACT),
        'exact_fuzzy': sum(
            1 for r in resolutions if r.classification == EXACT and r.candidates
        ),
        'email_conflict': sum(1 for r in resolutions if r.classification == EMAIL_CONFLICT),
        'ambiguous': sum(1 for r in resolutions if r.classification == AMBIGUOUS),
        'none': sum(1 for r in resolutions if r.classification == NONE),
    }


def print_summary(resolutions: list[Resolution], title: str = '') -> None:
    """Print a summary of resolutions to stdout.

    Args:
        resolutions: List of resolutions.
        title: Name of the registrant file.
    """
    stats = compute_stats(resolutions)

    print(f"\n=== Abgleich-Report: {title} ===")
    print(f"Anmeldungen gesamt:        {stats['total']:>5}")
    print(f"Bereits vorhanden:         {stats['exact']:>5}")
    print(f"  - davon per Fuzzy-Match: {stats['exact_fuzzy']:>5}")
    print(f"E-Mail-Konflikte:          {stats['email_conflict']:>5}")
    print(f"Zu pruefen (mehrdeutig):   {stats['ambiguous']:>5}")
    print(f"Neu anzulegen:             {stats['none']:>5}")
    print()
