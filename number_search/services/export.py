"""
CSV export for the lead list and bulk lookup results.
"""

import csv
import io
from datetime import date
from typing import Any, Dict, List, Optional, Sequence

from ..models import Lead, LookupResult

LEAD_COLUMNS = [
    "Name", "Source", "Role", "Company", "Phone",
    "Email", "LinkedIn", "Location", "Headline", "Added At",
]

LOOKUP_COLUMNS = ["Name", "Matched Name", "Phone Numbers", "Email", "Source", "Status"]

SOURCE_LABELS = {"forager": "Forager", "aviato": "Aviato"}


def to_csv(rows: Sequence[Dict[str, Any]], columns: Sequence[str]) -> str:
    """Header line first, then one line per row. Fields are quoted only when needed."""
    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")

    # Header
    writer.writerow(columns)

    # Data rows
    for row in rows:
        writer.writerow([row.get(c, "") for c in columns])

    return output.getvalue()


def export_filename(prefix: str, today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"{prefix}_{today.isoformat()}.csv"


def leads_csv(leads: List[Lead]) -> str:
    rows = [
        {
            "Name": lead.full_name,
            "Source": SOURCE_LABELS.get(lead.source, lead.source),
            "Role": lead.role_title,
            "Company": lead.company_name,
            "Phone": lead.phone_number,
            "Email": lead.email,
            "LinkedIn": lead.linkedin_url,
            "Location": lead.location,
            "Headline": lead.headline,
            "Added At": lead.added_at,
        }
        for lead in leads
    ]
    return to_csv(rows, LEAD_COLUMNS)


def lookup_results_csv(results: List[LookupResult]) -> str:
    rows = [
        {
            "Name": r.full_name,
            "Matched Name": r.matched_name or "",
            "Phone Numbers": "; ".join(r.phone_numbers),
            "Email": r.email or "",
            "Source": r.source or "",
            "Status": r.status,
        }
        for r in results
    ]
    return to_csv(rows, LOOKUP_COLUMNS)
