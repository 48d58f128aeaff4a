"""Admin dashboard statistics and CSV export"""
import csv
import io
import json
from typing import Any, Dict, List

CSV_HEADERS = ["ID", "Email", "Submitted at", "Responses"]


def summarize_stats(forms: List[Dict[str, Any]], total_responses: int, profiles: List[Dict[str, Any]]) -> Dict[str, int]:
    """Counts shown on the admin dashboard"""
    def count(rows, key, value):
        return sum(1 for row in rows if row.get(key) == value)

    return {
        "totalForms": len(forms),
        "publishedForms": count(forms, "status", "published"),
        "draftForms": count(forms, "status", "draft"),
        "archivedForms": count(forms, "status", "archived"),
        "totalResponses": total_responses,
        "totalUsers": len(profiles),
        "adminUsers": count(profiles, "role", "admin"),
        "clientUsers": count(profiles, "role", "client"),
    }


def _flatten_newlines(value: Any) -> Any:
    if isinstance(value, str):
        return value.replace("\r\n", " ").replace("\n", " ").replace("\r", " ")
    if isinstance(value, dict):
        return {key: _flatten_newlines(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_flatten_newlines(item) for item in value]
    return value


def responses_to_csv(responses: List[Dict[str, Any]]) -> str:
    """
    One line per response; answers are kept as a single JSON cell.

    Newlines inside answers are flattened so each response stays on one line.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for row in responses:
        answers = json.dumps(_flatten_newlines(row.get("response_data") or {}), ensure_ascii=False)
        writer.writerow([
            row.get("id"),
            row.get("user_email") or "N/A",
            row.get("submitted_at") or "",
            answers,
        ])
    return buffer.getvalue()
