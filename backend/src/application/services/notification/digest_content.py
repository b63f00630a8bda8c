"""
Digest email content: subject lines, HTML body and unsubscribe tokens
"""
import base64
import hashlib
import hmac
import json
from datetime import datetime
from html import escape
from typing import List, Optional
from uuid import UUID

from domain.entities import JobPosting
from domain.enums import EmailFrequency

CARDS_SHOWN = 5


def _plural(count: int, word: str, suffix: str = "es") -> str:
    return word if count == 1 else f"{word}{suffix}"


def build_subject_line(frequency: EmailFrequency, count: int, now: datetime) -> str:
    matches = _plural(count, "Match")
    if frequency == EmailFrequency.DAILY:
        return f"{count} New Job {matches} for You"
    if frequency == EmailFrequency.WEEKLY:
        return f"Your Weekly Job Digest: {count} New {matches}"
    if frequency == EmailFrequency.MONTHLY:
        return f"{now.strftime('%B')} Job Market Summary"
    return f"{count} New Job {matches}"


def _intro_text(frequency: EmailFrequency, count: int) -> str:
    matches = _plural(count, "match")
    if frequency == EmailFrequency.DAILY:
        return f"We found {count} new job {matches} for you today."
    if frequency == EmailFrequency.WEEKLY:
        return f"Here's your weekly roundup: {count} new job {matches} that fit your profile."
    if frequency == EmailFrequency.MONTHLY:
        return f"Your monthly job market summary is here with {count} new {matches}."
    return f"We found {count} new job {matches} for you."


def _job_card(posting: JobPosting, app_url: str) -> str:
    location = escape(posting.location or "Location not specified")
    work_type = f" &bull; {posting.work_type.value.capitalize()}" if posting.work_type else ""
    return (
        '<div style="border:1px solid #e5e7eb;border-radius:8px;padding:20px;margin-bottom:16px;">'
        f'<h3 style="margin:0 0 4px 0;">{escape(posting.title)}</h3>'
        f'<p style="margin:0 0 8px 0;color:#6b7280;">{escape(posting.company_name)}</p>'
        f'<p style="margin:0;"><strong>{posting.match_score}% Match</strong></p>'
        f'<p style="margin:8px 0 0 0;">{location}{work_type}</p>'
        f'<p style="margin:0;">{escape(str(posting.salary_range))}</p>'
        f'<p style="margin:16px 0 0 0;"><a href="{app_url}/jobs/{posting.id}">View in App</a>'
        f' &middot; <a href="{escape(posting.source_url)}">View Original</a></p>'
        "</div>"
    )


def build_email_html(
    recipient_name: Optional[str],
    postings: List[JobPosting],
    frequency: EmailFrequency,
    app_url: str,
    unsubscribe_url: str
) -> str:
    greeting = f"Hi {escape(recipient_name)}," if recipient_name else "Hi there,"
    cards = "".join(_job_card(p, app_url) for p in postings[:CARDS_SHOWN])

    more = ""
    if len(postings) > CARDS_SHOWN:
        more = (
            f'<p style="text-align:center;"><a href="{app_url}/jobs">'
            f"View {len(postings) - CARDS_SHOWN} more matches</a></p>"
        )

    return (
        "<!DOCTYPE html><html><head><meta charset=\"utf-8\"><title>New Job Matches</title></head>"
        '<body style="font-family:Arial,sans-serif;background:#f3f4f6;">'
        '<div style="max-width:600px;margin:0 auto;padding:40px 20px;">'
        f"<p>{greeting}</p>"
        f"<p>{_intro_text(frequency, len(postings))}</p>"
        f"{cards}{more}"
        f'<p style="text-align:center;"><a href="{app_url}/jobs">View All Matches</a></p>'
        '<p style="text-align:center;font-size:12px;color:#6b7280;">'
        "You're receiving this email because you signed up for job match notifications. "
        f'<a href="{unsubscribe_url}">Unsubscribe</a> or '
        f'<a href="{app_url}/settings/notifications">manage preferences</a>.</p>'
        "</div></body></html>"
    )


def _b64(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _unb64(data: str) -> bytes:
    return base64.urlsafe_b64decode(data + "=" * (-len(data) % 4))


def _signature(payload: str, secret: str) -> str:
    return hmac.new(secret.encode("utf-8"), payload.encode("ascii"), hashlib.sha256).hexdigest()[:32]


def generate_unsubscribe_token(candidate_id: UUID, secret: str) -> str:
    payload = _b64(json.dumps({"candidateId": str(candidate_id), "action": "unsubscribe"}).encode("utf-8"))
    return f"{payload}.{_signature(payload, secret)}"


def parse_unsubscribe_token(token: str, secret: str) -> Optional[UUID]:
    """Candidate ID from a valid token, or None when malformed or tampered"""
    try:
        payload, signature = token.split(".", 1)
        if not hmac.compare_digest(signature, _signature(payload, secret)):
            return None
        data = json.loads(_unb64(payload))
        if data.get("action") != "unsubscribe":
            return None
        return UUID(data["candidateId"])
    except (ValueError, KeyError, TypeError, UnicodeDecodeError):
        return None


def build_unsubscribe_url(app_url: str, candidate_id: UUID, secret: str) -> str:
    return f"{app_url}/api/v1/job-search/unsubscribe?token={generate_unsubscribe_token(candidate_id, secret)}"
