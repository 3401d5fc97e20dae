"""Prefixed opaque identifiers.

The prefix tells an operator reading a log line or webhook payload what
kind of record an id refers to.
"""

import uuid

CONTACT = "ct_"
ENRICHMENT_JOB = "ej_"
SCORING_JOB = "sj_"
GUEST_SCORE = "gs_"
AUDIT_LOG = "aud_"
WEBHOOK_EVENT = "whk_"


def generate_id(prefix: str) -> str:
    return f"{prefix}{uuid.uuid4().hex[:16]}"
