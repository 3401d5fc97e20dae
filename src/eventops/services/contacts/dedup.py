"""Contact dedup keys."""


def normalize_email(email: str | None) -> str | None:
    if not email:
        return None
    normalized = email.strip().lower()
    return normalized or None


def compute_dedup_key(full_name: str | None, emails: list[dict]) -> str | None:
    """Lower-cased ``"<primary email>:<full name>"``, or None if either part is missing.

    The primary email is the first entry flagged ``primary``, else the first entry.
    """
    primary = next((e.get("email") for e in emails if e.get("primary")), None)
    if primary is None and emails:
        primary = emails[0].get("email")
    if not primary or not full_name:
        return None
    return f"{primary.strip().lower()}:{full_name.strip().lower()}"
