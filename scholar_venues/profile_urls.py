"""Google Scholar profile URL helpers."""

from typing import Optional
from urllib.parse import parse_qs, urlencode, urlparse, urlunparse

from config.settings import settings

# Row selector shared by every content source
RECORD_SELECTOR = "tr.gsc_a_tr"


def build_profile_url(user_id: str, language: Optional[str] = None) -> str:
    """Build the ARTICLES tab URL for a Scholar user id."""
    query = urlencode({"user": user_id, "hl": language or settings.scholar_language})
    return f"{settings.scholar_base_url}/citations?{query}"


def resolve_profile_url(profile: str) -> str:
    """Accept either a full profile URL or a bare user id."""
    if profile.startswith(("http://", "https://")):
        return profile
    return build_profile_url(profile)


def is_scholar_profile_url(url: str) -> bool:
    """Check that a URL points at a Scholar profile publication list.

    Individual article views (``view_op=view_citation``) are rejected;
    the profile root, ``list_works`` and ``list_colleagues`` are accepted.
    """
    if not url:
        return False

    # Must be on scholar.google domain
    if "scholar.google." not in url:
        return False

    # Must be on citations page
    if "/citations?" not in url:
        return False

    if "view_op=view_citation" in url:
        return False

    return "user=" in url and (
        "view_op=list_works" in url
        or "view_op=" not in url
        or "view_op=list_colleagues" in url
    )


def with_page_params(url: str, cstart: int, pagesize: int) -> str:
    """Return the profile URL asking for one batch of rows starting at ``cstart``."""
    parsed = urlparse(url)
    params = parse_qs(parsed.query, keep_blank_values=True)
    params["cstart"] = [str(cstart)]
    params["pagesize"] = [str(pagesize)]
    return urlunparse(parsed._replace(query=urlencode(params, doseq=True)))
