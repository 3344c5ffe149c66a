from __future__ import annotations

import re
from typing import List, Optional


CANONICAL_PROFILE_PREFIX = "https://www.linkedin.com/in/"

# Known profile URL shapes; group 1 is the profile identifier
_PROFILE_PATTERNS = [
    re.compile(r"linkedin\.com/in/([^/?#]+)", re.IGNORECASE),
    re.compile(r"linkedin\.com/sales/lead/([^/?#]+)", re.IGNORECASE),
    re.compile(r"linkedin\.com/sales/people/([^/?#]+)", re.IGNORECASE),
]

_IN_PATTERN = _PROFILE_PATTERNS[0]


def extract_public_id(url: Optional[str]) -> Optional[str]:
    """Return the /in/{id} segment of a LinkedIn URL, if any."""
    if not url:
        return None
    m = _IN_PATTERN.search(url)
    return m.group(1) if m else None


def normalize_linkedin_url(profile_url: Optional[str], public_id: Optional[str] = None) -> Optional[str]:
    """Canonicalize a profile URL to https://www.linkedin.com/in/{id}.

    A public id wins over the URL. Sales Navigator lead/people URLs are
    rewritten to the /in/ form. Unknown shapes are returned unchanged.
    """
    public_id = (public_id or "").strip()
    if public_id:
        return f"{CANONICAL_PROFILE_PREFIX}{public_id}"
    if not profile_url:
        return None
    url = profile_url.strip()
    for pattern in _PROFILE_PATTERNS:
        m = pattern.search(url)
        if m:
            return f"{CANONICAL_PROFILE_PREFIX}{m.group(1)}"
    return url


def linkedin_url_variations(url: Optional[str]) -> List[str]:
    """Stored-URL spellings that refer to the same /in/ profile.

    {https, http} x {www., bare host} x {trailing slash, none}, plus the
    scheme-less form. The input itself comes first. Order is stable and
    duplicates are dropped.
    """
    if not url:
        return []
    variations: List[str] = [url]
    public_id = extract_public_id(url)
    if public_id:
        for scheme in ("https", "http"):
            for host in ("www.linkedin.com", "linkedin.com"):
                base = f"{scheme}://{host}/in/{public_id}"
                variations.append(base)
                variations.append(f"{base}/")
        variations.append(f"linkedin.com/in/{public_id}")
    seen = set()
    out = []
    for v in variations:
        if v not in seen:
            seen.add(v)
            out.append(v)
    return out
