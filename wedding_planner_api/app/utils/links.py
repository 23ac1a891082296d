"""
Link helpers.

Documents are usually shared as links to an online office suite.  For
the "download" button the viewer link is rewritten to the provider's
direct export endpoint; anything that is not recognised is returned as
is.  Task titles may embed links using ``[text](url)`` markup.
"""

import re
from typing import Dict, List, Optional

_DOCS_RE = re.compile(r"^(https?://docs\.google\.com/document/d/[^/?#]+)")
_SHEETS_RE = re.compile(r"^(https?://docs\.google\.com/spreadsheets/d/[^/?#]+)")
_SLIDES_RE = re.compile(r"^(https?://docs\.google\.com/presentation/d/[^/?#]+)")
_DRIVE_FILE_RE = re.compile(r"^https?://drive\.google\.com/file/d/([^/?#]+)")
_DRIVE_OPEN_RE = re.compile(r"^https?://drive\.google\.com/open\?(?:.*&)?id=([^&#]+)")

_MARKUP_LINK_RE = re.compile(r"\[([^\]]+)\]\(([^)]+)\)")

DRIVE_DOWNLOAD_URL = "https://drive.google.com/uc?export=download&id={file_id}"


def to_download_url(link: Optional[str]) -> Optional[str]:
    """Rewrite a document link to a direct download URL.

    Parameters
    ----------
    link : Optional[str]
        Link as entered by the organizer.

    Returns
    -------
    Optional[str]
        Export URL for Google Docs (PDF), Sheets (XLSX), Slides (PDF)
        and Drive files; the input unchanged for anything else.
    """
    if not link:
        return link
    match = _DOCS_RE.match(link)
    if match:
        return f"{match.group(1)}/export?format=pdf"
    match = _SHEETS_RE.match(link)
    if match:
        return f"{match.group(1)}/export?format=xlsx"
    match = _SLIDES_RE.match(link)
    if match:
        return f"{match.group(1)}/export/pdf"
    match = _DRIVE_FILE_RE.match(link) or _DRIVE_OPEN_RE.match(link)
    if match:
        return DRIVE_DOWNLOAD_URL.format(file_id=match.group(1))
    return link


def normalize_href(link: str) -> str:
    """Prefix ``https://`` to links entered without a scheme."""
    if link.startswith("http://") or link.startswith("https://"):
        return link
    return f"https://{link}"


def parse_text_with_links(text: str) -> List[Dict[str, str]]:
    """Split ``text`` into plain and link parts.

    ``"Book [the venue](venue.com) now"`` becomes a text part, a link
    part with ``href="https://venue.com"`` and another text part.  Text
    without markup is returned as a single text part.
    """
    parts: List[Dict[str, str]] = []
    last = 0
    for match in _MARKUP_LINK_RE.finditer(text):
        if match.start() > last:
            parts.append({"type": "text", "content": text[last:match.start()]})
        parts.append({"type": "link", "content": match.group(1), "href": normalize_href(match.group(2))})
        last = match.end()
    if last < len(text):
        parts.append({"type": "text", "content": text[last:]})
    if not parts:
        return [{"type": "text", "content": text}]
    return parts
