import re
from typing import Optional
from urllib.parse import parse_qs, urlparse

VIEW_PATH = re.compile(r"/jobs/view/(\d+)/?")


def canonical_url(url: str) -> str:
    parsed = urlparse(url)
    path = parsed.path.rstrip("/")
    # Drop the fragment; the query carries currentJobId and must stay
    base = f"{parsed.scheme}://{parsed.netloc}{path}" if parsed.scheme and parsed.netloc else path
    return f"{base}?{parsed.query}" if parsed.query else base


def is_job_page(url: Optional[str]) -> bool:
    """Search results with a selected job, a job view, or a job collection."""
    if not url:
        return False
    parsed = urlparse(url)
    path = parsed.path
    if "/jobs/search" in path and "currentJobId=" in parsed.query:
        return True
    if VIEW_PATH.search(path):
        return True
    return "/jobs/collections/" in path


def job_id_from_url(url: Optional[str]) -> Optional[str]:
    if not url:
        return None
    parsed = urlparse(url)
    values = parse_qs(parsed.query).get("currentJobId")
    if values and values[0]:
        return values[0]
    m = VIEW_PATH.search(parsed.path)
    if m:
        return m.group(1)
    return None
