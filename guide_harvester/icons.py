"""
Icon embedding: download the guide logo and inline it as a data URI.
"""

import base64
import logging
from typing import Optional

import requests

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = 'image/png'


def create_session(user_agent: str) -> requests.Session:
    """Create a requests session that looks like the browser used for the crawl."""
    session = requests.Session()
    session.headers.update({
        'User-Agent': user_agent,
        'Accept': 'image/avif,image/webp,image/apng,image/*,*/*;q=0.8',
        'Accept-Language': 'pt-BR,pt;q=0.9,en-US;q=0.8,en;q=0.7',
    })
    return session


def fetch_icon_data_uri(
    url: str,
    session: Optional[requests.Session] = None,
    timeout: float = 15,
) -> Optional[str]:
    """
    Fetch ``url`` and return it as ``data:<content-type>;base64,...``.

    Returns None when the URL is empty, the response is not 2xx, or the
    request fails for any reason; the plan is then written without an icon.
    """
    if not url:
        return None
    if url.startswith('data:'):
        return url

    http = session or requests
    try:
        response = http.get(url, timeout=timeout)
    except requests.RequestException as exc:
        logger.warning(f"[ICON] Could not download {url}: {exc}")
        return None

    if not response.ok:
        logger.warning(f"[ICON] Download failed for {url}: status {response.status_code}")
        return None

    content_type = response.headers.get('content-type') or DEFAULT_CONTENT_TYPE
    encoded = base64.b64encode(response.content).decode('ascii')
    return f"data:{content_type};base64,{encoded}"
