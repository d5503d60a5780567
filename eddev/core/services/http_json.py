"""
Minimal JSON-over-HTTPS client used for Packagist and the GitHub API.
"""

from __future__ import annotations

import json
import logging
import urllib.error
import urllib.request
from typing import Any

from eddev import __version__

logger = logging.getLogger(__name__)

USER_AGENT = f"eddev/{__version__}"
DEFAULT_TIMEOUT = 30


def get_json(url: str, headers: dict[str, str] | None = None, timeout: int = DEFAULT_TIMEOUT) -> Any:
    """GET ``url`` and decode the JSON body.

    Raises:
        urllib.error.HTTPError: On a non-2xx response (status on ``.code``).
        urllib.error.URLError: On connection failure.
        ValueError: If the body is not JSON.
    """
    req = urllib.request.Request(url, headers={"User-Agent": USER_AGENT, **(headers or {})})
    logger.debug("GET %s", url)
    with urllib.request.urlopen(req, timeout=timeout) as resp:
        return json.loads(resp.read().decode())
