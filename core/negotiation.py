"""
core/negotiation.py -- Decide between a JSON and an HTML response.

The same logical operation answers browsers with a rendered view (or a redirect)
and scripts with JSON. The decision is made here, once, from request metadata;
error normalization and entity code never branch on it.
"""

from __future__ import annotations

from collections.abc import Mapping

_READS = {"GET", "HEAD"}


def wants_json(headers: Mapping[str, str], path: str = "", method: str = "GET") -> bool:
    """Return True when the caller should receive JSON rather than HTML.

    JSON is chosen for:
      - anything under /api/
      - an Accept header asking for application/json but not text/html
      - fetch/XHR calls flagged with X-Requested-With: XMLHttpRequest
      - mutations sent from a dashboard page (Referer contains "dashboard"),
        which the dashboard widgets issue with fetch() and read as JSON

    Plain navigation away from the dashboard (GET) still gets HTML.
    """
    if path.startswith("/api/"):
        return True
    accept = headers.get("accept", "").lower()
    if "application/json" in accept and "text/html" not in accept:
        return True
    if headers.get("x-requested-with", "").lower() == "xmlhttprequest":
        return True
    if method.upper() in _READS:
        return False
    return "dashboard" in headers.get("referer", "")
