"""A tool that looks up the introduction of a Wikipedia article."""

from __future__ import annotations

import json
import logging
from typing import Any, Mapping

import requests

from .crew import Tool, ToolError

log = logging.getLogger(__name__)

API_URL = "https://en.wikipedia.org/w/api.php"


def first_extract(data: Any) -> str:
    """Return the plain-text extract of the first page in a query response."""
    if not isinstance(data, Mapping):
        raise ToolError("unexpected response from wikipedia")
    query = data.get("query") or {}
    if not isinstance(query, Mapping):
        raise ToolError("unexpected response from wikipedia")
    pages = query.get("pages") or {}
    if not isinstance(pages, Mapping):
        raise ToolError("unexpected response from wikipedia")
    for page in pages.values():
        if not isinstance(page, Mapping):
            raise ToolError("unexpected response from wikipedia")
        extract = page.get("extract") or ""
        if not isinstance(extract, str):
            raise ToolError("unexpected response from wikipedia")
        return extract
    raise ToolError("no results found")


class Wikipedia(Tool):
    """Returns the summary of the Wikipedia article with the given title."""

    name = "wikipedia"
    example = "wikipedia: Django"
    description = "Returns a summary from searching Wikipedia"

    def __init__(self, session: requests.Session | None = None):
        self.session = session or requests.Session()

    def run(self, *args: str) -> str:
        if len(args) != 1:
            raise ToolError("expected one argument")
        params = {
            "action": "query",
            "exintro": "",
            "explaintext": "",
            "format": "json",
            "prop": "extracts",
            "redirects": "1",
            "titles": args[0],
        }
        try:
            response = self.session.get(API_URL, params=params)
        except requests.RequestException as exc:
            log.error("failed to get response from %s: %s", API_URL, exc)
            raise ToolError(f"request to wikipedia failed: {exc}") from exc
        try:
            data = json.loads(response.text)
        except ValueError as exc:
            raise ToolError(f"invalid response from wikipedia: {exc}") from exc
        return first_extract(data)