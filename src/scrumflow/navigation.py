"""Navigation back into the ScrumFlow web app."""

from __future__ import annotations

import webbrowser
from typing import Protocol
from urllib.parse import quote

from .log import get_logger

_log = get_logger("navigation")


class Navigator(Protocol):
    """Something that can bring a project's view to the front."""

    def open_project(self, project_id: str) -> bool:
        """Open the project view. Returns False if that didn't work."""
        ...


class BrowserNavigator:
    """Opens project pages in the user's default browser."""

    def __init__(self, base_url: str) -> None:
        self.base_url = base_url.rstrip("/")

    def project_url(self, project_id: str) -> str:
        return f"{self.base_url}/projects/{quote(str(project_id), safe='')}"

    def open_project(self, project_id: str) -> bool:
        url = self.project_url(project_id)
        try:
            opened = webbrowser.open(url, new=2)
        except webbrowser.Error as e:
            _log.warning("could not open %s: %s", url, e)
            return False
        if not opened:
            _log.warning("no browser available to open %s", url)
        return opened
