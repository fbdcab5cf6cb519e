"""
Page location: the shareable URL of the current session.

Stands in for ``window.location`` plus ``history.replaceState``. Query
parameters are rewritten in place; nothing is navigated or reloaded.
"""

from typing import Mapping, Optional
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from .events import EventEmitter

URL_CHANGED = "url_changed"


class PageLocation(EventEmitter):
    """Mutable URL whose query string mirrors part of the session state."""

    def __init__(self, href: str = "http://localhost/") -> None:
        super().__init__()
        self._href = href

    @property
    def href(self) -> str:
        return self._href

    @property
    def query(self) -> dict[str, str]:
        return dict(parse_qsl(urlsplit(self._href).query, keep_blank_values=True))

    def get_param(self, name: str) -> Optional[str]:
        return self.query.get(name)

    def set_params(self, params: Mapping[str, Optional[str]]) -> None:
        """Set or delete query parameters, preserving all others.

        A value of None or "" deletes the parameter.
        """
        parts = urlsplit(self._href)
        query = dict(parse_qsl(parts.query, keep_blank_values=True))

        for name, value in params.items():
            if value is None or value == "":
                query.pop(name, None)
            else:
                query[name] = str(value)

        href = urlunsplit(parts._replace(query=urlencode(query)))
        if href != self._href:
            self._href = href
            self.emit(URL_CHANGED, href)
