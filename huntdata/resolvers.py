"""Name -> id tables used to resolve dataset names into local game ids."""

import json
from pathlib import Path
from urllib.parse import urlparse

import requests

defaults = {
    "request_timeout": 10,      #Seconds to wait when fetching a name table from a URL.
}


class NameTableError(Exception):
    """Raised when a name table cannot be read or is not a name -> id object."""


class NameTable:
    """Case-insensitive lookup of game ids by human readable name."""

    def __init__(self, names):
        self._ids = {}
        for name, game_id in dict(names).items():
            if isinstance(game_id, bool) or not isinstance(game_id, int) or game_id < 0:
                raise NameTableError(f"Id for '{name}' must be a non-negative integer, got {game_id!r}")
            self._ids[self._normalize(name)] = game_id

    @staticmethod
    def _normalize(name) -> str:
        return str(name or "").strip().lower()

    def __len__(self):
        return len(self._ids)

    def __contains__(self, name):
        return self._normalize(name) in self._ids

    def resolve(self, name: str) -> int | None:
        return self._ids.get(self._normalize(name))


def _is_url(source: str) -> bool:
    return urlparse(source).scheme in ("http", "https")


def _fetch_names(url: str, timeout: float):
    response = requests.get(url, timeout=timeout)
    response.raise_for_status()
    return response.json()


def load_name_table(source, timeout: float = defaults["request_timeout"]) -> NameTable:
    '''
    Loads a NameTable from a JSON object of name -> id.
    The source may be a local file path or an http(s) URL.

    :param source: Path or URL of the JSON document.
    :param timeout: Request timeout in seconds, only used for URLs.
    :raises NameTableError: If the document cannot be read or has the wrong shape.
    '''
    source = str(source)
    try:
        if _is_url(source):
            raw = _fetch_names(source, timeout)
        else:
            with Path(source).open("r", encoding="utf-8") as f:
                raw = json.load(f)
    except (OSError, ValueError, requests.RequestException) as e:
        raise NameTableError(f"Failed to read name table from {source}: {e}") from e

    if not isinstance(raw, dict):
        raise NameTableError(f"Name table at {source} must be a JSON object of name -> id.")
    return NameTable(raw)
