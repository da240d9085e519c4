"""Turtle collab session state: which shared train updates are pushed to."""

import re
import threading
from typing import Optional
from urllib.parse import urlparse

# Anchored at the end only, so a host in front of "/scout/" is allowed.
# "/scout" is possessive so "/scout/<session>/" can't match as session="scout".
COLLAB_LINK_REGEX = re.compile(r"(?:^(?:/scout)?+/?|/scout/)(?P<session>\w+)/(?P<password>\w+)/?\s*$")


class NoPriorSessionError(Exception):
    """Raised when rejoining without ever having joined a collab session."""


def parse_collab_link(session_link: str) -> Optional[tuple[str, str]]:
    '''
    Parses "[/scout]/<session>/<password>[/]" into (session, password).
    Full links ("https://host/scout/<session>/<password>") are reduced to their path first,
    and a host without a scheme ("host/scout/<session>/<password>") is accepted too.
    '''
    link = (session_link or "").strip()
    parsed_url = urlparse(link)
    if parsed_url.scheme and parsed_url.netloc:
        link = parsed_url.path
    match = COLLAB_LINK_REGEX.search(link)
    if match is None:
        return None
    return match.group("session"), match.group("password")


class CollabSession:
    '''
    Credentials and active flag of the current Turtle collab session.

    Leaving only clears the active flag. The slug and password are kept so the
    session can be rejoined later. All three fields are read and written under
    one lock, so a (slug, password) pair is never observed half updated.
    '''

    def __init__(self):
        self._lock = threading.Lock()
        self._slug = ""
        self._password = ""
        self._active = False

    @property
    def is_active(self) -> bool:
        with self._lock:
            return self._active

    def snapshot(self) -> tuple[str, str, bool]:
        with self._lock:
            return self._slug, self._password, self._active

    def join(self, session_link: str) -> Optional[tuple[str, str]]:
        '''
        Joins the session named by a collab link such as "/scout/<session>/<password>/".
        Returns the parsed (session, password), or None if the link did not match.
        '''
        parsed = parse_collab_link(session_link)
        if parsed is None:
            return None
        with self._lock:
            self._slug, self._password = parsed
            self._active = True
        return parsed

    def rejoin(self) -> None:
        with self._lock:
            if not self._slug or not self._password:
                raise NoPriorSessionError(
                    "cannot rejoin the last turtle collab session as there is no last session."
                )
            self._active = True

    def leave(self) -> None:
        with self._lock:
            self._active = False
