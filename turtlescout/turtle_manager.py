"""Main entry point for talking to Turtle.

TurtleManager owns the loaded Turtle reference data, the collab session state
and the HTTP session, and exposes the two remote operations: pushing the
current train to the joined collab session and generating a new shareable
train link.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Sequence

import aiohttp

from huntdata.patches import Patch
from huntdata.turtle_data import Resolver, TurtleData, load_turtle_data
from turtlescout.collab_session import CollabSession
from turtlescout.config import TurtleSettings
from turtlescout.http_utils import HttpResult, do_request, log_http_error
from turtlescout.train import (
    NoSupportedMobsError,
    TrainMob,
    build_generation_payload,
    build_update_payload,
)

LOGGER_NAME = "turtlescout.turtle"

'''
Messages logged when a session update fails, one per failure type.
'''
update_error_messages = {
    "timeout": "timed out while trying to post updates to turtle session.",
    "canceled": "operation canceled while trying to post updates to turtle session.",
    "http_exception": "http exception while trying to post updates to turtle session.",
    "unknown": "unknown exception while trying to post updates to turtle session.",
}

'''
User facing messages returned when generating a link fails, one per failure type.
'''
generate_error_messages = {
    "timeout": "timed out posting the train to turtle ;-;",
    "canceled": "generating the turtle link was canceled >_>",
    "http_exception": "something failed when communicating with turtle :T",
    "unknown": "an unknown error happened while generating the turtle link D:",
}


class TurtleHttpStatus(Enum):
    SUCCESS = "success"
    NO_SUPPORTED_MOBS = "no_supported_mobs"
    HTTP_ERROR = "http_error"
    NOT_COLLABBING = "not_collabbing"


@dataclass(frozen=True)
class TrainResponse:
    slug: str
    collaborator_password: str
    readonly_url: str
    collaborate_url: str

    @classmethod
    def from_json(cls, payload: dict) -> "TrainResponse":
        fields = {}
        for name in ("slug", "collaborator_password", "readonly_url", "collaborate_url"):
            value = payload[name]
            if not isinstance(value, str):
                raise ValueError(f"Turtle response field '{name}' must be a string, got {value!r}")
            fields[name] = value
        return cls(**fields)


@dataclass(frozen=True)
class LinkData:
    slug: str
    collab_password: str
    readonly_url: str
    collab_url: str
    highest_patch: Patch

    @classmethod
    def from_response(cls, response: TrainResponse, highest_patch: Patch) -> "LinkData":
        return cls(
            slug=response.slug,
            collab_password=response.collaborator_password,
            readonly_url=response.readonly_url,
            collab_url=response.collaborate_url,
            highest_patch=highest_patch,
        )


@dataclass(frozen=True)
class GenerateResult:
    link: Optional[LinkData] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _log_error(logger, result: HttpResult, messages: dict) -> str:
    return log_http_error(
        logger,
        result.error,
        messages["timeout"],
        messages["canceled"],
        messages["http_exception"],
        messages["unknown"],
    )


class TurtleManager:
    '''
    Pushes recorded hunt trains to Turtle.

    :param settings: API location, timeout and reporting options.
    :param turtle_data: Lookup tables built by load_turtle_data().
    :param player_tag: Returns the current player's name@world, or None when not logged in.
    :param logger: Logger for request failures. Defaults to the "turtlescout.turtle" logger.
    :param session: aiohttp session to use. When omitted one is created on first use and closed by close().
    '''

    def __init__(
        self,
        settings: TurtleSettings,
        turtle_data: TurtleData,
        player_tag: Callable[[], Optional[str]] | None = None,
        logger: logging.Logger | None = None,
        session: aiohttp.ClientSession | None = None,
    ):
        self._settings = settings
        self._data = turtle_data
        self._player_tag = player_tag
        self._log = logger or logging.getLogger(LOGGER_NAME)
        self._http_session = session
        self._owns_http_session = session is None
        self.collab_session = CollabSession()

    @classmethod
    def from_data_file(
        cls,
        settings: TurtleSettings,
        resolve_mob_id: Resolver,
        resolve_territory_id: Resolver,
        data_file=None,
        **kwargs,
    ) -> "TurtleManager":
        """Loads the Turtle dataset and builds a manager. Load failures propagate."""
        turtle_data = load_turtle_data(
            data_file or settings.data_file,
            resolve_mob_id,
            resolve_territory_id,
        )
        return cls(settings, turtle_data, **kwargs)

    @property
    def turtle_data(self) -> TurtleData:
        return self._data

    @property
    def is_collabbing(self) -> bool:
        return self.collab_session.is_active

    ## ---------------------------- Session lifecycle ---------------------------- ##
    def join_collab_session(self, session_link: str) -> Optional[tuple[str, str]]:
        return self.collab_session.join(session_link)

    def rejoin_last_collab_session(self) -> None:
        self.collab_session.rejoin()

    def leave_collab_session(self) -> None:
        self.collab_session.leave()

    ## ---------------------------- HTTP session ---------------------------- ##
    def _get_http_session(self) -> aiohttp.ClientSession:
        if self._http_session is None or self._http_session.closed:
            self._http_session = aiohttp.ClientSession()
            self._owns_http_session = True
        return self._http_session

    async def close(self) -> None:
        if self._owns_http_session and self._http_session is not None and not self._http_session.closed:
            await self._http_session.close()
        self._http_session = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    def _current_player_tag(self) -> Optional[str]:
        if not self._settings.include_name_in_session or self._player_tag is None:
            return None
        return self._player_tag()

    ## ---------------------------- Turtle operations ---------------------------- ##
    async def update_current_session(self, train: Sequence[TrainMob]) -> TurtleHttpStatus:
        '''
        Sends the train's sightings to the current collab session.
        Returns NOT_COLLABBING when no session is joined (never joined, or left), and
        NO_SUPPORTED_MOBS when nothing in the train can be sent. Neither makes a request.
        '''
        slug, password, active = self.collab_session.snapshot()
        if not active:
            return TurtleHttpStatus.NOT_COLLABBING
        payload = build_update_payload(
            train,
            self._data.mobs,
            self._data.territories,
            password,
            self._current_player_tag(),
        )
        if payload is None:
            return TurtleHttpStatus.NO_SUPPORTED_MOBS

        result = await do_request(
            self._get_http_session(),
            self._settings.api_base_url,
            "PATCH",
            f"{self._settings.api_train_path.rstrip('/')}/{slug}",
            payload,
            self._settings.api_timeout,
        )
        if not result.is_success:
            _log_error(self._log, result, update_error_messages)
            return TurtleHttpStatus.HTTP_ERROR
        return TurtleHttpStatus.SUCCESS

    async def generate_turtle_link(self, train: Sequence[TrainMob], allow_empty: bool = False) -> GenerateResult:
        '''
        Creates a new Turtle train from the recorded train and returns its links.

        :param train: Mobs recorded in game.
        :param allow_empty: Create the train even if no recorded mob is supported by Turtle.
        '''
        try:
            payload, highest_patch = build_generation_payload(
                train,
                self._data.mobs,
                self._data.territories,
                allow_empty=allow_empty,
                default_patch=self._settings.default_patch,
            )
        except NoSupportedMobsError as e:
            return GenerateResult(error=str(e))

        result = await do_request(
            self._get_http_session(),
            self._settings.api_base_url,
            "POST",
            self._settings.api_train_path,
            payload,
            self._settings.api_timeout,
            parse_response=lambda response: LinkData.from_response(TrainResponse.from_json(response), highest_patch),
        )
        if not result.is_success:
            return GenerateResult(error=_log_error(self._log, result, generate_error_messages))
        return GenerateResult(link=result.value)
