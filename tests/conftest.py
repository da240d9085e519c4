"""Shared fixtures: a small Turtle dataset, name tables and a fake Turtle API."""

from __future__ import annotations

import asyncio
import json
import logging

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from huntdata.resolvers import NameTable
from huntdata.turtle_data import load_turtle_data
from turtlescout.config import TurtleSettings

DATASET = {
    "ew": {
        "mobs": {"Sugriva": 31, "Yilan": 32, "Ker": 33},
        "maps": {
            "Thavnair": {
                "id": 5,
                "points": {
                    "1": {"x": 10.0, "y": 10.0},
                    "2": {"x": 20.5, "y": 30.0},
                },
            },
            "Labyrinthos": {"id": 6, "points": {}},
        },
    },
    "dt": {
        "mobs": {"Kirlirger": 41},
        "maps": {
            "Urqopacha": {"id": 8, "points": {"7": {"x": 1, "y": 1.5}}},
            "Nowhere": {"id": 9, "points": {}},
        },
    },
}

MOB_NAMES = {"Sugriva": 1001, "Yilan": 1002, "Kirlirger": 2001}
MAP_NAMES = {"Thavnair": 957, "Labyrinthos": 956, "Urqopacha": 1187}

TRAIN_RESPONSE = {
    "slug": "abc123",
    "collaborator_password": "pw987",
    "readonly_url": "https://turtle.test/scout/abc123",
    "collaborate_url": "https://turtle.test/scout/abc123/pw987",
}


@pytest.fixture(autouse=True)
def reset_package_loggers():
    yield
    for name in ("turtlescout", "huntdata"):
        logger = logging.getLogger(name)
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
        logger.propagate = True
        logger.setLevel(logging.NOTSET)


@pytest.fixture
def mob_names() -> NameTable:
    return NameTable(MOB_NAMES)


@pytest.fixture
def map_names() -> NameTable:
    return NameTable(MAP_NAMES)


@pytest.fixture
def write_dataset(tmp_path):
    def _write(data, name="turtle_data.json"):
        path = tmp_path / name
        path.write_text(json.dumps(data), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def dataset_path(write_dataset):
    return write_dataset(DATASET)


@pytest.fixture
def turtle_data(dataset_path, mob_names, map_names):
    return load_turtle_data(dataset_path, mob_names.resolve, map_names.resolve)


class FakeTurtle:
    """Records requests and answers like the Turtle train API."""

    def __init__(self):
        self.requests = []
        self.status = 200
        self.delay = 0.0
        self.train_response = dict(TRAIN_RESPONSE)
        self.base_url = ""

    async def handle(self, request: web.Request) -> web.StreamResponse:
        body = await request.json()
        self.requests.append((request.method, request.path, body))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.status >= 400:
            return web.Response(status=self.status, text="turtle is down")
        if request.method == "POST":
            return web.json_response(self.train_response)
        return web.Response(text="ok")


@pytest_asyncio.fixture
async def turtle_server():
    fake = FakeTurtle()
    app = web.Application()
    app.router.add_route("*", "/{tail:.*}", fake.handle)
    server = TestServer(app)
    await server.start_server()
    fake.base_url = str(server.make_url("/"))
    yield fake
    await server.close()


@pytest.fixture
def settings_for():
    def _settings(fake: FakeTurtle, **overrides) -> TurtleSettings:
        values = {
            "api_base_url": fake.base_url,
            "api_train_path": "/api/v1/scout",
            "api_timeout": 2.0,
        }
        values.update(overrides)
        return TurtleSettings(**values)

    return _settings
