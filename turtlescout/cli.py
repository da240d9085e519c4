"""Command line front end for checking Turtle data and pushing trains to Turtle."""

import argparse
import asyncio
import json
import logging
from pathlib import Path

from huntdata.resolvers import NameTableError, load_name_table
from huntdata.turtle_data import TurtleDataError
from turtlescout.config import load_settings
from turtlescout.logging_utils import configure_rotating_logger
from turtlescout.train import TrainMob
from turtlescout.turtle_manager import TurtleHttpStatus, TurtleManager


## ---------------------------- Helpers ---------------------------- ##
def load_train(train_path) -> list[TrainMob]:
    '''
    Reads a recorded train from a JSON list of {"mob_id", "territory_id", "instance", "x", "y"}.
    '''
    with Path(train_path).open("r", encoding="utf-8") as f:
        raw = json.load(f)
    if not isinstance(raw, list):
        raise ValueError("Train JSON must be a list of mobs.")
    return [TrainMob.from_json(item) for item in raw]


def _build_manager(args, settings) -> TurtleManager:
    mob_names = load_name_table(args.mob_names)
    map_names = load_name_table(args.map_names)
    player_tag = (lambda: args.player_tag) if getattr(args, "player_tag", None) else None
    return TurtleManager.from_data_file(
        settings,
        mob_names.resolve,
        map_names.resolve,
        data_file=args.data,
        player_tag=player_tag,
    )


## ---------------------------- Commands ---------------------------- ##
def check_data(args, settings) -> int:
    manager = _build_manager(args, settings)
    summary = manager.turtle_data.summary()
    print(
        f"Loaded {summary['mobs']} mobs and {summary['territories']} maps "
        f"({summary['spawn_points']} spawn points) with {summary['errors']} errors."
    )
    for error in manager.turtle_data.errors:
        print(f" ! {error}")
    return 1 if manager.turtle_data.errors else 0


async def generate(args, settings) -> int:
    train = load_train(args.train)
    async with _build_manager(args, settings) as manager:
        result = await manager.generate_turtle_link(train, allow_empty=args.allow_empty)
    if not result.ok:
        print(f" ! {result.error}")
        return 1
    link = result.link
    print(f"Readonly link: {link.readonly_url}")
    print(f"Collab link:   {link.collab_url}")
    print(f"Slug: {link.slug} | Password: {link.collab_password} | Patch: {link.highest_patch.name}")
    return 0


async def update(args, settings) -> int:
    train = load_train(args.train)
    async with _build_manager(args, settings) as manager:
        if manager.join_collab_session(args.link) is None:
            print(f" ! Not a Turtle collab link: {args.link}")
            return 2
        status = await manager.update_current_session(train)
    print(f"Update status: {status.value}")
    return 0 if status == TurtleHttpStatus.SUCCESS else 1


## ---------------------------- Arg parsing ---------------------------- ##
def _add_data_args(parser, settings):
    parser.add_argument("-d", "--data", type=str, default=settings.data_file, help="Turtle dataset JSON file")
    parser.add_argument("--mob-names", type=str, required=True, help="JSON file or URL of mob name -> mob id")
    parser.add_argument("--map-names", type=str, required=True, help="JSON file or URL of map name -> territory id")


def build_cli_parser(settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Turtle scout client.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output")
    subparsers = parser.add_subparsers(dest="command")

    check_parser = subparsers.add_parser("check-data", help="Load the Turtle dataset and report unresolved names")
    _add_data_args(check_parser, settings)

    generate_parser = subparsers.add_parser("generate", help="Create a new Turtle train from a recorded train")
    _add_data_args(generate_parser, settings)
    generate_parser.add_argument("-t", "--train", type=str, required=True, help="Recorded train JSON file")
    generate_parser.add_argument("--allow-empty", action="store_true", help="Create the train even if no mob is supported")

    update_parser = subparsers.add_parser("update", help="Push a recorded train to a Turtle collab session")
    _add_data_args(update_parser, settings)
    update_parser.add_argument("-t", "--train", type=str, required=True, help="Recorded train JSON file")
    update_parser.add_argument("-l", "--link", type=str, required=True, help="Collab link, e.g. /scout/<session>/<password>")
    update_parser.add_argument("-p", "--player-tag", type=str, default=None, help="Name@World sent with the update")
    return parser


def main(argv=None) -> int:
    settings = load_settings()
    parser = build_cli_parser(settings)
    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return 2

    configure_rotating_logger(
        level=logging.DEBUG if args.verbose else logging.INFO,
        shared_with=("huntdata",),
    )

    try:
        if args.command == "check-data":
            return check_data(args, settings)
        if args.command == "generate":
            return asyncio.run(generate(args, settings))
        if args.command == "update":
            return asyncio.run(update(args, settings))
    except (TurtleDataError, NameTableError, KeyError, ValueError, OSError) as e:
        print(f" ! {e}")
        return 1
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
