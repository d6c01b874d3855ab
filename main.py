#!/usr/bin/env python3
"""
main.py
=======
Command-line entry point.

Usage::

    python main.py build maps/example.json -o stop_signs.json
    python main.py dump  maps/example.json [--state stop_signs.json]
    python main.py serve maps/example.json [--state stop_signs.json]

``build`` assigns a policy to every unsignalized intersection and saves
them.  ``dump`` prints the deterministic turn and priority listings used
as golden files.  ``serve`` starts the editor API.

Environment overrides: ``STOPSIGN_LOG_LEVEL``, ``STOPSIGN_SAVE_PATH``,
``STOPSIGN_API_HOST``, ``STOPSIGN_API_PORT``.
"""

import argparse
import logging
import os
import sys
from typing import List, Optional

import pydantic

import config
from logging_setup import setup_logging
from control.errors import StopSignError
from control.registry import StopSignRegistry
from mapmodel.io import load_map, turn_listing
from mapmodel.network import RoadMap

log = logging.getLogger("main")


def _registry(road_map: RoadMap, state_path: Optional[str]) -> StopSignRegistry:
    if state_path:
        return StopSignRegistry.load(state_path, road_map)
    return StopSignRegistry.build(road_map)


def cmd_build(args: argparse.Namespace) -> int:
    road_map = load_map(args.map)
    registry = StopSignRegistry.build(road_map)
    registry.save(args.output)
    return 0


def cmd_dump(args: argparse.Namespace) -> int:
    road_map = load_map(args.map)
    registry = _registry(road_map, args.state)
    for line in turn_listing(road_map) + registry.listing():
        print(line)
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn
    from editor.api import create_app

    road_map = load_map(args.map)
    registry = _registry(road_map, args.state)
    log.info("Starting editor API on http://%s:%d", args.host, args.port)
    uvicorn.run(create_app(road_map, registry), host=args.host, port=args.port)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Assign and edit right-of-way at unsignalized intersections.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("build", help="assign policies and save them")
    p.add_argument("map", help="JSON map description")
    p.add_argument(
        "-o", "--output",
        default=os.environ.get(config.ENV_SAVE_PATH, config.DEFAULT_SAVE_PATH),
    )
    p.set_defaults(func=cmd_build)

    p = sub.add_parser("dump", help="print turn and priority listings")
    p.add_argument("map")
    p.add_argument("--state", help="saved policies to list instead of assigning")
    p.set_defaults(func=cmd_dump)

    p = sub.add_parser("serve", help="run the editor API")
    p.add_argument("map")
    p.add_argument("--state", help="saved policies to edit instead of assigning")
    p.add_argument(
        "--host", default=os.environ.get(config.ENV_API_HOST, config.API_HOST),
    )
    p.add_argument(
        "--port", type=int,
        default=int(os.environ.get(config.ENV_API_PORT, config.API_PORT)),
    )
    p.set_defaults(func=cmd_serve)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    level_name = os.environ.get(config.ENV_LOG_LEVEL, config.LOG_LEVEL).upper()
    setup_logging(getattr(logging, level_name, logging.INFO))

    args = build_parser().parse_args(argv)
    try:
        return args.func(args)
    except StopSignError as exc:
        log.error("Aborting: %s", exc)
        return 1
    except pydantic.ValidationError as exc:
        log.error("Malformed input: %s", exc)
        return 1


if __name__ == "__main__":
    sys.exit(main())
