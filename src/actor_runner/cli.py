"""CLI entrypoint."""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any

from actor_runner.boundary import RequestBoundary
from actor_runner.generation import InputGenerator, build_model
from actor_runner.models.boundary_response import BoundaryResponse
from actor_runner.platform_client import PlatformClient
from actor_runner.settings import RunnerSettings, load_settings, resolve_api_key

TOKEN_ENV = "APIFY_TOKEN"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="actor-runner")
    parser.add_argument("--config", type=str, default=None, help="Path to a YAML settings file")
    parser.add_argument("--log-level", type=str, default=None)
    parser.add_argument("--token", type=str, default=None, help=f"API token (default: ${TOKEN_ENV})")
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("actors", help="List actors available to the token")

    schema = commands.add_parser("schema", help="Resolve a runnable input for an actor")
    schema.add_argument("--actor", type=str, required=True)

    run = commands.add_parser("run", help="Run an actor and print its dataset items")
    run.add_argument("--actor", type=str, required=True)
    input_group = run.add_mutually_exclusive_group()
    input_group.add_argument("--input", type=str, help="Input as inline JSON")
    input_group.add_argument("--input-file", type=str, help="Path to a JSON input file")
    run.add_argument("--max-wait", type=float, default=None, help="Give up polling after this many seconds")
    return parser


def read_input(args: argparse.Namespace) -> Any:
    if args.input is not None:
        return json.loads(args.input)
    if args.input_file is not None:
        return json.loads(Path(args.input_file).read_text(encoding="utf-8"))
    return None


def build_generator(settings: RunnerSettings) -> InputGenerator | None:
    api_key = resolve_api_key(settings.model)
    if api_key is None:
        return None
    return InputGenerator(build_model(settings.model, api_key), settings.model)


async def dispatch(
    args: argparse.Namespace,
    settings: RunnerSettings,
    generator: InputGenerator | None,
    run_input: Any,
) -> BoundaryResponse:
    token = args.token or os.environ.get(TOKEN_ENV)
    async with PlatformClient(
        base_url=settings.api_base_url,
        timeout_seconds=settings.request_timeout_seconds,
    ) as client:
        boundary = RequestBoundary.from_settings(settings, client, generator)
        if args.command == "actors":
            return await boundary.list_jobs(token)
        if args.command == "schema":
            return await boundary.resolve_schema(token, args.actor)
        return await boundary.run_job(token, args.actor, run_input)


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()

    settings = load_settings(Path(args.config) if args.config else None)
    if args.command == "run" and args.max_wait is not None:
        settings = settings.model_copy(update={"max_wait_seconds": args.max_wait})
    logging.basicConfig(
        level=(args.log_level or settings.log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    run_input = None
    if args.command == "run":
        try:
            run_input = read_input(args)
        except (OSError, ValueError) as exc:
            parser.error(f"Invalid input: {exc}")
    generator = build_generator(settings)

    # Async entrypoint
    import anyio

    response = anyio.run(dispatch, args, settings, generator, run_input)
    print(json.dumps(response.body, indent=2, ensure_ascii=False))
    if not response.ok:
        sys.exit(1)
