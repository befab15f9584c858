from __future__ import annotations

import argparse
import json
import os
import sys
from datetime import datetime
from typing import Callable, Dict

from versionnumber.config import Config
from versionnumber.core.common import get_version_action
from versionnumber.core.models import Result
from versionnumber.errors.mapper import error_to_cli_response
from versionnumber.exceptions import ValidationError, VersionNumberError
from versionnumber.history.storage import HistoryStore
from versionnumber.logger import session_logger as logger
from versionnumber.runner import run_step
from versionnumber.step import DESCRIPTOR, VersionNumberStep


def _store(args: argparse.Namespace, config: Config) -> HistoryStore:
    return HistoryStore(args.data_dir or config.data_dir)


def _parse_timestamp(raw: str) -> datetime:
    try:
        return datetime.fromisoformat(raw)
    except ValueError:
        raise ValidationError(
            "INVALID_TIMESTAMP",
            "--timestamp must be an ISO 8601 date-time",
            {"provided": raw},
        )


def _cmd_step(args: argparse.Namespace, config: Config) -> int:
    step = VersionNumberStep(
        args.template,
        skip_failed_builds=args.skip_failed_builds,
        version_prefix=args.version_prefix,
        project_start_date=args.project_start_date,
    )
    timestamp = _parse_timestamp(args.timestamp) if args.timestamp else None
    outcome = run_step(_store(args, config), step, args.job, os.environ, timestamp=timestamp, tz=config.tz())
    if args.json:
        print(json.dumps(outcome.to_dict(), indent=2, sort_keys=True))
    else:
        print(outcome.version_number)
    return 0


def _cmd_finish(args: argparse.Namespace, config: Config) -> int:
    run = _store(args, config).set_result(args.job, args.build, Result(args.result))
    print(f"{run.job} #{run.number}: {run.result.value if run.result else ''}")
    return 0


def _cmd_show(args: argparse.Namespace, config: Config) -> int:
    run = _store(args, config).get_run(args.job, args.build)
    action = get_version_action(run)
    if action is None:
        logger.warning(
            "Build has no version number",
            event="cli.no_version_number",
            job=run.job,
            build=run.number,
        )
        return 1
    print(action.version_number)
    return 0


def _cmd_history(args: argparse.Namespace, config: Config) -> int:
    runs = _store(args, config).load_runs(args.job)
    payload = {"job": args.job, "builds": [run.to_dict() for run in runs]}
    print(json.dumps(payload, indent=2))
    return 0


def _cmd_serve_mcp(args: argparse.Namespace, config: Config) -> int:
    import asyncio

    from versionnumber.mcp_server import mcp_server

    mcp_server.data_dir_override = args.data_dir
    asyncio.run(mcp_server.main(host=args.host or config.mcp_host, port=args.port or config.mcp_port))
    return 0


def _cmd_serve_web(args: argparse.Namespace, config: Config) -> int:
    import uvicorn

    from versionnumber.web_server.web_server import VersionNumberWebServer

    host = args.host or config.web_host
    port = args.port or config.web_port
    server = VersionNumberWebServer(store=_store(args, config), host=host, port=port)
    logger.info("Starting web server", host=host, port=port, data_dir=str(server.store.data_dir))
    uvicorn.run(server.get_app(), host=host, port=port, log_level="info")
    return 0


Command = Callable[[argparse.Namespace, Config], int]

COMMANDS: Dict[str, Command] = {
    "step": _cmd_step,
    "finish": _cmd_finish,
    "show": _cmd_show,
    "history": _cmd_history,
    "serve-mcp": _cmd_serve_mcp,
    "serve-web": _cmd_serve_web,
}


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="versionnumber", description=DESCRIPTOR.display_name)
    parser.add_argument(
        "--data-dir",
        type=str,
        default=None,
        help="Build history directory (default: VERSIONNUMBER_DATA_DIR or ./data)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    step = sub.add_parser("step", help=f"{DESCRIPTOR.function_name}: compute the version number of a new build")
    step.add_argument("template", help="Version number template, e.g. '1.0.${BUILDS_ALL_TIME}'")
    step.add_argument("--job", required=True, help="Job whose history is used for counting")
    step.add_argument("--skip-failed-builds", action="store_true", help="Do not count builds that did not succeed")
    step.add_argument("--version-prefix", default=None, help="Literal prepended to the version number")
    step.add_argument("--project-start-date", default=None, help="Project start date (yyyy-MM-dd)")
    step.add_argument("--timestamp", default=None, help="Build timestamp (ISO 8601, default: now)")
    step.add_argument("--json", action="store_true", help="Print build number and counters as JSON")

    finish = sub.add_parser("finish", help="Record the result of a build")
    finish.add_argument("--job", required=True)
    finish.add_argument("--result", required=True, choices=[r.value for r in Result])
    finish.add_argument("--build", type=int, default=None, help="Build number (default: latest)")

    show = sub.add_parser("show", help="Print the version number recorded on a build")
    show.add_argument("--job", required=True)
    show.add_argument("--build", type=int, default=None, help="Build number (default: latest)")

    history = sub.add_parser("history", help="Print a job's builds as JSON")
    history.add_argument("--job", required=True)

    for name in ("serve-mcp", "serve-web"):
        serve = sub.add_parser(name, help=f"Start the {name[6:].upper()} server")
        serve.add_argument("--host", type=str, default=None)
        serve.add_argument("--port", type=int, default=None)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        config = Config.from_env()
        return COMMANDS[args.command](args, config)
    except VersionNumberError as exc:
        response = error_to_cli_response(exc)
        logger.error(
            "Command failed",
            event="cli.command_failed",
            command=args.command,
            error_code=response["error_code"],
        )
        print(json.dumps(response, indent=2), file=sys.stderr)
        return 2 if isinstance(exc, ValidationError) else 1


if __name__ == "__main__":
    raise SystemExit(main())
