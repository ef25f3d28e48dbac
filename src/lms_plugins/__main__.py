"""CLI entry-point for lms_plugins.

Usage:
    python -m lms_plugins serve [--host HOST] [--port PORT] [--site FILE]
    python -m lms_plugins check-feedback --grade 10 90% 5 2.5 [--json]
    python -m lms_plugins seed <site.yaml> [--apply-defaults] [--json]
    python -m lms_plugins services
    python -m lms_plugins validate <instance.json> <schema_name>
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

import jsonschema
import yaml

from lms_plugins import __version__
from lms_plugins.contracts.load import service_names, validate_instance
from lms_plugins.exceptions import LmsError
from lms_plugins.utils.exit_codes import ExitCode
from lms_plugins.utils.json_norm import stable_json_dumps


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="lms-plugins",
        description="Quiz grading services, group and report toolbars, plugin settings.",
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument("-v", "--verbose", action="store_true", help="Log at DEBUG level.")
    sub = p.add_subparsers(dest="command")

    serve_p = sub.add_parser("serve", help="Run the web API with uvicorn.")
    serve_p.add_argument("--host", default=None, help="Bind address (default: settings HOST).")
    serve_p.add_argument("--port", type=int, default=None, help="Port (default: settings PORT).")
    serve_p.add_argument("--site", default=None, help="YAML site file to load at startup.")

    fb_p = sub.add_parser(
        "check-feedback",
        help="Validate overall feedback boundaries against a maximum grade.",
    )
    fb_p.add_argument("--grade", type=float, required=True, help="Maximum grade of the grade item.")
    fb_p.add_argument("boundaries", nargs="*", help="Boundaries, highest first (e.g. 90%% 5 2.5).")
    fb_p.add_argument("--json", action="store_true", help="Print errors and bands as JSON.")

    seed_p = sub.add_parser("seed", help="Load a YAML site file and summarise it.")
    seed_p.add_argument("site", help="Path to the site file.")
    seed_p.add_argument("--apply-defaults", action="store_true",
                        help="Also write default values of plugin settings.")
    seed_p.add_argument("--json", action="store_true", help="Print the summary as JSON.")

    sub.add_parser("services", help="List the web-service methods.")

    val_p = sub.add_parser("validate", help="Validate a JSON file against a bundled schema.")
    val_p.add_argument("instance", help="Path to the JSON instance.")
    val_p.add_argument("schema_name", help="Schema file name, e.g. services.schema.json")
    return p


def _cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    from lms_plugins.web_api.config import settings

    if args.site:
        if not Path(args.site).exists():
            print(f"error: site file not found: {args.site}", file=sys.stderr)
            return ExitCode.ERROR
        settings.SITE_FILE = args.site
    uvicorn.run(
        "lms_plugins.web_api.main:app",
        host=args.host or settings.HOST,
        port=args.port or settings.PORT,
    )
    return ExitCode.SUCCESS


def _cmd_check_feedback(args: argparse.Namespace) -> int:
    from lms_plugins.quiz.feedback_form import format_percent, validate_boundaries

    if args.grade <= 0:
        print("error: --grade must be positive", file=sys.stderr)
        return ExitCode.ERROR
    rows = [{"boundary": b, "feedback": {"text": ""}} for b in args.boundaries]
    errors, rows = validate_boundaries(args.grade, rows)

    bands = [r["boundary"] for r in rows if isinstance(r["boundary"], float)]
    if args.json:
        print(stable_json_dumps({"errors": errors, "boundaries": bands}), end="")
    elif errors:
        for name, message in sorted(errors.items()):
            print(f"FAIL {name}: {message}")
    else:
        for boundary in bands:
            print(f"OK {boundary:g} ({format_percent(100.0 * boundary / args.grade)})")
    return ExitCode.VIOLATION if errors else ExitCode.SUCCESS


def _cmd_seed(args: argparse.Namespace) -> int:
    from lms_plugins.admin.tree import apply_all_defaults
    from lms_plugins.host.seed import load_site

    try:
        platform = load_site(args.site)
    except (OSError, yaml.YAMLError, LmsError, KeyError, TypeError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return ExitCode.ERROR
    applied = apply_all_defaults(platform) if args.apply_defaults else []
    summary = {
        "users": len(platform.users),
        "courses": len(platform.courses),
        "groups": len(platform.groups),
        "quizzes": len(platform.quizzes),
        "slots": len(platform.slots),
        "gradeitems": len(platform.gradeitems),
        "defaults_applied": applied,
    }
    if args.json:
        print(stable_json_dumps(summary), end="")
    else:
        for key, value in summary.items():
            print(f"{key}: {value}")
    return ExitCode.SUCCESS


def _cmd_validate(args: argparse.Namespace) -> int:
    try:
        instance = json.loads(Path(args.instance).read_text(encoding="utf-8"))
        validate_instance(instance, args.schema_name)
    except jsonschema.ValidationError as e:
        print(f"FAIL: {e.message}", file=sys.stderr)
        return ExitCode.VIOLATION
    except (OSError, ValueError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return ExitCode.ERROR
    print("OK")
    return ExitCode.SUCCESS


def main(argv: list[str] | None = None) -> int:
    """Entry-point; returns an exit code (0 = ok, 1 = violation, 2 = error)."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command == "serve":
        return _cmd_serve(args)
    if args.command == "check-feedback":
        return _cmd_check_feedback(args)
    if args.command == "seed":
        return _cmd_seed(args)
    if args.command == "services":
        for name in service_names():
            print(name)
        return ExitCode.SUCCESS
    if args.command == "validate":
        return _cmd_validate(args)

    parser.print_help(sys.stderr)
    return ExitCode.ERROR


if __name__ == "__main__":
    sys.exit(main())
