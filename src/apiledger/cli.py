"""apiledger CLI: path-template and extension tooling."""

import argparse
import logging
import sys
from importlib.metadata import version as get_version, PackageNotFoundError
from pathlib import Path


def _parse_assignments(pairs):
    """Parse NAME=VALUE pairs into a dict (later pairs win)."""
    values = {}
    for pair in pairs or []:
        name, sep, value = pair.partition("=")
        if not sep or not name.strip():
            raise ValueError(f"Route value must look like NAME=VALUE, got '{pair}'")
        values[name.strip()] = value
    return values


def main():
    """Main CLI entry point for apiledger commands."""
    # Get version for --version argument (handle PackageNotFoundError)
    try:
        apiledger_version = get_version("apiledger")
    except PackageNotFoundError:
        apiledger_version = "dev"

    parser = argparse.ArgumentParser(
        prog="apiledger",
        description="apiledger: OpenAPI path templates, route values and extensions"
    )
    parser.add_argument("--version", action="version", version=f"apiledger {apiledger_version}")
    # Common arguments
    parent_parser = argparse.ArgumentParser(add_help=False)
    parent_parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress all non-error output."
    )
    parent_parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (overrides APILEDGER_LOG_LEVEL)"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # parse-template command
    parse_parser = subparsers.add_parser(
        "parse-template",
        help="Parse a path template and list its variables",
        parents=[parent_parser]
    )
    parse_parser.add_argument("template", help="Path template, e.g. /files/{+path}")

    # map-route command
    map_parser = subparsers.add_parser(
        "map-route",
        help="Rewrite a path template into a router pattern",
        parents=[parent_parser]
    )
    map_parser.add_argument("template", help="Path template, e.g. /files/{+path}{?q}")

    # extract command
    extract_parser = subparsers.add_parser(
        "extract",
        help="Match route values against a path template",
        parents=[parent_parser]
    )
    extract_parser.add_argument("template", help="Path template, e.g. /users/{id}")
    extract_parser.add_argument(
        "--value",
        dest="values",
        action="append",
        default=[],
        metavar="NAME=VALUE",
        help="Route value (repeatable)"
    )

    # normalize-extensions command
    ext_parser = subparsers.add_parser(
        "normalize-extensions",
        help="Normalize a JSON object of extensions to x- keys",
        parents=[parent_parser]
    )
    ext_parser.add_argument("file", type=Path, help="Path to a JSON object file")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    from .settings import load_settings
    from ._internal.canonical_json import canonical_dumps

    try:
        overrides = {"log_level": args.log_level} if args.log_level else {}
        settings = load_settings(**overrides)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    logging.basicConfig(level=settings.log_level, format="%(levelname)s %(name)s: %(message)s")

    def _emit(payload) -> None:
        if not args.quiet:
            print(canonical_dumps(payload, sort_keys=False))

    if args.command in ("parse-template", "map-route"):
        from .api import inspect_template

        report = inspect_template(args.template)
        if not report.ok:
            print(f"Error: {report.error}", file=sys.stderr)
            sys.exit(1)
        if args.command == "parse-template":
            _emit([v.model_dump() for v in report.variables])
        else:
            _emit({
                "openapi_pattern": report.openapi_pattern,
                "route_pattern": report.route_pattern,
                "query_parameters": report.query_parameters,
            })
    elif args.command == "extract":
        from .api import match_route

        try:
            route_values = _parse_assignments(args.values)
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
        result = match_route(args.template, route_values)
        if not result.ok:
            print(f"Error: {result.error}", file=sys.stderr)
            sys.exit(1)
        _emit(result.variables)
    elif args.command == "normalize-extensions":
        from .api import normalize_extensions_file

        try:
            extensions = normalize_extensions_file(args.file)
        except (OSError, ValueError) as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
        _emit(extensions or {})
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
