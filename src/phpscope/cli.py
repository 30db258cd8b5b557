"""CLI entry point: argument parsing and subcommand dispatch."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from phpscope import __version__
from phpscope.config import load_config, resolve_path


def setup_logging(verbose: bool = False, quiet: bool = False) -> None:
    """
    Configure the phpscope logger: level from --verbose/--quiet or config,
    console handler, optional file handler from config.
    """
    config = load_config(None)
    log_cfg = config.get("logging") or {}
    if verbose:
        level_name = "DEBUG"
    elif quiet:
        level_name = "ERROR"
    else:
        level_name = (log_cfg.get("level") or "WARNING").upper()
    level = getattr(logging, level_name, logging.WARNING)
    root = logging.getLogger("phpscope")
    root.setLevel(level)
    if not root.handlers:
        fmt = logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s")
        console = logging.StreamHandler(sys.stderr)
        console.setFormatter(fmt)
        root.addHandler(console)
        log_file = log_cfg.get("file")
        if log_file:
            try:
                fh = logging.FileHandler(Path(log_file).expanduser(), encoding="utf-8")
            except OSError as e:
                root.warning("Cannot open log file %s: %s", log_file, e)
            else:
                fh.setFormatter(fmt)
                root.addHandler(fh)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="phpscope",
        description="Report the constants, functions, interfaces, traits and classes a PHP file declares.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    log_group = parser.add_mutually_exclusive_group()
    log_group.add_argument("-v", "--verbose", action="store_true", help="Verbose (DEBUG) output.")
    log_group.add_argument("-q", "--quiet", action="store_true", help="Quiet (errors only).")

    # Same flags on subparsers so "phpscope export file.php -v" works
    global_flags = argparse.ArgumentParser(add_help=False)
    log_grp = global_flags.add_mutually_exclusive_group()
    log_grp.add_argument("-v", "--verbose", action="store_true", help="Verbose (DEBUG) output.")
    log_grp.add_argument("-q", "--quiet", action="store_true", help="Quiet (errors only).")

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND", required=True)

    # export
    p_export = subparsers.add_parser(
        "export", help="Print the symbol report of a PHP file.", parents=[global_flags]
    )
    p_export.add_argument("path", type=Path, help="PHP file to scan.")
    p_export.add_argument(
        "--format", "-f", choices=("text", "json"), help="Output format (default: from config, text)."
    )
    p_export.add_argument(
        "--no-builtins",
        dest="builtins",
        action="store_false",
        default=None,
        help="Do not seed the symbol table with PHP built-in classes and constants.",
    )
    p_export.add_argument("--output", "-o", type=Path, help="Write the report to this file instead of stdout.")
    p_export.set_defaults(run="export")

    # doctor
    p_doctor = subparsers.add_parser(
        "doctor",
        help="Report undocumented or untyped symbols of a PHP file, by priority.",
        parents=[global_flags],
    )
    p_doctor.add_argument("path", type=Path, help="PHP file to check.")
    p_doctor.add_argument("--format", "-f", choices=("text", "json"), default="text", help="Output format.")
    p_doctor.add_argument("--top", type=int, help="Only show the N highest-priority items.")
    p_doctor.set_defaults(run="doctor")

    # config
    p_config = subparsers.add_parser("config", help="Show or edit configuration.", parents=[global_flags])
    p_config.add_argument("path", type=Path, nargs="?", default=Path("."), help="Project path for project-local config (default: .).")
    p_config.add_argument("--show", action="store_true", help="Display current settings.")
    p_config.add_argument("--set", dest="set_key", metavar="KEY=VALUE", help="Set a configuration value.")
    p_config.add_argument("--global", dest="global_", action="store_true", help="With --set: write to global config even when inside a project.")
    p_config.set_defaults(run="config")
    return parser


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()
    setup_logging(
        verbose=getattr(args, "verbose", False),
        quiet=getattr(args, "quiet", False),
    )
    run = getattr(args, "run", None)
    if not run:
        parser.print_help()
        sys.exit(0)

    if hasattr(args, "path"):
        args.path = resolve_path(args.path)

    if run == "export":
        from phpscope.commands.export import run as cmd_run
    elif run == "doctor":
        from phpscope.commands.doctor import run as cmd_run
    elif run == "config":
        from phpscope.commands.config_cmd import run as cmd_run
    else:
        parser.print_help()
        sys.exit(0)

    cmd_run(args)


if __name__ == "__main__":
    main()
