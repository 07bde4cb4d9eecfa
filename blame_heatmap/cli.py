"""
blame-heatmap CLI: show how old every line of a file is.

Zero external dependencies. Uses only the Python standard library.

Commands:
    blame-heatmap show <file>               Print the file with a git-age heatmap
    blame-heatmap config show               Show effective settings and their sources
    blame-heatmap config set KEY VALUE      Store a setting (global, or --project)
    blame-heatmap config unset KEY          Remove a stored setting
"""

from __future__ import annotations

import argparse
import os
import sys

from .config import (
    DEFAULTS,
    ENV_OVERRIDES,
    ConfigurationError,
    GLOBAL_CONFIG_FILE,
    get_global_config,
    get_project_config,
    load_dotenv,
    load_settings,
    project_config_path,
    resolve_config,
    save_global_config,
    save_project_config,
    validate_setting,
)
from .blame import git_toplevel
from .controller import HeatmapController
from .terminal import TerminalDocument, TerminalHost, TerminalView, format_json, format_terminal

VERSION = "0.1.0"


def project_dir_for(start: str | None = None) -> str:
    """Project root for config lookups: git toplevel of *start*, else the cwd."""
    cwd = os.getcwd()
    return git_toplevel(start or cwd) or cwd


# ===================================================================
# show
# ===================================================================

def cmd_show(args):
    """Render the heatmap for a single file."""
    path = os.path.abspath(args.file)
    if not os.path.isfile(path):
        print(f"blame-heatmap show: file not found: {args.file}", file=sys.stderr)
        sys.exit(1)

    overrides = {
        "heatLevels": args.levels,
        "heatColour": args.heat,
        "coolColour": args.cool,
        "showInRuler": True if args.ruler else None,
    }
    settings = load_settings(
        project_dir=project_dir_for(os.path.dirname(path)), overrides=overrides,
    )
    try:
        resolve_config(settings)
    except ConfigurationError as exc:
        print(f"blame-heatmap show: {exc}", file=sys.stderr)
        sys.exit(1)

    try:
        document = TerminalDocument.from_file(path)
    except OSError as exc:
        print(f"blame-heatmap show: cannot read {args.file}: {exc}", file=sys.stderr)
        sys.exit(1)

    view = TerminalView(document)
    host = TerminalHost(view)
    controller = HeatmapController(host, settings, debug=args.debug)
    controller.enable()

    if not view.decorations:
        print(f"blame-heatmap: no heatmap available for {args.file}", file=sys.stderr)

    if args.json:
        print(format_json(view, controller.styles))
    else:
        print(format_terminal(view, controller.styles))
    controller.dispose()


# ===================================================================
# config
# ===================================================================

def _config_source(key: str, global_cfg: dict, project_cfg: dict) -> str:
    if os.environ.get(ENV_OVERRIDES[key]):
        return f"env {ENV_OVERRIDES[key]}"
    if key in project_cfg:
        return "project"
    if key in global_cfg:
        return "global"
    return "default"


def cmd_config_show(_args):
    project_dir = project_dir_for()
    global_cfg = get_global_config()
    project_cfg = get_project_config(project_dir)
    settings = load_settings(project_dir)

    print("blame-heatmap settings\n")
    for key in DEFAULTS:
        source = _config_source(key, global_cfg, project_cfg)
        print(f"  {key:<12} {str(settings[key])!r:<14} ({source})")
    print(f"\n  Global config:  {GLOBAL_CONFIG_FILE}")
    print(f"  Project config: {project_config_path(project_dir)}")

    try:
        config = resolve_config(settings)
    except ConfigurationError as exc:
        print(f"\n  Invalid: {exc}")
        return
    print(f"  Hot:  {config.hot.to_hex()}")
    print(f"  Cool: {config.cool.to_hex()}")


def cmd_config_set(args):
    try:
        value = validate_setting(args.key, args.value)
    except ConfigurationError as exc:
        print(f"blame-heatmap config: {exc}", file=sys.stderr)
        sys.exit(1)

    if args.project:
        project_dir = project_dir_for()
        config = get_project_config(project_dir)
        config[args.key] = value
        save_project_config(config, project_dir)
        print(f"{args.key} saved to {project_config_path(project_dir)}")
    else:
        config = get_global_config()
        config[args.key] = value
        save_global_config(config)
        print(f"{args.key} saved to {GLOBAL_CONFIG_FILE}")


def cmd_config_unset(args):
    project_dir = project_dir_for() if args.project else None
    if project_dir is not None:
        config = get_project_config(project_dir)
    else:
        config = get_global_config()

    if args.key not in config:
        print(f"{args.key} is not set.")
        return

    del config[args.key]
    if project_dir is not None:
        save_project_config(config, project_dir)
    else:
        save_global_config(config)
    print(f"{args.key} removed.")


# ===================================================================
# Entry point
# ===================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="blame-heatmap",
        description="blame-heatmap: colour each line of a file by its git age",
    )
    parser.add_argument(
        "--version", action="version", version=f"blame-heatmap {VERSION}",
    )

    sub = parser.add_subparsers(dest="command", metavar="COMMAND")

    # show <file>
    sub_show = sub.add_parser("show", help="Print a file with its age heatmap")
    sub_show.add_argument("file", help="File to render")
    sub_show.add_argument("--levels", "-n", type=int, default=None,
                          help="Number of heat levels (default 10)")
    sub_show.add_argument("--heat", default=None,
                          help="Hot colour: 'r,g,b', '#rgb' or '#rrggbb'")
    sub_show.add_argument("--cool", default=None,
                          help="Cool colour (default: hot colour, fully transparent)")
    sub_show.add_argument("--ruler", action="store_true", default=False,
                          help="Show a ruler mark beside each heated line")
    sub_show.add_argument("--json", action="store_true", default=False,
                          help="Output styles and line ranges as JSON")
    sub_show.add_argument("--debug", action="store_true", default=False,
                          help="Explain on stderr why nothing was drawn")

    # config {show,set,unset}
    sub_config = sub.add_parser("config", help="Show or edit settings")
    config_sub = sub_config.add_subparsers(dest="config_action", metavar="ACTION")

    config_sub.add_parser("show", help="Show effective settings")

    cfg_set = config_sub.add_parser("set", help="Store a setting")
    cfg_set.add_argument("key", choices=list(DEFAULTS), help="Setting name")
    cfg_set.add_argument("value", help="Setting value")
    cfg_set.add_argument("--project", action="store_true", default=False,
                         help="Write to .blame-heatmap/config.json instead of the global config")

    cfg_unset = config_sub.add_parser("unset", help="Remove a stored setting")
    cfg_unset.add_argument("key", choices=list(DEFAULTS), help="Setting name")
    cfg_unset.add_argument("--project", action="store_true", default=False,
                           help="Edit .blame-heatmap/config.json instead of the global config")

    return parser


def main(argv=None):
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "show":
        cmd_show(args)
    elif args.command == "config":
        dispatch = {
            "show": cmd_config_show,
            "set": cmd_config_set,
            "unset": cmd_config_unset,
        }
        action = getattr(args, "config_action", None)
        if action in dispatch:
            dispatch[action](args)
        else:
            print("Usage: blame-heatmap config {show,set,unset}")


if __name__ == "__main__":
    main()
