"""
Command line interface for pkgguide.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from .commands import CommandBuilder
from .content import build_default_guide
from .loader import dump_guide, load_guide
from .models import PackageConfig, ToolKind
from .render import render_guide
from .scaffold import run_preflight_checks, scaffold_project
from .settings import load_settings
from .validator import ValidationEngine


logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pkgguide",
        description="Generate, validate and scaffold packaging guides",
    )
    parser.add_argument("--config", default=None, help="Settings YAML (default: pkgguide.yaml)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="cmd", required=True)

    def add_guide_source(p: argparse.ArgumentParser) -> None:
        p.add_argument("--guide", default=None, help="Guide YAML (default: built-in guide)")
        p.add_argument("--name", default=None, help="Package name for the built-in guide")
        p.add_argument("--version", dest="pkg_version", default=None,
                       help="Package version for the built-in guide")

    p_render = sub.add_parser("render", help="Render a guide to Markdown")
    add_guide_source(p_render)
    p_render.add_argument("-o", "--output", default=None, help="Output file (default: stdout)")

    p_export = sub.add_parser("export", help="Write the built-in guide as YAML")
    add_guide_source(p_export)
    p_export.add_argument("output", help="Destination YAML file")

    p_validate = sub.add_parser("validate", help="Validate a guide")
    add_guide_source(p_validate)
    p_validate.add_argument("--strict", action="store_true", help="Fail on warnings")
    p_validate.add_argument("--json", action="store_true", help="JSON output")

    p_scaffold = sub.add_parser("scaffold", help="Write the example project to a directory")
    add_guide_source(p_scaffold)
    p_scaffold.add_argument("dest", help="Destination directory")
    p_scaffold.add_argument("--overwrite", action="store_true")

    p_check = sub.add_parser("check", help="Pre-flight checks on a project directory")
    p_check.add_argument("project_dir", nargs="?", default=".")
    p_check.add_argument("--json", action="store_true", help="JSON output")

    p_commands = sub.add_parser("commands", help="Print the narrated command sequence")
    p_commands.add_argument("--url", default=None, help="Repository URL for the remote install")

    return parser


def _resolve_guide(args, settings):
    if args.guide:
        return load_guide(Path(args.guide))
    package = None
    if args.name or args.pkg_version:
        package = PackageConfig(
            name=args.name or "mypackage",
            version=args.pkg_version or "0.1.0",
        )
    return build_default_guide(package=package, settings=settings)


def main(argv=None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    try:
        settings = load_settings(Path(args.config) if args.config else None)
    except ValueError as e:
        logger.error(f"Invalid settings: {e}")
        return 1
    if not args.verbose:
        logging.getLogger().setLevel(settings.log_level)

    try:
        if args.cmd == "render":
            text = render_guide(_resolve_guide(args, settings))
            if args.output:
                Path(args.output).write_text(text, encoding="utf-8")
                logger.info(f"Wrote {args.output}")
            else:
                sys.stdout.write(text)
            return 0

        if args.cmd == "export":
            path = dump_guide(_resolve_guide(args, settings), Path(args.output))
            print(path)
            return 0

        if args.cmd == "validate":
            engine = ValidationEngine(settings)
            if args.guide:
                result = engine.validate_file(Path(args.guide), strict=args.strict)
            else:
                result = engine.validate(_resolve_guide(args, settings), strict=args.strict)
            if args.json:
                print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
            else:
                print(result.summary())
            return 0 if result.valid else 1

        if args.cmd == "scaffold":
            result = scaffold_project(
                _resolve_guide(args, settings),
                Path(args.dest),
                overwrite=args.overwrite,
                settings=settings,
            )
            for rel_path in result.files:
                print(rel_path)
            return 0

        if args.cmd == "check":
            result = run_preflight_checks(Path(args.project_dir), settings)
            if args.json:
                print(json.dumps(result.to_dict(), indent=2))
            else:
                print(result.summary())
            return 0 if result.success else 1

        if args.cmd == "commands":
            builder = CommandBuilder(settings)
            steps = [
                builder.step(ToolKind.TEST_RUNNER, builder.test_command()),
                builder.step(ToolKind.BUILD, builder.build_command()),
                builder.step(ToolKind.INSTALLER, builder.install_command(".")),
                builder.step(ToolKind.INSTALLER, builder.install_command(".", editable=True)),
            ]
            if args.url:
                steps.append(builder.step(ToolKind.INSTALLER, builder.install_from_url(args.url)))
            steps.append(builder.step(ToolKind.UPLOADER, builder.upload_command()))
            for step in steps:
                print(step.shell_line())
            return 0

    except (FileNotFoundError, FileExistsError, ValueError, ValidationError) as e:
        logger.error(str(e))
        return 1

    parser.error(f"Unknown command: {args.cmd}")
    return 2


if __name__ == "__main__":
    sys.exit(main())
