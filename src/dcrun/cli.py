"""CLI for building and running devcontainer environments.

This module provides command-line interface for:
- Building an image and extracting artifacts (``dcrun build``)
- Starting an environment and initializing its volume once (``dcrun run``)
- Reporting the state of a project's container (``dcrun status``)
"""

import argparse
import logging
import sys
from pathlib import Path

from dcrun import functions
from dcrun.core.config import load_artifact_map
from dcrun.core.errors import DcrunError
from dcrun.core.types import BuildInput, BuildOutput, RunInput
from dcrun.runtime.docker import DockerNotAvailableError

logger = logging.getLogger(__name__)


def parse_input_pairs(pairs: list[str] | None) -> dict[str, RunInput]:
    """Parse repeated ``NAME=HOSTPATH`` options.

    Args:
        pairs: Raw option values.

    Returns:
        Ordered mapping of artifact name to run input.

    Raises:
        ValueError: If a value has no ``=`` or an empty name.
    """
    inputs: dict[str, RunInput] = {}
    for pair in pairs or []:
        name, sep, host_path = pair.partition("=")
        if not sep or not name or not host_path:
            raise ValueError(f"Expected NAME=HOSTPATH, got: {pair}")
        inputs[name] = RunInput(host_path=Path(host_path))
    return inputs


def cmd_build(args: argparse.Namespace) -> int:
    """Build command handler.

    Args:
        args: Parsed arguments.

    Returns:
        Exit code.
    """
    inputs = load_artifact_map(args.inputs, BuildInput) if args.inputs else None
    outputs = load_artifact_map(args.outputs, BuildOutput) if args.outputs else None

    container_id = functions.build(
        args.config,
        args.project,
        inputs=inputs,
        outputs=outputs,
    )
    print(f"Built {args.project} (container {container_id[:12]})")
    return 0


def cmd_run(args: argparse.Namespace) -> int:
    """Run command handler.

    Args:
        args: Parsed arguments.

    Returns:
        Exit code.
    """
    inputs: dict[str, RunInput] = {}
    if args.inputs:
        inputs.update(load_artifact_map(args.inputs, RunInput))
    inputs.update(parse_input_pairs(args.input))

    script = None
    if args.init_script:
        script = Path(args.init_script).read_text(encoding="utf-8")

    result = functions.run(
        args.config,
        args.project,
        volume_init_script=script,
        inputs=inputs or None,
        open_editor=not args.no_editor,
        staging_dir=args.staging_dir,
        disable_telemetry=False if args.enable_telemetry else None,
    )
    print(
        f"{args.project} running (container {result.container_id[:12]}, "
        f"workspace {result.workspace_folder}, init {result.init.state.value})"
    )
    return 0


def cmd_status(args: argparse.Namespace) -> int:
    """Status command handler.

    Args:
        args: Parsed arguments.

    Returns:
        Exit code.
    """
    state = functions.status(args.config, args.project)
    print(f"{args.project}: {state.value}")
    return 0


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=Path("."),
        help="devcontainer.json, or a folder containing .devcontainer/ (default: .)",
    )
    parser.add_argument(
        "--project",
        "-p",
        required=True,
        help="Compose project name",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create CLI argument parser.

    Returns:
        Configured ArgumentParser.
    """
    parser = argparse.ArgumentParser(
        prog="dcrun",
        description="Devcontainer lifecycle orchestration tool",
    )
    parser.add_argument(
        "--version",
        action="version",
        version="%(prog)s 0.1.0",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # build command
    build_parser = subparsers.add_parser(
        "build", help="Build image, extract artifacts and tear down"
    )
    _add_common_arguments(build_parser)
    build_parser.add_argument(
        "--inputs",
        type=Path,
        help="JSON file: name -> {src_path, dest_path} copied into the build context",
    )
    build_parser.add_argument(
        "--outputs",
        type=Path,
        help="JSON file: name -> {container_path, host_path} copied out after build",
    )
    build_parser.set_defaults(func=cmd_build)

    # run command
    run_parser = subparsers.add_parser(
        "run", help="Start environment and initialize the workspace volume once"
    )
    _add_common_arguments(run_parser)
    run_parser.add_argument(
        "--init-script",
        type=Path,
        help="Script run inside the container on first start",
    )
    run_parser.add_argument(
        "--input",
        "-i",
        action="append",
        metavar="NAME=HOSTPATH",
        help="Host artifact staged on first start (repeatable)",
    )
    run_parser.add_argument(
        "--inputs",
        type=Path,
        help="JSON file: name -> {host_path} staged on first start",
    )
    run_parser.add_argument("--staging-dir", help="In-container staging directory")
    run_parser.add_argument(
        "--no-editor",
        action="store_true",
        help="Do not open the editor after starting",
    )
    run_parser.add_argument(
        "--enable-telemetry",
        action="store_true",
        help="Do not pass --disable-telemetry to the editor",
    )
    run_parser.set_defaults(func=cmd_run)

    # status command
    status_parser = subparsers.add_parser(
        "status", aliases=["ps"], help="Show the workspace container state"
    )
    _add_common_arguments(status_parser)
    status_parser.set_defaults(func=cmd_status)

    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entry point.

    Args:
        argv: Arguments to parse. Uses sys.argv if None.

    Returns:
        Exit code.
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        print()
        print("Quick start:")
        print("  dcrun build -p myproj                 # Build and extract artifacts")
        print("  dcrun run -p myproj --init-script s.sh  # Start and initialize once")
        print("  dcrun status -p myproj                # Show container state")
        return 0

    try:
        return args.func(args)
    except (DcrunError, DockerNotAvailableError, ValueError, OSError) as e:
        logger.debug("Command failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
