#!/usr/bin/env python3
"""Run a processing graph over a WAV file.

This script compiles a graph expression, applies parameter settings, runs
the graph over an audio file and writes the received frames as JSON to
stdout.

Usage:
    python scripts/run_graph.py --graph "chop" --input speech.wav
    python scripts/run_graph.py -g "<sum,scale(gain)>" -i speech.wav --set gain.factor=2
    python scripts/run_graph.py --list-stages

Example output:
    {
        "graph": "chop",
        "descriptor": {"rate": 16000.0, "width": 1, "labels": ["Mean"], ...},
        "frames": [{"time": 0.0, "weight": 1.0, "values": [0.01]}, ...],
        "segments": [],
        "diagnostics": []
    }
"""

import argparse
import json
import sys
from pathlib import Path

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from streamgraph.audioio.errors import AudioIOError
from streamgraph.config import get_settings
from streamgraph.errors import StreamGraphError
from streamgraph.host import Host
from streamgraph.logging import setup_logging
from streamgraph.stages import list_available_stages


def parse_assignment(text: str) -> tuple[str, str]:
    """Split an "instance.param=value" assignment."""
    address, sep, value = text.partition("=")
    if not sep or not address:
        raise argparse.ArgumentTypeError(f"expected <instance>.<param>=<value>, got '{text}'")
    return address.strip(), value.strip()


def main() -> int:
    """Main entry point for the script.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    settings = get_settings()

    parser = argparse.ArgumentParser(
        description="Run a processing graph over an audio file",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    %(prog)s --graph chop --input speech.wav --set chop.size=100
    %(prog)s --graph "slice:<sum,_>" --input speech.wav --block-size 512
        """,
    )
    parser.add_argument(
        "--graph", "-g",
        type=str,
        default=settings.default_graph,
        help=f"Graph expression (default: {settings.default_graph})",
    )
    parser.add_argument(
        "--input", "-i",
        type=str,
        help="Path to the input audio file (WAV format)",
    )
    parser.add_argument(
        "--set", "-s",
        type=parse_assignment,
        action="append",
        default=[],
        metavar="INSTANCE.PARAM=VALUE",
        help="Set a stage parameter (repeatable)",
    )
    parser.add_argument(
        "--block-size", "-b",
        type=int,
        default=settings.block_size,
        help=f"Frames per push (default: {settings.block_size})",
    )
    parser.add_argument(
        "--list-stages",
        action="store_true",
        help="List available stage names and exit",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=settings.log_level,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help=f"Log level (default: {settings.log_level})",
    )
    parser.add_argument(
        "--pretty", "-p",
        action="store_true",
        help="Pretty-print JSON output with indentation",
    )

    args = parser.parse_args()
    setup_logging(args.log_level)

    if args.list_stages:
        print(json.dumps({"stages": list_available_stages()}))
        return 0

    if not args.input:
        parser.error("--input is required unless --list-stages is given")

    input_path = Path(args.input)
    if not input_path.exists():
        print(json.dumps({
            "error": "File not found",
            "code": "FILE_NOT_FOUND",
            "path": str(input_path),
        }), file=sys.stderr)
        return 1

    try:
        with Host(settings=settings) as host:
            graph = host.set_graph(args.graph)
            for address, value in args.set:
                host.set_param(address, value)

            receiver = host.run_file(input_path, block_size=args.block_size)

            output = {
                "graph": graph.expression,
                "descriptor": receiver.descriptor.to_dict() if receiver.descriptor else None,
                "frames": [frame.to_dict() for frame in receiver.frames],
                "segments": [{"time": t, "start": s} for t, s in receiver.segments],
                "diagnostics": [d.to_dict() for d in host.diagnostics],
            }

        if args.pretty:
            print(json.dumps(output, indent=2))
        else:
            print(json.dumps(output))

        return 0

    except AudioIOError as e:
        print(json.dumps({
            "error": e.message,
            "code": e.code,
            "details": e.details,
        }), file=sys.stderr)
        return 2

    except StreamGraphError as e:
        print(json.dumps({
            "error": e.message,
            "code": e.code,
            "details": e.details,
        }, default=str), file=sys.stderr)
        return 3

    except Exception as e:
        print(json.dumps({
            "error": str(e),
            "code": "UNKNOWN_ERROR",
        }), file=sys.stderr)
        return 4


if __name__ == "__main__":
    sys.exit(main())
