#!/usr/bin/env python3
"""
bfi — Brainfuck interpreter with breakpoints and step-through

Usage:
    python bfi.py <file> [--profile reference|classic|wide] [--cell-bits N]
                         [--eof minus-one|zero|unchanged] [--max-steps N]
                         [--trace N] [--no-debug] [--watch ADDR] [-v]

Debug instructions inside the program:
    $   breakpoint — dump memory and the last instruction, wait for a key
    #   toggle step-through — echo every instruction, wait for a key

Exit status is 0 when the program runs off its end, -1 (255) for a bad
invocation, a missing file, a runtime fault or an exceeded step limit.

Examples:
    python bfi.py hello.b
    python bfi.py rot13.b --profile classic < input.txt
    python bfi.py loop.b --max-steps 100000 --trace 20
    python bfi.py count.b --watch 0 --watch 0x1 -v
"""

import argparse
import logging
import os
import sys

# Allow running from project root or as module
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from bf_interpreter import __version__
from bf_interpreter.config import EngineConfig, EOF_POLICIES, PROFILES, DEFAULT_PROFILE
from bf_interpreter.engine import Engine, StopReason
from bf_interpreter.errors import InvocationError
from bf_interpreter.log_setup import setup_logging

EXIT_OK = 0
EXIT_FAILURE = -1

log = logging.getLogger("bf_interpreter.cli")


def parse_address(value: str) -> int:
    """Parse a cell address: decimal or 0x hex, optionally negative."""
    try:
        return int(value.strip(), 0)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid cell address: {value!r}")


def usage_text(prog: str) -> str:
    return (f"usage: {prog} <file>\n"
            f"example: {prog} helloworld.b")


def load_program(path: str, encoding: str = "utf-8") -> str:
    """Read the whole source file. Raises InvocationError if unusable."""
    if not os.path.isfile(path):
        raise InvocationError(f"cannot find {path}")
    try:
        with open(path, "r", encoding=encoding) as f:
            return f.read()
    except (OSError, UnicodeDecodeError, LookupError) as e:
        raise InvocationError(f"cannot read {path}: {e}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bfi",
        description="Brainfuck interpreter with breakpoints ($) and step-through (#)",
        epilog="Profiles: " + ", ".join(
            f"{name} ({p['description']})" for name, p in PROFILES.items()),
    )
    parser.add_argument("source", nargs="?", help="Brainfuck source file")
    parser.add_argument("--profile", default=DEFAULT_PROFILE,
                        choices=list(PROFILES.keys()),
                        help=f"Cell/EOF behaviour profile (default: {DEFAULT_PROFILE})")
    parser.add_argument("--cell-bits", type=int, default=None, metavar="N",
                        help="Wrap cells to N bits; 0 for unbounded (overrides profile)")
    parser.add_argument("--eof", choices=list(EOF_POLICIES), default=None,
                        help="What ',' stores at end of input (overrides profile)")
    parser.add_argument("--max-steps", type=int, default=None, metavar="N",
                        help="Stop with an error after N instructions")
    parser.add_argument("--trace", type=int, default=0, metavar="N",
                        help="Keep the last N instructions and print them on a fault")
    parser.add_argument("--no-debug", action="store_true",
                        help="Treat $ and # as comments")
    parser.add_argument("--watch", type=parse_address, action="append", default=[],
                        metavar="ADDR", help="Log every write to the cell at ADDR (repeatable)")
    parser.add_argument("--encoding", default="utf-8",
                        help="Source file encoding (default: utf-8)")
    parser.add_argument("--verbose", "-v", action="count", default=0,
                        help="Log progress to stderr (-v info, -vv debug)")
    parser.add_argument("--log-file", default=None,
                        help="Write a DEBUG log to this file")
    parser.add_argument("--version", action="version",
                        version=f"bfi {__version__}")
    return parser


def build_config(args) -> EngineConfig:
    overrides = {
        "max_steps": args.max_steps,
        "trace_depth": args.trace,
        "debug_instructions": not args.no_debug,
    }
    if args.cell_bits is not None:
        overrides["cell_bits"] = args.cell_bits or None
    if args.eof is not None:
        overrides["eof"] = args.eof
    return EngineConfig.from_profile(args.profile, **overrides)


def _log_write(addr: int, old: int, new: int):
    log.info("watch: cell %d %d -> %d", addr, old, new)


def main(argv=None) -> int:
    # Box-drawing characters in breakpoint dumps
    if sys.stdout.encoding and sys.stdout.encoding.lower() not in ('utf-8', 'utf8'):
        if hasattr(sys.stdout, 'reconfigure'):
            sys.stdout.reconfigure(encoding='utf-8', errors='replace')

    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose >= 2:
        console_level = logging.DEBUG
    elif args.verbose == 1:
        console_level = logging.INFO
    else:
        console_level = logging.WARNING
    setup_logging("bf_interpreter", console_level=console_level, log_file=args.log_file)

    if args.source is None:
        print(usage_text(parser.prog))
        return EXIT_FAILURE

    try:
        program = load_program(args.source, args.encoding)
    except InvocationError as e:
        print(f"error: {e}")
        return EXIT_FAILURE

    try:
        config = build_config(args)
    except ValueError as e:
        print(f"error: {e}")
        return EXIT_FAILURE

    log.info("Loaded %s (%d characters), profile %s", args.source, len(program), args.profile)

    engine = Engine(program, config=config)
    for addr in args.watch:
        engine.tape.add_watchpoint(addr, _log_write)

    try:
        reason = engine.run()
    except KeyboardInterrupt:
        print("\nerror: interrupted")
        return EXIT_FAILURE

    if reason is StopReason.DONE:
        return EXIT_OK

    if reason is StopReason.TIMEOUT:
        print(f"error: step limit of {config.max_steps} instructions exceeded\n"
              f"   at: instruction {engine.state.ip}\n"
              f"  ptr: {engine.state.pointer}")
    else:
        print(engine.fault.diagnostic())

    recent = engine.recent_instructions()
    if recent:
        print(f"last {len(recent)} instructions:")
        for line in recent:
            print(f"  {line}")
    return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
