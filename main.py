#!/usr/bin/env python3
"""
GadgetSift - ROP gadget listing filter

A command-line tool that parses captured ROPgadget output and keeps the
gadgets matching the requested ending type, mnemonic and argument patterns.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from gadgetsift import __version__
from gadgetsift.error_handling import GadgetSiftError, get_error_handler
from gadgetsift.filters import FilterSpec
from gadgetsift.formatter import format_statistics
from gadgetsift.gadget_set import GadgetSet
from gadgetsift.input_handler import InputHandler


def build_parser() -> argparse.ArgumentParser:
    """Build the command-line argument parser"""
    parser = argparse.ArgumentParser(
        prog='gadgetsift',
        description='🔍 GadgetSift - filter ROP gadget listings',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
📖 QUICK START:

  Capture gadgets once, then filter as often as needed:
    ROPgadget --binary ./target > gadgets.txt
    gadgetsift gadgets.txt --ret --instruction pop --arg rdi

🎯 COMMON USE CASES:

  Gadgets ending in ret or jmp:
    gadgetsift gadgets.txt --ret --jmp

  Syscall gadgets, read from a pipe:
    ROPgadget --binary ./target | gadgetsift - --syscall

  Either of two registers as an argument:
    gadgetsift gadgets.txt --arg rdi --arg rsi
        """
    )

    parser.add_argument(
        'file',
        nargs='?',
        default='-',
        help="File holding captured gadget output ('-' or omitted for stdin)"
    )
    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}'
    )

    types = parser.add_argument_group('🎯 Gadget Type Filters (any selected type matches)')
    types.add_argument(
        '--ret',
        action='store_true',
        help='Keep gadgets ending in ret or retf'
    )
    types.add_argument(
        '--syscall',
        action='store_true',
        help='Keep gadgets ending in syscall or int'
    )
    types.add_argument(
        '--jmp',
        action='store_true',
        help='Keep gadgets ending in jmp'
    )

    content = parser.add_argument_group('🔍 Content Filters (regular expressions)')
    content.add_argument(
        '--instruction',
        action='append',
        metavar='PATTERN',
        help='Keep gadgets with a mnemonic matching PATTERN (repeatable, OR-ed)'
    )
    content.add_argument(
        '--arg',
        action='append',
        metavar='PATTERN',
        help='Keep gadgets with an argument matching PATTERN (repeatable, OR-ed)'
    )

    output = parser.add_argument_group('💾 Output Options')
    output.add_argument(
        '--output', '-o',
        metavar='FILE',
        help='Write matching gadgets to FILE instead of stdout'
    )
    output.add_argument(
        '--stats',
        action='store_true',
        help='Print statistics about the matching gadgets'
    )
    output.add_argument(
        '--skip-malformed',
        action='store_true',
        help='Skip unparseable gadget lines instead of stopping'
    )
    output.add_argument(
        '--debug',
        action='store_true',
        help='Verbose logging and tracebacks on error'
    )

    return parser


def filter_tokens(args: argparse.Namespace) -> List[str]:
    """Rebuild the filter token list (``--ret``, ``--arg=<pattern>``...) from parsed arguments"""
    tokens = [flag for flag, enabled in (('--ret', args.ret),
                                         ('--syscall', args.syscall),
                                         ('--jmp', args.jmp)) if enabled]
    tokens.extend(f'--instruction={pattern}' for pattern in args.instruction or ())
    tokens.extend(f'--arg={pattern}' for pattern in args.arg or ())
    return tokens


def spec_from_args(args: argparse.Namespace) -> FilterSpec:
    """Translate parsed CLI arguments into a validated FilterSpec"""
    return FilterSpec.from_tokens(filter_tokens(args))


def write_output(output: str, output_path: Optional[str] = None):
    """
    Write the filtered listing to the specified destination.

    Args:
        output: Formatted gadget lines
        output_path: Optional file path to write to (None = stdout)

    Raises:
        IOError: If output file cannot be written
    """
    if output_path:
        try:
            Path(output_path).write_text(output + '\n' if output else '', encoding='utf-8')
        except OSError as e:
            raise IOError(f"Cannot write to output file: {output_path}") from e
        print(f"Gadgets written to {output_path}", file=sys.stderr)
    elif output:
        print(output)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the gadgetsift CLI"""
    args = build_parser().parse_args(argv)
    handler = get_error_handler(debug_mode=args.debug)

    try:
        spec = spec_from_args(args)

        lines, stats = InputHandler().read(args.file)
        gadgets = GadgetSet.from_lines(
            lines,
            skip_malformed=args.skip_malformed,
            source=stats['source']
        )

        matched = gadgets.filter(spec)
        write_output('\n'.join(matched.format_lines()), args.output)

        if args.stats:
            print(format_statistics(matched.statistics()))

    except (GadgetSiftError, IOError) as e:
        handler.handle_error(e)
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
