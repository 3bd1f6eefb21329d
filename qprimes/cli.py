#!/usr/bin/env python3
"""
qprimes: list all prime numbers between MIN and MAX.

Usage:
    qprimes 100000000000 100000001000
    qprimes 0x1a30 0xfa30
    qprimes xs 0x1a30 0xfa30
    qprimes --count 0 1000000000
"""

import argparse
import os
import re
import sys
import time
from pathlib import Path

import yaml

from .config import load_config
from .formatting import summary_line, write_primes
from .primes import U64_MAX, PrimeEnumerator


OPTION_LETTERS = """\
OPTION (letters may be combined, e.g. 'xs'):
  s    silent; (outputs just prime numbers)
  v    verbose
  x    outputs prime numbers in hexadecimal form
  d    outputs prime numbers in decimal form

MIN, MAX:
  Unsigned integer below 2^64.
  Prepending '0x' indicates hexadecimal form.
"""


U64_LITERAL = re.compile(r'[0-9]+|0[xX][0-9a-fA-F]+')


def parse_u64(text: str) -> int:
    """Parse a decimal or 0x-prefixed hexadecimal u64 literal."""
    if not U64_LITERAL.fullmatch(text):
        raise argparse.ArgumentTypeError(f"not an unsigned integer: {text!r}")
    value = int(text, 16) if text[:2] in ('0x', '0X') else int(text, 10)
    if value > U64_MAX:
        raise argparse.ArgumentTypeError(f"not an unsigned integer below 2^64: {text!r}")
    return value


def apply_option_letters(letters: str, config: dict) -> None:
    """Apply a letter cluster such as 'xs' to config. Unknown letters are ignored."""
    for c in letters:
        if c == 's':
            config['verbose'] = False
        elif c == 'v':
            config['verbose'] = True
        elif c == 'd':
            config['hexout'] = False
        elif c == 'x':
            config['hexout'] = True


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='qprimes',
        usage='qprimes [OPTION] MIN MAX',
        description='Lists all prime numbers between <min> and <max> to stdout.',
        epilog=OPTION_LETTERS,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument('args', nargs='*', metavar='ARG',
                        help='[OPTION] MIN MAX')
    parser.add_argument('--count', action='store_true',
                        help='Print only the number of primes in range')
    parser.add_argument('--config', type=Path, default=None,
                        help='Path to YAML config file')
    parser.add_argument('--page-exp', type=int, default=None,
                        help='Page size cap as a power of two (default 20)')
    parser.add_argument('--strict', action='store_true',
                        help='Fail when MAX < MIN instead of clamping MAX up to MIN')
    parser.add_argument('--progress', action='store_true',
                        help='Report sieve sizes and timings on stderr')
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_intermixed_args(argv)

    positional = list(args.args)
    try:
        config = load_config(args.config)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        print(f"qprimes: {exc}", file=sys.stderr)
        return 1
    if positional and 'a' <= positional[0][:1] <= 'z':
        apply_option_letters(positional.pop(0), config)

    if len(positional) < 2:
        parser.print_help()
        return 1

    try:
        val_min = parse_u64(positional[0])
        val_max = parse_u64(positional[1])
    except argparse.ArgumentTypeError as exc:
        print(f"qprimes: {exc}", file=sys.stderr)
        return 1

    if args.page_exp is not None:
        config['max_page_exp'] = args.page_exp
    if args.strict:
        config['strict_range'] = True

    t0 = time.time()
    try:
        enumerator = PrimeEnumerator(
            val_min, val_max,
            max_page_exp=config['max_page_exp'],
            strict=config['strict_range'],
            verbose=args.progress,
        )
        if args.count:
            count = enumerator.count()
            print(count)
        else:
            count = write_primes(enumerator, sys.stdout, hexout=config['hexout'])

        if args.progress:
            print(f"  Swept {enumerator.pages_swept:,} pages in {time.time() - t0:.3f}s",
                  file=sys.stderr)

        if config['verbose']:
            print()
            print(summary_line(count, enumerator.val_min, enumerator.val_max))
        sys.stdout.flush()
    except MemoryError:
        # OutOfMemory from a bitset, or any other failed numpy allocation.
        print("\nOut of memory.", file=sys.stderr)
        return 1
    except BrokenPipeError:
        # Reader went away (e.g. `| head`); silence the flush at exit.
        try:
            stdout_fd = sys.stdout.fileno()
            devnull = os.open(os.devnull, os.O_WRONLY)
            os.dup2(devnull, stdout_fd)
            os.close(devnull)
        except (OSError, ValueError):
            pass
        return 1
    except ValueError as exc:
        print(f"qprimes: {exc}", file=sys.stderr)
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
