#!/usr/bin/env python3
"""
Benchmark page sizes for the segmented sieve.

Compares count_primes over the same ranges with different page size caps,
and checks every run agrees on the count.

Usage:
    python benchmark.py
    python benchmark.py --config config/default.yaml --exps 12 16 20
"""

import argparse
import sys
import time

from qprimes.config import load_config
from qprimes.primes import PrimeEnumerator


RANGES = [
    (0, 10**7),
    (10**9, 10**9 + 10**6),
    (10**11, 10**11 + 10**5),
]


def benchmark(val_min: int, val_max: int, exps: list) -> dict:
    """Time count() for each page exponent. Returns {exp: (count, seconds)}."""
    results = {}
    for exp in exps:
        t0 = time.time()
        enumerator = PrimeEnumerator(val_min, val_max, max_page_exp=exp)
        count = enumerator.count()
        elapsed = time.time() - t0
        results[exp] = (count, elapsed)
        print(f"  2^{enumerator.plan.page_exp:<2} bits/page  {enumerator.pages_swept:>8,} pages  "
              f"{count:>10,} primes  {elapsed:.2f}s")
    return results


def main():
    parser = argparse.ArgumentParser(description='Benchmark segmented sieve page sizes')
    parser.add_argument('--config', type=str, default=None,
                        help='Path to config file (default cap taken from it)')
    parser.add_argument('--exps', type=int, nargs='+', default=None,
                        help='Page size exponents to compare')
    args = parser.parse_args()

    config = load_config(args.config)
    exps = args.exps or sorted({12, 16, config['max_page_exp']})

    for val_min, val_max in RANGES:
        print("=" * 60)
        print(f"Range [{val_min:,}, {val_max:,}]")
        print("=" * 60)
        results = benchmark(val_min, val_max, exps)
        counts = {count for count, _ in results.values()}
        if len(counts) != 1:
            print(f"ERROR: counts disagree across page sizes: {results}")
            sys.exit(1)
        print()


if __name__ == '__main__':
    main()
