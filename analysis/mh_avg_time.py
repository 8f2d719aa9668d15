#!/usr/bin/env python3
# Appends the average MH running time per numSamps group to every row of a results CSV
import functools
import math
import operator
import re
import sys
from pathlib import Path

import numpy as np
import pandas as pd

HEADER = 'method,numSamps,time,avgScore,maxScore'
AVG_COLUMN = 'MHavgTime'
OUT_HEADER = HEADER + ',' + AVG_COLUMN
METHOD = 'mh'
MISSING = 'undefined'

_NUMERIC_PREFIX = re.compile(r'[+-]?(?:Infinity|(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?)')


def load_rows(infile):
    """Return the data lines of `infile`, without the header line."""
    with open(infile, encoding='utf-8', errors='replace', newline='') as f:
        lines = f.read().split('\n')
    if lines[0] != HEADER:
        raise AssertionError(f'unexpected header in {infile}: {lines[0]!r}')
    return lines[1:]


def parse_float(text):
    """Parse the leading numeric prefix of `text`; NaN when there is none."""
    if text is None:
        return math.nan
    m = _NUMERIC_PREFIX.match(text.lstrip())
    if m is None:
        return math.nan
    return float(m.group(0).replace('Infinity', 'inf'))


def summarize_mh_times(rows):
    toks = [row.split(',') for row in rows]
    df = pd.DataFrame({
        'method': [t[0] for t in toks],
        'numSamps': [t[1] if len(t) > 1 else MISSING for t in toks],
        'time': [t[2] if len(t) > 2 else None for t in toks],
    })
    mh = df[df['method'] == METHOD].copy()
    mh['time'] = mh['time'].map(parse_float).astype(float)
    if mh.empty:
        return pd.DataFrame({'time_sum': [], 'runs': [], AVG_COLUMN: []},
                            index=pd.Index([], name='numSamps'))
    # left-to-right sum; NaN times still count as runs and poison the mean
    summary = mh.groupby('numSamps', sort=False).agg(
        time_sum=('time', lambda s: functools.reduce(operator.add, s, 0.0)),
        runs=('time', 'size'),
    )
    summary[AVG_COLUMN] = summary['time_sum'] / summary['runs']
    return summary


def compute_mh_avg_times(rows):
    """Map each numSamps key seen on an mh row to its mean time."""
    return summarize_mh_times(rows)[AVG_COLUMN].to_dict()


def format_number(value):
    if value is None:
        return MISSING
    if math.isnan(value):
        return 'NaN'
    if math.isinf(value):
        return 'Infinity' if value > 0 else '-Infinity'
    if value == 0:
        return '0'
    if 1e-6 <= abs(value) < 1e21:
        return np.format_float_positional(value, trim='-')
    return np.format_float_scientific(value, trim='-', exp_digits=1)


def write_rows(outfile, rows, averages):
    with open(outfile, 'w', encoding='utf-8', newline='') as f:
        f.write(OUT_HEADER + '\n')
        for row in rows:
            toks = row.split(',')
            key = toks[1] if len(toks) > 1 else MISSING
            f.write(row + ',' + format_number(averages.get(key)) + '\n')


def compute_mh_avg_time(infile, outfile):
    rows = load_rows(infile)
    summary = summarize_mh_times(rows)
    write_rows(outfile, rows, summary[AVG_COLUMN].to_dict())
    return summary


def main(argv=None):
    argv = sys.argv if argv is None else argv
    if len(argv) < 3:
        print(f'usage: {Path(argv[0]).name} infile outfile')
        return 1
    infile, outfile = argv[1], argv[2]
    compute_mh_avg_time(infile, outfile)
    return 0


if __name__ == '__main__':
    sys.exit(main())
