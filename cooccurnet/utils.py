#!/usr/bin/env python3

import numpy as np
from typing import Iterable, Tuple


def count_upper_pairs(n: int) -> int:
    return (n * (n - 1)) // 2


def stream_upper_pairs(
    n: int,
    chunk_rows: int = 1_000,
) -> Iterable[Tuple[np.ndarray, np.ndarray]]:
    """
    Stream every strict upper-triangle pair (i < j) of an n x n matrix,
    chunked by rows so only one block of index arrays is alive at a time.

    Yields arrays: (i, j), 0-based.
    """
    if chunk_rows <= 0:
        raise ValueError("chunk_rows must be a positive integer")

    rows_out, cols_out = [], []

    for r0 in range(0, n, chunk_rows):
        r1 = min(r0 + chunk_rows, n)

        rows_out.clear(); cols_out.clear()

        for i in range(r0, r1):
            if i + 1 >= n:
                continue
            cols = np.arange(i + 1, n, dtype=np.int64)
            rows_out.append(np.full(cols.size, i, dtype=np.int64))
            cols_out.append(cols)

        if rows_out:
            yield (np.concatenate(rows_out),
                   np.concatenate(cols_out))
