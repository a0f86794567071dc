#!/usr/bin/env python3
"""
network.py

Turns a presence/absence matrix and its significant co-occurrence records into
the two tables a network renderer consumes:

    nodes   id, label, color, shadow      one row per item, isolated items included
    edges   from, to, color, dashed       one row per significant record

Edge styling encodes the direction of the association:

    p_lt <= threshold   co-occur less than expected   light colour, dashed
    otherwise           co-occur more than expected   dark colour, solid

p_lt is checked first, so a record significant in both directions is drawn as
a negative association.

Usage (file-based):
    cooccurnet network --input finches --output_dir /path/to/out
"""

import math
import os
from typing import Tuple, Optional

import pandas as pd

from cooccurnet._data_config import (
    SIGNIFICANCE_THRESHOLD,
    NODE_COLOR,
    EDGE_LIGHT_COLOR,
    EDGE_DARK_COLOR,
)
from cooccurnet.errors import DataFormatError, UnknownNodeReferenceError
from cooccurnet.pantry import PresenceMatrix, load_presence_matrix

NODE_COLUMNS = ["id", "label", "color", "shadow"]
EDGE_COLUMNS = ["from", "to", "color", "dashed"]
RECORD_COLUMNS = ["sp1", "sp2", "p_lt"]


def build_nodes(matrix: PresenceMatrix) -> pd.DataFrame:
    rows = []
    for label, node_id in matrix.item_index.items():
        rows.append({
            "id": node_id,
            "label": label,
            "color": NODE_COLOR,
            "shadow": True,
        })
    nodes = pd.DataFrame(rows, columns=NODE_COLUMNS)
    return nodes.sort_values("id").reset_index(drop=True)


def _check_reference(value, n_items: int, field: str) -> int:
    # whole, finite and in 1..n_items; 1.9 must not truncate to node 1
    try:
        as_float = float(value)
    except (TypeError, ValueError):
        raise UnknownNodeReferenceError(value, n_items, field=field) from None
    if not math.isfinite(as_float) or not as_float.is_integer():
        raise UnknownNodeReferenceError(value, n_items, field=field)
    index = int(as_float)
    if not 1 <= index <= n_items:
        raise UnknownNodeReferenceError(index, n_items, field=field)
    return index


def build_edges(
    significant,
    n_items: int,
    threshold: float = SIGNIFICANCE_THRESHOLD,
) -> pd.DataFrame:
    """
    One edge per co-occurrence record, in record order. Records are not
    deduplicated.

    `significant` is a co-occurrence DataFrame (or anything pd.DataFrame
    accepts) with at least sp1, sp2 and p_lt columns.
    """
    if not isinstance(significant, pd.DataFrame):
        significant = pd.DataFrame(significant)

    # an empty record list carries no columns at all
    if significant.empty and significant.columns.empty:
        return pd.DataFrame([], columns=EDGE_COLUMNS)

    missing = [c for c in RECORD_COLUMNS if c not in significant.columns]
    if missing:
        raise DataFormatError(
            f"Co-occurrence records are missing required column(s): {', '.join(missing)}"
        )

    rows = []
    for sp1, sp2, p_lt in zip(significant["sp1"], significant["sp2"], significant["p_lt"]):
        first = _check_reference(sp1, n_items, "sp1")
        second = _check_reference(sp2, n_items, "sp2")
        low = bool(p_lt <= threshold)
        rows.append({
            "from": first,
            "to": second,
            "color": EDGE_LIGHT_COLOR if low else EDGE_DARK_COLOR,
            "dashed": low,
        })

    return pd.DataFrame(rows, columns=EDGE_COLUMNS)


def build_network_obj(
    matrix: PresenceMatrix,
    significant,
    threshold: float = SIGNIFICANCE_THRESHOLD,
) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """Node and edge tables for `matrix` and its significant co-occurrence records."""
    nodes = build_nodes(matrix)
    edges = build_edges(significant, matrix.n_items, threshold=threshold)
    return nodes, edges


def build_network(
    source,
    output_dir: str,
    tag: Optional[str] = None,
    threshold: float = SIGNIFICANCE_THRESHOLD,
    binarize: bool = False,
) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """
    File-based network construction: load, run the co-occurrence analysis and
    write {tag}nodes.tsv and {tag}edges.tsv into output_dir.
    """
    from cooccurnet.analysis import compute_cooccurrence

    tag = tag or ""
    os.makedirs(output_dir, exist_ok=True)

    matrix = load_presence_matrix(source, binarize=binarize)
    significant = compute_cooccurrence(matrix, significance_threshold=threshold)
    nodes, edges = build_network_obj(matrix, significant, threshold=threshold)

    nodes_path = os.path.join(output_dir, f"{tag}nodes.tsv")
    nodes.to_csv(nodes_path, sep="\t", index=False)
    print(f"Network nodes saved to {nodes_path}")

    edges_path = os.path.join(output_dir, f"{tag}edges.tsv")
    edges.to_csv(edges_path, sep="\t", index=False)
    print(f"Network edges saved to {edges_path}")

    return nodes, edges
