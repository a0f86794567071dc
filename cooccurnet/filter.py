#!/usr/bin/env python3
"""
filter.py

This module provides two interfaces for filtering:

1. File-based filtering (filter_data):
   Loads a presence/absence table, applies filters, and saves the filtered table.
2. Object-based filtering (filter_data_obj):
   Accepts a PresenceMatrix and returns a filtered PresenceMatrix.

Usage (file-based):
    cooccurnet filter --input finches --output_dir /path/to/out --min_sample_count 2 --min_item_count 3
"""

import os
import warnings

import numpy as np

from cooccurnet.pantry import PresenceMatrix, load_presence_matrix


def filter_items_by_sample_count(matrix, min_sample_count):
    # keep items present in at least min_sample_count samples
    mask = matrix.total_counts >= min_sample_count
    if not mask.any():
        warnings.warn("No items meet the sample count threshold.", UserWarning)
        return None
    return matrix.filtered_items(mask)


def filter_samples_by_item_count(matrix, min_item_count):
    # keep samples holding at least min_item_count items
    item_counts = np.asarray(matrix.presence_matrix.sum(axis=0)).ravel()
    mask = item_counts >= min_item_count
    if not mask.any():
        warnings.warn("No samples meet the item count threshold.", UserWarning)
        return None
    return matrix.filtered_samples(mask)


def filter_data_obj(matrix: PresenceMatrix, min_sample_count=None, min_item_count=None) -> PresenceMatrix:

    filtered = matrix.copy()

    if min_item_count is not None:
        filtered = filter_samples_by_item_count(filtered, min_item_count)
        if filtered is None:
            raise ValueError(f"Filtering by minimum item count of {min_item_count} resulted in no samples.")

    if min_sample_count is not None:
        filtered = filter_items_by_sample_count(filtered, min_sample_count)
        if filtered is None:
            raise ValueError(
                f"Filtering by minimum sample count of {min_sample_count} resulted in no items. "
                f"{'Could be affected by item count filtering' if min_item_count is not None else ''}"
            )

    return filtered


def filter_data(source,
                output_dir,
                min_sample_count=None,
                min_item_count=None,
                tag=None,
                binarize=False):

    os.makedirs(output_dir, exist_ok=True)

    matrix = load_presence_matrix(source, binarize=binarize)

    filtered = filter_data_obj(matrix,
                               min_sample_count=min_sample_count,
                               min_item_count=min_item_count)

    final_path = os.path.join(output_dir, f"{tag or ''}filtered_matrix.csv")
    filtered.to_dataframe().to_csv(final_path)
    print(f"Filtered matrix ({filtered.n_items} items x {filtered.n_samples} samples) saved to {final_path}")

    return filtered
