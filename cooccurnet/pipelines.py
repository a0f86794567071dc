#!/usr/bin/env python3
"""
pipelines.py

This module defines pipeline functions for cooccurnet.

The primary function is:
    run_network(args)

This function runs the full in-memory pipeline, which includes:
  1. Loading a presence/absence matrix (built-in dataset name or CSV/TSV path).
  2. Optionally filtering rare items and sparse samples.
  3. Running the probabilistic co-occurrence analysis.
  4. Building the node and edge tables from the significant pairs.
  5. Saving the tables and rendering the interactive network as HTML.

Each stage raises immediately on failure; nothing is retried and no partial
output is written after a failing stage.
"""

import os

from cooccurnet.pantry import load_presence_matrix
from cooccurnet.filter import filter_data_obj
from cooccurnet.analysis import (
    cooccurrence_obj,
    significant_pairs,
    summarize_cooccurrence,
)
from cooccurnet.network import build_network_obj
from cooccurnet.render import render_network


def run_network(args):
    """
    Run the full co-occurrence network pipeline in memory.

    Expected attributes in args:
      - input, output_dir, tag
      - binarize (boolean)
      - min_sample_count, min_item_count (optional)
      - threshold, prob, thresh (boolean)
      - layout

    Returns (nodes_df, edges_df, result_df).
    """
    os.makedirs(args.output_dir, exist_ok=True)

    # Step 1. Load the presence/absence matrix.
    matrix = load_presence_matrix(args.input, binarize=args.binarize)
    print(f"Pipeline: Loaded {matrix.n_items} items x {matrix.n_samples} samples.")

    # Step 2. Filter.
    if args.min_sample_count is not None or args.min_item_count is not None:
        matrix = filter_data_obj(
            matrix,
            min_sample_count=args.min_sample_count,
            min_item_count=args.min_item_count,
        )
        print(f"Pipeline: {matrix.n_items} items x {matrix.n_samples} samples after filtering.")

    # Step 3. Co-occurrence.
    result = cooccurrence_obj(
        matrix,
        threshold=args.threshold,
        thresh=args.thresh,
        prob=args.prob,
        progress=True,
    )
    significant = significant_pairs(result, args.threshold)
    summary = summarize_cooccurrence(result, threshold=args.threshold)
    print(
        f"Pipeline: {summary['pairs_analysed']} pairs analysed, "
        f"{summary['positive']} positive, {summary['negative']} negative."
    )

    result_path = os.path.join(args.output_dir, f"{args.tag}cooccurrence.tsv")
    result.to_csv(result_path, sep="\t", index=False)
    print(f"Pipeline: Co-occurrence table saved to {result_path}")

    # Step 4. Build node/edge tables.
    nodes, edges = build_network_obj(matrix, significant, threshold=args.threshold)

    nodes_path = os.path.join(args.output_dir, f"{args.tag}nodes.tsv")
    nodes.to_csv(nodes_path, sep="\t", index=False)
    edges_path = os.path.join(args.output_dir, f"{args.tag}edges.tsv")
    edges.to_csv(edges_path, sep="\t", index=False)
    print(f"Pipeline: Network tables saved to {nodes_path} and {edges_path}")

    # Step 5. Render.
    html_path = os.path.join(args.output_dir, f"{args.tag}network.html")
    render_network(nodes, edges, layout=args.layout, output_file=html_path)
    print("Pipeline: Rendering complete.")

    return nodes, edges, result
