#!/usr/bin/env python3

import os
from typing import List, Optional

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
from matplotlib.colors import ListedColormap
from matplotlib.patches import Patch

from cooccurnet._data_config import (
    SIGNIFICANCE_THRESHOLD,
    EDGE_LIGHT_COLOR,
    EDGE_DARK_COLOR,
)

# negative, random, positive
_PAIR_COLOURS = [EDGE_LIGHT_COLOR, "#E6E6E6", EDGE_DARK_COLOR]
_PAIR_LABELS = ["negative", "random", "positive"]


def _pair_codes(df: pd.DataFrame, threshold: float) -> np.ndarray:
    # negative checked first, as for network edges
    codes = np.ones(len(df), dtype=int)
    codes[(df["p_gt"] <= threshold).to_numpy()] = 2
    codes[(df["p_lt"] <= threshold).to_numpy()] = 0
    return codes


def plot_cooccurrence_obj(
    df: pd.DataFrame,
    out_file: str,
    items: Optional[List[str]] = None,
    threshold: float = SIGNIFICANCE_THRESHOLD,
):
    """
    Triangular item x item heatmap of pair associations.

    Each analysed pair is coloured negative, random or positive; pairs that
    were not analysed are left blank. Items default to their order of
    appearance in sp1_name/sp2_name.
    """
    if df.empty:
        raise ValueError("DataFrame is empty, nothing to plot.")

    if items is None:
        items = list(dict.fromkeys(list(df["sp1_name"]) + list(df["sp2_name"])))
    pos = {name: i for i, name in enumerate(items)}
    n = len(items)

    grid = np.full((n, n), np.nan)
    for a, b, code in zip(df["sp1_name"], df["sp2_name"], _pair_codes(df, threshold)):
        i, j = pos[a], pos[b]
        # lower triangle: row = later item
        grid[max(i, j), min(i, j)] = code

    size = max(6, 0.35 * n + 3)
    fig, ax = plt.subplots(figsize=(size, size))
    ax.imshow(
        np.ma.masked_invalid(grid),
        cmap=ListedColormap(_PAIR_COLOURS),
        vmin=0,
        vmax=2,
        interpolation="nearest",
    )

    ax.set_xticks(np.arange(n))
    ax.set_yticks(np.arange(n))
    ax.set_xticklabels(items, rotation=90, fontsize=8)
    ax.set_yticklabels(items, fontsize=8)
    ax.set_xticks(np.arange(-0.5, n, 1), minor=True)
    ax.set_yticks(np.arange(-0.5, n, 1), minor=True)
    ax.grid(which="minor", color="white", linewidth=1)
    ax.tick_params(which="minor", length=0)
    for spine in ax.spines.values():
        spine.set_visible(False)

    ax.legend(
        handles=[Patch(facecolor=c, label=l) for c, l in zip(_PAIR_COLOURS, _PAIR_LABELS)],
        loc="upper right",
        frameon=False,
    )
    ax.set_title(f"Pairwise co-occurrence (p ≤ {threshold})", fontsize=14)

    fig.tight_layout()
    fig.savefig(out_file, dpi=300, bbox_inches="tight")
    plt.close(fig)

    print(f"[plot_cooccurrence] Saved: {out_file}")


def plot_obs_v_exp_obj(
    df: pd.DataFrame,
    out_file: str,
    threshold: float = SIGNIFICANCE_THRESHOLD,
):
    """
    Observed vs expected co-occurrence per pair, with the 1:1 line.
    Points above the line co-occur more often than expected.
    """
    if df.empty:
        raise ValueError("DataFrame is empty, nothing to plot.")

    exp_vals = df["exp_cooccur"].to_numpy(dtype=float)
    obs_vals = df["obs_cooccur"].to_numpy(dtype=float)
    colours = np.array(_PAIR_COLOURS, dtype=object)[_pair_codes(df, threshold)]

    fig, ax = plt.subplots(figsize=(7, 7))
    ax.scatter(exp_vals, obs_vals, c=list(colours), s=30, alpha=0.8, edgecolor="black", linewidth=0.3)

    lim = max(exp_vals.max(), obs_vals.max()) * 1.05 + 0.5
    ax.plot([0, lim], [0, lim], color="black", lw=1, linestyle="--")
    ax.set_xlim(0, lim)
    ax.set_ylim(0, lim)
    ax.set_xlabel("Expected co-occurrence", fontsize=14)
    ax.set_ylabel("Observed co-occurrence", fontsize=14)
    ax.set_title("Observed vs Expected Co-occurrence", fontsize=16)
    ax.grid(True, linestyle="--", alpha=0.6)

    fig.tight_layout()
    fig.savefig(out_file, dpi=300, bbox_inches="tight")
    plt.close(fig)

    print(f"[plot_obs_v_exp] Saved: {out_file}")


def plot_cooccurrence(
    cooccurrence_file: str,
    output_dir: str,
    tag: str = "",
    threshold: float = SIGNIFICANCE_THRESHOLD,
):
    if not os.path.exists(cooccurrence_file):
        raise FileNotFoundError(cooccurrence_file)

    os.makedirs(output_dir, exist_ok=True)

    df = pd.read_csv(cooccurrence_file, sep="\t")

    plot_cooccurrence_obj(df, os.path.join(output_dir, f"{tag}cooccurrence_heatmap.png"), threshold=threshold)
    plot_obs_v_exp_obj(df, os.path.join(output_dir, f"{tag}obs_v_exp.png"), threshold=threshold)
