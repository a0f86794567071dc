#!/usr/bin/env python3
"""
analysis.py

Probabilistic pairwise co-occurrence (Veech 2013).

For two items occupying N1 and N2 of N samples, the number of samples they
share under independent random placement follows a hypergeometric
distribution. For every pair i < j this module reports:

    obs_cooccur   observed number of shared samples
    prob_cooccur  (N1/N) * (N2/N)
    exp_cooccur   prob_cooccur * N
    p_lt          P(shared <= obs)   co-occur less than expected
    p_gt          P(shared >= obs)   co-occur more than expected

Usage (file-based):
    cooccurnet cooccurrence --input finches --output_dir /path/to/out
"""

import os
from typing import Optional, List

import numpy as np
import pandas as pd
from scipy.special import comb
from scipy.stats import hypergeom
from tqdm import tqdm

from cooccurnet._data_config import SIGNIFICANCE_THRESHOLD
from cooccurnet.errors import EngineError
from cooccurnet.pantry import PresenceMatrix, load_presence_matrix
from cooccurnet.utils import count_upper_pairs, stream_upper_pairs

RESULT_COLUMNS = [
    "sp1", "sp2",
    "sp1_inc", "sp2_inc",
    "obs_cooccur", "prob_cooccur", "exp_cooccur",
    "p_lt", "p_gt",
    "sp1_name", "sp2_name",
]

PROB_METHODS = ("hyper", "comb")


def _probabilities_hyper(obs, n1, n2, N):
    p_lt = hypergeom.cdf(obs, N, n1, n2)
    p_gt = hypergeom.sf(obs - 1, N, n1, n2)
    return p_lt, p_gt


def _probabilities_comb(obs, n1, n2, N):
    """
    Same distribution as _probabilities_hyper, summed term by term:

        P(j) = C(N1, j) * C(N - N1, N2 - j) / C(N, N2)
    """
    p_lt = np.empty(obs.size, dtype=float)
    p_gt = np.empty(obs.size, dtype=float)
    for k in range(obs.size):
        a, b, o = int(n1[k]), int(n2[k]), int(obs[k])
        lo = max(0, a + b - N)
        hi = min(a, b)
        j = np.arange(lo, hi + 1)
        pj = comb(a, j) * comb(N - a, b - j) / comb(N, b)
        p_lt[k] = pj[j <= o].sum()
        p_gt[k] = pj[j >= o].sum()
    return p_lt, p_gt


def pair_probabilities(obs, n1, n2, N: int, prob: str = "hyper"):
    """
    Vectorised (p_lt, p_gt) for arrays of observed co-occurrences and
    incidences. Failures inside scipy, or non-finite output, raise EngineError.
    """
    if prob not in PROB_METHODS:
        raise ValueError(f"prob must be one of {PROB_METHODS}, got '{prob}'")

    obs = np.asarray(obs, dtype=np.int64)
    n1 = np.asarray(n1, dtype=np.int64)
    n2 = np.asarray(n2, dtype=np.int64)

    try:
        with np.errstate(divide="ignore", invalid="ignore"):
            if prob == "hyper":
                p_lt, p_gt = _probabilities_hyper(obs, n1, n2, N)
            else:
                p_lt, p_gt = _probabilities_comb(obs, n1, n2, N)
    except (ValueError, ArithmeticError) as e:
        raise EngineError(f"Co-occurrence probability computation failed: {e}") from e

    p_lt = np.asarray(p_lt, dtype=float)
    p_gt = np.asarray(p_gt, dtype=float)
    if not (np.all(np.isfinite(p_lt)) and np.all(np.isfinite(p_gt))):
        raise EngineError(
            "Co-occurrence probability computation produced non-finite p-values"
        )

    return np.clip(p_lt, 0.0, 1.0), np.clip(p_gt, 0.0, 1.0)


def _empty_result() -> pd.DataFrame:
    return pd.DataFrame({c: pd.Series(dtype=object if c.endswith("_name") else float)
                         for c in RESULT_COLUMNS})


def _pair_chunk(iA, iB, co_mat, totals, N, items, prob) -> pd.DataFrame:
    n1 = totals[iA]
    n2 = totals[iB]
    obs = np.asarray(co_mat[iA, iB]).ravel().astype(np.int64)

    prob_cooccur = (n1 / float(N)) * (n2 / float(N))
    exp_cooccur = prob_cooccur * N

    p_lt, p_gt = pair_probabilities(obs, n1, n2, N, prob=prob)

    items_arr = np.asarray(items, dtype=object)
    return pd.DataFrame({
        "sp1": iA + 1,
        "sp2": iB + 1,
        "sp1_inc": n1,
        "sp2_inc": n2,
        "obs_cooccur": obs,
        "prob_cooccur": prob_cooccur,
        "exp_cooccur": exp_cooccur,
        "p_lt": p_lt,
        "p_gt": p_gt,
        "sp1_name": items_arr[iA],
        "sp2_name": items_arr[iB],
    })


def cooccurrence_obj(
    matrix: PresenceMatrix,
    threshold: float = SIGNIFICANCE_THRESHOLD,
    thresh: bool = True,
    prob: str = "hyper",
    only_significant: bool = False,
    progress: bool = False,
    chunk_rows: int = 1_000,
) -> pd.DataFrame:
    """
    Pairwise probabilistic co-occurrence of all items in `matrix`.

    Parameters
    ----------
    matrix : PresenceMatrix
        Items x samples presence/absence.
    threshold : float
        Significance level used when only_significant is True.
    thresh : bool
        Drop pairs expected to share fewer than one sample; they cannot be
        tested meaningfully.
    prob : {"hyper", "comb"}
        Hypergeometric distribution from scipy.stats, or the same
        distribution summed term by term.
    only_significant : bool
        Return only pairs with p_lt or p_gt <= threshold.
    progress : bool
        Show a tqdm progress bar over row chunks.

    Returns
    -------
    pd.DataFrame
        One row per item pair, sp1 < sp2 (1-based row positions), sorted by
        (sp1, sp2). attrs carries n_items, n_samples, pairs_total and
        pairs_removed.
    """
    if prob not in PROB_METHODS:
        raise ValueError(f"prob must be one of {PROB_METHODS}, got '{prob}'")

    n_items = matrix.n_items
    N = matrix.n_samples
    pairs_total = count_upper_pairs(n_items)

    X = matrix.presence_matrix.tocsr()
    totals = matrix.total_counts
    co_mat = (X @ X.T).tocsr()

    chunks: List[pd.DataFrame] = []
    n_chunks = -(-n_items // chunk_rows) if n_items else 0
    for iA, iB in tqdm(
        stream_upper_pairs(n_items, chunk_rows=chunk_rows),
        total=n_chunks,
        desc="Co-occurrence",
        disable=not progress,
    ):
        chunks.append(_pair_chunk(iA, iB, co_mat, totals, N, matrix.items, prob))

    if chunks:
        result = pd.concat(chunks, ignore_index=True)
    else:
        result = _empty_result()

    pairs_removed = 0
    if thresh and len(result):
        keep = result["exp_cooccur"] >= 1
        pairs_removed = int((~keep).sum())
        result = result.loc[keep]

    result = result.sort_values(["sp1", "sp2"]).reset_index(drop=True)

    if only_significant:
        result = significant_pairs(result, threshold)

    result.attrs.update({
        "n_items": n_items,
        "n_samples": N,
        "pairs_total": pairs_total,
        "pairs_removed": pairs_removed,
    })
    return result


def significant_pairs(result: pd.DataFrame, threshold: float = SIGNIFICANCE_THRESHOLD) -> pd.DataFrame:
    """Keep rows where either one-sided p-value is at or below threshold."""
    mask = (result["p_lt"] <= threshold) | (result["p_gt"] <= threshold)
    out = result.loc[mask].reset_index(drop=True)
    out.attrs = dict(result.attrs)
    return out


def compute_cooccurrence(
    matrix: PresenceMatrix,
    significance_threshold: float = SIGNIFICANCE_THRESHOLD,
) -> pd.DataFrame:
    """Significant co-occurrence records for every notable item pair."""
    result = cooccurrence_obj(matrix, threshold=significance_threshold)
    return significant_pairs(result, significance_threshold)


def classify_pairs(
    result: pd.DataFrame,
    n_samples: int,
    threshold: float = SIGNIFICANCE_THRESHOLD,
    true_rand_classifier: float = 0.1,
) -> pd.Series:
    """
    Label each pair 'negative', 'positive', 'random' or 'unclassifiable'.

    Negative is checked first, matching the edge styling. A pair is random
    when neither p-value is significant and the observed co-occurrence lies
    within n_samples * true_rand_classifier of the expectation.
    """
    labels = []
    tolerance = n_samples * true_rand_classifier
    for p_lt, p_gt, obs, exp in zip(
        result["p_lt"], result["p_gt"], result["obs_cooccur"], result["exp_cooccur"]
    ):
        if p_lt <= threshold:
            labels.append("negative")
        elif p_gt <= threshold:
            labels.append("positive")
        elif abs(obs - exp) <= tolerance:
            labels.append("random")
        else:
            labels.append("unclassifiable")
    return pd.Series(labels, index=result.index, dtype=object, name="classification")


def summarize_cooccurrence(
    result: pd.DataFrame,
    n_items: Optional[int] = None,
    n_samples: Optional[int] = None,
    threshold: float = SIGNIFICANCE_THRESHOLD,
    true_rand_classifier: float = 0.1,
) -> pd.Series:
    """
    Matrix-level summary of a co-occurrence table: how many pairs were
    analysed and how they split into positive, negative, random and
    unclassifiable associations.
    """
    n_items = n_items if n_items is not None else result.attrs.get("n_items")
    n_samples = n_samples if n_samples is not None else result.attrs.get("n_samples")
    if n_items is None or n_samples is None:
        raise ValueError("n_items and n_samples are required when result carries no attrs")

    classes = classify_pairs(result, n_samples, threshold, true_rand_classifier)
    counts = classes.value_counts()
    n_pairs = len(result)
    positive = int(counts.get("positive", 0))
    negative = int(counts.get("negative", 0))

    return pd.Series({
        "items": int(n_items),
        "samples": int(n_samples),
        "positive": positive,
        "negative": negative,
        "random": int(counts.get("random", 0)),
        "unclassifiable": int(counts.get("unclassifiable", 0)),
        "pairs_analysed": n_pairs,
        "pairs_total": int(result.attrs.get("pairs_total", count_upper_pairs(n_items))),
        "pairs_removed": int(result.attrs.get("pairs_removed", 0)),
        "non_random_percent": (100.0 * (positive + negative) / n_pairs) if n_pairs else np.nan,
    }, dtype=object)


def effect_sizes(
    result: pd.DataFrame,
    n_samples: Optional[int] = None,
    standardized: bool = True,
    as_matrix: bool = False,
    items: Optional[List[str]] = None,
) -> pd.DataFrame:
    """
    Effect size per pair: obs_cooccur - exp_cooccur, divided by the number of
    samples when standardized.

    With as_matrix=True returns a symmetric item x item DataFrame (NaN where a
    pair was not analysed) ordered by `items`, or by first appearance.
    """
    effect = result["obs_cooccur"].astype(float) - result["exp_cooccur"].astype(float)
    if standardized:
        n_samples = n_samples if n_samples is not None else result.attrs.get("n_samples")
        if not n_samples:
            raise ValueError("n_samples is required to standardise effect sizes")
        effect = effect / float(n_samples)

    effects = pd.DataFrame({
        "sp1_name": result["sp1_name"].values,
        "sp2_name": result["sp2_name"].values,
        "effect": effect.values,
    })
    if not as_matrix:
        return effects

    if items is None:
        items = list(dict.fromkeys(list(effects["sp1_name"]) + list(effects["sp2_name"])))
    mat = pd.DataFrame(np.nan, index=items, columns=items)
    for a, b, e in effects.itertuples(index=False):
        mat.loc[a, b] = e
        mat.loc[b, a] = e
    return mat


def pair_profile(
    result: pd.DataFrame,
    threshold: float = SIGNIFICANCE_THRESHOLD,
    items: Optional[List[str]] = None,
) -> pd.DataFrame:
    """
    Per-item partner summary: number of analysed partners and the share of
    them that are positively or negatively associated.
    """
    negative = result["p_lt"] <= threshold
    positive = ~negative & (result["p_gt"] <= threshold)

    long = pd.DataFrame({
        "item": pd.concat([result["sp1_name"], result["sp2_name"]], ignore_index=True),
        "positive": pd.concat([positive, positive], ignore_index=True).astype(int),
        "negative": pd.concat([negative, negative], ignore_index=True).astype(int),
    })
    profile = long.groupby("item", sort=False).agg(
        pairs=("positive", "count"),
        positive=("positive", "sum"),
        negative=("negative", "sum"),
    )
    if items is not None:
        profile = profile.reindex(items, fill_value=0)
    profile.index.name = "item"

    with np.errstate(divide="ignore", invalid="ignore"):
        pairs = profile["pairs"].to_numpy(dtype=float)
        profile["percent_positive"] = np.where(pairs > 0, 100.0 * profile["positive"] / pairs, 0.0)
        profile["percent_negative"] = np.where(pairs > 0, 100.0 * profile["negative"] / pairs, 0.0)

    return profile.reset_index()


def cooccurrence(
    source,
    output_dir: str,
    tag: Optional[str] = None,
    threshold: float = SIGNIFICANCE_THRESHOLD,
    thresh: bool = True,
    prob: str = "hyper",
    binarize: bool = False,
    true_rand_classifier: float = 0.1,
) -> pd.DataFrame:
    """
    File-based co-occurrence analysis.

    Writes into output_dir (created if needed), prefixed with tag:
      - {tag}cooccurrence.tsv       every analysed pair
      - {tag}significant_pairs.tsv  pairs with p_lt or p_gt <= threshold
      - {tag}summary.tsv            matrix-level summary
    """
    tag = tag or ""
    os.makedirs(output_dir, exist_ok=True)

    matrix = load_presence_matrix(source, binarize=binarize)
    result = cooccurrence_obj(matrix, threshold=threshold, thresh=thresh, prob=prob, progress=True)

    output_path = os.path.join(output_dir, f"{tag}cooccurrence.tsv")
    result.to_csv(output_path, sep="\t", index=False)
    print(f"Co-occurrence table saved to {output_path}")

    sig = significant_pairs(result, threshold)
    sig_path = os.path.join(output_dir, f"{tag}significant_pairs.tsv")
    sig.to_csv(sig_path, sep="\t", index=False)
    print(f"Significant pairs ({len(sig)}) saved to {sig_path}")

    summary = summarize_cooccurrence(result, threshold=threshold, true_rand_classifier=true_rand_classifier)
    summary_path = os.path.join(output_dir, f"{tag}summary.tsv")
    summary.to_frame("value").to_csv(summary_path, sep="\t", index_label="statistic")
    print(f"Summary saved to {summary_path}")

    return result
