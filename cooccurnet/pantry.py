#!/usr/bin/env python3

import os
from pathlib import Path
from typing import List, Optional, Union

import numpy as np
import pandas as pd
import scipy.sparse as sp

from cooccurnet._data_config import DATASETS, get_dataset_path
from cooccurnet.errors import DataFormatError, UnknownNodeReferenceError


class PresenceMatrix:
    """
    Container for a binary presence/absence matrix.

    Attributes:
        items (List[str]): Item identifiers (rows), e.g. species.
        samples (List[str]): Sample identifiers (columns), e.g. sites.
        presence_matrix (sp.csr_matrix): Binary presence/absence, items x samples.
        total_counts (np.ndarray): Cached per-item incidence (samples occupied).
        item_index (Dict[str,int]): Item label -> 1-based row position.
    """
    def __init__(
        self,
        items: List[str],
        samples: List[str],
        presence_matrix: sp.csr_matrix,
    ):
        self.items = [str(i) for i in items]
        self.samples = [str(s) for s in samples]
        _check_labels(self.items, "item")
        _check_labels(self.samples, "sample")

        presence_matrix = sp.csr_matrix(presence_matrix, copy=True)
        if presence_matrix.shape != (len(self.items), len(self.samples)):
            raise DataFormatError(
                f"Matrix shape {presence_matrix.shape} does not match "
                f"{len(self.items)} items x {len(self.samples)} samples"
            )
        presence_matrix.eliminate_zeros()
        if presence_matrix.nnz and not np.all(presence_matrix.data == 1):
            raise DataFormatError("Presence matrix contains values other than 0 and 1")

        self._presence_matrix = presence_matrix.astype(np.int64)
        self.item_index = {item: i + 1 for i, item in enumerate(self.items)}
        self.total_counts = self._compute_total_counts()

    @classmethod
    def from_dataframe(cls, df: pd.DataFrame, binarize: bool = False) -> "PresenceMatrix":
        """
        Build from a DataFrame indexed by item with one column per sample.

        With binarize=True, abundances are reduced to presence (> 0 -> 1).
        """
        if df.shape[0] == 0 or df.shape[1] == 0:
            raise DataFormatError(
                f"Presence/absence table must have at least one item and one sample, got shape {df.shape}"
            )

        items = [str(i) for i in df.index]
        samples = [str(c) for c in df.columns]
        _check_labels(items, "item")
        _check_labels(samples, "sample")

        values = df.apply(pd.to_numeric, errors="coerce").to_numpy(dtype=float)

        bad = np.isnan(values)
        if binarize:
            bad |= values < 0
        else:
            bad |= ~np.isin(values, (0.0, 1.0))
        if bad.any():
            r, c = np.argwhere(bad)[0]
            raise DataFormatError(
                f"Invalid presence/absence value {df.iat[r, c]!r} at item '{items[r]}', "
                f"sample '{samples[c]}'"
                + ("" if binarize else " (expected 0 or 1)")
            )

        if binarize:
            values = values > 0

        return cls(items, samples, sp.csr_matrix(values.astype(np.int64)))

    @property
    def presence_matrix(self) -> sp.csr_matrix:
        return self._presence_matrix

    @property
    def n_items(self) -> int:
        return len(self.items)

    @property
    def n_samples(self) -> int:
        return len(self.samples)

    def _compute_total_counts(self) -> np.ndarray:
        return np.asarray(self._presence_matrix.sum(axis=1)).ravel().astype(np.int64)

    def __repr__(self):
        return (
            f"<PresenceMatrix: {len(self.items)} items, "
            f"{len(self.samples)} samples, "
            f"presence: {self.presence_matrix.shape}, "
            f"occupied cells: {self.presence_matrix.nnz}>"
        )

    def copy(self):
        return PresenceMatrix(
            items=self.items.copy(),
            samples=self.samples.copy(),
            presence_matrix=self.presence_matrix.copy(),
        )

    def to_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame(
            self.presence_matrix.toarray(),
            index=pd.Index(self.items, name="item"),
            columns=self.samples,
        )

    def item_position(self, label: str) -> int:
        """1-based row position of an item label."""
        try:
            return self.item_index[label]
        except KeyError:
            raise KeyError(f"Item '{label}' is not in the presence matrix") from None

    def item_label(self, position: int) -> str:
        if not 1 <= position <= len(self.items):
            raise UnknownNodeReferenceError(position, len(self.items), field="position")
        return self.items[position - 1]

    def filtered_items(self, mask) -> "PresenceMatrix":
        """
        Return a new PresenceMatrix restricted to the selected items (rows).

        Args:
            mask (List[bool] | List[int] | np.ndarray): Boolean mask or 0-based indices of items to keep.
        """
        idxs = _mask_to_indices(mask)
        return PresenceMatrix(
            items=[self.items[i] for i in idxs],
            samples=self.samples.copy(),
            presence_matrix=self.presence_matrix[idxs, :],
        )

    def filtered_samples(self, mask) -> "PresenceMatrix":
        """
        Return a new PresenceMatrix restricted to the selected samples (columns).
        """
        idxs = _mask_to_indices(mask)
        return PresenceMatrix(
            items=self.items.copy(),
            samples=[self.samples[i] for i in idxs],
            presence_matrix=self.presence_matrix[:, idxs],
        )


def _mask_to_indices(mask) -> List[int]:
    if isinstance(mask, (np.ndarray, list)):
        arr = np.array(mask)
        if arr.dtype == bool:
            return np.nonzero(arr)[0].tolist()
        return arr.astype(int).tolist()
    raise ValueError("mask must be a list or numpy array of bools or ints")


def _check_labels(labels: List[str], kind: str) -> None:
    if not labels:
        raise DataFormatError(f"Presence/absence table has no {kind} labels")
    seen = set()
    dups = []
    for label in labels:
        if label in seen and label not in dups:
            dups.append(label)
        seen.add(label)
    if dups:
        raise DataFormatError(f"Duplicate {kind} labels: {', '.join(dups)}")


def _sniff_separator(path: Path) -> str:
    suffixes = [s.lower() for s in path.suffixes if s.lower() != ".gz"]
    if suffixes and suffixes[-1] in (".tsv", ".tab", ".txt"):
        return "\t"
    return ","


def read_presence_table(path: Union[str, Path], sep: Optional[str] = None) -> pd.DataFrame:
    """
    Read an items x samples table. The header row holds sample labels and the
    first column holds item labels.

    The header is parsed manually so duplicate sample labels survive
    (pandas would otherwise rename them to 'x.1').
    """
    path = Path(path)
    sep = sep or _sniff_separator(path)
    raw = pd.read_csv(path, sep=sep, header=None, dtype=str, engine="c")
    if raw.shape[0] < 2 or raw.shape[1] < 2:
        raise DataFormatError(
            f"{path} must have a header row and at least one item row with one sample column"
        )

    header = raw.iloc[0, 1:].tolist()
    body = raw.iloc[1:, :]
    df = pd.DataFrame(
        body.iloc[:, 1:].to_numpy(),
        index=body.iloc[:, 0].tolist(),
        columns=header,
    )
    return df


def load_presence_matrix(
    source,
    sep: Optional[str] = None,
    binarize: bool = False,
) -> PresenceMatrix:
    """Load a PresenceMatrix from a dataset name, a CSV/TSV path, a DataFrame or a PresenceMatrix."""

    if isinstance(source, PresenceMatrix):
        return source

    if isinstance(source, pd.DataFrame):
        return PresenceMatrix.from_dataframe(source, binarize=binarize)

    if isinstance(source, str) and source in DATASETS:
        filepath = get_dataset_path(source)
    else:
        filepath = Path(source)

    if not os.path.exists(filepath):
        avail = ", ".join(sorted(DATASETS.keys()))
        raise FileNotFoundError(
            f"Presence/absence table '{source}' not found.\n"
            f"Provide a CSV/TSV path or one of the built-in datasets: {avail}"
        )

    df = read_presence_table(filepath, sep=sep)
    matrix = PresenceMatrix.from_dataframe(df, binarize=binarize)
    print(f"Using {filepath}")

    return matrix
