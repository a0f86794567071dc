import matplotlib

matplotlib.use("Agg")

import pandas as pd
import pytest

from cooccurnet.pantry import PresenceMatrix


@pytest.fixture
def small_df():
    """3 items x 4 samples; no pair is significant."""
    return pd.DataFrame(
        [[1, 1, 0, 0],
         [1, 1, 0, 1],
         [0, 0, 1, 1]],
        index=["sp_a", "sp_b", "sp_c"],
        columns=["s1", "s2", "s3", "s4"],
    )


@pytest.fixture
def small_matrix(small_df):
    return PresenceMatrix.from_dataframe(small_df)


@pytest.fixture
def contrast_matrix():
    """
    3 items x 20 samples: a and b share the same ten samples, c occupies the
    other ten. a-b is strongly positive, a-c and b-c strongly negative.
    """
    first = [1] * 10 + [0] * 10
    second = [0] * 10 + [1] * 10
    df = pd.DataFrame(
        [first, first, second],
        index=["a", "b", "c"],
        columns=[f"site{i}" for i in range(1, 21)],
    )
    return PresenceMatrix.from_dataframe(df)


@pytest.fixture
def contrast_csv(tmp_path, contrast_matrix):
    path = tmp_path / "contrast.csv"
    contrast_matrix.to_dataframe().to_csv(path)
    return path
