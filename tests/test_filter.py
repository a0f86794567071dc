import pandas as pd
import pytest

from cooccurnet.filter import filter_data, filter_data_obj
from cooccurnet.pantry import load_presence_matrix


def test_min_sample_count_drops_rare_items(small_matrix):
    # sp_b occupies 3 samples, the others 2
    filtered = filter_data_obj(small_matrix, min_sample_count=3)
    assert filtered.items == ["sp_b"]
    assert filtered.item_index == {"sp_b": 1}
    assert small_matrix.n_items == 3


def test_min_item_count_drops_sparse_samples(small_matrix):
    # sample item counts: s1=2, s2=2, s3=1, s4=2
    filtered = filter_data_obj(small_matrix, min_item_count=2)
    assert filtered.samples == ["s1", "s2", "s4"]


def test_no_items_left(small_matrix):
    with pytest.warns(UserWarning):
        with pytest.raises(ValueError, match="no items"):
            filter_data_obj(small_matrix, min_sample_count=10)


def test_no_samples_left(small_matrix):
    with pytest.warns(UserWarning):
        with pytest.raises(ValueError, match="no samples"):
            filter_data_obj(small_matrix, min_item_count=10)


def test_file_based_filter_roundtrips(tmp_path, small_df):
    src = tmp_path / "in.csv"
    small_df.to_csv(src)
    filtered = filter_data(str(src), str(tmp_path / "out"), min_sample_count=3, tag="x_")
    reloaded = load_presence_matrix(tmp_path / "out" / "x_filtered_matrix.csv")
    assert reloaded.items == filtered.items == ["sp_b"]
    assert reloaded.samples == ["s1", "s2", "s3", "s4"]
