import numpy as np
import pandas as pd
import pytest

from cooccurnet.errors import DataFormatError, UnknownNodeReferenceError
from cooccurnet.pantry import PresenceMatrix, load_presence_matrix


def test_from_dataframe_keeps_order_and_counts(small_matrix):
    assert small_matrix.items == ["sp_a", "sp_b", "sp_c"]
    assert small_matrix.samples == ["s1", "s2", "s3", "s4"]
    assert small_matrix.total_counts.tolist() == [2, 3, 2]
    assert small_matrix.presence_matrix.shape == (3, 4)


def test_item_index_is_one_based(small_matrix):
    assert small_matrix.item_index == {"sp_a": 1, "sp_b": 2, "sp_c": 3}
    assert small_matrix.item_position("sp_c") == 3
    assert small_matrix.item_label(1) == "sp_a"


def test_item_label_out_of_range(small_matrix):
    with pytest.raises(UnknownNodeReferenceError):
        small_matrix.item_label(0)
    with pytest.raises(UnknownNodeReferenceError):
        small_matrix.item_label(4)


def test_unknown_item_position(small_matrix):
    with pytest.raises(KeyError):
        small_matrix.item_position("missing")


@pytest.mark.parametrize("bad", [2, -1, 0.5, "x", np.nan])
def test_non_binary_cell_rejected(small_df, bad):
    df = small_df.astype(object)
    df.iat[1, 2] = bad
    with pytest.raises(DataFormatError, match="sp_b"):
        PresenceMatrix.from_dataframe(df)


def test_duplicate_item_labels_rejected(small_df):
    df = small_df.copy()
    df.index = ["sp_a", "sp_a", "sp_c"]
    with pytest.raises(DataFormatError, match="Duplicate item"):
        PresenceMatrix.from_dataframe(df)


def test_duplicate_sample_labels_rejected(small_df):
    df = small_df.copy()
    df.columns = ["s1", "s2", "s2", "s4"]
    with pytest.raises(DataFormatError, match="Duplicate sample"):
        PresenceMatrix.from_dataframe(df)


def test_duplicate_sample_labels_in_file_rejected(tmp_path):
    path = tmp_path / "dups.csv"
    path.write_text("species,s1,s1\nsp_a,1,0\nsp_b,0,1\n")
    with pytest.raises(DataFormatError, match="Duplicate sample"):
        load_presence_matrix(path)


def test_empty_table_rejected():
    with pytest.raises(DataFormatError):
        PresenceMatrix.from_dataframe(pd.DataFrame())


def test_constructor_rejects_non_binary_sparse():
    with pytest.raises(DataFormatError):
        PresenceMatrix(["a"], ["s1", "s2"], np.array([[1, 3]]))


def test_binarize_converts_abundances(small_df):
    df = small_df * 7
    matrix = PresenceMatrix.from_dataframe(df, binarize=True)
    assert matrix.to_dataframe().to_numpy().tolist() == small_df.to_numpy().tolist()


def test_binarize_still_rejects_negative(small_df):
    df = small_df.copy()
    df.iat[0, 0] = -3
    with pytest.raises(DataFormatError):
        PresenceMatrix.from_dataframe(df, binarize=True)


def test_load_builtin_finches():
    matrix = load_presence_matrix("finches")
    assert matrix.n_items == 13
    assert matrix.n_samples == 17
    assert set(np.unique(matrix.presence_matrix.toarray())) <= {0, 1}
    # Certhidea olivacea is found on every island
    assert matrix.total_counts[matrix.item_position("Certhidea olivacea") - 1] == 17


def test_load_tsv_by_extension(tmp_path, small_df):
    path = tmp_path / "table.tsv"
    small_df.to_csv(path, sep="\t")
    matrix = load_presence_matrix(path)
    assert matrix.items == ["sp_a", "sp_b", "sp_c"]
    assert matrix.total_counts.tolist() == [2, 3, 2]


def test_load_passthrough(small_matrix, small_df):
    assert load_presence_matrix(small_matrix) is small_matrix
    assert load_presence_matrix(small_df).items == small_matrix.items


def test_load_unknown_source():
    with pytest.raises(FileNotFoundError, match="finches"):
        load_presence_matrix("no_such_dataset")


def test_filtered_copies_do_not_touch_original(small_matrix):
    items = small_matrix.filtered_items([True, False, True])
    samples = small_matrix.filtered_samples([0, 1])
    assert items.items == ["sp_a", "sp_c"]
    assert items.item_index == {"sp_a": 1, "sp_c": 2}
    assert samples.samples == ["s1", "s2"]
    assert samples.total_counts.tolist() == [2, 2, 0]
    assert small_matrix.n_items == 3 and small_matrix.n_samples == 4
