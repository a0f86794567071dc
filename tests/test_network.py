import pandas as pd
import pytest

from cooccurnet._data_config import EDGE_DARK_COLOR, EDGE_LIGHT_COLOR, NODE_COLOR
from cooccurnet.analysis import compute_cooccurrence
from cooccurnet.errors import DataFormatError, UnknownNodeReferenceError
from cooccurnet.network import (
    EDGE_COLUMNS,
    NODE_COLUMNS,
    build_edges,
    build_network,
    build_network_obj,
    build_nodes,
)
from cooccurnet.pantry import PresenceMatrix, load_presence_matrix


def _records(**kwargs):
    return pd.DataFrame([kwargs])


def test_nodes_one_per_item(small_matrix):
    nodes = build_nodes(small_matrix)
    assert list(nodes.columns) == NODE_COLUMNS
    assert len(nodes) == small_matrix.n_items
    assert nodes["id"].tolist() == [1, 2, 3]
    assert nodes["label"].tolist() == ["sp_a", "sp_b", "sp_c"]
    assert (nodes["color"] == NODE_COLOR).all()
    assert nodes["shadow"].all()


def test_higher_than_expected_edge(small_matrix):
    significant = _records(sp1=1, sp2=2, p_lt=0.6, p_gt=0.02)
    nodes, edges = build_network_obj(small_matrix, significant)
    assert nodes["id"].tolist() == [1, 2, 3]
    assert edges.to_dict("records") == [
        {"from": 1, "to": 2, "color": "#3C3F51", "dashed": False}
    ]


def test_lower_than_expected_edge(small_matrix):
    significant = _records(sp1=1, sp2=3, p_lt=0.01, p_gt=0.8)
    _, edges = build_network_obj(small_matrix, significant)
    assert edges.to_dict("records") == [
        {"from": 1, "to": 3, "color": "#B0B2C1", "dashed": True}
    ]


def test_both_significant_uses_low_styling():
    edges = build_edges(_records(sp1=1, sp2=2, p_lt=0.01, p_gt=0.03), n_items=2)
    assert edges.loc[0, "color"] == EDGE_LIGHT_COLOR
    assert edges.loc[0, "dashed"]


def test_threshold_boundary_is_inclusive():
    edges = build_edges(_records(sp1=1, sp2=2, p_lt=0.05, p_gt=0.9), n_items=2)
    assert edges.loc[0, "dashed"]


def test_one_edge_per_record_without_dedup():
    records = [
        {"sp1": 1, "sp2": 2, "p_lt": 0.9, "p_gt": 0.01},
        {"sp1": 1, "sp2": 2, "p_lt": 0.9, "p_gt": 0.01},
        {"sp1": 2, "sp2": 3, "p_lt": 0.001, "p_gt": 1.0},
    ]
    edges = build_edges(records, n_items=3)
    assert list(edges.columns) == EDGE_COLUMNS
    assert list(zip(edges["from"], edges["to"])) == [(1, 2), (1, 2), (2, 3)]


def test_styling_invariant_on_real_data():
    matrix = load_presence_matrix("finches")
    significant = compute_cooccurrence(matrix)
    _, edges = build_network_obj(matrix, significant)
    assert len(edges) == len(significant)
    assert edges["from"].tolist() == significant["sp1"].tolist()
    assert edges["to"].tolist() == significant["sp2"].tolist()
    low = (significant["p_lt"] <= 0.05).tolist()
    assert edges["dashed"].tolist() == low
    assert ((edges["color"] == EDGE_LIGHT_COLOR) == edges["dashed"]).all()
    assert set(edges["color"]) <= {EDGE_LIGHT_COLOR, EDGE_DARK_COLOR}


def test_builder_is_idempotent(contrast_matrix):
    significant = compute_cooccurrence(contrast_matrix)
    first = build_network_obj(contrast_matrix, significant)
    second = build_network_obj(contrast_matrix, significant)
    for a, b in zip(first, second):
        pd.testing.assert_frame_equal(a, b)
        assert a.to_csv(index=False) == b.to_csv(index=False)


def test_single_item_matrix():
    matrix = PresenceMatrix.from_dataframe(pd.DataFrame([[1, 1, 0]], index=["solo"]))
    nodes, edges = build_network_obj(matrix, compute_cooccurrence(matrix))
    assert len(nodes) == 1
    assert nodes.loc[0, "id"] == 1
    assert edges.empty
    assert list(edges.columns) == EDGE_COLUMNS


def test_isolated_items_still_nodes(contrast_matrix):
    # only a-b linked
    significant = _records(sp1=1, sp2=2, p_lt=1.0, p_gt=0.001)
    nodes, edges = build_network_obj(contrast_matrix, significant)
    assert nodes["label"].tolist() == ["a", "b", "c"]
    assert len(edges) == 1


@pytest.mark.parametrize(
    "sp1, sp2, field",
    [(0, 2, "sp1"), (1, 4, "sp2"), (-1, 2, "sp1"), (1.9, 2, "sp1"), (float("nan"), 2, "sp1"), (1, 2.5, "sp2")],
)
def test_out_of_range_reference(small_matrix, sp1, sp2, field):
    significant = _records(sp1=sp1, sp2=sp2, p_lt=0.01, p_gt=0.9)
    with pytest.raises(UnknownNodeReferenceError) as excinfo:
        build_network_obj(small_matrix, significant)
    assert excinfo.value.field == field
    assert excinfo.value.n_items == 3


def test_whole_float_reference_accepted():
    edges = build_edges(_records(sp1=1.0, sp2=2.0, p_lt=0.9, p_gt=0.01), n_items=2)
    assert edges[["from", "to"]].values.tolist() == [[1, 2]]


def test_missing_record_column(small_matrix):
    records = [
        {"sp1": 1, "sp2": 2, "pLow": 0.01},
        {"sp1": 2, "sp2": 3, "pLow": 0.9},
    ]
    with pytest.raises(DataFormatError, match="p_lt"):
        build_network_obj(small_matrix, records)


def test_empty_record_list():
    edges = build_edges([], n_items=3)
    assert edges.empty
    assert list(edges.columns) == EDGE_COLUMNS


def test_file_based_network(tmp_path, contrast_csv):
    out = tmp_path / "net"
    nodes, edges = build_network(str(contrast_csv), str(out), tag="t_")
    assert len(nodes) == 3
    written = pd.read_csv(out / "t_edges.tsv", sep="\t")
    assert written[["from", "to"]].values.tolist() == [[1, 2], [1, 3], [2, 3]]
    assert written["dashed"].tolist() == [False, True, True]
    assert (out / "t_nodes.tsv").exists()
