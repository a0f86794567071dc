#!/usr/bin/env python3
"""
render.py

Interactive rendering of node/edge tables with pyvis (vis.js).

networkx computes the layout; positions are handed to vis.js as fixed x/y
coordinates with physics switched off, so the drawn network matches the
chosen algorithm. Panning, zooming, dragging and label tooltips on hover stay
enabled.
"""

import json
import os
from typing import Dict, Optional, Tuple

import networkx as nx
import pandas as pd
from pyvis.network import Network

from cooccurnet._data_config import DEFAULT_LAYOUT, LAYOUTS
from cooccurnet.errors import RenderError

_LAYOUT_FUNCS = {
    "kamada-kawai": nx.kamada_kawai_layout,
    "fruchterman-reingold": lambda G: nx.spring_layout(G, seed=42),
    "circle": nx.circular_layout,
    "shell": nx.shell_layout,
    "spectral": nx.spectral_layout,
    "random": lambda G: nx.random_layout(G, seed=42),
}

_VIS_OPTIONS = {
    "interaction": {
        "hover": True,
        "dragNodes": True,
        "dragView": True,
        "zoomView": True,
        "navigationButtons": True,
    },
    "physics": {"enabled": False},
    "edges": {"smooth": False},
}


def to_networkx(nodes: pd.DataFrame, edges: pd.DataFrame) -> nx.Graph:
    """Undirected graph with node and edge attributes taken from the tables."""
    G = nx.Graph()
    for node_id, label, color, shadow in zip(nodes["id"], nodes["label"], nodes["color"], nodes["shadow"]):
        G.add_node(int(node_id), label=str(label), color=color, shadow=bool(shadow))
    for u, v, color, dashed in zip(edges["from"], edges["to"], edges["color"], edges["dashed"]):
        G.add_edge(int(u), int(v), color=color, dashed=bool(dashed))
    return G


def compute_layout(G: nx.Graph, layout: str = DEFAULT_LAYOUT) -> Dict[int, Tuple[float, float]]:
    if layout not in _LAYOUT_FUNCS:
        raise RenderError(
            f"Unknown layout '{layout}'. Choose from: {', '.join(LAYOUTS)}"
        )
    if len(G) == 0:
        return {}
    if len(G) == 1:
        return {n: (0.0, 0.0) for n in G}
    try:
        pos = _LAYOUT_FUNCS[layout](G)
    except (nx.NetworkXException, ValueError, ArithmeticError) as e:
        raise RenderError(f"Layout '{layout}' failed: {e}") from e
    return {n: (float(xy[0]), float(xy[1])) for n, xy in pos.items()}


def render_network(
    nodes: pd.DataFrame,
    edges: pd.DataFrame,
    layout: str = DEFAULT_LAYOUT,
    output_file: Optional[str] = None,
    height: str = "750px",
    width: str = "100%",
    scale: float = 500.0,
) -> Network:
    """
    Build a pyvis Network from node/edge tables, laid out with `layout`.
    If output_file is given the HTML page is written there.
    """
    try:
        G = to_networkx(nodes, edges)
        pos = compute_layout(G, layout)

        net = Network(height=height, width=width, bgcolor="#ffffff",
                      font_color="#222222", cdn_resources="remote")

        for node_id, label, color, shadow in zip(nodes["id"], nodes["label"], nodes["color"], nodes["shadow"]):
            x, y = pos[int(node_id)]
            net.add_node(
                int(node_id),
                label=str(label),
                title=str(label),
                color=color,
                shadow=bool(shadow),
                shape="dot",
                x=x * scale,
                y=y * scale,
                physics=False,
            )

        for u, v, color, dashed in zip(edges["from"], edges["to"], edges["color"], edges["dashed"]):
            net.add_edge(int(u), int(v), color=color, dashes=bool(dashed))

        net.set_options(json.dumps(_VIS_OPTIONS))

        if output_file is not None:
            out_dir = os.path.dirname(os.path.abspath(output_file))
            os.makedirs(out_dir, exist_ok=True)
            net.write_html(output_file)
    except RenderError:
        raise
    except Exception as e:
        raise RenderError(f"Rendering failed: {e}") from e

    if output_file is not None:
        print(f"Interactive network saved to {output_file}")

    return net
