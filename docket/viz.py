"""
docket.viz
==========

Minimal plotting helpers used by the CLI ``chart`` command.

Outputs are PNGs written to the *images/* folder (created on first use).
Filenames can be overridden via keyword argument.
"""
from __future__ import annotations

import os
from collections import Counter
from pathlib import Path
from typing import Iterable

import matplotlib.pyplot as plt
import networkx as nx

from .models import ComplianceItem, ComplianceStatus
from .relationships import CorrelationGraph

# default output dir
_IMG_DIR = Path("images")

_NODE_COLOURS = {"client": "#2b2d42", "item": "#8d99ae", "task": "#ef8354"}


def _target(out_path: str | os.PathLike) -> Path:
    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    return out_path


# ---------------------------------------------------------------------
# Plot 1 – compliance items per status
# ---------------------------------------------------------------------
_STATUS_COLOURS = {
    ComplianceStatus.PENDING: "#f4a261",
    ComplianceStatus.FILED: "#2a9d8f",
    ComplianceStatus.OVERDUE: "#e63946",
    ComplianceStatus.EXEMPT: "#adb5bd",
}


def status_summary(
    items: Iterable[ComplianceItem],
    out_path: str | os.PathLike = _IMG_DIR / "compliance_status.png",
) -> Path:
    """Horizontal bar per status (zero counts included); returns the PNG path."""
    counts = Counter(item.status for item in items)
    statuses = list(ComplianceStatus)

    fig, ax = plt.subplots(figsize=(6, 3))
    bars = ax.barh([s.name for s in statuses], [counts.get(s, 0) for s in statuses],
                   color=[_STATUS_COLOURS[s] for s in statuses])
    ax.bar_label(bars)
    ax.set_xlabel("Items")
    ax.set_title("Compliance Status")

    out_path = _target(out_path)
    fig.savefig(out_path, dpi=100, bbox_inches="tight")
    plt.close(fig)
    return out_path


# ---------------------------------------------------------------------
# Plot 2 – client → item → task correlation graph
# ---------------------------------------------------------------------
def plot_correlation_graph(
    graph: CorrelationGraph,
    out_path: str | os.PathLike = _IMG_DIR / "compliance_tasks.png",
) -> Path:
    """Draw a spring-layout graph coloured by node kind."""
    plt.figure(figsize=(8, 8))
    pos = nx.spring_layout(graph.g, seed=42)

    colours = [_NODE_COLOURS.get(d.get("kind"), "#cccccc") for _, d in graph.g.nodes(data=True)]
    nx.draw_networkx_nodes(graph.g, pos, node_color=colours, node_size=300)
    nx.draw_networkx_edges(graph.g, pos, arrowstyle="->", arrowsize=10)

    plt.title("Compliance → Task Correlation")
    plt.axis("off")
    plt.tight_layout()

    out_path = _target(out_path)
    plt.savefig(out_path, dpi=120, bbox_inches="tight")
    plt.close()
    return out_path
