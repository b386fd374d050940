"""
docket.relationships
====================

Client → compliance item → task correlation graph built on NetworkX.

Tasks are linked to items by the tagging convention (see
:func:`is_correlated`), not by a foreign key, so the graph is rebuilt
from a scan whenever it is needed.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List

import networkx as nx

from .models import ComplianceItem, Task

COMPLIANCE_TAG = "compliance"


def correlation_tag(item_id: str) -> str:
    return f"{COMPLIANCE_TAG}:{item_id}"


def is_correlated(rec: Dict[str, Any], item_id: str) -> bool:
    """True if the task record *rec* belongs to compliance item *item_id*."""
    if rec.get("compliance_item_id") == item_id:
        return True
    tags = rec.get("tags") or []
    if correlation_tag(item_id) in tags:
        return True
    if COMPLIANCE_TAG not in tags:
        return False
    # legacy tasks: id only mentioned in free text
    needle = item_id.lower()
    title = (rec.get("title") or "").lower()
    description = (rec.get("description") or "").lower()
    return needle in title or needle in description


class CorrelationGraph:
    """
    Lightweight wrapper around a DiGraph of clients, items and tasks.

    Example
    -------
    >>> g = CorrelationGraph.build(items, tasks)
    >>> g.tasks_for(items[0].id)
    ['task_3f…']
    """

    def __init__(self) -> None:
        self.g = nx.DiGraph()

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------
    @classmethod
    def build(cls, items: Iterable[ComplianceItem], tasks: Iterable[Task]) -> "CorrelationGraph":
        graph = cls()
        items = list(items)
        for item in items:
            graph.add_item(item)

        for task in tasks:
            rec = task.to_record()
            linked = [i.id for i in items if is_correlated(rec, i.id)]
            if linked or COMPLIANCE_TAG in task.tags:
                graph.g.add_node(task.id, kind="task", task=task)
            for item_id in linked:
                graph.g.add_edge(item_id, task.id)
        return graph

    def add_item(self, item: ComplianceItem) -> None:
        client_node = f"client:{item.client_id}"
        if client_node not in self.g:
            self.g.add_node(client_node, kind="client", client_id=item.client_id)
        self.g.add_node(item.id, kind="item", item=item)
        self.g.add_edge(client_node, item.id)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def _nodes(self, kind: str) -> List[str]:
        return [n for n, d in self.g.nodes(data=True) if d.get("kind") == kind]

    def tasks_for(self, item_id: str) -> List[str]:
        """Return the ids of tasks correlated to *item_id*."""
        if item_id not in self.g:
            return []
        return [n for n in self.g.successors(item_id) if self.g.nodes[n].get("kind") == "task"]

    def items_for_client(self, client_id: str) -> List[str]:
        node = f"client:{client_id}"
        return list(self.g.successors(node)) if node in self.g else []

    def orphan_tasks(self) -> List[str]:
        """Compliance-tagged tasks whose item no longer exists."""
        return [n for n in self._nodes("task") if self.g.in_degree(n) == 0]

    def relationships(self) -> List[Dict[str, Any]]:
        rows = []
        for item_id in self._nodes("item"):
            item: ComplianceItem = self.g.nodes[item_id]["item"]
            rows.append({
                "compliance_id": item.id,
                "compliance_type": str(item.type),
                "compliance_description": item.description,
                "due_date": item.due_date.isoformat() if item.due_date else None,
                "status": item.status.value,
                "related_tasks": [self.g.nodes[t]["task"].summary() for t in self.tasks_for(item_id)],
            })
        return rows

    def to_json(self) -> Dict[str, Any]:
        """Nodes and links arrays for front-end graph views."""
        nodes = []
        for node, data in self.g.nodes(data=True):
            entry = {"id": node, "type": data.get("kind")}
            if data.get("kind") == "item":
                entry["status"] = data["item"].status.value
            elif data.get("kind") == "task":
                entry["status"] = data["task"].status.value
            nodes.append(entry)
        links = [{"source": s, "target": t} for s, t in self.g.edges()]
        return {"nodes": nodes, "links": links}
