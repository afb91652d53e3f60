"""Render a task graph as Graphviz DOT."""

from makedot.core.models import TaskGraph


def quote(text: str) -> str:
    """Quote a DOT string literal."""
    escaped = text.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
    return f'"{escaped}"'


def render_dot(graph: TaskGraph, name: str = "makefiles") -> str:
    """Serialize clusters and nodes first, then every edge.

    Phony tasks are drawn as boxes and edges that cross files are dashed.
    """
    lines = [f"digraph {quote(name)} {{", "  compound=true;"]

    for cluster in graph.clusters:
        lines.append(f"  subgraph {cluster.id} {{")
        lines.append(f"    label={quote(cluster.label)};")
        for node_id in cluster.node_ids:
            node = graph.nodes[node_id]
            attributes = [f"label={quote(node.label)}"]
            if node.is_phony:
                attributes.append("shape=box")
            lines.append(f"    {node.id} [{', '.join(attributes)}];")
        lines.append("  }")

    for edge in graph.edges:
        style = " [style=dashed]" if edge.external else ""
        lines.append(f"  {edge.source} -> {edge.target}{style};")

    lines.append("}")
    return "\n".join(lines) + "\n"
