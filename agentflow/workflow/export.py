""" Export workflow snapshots as plain JSON for storage or transmission. """

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Union

from .conditions import CompositeCondition, SimpleCondition, condition_to_dict
from .models import NodeRole, Workflow

logger = logging.getLogger(__name__)


def _plain(value: Any) -> Any:
    # drop editor callbacks (onChange, onDelete, ...) attached to node data
    if isinstance(value, (SimpleCondition, CompositeCondition)):
        return condition_to_dict(value)
    if isinstance(value, Mapping):
        return {k: _plain(v) for k, v in value.items() if not callable(v)}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value if not callable(v)]
    return value


def export_workflow(workflow: Workflow) -> Dict[str, Any]:
    """
    Convert a Workflow into a JSON-serializable dict that ``load_workflow``
    reads back.
    """
    nodes: List[Dict[str, Any]] = []
    for node in workflow.nodes:
        exported = {
            "id": node.id,
            "role": NodeRole(node.role).value,
            "label": node.label,
        }
        data = _plain(node.data)
        if node.condition is not None:
            exported["condition"] = _plain(node.condition)
            # top-level condition wins over the copy in data
            data.pop("condition", None)
        if data:
            exported["data"] = data
        nodes.append(exported)

    edges: List[Dict[str, Any]] = []
    for edge in workflow.edges:
        exported = {"id": edge.id, "source": edge.source, "target": edge.target}
        if edge.source_handle is not None:
            exported["sourceHandle"] = edge.source_handle
        edges.append(exported)

    return {
        "name": workflow.name,
        "description": workflow.description,
        "nodes": nodes,
        "edges": edges,
    }


def dump_workflow_json(workflow: Workflow, json_path: Union[str, Path]) -> None:
    """
    Export the workflow and write it as indented JSON.
    """
    json_path = Path(json_path)
    json_path.write_text(json.dumps(export_workflow(workflow), indent=2))
    logger.debug("Wrote workflow %r to %s", workflow.name, json_path)
