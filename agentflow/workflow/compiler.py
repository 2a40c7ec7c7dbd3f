""" Load Workflow snapshots from YAML (or JSON). """

import logging
from pathlib import Path
from typing import Union

import yaml

from .models import Workflow
from .schema import parse_workflow_spec

logger = logging.getLogger(__name__)


def load_workflow(yaml_text: str) -> Workflow:
    """
    Load a Workflow from a YAML string. JSON documents load as well.
    """
    try:
        data = yaml.safe_load(yaml_text)
    except yaml.YAMLError as e:
        raise ValueError(f"Could not parse workflow document: {e}")

    if not isinstance(data, dict):
        raise ValueError("Workflow document must be a mapping")

    # basic validation
    for key in ["nodes", "edges"]:
        if key not in data:
            raise ValueError(f"Missing required top-level field: {key}")

    workflow = parse_workflow_spec(data).to_workflow()
    _validate_references(workflow)

    logger.debug("Loaded workflow %r: %d nodes, %d edges", workflow.name, len(workflow.nodes), len(workflow.edges))
    return workflow


def load_workflow_file(path: Union[str, Path]) -> Workflow:
    return load_workflow(Path(path).read_text(encoding="utf-8"))


def _validate_references(workflow: Workflow) -> None:
    """
    Node ids must be unique and every edge must point at known nodes.
    """
    node_ids = set()
    for node in workflow.nodes:
        if node.id in node_ids:
            raise ValueError(f"Duplicate node id: {node.id}")
        node_ids.add(node.id)

    for edge in workflow.edges:
        if edge.source not in node_ids or edge.target not in node_ids:
            raise ValueError(f"Edge references unknown node: {edge.source} -> {edge.target}")
