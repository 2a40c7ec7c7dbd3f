from typing import List, Optional, Dict, Any, Union
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .conditions import (
    condition_from_dict,
    is_composite_condition,
    is_simple_condition,
)
from .models import Edge, Node, NodeRole, Workflow


# Node types emitted by the canvas editor, mapped onto validator roles
NODE_TYPE_ROLES: Dict[str, NodeRole] = {
    "input": NodeRole.INPUT,
    "output": NodeRole.OUTPUT,
    "if": NodeRole.BRANCH,
    "condition": NodeRole.BRANCH,
    "branch": NodeRole.BRANCH,
    "agent": NodeRole.PROCESSING,
    "team": NodeRole.PROCESSING,
    "processing": NodeRole.PROCESSING,
}


class NodeSpec(BaseModel):
    id: str
    role: Optional[str] = None
    type: Optional[str] = None
    label: Optional[str] = None
    condition: Any = None  # structured mapping or legacy text
    data: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(extra="ignore")  # editor-only keys (position, selected, ...) are dropped

    @model_validator(mode="after")
    def check_role(self) -> "NodeSpec":
        kind = self.role or self.type
        if kind is None:
            raise ValueError(f"Node {self.id!r} needs a role or type")
        if kind not in NODE_TYPE_ROLES:
            raise ValueError(f"Node {self.id!r} has unknown role/type {kind!r}")
        return self

    def to_node(self) -> Node:
        label = self.label if self.label is not None else self.data.get("label", "")
        condition = self.condition if self.condition is not None else self.data.get("condition")
        return Node(
            id=self.id,
            role=NODE_TYPE_ROLES[self.role or self.type],
            label=label or "",
            condition=_structured(condition),
            data=dict(self.data),
        )


class EdgeSpec(BaseModel):
    id: Optional[str] = None
    source: str
    target: str
    source_handle: Optional[str] = Field(default=None, alias="sourceHandle")

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    @field_validator("source_handle", mode="before")
    @classmethod
    def handle_from_bool(cls, value: Any) -> Any:
        # unquoted YAML `sourceHandle: true` arrives as a bool
        if isinstance(value, bool):
            return "true" if value else "false"
        return value

    def to_edge(self) -> Edge:
        return Edge(
            id=self.id or f"{self.source}-{self.target}",
            source=self.source,
            target=self.target,
            source_handle=self.source_handle,
        )


class WorkflowSpec(BaseModel):
    name: str = "Untitled Workflow"
    description: Optional[str] = None

    nodes: List[NodeSpec] = Field(default_factory=list)
    edges: List[EdgeSpec] = Field(default_factory=list)

    model_config = ConfigDict(extra="ignore")

    def to_workflow(self) -> Workflow:
        return Workflow(
            name=self.name,
            description=self.description or "",
            nodes=[n.to_node() for n in self.nodes],
            edges=[e.to_edge() for e in self.edges],
        )


def _structured(raw: Any) -> Any:
    # Keep anything that is not a recognisable condition shape as-is so the
    # validator can report it against the node.
    if isinstance(raw, dict) and (is_simple_condition(raw) or is_composite_condition(raw)):
        return condition_from_dict(raw)
    return raw


def parse_workflow_spec(raw: Dict[str, Any]) -> WorkflowSpec:
    """Validate a raw workflow dict (from YAML, JSON or the editor) against WorkflowSpec."""
    try:
        return WorkflowSpec.model_validate(raw)
    except ValidationError as e:
        raise ValueError(f"Workflow validation error: {e}")


def coerce_node(item: Union[Node, Dict[str, Any]]) -> Node:
    if isinstance(item, Node):
        return item
    return NodeSpec.model_validate(item).to_node()


def coerce_edge(item: Union[Edge, Dict[str, Any]]) -> Edge:
    if isinstance(item, Edge):
        return item
    return EdgeSpec.model_validate(item).to_edge()
