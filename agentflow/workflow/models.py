""" Data models for workflow graph snapshots """

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Dict, Any, Union

from .conditions import Condition


class NodeRole(str, Enum):
    INPUT = "input"
    OUTPUT = "output"
    BRANCH = "branch"
    PROCESSING = "processing"


@dataclass
class Edge:
    id: str
    source: str
    target: str
    source_handle: Optional[str] = None # "true" / "false" when leaving a branch node


@dataclass
class Node:
    id: str
    role: NodeRole
    label: str = ""
    # structured, legacy "left op right" text, or a raw mapping from the editor
    condition: Optional[Union[Condition, str, Dict[str, Any]]] = None
    data: Dict[str, Any] = field(default_factory=dict)

    @property
    def display_name(self) -> str:
        if self.label and self.label != self.id:
            return f'"{self.label}" ({self.id})'
        return f'"{self.id}"'


@dataclass
class Workflow:
    name: str = "Untitled Workflow"
    description: str = ""
    nodes: List[Node] = field(default_factory=list)
    edges: List[Edge] = field(default_factory=list)


@dataclass
class ValidationResult:
    is_valid: bool
    errors: List[str] = field(default_factory=list)
