"""Parameter patching for action upgrades."""

from .engine import (
    FieldAddition,
    FieldModification,
    FieldRemoval,
    FieldRename,
    Patch,
    PatchEngine,
)
from .parameters import ParameterMap
from .workflow import WorkflowPatcher, WorkflowUpdate, update_workflow_content

__all__ = [
    "FieldAddition",
    "FieldModification",
    "FieldRemoval",
    "FieldRename",
    "ParameterMap",
    "Patch",
    "PatchEngine",
    "WorkflowPatcher",
    "WorkflowUpdate",
    "update_workflow_content",
]
