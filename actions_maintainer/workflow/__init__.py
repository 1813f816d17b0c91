"""Workflow parsing and version resolution."""

from .models import ActionReference, ResolvedReference
from .parser import parse_action_ref, parse_workflow
from .resolver import ContentResolver, VersionResolver, split_repository

__all__ = [
    "ActionReference",
    "ResolvedReference",
    "ContentResolver",
    "VersionResolver",
    "parse_action_ref",
    "parse_workflow",
    "split_repository",
]
