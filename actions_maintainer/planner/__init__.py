"""Update planning and pull request creation."""

from .models import ActionUpdate, PlanRepository, UpdatePlan
from .planner import UpdatePlanner, validate_batching_invariant
from .pull_requests import PullRequestCreator, load_body_template

__all__ = [
    "ActionUpdate",
    "PlanRepository",
    "PullRequestCreator",
    "UpdatePlan",
    "UpdatePlanner",
    "load_body_template",
    "validate_batching_invariant",
]
