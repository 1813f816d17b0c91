"""Extract action references from GitHub Actions workflow YAML."""

import logging
import re
from typing import Any

import yaml

from ..exceptions import WorkflowParseError
from .models import ActionReference

logger = logging.getLogger(__name__)

# owner/repo@version or owner/repo/path/to/workflow.yml@version
ACTION_REF_PATTERN = re.compile(r"^([^/@]+/[^/@]+)(?:/([^@]*))?@(.+)$")


def parse_action_ref(uses: str, is_reusable: bool = False) -> ActionReference | None:
    """Parse a ``uses:`` value into an ActionReference.

    Local actions (``./path``) and Docker actions (``docker://image``) have no
    version to maintain and return None, as does anything unparseable.
    """
    uses = uses.strip()
    if uses.startswith("./") or uses.startswith("docker://"):
        return None

    match = ACTION_REF_PATTERN.match(uses)
    if not match:
        return None

    repository, workflow_path, version = match.groups()
    return ActionReference(
        repository=repository,
        version=version,
        workflow_path=workflow_path or "",
        is_reusable=is_reusable,
    )


def load_workflow(content: str) -> dict[str, Any]:
    """Load workflow YAML into a mapping.

    Raises:
        WorkflowParseError: If the content is not YAML or not a mapping
    """
    try:
        document = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise WorkflowParseError(f"Failed to parse workflow YAML: {e}") from e

    if document is None:
        return {}
    if not isinstance(document, dict):
        raise WorkflowParseError(
            f"Workflow must be a mapping, got {type(document).__name__}"
        )
    return document


def parse_workflow(
    content: str, file_path: str, workflow_only: bool = False
) -> list[ActionReference]:
    """Parse a workflow file and return every action reference it declares.

    Args:
        content: Raw workflow YAML
        file_path: Path of the workflow in its repository
        workflow_only: Only return job-level reusable workflow calls

    Returns:
        References in document order (jobs, then steps within each job)

    Raises:
        WorkflowParseError: If the content is not valid workflow YAML
    """
    workflow = load_workflow(content)
    jobs = workflow.get("jobs") or {}
    if not isinstance(jobs, dict):
        raise WorkflowParseError(f"'jobs' in {file_path} must be a mapping")

    references: list[ActionReference] = []

    for job_name, job in jobs.items():
        if not isinstance(job, dict):
            continue

        job_uses = job.get("uses")
        if isinstance(job_uses, str):
            ref = parse_action_ref(job_uses, is_reusable=True)
            if ref:
                job_with = job.get("with")
                references.append(
                    ref.model_copy(
                        update={
                            "context": f"job:{job_name}",
                            "file_path": file_path,
                            "with_parameters": job_with
                            if isinstance(job_with, dict)
                            else None,
                        }
                    )
                )
                logger.debug(
                    "Found reusable workflow %s@%s in job '%s'",
                    ref.repository,
                    ref.version,
                    job_name,
                )

        if workflow_only:
            continue

        for step_idx, step in enumerate(job.get("steps") or []):
            if not isinstance(step, dict) or not isinstance(step.get("uses"), str):
                continue

            ref = parse_action_ref(step["uses"])
            if not ref:
                continue

            step_name = step.get("name") or f"step-{step_idx + 1}"
            step_with = step.get("with")
            references.append(
                ref.model_copy(
                    update={
                        "context": f"job:{job_name}/step:{step_name}",
                        "file_path": file_path,
                        "with_parameters": step_with
                        if isinstance(step_with, dict)
                        else None,
                    }
                )
            )

    logger.debug("Extracted %d action references from %s", len(references), file_path)
    return references
