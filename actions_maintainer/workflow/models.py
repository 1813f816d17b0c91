"""Pydantic models for action references found in workflow files."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ActionReference(BaseModel):
    """A single ``uses:`` declaration parsed from a workflow file.

    Immutable once parsed; every later stage derives new records from it.
    """

    model_config = ConfigDict(frozen=True)

    repository: str = Field(
        ..., description="Action repository, e.g. 'actions/checkout'"
    )
    version: str = Field(..., description="Tag, branch or commit SHA after '@'")
    is_reusable: bool = Field(
        False, description="True for a job-level reusable workflow call"
    )
    context: str = Field("", description="Where the reference was found (job/step)")
    file_path: str = Field("", description="Workflow file containing the reference")
    workflow_path: str = Field(
        "", description="Path inside the referenced repository, if any"
    )
    with_parameters: dict[str, Any] | None = Field(
        None, description="The step's raw 'with:' block, if present"
    )

    @property
    def owner(self) -> str:
        return self.repository.split("/", 1)[0]

    @property
    def uses(self) -> str:
        """The reference as written in a workflow: owner/repo[/path]@version."""
        path = f"/{self.workflow_path}" if self.workflow_path else ""
        return f"{self.repository}{path}@{self.version}"


class ResolvedReference(ActionReference):
    """An ActionReference enriched with its canonical commit and aliases."""

    resolved_id: str = Field(
        "", description="Commit SHA the version resolves to; empty if unresolved"
    )
    aliases: frozenset[str] = Field(
        default_factory=frozenset,
        description="Other version strings resolving to the same commit",
    )

    @classmethod
    def from_reference(
        cls,
        ref: ActionReference,
        resolved_id: str = "",
        aliases: frozenset[str] = frozenset(),
    ) -> "ResolvedReference":
        """Wrap a reference with resolution information (none by default)."""
        fields = ref.model_dump(exclude={"resolved_id", "aliases"})
        return cls(**fields, resolved_id=resolved_id, aliases=aliases)

    @property
    def is_resolved(self) -> bool:
        return bool(self.resolved_id)
