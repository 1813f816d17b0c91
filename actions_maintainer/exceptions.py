"""Exception hierarchy for actions-maintainer."""


class ActionsMaintainerError(Exception):
    """Base exception for all actions-maintainer errors."""

    pass


class ResolutionError(ActionsMaintainerError):
    """Raised when a version reference cannot be resolved to a commit."""

    def __init__(self, repository: str, ref: str, message: str = "") -> None:
        self.repository = repository
        self.ref = ref
        detail = f": {message}" if message else ""
        super().__init__(f"Could not resolve {repository}@{ref}{detail}")


class InvalidRepositoryError(ActionsMaintainerError):
    """Raised when a repository identifier is not in owner/name form."""

    def __init__(self, repository: str) -> None:
        self.repository = repository
        super().__init__(f"Invalid repository format: {repository}")


class PatchStructureError(ActionsMaintainerError):
    """Raised when a parameter block cannot be treated as a field map."""

    pass


class RuleValidationError(ActionsMaintainerError):
    """Raised when a rule or rules file is invalid."""

    pass


class BatchingInvariantError(ActionsMaintainerError):
    """Raised when update plans do not map one-to-one onto repositories."""

    pass


class WorkflowParseError(ActionsMaintainerError):
    """Raised when workflow content is not valid workflow YAML."""

    pass
