"""Typed failures raised by Reposcribe components.

Collaborator failures are fatal to an analysis run and carry enough context
(ref, path, repository id) to diagnose. Per-file and parsing anomalies are
recovered locally and never surface as these exceptions.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from reposcribe.models.repository import RepositoryRef


class ReposcribeError(Exception):
    """Base class for all Reposcribe failures."""

    component = "reposcribe"


class ConfigurationError(ReposcribeError):
    """Raised when configuration is invalid or credentials are missing."""

    component = "config"


class VCSError(ReposcribeError):
    """Raised when the VCS content source fails."""

    component = "vcs"

    def __init__(
        self,
        message: str,
        ref: "RepositoryRef | None" = None,
        path: str | None = None,
    ) -> None:
        self.ref = ref
        self.path = path
        full_message = message
        if ref is not None:
            full_message += f" (ref: {ref})"
        if path is not None:
            full_message += f" (path: {path})"
        super().__init__(full_message)


class RefNotFoundError(VCSError):
    """Raised when a branch ref does not exist in the repository."""


class SummaryGenerationError(ReposcribeError):
    """Raised when the completion service fails to produce a summary."""

    component = "composer"

    def __init__(self, message: str, ref: "RepositoryRef | None" = None) -> None:
        self.ref = ref
        full_message = f"Summary generation failed: {message}"
        if ref is not None:
            full_message += f" (ref: {ref})"
        super().__init__(full_message)


class RepositoryNotFoundError(ReposcribeError):
    """Raised when a summary is stored for a repository the registry lacks."""

    component = "store"

    def __init__(self, repository_id: str) -> None:
        self.repository_id = repository_id
        super().__init__(f"Repository not found: {repository_id}")
