"""Branch fallback policy for ref-scoped VCS calls.

Repositories created before the "main" convention still use "master". When
a ref-scoped call fails because the default branch does not exist, the call
is retried exactly once against the alternate branch. Any other failure, or
a failure on a non-default branch, propagates immediately.
"""

import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from reposcribe.errors import RefNotFoundError
from reposcribe.models.repository import Commit, PullRequest, RepositoryRef, TreeEntry
from reposcribe.vcs.base import VCSContentSource

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BranchFallbackPolicy:
    """Two-step retry: primary call, then at most one fallback call.

    Attributes:
        default_branch: Branch name eligible for fallback
        alternate_branch: Single well-known alternate name
    """

    def __init__(self, default_branch: str = "main", alternate_branch: str = "master") -> None:
        if default_branch == alternate_branch:
            raise ValueError("default_branch and alternate_branch must differ")
        self.default_branch = default_branch
        self.alternate_branch = alternate_branch

    async def call(
        self,
        operation: Callable[[RepositoryRef], Awaitable[T]],
        ref: RepositoryRef,
    ) -> T:
        """Run a ref-scoped operation with branch fallback.

        Args:
            operation: Async callable taking the ref to use
            ref: Requested ref

        Returns:
            Result of the primary call, or of the single fallback call

        Raises:
            RefNotFoundError: If the ref is missing and no fallback applies,
                or if the alternate branch is missing too
            VCSError: Any other source failure, without retry
        """
        try:
            return await operation(ref)
        except RefNotFoundError:
            if ref.branch != self.default_branch:
                raise
            fallback_ref = ref.with_branch(self.alternate_branch)
            logger.warning(
                "Branch '%s' not found for %s/%s, retrying with '%s'",
                ref.branch,
                ref.owner,
                ref.name,
                self.alternate_branch,
            )

        return await operation(fallback_ref)


class FallbackContentSource:
    """VCS content source wrapper applying a BranchFallbackPolicy.

    Every ref-scoped call goes through the policy; pull request listing is
    not ref-scoped and is passed through unchanged.
    """

    def __init__(
        self,
        source: VCSContentSource,
        policy: BranchFallbackPolicy | None = None,
    ) -> None:
        self._source = source
        self._policy = policy or BranchFallbackPolicy()

    async def get_tree(self, ref: RepositoryRef) -> list[TreeEntry]:
        return await self._policy.call(self._source.get_tree, ref)

    async def get_file_content(self, path: str, ref: RepositoryRef) -> bytes | None:
        async def fetch(target: RepositoryRef) -> bytes | None:
            return await self._source.get_file_content(path, target)

        return await self._policy.call(fetch, ref)

    async def get_readme(self, ref: RepositoryRef) -> str:
        return await self._policy.call(self._source.get_readme, ref)

    async def get_commits(self, ref: RepositoryRef, limit: int) -> list[Commit]:
        async def fetch(target: RepositoryRef) -> list[Commit]:
            return await self._source.get_commits(target, limit)

        return await self._policy.call(fetch, ref)

    async def get_pull_requests(self, state: str, limit: int) -> list[PullRequest]:
        return await self._source.get_pull_requests(state, limit)
