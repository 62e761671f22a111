"""VCS content access: source interface, branch fallback, batched fetching."""

from reposcribe.vcs.base import RefNotFoundError, VCSContentSource, VCSError
from reposcribe.vcs.fallback import BranchFallbackPolicy, FallbackContentSource
from reposcribe.vcs.fetcher import BatchedContentFetcher

__all__ = [
    "BatchedContentFetcher",
    "BranchFallbackPolicy",
    "FallbackContentSource",
    "RefNotFoundError",
    "VCSContentSource",
    "VCSError",
]
