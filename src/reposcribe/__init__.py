"""Reposcribe - Repository summary synthesis.

Reposcribe turns raw version-control metadata for a repository branch (file
tree, README, commits, pull requests) into a structured technical summary
suitable for portfolios and resumes, and persists it keyed by repository
and branch.

Core principles:
- Deterministic-First: Tech stack, structure and language profiles are built
  from repository content before any LLM invocation
- Grounded Output: Detected technologies override model-written tech stacks
- Degrade, Don't Discard: Malformed model output yields a minimal summary
- Idempotent Persistence: Re-analysis overwrites a branch's summary in place
"""

__version__ = "0.1.0"
__author__ = "Reposcribe Contributors"
