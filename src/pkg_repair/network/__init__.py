from .probe import ProbeSummary, RepoOutcome, RepoProber
from .repos import ABI_PLACEHOLDER, normalize_repo_url, parse_repo_urls

__all__ = [
    "ProbeSummary",
    "RepoOutcome",
    "RepoProber",
    "ABI_PLACEHOLDER",
    "normalize_repo_url",
    "parse_repo_urls",
]
