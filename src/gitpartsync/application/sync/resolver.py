"""
Commit Resolver - Resolve every source branch to its current commit.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, Iterator, Optional

from ...core.domain.entities import GitTarget, SyncTarget
from ...core.exceptions import CycleCancelledError, ResolutionError
from ...core.ports.git_host import GitHostPort
from ..context import CycleContext


class SourceCommits:
    """
    Resolved source commits for one cycle.

    Keyed by (source identity, branch); when every source identity is used
    with a single branch this is a plain identity -> commit mapping.
    """

    def __init__(self, commits: Optional[dict[tuple[str, str], str]] = None):
        self._commits = dict(commits or {})

    @classmethod
    def from_targets(cls, pairs: Iterable[tuple[GitTarget, str]]) -> "SourceCommits":
        """Build from (source target, commit) pairs."""
        return cls({(t.identity, t.branch): sha for t, sha in pairs})

    def commit_for(self, source: GitTarget) -> Optional[str]:
        return self._commits.get((source.identity, source.branch))

    def items(self) -> Iterator[tuple[tuple[str, str], str]]:
        return iter(self._commits.items())

    def __len__(self) -> int:
        return len(self._commits)

    def __contains__(self, source: object) -> bool:
        if not isinstance(source, GitTarget):
            return False
        return (source.identity, source.branch) in self._commits

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SourceCommits):
            return NotImplemented
        return self._commits == other._commits

    def __repr__(self) -> str:
        return f"SourceCommits({self._commits!r})"


class CommitResolver:
    """
    Wraps the git host to resolve the sources of a desired-state list.

    Each distinct (identity, branch) is looked up at most once per cycle;
    the cache lives on the CycleContext. Any failed lookup aborts the
    whole resolution.
    """

    def __init__(self, git_host: GitHostPort, max_workers: int = 4):
        self.git_host = git_host
        self.max_workers = max(1, max_workers)
        self.logger = logging.getLogger("CommitResolver")

    def resolve(
        self,
        targets: Iterable[SyncTarget],
        context: Optional[CycleContext] = None,
    ) -> SourceCommits:
        """
        Resolve the latest commit of every source referenced by ``targets``.

        Raises:
            ResolutionError: On the first source that cannot be resolved
            CycleCancelledError: If the cycle is cancelled meanwhile
        """
        context = context or CycleContext()

        pending: list[GitTarget] = []
        seen: set[tuple[str, str]] = set()
        for target in targets:
            ref = (target.source.identity, target.source.branch)
            if ref in seen:
                continue
            seen.add(ref)
            if context.cached_commit(*ref) is None:
                pending.append(target.source)

        if pending:
            self.logger.info(f"Resolving {len(pending)} source branch(es)")
            workers = min(self.max_workers, len(pending))
            with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="resolve") as pool:
                futures = [pool.submit(self._lookup, source, context) for source in pending]
                try:
                    for future in futures:
                        future.result()
                except BaseException:
                    for future in futures:
                        future.cancel()
                    raise

        commits = {}
        for identity, branch in seen:
            commits[(identity, branch)] = context.cached_commit(identity, branch)
        return SourceCommits(commits)

    def _lookup(self, source: GitTarget, context: CycleContext) -> str:
        context.check()
        try:
            commit_sha = self.git_host.latest_commit(source.identity, source.branch)
        except CycleCancelledError:
            raise
        except Exception as e:
            raise ResolutionError(
                f"Could not resolve {source.identity}@{source.branch}",
                identity=source.identity,
                branch=source.branch,
                cause=e,
            ) from e

        if not commit_sha:
            raise ResolutionError(
                f"Git host returned no commit for {source.identity}@{source.branch}",
                identity=source.identity,
                branch=source.branch,
            )

        self.logger.debug(f"{source.identity}@{source.branch} -> {commit_sha}")
        context.remember_commit(source.identity, source.branch, commit_sha)
        return commit_sha
