"""Models for the changed-file set and its authorized subset."""

from pydantic import BaseModel, ConfigDict, Field


class ChangeSet(BaseModel):
    """Raw diff sources plus the reconciled list of changed paths."""

    model_config = ConfigDict(frozen=True)

    staged_diff: str = ""
    unstaged_diff: str = ""
    diff_text: str = ""                              # Staged if non-blank, else unstaged
    files: list[str] = Field(default_factory=list)   # Sorted, deduplicated, repo-relative
    repo_root: str | None = None                     # None when git was unavailable

    @property
    def used_staged(self) -> bool:
        return bool(self.staged_diff.strip())


class IgnorePatternStat(BaseModel):
    model_config = ConfigDict(frozen=True)

    pattern: str
    excluded: int = 0


class ScopeFilterResult(BaseModel):
    """AuthorizedScope plus the per-stage drop counts."""

    model_config = ConfigDict(frozen=True)

    authorized: list[str] = Field(default_factory=list)
    total: int = 0
    boundary_excluded: int = 0
    pattern_stats: list[IgnorePatternStat] = Field(default_factory=list)
    invalid_patterns: list[str] = Field(default_factory=list)

    @property
    def pattern_excluded(self) -> int:
        return sum(stat.excluded for stat in self.pattern_stats)
