"""Models for representing unified diffs and their file segments."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class DiffTokenKind(str, Enum):
    HEADER = "header"
    LINE = "line"


class DiffToken(BaseModel):
    """One line of a unified diff, classified by the tokenizer."""

    model_config = ConfigDict(frozen=True)

    kind: DiffTokenKind
    text: str                     # Raw line including its line terminator
    old_path: str | None = None   # Set for HEADER tokens only ("a/" side)
    new_path: str | None = None   # Set for HEADER tokens only ("b/" side)


class FileSegment(BaseModel):
    """The portion of a diff pertaining to one file, header included."""

    model_config = ConfigDict(frozen=True)

    old_path: str
    new_path: str
    text: str

    @property
    def path(self) -> str:
        # Renames are keyed on the post-change side.
        return self.new_path

    @property
    def is_rename(self) -> bool:
        return self.old_path != self.new_path


class DiffDocument(BaseModel):
    """A parsed unified diff.

    `preamble` holds any text before the first file header so that
    `text` reconstructs the parsed input exactly.
    """

    model_config = ConfigDict(frozen=True)

    preamble: str = ""
    segments: list[FileSegment] = Field(default_factory=list)

    @property
    def text(self) -> str:
        return self.preamble + "".join(segment.text for segment in self.segments)

    @property
    def paths(self) -> list[str]:
        return [segment.path for segment in self.segments]


class ScopedDiff(BaseModel):
    """Result of restricting a DiffDocument to the authorized scope."""

    model_config = ConfigDict(frozen=True)

    text: str
    segments: list[FileSegment] = Field(default_factory=list)
    unexpected_files: list[str] = Field(default_factory=list)  # In original order

    @property
    def retained_paths(self) -> list[str]:
        return [segment.path for segment in self.segments]

    @property
    def discrepancy_count(self) -> int:
        return len(self.unexpected_files)
