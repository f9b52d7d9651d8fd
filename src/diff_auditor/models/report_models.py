"""Request, per-segment result and final report models."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class AuditRequest(BaseModel):
    """The unit handed to dispatch.

    Field names match the `tool/audit` wire schema.
    """

    model_config = ConfigDict(frozen=True)

    request: str
    modification_description: str
    code_changes: str
    function_list: str
    changed_files: list[str] | None = None


class DispatchMode(str, Enum):
    NONE = "none"      # Nothing to audit, no completion calls
    SINGLE = "single"  # One request covering the whole diff
    SPLIT = "split"    # One request per file segment


class SegmentResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    file_path: str
    completion: str
    failed: bool = False


class AuditReport(BaseModel):
    """Terminal artifact of an audit run."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    status: str
    message: str
    report_path: str = Field(alias="reportPath")
    ai_report: str = Field(alias="aiReport")
    files_audited: int = Field(default=0, alias="filesAudited")
    processing_seconds: float | None = Field(default=None, alias="processingSeconds")
    unexpected_files: list[str] = Field(default_factory=list, alias="unexpectedFiles")

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True)
