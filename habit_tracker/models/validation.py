"""
Validation Models

Results of checking stored blobs before they are turned into a
TrackerState. Mirrors the two stages of StoredDataValidator.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field


class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Blob and location of the issue, e.g. 'completions[2024-03-01]'"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'wrong_type', 'invalid_date_key', 'out_of_range')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggested fix if available"
    )


class ValidationResult(BaseModel):
    """
    Result of validating the stored blobs.

    Stage 1: Schema validation (types and shapes)
    Stage 2: Semantic validation (date keys, index bounds, task limit)

    When valid, tasks/completions hold the normalised data (duplicate
    indices removed, empty dates pruned).
    """

    validated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    schema_valid: bool = Field(
        ...,
        description="Did schema validation pass?"
    )
    semantic_valid: bool = Field(
        ...,
        description="Did semantic validation pass?"
    )
    is_valid: bool = Field(
        ...,
        description="Overall validation result"
    )

    issues: list[ValidationIssue] = Field(
        default_factory=list,
        description="All validation issues found"
    )
    warnings: list[str] = Field(
        default_factory=list,
        description="Non-blocking warnings"
    )

    # Normalised data
    tasks: list[str] = Field(default_factory=list)
    completions: dict[str, list[int]] = Field(default_factory=dict)

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")
