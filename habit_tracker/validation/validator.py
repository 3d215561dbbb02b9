"""
Two-Stage Validation of Stored Tracker Data

STAGE 1 - SCHEMA VALIDATION:
- tasks blob is a list of non-empty strings
- completions blob is an object of lists of integers

STAGE 2 - SEMANTIC VALIDATION:
- task count within the configured limit
- every completion key is a real YYYY-MM-DD calendar date
- every index points at an existing task
- duplicate indices and empty date entries are normalised (warnings)

Stage 2 is skipped when stage 1 fails; its checks assume the shapes.

Validation never fixes errors. It only normalises the two harmless
cases above and reports them as warnings.
"""

from typing import Any

from habit_tracker.calendar_utils import parse_date_key
from habit_tracker.config.settings import DEFAULT_MAX_TASKS
from habit_tracker.models.validation import ValidationIssue, ValidationResult


def _is_int(value: Any) -> bool:
    # bool is an int subclass; JSON true/false are not task indices
    return isinstance(value, int) and not isinstance(value, bool)


class StoredDataValidator:
    """
    Validates the decoded task and completion blobs.

    Input is whatever json.loads produced; output is a ValidationResult
    holding normalised data when valid.
    """

    def __init__(self, max_tasks: int = DEFAULT_MAX_TASKS):
        self._max_tasks = max_tasks

    def _validate_schema(
        self,
        tasks_data: Any,
        completions_data: Any,
    ) -> tuple[bool, list[ValidationIssue]]:
        """
        Stage 1: Schema validation.

        Returns: (is_valid, list_of_issues)
        """
        issues = []

        if not isinstance(tasks_data, list):
            issues.append(ValidationIssue(
                field="tasks",
                issue_type="wrong_type",
                message=f"Task list must be a JSON array, got {type(tasks_data).__name__}",
                severity="error",
            ))
        else:
            for position, name in enumerate(tasks_data):
                if not isinstance(name, str):
                    issues.append(ValidationIssue(
                        field=f"tasks[{position}]",
                        issue_type="wrong_type",
                        message=f"Task name must be a string, got {type(name).__name__}",
                        severity="error",
                    ))
                elif not name.strip():
                    issues.append(ValidationIssue(
                        field=f"tasks[{position}]",
                        issue_type="empty_name",
                        message="Task name is empty",
                        severity="error",
                        suggested_fix="Remove the empty entry from the task list",
                    ))

        if not isinstance(completions_data, dict):
            issues.append(ValidationIssue(
                field="completions",
                issue_type="wrong_type",
                message=f"Completions must be a JSON object, got {type(completions_data).__name__}",
                severity="error",
            ))
        else:
            for key, indices in completions_data.items():
                if not isinstance(indices, list):
                    issues.append(ValidationIssue(
                        field=f"completions[{key}]",
                        issue_type="wrong_type",
                        message=f"Completion entry must be an array, got {type(indices).__name__}",
                        severity="error",
                    ))
                    continue
                bad = [value for value in indices if not _is_int(value)]
                if bad:
                    issues.append(ValidationIssue(
                        field=f"completions[{key}]",
                        issue_type="wrong_type",
                        message=f"Task indices must be integers, got {bad!r}",
                        severity="error",
                    ))

        return not issues, issues

    def _validate_semantics(
        self,
        tasks: list[str],
        completions: dict[str, list[int]],
    ) -> tuple[bool, list[ValidationIssue], dict[str, list[int]]]:
        """
        Stage 2: Semantic validation.

        Returns: (is_valid, list_of_issues, normalised_completions)
        """
        issues = []
        normalised: dict[str, list[int]] = {}

        if len(tasks) > self._max_tasks:
            issues.append(ValidationIssue(
                field="tasks",
                issue_type="too_many_tasks",
                message=f"{len(tasks)} tasks stored, maximum is {self._max_tasks}",
                severity="error",
                suggested_fix="Raise TRACKER_MAX_TASKS or remove tasks from the stored list",
            ))

        for key, indices in completions.items():
            field = f"completions[{key}]"

            try:
                parse_date_key(key)
            except ValueError:
                issues.append(ValidationIssue(
                    field=field,
                    issue_type="invalid_date_key",
                    message=f"{key!r} is not a valid YYYY-MM-DD date",
                    severity="error",
                ))
                continue

            out_of_range = [index for index in indices if not 0 <= index < len(tasks)]
            if out_of_range:
                issues.append(ValidationIssue(
                    field=field,
                    issue_type="out_of_range",
                    message=(
                        f"Task indices {out_of_range} do not exist "
                        f"({len(tasks)} tasks stored)"
                    ),
                    severity="error",
                ))
                continue

            unique = sorted(set(indices))
            if len(unique) != len(indices):
                issues.append(ValidationIssue(
                    field=field,
                    issue_type="duplicate_index",
                    message="Duplicate task indices were collapsed",
                    severity="warning",
                ))
            if not unique:
                issues.append(ValidationIssue(
                    field=field,
                    issue_type="empty_entry",
                    message="Date with no completions was dropped",
                    severity="warning",
                ))
                continue

            normalised[key] = unique

        is_valid = not any(issue.severity == "error" for issue in issues)
        return is_valid, issues, normalised

    def validate(self, tasks_data: Any, completions_data: Any) -> ValidationResult:
        """
        Run both validation stages.

        Args:
            tasks_data: Decoded tasks blob
            completions_data: Decoded completions blob

        Returns:
            ValidationResult (normalised tasks/completions when valid)
        """
        schema_valid, issues = self._validate_schema(tasks_data, completions_data)

        if not schema_valid:
            return ValidationResult(
                schema_valid=False,
                semantic_valid=False,
                is_valid=False,
                issues=issues,
            )

        tasks = [name.strip() for name in tasks_data]
        semantic_valid, semantic_issues, completions = self._validate_semantics(
            tasks, completions_data
        )
        issues.extend(semantic_issues)

        warnings = [
            f"{issue.field}: {issue.message}"
            for issue in issues
            if issue.severity == "warning"
        ]

        return ValidationResult(
            schema_valid=True,
            semantic_valid=semantic_valid,
            is_valid=semantic_valid,
            issues=issues,
            warnings=warnings,
            tasks=tasks if semantic_valid else [],
            completions=completions if semantic_valid else {},
        )
