"""Data models and exceptions for psdvault."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class ConfigError(Exception):
    """Raised when a psdvault configuration file cannot be used."""


class ExternalToolError(Exception):
    """Raised when the archiver or preview renderer fails.

    Attributes:
        tool: Name of the tool that failed (binary path or renderer name)
        path: The file the tool was working on
        returncode: Process exit code, if the tool is a subprocess
        stderr: Captured diagnostic output
    """

    def __init__(
        self,
        message: str,
        tool: str = None,
        path: str = None,
        returncode: int = None,
        stderr: str = "",
    ):
        super().__init__(message)
        self.message = message
        self.tool = tool
        self.path = path
        self.returncode = returncode
        self.stderr = stderr

    def to_dict(self) -> dict:
        return {
            "error_type": "ExternalToolError",
            "message": self.message,
            "tool": self.tool,
            "path": self.path,
            "returncode": self.returncode,
            "stderr": self.stderr,
        }


class RetryExhausted(Exception):
    """Raised when a generated file never became durable on disk.

    Attributes:
        path: The file that was waited for
        attempts: Number of re-checks performed before giving up
    """

    def __init__(self, path: str, attempts: int):
        super().__init__(f"{path} did not appear after {attempts} attempts")
        self.path = path
        self.attempts = attempts


class ComplianceError(Exception):
    """Raised when an audit found files that violate the vault invariant."""

    def __init__(self, violations: list[Violation]):
        noun = "violation" if len(violations) == 1 else "violations"
        super().__init__(f"{len(violations)} compliance {noun} found")
        self.violations = list(violations)


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class Mode(str, Enum):
    RECONCILE = "reconcile"
    AUDIT = "audit"


class Action(str, Enum):
    """Corrective action selected for a single file."""
    NOOP = "noop"
    GENERATE_PREVIEW = "generate_preview"
    COMPRESS_AND_REMOVE = "compress_and_remove"
    EXTRACT_THEN_PREVIEW = "extract_then_preview"
    DELETE_ORIGINAL = "delete_original"


class ViolationCategory(str, Enum):
    MISSING_PREVIEW = "missing_preview"
    NOT_ARCHIVED = "not_archived"
    REDUNDANT_ORIGINAL = "redundant_original"


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------

def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class FileState:
    """Probed companion state of one file."""
    path: str
    extension: str
    has_preview: bool
    has_archive: bool
    asset_present: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"path": self.path, "extension": self.extension,
                "has_preview": self.has_preview, "has_archive": self.has_archive,
                "asset_present": self.asset_present}


@dataclass(frozen=True)
class Violation:
    """A file that fails the vault invariant."""
    path: str
    category: ViolationCategory
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {"path": self.path, "category": self.category.value,
                "message": self.message}


@dataclass(frozen=True)
class ActionRecord:
    """Outcome of applying one corrective action."""
    path: str
    action: Action
    status: str  # "DONE", "SKIPPED", "FAILED"
    detail: str = ""
    timestamp: str = field(default_factory=_now_iso)

    def to_dict(self) -> dict[str, Any]:
        return {"path": self.path, "action": self.action.value,
                "status": self.status, "detail": self.detail,
                "timestamp": self.timestamp}


@dataclass
class WalkResult:
    """Everything a single traversal observed and did."""
    mode: Mode
    root: str
    files_scanned: int = 0
    actions: list[ActionRecord] = field(default_factory=list)
    violations: list[Violation] = field(default_factory=list)

    @property
    def failures(self) -> list[ActionRecord]:
        return [a for a in self.actions if a.status == "FAILED"]

    @property
    def skipped(self) -> list[ActionRecord]:
        return [a for a in self.actions if a.status == "SKIPPED"]

    @property
    def is_compliant(self) -> bool:
        return not self.violations

    @property
    def success(self) -> bool:
        if self.mode is Mode.AUDIT:
            return self.is_compliant
        return not self.failures

    def raise_for_violations(self) -> None:
        """Raise ComplianceError if the audit collected any violation."""
        if self.violations:
            raise ComplianceError(self.violations)

    def to_dict(self) -> dict[str, Any]:
        return {
            "mode": self.mode.value,
            "root": self.root,
            "files_scanned": self.files_scanned,
            "success": self.success,
            "actions": [a.to_dict() for a in self.actions],
            "violations": [v.to_dict() for v in self.violations],
        }
