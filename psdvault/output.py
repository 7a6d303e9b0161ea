"""Formatted console output for audit and reconcile results."""
from __future__ import annotations

from psdvault.decision import FIX_COMMAND
from psdvault.models import ActionRecord, Mode, Violation, WalkResult

WIDTH = 60

_STATUS_SYMBOLS = {"DONE": "✓", "SKIPPED": "⚠", "FAILED": "✗"}


def _grouped(entries: list[tuple[str, str, str]]) -> list[str]:
    """Lines for (group, symbol, text) entries, one block per group.

    Groups appear in order of first occurrence; entries keep walk order.
    """
    groups: dict[str, list[str]] = {}
    for group, symbol, text in entries:
        groups.setdefault(group, []).append(f"  [{symbol}] {text}")

    lines = []
    for group, items in groups.items():
        lines.append(f"[{group}]")
        lines.extend(items)
        lines.append("")
    return lines


def _frame(title: str, body: list[str], summary: str) -> str:
    lines = ["=" * WIDTH, title, "=" * WIDTH, ""]
    lines.extend(body)
    lines.append("-" * WIDTH)
    lines.append(summary)
    lines.append("=" * WIDTH)
    return "\n".join(lines)


def format_violation(violation: Violation) -> str:
    """Message block pointing at the offending file and the fix command."""
    arrow = (
        "\n"
        "       ^\n"
        "       | Try running this command to auto fix the problem:\n"
        f"       | {FIX_COMMAND}\n"
        "       |\n"
    )
    return f" {violation.message}\n \"{violation.path}\"\n{arrow}"


def audit_summary(result: WalkResult) -> str:
    count = len(result.violations)
    if count == 0:
        return f"COMPLIANT: {result.files_scanned} files scanned, no violations"
    noun = "violation" if count == 1 else "violations"
    return f"NOT COMPLIANT: {result.files_scanned} files scanned, {count} {noun}"


def fix_summary(result: WalkResult) -> str:
    if not result.actions:
        return f"NOTHING TO DO: {result.files_scanned} files scanned, tree already compliant"
    done = sum(1 for r in result.actions if r.status == "DONE")
    head = "FIXED" if result.success else "INCOMPLETE"
    return (
        f"{head}: {done} done, {len(result.skipped)} skipped, "
        f"{len(result.failures)} failed ({result.files_scanned} files scanned)"
    )


def _action_line(record: ActionRecord) -> str:
    return f"{record.path}: {record.detail}" if record.detail else record.path


def format_result(result: WalkResult) -> str:
    """Full human-readable report for one traversal."""
    if result.mode is Mode.AUDIT:
        body = _grouped([
            (v.category.value, "✗", f"{v.path}: {v.message}") for v in result.violations
        ])
        report = _frame(f"PSDVAULT AUDIT: {result.root}", body, audit_summary(result))
        if result.violations:
            blocks = "\n".join(format_violation(v) for v in result.violations)
            report = f"{blocks}\n{report}"
        return report

    body = _grouped([
        (r.action.value, _STATUS_SYMBOLS.get(r.status, "?"), _action_line(r))
        for r in result.actions
    ])
    return _frame(f"PSDVAULT FIX: {result.root}", body, fix_summary(result))
