"""Recursive tree walker shared by reconcile and audit mode.

Depth-first, siblings visited in directory-listing order. Symlinks and
special files are never followed or classified.
"""
from __future__ import annotations

import logging
import os
import stat
from pathlib import Path
from typing import Optional

from psdvault.config import VaultConfig
from psdvault.decision import decide_state, judge, violation_message
from psdvault.generator import ArtifactGenerator
from psdvault.ledger import ActionLedger
from psdvault.models import (
    Action,
    ActionRecord,
    ExternalToolError,
    Mode,
    RetryExhausted,
    Violation,
    WalkResult,
)
from psdvault.paths import filter_ignored, with_extension
from psdvault.probe import probe

logger = logging.getLogger(__name__)


class TreeWalker:
    """Walks a tree, classifying every file and acting on it per mode.

    Args:
        config: Effective configuration (extensions, ignore-list)
        generator: Required for reconcile mode; unused by audits
        ledger: Optional JSONL ledger receiving each reconcile action
    """

    def __init__(
        self,
        config: VaultConfig,
        generator: Optional[ArtifactGenerator] = None,
        ledger: Optional[ActionLedger] = None,
    ):
        self.config = config
        self.generator = generator
        self.ledger = ledger

    def walk(self, directory: Path, mode: Mode) -> WalkResult:
        if mode is Mode.RECONCILE and self.generator is None:
            raise ValueError("reconcile mode needs an ArtifactGenerator")
        directory = Path(directory)
        result = WalkResult(mode=mode, root=str(directory))
        self._walk_dir(directory, mode, result, top=True)
        logger.debug("Scanned %d files under %s", result.files_scanned, directory)
        return result

    # -----------------------------------------------------------------
    # Traversal
    # -----------------------------------------------------------------

    def _walk_dir(self, directory: Path, mode: Mode, result: WalkResult,
                  top: bool = False) -> None:
        try:
            listing = os.listdir(directory)
        except FileNotFoundError:
            if top:
                raise
            logger.debug("Skipping %s: removed before it could be listed", directory)
            return
        names = filter_ignored(listing, self.config.ignore)

        for name in names:
            path = directory / name
            try:
                st = os.lstat(path)
            except FileNotFoundError:
                logger.debug("Skipping %s: removed before it could be examined", path)
                continue

            if stat.S_ISLNK(st.st_mode):
                logger.debug("Skipping symlink %s", path)
            elif stat.S_ISDIR(st.st_mode):
                self._walk_dir(path, mode, result)
            elif stat.S_ISREG(st.st_mode):
                result.files_scanned += 1
                if mode is Mode.AUDIT:
                    self._audit_file(path, result)
                else:
                    self._reconcile_file(path, result)
            else:
                logger.debug("Skipping special file %s", path)

    def _audit_file(self, path: Path, result: WalkResult) -> None:
        cfg = self.config
        state = probe(path, cfg)
        category = judge(state.extension, state.has_preview, state.has_archive,
                         cfg.asset_extension, cfg.archive_extension)
        if category is None:
            return
        message = violation_message(state.extension, category, cfg.archive_extension)
        result.violations.append(Violation(path=str(path), category=category, message=message))

    def _reconcile_file(self, path: Path, result: WalkResult) -> None:
        state = probe(path, self.config)
        action = decide_state(state, self.config.asset_extension, self.config.archive_extension)
        if action is Action.NOOP:
            return

        record = self._apply(path, action)
        result.actions.append(record)
        if self.ledger is not None:
            self.ledger.write(record)

    # -----------------------------------------------------------------
    # Actions
    # -----------------------------------------------------------------

    def _apply(self, path: Path, action: Action) -> ActionRecord:
        """Run one action; tool failures stay scoped to this file."""
        gen = self.generator
        detail = ""
        try:
            if action is Action.GENERATE_PREVIEW:
                followup = gen.generate_preview(path)
                detail = f"preview rendered, then {followup.value}"

            elif action is Action.EXTRACT_THEN_PREVIEW:
                asset = with_extension(path, self.config.asset_extension)
                if not gen.extract_and_wait(path):
                    raise RetryExhausted(str(asset), self.config.wait_attempts)
                followup = gen.generate_preview(asset)
                detail = f"restored {asset.name}, preview rendered, then {followup.value}"

            elif action is Action.COMPRESS_AND_REMOVE:
                archive = gen.compress_and_remove(path)
                detail = f"archived to {archive.name}"

            elif action is Action.DELETE_ORIGINAL:
                if not gen.delete_original(path):
                    return ActionRecord(path=str(path), action=action, status="SKIPPED",
                                        detail="archive no longer present")

        except RetryExhausted as e:
            logger.warning("Skipping remaining steps for %s: %s", path, e)
            return ActionRecord(path=str(path), action=action, status="SKIPPED", detail=str(e))
        except ExternalToolError as e:
            logger.error("%s failed for %s: %s", action.value, path, e)
            return ActionRecord(path=str(path), action=action, status="FAILED", detail=str(e))

        return ActionRecord(path=str(path), action=action, status="DONE", detail=detail)


def reconcile(
    root: Path,
    config: VaultConfig,
    generator: Optional[ArtifactGenerator] = None,
    ledger: Optional[ActionLedger] = None,
) -> WalkResult:
    """One reconcile pass over ``root``; defaults to 7-Zip + Pillow tools."""
    generator = generator or ArtifactGenerator.default(config)
    return TreeWalker(config, generator, ledger).walk(root, Mode.RECONCILE)


def audit(root: Path, config: VaultConfig) -> WalkResult:
    """Read-only pass over ``root`` collecting every violation."""
    return TreeWalker(config).walk(root, Mode.AUDIT)
