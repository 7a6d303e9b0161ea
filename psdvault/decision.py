"""Decision engine: map a file's companion state to one action or verdict.

Both functions are pure. ``decide`` is a priority chain; the first matching
rule wins and each file gets exactly one action per pass.
"""
from __future__ import annotations

from typing import Optional

from psdvault.models import Action, FileState, ViolationCategory
from psdvault.paths import ARCHIVE_EXT, ASSET_EXT

FIX_COMMAND = "psdvault fix"


def decide(
    extension: str,
    has_preview: bool,
    has_archive: bool,
    asset_present: bool = False,
    asset_ext: str = ASSET_EXT,
    archive_ext: str = ARCHIVE_EXT,
) -> Action:
    """Select the corrective action for one file in reconcile mode.

    Args:
        extension: Lowercase extension of the file, including the period
        has_preview: Whether the stem's preview exists (or is not needed)
        has_archive: Whether the stem's archive exists (or is not needed)
        asset_present: For archives, whether the sibling asset exists
        asset_ext: Asset extension
        archive_ext: Archive extension

    Returns:
        The single Action to perform
    """
    if extension == asset_ext and not has_preview:
        return Action.GENERATE_PREVIEW
    if extension == archive_ext and not has_preview and not asset_present:
        return Action.EXTRACT_THEN_PREVIEW
    if extension == asset_ext and not has_archive:
        return Action.COMPRESS_AND_REMOVE
    if extension == asset_ext and has_preview and has_archive:
        return Action.DELETE_ORIGINAL
    return Action.NOOP


def decide_state(state: FileState, asset_ext: str = ASSET_EXT,
                 archive_ext: str = ARCHIVE_EXT) -> Action:
    return decide(state.extension, state.has_preview, state.has_archive,
                  state.asset_present, asset_ext, archive_ext)


def judge(
    extension: str,
    has_preview: bool,
    has_archive: bool,
    asset_ext: str = ASSET_EXT,
    archive_ext: str = ARCHIVE_EXT,
) -> Optional[ViolationCategory]:
    """Audit verdict for one file; None means compliant."""
    if extension == asset_ext and not has_preview:
        return ViolationCategory.MISSING_PREVIEW
    if extension == archive_ext and not has_preview:
        return ViolationCategory.MISSING_PREVIEW
    if extension == asset_ext and not has_archive:
        return ViolationCategory.NOT_ARCHIVED
    if extension == asset_ext and has_preview and has_archive:
        return ViolationCategory.REDUNDANT_ORIGINAL
    return None


def violation_message(
    extension: str,
    category: ViolationCategory,
    archive_ext: str = ARCHIVE_EXT,
) -> str:
    """Human-readable help text for a violation."""
    if category is ViolationCategory.MISSING_PREVIEW:
        if extension == archive_ext:
            return "Your 7-Zip file does not have a preview png associated with it."
        return "Your PSD file does not have a preview png associated with it."
    if category is ViolationCategory.NOT_ARCHIVED:
        return f"PSD files are very large, compress it to a {archive_ext} file with {FIX_COMMAND}"
    return (f"PSD files are very large, compress it to a {archive_ext} "
            "and delete the PSD from your branch")
