"""Tests for decision.py: the reconcile decision table and audit verdicts."""
from __future__ import annotations

import pytest

from psdvault.decision import decide, decide_state, judge, violation_message
from psdvault.models import Action, FileState, ViolationCategory


class TestDecide:

    @pytest.mark.parametrize("has_archive", [False, True])
    def test_psd_without_preview_generates_preview(self, has_archive):
        assert decide(".psd", False, has_archive) is Action.GENERATE_PREVIEW

    def test_psd_with_preview_no_archive_compresses(self):
        assert decide(".psd", True, False) is Action.COMPRESS_AND_REMOVE

    def test_psd_with_both_deletes_original(self):
        assert decide(".psd", True, True) is Action.DELETE_ORIGINAL

    def test_archive_without_preview_extracts(self):
        assert decide(".7z", False, True) is Action.EXTRACT_THEN_PREVIEW

    def test_archive_without_preview_but_asset_present_waits(self):
        assert decide(".7z", False, True, asset_present=True) is Action.NOOP

    def test_archive_with_preview_is_noop(self):
        assert decide(".7z", True, True) is Action.NOOP

    @pytest.mark.parametrize("ext", [".png", ".txt", ""])
    def test_other_extensions_noop(self, ext):
        assert decide(ext, False, False) is Action.NOOP

    def test_custom_archive_extension(self):
        assert decide(".zip", False, True, archive_ext=".zip") is Action.EXTRACT_THEN_PREVIEW
        assert decide(".7z", False, True, archive_ext=".zip") is Action.NOOP

    def test_decide_state(self):
        state = FileState(path="a.psd", extension=".psd", has_preview=True, has_archive=False)
        assert decide_state(state) is Action.COMPRESS_AND_REMOVE


class TestJudge:

    def test_psd_missing_preview(self):
        assert judge(".psd", False, False) is ViolationCategory.MISSING_PREVIEW
        assert judge(".psd", False, True) is ViolationCategory.MISSING_PREVIEW

    def test_archive_missing_preview(self):
        assert judge(".7z", False, True) is ViolationCategory.MISSING_PREVIEW

    def test_psd_not_archived(self):
        assert judge(".psd", True, False) is ViolationCategory.NOT_ARCHIVED

    def test_psd_redundant(self):
        assert judge(".psd", True, True) is ViolationCategory.REDUNDANT_ORIGINAL

    def test_compliant(self):
        assert judge(".7z", True, True) is None
        assert judge(".png", True, True) is None


class TestViolationMessage:

    def test_missing_preview_names_file_kind(self):
        assert "PSD file" in violation_message(".psd", ViolationCategory.MISSING_PREVIEW)
        assert "7-Zip file" in violation_message(".7z", ViolationCategory.MISSING_PREVIEW)

    def test_not_archived_mentions_fix(self):
        msg = violation_message(".psd", ViolationCategory.NOT_ARCHIVED)
        assert "psdvault fix" in msg
        assert ".7z" in msg

    def test_redundant_mentions_delete(self):
        msg = violation_message(".psd", ViolationCategory.REDUNDANT_ORIGINAL)
        assert "delete the PSD" in msg
