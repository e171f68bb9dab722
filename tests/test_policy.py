from __future__ import annotations

import itertools

import pytest

from fleetvision.models.fiscal_note import (
    DocumentAnalysis,
    DocumentClassification,
    FiscalNoteFilter,
    FiscalNoteStatus,
)
from fleetvision.models.odometer import ReadingState
from fleetvision.state.policy import classify_document, derive_state, matches_filter


def _analysis(
    classification: DocumentClassification | None,
    number_matches: bool,
    has_signature: bool,
) -> DocumentAnalysis:
    return DocumentAnalysis(
        classification=classification,
        found_number="123" if number_matches else None,
        number_matches=number_matches,
        has_signature=has_signature,
        confidence=0.9,
    )


# ------------------------------------------------------------------
# derive_state
# ------------------------------------------------------------------


def test_divergence_when_manual_differs_from_ai() -> None:
    assert derive_state(12500, 12580, False) == ReadingState.DIVERGENCE


def test_match_when_manual_equals_ai() -> None:
    assert derive_state(12580, 12580, False) == ReadingState.MATCH


@pytest.mark.parametrize(
    ("manual", "ai"),
    [(0, 0), (0, 1), (1, 0), (999_999, 999_999), (None, 5), (42, 41), (7, 7)],
)
def test_state_with_ai_value_is_match_iff_equal(manual: int | None, ai: int) -> None:
    expected = ReadingState.MATCH if manual == ai else ReadingState.DIVERGENCE
    assert derive_state(manual, ai, False) == expected


@pytest.mark.parametrize(("manual", "ai"), [(None, None), (10, None), (10, 10), (10, 11)])
def test_saved_is_frozen_regardless_of_values(manual: int | None, ai: int | None) -> None:
    assert derive_state(manual, ai, True) == ReadingState.SAVED
    assert derive_state(manual, ai, True, analyzing=True, failed=True) == ReadingState.SAVED


def test_analyzing_overrides_value_comparison() -> None:
    assert derive_state(10, 10, False, analyzing=True) == ReadingState.ANALYZING


def test_failure_without_ai_value_is_error() -> None:
    assert derive_state(12500, None, False, failed=True) == ReadingState.ERROR


def test_no_ai_value_and_no_failure_is_idle() -> None:
    assert derive_state(None, None, False) == ReadingState.IDLE
    assert derive_state(12500, None, False) == ReadingState.IDLE


# ------------------------------------------------------------------
# classify_document
# ------------------------------------------------------------------


def test_signed_matching_receipt_is_validated() -> None:
    assert classify_document(_analysis(DocumentClassification.RECEIPT, True, True)) == FiscalNoteStatus.VALIDATED


def test_receipt_for_other_invoice_is_rejected() -> None:
    assert classify_document(_analysis(DocumentClassification.RECEIPT, False, True)) == FiscalNoteStatus.REJECTED
    assert classify_document(_analysis(DocumentClassification.RECEIPT, False, False)) == FiscalNoteStatus.REJECTED


def test_unsigned_matching_receipt_needs_review() -> None:
    assert classify_document(_analysis(DocumentClassification.RECEIPT, True, False)) == FiscalNoteStatus.REVIEW


@pytest.mark.parametrize(("matches", "signed"), list(itertools.product([True, False], repeat=2)))
def test_goods_photo_always_needs_review(matches: bool, signed: bool) -> None:
    assert classify_document(_analysis(DocumentClassification.GOODS, matches, signed)) == FiscalNoteStatus.REVIEW


@pytest.mark.parametrize(("matches", "signed"), list(itertools.product([True, False], repeat=2)))
def test_other_and_missing_classification_always_rejected(matches: bool, signed: bool) -> None:
    assert classify_document(_analysis(DocumentClassification.OTHER, matches, signed)) == FiscalNoteStatus.REJECTED
    assert classify_document(_analysis(None, matches, signed)) == FiscalNoteStatus.REJECTED


def test_classification_table_is_total() -> None:
    classifications = [*DocumentClassification, None]
    for classification, matches, signed in itertools.product(classifications, [True, False], [True, False]):
        status = classify_document(_analysis(classification, matches, signed))
        assert status in (FiscalNoteStatus.VALIDATED, FiscalNoteStatus.REVIEW, FiscalNoteStatus.REJECTED)


# ------------------------------------------------------------------
# matches_filter
# ------------------------------------------------------------------


def test_review_bucket_groups_rejected_items() -> None:
    assert matches_filter(FiscalNoteStatus.REVIEW, FiscalNoteFilter.REVIEW)
    assert matches_filter(FiscalNoteStatus.REJECTED, FiscalNoteFilter.REVIEW)
    assert not matches_filter(FiscalNoteStatus.VALIDATED, FiscalNoteFilter.REVIEW)
    assert not matches_filter(FiscalNoteStatus.PROCESSING, FiscalNoteFilter.REVIEW)


def test_single_status_buckets() -> None:
    assert matches_filter(FiscalNoteStatus.VALIDATED, FiscalNoteFilter.VALIDATED)
    assert not matches_filter(FiscalNoteStatus.REJECTED, FiscalNoteFilter.VALIDATED)
    assert matches_filter(FiscalNoteStatus.PROCESSING, FiscalNoteFilter.PROCESSING)
    assert not matches_filter(FiscalNoteStatus.REVIEW, FiscalNoteFilter.PROCESSING)


def test_all_bucket_lists_everything() -> None:
    for status in FiscalNoteStatus:
        assert matches_filter(status, FiscalNoteFilter.ALL)
