"""Deterministic reconciliation and classification policy.

This module contains *no* I/O and no mutable state. The reconciler and
the batch validator call into it after every mutation so that status is
always a pure function of the raw fields.
"""

from __future__ import annotations

from fleetvision.models.fiscal_note import (
    DocumentAnalysis,
    DocumentClassification,
    FiscalNoteFilter,
    FiscalNoteStatus,
)
from fleetvision.models.odometer import ReadingState


def derive_state(
    manual_value: int | None,
    ai_value: int | None,
    saved: bool,
    *,
    analyzing: bool = False,
    failed: bool = False,
) -> ReadingState:
    """Derive the reading state from its raw fields.

    Policy:
    - A saved reading is frozen to ``SAVED``.
    - An outstanding recognition call shows ``ANALYZING``.
    - With an AI value: ``MATCH`` iff the manual value equals it,
      otherwise ``DIVERGENCE`` (an empty manual value diverges).
    - A failed recognition without an AI value is ``ERROR``.
    - Anything else is ``IDLE``.
    """
    if saved:
        return ReadingState.SAVED
    if analyzing:
        return ReadingState.ANALYZING
    if ai_value is not None:
        return ReadingState.MATCH if manual_value == ai_value else ReadingState.DIVERGENCE
    if failed:
        return ReadingState.ERROR
    return ReadingState.IDLE


def classify_document(analysis: DocumentAnalysis) -> FiscalNoteStatus:
    """Map a document analysis onto a final item status.

    Receipts are validated only when both the invoice number matches and
    a signature is present; a receipt for another invoice is rejected and
    an unsigned matching receipt needs review. Photos of goods may be an
    alternate proof of delivery and always need review. Anything else,
    including a missing classification, is rejected.
    """
    if analysis.classification == DocumentClassification.RECEIPT:
        if analysis.number_matches and analysis.has_signature:
            return FiscalNoteStatus.VALIDATED
        if not analysis.number_matches:
            return FiscalNoteStatus.REJECTED
        return FiscalNoteStatus.REVIEW
    if analysis.classification == DocumentClassification.GOODS:
        return FiscalNoteStatus.REVIEW
    return FiscalNoteStatus.REJECTED


def matches_filter(status: FiscalNoteStatus, bucket: FiscalNoteFilter) -> bool:
    """Whether an item with *status* is listed under *bucket*."""
    if bucket == FiscalNoteFilter.ALL:
        return True
    if bucket == FiscalNoteFilter.REVIEW:
        # UI grouping only; the statuses stay distinct.
        return status in (FiscalNoteStatus.REVIEW, FiscalNoteStatus.REJECTED)
    return status.value == bucket.value
