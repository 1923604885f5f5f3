"""
Comparable-Subset Builder - Project raw assessment records for diffing

Responsibilities:
- Resolve investigation / next-step values from canonical or legacy fields
- Normalize them through the enum normalizers
- Project diagnosis entries to RankedDiagnosis, dropping empty entries

Design principles:
- Field-by-field resolution, no object spreading
- No re-ranking and no dedup (the Diff Engine reads first match per rank)
- Confidences pass through untouched
"""

import logging
from typing import Any, Iterable, Mapping, Optional

from assessment.contracts import ComparableSubset, RankedDiagnosis
from assessment.utils.assessment_enums import (
    normalize_investigation_plan,
    normalize_next_step_action,
)

logger = logging.getLogger(__name__)


def _first_present(fields: Mapping[str, Any], *keys: str) -> Optional[Any]:
    """Return the first value among keys that is not None."""
    for key in keys:
        value = fields.get(key)
        if value is not None:
            return value
    return None


def _project_diagnosis(entry: Any) -> RankedDiagnosis:
    """
    Project one diagnosis entry.

    Mappings are read by key and other objects by attribute. Anything
    without the fields (e.g. a bare number) projects to an empty entry
    that occupies no rank slot.
    """
    if isinstance(entry, RankedDiagnosis):
        return entry
    if isinstance(entry, Mapping):
        return RankedDiagnosis(
            rank=entry.get('rank'),
            diagnosis_id=entry.get('diagnosis_id'),
            raw_text=entry.get('raw_text'),
        )

    logger.debug(f"Projecting non-mapping diagnosis entry {entry!r} by attribute")
    return RankedDiagnosis(
        rank=getattr(entry, 'rank', None),
        diagnosis_id=getattr(entry, 'diagnosis_id', None),
        raw_text=getattr(entry, 'raw_text', None),
    )


def build_comparable_subset(
    fields: Mapping[str, Any],
    diagnoses: Optional[Iterable[Any]] = None
) -> ComparableSubset:
    """
    Build the comparable subset of one assessment snapshot.

    The canonical field wins over its legacy alias when both are present:
        investigation_action  over  investigation_plan
        next_step_action      over  next_step

    Args:
        fields: Raw assessment fields (missing keys are treated as absent)
        diagnoses: Raw diagnosis entries; falsy entries are dropped

    Returns:
        ComparableSubset: Immutable projection

    Example:
        >>> subset = build_comparable_subset(
        ...     {'diagnostic_confidence': 3, 'investigation_plan': 'biopsy'},
        ...     [{'rank': 1, 'diagnosis_id': 5}, None]
        ... )
        >>> subset.investigation_action
        <InvestigationPlan.BIOPSY: 'BIOPSY'>
        >>> len(subset.diagnoses)
        1
    """
    investigation = normalize_investigation_plan(
        _first_present(fields, 'investigation_action', 'investigation_plan')
    )
    next_step = normalize_next_step_action(
        _first_present(fields, 'next_step_action', 'next_step')
    )

    projected = tuple(
        _project_diagnosis(entry) for entry in (diagnoses or ()) if entry
    )
    logger.debug(f"Built comparable subset with {len(projected)} diagnoses")

    return ComparableSubset(
        diagnostic_confidence=fields.get('diagnostic_confidence'),
        management_confidence=fields.get('management_confidence'),
        investigation_action=investigation,
        next_step_action=next_step,
        diagnoses=projected,
    )
