"""
Diff Engine - Did the POST assessment change from the PRE snapshot?

Rules:
- Missing snapshot on either side is "unchanged"
- Scalar fields compared by equality (booleans never equal numbers), in
  SCALAR_FIELDS order
- Diagnoses compared per rank slot (RANK_SLOTS), not by sequence index
- A diagnosis present on one side only is a change
- diagnosis_id compared by equality
- raw_text compared only when both sides recorded it; historical records
  without raw_text must not read as changed

compute_was_updated() stops at the first difference. list_changes() reports
every difference under the same rules, for audit/debug output.
"""

import logging
from typing import Iterator, List, Optional

from assessment.contracts import ComparableSubset
from assessment.utils.helpers import strictly_equal

logger = logging.getLogger(__name__)

SCALAR_FIELDS = (
    'diagnostic_confidence',
    'management_confidence',
    'investigation_action',
    'next_step_action',
)

RANK_SLOTS = (1, 2, 3)


def _iter_changes(pre: ComparableSubset, post: ComparableSubset) -> Iterator[str]:
    """Yield a label for each difference, in comparison order."""
    for field_name in SCALAR_FIELDS:
        if not strictly_equal(getattr(pre, field_name, None), getattr(post, field_name, None)):
            yield field_name

    for rank in RANK_SLOTS:
        pre_diag = pre.diagnosis_at(rank)
        post_diag = post.diagnosis_at(rank)

        if (pre_diag is None) != (post_diag is None):
            yield f"diagnosis[{rank}]"
            continue
        if pre_diag is None:
            continue

        if not strictly_equal(pre_diag.diagnosis_id, post_diag.diagnosis_id):
            yield f"diagnosis[{rank}].diagnosis_id"
        if (
            pre_diag.raw_text is not None
            and post_diag.raw_text is not None
            and not strictly_equal(pre_diag.raw_text, post_diag.raw_text)
        ):
            yield f"diagnosis[{rank}].raw_text"


def compute_was_updated(
    pre: Optional[ComparableSubset],
    post: Optional[ComparableSubset]
) -> bool:
    """
    Check whether POST differs from PRE.

    Args:
        pre: Comparable subset of the PRE snapshot (None if unavailable)
        post: Comparable subset of the POST assessment (None if unavailable)

    Returns:
        bool: True on the first difference found, False otherwise
    """
    if pre is None or post is None:
        return False

    first_change = next(_iter_changes(pre, post), None)
    if first_change is not None:
        logger.debug(f"Assessment updated: first change at {first_change}")
        return True
    return False


def list_changes(
    pre: Optional[ComparableSubset],
    post: Optional[ComparableSubset]
) -> List[str]:
    """
    List every difference between PRE and POST.

    Returns:
        List of labels such as 'next_step_action', 'diagnosis[2]',
        'diagnosis[1].raw_text'. Empty if unchanged or a snapshot is missing.
    """
    if pre is None or post is None:
        return []
    return list(_iter_changes(pre, post))
