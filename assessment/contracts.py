"""
Semantic contracts for PRE/POST assessment comparison.

Immutable data structures passed between the Comparable-Subset Builder and
the Diff Engine. These are NOT validators - they define shape without
enforcing business rules on confidences or diagnosis ids.

Design principles:
- Frozen dataclasses (immutable after creation)
- Tuples instead of lists for sequences
- No dependencies on other modules except the canonical enums

Contents:
- RankedDiagnosis: One diagnosis in a rank slot
- ComparableSubset: Diff-ready projection of one assessment snapshot

Usage:
    from assessment.contracts import RankedDiagnosis, ComparableSubset
"""

from dataclasses import dataclass
from typing import Any, Optional, Tuple

from assessment.utils.assessment_enums import InvestigationPlan, NextStepAction
from assessment.utils.helpers import strictly_equal


@dataclass(frozen=True)
class RankedDiagnosis:
    """
    A diagnosis placed in a rank slot.

    Identity for comparison is the rank slot (1, 2 or 3), not the position
    in the sequence. Ranks may be sparse and are kept exactly as the source
    record provided them.

    Attributes:
        rank: Rank slot as recorded (normally 1..3)
        diagnosis_id: Identifier of a catalogue diagnosis, None if free text only
        raw_text: Free text entered by the user, None if not recorded

    Examples:
        >>> d = RankedDiagnosis(rank=1, diagnosis_id=5)
        >>> d.raw_text is None
        True
    """
    rank: Any
    diagnosis_id: Optional[Any] = None
    raw_text: Optional[str] = None


@dataclass(frozen=True)
class ComparableSubset:
    """
    Normalized, diff-ready projection of a PRE or POST assessment.

    Built once per snapshot by build_comparable_subset() and owned by the
    caller that built it.

    Attributes:
        diagnostic_confidence: Passed through untouched (None if not recorded)
        management_confidence: Passed through untouched (None if not recorded)
        investigation_action: Canonical investigation plan or None
        next_step_action: Canonical next-step action or None
        diagnoses: Ranked diagnoses in source order
    """
    diagnostic_confidence: Optional[Any] = None
    management_confidence: Optional[Any] = None
    investigation_action: Optional[InvestigationPlan] = None
    next_step_action: Optional[NextStepAction] = None
    diagnoses: Tuple[RankedDiagnosis, ...] = ()

    def diagnosis_at(self, rank: int) -> Optional[RankedDiagnosis]:
        """
        Return the first diagnosis recorded in a rank slot.

        If several entries share the rank, the first one in source order wins.
        """
        for diagnosis in self.diagnoses:
            if diagnosis is not None and strictly_equal(diagnosis.rank, rank):
                return diagnosis
        return None
