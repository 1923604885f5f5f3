"""
Assessment Enums - Canonical investigation / next-step values

Responsibilities:
- Define the canonical enum sets recorded on an assessment
- Map legacy spellings (any casing) to canonical values
- Format canonical values as localized display labels

Design principles:
- One lookup algorithm (EnumNormalizer), parametrized by table
- Unknown input is not an error: normalize() returns None
- Labels never crash: anything without a label renders as PLACEHOLDER_LABEL

Invariants:
- Exactly the enum members are canonical
- Alias tables are many-to-one and not reversible
"""

import logging
from enum import Enum
from typing import Any, Dict, Optional, Type

logger = logging.getLogger(__name__)

# Rendered for missing or unknown values
PLACEHOLDER_LABEL = "—"


class InvestigationPlan(str, Enum):
    """Investigation decided on for the case."""
    NONE = "NONE"
    BIOPSY = "BIOPSY"
    OTHER = "OTHER"


class NextStepAction(str, Enum):
    """Next management step decided on for the case."""
    REASSURE = "REASSURE"
    MANAGE_MYSELF = "MANAGE_MYSELF"
    REFER = "REFER"


# Ordered canonical token sets
INVESTIGATION_PLANS = tuple(plan.value for plan in InvestigationPlan)
NEXT_STEP_ACTIONS = tuple(action.value for action in NextStepAction)


# Legacy investigation mappings
LEGACY_INVESTIGATION_MAP = {
    'none': InvestigationPlan.NONE,
    'NONE': InvestigationPlan.NONE,
    'biopsy': InvestigationPlan.BIOPSY,
    'BIOPSY': InvestigationPlan.BIOPSY,
    'other': InvestigationPlan.OTHER,
    'OTHER': InvestigationPlan.OTHER,
}

# Legacy next-step mappings
LEGACY_NEXT_STEP_MAP = {
    'reassure': NextStepAction.REASSURE,
    'REASSURE': NextStepAction.REASSURE,

    # Older records stored the short form
    'manage': NextStepAction.MANAGE_MYSELF,
    'MANAGE': NextStepAction.MANAGE_MYSELF,
    'manage_myself': NextStepAction.MANAGE_MYSELF,
    'MANAGE_MYSELF': NextStepAction.MANAGE_MYSELF,

    'refer': NextStepAction.REFER,
    'REFER': NextStepAction.REFER,
}


# Display labels: canonical token -> label
INVESTIGATION_LABELS_ZH = {
    'NONE': '不需要',
    'BIOPSY': '活检',
    'OTHER': '其他',
}

NEXT_STEP_LABELS_ZH = {
    'REASSURE': '安抚随访',
    'MANAGE_MYSELF': '自行处理',
    'REFER': '转诊',
}

INVESTIGATION_LABELS_EN = {
    'NONE': 'No investigation',
    'BIOPSY': 'Biopsy',
    'OTHER': 'Other',
}

NEXT_STEP_LABELS_EN = {
    'REASSURE': 'Reassure',
    'MANAGE_MYSELF': 'Manage myself',
    'REFER': 'Refer',
}


class EnumNormalizer:
    """
    Normalizes raw tokens to one canonical enum family and formats labels.

    The same algorithm serves every enum family; only the tables differ.

    Lookup order for normalize():
        1. exact key
        2. value.upper()
        3. value.lower()
    First hit wins. An all-uppercase canonical token therefore resolves on
    the exact pass, and 'Other' resolves on the upper pass.

    Example:
        >>> normalizer = EnumNormalizer(
        ...     InvestigationPlan, LEGACY_INVESTIGATION_MAP,
        ...     {'zh': INVESTIGATION_LABELS_ZH}
        ... )
        >>> normalizer.normalize('  biopsy ')
        <InvestigationPlan.BIOPSY: 'BIOPSY'>
        >>> normalizer.format_label('BIOPSY')
        '活检'
    """

    def __init__(
        self,
        enum_cls: Type[Enum],
        legacy_table: Dict[str, Enum],
        labels: Dict[str, Dict[str, str]],
        default_locale: str = "zh"
    ):
        """
        Args:
            enum_cls: Canonical enum class
            legacy_table: Raw token -> canonical member
            labels: Locale -> (canonical token -> display label)
            default_locale: Locale used when format_label gets no table
        """
        if default_locale not in labels:
            raise ValueError(f"No label table for default locale '{default_locale}'")

        self.enum_cls = enum_cls
        self.legacy_table = legacy_table
        self.labels = labels
        self.default_locale = default_locale

    def normalize(self, value: Any) -> Optional[Enum]:
        """
        Resolve a raw token to its canonical member.

        Args:
            value: Raw token (None, empty and unknown tokens are allowed)

        Returns:
            Canonical member, or None if the token is missing or unrecognized
        """
        if value is None:
            return None
        if not isinstance(value, str):
            logger.debug(f"{self.enum_cls.__name__}: ignoring non-string token {value!r}")
            return None

        trimmed = value.strip()
        if not trimmed:
            return None

        for candidate in (trimmed, trimmed.upper(), trimmed.lower()):
            if candidate in self.legacy_table:
                return self.legacy_table[candidate]

        logger.debug(f"{self.enum_cls.__name__}: unrecognized token '{trimmed}'")
        return None

    def label_table(self, locale: str) -> Dict[str, str]:
        """Return the label table for a locale (ValueError if unknown)."""
        if locale not in self.labels:
            raise ValueError(
                f"Unknown locale '{locale}' for {self.enum_cls.__name__}. "
                f"Available: {sorted(self.labels)}"
            )
        return self.labels[locale]

    def format_label(self, value: Any, labels: Optional[Dict[str, str]] = None) -> str:
        """
        Format a canonical value as a display label.

        Args:
            value: Canonical member or token string
            labels: Label table (defaults to the default locale's table)

        Returns:
            str: Label, or PLACEHOLDER_LABEL for missing/unknown values
        """
        if labels is None:
            labels = self.labels[self.default_locale]

        if not value:
            return PLACEHOLDER_LABEL

        token = value.value if isinstance(value, Enum) else value
        if not isinstance(token, str):
            return PLACEHOLDER_LABEL

        return labels.get(token, PLACEHOLDER_LABEL)


INVESTIGATION_NORMALIZER = EnumNormalizer(
    InvestigationPlan,
    LEGACY_INVESTIGATION_MAP,
    {'zh': INVESTIGATION_LABELS_ZH, 'en': INVESTIGATION_LABELS_EN}
)

NEXT_STEP_NORMALIZER = EnumNormalizer(
    NextStepAction,
    LEGACY_NEXT_STEP_MAP,
    {'zh': NEXT_STEP_LABELS_ZH, 'en': NEXT_STEP_LABELS_EN}
)


def normalize_investigation_plan(value: Optional[str]) -> Optional[InvestigationPlan]:
    return INVESTIGATION_NORMALIZER.normalize(value)


def normalize_next_step_action(value: Optional[str]) -> Optional[NextStepAction]:
    return NEXT_STEP_NORMALIZER.normalize(value)


def format_investigation_plan(value: Any, locale: str = "zh") -> str:
    """Format an investigation plan for the given locale ('zh' or 'en')."""
    return INVESTIGATION_NORMALIZER.format_label(
        value, INVESTIGATION_NORMALIZER.label_table(locale)
    )


def format_next_step_action(value: Any, locale: str = "zh") -> str:
    """Format a next-step action for the given locale ('zh' or 'en')."""
    return NEXT_STEP_NORMALIZER.format_label(
        value, NEXT_STEP_NORMALIZER.label_table(locale)
    )


def format_investigation_plan_zh(value: Any) -> str:
    return format_investigation_plan(value, "zh")


def format_next_step_action_zh(value: Any) -> str:
    return format_next_step_action(value, "zh")
