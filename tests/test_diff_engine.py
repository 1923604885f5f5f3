"""
Unit tests for the PRE/POST Diff Engine

Run with: pytest tests/test_diff_engine.py
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import dataclasses

import pytest

from assessment.contracts import ComparableSubset, RankedDiagnosis
from assessment.core.comparable_subset import build_comparable_subset
from assessment.core.diff_engine import compute_was_updated, list_changes


@pytest.fixture
def snapshot():
    """Typical PRE snapshot"""
    return build_comparable_subset(
        {
            'diagnostic_confidence': 3,
            'management_confidence': 4,
            'investigation_plan': 'biopsy',
            'next_step': 'manage',
        },
        [
            {'rank': 1, 'diagnosis_id': 5, 'raw_text': 'melanoma'},
            {'rank': 2, 'diagnosis_id': 9},
        ]
    )


def _with(subset, **changes):
    return dataclasses.replace(subset, **changes)


def test_reflexive(snapshot):
    """A snapshot never differs from itself"""
    assert compute_was_updated(snapshot, snapshot) is False
    assert list_changes(snapshot, snapshot) == []

    empty = ComparableSubset()
    assert compute_was_updated(empty, empty) is False


def test_equal_rebuilds_unchanged(snapshot):
    """Legacy and canonical spellings of the same record are unchanged"""
    post = build_comparable_subset(
        {
            'diagnostic_confidence': 3,
            'management_confidence': 4,
            'investigation_action': 'BIOPSY',
            'next_step_action': 'MANAGE_MYSELF',
        },
        [
            {'rank': 2, 'diagnosis_id': 9},
            {'rank': 1, 'diagnosis_id': 5, 'raw_text': 'melanoma'},
        ]
    )
    assert compute_was_updated(snapshot, post) is False


def test_missing_snapshot_is_unchanged(snapshot):
    assert compute_was_updated(None, snapshot) is False
    assert compute_was_updated(snapshot, None) is False
    assert compute_was_updated(None, None) is False
    assert list_changes(None, snapshot) == []


@pytest.mark.parametrize("field_name,value", [
    ('diagnostic_confidence', 4),
    ('management_confidence', None),
    ('investigation_action', None),
    ('next_step_action', 'REFER'),
])
def test_scalar_field_change(snapshot, field_name, value):
    post = _with(snapshot, **{field_name: value})

    assert compute_was_updated(snapshot, post) is True
    assert list_changes(snapshot, post) == [field_name]


def test_diagnosis_removed(snapshot):
    """PRE has rank 1, POST has none"""
    post = _with(snapshot, diagnoses=(RankedDiagnosis(rank=2, diagnosis_id=9),))

    assert compute_was_updated(snapshot, post) is True
    assert list_changes(snapshot, post) == ['diagnosis[1]']


def test_diagnosis_added(snapshot):
    post = _with(snapshot, diagnoses=snapshot.diagnoses + (RankedDiagnosis(rank=3, diagnosis_id=1),))

    assert compute_was_updated(snapshot, post) is True
    assert list_changes(snapshot, post) == ['diagnosis[3]']


def test_diagnosis_id_changed(snapshot):
    post = _with(snapshot, diagnoses=(
        RankedDiagnosis(rank=1, diagnosis_id=6, raw_text='melanoma'),
        RankedDiagnosis(rank=2, diagnosis_id=9),
    ))

    assert compute_was_updated(snapshot, post) is True
    assert list_changes(snapshot, post) == ['diagnosis[1].diagnosis_id']


def test_raw_text_changed_when_both_defined(snapshot):
    post = _with(snapshot, diagnoses=(
        RankedDiagnosis(rank=1, diagnosis_id=5, raw_text='naevus'),
        RankedDiagnosis(rank=2, diagnosis_id=9),
    ))

    assert compute_was_updated(snapshot, post) is True
    assert list_changes(snapshot, post) == ['diagnosis[1].raw_text']


def test_raw_text_on_one_side_only_is_unchanged():
    """Historical records without raw_text do not read as changed"""
    pre = build_comparable_subset({}, [{'rank': 1, 'diagnosis_id': 5}])
    post = build_comparable_subset({}, [{'rank': 1, 'diagnosis_id': 5, 'raw_text': 'abc'}])

    assert compute_was_updated(pre, post) is False
    assert compute_was_updated(post, pre) is False


def test_ranks_addressed_by_slot_not_index():
    pre = build_comparable_subset({}, [{'rank': 3, 'diagnosis_id': 1}])
    post = build_comparable_subset({}, [None, {'rank': 3, 'diagnosis_id': 1}])

    assert compute_was_updated(pre, post) is False


def test_ranks_outside_slots_ignored():
    pre = build_comparable_subset({}, [{'rank': 4, 'diagnosis_id': 1}])
    post = build_comparable_subset({}, [{'rank': 4, 'diagnosis_id': 2}])

    assert compute_was_updated(pre, post) is False


def test_duplicate_rank_first_match_wins():
    pre = build_comparable_subset({}, [{'rank': 1, 'diagnosis_id': 5}, {'rank': 1, 'diagnosis_id': 7}])
    post = build_comparable_subset({}, [{'rank': 1, 'diagnosis_id': 5}])

    assert compute_was_updated(pre, post) is False


def test_malformed_entries_do_not_raise():
    pre = build_comparable_subset({}, [{'diagnosis_id': 5}, {'rank': 'one'}])
    post = build_comparable_subset({}, [])

    assert compute_was_updated(pre, post) is False


def test_non_mapping_entries_do_not_raise():
    """Bare values occupy no rank slot; objects are read by attribute"""
    class Entry:
        rank = 2
        diagnosis_id = 9

    pre = build_comparable_subset({}, [{'rank': 1, 'diagnosis_id': 5}, 5, 'text', Entry()])
    post = build_comparable_subset({}, [{'rank': 1, 'diagnosis_id': 5}, {'rank': 2, 'diagnosis_id': 9}])

    assert compute_was_updated(pre, post) is False
    assert pre.diagnoses[1].rank is None
    assert pre.diagnosis_at(2).raw_text is None


@pytest.mark.parametrize("pre_value,post_value", [(1, True), (0, False), (True, 1)])
def test_booleans_never_equal_numbers(pre_value, post_value):
    pre = build_comparable_subset({'diagnostic_confidence': pre_value}, [{'rank': 1, 'diagnosis_id': pre_value}])
    post = build_comparable_subset({'diagnostic_confidence': post_value}, [{'rank': 1, 'diagnosis_id': post_value}])

    assert compute_was_updated(pre, post) is True
    assert list_changes(pre, post) == ['diagnostic_confidence', 'diagnosis[1].diagnosis_id']


def test_boolean_rank_occupies_no_slot():
    pre = build_comparable_subset({}, [{'rank': True, 'diagnosis_id': 5}])
    post = build_comparable_subset({}, [{'rank': 1, 'diagnosis_id': 5}])

    assert list_changes(pre, post) == ['diagnosis[1]']


def test_int_and_float_confidence_equal():
    pre = build_comparable_subset({'management_confidence': 3})
    post = build_comparable_subset({'management_confidence': 3.0})

    assert compute_was_updated(pre, post) is False


def test_list_changes_reports_every_difference(snapshot):
    post = build_comparable_subset(
        {
            'diagnostic_confidence': 5,
            'management_confidence': 4,
            'investigation_action': 'NONE',
            'next_step_action': 'MANAGE_MYSELF',
        },
        [{'rank': 1, 'diagnosis_id': 8, 'raw_text': 'bcc'}]
    )

    changes = list_changes(snapshot, post)
    assert changes == [
        'diagnostic_confidence',
        'investigation_action',
        'diagnosis[1].diagnosis_id',
        'diagnosis[1].raw_text',
        'diagnosis[2]',
    ]
    assert compute_was_updated(snapshot, post) is True
