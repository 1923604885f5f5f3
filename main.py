"""
Console Harness for the PRE/POST assessment core

Walks through enum normalization, label formatting, a PRE/POST diff and the
new-user flag lifecycle against a JSON file store.
"""

import logging
import sys

from assessment.core.comparable_subset import build_comparable_subset
from assessment.core.diff_engine import compute_was_updated, list_changes
from assessment.core.new_user_state import NewUserStateMachine
from assessment.core.user_session import User, UserSession
from assessment.persistence import DEFAULT_STORE_PATH, JsonFileKeyValueStore
from assessment.utils.assessment_enums import (
    format_investigation_plan,
    format_next_step_action,
    normalize_investigation_plan,
    normalize_next_step_action,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def print_separator(char="=", length=60):
    """Print a separator line"""
    print(char * length)


def show_enums():
    print_separator()
    print("ENUM NORMALIZATION")
    print_separator()

    for raw in ["Other", "biopsy", " none ", "invalid", ""]:
        plan = normalize_investigation_plan(raw)
        print(f"investigation {raw!r:>10} -> {plan.value if plan else None} "
              f"({format_investigation_plan(plan)} / {format_investigation_plan(plan, 'en')})")

    for raw in ["manage", "REFER", "Reassure", "later"]:
        action = normalize_next_step_action(raw)
        print(f"next step     {raw!r:>10} -> {action.value if action else None} "
              f"({format_next_step_action(action)} / {format_next_step_action(action, 'en')})")


def show_diff():
    print_separator()
    print("PRE/POST DIFF")
    print_separator()

    pre = build_comparable_subset(
        {
            'diagnostic_confidence': 3,
            'management_confidence': 4,
            'investigation_plan': 'biopsy',
            'next_step': 'manage',
        },
        [{'rank': 1, 'diagnosis_id': 5}, {'rank': 2, 'diagnosis_id': 9}, None]
    )
    post = build_comparable_subset(
        {
            'diagnostic_confidence': 3,
            'management_confidence': 4,
            'investigation_action': 'BIOPSY',
            'next_step_action': 'REFER',
        },
        [{'rank': 1, 'diagnosis_id': 5, 'raw_text': 'melanoma'}]
    )

    print(f"Updated: {compute_was_updated(pre, post)}")
    print(f"Changes: {list_changes(pre, post)}")
    print(f"Unchanged against itself: {not compute_was_updated(pre, pre)}")


def show_new_user(store_path):
    print_separator()
    print("NEW-USER FLAG")
    print_separator()

    store = JsonFileKeyValueStore(store_path)
    session = UserSession(NewUserStateMachine(store))

    state = session.set_user(User(id=42, email="demo@example.com"))
    print(f"User 42 loaded: {state.value}")

    state = session.evaluate_new_user_heuristic(
        has_completed_reports=True, has_active_assignment=False
    )
    print(f"After heuristic: {state.value} (stored {store.get('new_user_flag_42')!r})")

    state = session.set_user(User(id=7))
    print(f"User 7 loaded: {state.value}")

    session.clear()
    print(f"After logout: new={session.is_new_user}, authenticated={session.is_authenticated}")


def main(argv):
    """Run console harness"""
    store_path = argv[1] if len(argv) > 1 else DEFAULT_STORE_PATH

    show_enums()
    show_diff()
    show_new_user(store_path)

    print_separator()
    print("Console harness complete")
    print_separator()
    return 0


if __name__ == '__main__':
    sys.exit(main(sys.argv))
