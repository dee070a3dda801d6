from finance_insights.categorization import (
    build_classification,
    classify_expense_category,
    default_goal_bucket,
    describe_classification,
)
from finance_insights.models import GoalCategory


def test_configured_table():
    for category in ('rent', 'electricity', 'gas', 'wifi', 'groceries'):
        assert classify_expense_category(category) == GoalCategory.NEEDS
    for category in ('amazon', 'eating_out', 'miscellaneous'):
        assert classify_expense_category(category) == GoalCategory.WANTS


def test_unmapped_categories_fall_back_to_wants():
    assert classify_expense_category('fuel') == GoalCategory.WANTS
    assert classify_expense_category('custom-1700000000000') == GoalCategory.WANTS
    assert classify_expense_category(None) == GoalCategory.WANTS
    assert classify_expense_category('') == GoalCategory.WANTS


def test_explicit_table_and_default():
    classification = build_classification({'needs': ['fuel'], 'debt_repayment': ['loan']})
    assert classification == {'fuel': GoalCategory.NEEDS, 'loan': GoalCategory.DEBT_REPAYMENT}
    assert classify_expense_category('loan', classification) == GoalCategory.DEBT_REPAYMENT
    assert classify_expense_category('rent', classification, default=GoalCategory.NEEDS) == GoalCategory.NEEDS


def test_describe_classification_lists_every_bucket():
    described = describe_classification()
    assert set(described) == {bucket.value for bucket in GoalCategory}
    assert described['needs'] == ['electricity', 'gas', 'groceries', 'rent', 'wifi']
    assert described['savings'] == []


def test_default_bucket_from_settings():
    assert default_goal_bucket() == GoalCategory.WANTS
    assert classify_expense_category('fuel', {}, default=GoalCategory.SAVINGS) == GoalCategory.SAVINGS
