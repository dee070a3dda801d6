import json
import logging

import pytest

from finance_insights import config
from finance_insights.categorization import classify_expense_category
from finance_insights.models import GoalCategory, GoalScoringPolicy, SpendingIntensity
from finance_insights.settings import defaults, get_analytics_config, get_config_value, load_config, reload_settings


def test_packaged_settings_load():
    settings = load_config('analytics')
    assert settings['spending_intensity'] == {'low': 5000, 'medium': 10000, 'high': 20000}
    assert settings['default_goal_category'] == 'wants'


def test_missing_config_raises():
    with pytest.raises(FileNotFoundError):
        load_config('does_not_exist')


def test_get_config_value():
    assert get_config_value('analytics', 'goal_scoring', 'encouraging_ratio') == 0.7
    assert get_config_value('analytics', 'goal_scoring', 'nope', default=1) == 1
    assert get_config_value('does_not_exist', 'x', default='fallback') == 'fallback'


def test_policies_from_packaged_settings():
    assert SpendingIntensity.from_config() == SpendingIntensity()
    assert GoalScoringPolicy.from_config() == GoalScoringPolicy()


def test_settings_dir_override(monkeypatch, tmp_path):
    settings = load_config('analytics')
    settings['spending_intensity'] = {'low': 100, 'medium': 200, 'high': 300}
    (tmp_path / 'analytics.json').write_text(json.dumps(settings), encoding='utf-8')

    monkeypatch.setenv('FININSIGHTS_SETTINGS_DIR', str(tmp_path))
    reload_settings()
    try:
        assert config.get_settings_dir() == tmp_path.resolve()
        assert get_analytics_config()['spending_intensity']['low'] == 100
        assert SpendingIntensity.from_config() == SpendingIntensity(100, 200, 300)
    finally:
        reload_settings()


def test_settings_are_cached_until_reload():
    assert defaults._cached_analytics_config() is defaults._cached_analytics_config()
    assert get_analytics_config() == get_analytics_config()


def test_callers_cannot_change_shared_settings():
    settings = get_analytics_config()
    settings['goal_category_map']['needs'].append('fuel')
    settings['spending_intensity']['low'] = 1

    assert 'fuel' not in get_analytics_config()['goal_category_map']['needs']
    assert classify_expense_category('fuel') == GoalCategory.WANTS
    assert SpendingIntensity.from_config().low == 5000


def test_configure_logging_accepts_unknown_level(monkeypatch):
    calls = []
    monkeypatch.setattr(logging, 'basicConfig', lambda **kwargs: calls.append(kwargs))
    config.configure_logging('chatty')
    config.configure_logging('debug')
    assert calls[0]['level'] == logging.WARNING
    assert calls[1]['level'] == logging.DEBUG
    assert calls[1]['format'] == config.LOG_FORMAT
