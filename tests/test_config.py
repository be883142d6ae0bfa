import importlib
import json
from decimal import Decimal

import pytest

from paycheck_planner import config
from paycheck_planner.config import DEFAULT_RULE, BudgetRule, load_budget_rule


def test_missing_file_falls_back_to_default(tmp_path):
    assert load_budget_rule(tmp_path / 'missing.json') == DEFAULT_RULE
    assert DEFAULT_RULE == BudgetRule(Decimal('0.5'), Decimal('0.3'), Decimal('0.2'))


def test_unreadable_file_falls_back_to_default(tmp_path):
    path = tmp_path / 'budget_rule.json'
    path.write_text('{not json', encoding='utf-8')
    assert load_budget_rule(path) == DEFAULT_RULE


def test_partial_override_keeps_other_defaults(tmp_path):
    path = tmp_path / 'budget_rule.json'
    path.write_text(json.dumps({'needs': 0.45, 'wants': 0.25}), encoding='utf-8')
    rule = load_budget_rule(path)
    assert rule.needs == Decimal('0.45')
    assert rule.wants == Decimal('0.25')
    assert rule.savings == Decimal('0.2')


@pytest.mark.parametrize('payload', [
    {'needs': 1.5},
    {'wants': -0.1},
    {'needs': 0.6, 'wants': 0.3, 'savings': 0.2},
    {'needs': 'abc'},
    {'needs': '0.5x'},
    {'needs': float('nan')},
    {'savings': float('inf')},
    {'wants': [0.3]},
])
def test_invalid_rates_rejected(tmp_path, payload):
    path = tmp_path / 'budget_rule.json'
    path.write_text(json.dumps(payload), encoding='utf-8')
    with pytest.raises(ValueError):
        load_budget_rule(path)


def test_default_path_is_used(tmp_path, monkeypatch):
    path = tmp_path / 'budget_rule.json'
    path.write_text(json.dumps({'savings': 0.1}), encoding='utf-8')
    monkeypatch.setattr(config, 'BUDGET_RULE_PATH', path)
    assert load_budget_rule().savings == Decimal('0.1')


def test_ensure_data_directories(tmp_path, monkeypatch):
    monkeypatch.setattr(config, 'DATA_DIR', tmp_path / 'data')
    monkeypatch.setattr(config, 'LOG_DIR', tmp_path / 'data' / 'logs')
    monkeypatch.setattr(config, 'DB_PATH', tmp_path / 'db' / 'planner.db')

    config.ensure_data_directories()

    assert (tmp_path / 'data' / 'logs').is_dir()
    assert (tmp_path / 'db').is_dir()
    assert config.get_db_path() == str(tmp_path / 'db' / 'planner.db')


def test_string_path_is_accepted(tmp_path):
    path = tmp_path / 'budget_rule.json'
    path.write_text(json.dumps({'needs': 0.4}), encoding='utf-8')
    assert load_budget_rule(str(path)).needs == Decimal('0.4')
    assert load_budget_rule(str(tmp_path / 'missing.json')) == DEFAULT_RULE


def test_budget_rule_path_env_override(tmp_path, monkeypatch):
    path = tmp_path / 'custom_rule.json'
    monkeypatch.setenv('PLANNER_BUDGET_RULE_PATH', str(path))
    saved = dict(vars(config))
    try:
        importlib.reload(config)
        assert config.BUDGET_RULE_PATH == path
    finally:
        # Put the original objects back so BudgetRule identity is unchanged
        vars(config).update(saved)
