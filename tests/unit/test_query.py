"""Unit tests for WHERE clause assembly."""

import pytest

from imessage_archive.query import PredicateBuilder


def test_empty_builder_is_always_true():
    predicates = PredicateBuilder()
    assert predicates.where_clause() == "WHERE 1=1"
    assert predicates.params == ()
    assert len(predicates) == 0


def test_predicates_are_anded_in_order():
    predicates = PredicateBuilder()
    predicates.add("m.text LIKE ?", "%lunch%").add("h.id = ?", "+15551234567")

    assert predicates.where_clause() == "WHERE 1=1 AND m.text LIKE ? AND h.id = ?"
    assert predicates.params == ("%lunch%", "+15551234567")
    assert len(predicates) == 2


def test_multi_parameter_clause():
    predicates = PredicateBuilder().add("(a LIKE ? AND b LIKE ?)", "%x%", "%y%")
    assert predicates.params == ("%x%", "%y%")


def test_clause_without_parameters():
    predicates = PredicateBuilder().add("r.ZFIRSTNAME IS NOT NULL")
    assert predicates.where_clause().endswith("AND r.ZFIRSTNAME IS NOT NULL")
    assert predicates.params == ()


def test_placeholder_mismatch_raises():
    with pytest.raises(ValueError):
        PredicateBuilder().add("m.date >= ? AND m.date <= ?", 1)


def test_values_never_enter_sql_text():
    hostile = "'; DROP TABLE message; --"
    predicates = PredicateBuilder().add("m.text LIKE ?", hostile)
    assert hostile not in predicates.where_clause()
    assert predicates.params == (hostile,)
