from __future__ import annotations

import math

import pytest

from areastats.core.errors import NotFoundError
from areastats.core.measure import Measure


def _measure(values):
    m = Measure("POP", "Population")
    for year, value in values.items():
        m.set_value(year, value)
    return m


def test_codename_is_lowercased():
    m = Measure("DeNs", "Population density")
    assert m.codename == "dens"
    assert m.label == "Population density"


def test_set_value_overwrites_year():
    m = _measure({2000: 1.0})
    m.set_value(2000, 5.0)
    assert m.get_value(2000) == 5.0
    assert len(m) == 1


def test_get_value_missing_year_raises():
    m = _measure({2000: 1.0})
    with pytest.raises(NotFoundError, match="No value found for year 1999"):
        m.get_value(1999)


def test_values_are_ordered_by_year():
    m = _measure({2003: 3.0, 2001: 1.0, 2002: 2.0})
    assert list(m.values) == [2001, 2002, 2003]
    assert m.years() == [2001, 2002, 2003]


def test_statistics_use_year_order_not_insertion_order():
    m = _measure({1993: 30.0, 1991: 10.0, 1992: 20.0})
    assert m.average() == pytest.approx(20.0)
    assert m.difference() == pytest.approx(20.0)
    assert m.difference_as_percentage() == pytest.approx(200.0)


def test_empty_measure_statistics_are_zero():
    m = Measure("x", "X")
    assert m.average() == 0
    assert m.difference() == 0
    assert m.difference_as_percentage() == 0


def test_single_value_has_no_difference():
    m = _measure({2010: 42.0})
    assert m.average() == 42.0
    assert m.difference() == 0
    assert m.difference_as_percentage() == 0


def test_percentage_with_zero_first_value_is_not_guarded():
    assert math.isinf(_measure({2000: 0.0, 2001: 5.0}).difference_as_percentage())
    assert _measure({2000: 0.0, 2001: -5.0}).difference_as_percentage() == -math.inf
    assert math.isnan(_measure({2000: 0.0, 2001: 0.0}).difference_as_percentage())


def test_merge_prefers_incoming_label_and_values():
    base = _measure({2000: 1.0, 2001: 2.0})
    incoming = Measure("pop", "Population (mid-year)")
    incoming.set_value(2001, 20.0)
    incoming.set_value(2002, 30.0)

    base.merge(incoming)

    assert base.label == "Population (mid-year)"
    assert base.values == {2000: 1.0, 2001: 20.0, 2002: 30.0}


def test_equality_compares_codename_label_and_values():
    assert _measure({2000: 1.0}) == _measure({2000: 1.0})
    assert _measure({2000: 1.0}) != _measure({2000: 2.0})
    other = _measure({2000: 1.0})
    other.label = "Other"
    assert _measure({2000: 1.0}) != other
