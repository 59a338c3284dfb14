from __future__ import annotations

from decimal import Decimal

import pytest

from kube_capacity_sim.utils.units import format_quantity, milli_value, parse_quantity


def test_parse_cpu_quantities():
    assert parse_quantity("400m") == Decimal("0.4")
    assert parse_quantity("2000m") == Decimal(2)
    assert parse_quantity("1") == Decimal(1)
    assert parse_quantity(2) == Decimal(2)
    assert parse_quantity(0.25) == Decimal("0.25")


def test_parse_memory_quantities():
    assert parse_quantity("10e6") == Decimal(10_000_000)
    assert parse_quantity("10e9") == Decimal(10_000_000_000)
    assert parse_quantity("1Gi") == Decimal(1_073_741_824)
    assert parse_quantity("128Mi") == Decimal(134_217_728)
    assert parse_quantity("500k") == Decimal(500_000)
    assert parse_quantity("1.5G") == Decimal(1_500_000_000)
    assert parse_quantity("1E3") == Decimal(1000)


def test_parse_quantity_is_exact():
    total = Decimal(0)
    for _ in range(1000):
        total += parse_quantity("1m")
    assert total == Decimal(1)


@pytest.mark.parametrize("bad", ["abc", "5x", "", "1.2.3", True])
def test_parse_quantity_rejects_garbage(bad):
    with pytest.raises(ValueError):
        parse_quantity(bad)


def test_milli_value_rounds_up():
    assert milli_value(Decimal("0.4")) == 400
    assert milli_value(Decimal(2)) == 2000
    assert milli_value(Decimal("0.0001")) == 1


def test_format_quantity():
    assert format_quantity("cpu", Decimal("0.4")) == "400m"
    assert format_quantity("cpu", Decimal("2.000")) == "2"
    assert format_quantity("memory", parse_quantity("10e6")) == "10000000"
    assert format_quantity("nvidia.com/gpu", Decimal("0.5")) == "0.5"
