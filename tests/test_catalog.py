"""Tests for the test catalog lookups."""
import random
from uuid import UUID

import pytest

from benchrun.config import DEFAULT_DURATION_SECONDS, PAYLOAD_LABEL
from benchrun.jobs.catalog import (
    CATALOG,
    JobSpec,
    duration_for,
    get_spec,
    list_specs,
    payload_for,
)
from benchrun.jobs.errors import ConfigurationError
from benchrun.jobs.models import CounterPayload, JobVariant, LabelPayload, RatioPayload


@pytest.mark.parametrize(
    "variant,expected",
    [(JobVariant.test_1, 10), (JobVariant.test_2, 20), (JobVariant.test_3, 30)],
)
def test_nominal_durations(variant, expected):
    assert duration_for(variant) == expected
    assert duration_for(variant.value) == expected
    assert get_spec(variant).duration_seconds == expected


@pytest.mark.parametrize("selector", ["test_4", "", None, 42, "Test 1"])
def test_unknown_selector_falls_back_to_default(selector):
    assert duration_for(selector) == DEFAULT_DURATION_SECONDS


def test_get_spec_rejects_unknown_variant():
    with pytest.raises(ConfigurationError):
        get_spec("test_4")


def test_every_variant_has_an_entry():
    assert set(CATALOG) == set(JobVariant)


def test_nonpositive_duration_rejected():
    with pytest.raises(ConfigurationError):
        JobSpec(JobVariant.test_1, 0, lambda rng, clock: None)


def test_counter_payload_ranges():
    rng = random.Random(1)
    for _ in range(200):
        payload = payload_for(JobVariant.test_1, rng)
        assert isinstance(payload, CounterPayload)
        assert 0 <= payload.data1 < 100
        assert payload.data2.tzinfo is not None


def test_ratio_payload_ranges():
    rng = random.Random(2)
    tags = set()
    for _ in range(200):
        payload = payload_for(JobVariant.test_2, rng)
        assert isinstance(payload, RatioPayload)
        assert 0.0 <= payload.data1 < 1.0
        assert isinstance(payload.data2, UUID)
        assert payload.data2.version == 4
        tags.add(payload.data2)
    assert len(tags) == 200


def test_label_payload_ranges():
    rng = random.Random(3)
    for _ in range(200):
        payload = payload_for(JobVariant.test_3, rng)
        assert isinstance(payload, LabelPayload)
        assert 1 <= payload.data1 <= 9
        assert payload.data2 == PAYLOAD_LABEL
        assert 0 <= payload.data3 <= 999


def test_list_specs_in_display_order():
    rows = list_specs()
    assert [r["variant"] for r in rows] == ["test_1", "test_2", "test_3"]
    assert [r["label"] for r in rows] == ["Test 1", "Test 2", "Test 3"]
    assert [r["duration_seconds"] for r in rows] == [10, 20, 30]


def test_counter_payload_uses_given_clock(fake_clock):
    payload = payload_for(JobVariant.test_1, random.Random(4), clock=fake_clock)
    assert payload.data2 == fake_clock.utcnow()
