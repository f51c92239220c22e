"""Shared catalog fixtures: one system owning a handful of components."""

import pytest

from traffic_light.collaborators import InMemoryDirectory, InMemoryFactStore
from traffic_light.models import Check, Entity


def make_check(check_id, retriever="metrics", fact="count", operator_key=None):
    return Check(
        id=check_id,
        name=check_id,
        fact_reference=(retriever, fact),
        threshold_annotation_key=f"tech-insights.io/{check_id}-threshold",
        operator_annotation_key=operator_key or f"tech-insights.io/{check_id}-operator",
    )


def component(name, system="payments", **configuration):
    return Entity(kind="component", name=name, group=system, configuration=configuration)


def system(name="payments", **configuration):
    return Entity(kind="system", name=name, configuration=configuration)


@pytest.fixture
def directory():
    return InMemoryDirectory()


@pytest.fixture
def fact_store():
    return InMemoryFactStore()
