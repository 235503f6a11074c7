"""Shared test fixtures for the action_context test suite.

WHY: Several test modules need the same sample business object (the
order from the reference scenario) and a clean field cache, so that one
test's cached field sets never leak into another.

HOW: Module-level sample classes declare their directives with
``Annotated``. Fixtures hand out fresh instances. An autouse fixture
clears the registry cache around every test.

RULES:
- Sample classes live at module level so their annotations resolve
- Every test starts and ends with an empty field cache
"""

from dataclasses import dataclass, field
from typing import Annotated, List

import pytest

from action_context.core.directive import ContextParam
from action_context.core.registry import clear_field_cache


@dataclass
class SampleOrder:
    """The reference order: id and second item are extracted, name is not."""

    id: Annotated[int, ContextParam("orderId")]
    name: str
    items: Annotated[List[str], ContextParam(param_name="secondItem", index=1)] = field(
        default_factory=list
    )


@dataclass
class FarIndexOrder:
    """Same shape as SampleOrder, but asks for an element past the end."""

    id: Annotated[int, ContextParam("orderId")]
    name: str
    items: Annotated[List[str], ContextParam(param_name="sixthItem", index=5)] = field(
        default_factory=list
    )


@pytest.fixture(autouse=True)
def _clean_field_cache():
    clear_field_cache()
    yield
    clear_field_cache()


@pytest.fixture
def sample_order():
    """Order 42 named 'order-7' with items a, b, c."""
    return SampleOrder(id=42, name="order-7", items=["a", "b", "c"])


@pytest.fixture
def far_index_order():
    """Order 42 with three items and an index-5 directive on them."""
    return FarIndexOrder(id=42, name="order-7", items=["a", "b", "c"])
