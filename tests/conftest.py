"""Shared test fixtures."""

import pytest

from policy_adapter import InMemoryAdapter, PolicyModel, SQLiteAdapter

RBAC_POLICY = [
    ["alice", "data1", "read"],
    ["bob", "data2", "write"],
    ["data2_admin", "data2", "read"],
    ["data2_admin", "data2", "write"],
]
RBAC_GROUPING = [["alice", "data2_admin"]]


@pytest.fixture(params=["memory", "sqlite"])
async def adapter(request):
    """An open adapter of each backend, closed after the test."""
    if request.param == "sqlite":
        a = await SQLiteAdapter.new_adapter(":memory:")
    else:
        a = await InMemoryAdapter.new_adapter()
    yield a
    await a.close()


@pytest.fixture
async def sqlite_adapter():
    a = await SQLiteAdapter.new_adapter(":memory:")
    yield a
    await a.close()


@pytest.fixture
def model():
    return PolicyModel()


@pytest.fixture
def rbac_policy():
    return [list(rule) for rule in RBAC_POLICY]


@pytest.fixture
def rbac_grouping():
    return [list(rule) for rule in RBAC_GROUPING]


@pytest.fixture
def rbac_model():
    m = PolicyModel()
    for rule in RBAC_POLICY:
        m.add_rule("p", "p", rule)
    for rule in RBAC_GROUPING:
        m.add_rule("g", "g", rule)
    return m


@pytest.fixture
def load_rules():
    """Load an adapter into a fresh model and return one rule-set, sorted."""

    async def _load(a, section="p", ptype="p"):
        m = PolicyModel()
        await a.load_policy(m)
        return sorted(m.get_policy(section, ptype))

    return _load
