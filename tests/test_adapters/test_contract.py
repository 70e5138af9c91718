"""Engine-facing behaviour shared by every backend."""

import pytest

from policy_adapter import ArityError, PolicyModel

# ── load / save ──────────────────────────────────────────────


async def test_empty_store_loads_nothing(adapter, model):
    await adapter.load_policy(model)
    assert list(model.iter_rules("p")) == []
    assert list(model.iter_rules("g")) == []


async def test_save_then_load(adapter, rbac_model, load_rules, rbac_policy, rbac_grouping):
    assert await adapter.save_policy(rbac_model) is True
    assert await load_rules(adapter) == sorted(rbac_policy)
    assert await load_rules(adapter, "g", "g") == sorted(rbac_grouping)


async def test_save_scenario_two_rules(adapter, load_rules):
    m = PolicyModel()
    m.add_rule("p", "p", ["alice", "data1", "read"])
    m.add_rule("p", "p", ["bob", "data2", "write"])
    await adapter.save_policy(m)

    assert await load_rules(adapter) == [["alice", "data1", "read"], ["bob", "data2", "write"]]
    assert await load_rules(adapter, "g", "g") == []


async def test_save_replaces_previous_rules(adapter, rbac_model, load_rules):
    await adapter.save_policy(rbac_model)

    m = PolicyModel()
    m.add_rule("p", "p", ["carol", "data3", "read"])
    await adapter.save_policy(m)

    assert await load_rules(adapter) == [["carol", "data3", "read"]]
    assert await load_rules(adapter, "g", "g") == []


async def test_save_empty_model_clears_store(adapter, rbac_model, load_rules):
    await adapter.save_policy(rbac_model)
    await adapter.save_policy(PolicyModel())
    assert await load_rules(adapter) == []


async def test_save_keeps_numbered_ptypes(adapter, load_rules):
    m = PolicyModel()
    m.add_rule("g", "g2", ["alice", "admin", "tenant1"])
    await adapter.save_policy(m)
    assert await load_rules(adapter, "g", "g2") == [["alice", "admin", "tenant1"]]


async def test_save_arity_error_leaves_store_untouched(
    adapter, rbac_model, load_rules, rbac_policy
):
    await adapter.save_policy(rbac_model)

    bad = PolicyModel()
    bad.add_rule("p", "p", ["a", "b", "c", "d", "e", "f", "g"])
    with pytest.raises(ArityError):
        await adapter.save_policy(bad)

    assert await load_rules(adapter) == sorted(rbac_policy)


async def test_load_appends_to_model(adapter, rbac_model, rbac_policy):
    await adapter.save_policy(rbac_model)
    m = PolicyModel()
    m.add_rule("p", "p", ["local", "only", "rule"])
    await adapter.load_policy(m)
    assert len(m.get_policy("p", "p")) == len(rbac_policy) + 1


# ── add / remove ─────────────────────────────────────────────


async def test_add_then_remove(adapter, rbac_model, load_rules, rbac_policy):
    await adapter.save_policy(rbac_model)

    await adapter.add_policy("", "p", ["role", "res", "action"])
    assert ["role", "res", "action"] in await load_rules(adapter)

    await adapter.remove_policy("", "p", ["role", "res", "action"])
    assert await load_rules(adapter) == sorted(rbac_policy)


async def test_add_does_not_deduplicate(adapter, load_rules):
    await adapter.add_policy("p", "p", ["alice", "data1", "read"])
    await adapter.add_policy("p", "p", ["alice", "data1", "read"])
    assert await load_rules(adapter) == [["alice", "data1", "read"]] * 2


async def test_remove_deletes_every_duplicate(adapter, load_rules):
    for _ in range(3):
        await adapter.add_policy("p", "p", ["alice", "data1", "read"])
    assert await adapter.remove_policy("p", "p", ["alice", "data1", "read"]) == 3
    assert await load_rules(adapter) == []


async def test_remove_twice_is_idempotent(adapter, rbac_model, load_rules, rbac_policy):
    await adapter.save_policy(rbac_model)
    assert await adapter.remove_policy("p", "p", ["alice", "data1", "read"]) == 1
    assert await adapter.remove_policy("p", "p", ["alice", "data1", "read"]) == 0
    assert len(await load_rules(adapter)) == len(rbac_policy) - 1


async def test_remove_requires_exact_arity(adapter, load_rules):
    await adapter.add_policy("p", "p", ["alice", "data1", "read"])
    await adapter.add_policy("p", "p", ["alice", "data1"])

    assert await adapter.remove_policy("p", "p", ["alice", "data1"]) == 1
    assert await load_rules(adapter) == [["alice", "data1", "read"]]


async def test_remove_matches_ptype(adapter, load_rules):
    await adapter.add_policy("g", "g", ["alice", "admin"])
    await adapter.add_policy("g", "g2", ["alice", "admin"])

    await adapter.remove_policy("g", "g2", ["alice", "admin"])
    assert await load_rules(adapter, "g", "g") == [["alice", "admin"]]
    assert await load_rules(adapter, "g", "g2") == []


async def test_empty_string_param_is_not_absent(adapter, load_rules):
    await adapter.add_policy("p", "p", ["alice", ""])
    await adapter.add_policy("p", "p", ["alice"])

    assert await adapter.remove_policy("p", "p", ["alice", ""]) == 1
    assert await load_rules(adapter) == [["alice"]]


async def test_add_arity_error(adapter):
    with pytest.raises(ArityError):
        await adapter.add_policy("p", "p", ["1", "2", "3", "4", "5", "6", "7"])


# ── batch ────────────────────────────────────────────────────


async def test_add_and_remove_policies(adapter, load_rules, rbac_policy):
    await adapter.add_policies("p", "p", rbac_policy)
    assert await load_rules(adapter) == sorted(rbac_policy)

    removed = await adapter.remove_policies("p", "p", rbac_policy[:2])
    assert removed == 2
    assert await load_rules(adapter) == sorted(rbac_policy[2:])


async def test_add_policies_arity_error_inserts_nothing(adapter, load_rules):
    with pytest.raises(ArityError):
        await adapter.add_policies("p", "p", [["ok"], ["1", "2", "3", "4", "5", "6", "7"]])
    assert await load_rules(adapter) == []


# ── filtered removal ─────────────────────────────────────────


async def test_remove_filtered_by_subject(adapter, rbac_model, load_rules):
    await adapter.save_policy(rbac_model)

    removed = await adapter.remove_filtered_policy("p", "p", 0, "data2_admin")
    assert removed == 2
    assert await load_rules(adapter) == [["alice", "data1", "read"], ["bob", "data2", "write"]]


async def test_remove_filtered_from_offset(adapter, rbac_model, load_rules):
    await adapter.save_policy(rbac_model)

    removed = await adapter.remove_filtered_policy("p", "p", 1, "data2", "write")
    assert removed == 2
    assert await load_rules(adapter) == [
        ["alice", "data1", "read"],
        ["data2_admin", "data2", "read"],
    ]


async def test_remove_filtered_wildcard(adapter, rbac_model, load_rules):
    await adapter.save_policy(rbac_model)

    removed = await adapter.remove_filtered_policy("p", "p", 0, None, None, "read")
    assert removed == 2
    assert await load_rules(adapter) == [
        ["bob", "data2", "write"],
        ["data2_admin", "data2", "write"],
    ]


async def test_remove_filtered_leaves_other_ptypes(
    adapter, rbac_model, load_rules, rbac_policy
):
    await adapter.save_policy(rbac_model)

    await adapter.remove_filtered_policy("g", "g", 0, "alice")
    assert await load_rules(adapter, "g", "g") == []
    assert await load_rules(adapter) == sorted(rbac_policy)


async def test_remove_filtered_empty_string_is_literal(adapter, load_rules):
    await adapter.add_policy("p", "p", ["alice"])
    await adapter.add_policy("p", "p", ["alice", ""])

    assert await adapter.remove_filtered_policy("p", "p", 1, "") == 1
    assert await load_rules(adapter) == [["alice"]]


async def test_remove_filtered_no_values_clears_ptype(
    adapter, rbac_model, load_rules, rbac_policy, rbac_grouping
):
    await adapter.save_policy(rbac_model)
    assert await adapter.remove_filtered_policy("p", "p", 0) == len(rbac_policy)
    assert await load_rules(adapter, "g", "g") == sorted(rbac_grouping)


async def test_remove_filtered_past_last_slot(adapter):
    with pytest.raises(ArityError):
        await adapter.remove_filtered_policy("p", "p", 5, "a", "b")
