"""
policy_adapter — Hello World

Save an RBAC policy to SQLite, load it back, then change it one rule at a time.
"""

import asyncio

from policy_adapter import PolicyModel, SQLiteAdapter


def show(title: str, model: PolicyModel) -> None:
    print(f"{title}")
    for section in model.sections:
        for ptype, params in model.iter_rules(section):
            print(f"  {ptype}, {', '.join(params)}")


async def main():
    # ──────────────────────────────────────
    #  1. Build the policy in memory
    # ──────────────────────────────────────
    model = PolicyModel()
    model.add_rule("p", "p", ["alice", "data1", "read"])
    model.add_rule("p", "p", ["bob", "data2", "write"])
    model.add_rule("p", "p", ["data2_admin", "data2", "read"])
    model.add_rule("p", "p", ["data2_admin", "data2", "write"])
    model.add_rule("g", "g", ["alice", "data2_admin"])

    async with SQLiteAdapter("hello_policy.db") as adapter:
        # ──────────────────────────────────────
        #  2. Replace whatever was stored
        # ──────────────────────────────────────
        await adapter.save_policy(model)

        loaded = PolicyModel()
        await adapter.load_policy(loaded)
        show("Loaded:", loaded)

        # ──────────────────────────────────────
        #  3. Incremental changes
        # ──────────────────────────────────────
        await adapter.add_policy("p", "p", ["carol", "data3", "read"])
        await adapter.remove_policy("p", "p", ["bob", "data2", "write"])
        removed = await adapter.remove_filtered_policy("p", "p", 0, "data2_admin")
        print(f"\nRevoked {removed} data2_admin rules")

        loaded = PolicyModel()
        await adapter.load_policy(loaded)
        show("\nAfter changes:", loaded)


if __name__ == "__main__":
    asyncio.run(main())
