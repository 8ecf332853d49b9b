"""Basic usage example for the etcdkv client."""

import asyncio

from etcdkv import CasOptions, GetOptions, NodeExistsError, PutOptions, connect


async def main() -> None:
    """Demonstrate basic etcd operations."""
    # Use async context manager for automatic session management
    async with connect("http://127.0.0.1:2379", timeout=5000) as etcd:
        print("Connected to etcd")

        # Set a value
        print("\n1. Setting key...")
        envelope = await etcd.reset(["users", "123"], "Alice")
        print(f"   Stored at index {envelope.node.modified_index}")
        print(f"   Cluster index: {envelope.metadata.etcd_index}")

        # Get a value
        print("\n2. Getting value...")
        print(f"   Retrieved: {await etcd.get(['users', '123'])!r}")

        # Set with TTL
        print("\n3. Setting with TTL (5 seconds)...")
        envelope = await etcd.reset("session", "temporary-data", PutOptions(ttl=5))
        print(f"   Expires at {envelope.node.expiration}")

        # Create only if absent
        print("\n4. Conditional set (prevExist=false)...")
        try:
            await etcd.cas(["users", "123"], "Alice", "Bob", CasOptions(prev_exist=False))
        except NodeExistsError as e:
            print(f"   Expected error: {e}")

        # Compare and swap
        print("\n5. Compare and swap...")
        print(f"   Stale compare applied: {bool(await etcd.cas(['users', '123'], 'Eve', 'Bob'))}")
        print(f"   Fresh compare applied: {bool(await etcd.cas(['users', '123'], 'Alice', 'Bob'))}")

        # Atomic update
        print("\n6. Swapping a counter...")
        await etcd.reset("counter", 0)
        value = await etcd.swap("counter", lambda current, step: int(current) + step, 5)
        print(f"   Counter is now {value}")

        # In-order keys
        print("\n7. Creating in-order keys...")
        for job in ("first", "second"):
            print(f"   Created {await etcd.create('jobs', job)}")
        print(f"   Jobs: {await etcd.get('jobs', GetOptions(sorted=True))}")

        # Clean up
        print("\n8. Deleting everything under the root...")
        await etcd.delete_all()
        print(f"   Root is now {await etcd.get(None)!r}")


if __name__ == "__main__":
    asyncio.run(main())
