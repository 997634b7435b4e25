"""
basic_cache.py — Minimal nscache example.

Stores a value with a TTL in a JSON-file backed namespace and reads it back.

Usage:
    export NSCACHE_BACKEND=file
    export NSCACHE_FILE_PATH=/tmp/nscache.json
    python examples/basic_cache.py
"""

from nscache import open_cache


async def main() -> None:
    cache = await open_cache("greetings")

    if cache.has("hello"):
        print("cached:", cache.get("hello"), "expires at", cache.get_expiration("hello"))
        return

    ok = await cache.put("hello", {"text": "Hello, world!"}, 30)
    print("stored:", ok, cache.all())


if __name__ == "__main__":
    import asyncio

    asyncio.run(main())
