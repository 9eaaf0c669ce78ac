# scripts/test_redis.py

import sys
from pathlib import Path

# Ensure project root is on the path when running this script directly
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import asyncio
from app.infrastructure.cache.redis_client import RedisClient

async def main():
    r = RedisClient()
    print("Redis ping:", await r.ping())
    await r.set("incident_capture:smoke", "1", ttl=10)
    print("Round trip:", await r.get("incident_capture:smoke"))
    await r.close()

asyncio.run(main())
