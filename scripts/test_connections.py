#!/usr/bin/env python3
"""
Connection Test Script

Run this to verify the configured admissions store is reachable.
Usage: python scripts/test_connections.py
"""
import sys
sys.path.insert(0, '.')

from coursehub.core.config import get_settings
from coursehub.db.mongodb import test_mongo_connection
from coursehub.services.store import get_store


def main():
    settings = get_settings()
    print("=" * 50)
    print("COURSEHUB ADMISSIONS - CONNECTION TEST")
    print("=" * 50)

    print(f"\n[1] Store backend: {settings.store_backend}")
    print(f"    Timeout: {settings.store_timeout_ms} ms")

    print("\n[2] Testing MongoDB...")
    print(f"    URI: {settings.mongodb_uri}")
    print(f"    Database: {settings.mongodb_db}")
    if test_mongo_connection():
        print("    ✅ MongoDB: CONNECTED")
    elif settings.store_backend == "mongo":
        print("    ❌ MongoDB: FAILED")
    else:
        print("    ⚠️  MongoDB: not reachable (not needed for the memory backend)")

    print("\n[3] Pinging the configured store...")
    if get_store().ping():
        print("    ✅ Store: OK")
    else:
        print("    ❌ Store: FAILED")

    print("\n" + "=" * 50)
    print("Connection test complete!")
    print("=" * 50)


if __name__ == "__main__":
    main()
