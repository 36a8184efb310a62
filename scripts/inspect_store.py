"""Quick DB inspector for the document store.

Summarizes user records and card sub-stores, and lists sub-stores whose
collection no longer appears in the owner's collection list (left behind
when collections are deleted without cascading).

Usage:
  uv run scripts/inspect_store.py
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

# Ensure project root is on sys.path so `memoraize` package imports resolve
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from sqlalchemy import select, func

from memoraize.core.db.base import get_session
from memoraize.core.db.schemas.documents import CardRecord, UserRecord
from memoraize.core.store import COLLECTIONS_FIELD


async def main() -> int:
    async for session in get_session():  # get_session is an async generator
        total_users = (
            await session.execute(select(func.count(UserRecord.user_id)))
        ).scalar() or 0
        total_cards = (
            await session.execute(select(func.count(CardRecord.id)))
        ).scalar() or 0

        print("Document store summary:")
        print(f"- User records: {total_users}")
        print(f"- Cards: {total_cards}")

        listed: dict[str, set[str]] = {}
        for record in (await session.execute(select(UserRecord))).scalars().all():
            entries = (record.fields or {}).get(COLLECTIONS_FIELD) or []
            listed[record.user_id] = {e.get("name") for e in entries if isinstance(e, dict)}

        groups = (
            await session.execute(
                select(
                    CardRecord.user_id,
                    CardRecord.collection_name,
                    func.count(CardRecord.id),
                ).group_by(CardRecord.user_id, CardRecord.collection_name)
            )
        ).all()

        orphans = [
            (user_id, name, count)
            for user_id, name, count in groups
            if name not in listed.get(user_id, set())
        ]
        if not orphans:
            print("- No orphaned sub-stores.")
            return 0

        print("\nOrphaned sub-stores:")
        for user_id, name, count in orphans:
            print(f"  • user={user_id} | collection={name!r} | cards={count}")
    return 0


if __name__ == "__main__":
    raise SystemExit(asyncio.run(main()))
