import sqlite3
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest
from sqlalchemy.future import select

from models.research_file import ResearchFile
from models.research_item import ResearchItem
from services.blob_store import BlobStoreConfigurationError
from services.research_files import (
    count_file_references,
    reap_research_file,
    sweep_unreferenced_research_files,
)


def _file(file_id, r2_key, age_minutes=0):
    return ResearchFile(
        id=file_id,
        product_id="product-1",
        filename=f"{file_id}.txt",
        r2_key=r2_key,
        created_at=datetime.now(timezone.utc) - timedelta(minutes=age_minutes),
    )


def _item(item_id, file_id):
    return ResearchItem(id=item_id, product_id="product-1", type="file", file_id=file_id)


async def _file_ids(session):
    result = await session.execute(select(ResearchFile.id).order_by(ResearchFile.id))
    return list(result.scalars().all())


@pytest.mark.asyncio
async def test_reap_keeps_file_with_remaining_references(session_maker, blob_store):
    async with session_maker() as session:
        session.add(_file("F1", "k1"))
        session.add(_item("I2", "F1"))
        await session.commit()

    with patch("services.research_files.get_blob_store", return_value=blob_store) as factory:
        async with session_maker() as session:
            assert await count_file_references("F1", session) == 1
            outcome = await reap_research_file("F1", session)
            assert await _file_ids(session) == ["F1"]

    assert outcome == {"file_id": "F1", "deleted": False, "references": 1}
    factory.assert_not_called()
    assert blob_store.deleted == []


@pytest.mark.asyncio
async def test_reap_is_idempotent_once_row_is_gone(session_maker, blob_store):
    async with session_maker() as session:
        session.add(_file("F1", "k1"))
        await session.commit()

    with patch("services.research_files.get_blob_store", return_value=blob_store):
        async with session_maker() as session:
            first = await reap_research_file("F1", session)
            second = await reap_research_file("F1", session)

    assert first["deleted"] is True
    assert first["blob_deleted"] is True
    assert second == {"file_id": "F1", "deleted": False, "references": 0}
    assert blob_store.deleted == ["k1"]


@pytest.mark.asyncio
async def test_reap_that_loses_delete_race_skips_blob(session_maker, blob_store, tmp_path):
    async with session_maker() as session:
        session.add(_file("F1", "k1"))
        await session.commit()

    def _concurrent_reap_wins():
        # Another reaper removes the row between our SELECT and DELETE.
        conn = sqlite3.connect(tmp_path / "research.db")
        try:
            conn.execute("DELETE FROM research_files WHERE id = ?", ("F1",))
            conn.commit()
        finally:
            conn.close()
        return blob_store

    with patch("services.research_files.get_blob_store", side_effect=_concurrent_reap_wins):
        async with session_maker() as session:
            outcome = await reap_research_file("F1", session)

    assert outcome == {"file_id": "F1", "deleted": False, "references": 0}
    assert blob_store.deleted == []


@pytest.mark.asyncio
async def test_reap_reports_blob_failure_without_raising(session_maker, blob_store):
    blob_store.fail_keys.add("k1")
    async with session_maker() as session:
        session.add(_file("F1", "k1"))
        await session.commit()

    with patch("services.research_files.get_blob_store", return_value=blob_store):
        async with session_maker() as session:
            outcome = await reap_research_file("F1", session)
            assert await _file_ids(session) == []

    assert outcome["deleted"] is True
    assert outcome["blob_deleted"] is False


@pytest.mark.asyncio
async def test_sweep_reaps_only_old_unreferenced_files(session_maker, blob_store):
    async with session_maker() as session:
        session.add_all(
            [
                _file("F-old-orphan", "k-old", age_minutes=180),
                _file("F-old-shared", "k-shared", age_minutes=180),
                _file("F-fresh", "k-fresh", age_minutes=1),
                _file("F-old-nokey", None, age_minutes=240),
            ]
        )
        session.add(_item("I1", "F-old-shared"))
        await session.commit()

    with patch("services.research_files.get_blob_store", return_value=blob_store):
        async with session_maker() as session:
            result = await sweep_unreferenced_research_files(session, older_than_minutes=60, limit=10)
            remaining = await _file_ids(session)

    assert result == {"scanned": 2, "reaped": 2, "failed": 0}
    assert remaining == ["F-fresh", "F-old-shared"]
    assert blob_store.deleted == ["k-old"]


@pytest.mark.asyncio
async def test_sweep_stops_on_missing_blob_config(session_maker):
    async with session_maker() as session:
        session.add(_file("F1", "k1", age_minutes=180))
        await session.commit()

    with patch(
        "services.research_files.get_blob_store",
        side_effect=BlobStoreConfigurationError("Missing R2 configuration: R2_ENDPOINT"),
    ):
        async with session_maker() as session:
            with pytest.raises(BlobStoreConfigurationError):
                await sweep_unreferenced_research_files(session, older_than_minutes=60)
            await session.rollback()
            assert await _file_ids(session) == ["F1"]
