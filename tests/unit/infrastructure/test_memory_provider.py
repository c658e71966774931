"""Unit tests for the in-memory document database."""

import asyncio

import pytest

from creator_video.commons.infrastructure.documentdb.memory_provider import (
    MemoryDocumentDB,
    matches,
)


class TestMatches:
    """Tests for filter evaluation."""

    def test_equality(self):
        assert matches({"status": "published"}, {"status": "published"})
        assert not matches({"status": "published"}, {"status": "uploading"})

    def test_missing_field_equals_none(self):
        assert matches({}, {"liked": None})

    def test_comparison_operators(self):
        doc = {"created_at": "2024-05-01T10:00:00Z", "count": 3}
        assert matches(doc, {"created_at": {"$gte": "2024-05-01T00:00:00Z"}})
        assert not matches(doc, {"created_at": {"$lt": "2024-05-01T00:00:00Z"}})
        assert matches(doc, {"count": {"$gt": 2, "$lte": 3}})
        assert matches(doc, {"count": {"$in": [1, 3]}})
        assert matches(doc, {"count": {"$nin": [1, 2]}})
        assert matches(doc, {"count": {"$ne": 4}})

    def test_comparison_against_missing_field(self):
        assert not matches({}, {"count": {"$gt": 0}})

    def test_or(self):
        filters = {"$or": [{"liked": True}, {"shared": True}]}
        assert matches({"liked": False, "shared": True}, filters)
        assert not matches({"liked": False, "shared": False}, filters)

    def test_unsupported_operator(self):
        with pytest.raises(ValueError, match="Unsupported filter operator"):
            matches({"a": 1}, {"a": {"$regex": "x"}})

    def test_plain_dict_value_is_equality(self):
        assert matches({"meta": {"k": "v"}}, {"meta": {"k": "v"}})


class TestMemoryDocumentDB:
    """Tests for MemoryDocumentDB."""

    @pytest.fixture
    def db(self):
        return MemoryDocumentDB()

    async def test_insert_and_find_by_id(self, db):
        await db.insert("videos", {"id": "v-1", "title": "A"})

        assert await db.find_by_id("videos", "v-1") == {"id": "v-1", "title": "A"}
        assert await db.find_by_id("videos", "missing") is None

    async def test_insert_duplicate_raises(self, db):
        await db.insert("videos", {"id": "v-1"})

        with pytest.raises(ValueError, match="Duplicate"):
            await db.insert("videos", {"id": "v-1"})

    async def test_insert_if_absent(self, db):
        assert await db.insert_if_absent("viewers", {"id": "v:a"}) is True
        assert await db.insert_if_absent("viewers", {"id": "v:a"}) is False
        assert await db.count("viewers") == 1

    async def test_returned_documents_are_copies(self, db):
        await db.insert("videos", {"id": "v-1", "tags": ["a"]})

        doc = await db.find_by_id("videos", "v-1")
        doc["tags"].append("b")

        assert (await db.find_by_id("videos", "v-1"))["tags"] == ["a"]

    async def test_find_sort_skip_limit(self, db):
        for i in range(5):
            await db.insert("sessions", {"id": f"s-{i}", "video_id": "v", "n": i})

        docs = await db.find("sessions", {"video_id": "v"}, skip=1, limit=2, sort=[("n", -1)])

        assert [d["n"] for d in docs] == [3, 2]

    async def test_find_one(self, db):
        await db.insert("videos", {"id": "v-1", "provider_public_id": "p-1"})

        doc = await db.find_one("videos", {"provider_public_id": "p-1"})

        assert doc["id"] == "v-1"
        assert await db.find_one("videos", {"provider_public_id": "p-2"}) is None

    async def test_update_one_conditional(self, db):
        await db.insert("videos", {"id": "v-1", "status": "ready_to_publish"})

        assert await db.update_one(
            "videos", {"id": "v-1", "status": "ready_to_publish"}, {"status": "published"}
        )
        assert not await db.update_one(
            "videos", {"id": "v-1", "status": "ready_to_publish"}, {"status": "published"}
        )
        assert (await db.find_by_id("videos", "v-1"))["status"] == "published"

    async def test_update_one_never_changes_id(self, db):
        await db.insert("videos", {"id": "v-1"})

        await db.update_one("videos", {"id": "v-1"}, {"id": "other", "title": "T"})

        assert (await db.find_by_id("videos", "v-1"))["title"] == "T"

    async def test_update_one_increments(self, db):
        await db.insert("videos", {"id": "v-1", "view_count": 2})

        await db.update_one("videos", {"id": "v-1"}, increments={"view_count": 3, "likes": 1})

        doc = await db.find_by_id("videos", "v-1")
        assert doc["view_count"] == 5
        assert doc["likes"] == 1

    async def test_update_one_requires_changes(self, db):
        with pytest.raises(ValueError):
            await db.update_one("videos", {"id": "v-1"})

    async def test_concurrent_increments_are_not_lost(self, db):
        await db.insert("videos", {"id": "v-1", "view_count": 0})

        await asyncio.gather(
            *(db.update_one("videos", {"id": "v-1"}, increments={"view_count": 1}) for _ in range(50))
        )

        assert (await db.find_by_id("videos", "v-1"))["view_count"] == 50

    async def test_concurrent_conditional_writes_single_winner(self, db):
        await db.insert("videos", {"id": "v-1", "status": "ready_to_publish"})

        results = await asyncio.gather(
            *(
                db.update_one(
                    "videos",
                    {"id": "v-1", "status": "ready_to_publish"},
                    {"status": "published"},
                )
                for _ in range(10)
            )
        )

        assert results.count(True) == 1

    async def test_create_index_name(self, db):
        assert await db.create_index("videos", [("a", 1), ("b", -1)]) == "a_1_b_-1"
        assert await db.create_index("videos", [("a", 1)], name="custom") == "custom"

    async def test_health_check(self, db):
        await db.insert("videos", {"id": "v-1"})

        health = await db.health_check()

        assert health.healthy is True
        assert health.details["documents"] == "1"
