"""Tests for Seeder and Factory."""

import asyncio

import pytest

from crossrepo.dbs.prisma import PrismaRepository
from crossrepo.seeding import Factory, Seeder


@pytest.fixture
def seeder(prisma_users):
    return Seeder(PrismaRepository(prisma_users))


@pytest.fixture
def factory(seeder):
    return Factory(seeder, lambda: {"name": "seeded", "age": 1})


class TestSeeder:
    @pytest.mark.asyncio
    async def test_seed(self, seeder, prisma_users):
        model = await seeder.seed({"name": "x"})
        assert model["name"] == "x"

    @pytest.mark.asyncio
    async def test_seed_many(self, seeder, prisma_users):
        models = await seeder.seed_many(5, {"name": "x"})
        assert len(models) == 5
        assert len({model["id"] for model in models}) == 5
        assert len(prisma_users.rows) == 8

    @pytest.mark.asyncio
    async def test_seed_many_fails_fast(self, seeder, prisma_users):
        calls = []

        async def create(data):
            calls.append(data)
            if len(calls) == 2:
                raise RuntimeError("boom")
            return data

        prisma_users.create = create
        with pytest.raises(RuntimeError):
            await seeder.seed_many(3, {"name": "x"})


class TestFactory:
    def test_make_single(self, factory):
        assert factory.make() == {"name": "seeded", "age": 1}

    def test_make_many(self, factory):
        payloads = factory.count(3).extra_params(age=5).make()
        assert payloads == [{"name": "seeded", "age": 5}] * 3

    def test_builder_is_immutable(self, factory):
        factory.count(4).deleted()
        assert factory.amount == 1
        assert factory.extras == {}

    def test_deleted_uses_soft_delete_field(self, factory):
        assert factory.deleted().make()["deletedAt"] is not None

    def test_invalid_count(self, factory):
        with pytest.raises(ValueError):
            factory.count(0)

    def test_make_rejects_async_blueprint(self, seeder):
        async def blueprint():
            return {}

        with pytest.raises(TypeError):
            Factory(seeder, blueprint).make()

    @pytest.mark.asyncio
    async def test_create(self, factory, prisma_users):
        model = await factory.create()
        assert model["name"] == "seeded"
        models = await factory.count(2).deleted().create()
        assert len(models) == 2
        assert all(model["deletedAt"] is not None for model in models)
        assert len(prisma_users.rows) == 6

    @pytest.mark.asyncio
    async def test_create_with_async_blueprint(self, seeder):
        async def blueprint():
            await asyncio.sleep(0)
            return {"name": "async"}

        assert (await Factory(seeder, blueprint).create())["name"] == "async"
