"""Tests for MongoUserRepository and UserService."""

import pytest
from bson import ObjectId
from pymongo.errors import AutoReconnect

from users_service.core import (
    RepositoryException,
    ResourceNotFoundException,
    ValidationException,
)
from users_service.users.application import UserService
from users_service.users.domain import User
from users_service.users.infrastructure import MongoUserRepository


@pytest.fixture
def repository(collection):
    return MongoUserRepository(collection)


class TestUserEntity:
    def test_rejects_blank_name(self):
        with pytest.raises(ValidationException) as exc_info:
            User(id=None, name="  ", lastname="Lovelace")

        assert exc_info.value.details == {"field": "name"}

    def test_rejects_missing_lastname(self):
        with pytest.raises(ValidationException):
            User(id=None, name="Ada", lastname=None)


class TestMongoUserRepository:
    async def test_create_assigns_object_id(self, repository, collection):
        created = await repository.create(User(id=None, name="Ada", lastname="Lovelace"))

        assert ObjectId.is_valid(created.id)
        stored = collection.documents[ObjectId(created.id)]
        assert stored == {"_id": ObjectId(created.id), "name": "Ada", "lastname": "Lovelace"}

    async def test_get_by_id_round_trip(self, repository):
        created = await repository.create(User(id=None, name="Ada", lastname="Lovelace"))

        assert await repository.get_by_id(created.id) == created

    async def test_get_by_malformed_id_returns_none(self, repository):
        assert await repository.get_by_id("not-an-object-id") is None

    async def test_list_all(self, repository):
        await repository.create(User(id=None, name="Ada", lastname="Lovelace"))
        await repository.create(User(id=None, name="Alan", lastname="Turing"))

        users = await repository.list_all()

        assert sorted(user.name for user in users) == ["Ada", "Alan"]

    async def test_update_existing(self, repository):
        created = await repository.create(User(id=None, name="Ada", lastname="Byron"))

        updated = await repository.update(
            created.id, User(id=None, name="Ada", lastname="Lovelace")
        )

        assert updated == User(id=created.id, name="Ada", lastname="Lovelace")

    async def test_update_unknown_returns_none(self, repository):
        user = User(id=None, name="Ada", lastname="Lovelace")
        assert await repository.update(str(ObjectId()), user) is None

    async def test_delete(self, repository, collection):
        created = await repository.create(User(id=None, name="Ada", lastname="Lovelace"))

        assert await repository.delete(created.id) == 1
        assert await repository.delete(created.id) == 0
        assert collection.documents == {}

    async def test_delete_malformed_id(self, repository):
        assert await repository.delete("xyz") == 0

    async def test_list_skips_malformed_documents(self, repository, collection):
        await repository.create(User(id=None, name="Alan", lastname="Turing"))
        broken_id = ObjectId()
        collection.documents[broken_id] = {"_id": broken_id, "name": "Ada"}

        users = await repository.list_all()

        assert [user.name for user in users] == ["Alan"]

    async def test_get_malformed_document_raises_repository_error(self, repository, collection):
        broken_id = ObjectId()
        collection.documents[broken_id] = {"_id": broken_id, "name": "Ada", "lastname": 7}

        with pytest.raises(RepositoryException) as exc_info:
            await repository.get_by_id(str(broken_id))

        assert exc_info.value.details == {"user_id": str(broken_id)}

    async def test_driver_error_wrapped(self, repository, collection):
        collection.fail_with = AutoReconnect("connection reset")

        with pytest.raises(RepositoryException) as exc_info:
            await repository.list_all()

        assert exc_info.value.details == {"operation": "list"}


class TestUserService:
    async def test_get_unknown_user_raises_not_found(self, repository):
        service = UserService(repository)
        user_id = str(ObjectId())

        with pytest.raises(ResourceNotFoundException) as exc_info:
            await service.get_user(user_id)

        assert exc_info.value.resource_id == user_id

    async def test_delete_unknown_user_raises_not_found(self, repository):
        with pytest.raises(ResourceNotFoundException):
            await UserService(repository).delete_user(str(ObjectId()))

    async def test_update_unknown_user_raises_not_found(self, repository):
        user = User(id=None, name="Ada", lastname="Lovelace")
        with pytest.raises(ResourceNotFoundException):
            await UserService(repository).update_user(str(ObjectId()), user)
