"""Unit tests for ContactService."""

from unittest.mock import MagicMock

import pytest

from taskguard.core.errors import (
    ConflictAppError,
    NotFoundAppError,
    StorageAppError,
    ValidationAppError,
)
from taskguard.services.contact_service import ContactService


@pytest.fixture
def contacts(kv_store, audit_sink) -> ContactService:
    return ContactService(kv_store, audit=audit_sink)


def test_create_and_get(contacts) -> None:
    created = contacts.create("  Ana ", 30)

    assert created["name"] == "Ana"
    assert created["age"] == 30
    assert contacts.get(created["id"]) == created
    assert contacts.list_contacts() == [created]


def test_duplicate_name_conflicts(contacts) -> None:
    first = contacts.create("Ana", 30)

    with pytest.raises(ConflictAppError) as exc_info:
        contacts.create("Ana", 31)

    assert exc_info.value.code == "contact_name_taken"
    assert exc_info.value.details["resource_id"] == first["id"]


@pytest.mark.parametrize(
    ("name", "age", "code"),
    [
        ("", 20, "contact_name_required"),
        ("   ", 20, "contact_name_required"),
        ("Ana", -1, "contact_age_invalid"),
        ("Ana", "20", "contact_age_invalid"),
        ("Ana", True, "contact_age_invalid"),
    ],
)
def test_invalid_input(contacts, name, age, code) -> None:
    with pytest.raises(ValidationAppError) as exc_info:
        contacts.create(name, age)

    assert exc_info.value.code == code


def test_update_keeps_id(contacts) -> None:
    created = contacts.create("Ana", 30)

    updated = contacts.update(created["id"], "Ana Maria", 31)

    assert updated == {"id": created["id"], "name": "Ana Maria", "age": 31}
    assert contacts.get(created["id"]) == updated


def test_update_can_keep_own_name(contacts) -> None:
    created = contacts.create("Ana", 30)

    assert contacts.update(created["id"], "Ana", 40)["age"] == 40


def test_update_to_taken_name_conflicts(contacts) -> None:
    contacts.create("Ana", 30)
    bob = contacts.create("Bob", 25)

    with pytest.raises(ConflictAppError):
        contacts.update(bob["id"], "Ana", 25)


def test_missing_contact_raises_not_found(contacts) -> None:
    with pytest.raises(NotFoundAppError):
        contacts.get("missing")
    with pytest.raises(NotFoundAppError):
        contacts.update("missing", "Ana", 1)
    with pytest.raises(NotFoundAppError):
        contacts.delete("missing")


def test_delete(contacts, audit_sink) -> None:
    created = contacts.create("Ana", 30)

    assert contacts.delete(created["id"]) == created
    assert contacts.list_contacts() == []
    assert [e["message"] for e in audit_sink.get_all()] == ["contact_created", "contact_deleted"]


def test_find_by_name_is_exact(contacts) -> None:
    ana = contacts.create("Ana", 30)
    contacts.create("Anabel", 22)

    assert contacts.find_by_name(" Ana ") == [ana]
    assert contacts.find_by_name("ana") == []


def test_storage_read_failure_propagates(audit_sink) -> None:
    store = MagicMock()
    store.get.side_effect = StorageAppError(code="storage_read_failed", message="down")
    service = ContactService(store, audit=audit_sink)

    with pytest.raises(StorageAppError):
        service.list_contacts()
    with pytest.raises(StorageAppError):
        service.create("Ana", 30)

    store.set.assert_not_called()
