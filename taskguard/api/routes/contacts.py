from __future__ import annotations

from typing import Annotated, List

from fastapi import APIRouter, Depends, Query, status

from taskguard.core.dependencies import get_contact_service
from taskguard.schemas.contacts import ContactIn, ContactOut
from taskguard.services.contact_service import ContactService

router = APIRouter(tags=["Contacts"])

ContactDep = Annotated[ContactService, Depends(get_contact_service)]


@router.get("/contacts", response_model=List[ContactOut])
def list_contacts(contacts: ContactDep) -> List[ContactOut]:
    return [ContactOut(**c) for c in contacts.list_contacts()]


@router.get("/contacts/search", response_model=List[ContactOut])
def search_contacts(
    contacts: ContactDep,
    name: Annotated[str, Query(min_length=1, description="Exact contact name.")],
) -> List[ContactOut]:
    return [ContactOut(**c) for c in contacts.find_by_name(name)]


@router.post("/contacts", response_model=ContactOut, status_code=status.HTTP_201_CREATED)
def create_contact(body: ContactIn, contacts: ContactDep) -> ContactOut:
    return ContactOut(**contacts.create(body.name, body.age))


@router.get("/contacts/{contact_id}", response_model=ContactOut)
def get_contact(contact_id: str, contacts: ContactDep) -> ContactOut:
    return ContactOut(**contacts.get(contact_id))


@router.put("/contacts/{contact_id}", response_model=ContactOut)
def update_contact(contact_id: str, body: ContactIn, contacts: ContactDep) -> ContactOut:
    return ContactOut(**contacts.update(contact_id, body.name, body.age))


@router.delete("/contacts/{contact_id}", response_model=ContactOut)
def delete_contact(contact_id: str, contacts: ContactDep) -> ContactOut:
    return ContactOut(**contacts.delete(contact_id))
