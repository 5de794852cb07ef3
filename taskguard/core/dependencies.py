"""FastAPI dependency helpers resolving services from the app container."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from taskguard.adapters.audit.store import StoreAuditSink
from taskguard.core.container import ServiceContainer
from taskguard.services.auth_service import AuthService
from taskguard.services.contact_service import ContactService
from taskguard.services.login_throttle import LoginThrottle
from taskguard.services.task_service import TaskService


def get_container(request: Request) -> ServiceContainer:
    return request.app.state.container


ContainerDep = Annotated[ServiceContainer, Depends(get_container)]


def get_auth_service(container: ContainerDep) -> AuthService:
    return container.auth


def get_login_throttle(container: ContainerDep) -> LoginThrottle:
    return container.throttle


def get_audit_sink(container: ContainerDep) -> StoreAuditSink:
    return container.audit


def get_task_service(container: ContainerDep) -> TaskService:
    return container.tasks


def get_contact_service(container: ContainerDep) -> ContactService:
    return container.contacts
