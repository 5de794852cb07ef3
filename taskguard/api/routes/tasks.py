from __future__ import annotations

from typing import Annotated, List

from fastapi import APIRouter, Depends, HTTPException, Response, status

from taskguard.core.dependencies import get_task_service
from taskguard.schemas.tasks import TaskCreateRequest, TaskResponse, TaskValidationErrorResponse
from taskguard.services.task_service import TaskService

router = APIRouter(tags=["Tasks"])

TaskDep = Annotated[TaskService, Depends(get_task_service)]


@router.get("/tasks", response_model=List[TaskResponse])
def list_tasks(tasks: TaskDep) -> List[TaskResponse]:
    return [TaskResponse(**task) for task in tasks.list_tasks()]


@router.post(
    "/tasks",
    status_code=status.HTTP_201_CREATED,
    response_model=TaskResponse | TaskValidationErrorResponse,
    responses={400: {"model": TaskValidationErrorResponse}},
)
def create_task(body: TaskCreateRequest, response: Response, tasks: TaskDep):
    """Create a task.

    Validation problems return 400 with the list of messages instead of an
    error envelope so forms can display them directly.
    """
    result = tasks.create(body.model_dump())
    if result.ok:
        return TaskResponse(**result.task)
    if result.reason == "validation_failed":
        response.status_code = status.HTTP_400_BAD_REQUEST
        return TaskValidationErrorResponse(errors=result.errors)
    raise HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Could not create task.",
    )


@router.delete("/tasks/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_task(task_id: str, tasks: TaskDep) -> Response:
    result = tasks.delete(task_id)
    if result.ok:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    if result.reason == "not_found":
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found.")
    raise HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Could not delete task.",
    )
