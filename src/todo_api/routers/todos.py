from __future__ import annotations

import logging
from typing import Annotated, List

from fastapi import APIRouter, Depends, Path, Request, status

from ..repositories import TodoRepository
from ..schemas import (
    DeleteAck,
    ErrorOut,
    TodoCreate,
    TodoOut,
    TodoReplace,
    TodoStatusOut,
    TodoStatusUpdate,
    TodoTitleOut,
    TodoTitleUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/todos",
    tags=["todos"],
)

_NOT_FOUND = {404: {"model": ErrorOut, "description": "Todo not found"}}
_BAD_REQUEST = {400: {"model": ErrorOut, "description": "Validation error"}}
_DB_ERROR = {500: {"model": ErrorOut, "description": "Database error"}}

# ids come from a SERIAL (int4) column on PostgreSQL
MAX_TODO_ID = 2**31 - 1

TodoId = Annotated[int, Path(ge=1, le=MAX_TODO_ID, description="Identifier of the todo item")]


# PUBLIC_INTERFACE
def get_repository(request: Request) -> TodoRepository:
    """
    Return the repository built at application startup.
    """
    return request.app.state.repository


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[TodoOut],
    summary="List Todos",
    description="List every todo item in creation order.",
    responses={**_DB_ERROR},
)
def list_todos(repo: TodoRepository = Depends(get_repository)) -> List[TodoOut]:
    logger.debug("Listing todos")
    return [TodoOut(**it) for it in repo.list_all()]


# PUBLIC_INTERFACE
@router.get(
    "/{todo_id}",
    response_model=TodoOut,
    summary="Get Todo",
    description="Get a single Todo item by ID.",
    responses={**_BAD_REQUEST, **_NOT_FOUND, **_DB_ERROR},
)
def get_todo(todo_id: TodoId, repo: TodoRepository = Depends(get_repository)) -> TodoOut:
    return TodoOut(**repo.get(todo_id))


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=TodoOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create Todo",
    description="Create a new Todo item. The id is assigned by the server.",
    responses={**_BAD_REQUEST, **_DB_ERROR},
)
def create_todo(payload: TodoCreate, repo: TodoRepository = Depends(get_repository)) -> TodoOut:
    created = repo.create(payload.title, payload.status)
    logger.info("Todo created with id %s", created["id"])
    return TodoOut(**created)


# PUBLIC_INTERFACE
@router.put(
    "/{todo_id}",
    response_model=TodoOut,
    summary="Replace Todo",
    description="Replace both the title and the status of an existing Todo item.",
    responses={**_BAD_REQUEST, **_NOT_FOUND, **_DB_ERROR},
)
def put_todo(
    todo_id: TodoId, payload: TodoReplace, repo: TodoRepository = Depends(get_repository)
) -> TodoOut:
    return TodoOut(**repo.update(todo_id, payload.title, payload.status))


# PUBLIC_INTERFACE
@router.patch(
    "/{todo_id}/status",
    response_model=TodoStatusOut,
    summary="Update Todo status",
    description="Change only the status of a Todo item.",
    responses={**_BAD_REQUEST, **_NOT_FOUND, **_DB_ERROR},
)
def patch_todo_status(
    todo_id: TodoId, payload: TodoStatusUpdate, repo: TodoRepository = Depends(get_repository)
) -> TodoStatusOut:
    repo.update_status(todo_id, payload.status)
    return TodoStatusOut(id=todo_id, status=payload.status)


# PUBLIC_INTERFACE
@router.patch(
    "/{todo_id}/title",
    response_model=TodoTitleOut,
    summary="Update Todo title",
    description="Change only the title of a Todo item.",
    responses={**_BAD_REQUEST, **_NOT_FOUND, **_DB_ERROR},
)
def patch_todo_title(
    todo_id: TodoId, payload: TodoTitleUpdate, repo: TodoRepository = Depends(get_repository)
) -> TodoTitleOut:
    repo.update_title(todo_id, payload.title)
    return TodoTitleOut(id=todo_id, title=payload.title)


# PUBLIC_INTERFACE
@router.delete(
    "/{todo_id}",
    response_model=DeleteAck,
    summary="Delete Todo",
    description="Delete a Todo item by ID. Returns an acknowledgment, not the deleted item.",
    responses={**_BAD_REQUEST, **_NOT_FOUND, **_DB_ERROR},
)
def delete_todo(todo_id: TodoId, repo: TodoRepository = Depends(get_repository)) -> DeleteAck:
    repo.delete(todo_id)
    logger.info("Todo %s deleted", todo_id)
    return DeleteAck()
