"""
CatHealth Backend — Health To-do Route Handlers
=================================================

What:  The caller's health reminders and generated suggestions.

/api/todos/suggestions is declared before /api/todos/{todo_id} so the
literal path wins the match.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from cathealth.database import get_db_session
from cathealth.dependencies import get_current_user
from cathealth.schemas.auth import TokenClaims
from cathealth.schemas.common import ErrorResponse
from cathealth.schemas.todo import TodoResponse, TodoSuggestion, TodoWrite
from cathealth.services.ownership import parse_id
from cathealth.services.todo_service import TodoService

router = APIRouter(prefix="/api/todos", tags=["To-dos"])

todo_service = TodoService()

OWNED_RESPONSES = {
    403: {"description": "Belongs to another user", "model": ErrorResponse},
    404: {"description": "To-do or cat not found", "model": ErrorResponse},
}


@router.get("", response_model=List[TodoResponse], summary="List the caller's to-dos")
async def list_todos(
    completed: Optional[bool] = Query(default=None, description="Only done (true) or open (false) items"),
    current_user: TokenClaims = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> List[TodoResponse]:
    return await todo_service.list_todos(db, current_user, completed)


@router.get(
    "/suggestions",
    response_model=List[TodoSuggestion],
    summary="Default vaccination and checkup reminders for each cat",
)
async def suggestions(
    current_user: TokenClaims = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> List[TodoSuggestion]:
    return await todo_service.suggestions(db, current_user)


@router.post(
    "",
    status_code=201,
    response_model=TodoResponse,
    responses={**OWNED_RESPONSES, 400: {"description": "Invalid to-do", "model": ErrorResponse}},
    summary="Add a to-do",
)
async def create_todo(
    payload: TodoWrite,
    current_user: TokenClaims = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> TodoResponse:
    return await todo_service.create_todo(db, payload, current_user)


@router.put(
    "/{todo_id}",
    response_model=TodoResponse,
    responses={**OWNED_RESPONSES, 400: {"description": "Invalid to-do", "model": ErrorResponse}},
    summary="Replace a to-do (including its completed flag)",
)
async def update_todo(
    todo_id: str,
    payload: TodoWrite,
    current_user: TokenClaims = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> TodoResponse:
    return await todo_service.update_todo(db, parse_id(todo_id, "to-do"), payload, current_user)


@router.delete(
    "/{todo_id}",
    status_code=204,
    response_class=Response,
    responses=OWNED_RESPONSES,
    summary="Delete a to-do",
)
async def delete_todo(
    todo_id: str,
    current_user: TokenClaims = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await todo_service.delete_todo(db, parse_id(todo_id, "to-do"), current_user)
    return Response(status_code=204)
