"""
CatHealth Backend — Health To-do Service
==========================================

What:  Per-user health reminders (optionally tied to one of the user's
       cats) and generated default suggestions.
Who:   Called by routes/todos.py.

Suggestions are computed, never stored. For every cat the caller owns:
    "Annual vaccination for <name>"   vaccination   today + 12 months
    "Regular checkup for <name>"      checkup       today + 3 months
Month arithmetic clamps the day (Nov 30 + 3 months → Feb 28/29).
"""

import calendar
import datetime as dt
import logging
from typing import List, Optional

from sqlalchemy import asc, desc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cathealth.exceptions import DatabaseError, NotFoundError
from cathealth.models import Cat, HealthTodo, RecordType
from cathealth.schemas.auth import TokenClaims
from cathealth.schemas.todo import TodoResponse, TodoSuggestion, TodoWrite
from cathealth.services.ownership import ensure_owner, get_owned_cat

logger = logging.getLogger(__name__)

# (title template, record type, months ahead)
SUGGESTION_RULES = [
    ("Annual vaccination for {name}", RecordType.VACCINATION, 12),
    ("Regular checkup for {name}", RecordType.CHECKUP, 3),
]


def add_months(start: dt.date, months: int) -> dt.date:
    """Calendar month addition with the day clamped to the target month's length."""
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return dt.date(year, month, day)


class TodoService:
    async def _owned_todo(self, db: AsyncSession, todo_id: int, current_user: TokenClaims) -> HealthTodo:
        todo = await db.get(HealthTodo, todo_id)
        if todo is None:
            raise NotFoundError(resource="to-do", resource_id=str(todo_id))
        ensure_owner(todo.owner_id, current_user, "to-do", todo_id)
        return todo

    async def _apply(
        self,
        db: AsyncSession,
        todo: HealthTodo,
        payload: TodoWrite,
        current_user: TokenClaims,
    ) -> None:
        # Linking a to-do to a cat requires owning that cat
        if payload.cat_id is not None:
            await get_owned_cat(db, payload.cat_id, current_user)
        todo.title = payload.title
        todo.type = payload.type.value
        todo.due_date = payload.due_date
        todo.cat_id = payload.cat_id
        todo.completed = payload.completed

    async def list_todos(
        self,
        db: AsyncSession,
        current_user: TokenClaims,
        completed: Optional[bool] = None,
    ) -> List[TodoResponse]:
        """
        Open items first, then by due date (undated last).

        Args:
            completed: restrict to done (True) or open (False) items
        """
        query = select(HealthTodo).where(HealthTodo.owner_id == current_user.user_id)
        if completed is not None:
            query = query.where(HealthTodo.completed == completed)
        query = query.order_by(
            asc(HealthTodo.completed),
            asc(HealthTodo.due_date.is_(None)),
            asc(HealthTodo.due_date),
            desc(HealthTodo.id),
        )
        try:
            result = await db.execute(query)
        except SQLAlchemyError as e:
            logger.error("Failed to list to-dos for user %s: %s", current_user.user_id, str(e))
            raise DatabaseError(message="Failed to retrieve to-dos. Please try again.")
        return [TodoResponse.from_model(t) for t in result.scalars().all()]

    async def create_todo(self, db: AsyncSession, payload: TodoWrite, current_user: TokenClaims) -> TodoResponse:
        try:
            todo = HealthTodo(owner_id=current_user.user_id)
            await self._apply(db, todo, payload, current_user)
            db.add(todo)
            await db.flush()
            await db.commit()
        except SQLAlchemyError as e:
            logger.error("Failed to create to-do for user %s: %s", current_user.user_id, str(e))
            raise DatabaseError(message="Failed to create to-do. Please try again.")

        logger.info("To-do %s created by user %s", todo.id, current_user.user_id)
        return TodoResponse.from_model(todo)

    async def update_todo(
        self,
        db: AsyncSession,
        todo_id: int,
        payload: TodoWrite,
        current_user: TokenClaims,
    ) -> TodoResponse:
        try:
            todo = await self._owned_todo(db, todo_id, current_user)
            await self._apply(db, todo, payload, current_user)
            todo.touch()
            await db.flush()
            await db.commit()
        except SQLAlchemyError as e:
            logger.error("Failed to update to-do %s: %s", todo_id, str(e))
            raise DatabaseError(message="Failed to update to-do. Please try again.")

        logger.info("To-do %s updated (completed=%s)", todo.id, todo.completed)
        return TodoResponse.from_model(todo)

    async def delete_todo(self, db: AsyncSession, todo_id: int, current_user: TokenClaims) -> None:
        try:
            todo = await self._owned_todo(db, todo_id, current_user)
            await db.delete(todo)
            await db.commit()
        except SQLAlchemyError as e:
            logger.error("Failed to delete to-do %s: %s", todo_id, str(e))
            raise DatabaseError(message="Failed to delete to-do. Please try again.")

        logger.info("To-do %s deleted", todo_id)

    async def suggestions(
        self,
        db: AsyncSession,
        current_user: TokenClaims,
        today: Optional[dt.date] = None,
    ) -> List[TodoSuggestion]:
        today = today or dt.date.today()
        try:
            result = await db.execute(
                select(Cat.id, Cat.name)
                .where(Cat.owner_id == current_user.user_id)
                .order_by(asc(Cat.name), asc(Cat.id))
            )
        except SQLAlchemyError as e:
            logger.error("Failed to load cats for suggestions: %s", str(e))
            raise DatabaseError(message="Failed to build suggestions. Please try again.")

        return [
            TodoSuggestion(
                title=template.format(name=row.name),
                type=record_type.value,
                due_date=add_months(today, months),
                cat_id=row.id,
                cat_name=row.name,
            )
            for row in result.all()
            for template, record_type, months in SUGGESTION_RULES
        ]
