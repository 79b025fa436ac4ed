from typing import Any, Generic, Type, TypeVar

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.sql import Select

from mocah.core.exceptions.types import DatabaseException

T = TypeVar("T")


class BaseDB(Generic[T]):
    """Read-only CRUD helper; every SQLAlchemy error becomes a DatabaseException."""

    def __init__(self, model: Type[T]):
        self.model = model

    async def get_by_id(
        self, session: AsyncSession, id: str, options: list[Any] | None = None
    ) -> T | None:
        """
        Asynchronously retrieves an instance of the model by its primary key.

        Args:
            session (AsyncSession): The asynchronous database session to use for the query.
            id (str): The primary key value of the model instance to retrieve.
            options (list[Any], optional): SQLAlchemy loader options (e.g., selectinload).

        Returns:
            T | None: The model instance if found, otherwise None.

        Raises:
            DatabaseException: If an error occurs while querying the database.
        """
        try:
            stmt: Select = (
                select(self.model)
                .options(*(options or []))
                .where(getattr(self.model, "id") == id)
            )
            result = await session.execute(stmt)
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise DatabaseException(
                f"Error retrieving {self.model.__name__} with ID {id}: {str(e)}"
            ) from e

    async def get_one_by_filters(
        self, session: AsyncSession, filters: dict, options: list[Any] | None = None
    ) -> T | None:
        """
        Asynchronously retrieves a single record of the model that matches the given filters.

        Args:
            session (AsyncSession): The asynchronous database session to use for the query.
            filters (dict): Column equality filters.
            options (list[Any], optional): SQLAlchemy loader options.

        Returns:
            T | None: The matching instance, or None.

        Raises:
            DatabaseException: If an error occurs while querying the database.
        """
        try:
            stmt = select(self.model).options(*(options or [])).filter_by(**filters)
            result = await session.execute(stmt.limit(1))
            return result.scalars().first()
        except SQLAlchemyError as e:
            raise DatabaseException(
                f"Error retrieving {self.model.__name__} with filters {filters}: {str(e)}"
            ) from e

    async def exists(self, session: AsyncSession, filters: dict) -> bool:
        """
        Check whether at least one record matches the given filters.

        Raises:
            DatabaseException: If an error occurs while querying the database.
        """
        try:
            stmt = select(func.count()).select_from(self.model).filter_by(**filters)
            result = await session.execute(stmt)
            return (result.scalar_one() or 0) > 0
        except SQLAlchemyError as e:
            raise DatabaseException(
                f"Error checking {self.model.__name__} existence with filters {filters}: {str(e)}"
            ) from e
