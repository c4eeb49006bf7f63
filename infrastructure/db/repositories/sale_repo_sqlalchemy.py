from typing import Optional
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from domain.entities import Sale
from domain.exceptions import StorageError
from domain.interfaces import SaleRepository
from infrastructure.db.models.sales import SaleModel


class SaleRepoSqlalchemy(SaleRepository):
    """Read-only SQLAlchemy implementation of SaleRepository."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_sale(self, sale_id: str) -> Optional[Sale]:
        stmt = select(SaleModel).where(SaleModel.id == sale_id)
        try:
            result = await self.db.execute(stmt)
        except SQLAlchemyError as e:
            raise StorageError(f"Could not load sale {sale_id}: {e}") from e
        sale_model = result.scalar_one_or_none()
        return sale_model.to_domain() if sale_model else None
