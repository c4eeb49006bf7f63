from typing_extensions import Protocol
from domain.entities import Sale
from typing import Optional


class SaleRepository(Protocol):
    async def get_sale(self, sale_id: str) -> Optional[Sale]: ...
