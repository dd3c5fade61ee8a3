from datetime import datetime

from fulfillment.app.db.models.core_types import StockStatus
from fulfillment.app.schemas.common import APIModel


class InventoryItemRead(APIModel):
    id: int
    product_id: int
    stock: int  # READ ONLY - credited by completed purchase orders
    stock_status: StockStatus
    last_updated: datetime
