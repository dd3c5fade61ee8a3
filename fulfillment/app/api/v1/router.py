from fastapi import APIRouter

from fulfillment.app.api.v1.endpoints.health import router as health_router
from fulfillment.app.api.v1.endpoints.purchase_orders import router as purchase_orders_router
from fulfillment.app.api.v1.endpoints.invoices import router as invoices_router
from fulfillment.app.api.v1.endpoints.inventory import router as inventory_router

router = APIRouter()
router.include_router(health_router, tags=["health"])
router.include_router(purchase_orders_router, tags=["purchase_orders"])
router.include_router(invoices_router, tags=["invoices"])
router.include_router(inventory_router, tags=["inventory"])
