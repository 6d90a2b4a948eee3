from fastapi import APIRouter, Depends

from shopmaster.auth import admin_user
from shopmaster.models import User
from shopmaster.pricing import revenue
from shopmaster.schemas import StatsOut
from shopmaster.storage import Storage, get_storage

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get("/stats", response_model=StatsOut)
def dashboard_stats(_: User = Depends(admin_user), storage: Storage = Depends(get_storage)):
    orders = storage.get_orders()
    return StatsOut(
        products=storage.count_products(),
        orders=len(orders),
        pending_orders=sum(1 for o in orders if o.status == "pending"),
        users=storage.count_users(),
        revenue=revenue(orders),
    )
