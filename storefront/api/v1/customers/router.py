"""Customer API routes"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.database import get_db
from storefront.core.dependencies import get_clerk
from storefront.core.security import get_current_user, require_admin
from .schemas import CustomerResponse, CustomerListResponse
from .services import CustomerService

router = APIRouter()

@router.post("/sync", response_model=CustomerResponse, summary="Sync current user")
async def sync_current_user(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    clerk=Depends(get_clerk)
):
    return await CustomerService(db, clerk).sync(current_user["id"])

@router.get("/admin/all", response_model=CustomerListResponse, summary="List customers")
async def list_customers(
    current_user: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    customers = await CustomerService(db).list_customers()
    return CustomerListResponse(customers=customers, count=len(customers))

@router.get("/admin/{customer_id}", response_model=CustomerResponse, summary="Get customer")
async def get_customer(
    customer_id: str,
    current_user: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    clerk=Depends(get_clerk)
):
    return await CustomerService(db, clerk).get_customer(customer_id)
