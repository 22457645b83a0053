"""Signed direct-upload parameters for catalog images"""

from fastapi import APIRouter, Depends

from storefront.core.dependencies import get_storage
from storefront.core.security import require_admin
from .schemas import UploadSignRequest, UploadSignResponse

router = APIRouter()

@router.post("/sign", response_model=UploadSignResponse, summary="Sign image upload")
async def sign_upload(
    data: UploadSignRequest,
    current_user: dict = Depends(require_admin),
    storage=Depends(get_storage)
):
    return await storage.sign_upload(data.folder, public_id=data.public_id)
