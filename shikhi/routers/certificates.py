from fastapi import APIRouter

from shikhi.crud.users import user_crud

router = APIRouter(prefix="/certificates", tags=["Certificates"])


# Public: anyone holding a certificate id can check it
@router.get("/verify/{certificate_id}")
async def verify_certificate(certificate_id: str):
    certificate = await user_crud.verify_certificate(certificate_id)
    return {"success": True, "valid": True, "certificate": certificate}
