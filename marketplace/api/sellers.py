"""
marketplace/api/sellers.py

Purpose: Seller accounts

- Public registration, login and nearby search
- Seller self-service (profile, dashboard, logout)
- Admin management (list, status, delete)
"""

from typing import Optional, Literal

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from marketplace.api.common import clear_auth_cookies, ok, presented_refresh_token, token_response
from marketplace.core.dependencies import get_current_seller, require_admin
from marketplace.core.rate_limit import limit_auth_attempts
from marketplace.schemas.auth import RefreshRequest
from marketplace.schemas.seller import SellerLoginRequest, SellerRegisterRequest, SellerStatusRequest, SellerUpdateRequest
from marketplace.services import seller_service
from marketplace.utils.serialization import public_document

router = APIRouter()


@router.post("/register", status_code=201, dependencies=[Depends(limit_auth_attempts)])
async def register_seller(body: SellerRegisterRequest):
    seller, access_token, refresh_token = await seller_service.register_seller(body.model_dump())
    return token_response(seller, access_token, refresh_token, status_code=201, key="seller")


@router.post("/login", dependencies=[Depends(limit_auth_attempts)])
async def login_seller(body: SellerLoginRequest):
    seller, access_token, refresh_token = await seller_service.login_seller(body.email, body.password)
    return token_response(seller, access_token, refresh_token, key="seller")


@router.get("/nearby")
async def nearby_sellers(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    radius_km: float = Query(5, alias="radiusKm", gt=0, le=100),
):
    sellers = await seller_service.find_nearby_sellers(lat, lng, radius_km)
    return ok(sellers, count=len(sellers))


@router.get("/me")
async def get_me(seller: dict = Depends(get_current_seller)):
    return {"success": True, "seller": public_document(await seller_service.get_seller(seller["_id"]))}


@router.patch("/me")
async def update_me(body: SellerUpdateRequest, seller: dict = Depends(get_current_seller)):
    updated = await seller_service.update_seller_profile(seller, body.model_dump(exclude_unset=True))
    return {"success": True, "seller": public_document(updated)}


@router.get("/dashboard")
async def dashboard(seller: dict = Depends(get_current_seller)):
    return ok(await seller_service.get_dashboard_stats(seller))


@router.post("/logout")
async def logout_seller(request: Request, body: Optional[RefreshRequest] = None,
                        seller: dict = Depends(get_current_seller)):
    token = presented_refresh_token(body.refresh_token if body else None, request.cookies)
    await seller_service.logout_seller(seller, token)
    response = JSONResponse(content={"success": True, "message": "Logged out successfully"})
    clear_auth_cookies(response)
    return response


@router.get("", dependencies=[Depends(require_admin)])
async def list_sellers(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    status: Optional[Literal["approved", "pending", "suspended"]] = None,
    search: Optional[str] = None,
):
    sellers, total = await seller_service.list_sellers(page, limit, status, search)
    return ok(sellers, count=len(sellers), total=total)


@router.get("/{seller_id}", dependencies=[Depends(require_admin)])
async def get_seller(seller_id: str):
    return ok(await seller_service.get_seller(seller_id))


@router.patch("/{seller_id}/status", dependencies=[Depends(require_admin)])
async def update_seller_status(seller_id: str, body: SellerStatusRequest):
    return ok(await seller_service.update_seller_status(seller_id, body.is_approved, body.is_suspended))


@router.delete("/{seller_id}", dependencies=[Depends(require_admin)])
async def delete_seller(seller_id: str):
    await seller_service.delete_seller(seller_id)
    return ok(message="Seller deleted successfully")
