"""Pydantic request/response schemas for the dev-script endpoints."""

from decimal import Decimal

from pydantic import BaseModel, EmailStr, Field

from src.pm_common.enums import WalletType


class GenerateUserTokenRequest(BaseModel):
    email: EmailStr


class GenerateUserTokenResponse(BaseModel):
    token: str
    user_id: str
    email: str


class CreditWalletRequest(BaseModel):
    email: EmailStr
    wallet_type: WalletType = WalletType.TOPUP
    amount: Decimal = Field(..., gt=0, max_digits=14, decimal_places=2)
