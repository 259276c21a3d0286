"""Signup, login and password reset routes."""

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.accounts import AccountError, account_service
from storefront.api.deps import get_database

router = APIRouter(prefix="/api/auth", tags=["auth"])


class SignupRequest(BaseModel):
    name: str
    email: str
    password: str


class LoginRequest(BaseModel):
    email: str
    password: str


class ForgotRequest(BaseModel):
    email: str


class UserResponse(BaseModel):
    name: str
    email: str
    is_admin: bool

    class Config:
        from_attributes = True


@router.post("/signup", response_model=UserResponse, status_code=201)
async def signup(request: SignupRequest, db: AsyncSession = Depends(get_database)):
    try:
        return await account_service.signup(db, request.name, request.email, request.password)
    except AccountError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/login", response_model=UserResponse)
async def login(request: LoginRequest, db: AsyncSession = Depends(get_database)):
    try:
        return await account_service.login(db, request.email, request.password)
    except AccountError as e:
        raise HTTPException(status_code=401, detail=str(e))


@router.post("/forgot")
async def forgot(request: ForgotRequest):
    return {"message": await account_service.forgot_password(request.email)}
