from datetime import datetime

from pydantic import BaseModel, Field


class AdminUserUpdate(BaseModel):
    first_name: str | None = Field(default=None, min_length=1)
    last_name: str | None = Field(default=None, min_length=1)
    is_active: bool | None = None
    is_admin: bool | None = None


class AdminUserResponse(BaseModel):
    id: str
    email: str
    first_name: str | None = None
    last_name: str | None = None
    is_active: bool = True
    is_admin: bool = False
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class AdminUserDetail(AdminUserResponse):
    has_profile: bool = False
    auto_apply_enabled: bool = False
    application_count: int = 0


class AdminUserListResponse(BaseModel):
    items: list[AdminUserResponse]
    total: int
    page: int
    page_size: int
