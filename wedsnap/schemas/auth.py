from pydantic import BaseModel, Field


class SignupRequest(BaseModel):
    email: str = Field(min_length=3, max_length=254, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str = Field(min_length=6)


class LoginRequest(BaseModel):
    email: str
    password: str


class LoginResponse(BaseModel):
    user_id: str
    email: str
    access_token: str
    token_type: str = "bearer"


class CoupleResponse(BaseModel):
    id: str
    email: str
    created_at: str

    model_config = {"from_attributes": True}
