"""Admin Pydantic schemas — registration decisions and password changes."""


from pydantic import BaseModel


class PasswordChangeRequest(BaseModel):
    profile_id: str
    new_password: str


class PasswordChangeResponse(BaseModel):
    profile_id: str
    message: str = "Password updated."


class RejectionResponse(BaseModel):
    id: str
    sessions_cleared: int
