from pydantic import BaseModel


class BadRequestResponse(BaseModel):
    success: bool = False
    error: str = "Invalid request parameters"


class UnauthorizedResponse(BaseModel):
    success: bool = False
    error: str = "Invalid signature"


class SessionExpiredResponse(BaseModel):
    success: bool = False
    error: str = "No active session"
    sessionExpired: bool = True


class ForbiddenResponse(BaseModel):
    success: bool = False
    error: str = "Origin not allowed"


class InternalServerErrorResponse(BaseModel):
    success: bool = False
    error: str = "Internal server error"


class TooManyRequestsResponse(BaseModel):
    detail: str = "Too many requests"
