from pydantic import BaseModel, Field
from typing import List


class AddSessionRequest(BaseModel):
    id: str = Field(default="", max_length=255)
    many: int = Field(default=0, ge=0, le=100000)
    centrifugo_url: str = Field(default="", alias="centrifugoUrl")
    cookie: str = ""

    class Config:
        populate_by_name = True


class RemoveSessionRequest(BaseModel):
    id: str = Field(default="", max_length=255)


class SessionResult(BaseModel):
    id: str
    status: str
    message: str


class AddSessionResponse(BaseModel):
    results: List[SessionResult]


class CleanResponse(BaseModel):
    status: str = "cleaned"
    removed: int


class CountsResponse(BaseModel):
    total: int
    connected: int
    subscribed: int
