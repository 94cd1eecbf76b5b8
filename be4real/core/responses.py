from typing import Generic, Optional, TypeVar

from pydantic import BaseModel

T = TypeVar("T")

class Envelope(BaseModel, Generic[T]):
    """Success body returned by every endpoint"""
    status: str = "success"
    message: str
    data: Optional[T] = None

def success(message: str, data=None) -> dict:
    return {"status": "success", "message": message, "data": data}
