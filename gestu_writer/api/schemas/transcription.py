from pydantic import BaseModel
from typing import Optional, Union


class TokenOut(BaseModel):
    kind: str
    value: Union[int, str]
    confidence: float


class ClassifyOut(BaseModel):
    token: Optional[TokenOut] = None
