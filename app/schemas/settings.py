"""
Runtime settings schemas
"""
from pydantic import BaseModel, Field, ConfigDict


class NetworkPathUpdate(BaseModel):
    network_path: str = Field(..., min_length=1, max_length=1024, description="Base directory of the image share")

    model_config = ConfigDict(str_strip_whitespace=True)


class NetworkPathOut(BaseModel):
    network_path: str
    is_default: bool
