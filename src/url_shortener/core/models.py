import datetime
from typing import Any, List

from pydantic import BaseModel, ConfigDict, RootModel, field_validator


class ServerConfig(BaseModel):
    port: int = 8000
    host: str = "127.0.0.1"


class RedirectRecord(BaseModel):
    model_config = ConfigDict(extra="ignore")

    path: str = ""
    url: str = ""

    @field_validator("path", "url", mode="before")
    @classmethod
    def coerce_scalar(cls, value: Any) -> Any:
        if value is None:
            return ""
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, datetime.date):
            return value.isoformat()
        if not isinstance(value, (list, dict)):
            return str(value)
        return value


class RedirectDocument(RootModel[List[RedirectRecord]]):
    root: List[RedirectRecord]
