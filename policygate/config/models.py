from pydantic import BaseModel, Field
from typing import Literal


class LoaderConfig(BaseModel):
    max_batch_size: int | None = Field(default=None, gt=0)


class PolicyGateConfig(BaseModel):
    loader: LoaderConfig = Field(default_factory=LoaderConfig)
    log_level: Literal["debug", "info", "warn", "error"] = "info"
