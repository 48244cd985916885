"""Base model configuration for all data structures."""

from pydantic import BaseModel, ConfigDict


class Model(BaseModel):
    """Base model with standard configuration.

    Backend payloads carry many keys the tracker does not use, so unknown
    keys are ignored rather than rejected.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")
