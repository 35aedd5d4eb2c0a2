"""Base model configuration for all Pydantic models."""

from pydantic import BaseModel, ConfigDict


class KubeConnectBaseModel(BaseModel):
    """Base model with common configuration.

    Models are immutable once built: a credential or connection config is
    created for a single connection attempt and never mutated afterwards.
    """

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        frozen=True,
    )
