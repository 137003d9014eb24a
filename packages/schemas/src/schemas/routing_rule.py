"""Routing rule data model."""

from typing import Tuple
from pydantic import BaseModel, ConfigDict, Field, field_validator

from schemas.domain_rules import unique_domains


class RoutingRule(BaseModel):
    """Domains exposed by one ingress object in the cluster."""

    namespace: str = Field(..., description="Namespace of the ingress")
    name: str = Field(..., description="Name of the ingress")
    domains: Tuple[str, ...] = Field(
        default=(),
        description="Extracted domains, de-duplicated in rule order",
    )

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "namespace": "default",
                "name": "ingress-1",
                "domains": ["example.com"],
            }
        },
    )

    @field_validator("domains", mode="before")
    @classmethod
    def _dedupe_domains(cls, value):
        return tuple(unique_domains(value or ()))

    @property
    def key(self) -> str:
        """Namespaced name, e.g. ``default/ingress-1``."""
        return f"{self.namespace}/{self.name}"
