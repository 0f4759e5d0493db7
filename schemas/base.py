from pydantic import BaseModel, ConfigDict
from typing import Any, Dict


class SchemaBase(BaseModel):
    """
    Base class for the brief desk's own schemas.
    Enforces strict fields and provides safe serialization.
    """

    model_config = ConfigDict(extra="forbid")

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


class WireShape(BaseModel):
    """
    Base class for payloads we receive but do not own (third-party JSON).

    Unknown keys are ignored so that provider-specific extras never break matching.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)
