"""Strict schema baselines with forbidden extras by default."""

from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict

from ..utils.time_utils import ensure_utc

# SQLite hands back naive datetimes; responses always carry an explicit UTC offset
UTCDateTime = Annotated[datetime, AfterValidator(ensure_utc)]


class StrictModel(BaseModel):
    """Neutral strict base for response DTOs."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)


class StrictRequestModel(StrictModel):
    """Request DTO base that always forbids unexpected fields."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True, str_strip_whitespace=True)


class ORMResponseModel(BaseModel):
    """Response DTO populated straight from ORM objects or service results."""

    model_config = ConfigDict(from_attributes=True)
