from pydantic import BaseModel, Field
from typing import Optional


class UpstreamSettingsSaveRequest(BaseModel):
    """Admin UI sends camelCase; snake_case works too."""
    api_key: Optional[str] = Field(None, alias="apiKey")
    endpoint_url: Optional[str] = Field(None, alias="endpointUrl")

    model_config = {"populate_by_name": True}


class UpstreamTestRequest(BaseModel):
    api_key: Optional[str] = Field(None, alias="apiKey")

    model_config = {"populate_by_name": True}
