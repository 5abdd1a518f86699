"""API client configuration model."""

from typing import Optional

from pydantic import BaseModel, Field


class ApiConfig(BaseModel):
    """Configuration for the Babylon API client.

    Attributes:
        base_url: Server base URL
        timeout: Per-request timeout in seconds
        token: Bearer token forwarded on authenticated requests
    """

    base_url: str = "http://localhost:3000"
    timeout: float = Field(10.0, gt=0.0)
    token: Optional[str] = None
