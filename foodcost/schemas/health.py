"""
Health check endpoint schemas.
"""

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """
    Response model for GET /health endpoint.

    Used by load balancers, monitoring systems, and deployment checks.
    """

    status: str = Field(
        default="ok",
        description="Health status of the API (always 'ok' if responding)",
        examples=["ok"]
    )
    service: str = Field(default="foodcost-backend", examples=["foodcost-backend"])

    model_config = {
        "json_schema_extra": {
            "example": {
                "status": "ok",
                "service": "foodcost-backend"
            }
        }
    }
