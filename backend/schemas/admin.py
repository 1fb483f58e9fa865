"""
Admin Pydantic Schemas

API request models for back-office actions.
"""

from pydantic import BaseModel, Field


class AssignWorkerRequest(BaseModel):
    """Assign a worker to a booking's shift on their behalf."""

    worker_id: str = Field(..., min_length=1)
    worker_name: str = Field(..., min_length=1)
