"""Request models for the HTTP API."""

from typing import Optional

from pydantic import BaseModel


class BranchRequest(BaseModel):
    """Body of /checkout and /delete-branch.

    ``branch`` is optional; a missing name is rejected by the service with 400.
    """
    branch: Optional[str] = None
