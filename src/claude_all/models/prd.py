"""PRD status and validation result models."""

from typing import List, Optional

from pydantic import BaseModel, Field


class PrdStatus(BaseModel):
    """Completion statistics of a prd.json file.

    A missing file and a corrupt file both read as ``exists=False``.
    """

    exists: bool = False
    incomplete: bool = False
    total: int = 0
    remaining: int = 0
    completed: int = 0
    project_name: Optional[str] = None


class ValidationResult(BaseModel):
    """Outcome of validating a decoded prd.json value."""

    valid: bool
    errors: List[str] = Field(default_factory=list)
