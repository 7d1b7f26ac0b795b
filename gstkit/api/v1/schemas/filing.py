# gstkit/api/v1/schemas/filing.py

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class CompleteReminderRequest(BaseModel):
    filed_at: Optional[datetime] = None
