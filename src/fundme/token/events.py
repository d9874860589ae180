"""
Token Events
"""

from pydantic import BaseModel, Field


class Transfer(BaseModel):
    """Tokens moved between holders; sender is the zero address for minting"""

    sender: str
    recipient: str
    amount: int = Field(..., ge=0)


TOKEN_EVENT_TYPES = {
    "Transfer": Transfer,
}
