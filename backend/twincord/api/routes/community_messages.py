"""Community Messages — read the full log and append one message.

Invariants:
    - GET returns the whole ordered log with sender identities resolved
    - POST returns only the appended message, never the full log
    - Non-members get 403 and the log is unchanged

Design Decisions:
    - Pull-based sync: reads advertise pollIntervalSeconds; no server push for messages
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from twincord.api.routes.community_views import message_view
from twincord.config import get_settings
from twincord.core.domain_types import parse_community_id
from twincord.infrastructure.database import get_db
from twincord.schemas.community import MessageCreate
from twincord.services.message_log import MessageLog

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/communities", tags=["messages"])


@router.get("/{community_id}/messages")
async def read_messages(
    community_id: str, db: AsyncSession = Depends(get_db),
):
    """Full ordered message log."""
    messages = await MessageLog(db).read(parse_community_id(community_id))
    return {
        "success": True,
        "messages": [message_view(m, m.sender) for m in messages],
        "pollIntervalSeconds": get_settings().message_poll_interval_seconds,
    }


@router.post("/{community_id}/messages")
async def post_message(
    community_id: str,
    body: MessageCreate,
    db: AsyncSession = Depends(get_db),
):
    """Append one message; membership is re-checked here."""
    message = await MessageLog(db).append(
        parse_community_id(community_id),
        sender_id=body.sender_id,
        text=body.text,
        sender_name=body.sender_name,
    )
    return {"success": True, "message": message_view(message)}
