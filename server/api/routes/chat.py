"""Chat routes: send a message, read or reset the transcript."""
from fastapi import APIRouter, Depends
import logging

from api.schemas.request_schemas import ChatMessageRequest
from api.schemas.response_schemas import TranscriptResponse
from core.agent import AssistantAgent
from core.dependencies import get_agent, get_location_provider, get_message_repo
from database.repositories.message_repo import MessageRepository
from integrations.location.provider import LocationProvider
from models.location import Coordinates
from models.message import Message

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/messages", response_model=Message)
async def send_message(
    request: ChatMessageRequest,
    agent: AssistantAgent = Depends(get_agent),
    location: LocationProvider = Depends(get_location_provider),
):
    """
    Process one user message and return the assistant reply.

    The reply carries ``transit_routes`` / ``places`` when the request was a
    route or nearby-place query.
    """
    if request.latitude is not None and request.longitude is not None:
        location.update(Coordinates(latitude=request.latitude, longitude=request.longitude))

    return await agent.handle_message(request.text)


@router.get("/messages", response_model=TranscriptResponse)
async def get_messages(messages: MessageRepository = Depends(get_message_repo)):
    return TranscriptResponse(messages=await messages.load())


@router.delete("/messages", response_model=TranscriptResponse)
async def reset_messages(messages: MessageRepository = Depends(get_message_repo)):
    """Replace the transcript with the welcome message."""
    logger.info("Resetting chat transcript")
    return TranscriptResponse(messages=await messages.reset())
