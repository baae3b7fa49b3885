"""Voice-assistant router.

Accepts already-parsed intents; translating a platform's request envelope
into ``VoiceIntentRequest`` happens upstream.
"""

from fastapi import APIRouter

from dosewatch.dependencies import Engine
from dosewatch.schemas.voice import VoiceIntentRequest
from dosewatch.services.voice_assistant import VoiceReply, handle_intent

router = APIRouter(prefix="/api/voice", tags=["voice"])


@router.post("/intents", response_model=VoiceReply)
async def answer_intent(body: VoiceIntentRequest, engine: Engine) -> VoiceReply:
    return handle_intent(engine, body.intent, body.amount_ml)
