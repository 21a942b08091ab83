"""
Voice conversation endpoints.

``/voice/process`` turns a transcript into a coaching reply plus a mood
analysis. ``/tts`` returns MPEG audio, or a 503 telling the client to fall
back to browser speech synthesis.
"""
from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, Response

from ..domain import VoiceService
from ..schemas import (
    MoodAnalysisResponse,
    SessionResponse,
    TextToSpeechRequest,
    VoiceConversationResponse,
    VoiceProcessRequest,
    VoiceProcessResponse,
)
from .dependencies import CurrentUser, get_voice_service

router = APIRouter(tags=["Voice"])

VoiceServiceDep = Annotated[VoiceService, Depends(get_voice_service)]


@router.post("/voice/process", response_model=VoiceProcessResponse)
async def process_voice(
    body: VoiceProcessRequest,
    request: Request,
    user_id: CurrentUser,
    voice_service: VoiceServiceDep,
) -> VoiceProcessResponse:
    request.app.state.service.increment_stat("voice_requests")
    reply = await voice_service.process(user_id, body.transcript or "")
    return VoiceProcessResponse(
        response=reply.response,
        session_id=reply.session_id,
        mood=MoodAnalysisResponse.model_validate(reply.mood),
    )


@router.get("/voice/conversations/{session_id}", response_model=list[VoiceConversationResponse])
async def conversation_history(
    session_id: str,
    user_id: CurrentUser,
    voice_service: VoiceServiceDep,
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
) -> list[VoiceConversationResponse]:
    conversations = await voice_service.conversation_history(user_id, session_id, limit)
    return [VoiceConversationResponse.model_validate(c) for c in conversations]


@router.get("/voice/recent-conversations", response_model=list[VoiceConversationResponse])
async def recent_conversations(
    user_id: CurrentUser,
    voice_service: VoiceServiceDep,
    limit: Annotated[int, Query(ge=1, le=100)] = 10,
) -> list[VoiceConversationResponse]:
    conversations = await voice_service.recent_conversations(user_id, limit)
    return [VoiceConversationResponse.model_validate(c) for c in conversations]


@router.get("/voice/current-session", response_model=SessionResponse)
async def current_session(user_id: CurrentUser, voice_service: VoiceServiceDep) -> SessionResponse:
    return SessionResponse(session_id=await voice_service.current_session_id(user_id))


@router.post("/tts", response_class=Response)
async def text_to_speech(body: TextToSpeechRequest, voice_service: VoiceServiceDep) -> Response:
    audio = await voice_service.synthesize(body.text)
    return Response(content=audio, media_type="audio/mpeg", headers={"Cache-Control": "no-cache"})


@router.get("/tts/voices")
async def list_voices(voice_service: VoiceServiceDep) -> list[dict]:
    return await voice_service.voices()
