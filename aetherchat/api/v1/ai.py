# ============================================================================
# aetherchat/api/v1/ai.py
# AI helpers for the chat widget and the staff console
# ============================================================================
from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from typing import Dict, List, Optional

from aetherchat.api.dependencies import get_ai_service
from aetherchat.services.ai.ai_service import AIService

router = APIRouter(prefix="/ai", tags=["ai"])


class AnswerQuestionRequest(BaseModel):
    question: str = Field(..., min_length=1)
    chat_history: Optional[str] = None
    training_examples: Optional[List[Dict[str, str]]] = None


class SuggestedRepliesRequest(BaseModel):
    latest_message: str = Field(..., min_length=1)


@router.post("/answer")
async def answer_question(request: AnswerQuestionRequest, ai_service: AIService = Depends(get_ai_service)):
    answer = ai_service.answer_user_question(
        request.question, request.chat_history, request.training_examples
    )
    return {"answer": answer}


@router.post("/suggested-replies")
async def suggested_replies(request: SuggestedRepliesRequest, ai_service: AIService = Depends(get_ai_service)):
    return {"suggested_replies": ai_service.generate_suggested_replies(request.latest_message)}
