# aetherchat/services/ai/ai_service.py
"""Service for AI/OpenAI interactions: answering customers and suggesting staff replies"""
import json
import logging
from typing import Dict, List, Optional

from openai import OpenAI, OpenAIError

from aetherchat.config.settings import Settings, get_settings

logger = logging.getLogger(__name__)

ANSWER_SYSTEM_PROMPT = (
    "Bạn là trợ lý chăm sóc khách hàng của một spa/salon. "
    "Trả lời ngắn gọn, lịch sự, bằng tiếng Việt. "
    "Nếu không chắc chắn, hãy đề nghị khách chờ nhân viên hỗ trợ."
)

SUGGESTED_REPLIES_PROMPT = (
    "Bạn giúp nhân viên trả lời khách hàng. Hãy tạo đúng 3 câu trả lời gợi ý, ngắn gọn, "
    "liên quan và khác nhau cho tin nhắn dưới đây. Không chào hỏi, không kết thư. "
    'Trả về JSON dạng {"suggested_replies": ["...", "...", "..."]}.'
)

FALLBACK_ANSWER = "Xin lỗi, hiện tại tôi chưa thể trả lời. Nhân viên sẽ hỗ trợ bạn trong giây lát."


class AIService:
    """Handles AI chat operations"""

    def __init__(self, client: Optional[OpenAI] = None, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.client = client or OpenAI(api_key=self.settings.OPENAI_API_KEY)
        self.model = self.settings.OPENAI_MODEL

    def answer_user_question(
            self,
            question: str,
            chat_history: Optional[str] = None,
            training_examples: Optional[List[Dict[str, str]]] = None
    ) -> str:
        """Answer a customer question, optionally grounded on chat history and Q&A examples"""
        messages = [{"role": "system", "content": ANSWER_SYSTEM_PROMPT}]

        for example in training_examples or []:
            messages.append({"role": "user", "content": example["question"]})
            messages.append({"role": "assistant", "content": example["answer"]})

        if chat_history:
            messages.append({"role": "system", "content": f"Lịch sử trò chuyện:\n{chat_history}"})
        messages.append({"role": "user", "content": question})

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=0.7,
                max_tokens=self.settings.OPENAI_MAX_TOKENS,
            )
        except OpenAIError as e:
            logger.error(f"OpenAI answer failed: {e}")
            return FALLBACK_ANSWER

        answer = (response.choices[0].message.content or "").strip()
        return answer or FALLBACK_ANSWER

    def generate_suggested_replies(self, latest_message: str) -> List[str]:
        """Three short reply suggestions for staff; empty list when the model fails"""
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SUGGESTED_REPLIES_PROMPT},
                    {"role": "user", "content": latest_message},
                ],
                temperature=0.8,
                max_tokens=200,
                response_format={"type": "json_object"},
            )
        except OpenAIError as e:
            logger.error(f"OpenAI suggested replies failed: {e}")
            return []

        content = response.choices[0].message.content or ""
        try:
            replies = json.loads(content).get("suggested_replies", [])
        except (json.JSONDecodeError, AttributeError):
            logger.warning(f"Unparseable suggested replies: {content[:100]}")
            return []

        return [str(r).strip() for r in replies if str(r).strip()][:3]
