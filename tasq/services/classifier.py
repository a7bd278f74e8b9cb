"""
Task classifier: urgency/importance assessment by an external model
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional
from tasq.api.openai_client import OpenAIClient, extract_json
from tasq.models.classification import ClassificationResult
from tasq.models.taxonomy import Level
from tasq.services.prompt_manager import PromptManager
from tasq.utils.error_handler import ClassifierError
from tasq.utils.logger import logger


class Classifier(ABC):
    """Contract for anything that can assess a task"""

    @abstractmethod
    async def classify(
        self,
        title: str,
        description: str,
        complete_by: datetime,
        user_urgency: Optional[Level] = None,
        user_importance: Optional[Level] = None,
    ) -> ClassificationResult:
        """
        Assess a task

        Returns:
            ClassificationResult with urgency, importance and justification

        Raises:
            ClassifierError: On any transport, parsing or schema failure
        """
        ...


class OpenAIClassifier(Classifier):
    """Classifier backed by an OpenAI chat model"""

    def __init__(
        self,
        openai_client: Optional[OpenAIClient] = None,
        prompt_manager: Optional[PromptManager] = None,
    ):
        self.openai_client = openai_client or OpenAIClient()
        self.prompt_manager = prompt_manager or PromptManager()
        self.logger = logger

    async def classify(
        self,
        title: str,
        description: str,
        complete_by: datetime,
        user_urgency: Optional[Level] = None,
        user_importance: Optional[Level] = None,
    ) -> ClassificationResult:
        messages = self.prompt_manager.build_messages(
            title=title,
            description=description,
            complete_by=complete_by,
            user_urgency=user_urgency,
            user_importance=user_importance,
        )

        try:
            self.logger.info(f"[Classifier] Classifying task: {title}")
            response = await self.openai_client.chat_completion(messages=messages, json_mode=True)
            result = ClassificationResult.model_validate(extract_json(response))
        except Exception as e:
            # Callers only see one failure kind, whatever the cause
            self.logger.error(f"[Classifier] Classification failed for '{title}': {e}", exc_info=True)
            raise ClassifierError(f"AI analysis failed: {e}", cause=e) from e

        self.logger.info(
            f"[Classifier] '{title}' -> urgency={result.urgency.value}, importance={result.importance.value}"
        )
        return result
