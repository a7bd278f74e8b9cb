"""
Prompt management for the task classifier
"""

from datetime import datetime
from typing import Dict, List, Optional
from tasq.models.taxonomy import Level
from tasq.utils.date_utils import get_current_datetime


class PromptManager:
    """Manager for classification prompts"""

    SYSTEM_PROMPT = """You are a productivity assistant that triages tasks with the Eisenhower Matrix.

For each task decide two independent levels:
- urgency: how soon the task needs attention (Low, Medium or High)
- importance: how much the task contributes to long-term goals (Low, Medium or High)

Take the due date into account relative to today's date.
If the user provided their own assessment, acknowledge it but give an objective perspective.

Reply with ONLY a JSON object with exactly these fields:
{
  "urgency": "Low" | "Medium" | "High",
  "importance": "Low" | "Medium" | "High",
  "justification": "a brief explanation of the classification"
}"""

    def get_system_prompt(self) -> str:
        """
        Get system prompt for the classifier

        Returns:
            System prompt string
        """
        return self.SYSTEM_PROMPT

    def build_task_prompt(
        self,
        title: str,
        description: str,
        complete_by: datetime,
        user_urgency: Optional[Level] = None,
        user_importance: Optional[Level] = None,
        today: Optional[datetime] = None,
    ) -> str:
        """Describe one task for classification"""
        today = today or get_current_datetime()
        return (
            f"Today: {today.strftime('%Y-%m-%d')}\n"
            f"Task Title: {title}\n"
            f"Description: {description or 'No description provided.'}\n"
            f"Due Date: {complete_by.strftime('%Y-%m-%d')}\n"
            f"User Self-Assessed Urgency: {user_urgency.value if user_urgency else 'Not provided'}\n"
            f"User Self-Assessed Importance: {user_importance.value if user_importance else 'Not provided'}"
        )

    def build_messages(self, **task_fields) -> List[Dict[str, str]]:
        return [
            {"role": "system", "content": self.get_system_prompt()},
            {"role": "user", "content": self.build_task_prompt(**task_fields)},
        ]
