"""
Discussion tutor.

Free-text follow-up conversations about a study item the learner has just
answered. A multiple choice question is discussed with the learner's choice
framed as correct or incorrect; an open-ended question gets a Socratic
study-partner framing built around its key points.

Output is plain prose, so no JSON extraction or validation happens here;
the response is only trimmed.

Dependencies: langchain_core.prompts
System role: Tutor conversations over generated artifacts
"""

import logging
from typing import Sequence

from langchain_core.prompts import ChatPromptTemplate

from librarian.boundary.capabilities import GenerationParams, PromptMessages
from librarian.boundary.model_handle import ExclusiveModelHandle
from librarian.models.artifact import DiscussionMessage, OpenEndedQuestion, QuizQuestion

logger = logging.getLogger(__name__)

QUIZ_TUTOR_PROMPT = ChatPromptTemplate.from_messages([
    ("system", """You are a helpful study tutor. The student just answered a quiz question and wants to discuss it.

Question: {question}
Student's answer: {user_answer} ({verdict})
Correct answer: {correct_answer}
Explanation: {explanation}
Source: {source}

Your role:
- If they got it right: Reinforce why it's correct, add interesting context
- If they got it wrong: Be encouraging, explain why the correct answer is right
- Answer their follow-up questions clearly and helpfully
- Keep responses concise (2-3 paragraphs max)
- Focus on helping them understand and remember the material"""),
    ("human", "{history}{message}"),
])

OPEN_ENDED_TUTOR_PROMPT = ChatPromptTemplate.from_messages([
    ("system", """You are a thoughtful study partner engaging in Socratic dialogue. Your role is to:
- Acknowledge what the student got right
- Gently probe areas they might have missed or misunderstood
- Ask follow-up questions to deepen understanding
- Provide hints rather than direct answers when they're stuck
- Be encouraging and conversational, not lecturing
- Keep responses concise (2-3 paragraphs max)

Context from their study material:
{context}

The discussion topic: {question}
Key concepts to explore: {key_points}"""),
    ("human", "{history}{message}"),
])


def format_history(history: Sequence[DiscussionMessage]) -> str:
    """Render earlier turns as a transcript preceding the new message."""
    if not history:
        return ""
    lines = ["Conversation so far:"]
    for turn in history:
        speaker = "Student" if turn.is_user else "Tutor"
        lines.append(f"{speaker}: {turn.content}")
    lines.append("")
    lines.append("Student: ")
    return "\n".join(lines)


class DiscussionTutor:
    """Generates tutor replies for quiz and open-ended follow-ups."""

    def __init__(
        self,
        model_handle: ExclusiveModelHandle,
        quiz_params: GenerationParams | None = None,
        open_ended_params: GenerationParams | None = None,
    ) -> None:
        self.model_handle = model_handle
        self.quiz_params = quiz_params or GenerationParams(max_tokens=512, temperature=0.7)
        self.open_ended_params = open_ended_params or GenerationParams(max_tokens=1024, temperature=0.7)

    @staticmethod
    def _to_prompt(template: ChatPromptTemplate, **variables) -> PromptMessages:
        messages = template.format_messages(**variables)
        return PromptMessages(system=messages[0].content, user=messages[1].content)

    def build_quiz_prompt(
        self,
        question: QuizQuestion,
        user_message: str,
        history: Sequence[DiscussionMessage] = (),
    ) -> PromptMessages:
        if question.user_answer is None:
            user_answer, verdict = "none", "NOT ANSWERED"
        else:
            user_answer = question.options[question.user_answer]
            verdict = "CORRECT" if question.is_correct else "INCORRECT"

        return self._to_prompt(
            QUIZ_TUTOR_PROMPT,
            question=question.question,
            user_answer=user_answer,
            verdict=verdict,
            correct_answer=question.correct_option,
            explanation=question.explanation,
            source=question.source,
            history=format_history(history),
            message=user_message,
        )

    def build_open_ended_prompt(
        self,
        question: OpenEndedQuestion,
        user_message: str,
        history: Sequence[DiscussionMessage] = (),
    ) -> PromptMessages:
        return self._to_prompt(
            OPEN_ENDED_TUTOR_PROMPT,
            context=question.context,
            question=question.question,
            key_points=", ".join(question.key_points),
            history=format_history(history),
            message=user_message,
        )

    async def discuss_quiz(
        self,
        question: QuizQuestion,
        user_message: str,
        history: Sequence[DiscussionMessage] = (),
    ) -> str:
        """
        Reply to a follow-up about an answered quiz question.

        Args:
            question: Quiz question, with the learner's answer attached
            user_message: Learner's new message
            history: Earlier discussion turns

        Returns:
            str: Tutor reply

        Raises:
            CapabilityFailure: When the generator fails
        """
        prompt = self.build_quiz_prompt(question, user_message, history)
        reply = await self.model_handle.generate_text(prompt, self.quiz_params)
        logger.debug(f"{__name__}:discuss_quiz - {len(reply)} chars for chunk {question.chunk_id}")
        return reply.strip()

    async def discuss_open_ended(
        self,
        question: OpenEndedQuestion,
        user_message: str,
        history: Sequence[DiscussionMessage] = (),
    ) -> str:
        """Reply to the learner's answer or follow-up on an open-ended question."""
        prompt = self.build_open_ended_prompt(question, user_message, history)
        reply = await self.model_handle.generate_text(prompt, self.open_ended_params)
        logger.debug(f"{__name__}:discuss_open_ended - {len(reply)} chars for chunk {question.chunk_id}")
        return reply.strip()
