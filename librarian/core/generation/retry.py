"""
Generation retry controller.

Drives the orchestrator until a candidate is accepted or the attempt budget
runs out. Extraction, schema and validation failures are retried, with the
failure reasons optionally appended to the next prompt. Capability failures
are not retried and propagate immediately.

Attempts run strictly one after another. A caller-supplied cancel event or
timeout is checked between attempts, so an in-flight generation call always
finishes before the loop stops.

Dependencies: tenacity, asyncio
System role: Bounded generate -> validate -> retry loop
"""

import asyncio
import logging
import random

from tenacity import (
    AsyncRetrying,
    RetryError,
    retry_if_exception_type,
    stop_after_attempt,
    stop_after_delay,
    stop_when_event_set,
    wait_none,
)

from librarian.core.exceptions import (
    BudgetExhausted,
    GenerationCancelled,
    LibrarianException,
    RecoverableGenerationError,
)
from librarian.core.generation.orchestrator import GenerationOrchestrator
from librarian.core.generation.parsing import to_artifact
from librarian.core.generation.prompts import TaskTemplate
from librarian.core.generation.quality import select_best
from librarian.models.artifact import Candidate, GenerationResult
from librarian.models.chunk import Chunk

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 3


class RetryController:
    """Bounded retry loop around the generation orchestrator."""

    def __init__(
        self,
        orchestrator: GenerationOrchestrator,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        candidates_per_attempt: int = 1,
        include_feedback: bool = True,
        timeout_seconds: float | None = None,
        rng: random.Random | None = None,
        shuffle_options: bool = True,
    ) -> None:
        """
        Initialize retry controller.

        Args:
            orchestrator: Single-attempt generation pipeline
            max_attempts: Attempt budget per chunk
            candidates_per_attempt: Candidates generated per attempt; the
                highest quality valid one is kept
            include_feedback: Append failure reasons to the next prompt
            timeout_seconds: Stop retrying after this much time
            rng: Random source for quiz option shuffling
            shuffle_options: Shuffle accepted quiz options
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if candidates_per_attempt < 1:
            raise ValueError("candidates_per_attempt must be at least 1")

        self.orchestrator = orchestrator
        self.max_attempts = max_attempts
        self.candidates_per_attempt = candidates_per_attempt
        self.include_feedback = include_feedback
        self.timeout_seconds = timeout_seconds
        self.rng = rng
        self.shuffle_options = shuffle_options

    def _stop_condition(self, cancel_event: asyncio.Event | None):
        stop = stop_after_attempt(self.max_attempts)
        if cancel_event is not None:
            stop = stop | stop_when_event_set(cancel_event)
        if self.timeout_seconds is not None:
            stop = stop | stop_after_delay(self.timeout_seconds)
        return stop

    async def _attempt(
        self,
        chunk: Chunk,
        task: TaskTemplate,
        feedback: list[str] | None,
    ) -> Candidate:
        if self.candidates_per_attempt == 1:
            return await self.orchestrator.produce_candidate(chunk, task, feedback)

        # Calls still queue on the model handle lock; gather keeps result order
        outcomes = await asyncio.gather(
            *(
                self.orchestrator.produce_candidate(chunk, task, feedback)
                for _ in range(self.candidates_per_attempt)
            ),
            return_exceptions=True,
        )

        candidates = []
        failures: list[RecoverableGenerationError] = []
        for outcome in outcomes:
            if isinstance(outcome, RecoverableGenerationError):
                failures.append(outcome)
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                candidates.append(outcome)

        if not candidates:
            raise failures[0]

        logger.debug(
            f"{__name__}:_attempt - {len(candidates)}/{self.candidates_per_attempt} "
            f"valid candidates for chunk {chunk.id}"
        )
        return select_best(candidates, chunk.text)

    async def generate(
        self,
        chunk: Chunk,
        task: TaskTemplate,
        cancel_event: asyncio.Event | None = None,
    ) -> GenerationResult:
        """
        Generate an accepted artifact for one chunk.

        Args:
            chunk: Chunk to generate from
            task: Task template
            cancel_event: Stops further attempts once set

        Returns:
            GenerationResult: Accepted artifact and attempts used

        Raises:
            BudgetExhausted: Every attempt failed
            GenerationCancelled: Cancel event or timeout stopped the loop
            CapabilityFailure: Generator failed (not retried)
        """
        if cancel_event is not None and cancel_event.is_set():
            raise GenerationCancelled(chunk.id, 0)

        feedback: list[str] | None = None
        last_reasons: list[str] = []
        attempts = 0
        candidate: Candidate | None = None

        retrying = AsyncRetrying(
            stop=self._stop_condition(cancel_event),
            wait=wait_none(),
            retry=retry_if_exception_type(RecoverableGenerationError),
            reraise=False,
        )

        try:
            async for attempt in retrying:
                with attempt:
                    attempts = attempt.retry_state.attempt_number
                    try:
                        candidate = await self._attempt(chunk, task, feedback)
                    except RecoverableGenerationError as e:
                        last_reasons = e.reasons
                        if self.include_feedback:
                            feedback = e.reasons
                        logger.warning(
                            f"{__name__}:generate - Attempt {attempts}/{self.max_attempts} "
                            f"for chunk {chunk.id} failed ({type(e).__name__}): {last_reasons}"
                        )
                        raise
        except RetryError:
            if attempts < self.max_attempts:
                logger.info(
                    f"{__name__}:generate - Stopped after {attempts} attempts for chunk {chunk.id}"
                )
                raise GenerationCancelled(chunk.id, attempts)
            logger.error(
                f"{__name__}:generate - Budget exhausted for chunk {chunk.id} after {attempts} attempts"
            )
            raise BudgetExhausted(chunk.id, attempts, last_reasons)
        except LibrarianException as e:
            logger.error(f"{__name__}:generate - Unrecoverable failure for chunk {chunk.id}: {e}")
            raise

        artifact = to_artifact(candidate, chunk, rng=self.rng, shuffle=self.shuffle_options)
        logger.info(
            f"{__name__}:generate - Accepted {task.kind.value} for chunk {chunk.id} "
            f"after {attempts} attempt(s)"
        )
        return GenerationResult(artifact=artifact, attempts=attempts, chunk_id=chunk.id)
