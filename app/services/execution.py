"""Execution boundary.

``ExecutionGateway`` is the server side: it consumes a report turn and
performs the terminal transition. The remaining helpers describe the client
side of the contract (retry, transient classification, one report per
prompt) so it can be exercised without a browser.
"""
from __future__ import annotations

import logging
import re
import threading
import time
from collections import OrderedDict
from typing import Any, Callable, TypeVar

from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from app.actions.base import ActionHandler, TurnContext
from app.chat.contracts import ComposedResponse
from app.config import get_settings
from app.domain.action_state import ActionState, assert_valid_transition
from app.domain.action_types import ActionType
from app.domain.errors import (
    DuplicateSubmissionError,
    StateNotFoundError,
    TransientExecutionError,
    ValidationError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

_TRANSIENT_RE = re.compile(r"rpc|timeout|timed out|429|network|gateway|rate limit|econnreset", re.IGNORECASE)

_EXECUTION_STAGES = {ActionState.AWAITING_SECRET_ENTRY, ActionState.AWAITING_EXECUTION}


class ExecutionGateway:
    def apply_report(self, ctx: TurnContext, handler: ActionHandler) -> ComposedResponse:
        pending = handler.pending(ctx)
        if pending is None or pending.prompt_stage not in _EXECUTION_STAGES:
            raise StateNotFoundError(
                f"report for {handler.action_type.value} without a live execution prompt in room {ctx.room_id}",
                user_message=(
                    f"There's no {handler.label} waiting for a result, so this one was ignored."
                ),
            )

        report = ctx.metadata
        error = report.get("error")
        if error:
            return handler.fail(ctx, pending, str(error))

        missing = [name for name in handler.success_fields if not report.get(name)]
        if missing:
            raise ValidationError(
                f"incomplete {handler.action_type.value} report, missing: {', '.join(missing)}",
                user_message=(
                    f"The {handler.label} result was incomplete (missing {', '.join(missing)}). "
                    "Please finish it in the secure dialog again."
                ),
            )

        assert_valid_transition(pending.prompt_stage, ActionState.COMPLETED)
        logger.info("%s: completed room_id=%s", handler.action_type.value, ctx.room_id)
        return handler.complete(ctx, pending, report)


def is_transient_error(exc: BaseException) -> bool:
    if isinstance(exc, TransientExecutionError):
        return True
    if isinstance(exc, (TimeoutError, ConnectionError)):
        return True
    return bool(_TRANSIENT_RE.search(str(exc)))


def call_with_retry(
    fn: Callable[[], T],
    *,
    max_attempts: int | None = None,
    base_delay_s: float | None = None,
    max_delay_s: float | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """
    Run ``fn`` retrying transient failures with exponential backoff
    (base, 2*base, 4*base, ... capped). Anything else is raised immediately.
    """
    settings = get_settings()
    retrying = Retrying(
        stop=stop_after_attempt(max_attempts or settings.execution_max_attempts),
        wait=wait_exponential(
            multiplier=base_delay_s if base_delay_s is not None else settings.execution_base_delay_s,
            max=max_delay_s if max_delay_s is not None else settings.execution_max_delay_s,
        ),
        retry=retry_if_exception(is_transient_error),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        sleep=sleep,
        reraise=True,
    )
    return retrying(fn)


def build_report(
    action_type: ActionType,
    result: dict[str, Any] | None = None,
    error: str | None = None,
) -> dict[str, Any]:
    """Report turn the client posts back once execution finishes."""
    if error:
        return {"source": action_type.value, "text": "", "metadata": {"error": error}}
    return {"source": action_type.value, "text": "", "metadata": dict(result or {})}


class SubmissionGuard:
    """
    At most one execution per confirmed prompt.

    ``run`` claims the prompt id, executes with retry and returns the report
    to post. A second claim for the same prompt raises. Only the newest
    ``max_claims`` prompt ids are remembered.
    """

    def __init__(self, max_claims: int = 1024) -> None:
        self._claimed: OrderedDict[str, None] = OrderedDict()
        self._max_claims = max_claims
        self._lock = threading.Lock()

    def claim(self, prompt_id: str) -> None:
        with self._lock:
            if prompt_id in self._claimed:
                raise DuplicateSubmissionError(f"prompt {prompt_id} already submitted")
            self._claimed[prompt_id] = None
            while len(self._claimed) > self._max_claims:
                self._claimed.popitem(last=False)

    def is_claimed(self, prompt_id: str) -> bool:
        with self._lock:
            return prompt_id in self._claimed

    def run(
        self,
        prompt_id: str,
        action_type: ActionType,
        fn: Callable[[], dict[str, Any]],
        *,
        sleep: Callable[[float], None] = time.sleep,
    ) -> dict[str, Any]:
        self.claim(prompt_id)
        try:
            result = call_with_retry(fn, sleep=sleep)
        except Exception as e:
            logger.warning("%s: execution failed prompt_id=%s: %s", action_type.value, prompt_id, e)
            return build_report(action_type, error=str(e))
        return build_report(action_type, result=result)
