"""
Convergence Poller Module
=========================

Blocks the calling thread until a remote condition becomes true, the
maximum wait elapses, or the wait is cancelled.

AWS applies many changes asynchronously (certificates are issued, domains
finish processing, accelerators deploy). Callers hand the poller a
zero-argument ``condition`` that re-reads remote state, plus a
:class:`PollPolicy` with a fixed check interval and an upper bound.

Classes
-------
PollPolicy
    Interval, maximum wait and prompt flag for one wait.
PollResult
    Outcome of a successful wait.
SystemClock
    Monotonic clock that sleeps on a ``threading.Event``.
ConvergencePoller
    The polling loop.

Example
-------
>>> from aws_converge.core.poller import ConvergencePoller, PollPolicy
>>>
>>> poller = ConvergencePoller()
>>> policy = PollPolicy(max_wait=1800, interval=10)
>>> poller.wait(lambda: acm_status() == "ISSUED", policy)
PollResult(attempts=4, elapsed=30.0)

Notes
-----
The interval is fixed: there is no backoff. Errors raised by the
condition abort the wait unless ``is_transient`` accepts them, in which
case they count as "not yet true".
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from aws_converge.core.exceptions import (
    PollCancelledError,
    PollTimeoutError,
    ResourceNotYetAvailableError,
)

# Module logger
logger = logging.getLogger(__name__)

PollCondition = Callable[[], bool]
TransientPredicate = Callable[[BaseException], bool]


@dataclass(frozen=True)
class PollPolicy:
    """
    Timing parameters for a single wait.

    Parameters
    ----------
    max_wait : float
        Upper bound in seconds before the wait fails with PollTimeoutError.
    interval : float
        Seconds to sleep between two checks.
    prompt_on_timeout : bool, default=False
        Whether an interactive caller should offer to keep waiting after a
        timeout. The poller itself ignores it.

    Raises
    ------
    ValueError
        If ``max_wait`` is negative or ``interval`` is not positive.
    """

    max_wait: float
    interval: float
    prompt_on_timeout: bool = False

    def __post_init__(self) -> None:
        if self.max_wait < 0:
            raise ValueError(f"max_wait must be >= 0, got {self.max_wait}")
        if self.interval <= 0:
            raise ValueError(f"interval must be > 0, got {self.interval}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "max_wait": self.max_wait,
            "interval": self.interval,
            "prompt_on_timeout": self.prompt_on_timeout,
        }


@dataclass
class PollResult:
    """Outcome of a wait that converged."""

    attempts: int
    elapsed: float
    policy: PollPolicy
    description: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "description": self.description,
            "attempts": self.attempts,
            "elapsed_seconds": round(self.elapsed, 3),
            "policy": self.policy.to_dict(),
        }

    def __repr__(self) -> str:
        return f"PollResult(attempts={self.attempts}, elapsed={self.elapsed:.1f})"


class SystemClock:
    """
    Wall clock used outside of tests.

    ``sleep`` waits on an Event, so a cancelled wait wakes up immediately
    instead of finishing the interval.
    """

    def now(self) -> float:
        return time.monotonic()

    def sleep(self, seconds: float, cancel_event: Optional[threading.Event] = None) -> bool:
        """
        Sleep for ``seconds``.

        Returns
        -------
        bool
            True if ``cancel_event`` was set before the time ran out.
        """
        if cancel_event is None:
            time.sleep(seconds)
            return False
        return cancel_event.wait(seconds)


def default_is_transient(error: BaseException) -> bool:
    """Only the explicit "not yet available" signal is transient by default."""
    return isinstance(error, ResourceNotYetAvailableError)


class ConvergencePoller:
    """
    Repeatedly evaluates a condition until it holds.

    Parameters
    ----------
    clock : object, optional
        Provides ``now()`` and ``sleep(seconds, cancel_event) -> bool``.
        Defaults to :class:`SystemClock`.
    is_transient : callable, optional
        Predicate deciding whether an exception raised by the condition
        means "not yet true". Defaults to :func:`default_is_transient`.

    Examples
    --------
    Waiting with cancellation from another thread:

    >>> stop = threading.Event()
    >>> poller = ConvergencePoller()
    >>> poller.wait(is_deployed, PollPolicy(1200, 10), cancel_event=stop)

    Treating a service "not found" error as transient:

    >>> from aws_converge.waiters.conditions import client_error_codes
    >>> poller = ConvergencePoller(
    ...     is_transient=client_error_codes("ResourceNotFoundException")
    ... )
    """

    def __init__(
        self,
        clock: Optional[Any] = None,
        is_transient: Optional[TransientPredicate] = None,
    ) -> None:
        self.clock = clock or SystemClock()
        self.is_transient = is_transient or default_is_transient

    def wait(
        self,
        condition: PollCondition,
        policy: PollPolicy,
        cancel_event: Optional[threading.Event] = None,
        description: Optional[str] = None,
    ) -> PollResult:
        """
        Block until ``condition()`` returns True.

        Parameters
        ----------
        condition : callable
            Zero-argument callable re-reading remote state.
        policy : PollPolicy
            Interval and maximum wait.
        cancel_event : threading.Event, optional
            When set, the wait stops before the next check.
        description : str, optional
            What is being waited for, used in logs and errors.

        Returns
        -------
        PollResult
            Number of checks and elapsed seconds.

        Raises
        ------
        PollTimeoutError
            If ``policy.max_wait`` elapsed without a true result.
        PollCancelledError
            If ``cancel_event`` was set.
        Exception
            Any non-transient error from ``condition()``, unchanged.
        """
        target = description or getattr(condition, "__name__", "condition")
        start = self.clock.now()
        attempts = 0

        logger.debug(
            f"Waiting for {target} "
            f"(max_wait={policy.max_wait}s, interval={policy.interval}s)"
        )

        while True:
            if cancel_event is not None and cancel_event.is_set():
                raise PollCancelledError(self.clock.now() - start, attempts, description)

            attempts += 1
            if self._check(condition, target, attempts):
                elapsed = self.clock.now() - start
                logger.info(f"{target} converged after {elapsed:.1f}s ({attempts} checks)")
                return PollResult(
                    attempts=attempts,
                    elapsed=elapsed,
                    policy=policy,
                    description=description,
                )

            elapsed = self.clock.now() - start
            if elapsed >= policy.max_wait:
                logger.warning(f"Timed out waiting for {target} after {elapsed:.1f}s")
                raise PollTimeoutError(elapsed, policy, attempts, description)

            remaining = policy.max_wait - elapsed
            if self.clock.sleep(min(policy.interval, remaining), cancel_event):
                raise PollCancelledError(self.clock.now() - start, attempts, description)

    def _check(self, condition: PollCondition, target: str, attempt: int) -> bool:
        """Evaluate the condition once, mapping transient errors to False."""
        try:
            return bool(condition())
        except Exception as e:
            if not self.is_transient(e):
                raise
            logger.debug(f"{target} not available yet (check {attempt}): {e}")
            return False


def wait_until(
    condition: PollCondition,
    max_wait: float,
    interval: float,
    cancel_event: Optional[threading.Event] = None,
    is_transient: Optional[TransientPredicate] = None,
    description: Optional[str] = None,
) -> PollResult:
    """
    Convenience wrapper around a default :class:`ConvergencePoller`.

    Example
    -------
    >>> wait_until(lambda: domain_ready(es, "logs"), max_wait=1200, interval=240)
    """
    poller = ConvergencePoller(is_transient=is_transient)
    return poller.wait(
        condition,
        PollPolicy(max_wait=max_wait, interval=interval),
        cancel_event=cancel_event,
        description=description,
    )
