"""
Readiness State Machine - staged data-readiness pipeline for the dashboard.

The dashboard does not show any forecast data until a short, ordered series
of "analysis" stages has elapsed.  This module owns that sequence and is the
only writer of the session's ``ReadinessState``.

State diagram
-------------
::

    Loading(0) -> Loading(1) -> ... -> Loading(N-1) -> Ready(data)
                                                    \\-> Failed(reason)

Timing
------
Every stage boundary is an offset from mount (``ReadinessConfig.
stage_offsets_s``), not from the previous transition, and all boundaries are
scheduled once when the session starts.  If the host event loop is late the
transitions are delayed but their order never changes.

Boundary ``k`` moves ``Loading(k)`` to ``Loading(k + 1)``.  The last
boundary invokes the forecast provider instead and publishes ``Ready`` with
its result, or ``Failed`` if every attempt raised.

Guards
------
- Exactly one terminal transition per session.  A boundary that fires after
  ``Ready`` / ``Failed`` is dropped.
- A boundary that does not match the current stage index is dropped, so the
  stage index can only move forward by one.
- ``teardown()`` cancels all pending boundaries and detaches listeners; a
  callback that still fires afterwards is a no-op.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from ..core.config import STAGE_LABELS, STAGE_OFFSETS_S, PROVIDER_ATTEMPTS, PROGRESS_TRANSITION_S
from ..core.errors import ConfigurationError, ProviderFailure
from ..models import DashboardData, ReadinessState, Loading, Ready, Failed

logger = logging.getLogger(__name__)

Listener = Callable[[ReadinessState], None]


@dataclass
class ReadinessConfig:
    """
    Configuration for the readiness sequence.

    Attributes:
        stage_labels: Ordered stage names; their count is the stage count.
        stage_offsets_s: Seconds from mount at which each stage ends.  Must
            be strictly increasing and have one entry per stage.
        provider_attempts: Provider calls made at the final boundary before
            the session fails.
        progress_transition_s: Duration of the progress bar animation.
    """
    stage_labels: Tuple[str, ...] = STAGE_LABELS
    stage_offsets_s: Tuple[float, ...] = STAGE_OFFSETS_S
    provider_attempts: int = PROVIDER_ATTEMPTS
    progress_transition_s: float = PROGRESS_TRANSITION_S

    def __post_init__(self):
        self.stage_labels = tuple(self.stage_labels)
        self.stage_offsets_s = tuple(float(o) for o in self.stage_offsets_s)

        if not self.stage_labels:
            raise ConfigurationError("At least one readiness stage is required")
        if len(self.stage_offsets_s) != len(self.stage_labels):
            raise ConfigurationError(
                f"Expected {len(self.stage_labels)} stage offsets, got {len(self.stage_offsets_s)}"
            )
        if self.stage_offsets_s[0] < 0:
            raise ConfigurationError("Stage offsets must be non-negative")
        if any(b <= a for a, b in zip(self.stage_offsets_s, self.stage_offsets_s[1:])):
            raise ConfigurationError(f"Stage offsets must increase strictly: {self.stage_offsets_s}")
        if self.provider_attempts < 1:
            raise ConfigurationError("provider_attempts must be at least 1")
        if self.progress_transition_s < 0:
            raise ConfigurationError("progress_transition_s must be non-negative")

    @property
    def stage_count(self) -> int:
        return len(self.stage_labels)


class ReadinessStateMachine:
    """Drives one dashboard session from ``Loading(0)`` to a terminal state.

    Args:
        provider: Object with ``fetch_dashboard_data()``.
        scheduler: Object with ``now()`` and ``call_later(delay, callback)``
            (see ``pipeline.scheduler``).
        config: Stage labels, offsets and provider attempts.
    """

    def __init__(self, provider, scheduler, config: Optional[ReadinessConfig] = None):
        self.provider = provider
        self.scheduler = scheduler
        self.config = config or ReadinessConfig()

        self._state: ReadinessState = Loading(0)
        self._progress = self._loading_progress(0)
        self._listeners: List[Listener] = []
        self._handles = []
        self._mounted_at: Optional[float] = None
        self._torn_down = False
        self.history: List[ReadinessState] = [self._state]

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def state(self) -> ReadinessState:
        return self._state

    @property
    def progress(self) -> float:
        """Fraction of stages reached, ``(stage_index + 1) / stage_count``.

        1.0 once ready; a failed session keeps its last loading progress.
        """
        return self._progress

    @property
    def stage_count(self) -> int:
        return self.config.stage_count

    @property
    def started(self) -> bool:
        return self._mounted_at is not None

    @property
    def torn_down(self) -> bool:
        return self._torn_down

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener for every published state.

        Returns:
            A callable that removes the listener again.
        """
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def start(self):
        """Schedule every stage boundary relative to now (mount time)."""
        if self._torn_down:
            raise RuntimeError("Cannot start a session that has been torn down")
        if self.started:
            raise RuntimeError("Readiness session already started")

        self._mounted_at = self.scheduler.now()
        for index, offset in enumerate(self.config.stage_offsets_s):
            delay = self._mounted_at + offset - self.scheduler.now()
            self._handles.append(
                self.scheduler.call_later(delay, lambda k=index: self._on_boundary(k))
            )
        logger.info(
            f"Readiness session started: {self.stage_count} stages, "
            f"boundaries at {self.config.stage_offsets_s}s"
        )

    def teardown(self):
        """Cancel outstanding boundaries; no state is published afterwards."""
        if self._torn_down:
            return
        self._torn_down = True
        for handle in self._handles:
            handle.cancel()
        self._handles.clear()
        self._listeners.clear()
        logger.info(f"Readiness session torn down in state {self._state}")

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _on_boundary(self, index: int):
        if self._torn_down:
            logger.debug(f"Dropping stage boundary {index}: session torn down")
            return
        if self._state.is_terminal:
            logger.debug(f"Dropping stage boundary {index}: already {type(self._state).__name__}")
            return
        if not isinstance(self._state, Loading) or self._state.stage_index != index:
            logger.debug(f"Dropping out-of-order stage boundary {index} in {self._state}")
            return

        if index < self.stage_count - 1:
            self._publish(Loading(index + 1))
        else:
            self._resolve()

    def _resolve(self):
        """Invoke the provider at the final boundary."""
        attempts = self.config.provider_attempts
        reason = "Forecast provider failed"

        for attempt in range(1, attempts + 1):
            try:
                data = self.provider.fetch_dashboard_data()
                if not isinstance(data, DashboardData):
                    raise ProviderFailure(
                        f"Provider returned {type(data).__name__} instead of DashboardData"
                    )
            except ProviderFailure as e:
                reason = str(e) or reason
                logger.warning(f"Provider attempt {attempt}/{attempts} failed: {reason}")
            except Exception as e:
                reason = f"{type(e).__name__}: {e}"
                logger.error(f"Provider attempt {attempt}/{attempts} raised unexpectedly", exc_info=True)
            else:
                if self._torn_down:
                    return
                self._publish(Ready(data))
                return

            if self._torn_down:
                return

        self._publish(Failed(reason))

    def _publish(self, state: ReadinessState):
        self._state = state
        if isinstance(state, Loading):
            self._progress = self._loading_progress(state.stage_index)
        elif isinstance(state, Ready):
            self._progress = 1.0
        self.history.append(state)

        logger.info(f"Readiness -> {state.__class__.__name__} (progress {self._progress:.0%})")
        for listener in list(self._listeners):
            listener(state)

    def _loading_progress(self, stage_index: int) -> float:
        return (stage_index + 1) / self.config.stage_count
