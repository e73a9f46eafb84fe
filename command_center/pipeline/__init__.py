"""
Readiness pipeline: the staged sequence that gates when forecast data may be
shown, and the schedulers that drive it.
"""

from .readiness import ReadinessConfig, ReadinessStateMachine
from .scheduler import ManualScheduler, AsyncioScheduler, TimerHandle

__all__ = [
    'ReadinessConfig',
    'ReadinessStateMachine',
    'ManualScheduler',
    'AsyncioScheduler',
    'TimerHandle',
]
