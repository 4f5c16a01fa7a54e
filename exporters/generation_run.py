#!/usr/bin/env python3
"""
Generation Run Module
Per-call state shared by the emitters, passed explicitly instead of captured.
"""

import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from core.numeric import NumberFormatter
from core.options import GeneratorOptions
from core.scene_data import AnimationClip, SceneGraph
from core.scene_walker import SceneWalker, WalkResult
from .dialect import JSXDialect, MarkupDialect


class ProgressReporter:
    """Forwards progress messages to a sink, in batches at most once per interval

    Messages that arrive inside the interval are held back and delivered
    with the next batch, or by flush(), so none are lost. Reports are
    instrumentation only; nothing in the generator depends on whether or
    when they are delivered.

    Args:
        callback: Sink, or None to disable reporting
        interval: Minimum seconds between two deliveries
    """

    def __init__(self, callback: Optional[Callable[[str], None]] = None, interval: float = 0.0,
                 clock: Callable[[], float] = time.monotonic):
        self.callback = callback
        self.interval = interval
        self.clock = clock
        self._last = None
        self._pending: List[str] = []

    def report(self, message: str) -> None:
        if self.callback is None:
            return
        self._pending.append(message)
        now = self.clock()
        if self._last is not None and now - self._last < self.interval:
            return
        self._last = now
        self.flush()

    def flush(self) -> None:
        """Deliver every held-back message"""
        pending, self._pending = self._pending, []
        for message in pending:
            self.callback(message)


@dataclass
class GenerationRun:
    """Everything one generation call needs

    Attributes:
        scene: Input scene graph
        options: Generator options
        walk: Result of walking the scene
        formatter: Number formatter configured with the run's precision
        dialect: Markup dialect
        progress: Node-level progress reporter
    """
    scene: SceneGraph
    options: GeneratorOptions
    walk: WalkResult
    formatter: NumberFormatter
    dialect: MarkupDialect
    progress: ProgressReporter = field(default_factory=ProgressReporter)

    @property
    def animations(self) -> List[AnimationClip]:
        return self.scene.animations

    @classmethod
    def create(cls, scene: SceneGraph, options: Optional[GeneratorOptions] = None,
               dialect: Optional[MarkupDialect] = None) -> 'GenerationRun':
        """Walk the scene and set up a run

        Raises:
            SceneValidationError: If the scene graph is malformed
        """
        options = options or GeneratorOptions()
        dialect = dialect or JSXDialect()
        walk = SceneWalker(options.instance, options.instance_all).walk(scene)
        return cls(
            scene=scene,
            options=options,
            walk=walk,
            formatter=NumberFormatter(options.precision, dialect.pi_token),
            dialect=dialect,
            progress=ProgressReporter(options.progress_callback, options.progress_interval),
        )
