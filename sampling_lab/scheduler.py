"""
Dirty-flag redraw gate.

Anything that changes what is on screen calls ``mark()``; the host may call
``run(draw)`` every frame and drawing only happens when something changed.
"""

from typing import Callable


class RedrawScheduler:
    def __init__(self, dirty: bool = True):
        self._dirty = bool(dirty)
        self.frames = 0

    @property
    def dirty(self) -> bool:
        return self._dirty

    def mark(self) -> None:
        self._dirty = True

    def run(self, draw: Callable[[], None]) -> bool:
        if not self._dirty:
            return False
        draw()
        # cleared only after a successful draw so a failed frame is retried
        self._dirty = False
        self.frames += 1
        return True
