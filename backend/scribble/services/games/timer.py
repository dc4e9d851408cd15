class Timer:
    """Single countdown clock advanced by one-second ticks.

    The clock does not schedule itself; a runtime driver calls tick() once
    per second. ``generation`` increases on every start()/stop() so a driver
    can tell that its clock was replaced and stop firing into a new session.
    """

    def __init__(self, duration: int = 0):
        self.duration = int(duration)
        self.remaining = int(duration)
        self.running = False
        self.paused = False
        self.generation = 0

    @property
    def elapsed(self) -> int:
        return max(0, self.duration - self.remaining)

    def start(self, duration: int) -> int:
        self.duration = max(0, int(duration))
        self.remaining = self.duration
        self.paused = False
        self.running = True
        self.generation += 1
        return self.generation

    def stop(self) -> None:
        if self.running:
            self.generation += 1
        self.running = False

    def pause(self) -> None:
        self.paused = True

    def resume(self) -> None:
        self.paused = False

    def tick(self) -> bool:
        """Count down one second. Returns True exactly once, when the clock hits zero."""
        if not self.running or self.paused:
            return False
        self.remaining = max(0, self.remaining - 1)
        if self.remaining == 0:
            self.running = False
            return True
        return False
