from typing import Callable, List

from scribble import socketio
from .session import Event, Screen, SessionController


EventSink = Callable[[List[Event]], None]


def schedule_session_clock(app, sid: str, controller: SessionController, sink: EventSink) -> None:
    """Drive the controller's countdown once per second for a client.

    - No-ops in TESTING mode unless ENABLE_SCHEDULER_IN_TESTS is set
    - One worker per timer generation; a worker whose generation was
      superseded (new game, go home, game over) aborts without ticking
    - Tick events are handed to ``sink`` for delivery to the client
    """
    if app.config.get('TESTING') and not app.config.get('ENABLE_SCHEDULER_IN_TESTS'):
        return

    expected_generation = controller.timer.generation
    app.logger.info(
        f"[timer-set] sid={sid} generation={expected_generation} remaining={controller.timer.remaining}s"
    )

    def _worker(gen: int):
        try:
            hb = int(app.config.get('TIMER_HEARTBEAT_SEC', 0))
        except (TypeError, ValueError):
            hb = 0
        ticks = 0
        while True:
            socketio.sleep(1)
            # generation check and tick must see the same controller state
            with controller.lock:
                if controller.timer.generation != gen:
                    app.logger.info(
                        f"[timer-abort] sid={sid} generation={gen} superseded by {controller.timer.generation}"
                    )
                    return
                with app.app_context():
                    events = controller.tick()
                    if events:
                        sink(events)
            ticks += 1
            if hb and hb > 0 and ticks % hb == 0:
                app.logger.info(f"[timer-heartbeat] sid={sid} generation={gen} remaining={controller.timer.remaining}s")
            if controller.screen not in (Screen.PLAYING, Screen.PAUSED):
                app.logger.info(f"[timer-fire] sid={sid} generation={gen} session over screen={controller.screen.value}")
                return

    socketio.start_background_task(_worker, expected_generation)
