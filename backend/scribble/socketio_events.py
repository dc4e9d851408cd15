import asyncio
import base64
import io
from typing import Dict, List, Optional, Tuple

from flask import current_app, request
from flask_socketio import emit

from scribble import socketio
from scribble.services.drawing.accuracy import AccuracyScorer
from scribble.services.drawing.reference import HttpReferenceProvider
from scribble.services.drawing.surface import DrawingSurface
from scribble.services.games.results import ResultStore
from scribble.services.games.scheduler import schedule_session_clock
from scribble.services.games.session import Event, SessionController, Settings
from scribble.services.games.words import WordSourceError, load_words


# One controller per connected client, keyed by Socket.IO sid
_controllers: Dict[str, SessionController] = {}


def build_controller(app) -> SessionController:
    cfg = app.config
    provider = HttpReferenceProvider(cfg['REFERENCE_IMAGE_URL'], timeout=float(cfg.get('REFERENCE_TIMEOUT_SEC', 5)))
    scorer = AccuracyScorer(
        provider,
        grid_size=int(cfg.get('COMPARE_GRID_SIZE', 64)),
        threshold=int(cfg.get('ACTIVE_PIXEL_THRESHOLD', 240)),
        amplification=float(cfg.get('ACCURACY_AMPLIFICATION', 2)),
        fallback=float(cfg.get('FALLBACK_ACCURACY', 50)),
    )
    surface = DrawingSurface(
        int(cfg.get('CANVAS_WIDTH', 800)),
        int(cfg.get('CANVAS_HEIGHT', 600)),
        undo_limit=int(cfg.get('UNDO_LIMIT', 20)),
    )
    return SessionController(load_words, scorer, ResultStore(), surface=surface,
                             settings=Settings.from_config(cfg))


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _controller() -> SessionController:
    sid = _get_sid()
    controller = _controllers.get(sid)
    if controller is None:
        controller = build_controller(current_app)
        _controllers[sid] = controller
    return controller


def _emit_events(events: List[Event]) -> None:
    for event in events:
        emit(event.name, event.payload)


def _dispatch(command: str, *args, **kwargs) -> None:
    """Apply a controller command and emit its events under the controller lock,
    so they interleave with clock ticks in a single order."""
    controller = _controller()
    with controller.lock:
        _emit_events(getattr(controller, command)(*args, **kwargs))


def _background_sink(sid: str, namespace: str):
    def _sink(events: List[Event]) -> None:
        for event in events:
            socketio.emit(event.name, event.payload, to=sid, namespace=namespace)
    return _sink


def _point(data) -> Optional[Tuple[Tuple[float, float], Optional[Tuple[float, float]]]]:
    data = data or {}
    try:
        point = (float(data['x']), float(data['y']))
    except (KeyError, TypeError, ValueError):
        return None
    display = None
    if data.get('display_width') and data.get('display_height'):
        try:
            display = (float(data['display_width']), float(data['display_height']))
        except (TypeError, ValueError):
            display = None
    return point, display


def handle_connect(auth=None):
    controller = _controller()
    emit('connected', {'message': 'Connected to /ws', 'state': controller.state()})


def handle_disconnect(reason=None):
    controller = _controllers.pop(_get_sid(), None)
    if controller:
        with controller.lock:
            controller.timer.stop()


def handle_start_game(data):
    data = data or {}
    controller = _controller()
    size = None
    if data.get('width') or data.get('height'):
        try:
            size = (int(data['width']), int(data['height']))
        except (KeyError, TypeError, ValueError):
            emit('error', {'message': 'width and height must both be integers'})
            return
    try:
        with controller.lock:
            resized = controller.resize(*size) if size else []
            events = resized + controller.start_game(data.get('difficulty', 'Easy'), data.get('mode'))
    except WordSourceError as exc:
        current_app.logger.error(f"[session-start-failed] sid={_get_sid()} error={exc}")
        emit('error', {'message': 'Could not load words; the game cannot start.'})
        return
    except ValueError as exc:
        emit('error', {'message': str(exc)})
        return
    _emit_events(events)
    sid = _get_sid()
    schedule_session_clock(current_app._get_current_object(), sid, controller,
                           _background_sink(sid, request.namespace))


def handle_pointer_down(data):
    parsed = _point(data)
    if parsed is None:
        emit('error', {'message': 'x and y are required'})
        return
    point, display = parsed
    _dispatch('pointer_down', point, display, color=(data or {}).get('color'))


def handle_pointer_move(data):
    parsed = _point(data)
    if parsed is None:
        return
    point, display = parsed
    data = data or {}
    try:
        width = float(data['width']) if data.get('width') else None
    except (TypeError, ValueError):
        width = None
    _dispatch('pointer_move', point, display, width=width, color=data.get('color'))


def handle_pointer_up(data=None):
    _dispatch('pointer_up')


def handle_select_tool(data):
    try:
        _dispatch('select_tool', (data or {}).get('tool'))
    except ValueError as exc:
        emit('error', {'message': str(exc)})


def handle_select_color(data):
    _dispatch('select_color', (data or {}).get('color'))


def handle_undo(data=None):
    _dispatch('undo')


def handle_clear(data=None):
    _dispatch('clear')


def handle_resize(data):
    data = data or {}
    try:
        width, height = int(data['width']), int(data['height'])
    except (KeyError, TypeError, ValueError):
        emit('error', {'message': 'width and height are required'})
        return
    _dispatch('resize', width, height)


def handle_submit(data=None):
    _emit_events(asyncio.run(_controller().submit_drawing()))


def handle_toggle_pause(data=None):
    _dispatch('toggle_pause')


def handle_go_home(data=None):
    _dispatch('go_home')


def handle_request_canvas(data=None):
    controller = _controller()
    with controller.lock:
        snapshot = controller.surface.snapshot()
    out = io.BytesIO()
    snapshot.to_image().save(out, format='PNG')
    emit('canvas', {
        'width': snapshot.width,
        'height': snapshot.height,
        'png': base64.b64encode(out.getvalue()).decode('ascii'),
    })


_HANDLERS = {
    'connect': handle_connect,
    'disconnect': handle_disconnect,
    'start_game': handle_start_game,
    'pointer_down': handle_pointer_down,
    'pointer_move': handle_pointer_move,
    'pointer_up': handle_pointer_up,
    'select_tool': handle_select_tool,
    'select_color': handle_select_color,
    'undo': handle_undo,
    'clear': handle_clear,
    'resize': handle_resize,
    'submit': handle_submit,
    'toggle_pause': handle_toggle_pause,
    'go_home': handle_go_home,
    'request_canvas': handle_request_canvas,
}


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    for name, handler in _HANDLERS.items():
        socketio.on_event(name, handler, namespace='/ws')

    if testing:
        for name, handler in _HANDLERS.items():
            socketio.on_event(name, handler, namespace='/')
