"""Session state machine: word progression, pausing and scoring.

The controller never talks to a transport or renderer. Every command
returns the list of events the presentation layer should apply, so the
whole game can be driven and checked without a UI:

    controller = SessionController(load_words, scorer, store)
    events = controller.start_game('Hard')
    events += controller.pointer_down((10, 10))
    events += asyncio.run(controller.submit_drawing())
"""

import functools
import logging
import threading
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from scribble.services.drawing.surface import DrawingSurface, Tool
from .results import SessionResult
from .scoring import ScoreKeeper
from .timer import Timer
from .word_queue import WordQueue
from .words import Difficulty, Word


logger = logging.getLogger(__name__)

TARGET_COUNTS = {
    Difficulty.EASY: 8,
    Difficulty.MEDIUM: 12,
    Difficulty.HARD: 15,
}


class Screen(str, Enum):
    HOME = 'home'
    PLAYING = 'playing'
    PAUSED = 'paused'
    RESULTS = 'results'


class SessionMode(str, Enum):
    # single word, score decays with time, no accuracy gate
    CLASSIC_REVEAL = 'classic_reveal'
    # queue of clued words, each gated on drawing accuracy
    CLUE_ROUND = 'clue_round'

    @classmethod
    def parse(cls, value: Union[str, 'SessionMode', None]) -> 'SessionMode':
        if value is None or value == '':
            return cls.CLUE_ROUND
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f'unknown session mode {value!r}') from None


def target_count(difficulty: Union[str, Difficulty], mode: SessionMode = SessionMode.CLUE_ROUND) -> int:
    if mode is SessionMode.CLASSIC_REVEAL:
        return 1
    return TARGET_COUNTS[Difficulty.parse(difficulty)]


@dataclass
class Event:
    name: str
    payload: Dict[str, Any] = field(default_factory=dict)


@dataclass
class Settings:
    clue_round_duration: int = 300
    classic_reveal_duration: int = 100
    acceptance_threshold: float = 40.0

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> 'Settings':
        return cls(
            clue_round_duration=int(config.get('CLUE_ROUND_DURATION_SEC', 300)),
            classic_reveal_duration=int(config.get('CLASSIC_REVEAL_DURATION_SEC', 100)),
            acceptance_threshold=float(config.get('ACCEPTANCE_THRESHOLD', 40)),
        )

    def duration_for(self, mode: SessionMode) -> int:
        if mode is SessionMode.CLASSIC_REVEAL:
            return self.classic_reveal_duration
        return self.clue_round_duration


@dataclass
class Session:
    difficulty: str
    mode: str
    target_count: int
    drawn_count: int = 0
    score: int = 0
    remaining_seconds: int = 0
    paused: bool = False
    active_tool: str = Tool.PENCIL.value
    active_word_index: int = -1

    def to_dict(self) -> dict:
        return asdict(self)


def _locked(method):
    """Run a controller command under the controller's lock.

    Socket handlers and the clock worker call into the same controller
    from different threads; commands must apply one at a time.
    """
    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        with self.lock:
            return method(self, *args, **kwargs)
    return wrapper


class SessionController:
    def __init__(self, word_source: Callable[[], Sequence[Word]], scorer, store=None,
                 surface: Optional[DrawingSurface] = None, settings: Optional[Settings] = None,
                 rng=None):
        self.word_source = word_source
        self.scorer = scorer
        self.store = store
        self.surface = surface or DrawingSurface(800, 600)
        self.settings = settings or Settings()
        self.rng = rng
        # reentrant: end_game runs inside tick and submission resolution
        self.lock = threading.RLock()
        self.timer = Timer()
        self.scores = ScoreKeeper(self._store_call('get_high_score', default=0))
        self.screen = Screen.HOME
        self.session: Optional[Session] = None
        self.queue: Optional[WordQueue] = None
        self.result: Optional[SessionResult] = None
        self._scoring = False

    # ---- queries ----

    @property
    def current_word(self) -> Optional[Word]:
        return self.queue.current if self.queue else None

    @property
    def scoring_in_flight(self) -> bool:
        return self._scoring

    @_locked
    def state(self) -> dict:
        word = self.current_word
        return {
            'screen': self.screen.value,
            'session': self.session.to_dict() if self.session else None,
            'word': word.to_dict() if word else None,
            'high_score': self.scores.high_score,
            'canvas': {'width': self.surface.width, 'height': self.surface.height},
        }

    # ---- lifecycle ----

    @_locked
    def start_game(self, difficulty: Union[str, Difficulty],
                   mode: Union[str, SessionMode, None] = SessionMode.CLUE_ROUND) -> List[Event]:
        difficulty = Difficulty.parse(difficulty)
        mode = SessionMode.parse(mode)
        # WordSourceError propagates: a session cannot start without words
        master_list = self.word_source()

        self.timer.stop()
        count = target_count(difficulty, mode)
        self.queue = WordQueue.build(difficulty, master_list, count, rng=self.rng)
        self.scores.reset()
        self.surface.set_tool(Tool.PENCIL)
        self.surface.reset()
        self.result = None
        self._scoring = False

        duration = self.settings.duration_for(mode)
        self.session = Session(
            difficulty=difficulty.value,
            mode=mode.value,
            target_count=count,
            remaining_seconds=duration,
        )
        self.screen = Screen.PLAYING
        self.timer.start(duration)
        logger.info(
            f"[session-start] difficulty={difficulty.value} mode={mode.value} target={count} "
            f"queued={len(self.queue)} duration={duration}s"
        )

        events = [
            Event('screen_changed', {'screen': self.screen.value}),
            Event('score_changed', {'score': 0, 'high_score': self.scores.high_score}),
            Event('timer_tick', {'remaining': self.timer.remaining}),
        ]
        events.extend(self._advance())
        return events

    @_locked
    def toggle_pause(self) -> List[Event]:
        if self.screen not in (Screen.PLAYING, Screen.PAUSED):
            return []
        paused = self.screen is Screen.PLAYING
        if paused:
            self.timer.pause()
            self.surface.end_stroke()
            self.screen = Screen.PAUSED
        else:
            self.timer.resume()
            self.screen = Screen.PLAYING
        self.session.paused = paused
        return [
            Event('screen_changed', {'screen': self.screen.value}),
            Event('feedback', {'message': 'Game Paused' if paused else 'Game Resumed'}),
        ]

    @_locked
    def tick(self) -> List[Event]:
        if self.screen not in (Screen.PLAYING, Screen.PAUSED):
            return []
        expired = self.timer.tick()
        self.session.remaining_seconds = self.timer.remaining
        if self.screen is Screen.PAUSED:
            return []
        events = [Event('timer_tick', {'remaining': self.timer.remaining})]
        if expired:
            events.append(Event('feedback', {'message': "Time's up!"}))
            events.extend(self.end_game(reason='timeout'))
        return events

    @_locked
    def end_game(self, reason: str = 'finished') -> List[Event]:
        if self.screen not in (Screen.PLAYING, Screen.PAUSED) or self.session is None:
            return []
        session = self.session
        self.timer.stop()
        self.surface.end_stroke()
        elapsed = self.timer.elapsed
        completed = session.drawn_count >= session.target_count

        if completed:
            if session.mode == SessionMode.CLASSIC_REVEAL.value:
                self.scores.award_classic(elapsed)
            else:
                self.scores.award_completion_bonus(elapsed)
        session.score = self.scores.score
        session.paused = False
        session.remaining_seconds = self.timer.remaining

        beaten = self.scores.finalize()
        result = SessionResult(
            words_completed=session.drawn_count,
            target_count=session.target_count,
            score=session.score,
            elapsed_seconds=elapsed,
            difficulty=session.difficulty,
            mode=session.mode,
        )
        self.result = result
        self.screen = Screen.RESULTS
        logger.info(
            f"[session-end] reason={reason} completed={session.drawn_count}/{session.target_count} "
            f"score={session.score} elapsed={elapsed}s high_score_beaten={beaten}"
        )

        events = [Event('score_changed', {'score': session.score, 'high_score': self.scores.high_score})]
        if beaten:
            self._store_call('set_high_score', session.score)
            events.append(Event('high_score_changed', {'high_score': self.scores.high_score}))
        self._store_call('record_session', result)

        summary = result.to_dict()
        summary.update({'reason': reason, 'high_score': self.scores.high_score, 'new_high_score': beaten})
        events.append(Event('session_ended', summary))
        events.append(Event('screen_changed', {'screen': self.screen.value}))
        return events

    @_locked
    def go_home(self) -> List[Event]:
        self.timer.stop()
        self.session = None
        self.queue = None
        self._scoring = False
        self.surface.reset()
        self.screen = Screen.HOME
        return [Event('screen_changed', {'screen': self.screen.value})]

    # ---- drawing input ----

    def _accepting_input(self) -> bool:
        return self.screen is Screen.PLAYING

    @_locked
    def pointer_down(self, point: Tuple[float, float], display_size=None, color=None) -> List[Event]:
        if not self._accepting_input():
            return []
        self.surface.begin_stroke(self.surface.map_point(point, display_size), color=color)
        return []

    @_locked
    def pointer_move(self, point: Tuple[float, float], display_size=None,
                     width: Optional[float] = None, color=None) -> List[Event]:
        if not self._accepting_input():
            return []
        self.surface.extend_stroke(self.surface.map_point(point, display_size), width=width, color=color)
        return []

    @_locked
    def pointer_up(self) -> List[Event]:
        self.surface.end_stroke()
        return []

    @_locked
    def select_tool(self, tool: Union[str, Tool]) -> List[Event]:
        selected = self.surface.set_tool(tool)
        if self.session is not None:
            self.session.active_tool = selected.value
        return [Event('tool_changed', {'tool': selected.value})]

    @_locked
    def select_color(self, color) -> List[Event]:
        if not self.surface.set_color(color):
            return []
        return [Event('color_changed', {'color': '#%02x%02x%02x' % self.surface.color})]

    @_locked
    def undo(self) -> List[Event]:
        if self._accepting_input():
            self.surface.undo()
        return []

    @_locked
    def clear(self) -> List[Event]:
        if self._accepting_input():
            self.surface.clear()
        return []

    @_locked
    def resize(self, width: int, height: int) -> List[Event]:
        if not self.surface.resize(width, height):
            return []
        return [Event('canvas_resized', {'width': self.surface.width, 'height': self.surface.height})]

    # ---- submission ----

    async def submit_drawing(self) -> List[Event]:
        # The lock is held before and after scoring, never across the await
        with self.lock:
            if self.screen is Screen.PAUSED:
                return [Event('feedback', {'message': 'Resume the game to submit your drawing'})]
            if self.screen is not Screen.PLAYING or self.current_word is None:
                return []
            if self._scoring:
                return [Event('feedback', {'message': 'Still checking your last drawing...'})]

            session = self.session
            word = self.current_word
            word_index = self.queue.index
            snapshot = self.surface.snapshot()
            self._scoring = True

        try:
            accuracy = await self.scorer.score(snapshot, word.reference_seed)
        finally:
            with self.lock:
                if self.session is session:
                    self._scoring = False

        with self.lock:
            # Timer expiry or navigation may have been processed while scoring was suspended
            if (self.session is not session or self.screen not in (Screen.PLAYING, Screen.PAUSED)
                    or self.queue.index != word_index):
                logger.info(f"[submit-stale] word={word.text} accuracy={accuracy:.1f} dropped")
                return []
            return self._resolve_submission(word, accuracy)

    def _resolve_submission(self, word: Word, accuracy: float) -> List[Event]:
        session = self.session
        shown = int(round(accuracy))
        threshold = self.settings.acceptance_threshold
        events = [Event('accuracy_measured', {'accuracy': shown, 'word': word.text})]
        gated = session.mode == SessionMode.CLUE_ROUND.value

        if gated and accuracy < threshold:
            logger.info(f"[submit] word={word.text} accuracy={accuracy:.1f} rejected threshold={threshold:g}")
            events.append(Event('feedback', {
                'message': f"Need more detail! Current accuracy: {shown}% (Need {threshold:g}%)",
                'accuracy': shown,
            }))
            return events

        session.drawn_count += 1
        if gated:
            points = self.scores.award_word(accuracy)
            session.score = self.scores.score
            events.append(Event('score_changed', {'score': session.score, 'awarded': points,
                                                  'high_score': self.scores.high_score}))
        logger.info(
            f"[submit] word={word.text} accuracy={accuracy:.1f} accepted "
            f"drawn={session.drawn_count}/{session.target_count}"
        )

        if session.drawn_count >= session.target_count:
            events.extend(self.end_game())
        else:
            events.extend(self._advance())
        return events

    def _advance(self) -> List[Event]:
        word = self.queue.next()
        if word is None:
            return self.end_game(reason='exhausted')
        session = self.session
        session.active_word_index = self.queue.index
        self.surface.reset()
        return [
            Event('word_changed', {
                'word': word.text,
                'clue': word.clue,
                'index': self.queue.index,
                'drawn_count': session.drawn_count,
                'target_count': session.target_count,
                'reference_url': self.scorer.reference_url(word.reference_seed),
            }),
            Event('feedback', {'message': f"Draw {session.drawn_count + 1}/{session.target_count}: {word.text}"}),
        ]

    def _store_call(self, op: str, *args, default=None):
        if self.store is None:
            return default
        try:
            return getattr(self.store, op)(*args)
        except Exception as exc:
            logger.error(f"[store-error] op={op} error={exc!r}")
            return default
