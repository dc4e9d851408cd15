import logging
from dataclasses import asdict, dataclass
from typing import List, Optional

from scribble import db
from scribble.models import GameSession, HighScore


logger = logging.getLogger(__name__)

HIGH_SCORE_ROW_ID = 1


@dataclass(frozen=True)
class SessionResult:
    words_completed: int
    target_count: int
    score: int
    elapsed_seconds: int
    difficulty: Optional[str] = None
    mode: Optional[str] = None

    @property
    def label(self) -> str:
        return f"{self.words_completed} drawings"

    def to_dict(self) -> dict:
        payload = asdict(self)
        payload['label'] = self.label
        return payload


class ResultStore:
    """Session history and the single high score, backed by SQLAlchemy.

    Reads degrade to defaults and writes are rolled back on failure; the
    game flow never depends on the store succeeding.
    """

    def get_high_score(self) -> int:
        try:
            row = db.session.get(HighScore, HIGH_SCORE_ROW_ID)
        except Exception as exc:
            db.session.rollback()
            logger.error(f"[store-error] op=get_high_score error={exc!r}")
            return 0
        return int(row.value) if row else 0

    def set_high_score(self, value: int) -> bool:
        try:
            row = db.session.get(HighScore, HIGH_SCORE_ROW_ID)
            if row is None:
                row = HighScore(id=HIGH_SCORE_ROW_ID, value=int(value))
            else:
                row.value = int(value)
            db.session.add(row)
            db.session.commit()
        except Exception as exc:
            db.session.rollback()
            logger.error(f"[store-error] op=set_high_score value={value} error={exc!r}")
            return False
        return True

    def record_session(self, result: SessionResult) -> bool:
        try:
            entry = GameSession(
                word=result.label,
                score=result.score,
                time_taken=result.elapsed_seconds,
                words_completed=result.words_completed,
                target_count=result.target_count,
                difficulty=result.difficulty,
                mode=result.mode,
            )
            db.session.add(entry)
            db.session.commit()
        except Exception as exc:
            db.session.rollback()
            logger.error(f"[store-error] op=record_session score={result.score} error={exc!r}")
            return False
        return True

    def recent_sessions(self, limit: int = 20) -> List[dict]:
        rows = GameSession.query.order_by(GameSession.created_at.desc(), GameSession.id.desc()).limit(limit).all()
        return [row.to_dict() for row in rows]
