from datetime import datetime, timezone

from scribble import db


def _utcnow():
    return datetime.now(timezone.utc)


class WordEntry(db.Model):
    __tablename__ = 'word'
    id = db.Column(db.Integer, primary_key=True)
    word = db.Column(db.String(64), nullable=False, index=True)
    clue = db.Column(db.String(256), nullable=True)
    difficulty = db.Column(db.String(16), nullable=False, default='Easy', index=True)

    def to_word(self):
        from scribble.services.games.words import Word
        return Word(text=self.word, clue=self.clue or '', difficulty=self.difficulty)

    def to_dict(self):
        return {
            'id': self.id,
            'word': self.word,
            'clue': self.clue,
            'difficulty': self.difficulty,
        }


class GameSession(db.Model):
    __tablename__ = 'game_session'
    id = db.Column(db.Integer, primary_key=True)
    word = db.Column(db.String(64), nullable=False)  # summary label, e.g. "8 drawings"
    score = db.Column(db.Integer, nullable=False, default=0)
    time_taken = db.Column(db.Integer, nullable=False, default=0)
    words_completed = db.Column(db.Integer, nullable=False, default=0)
    target_count = db.Column(db.Integer, nullable=False, default=0)
    difficulty = db.Column(db.String(16), nullable=True)
    mode = db.Column(db.String(32), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow, nullable=False)

    def to_dict(self):
        return {
            'id': self.id,
            'word': self.word,
            'score': self.score,
            'time_taken': self.time_taken,
            'words_completed': self.words_completed,
            'target_count': self.target_count,
            'difficulty': self.difficulty,
            'mode': self.mode,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }


class HighScore(db.Model):
    __tablename__ = 'high_score'
    id = db.Column(db.Integer, primary_key=True)
    value = db.Column(db.Integer, nullable=False, default=0)
    updated_at = db.Column(db.DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)
