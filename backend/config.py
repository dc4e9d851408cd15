import os

BASEDIR = os.path.abspath(os.path.dirname(__file__))


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///' + os.path.join(BASEDIR, 'scribble.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Local word list used when the word table is empty or unreachable
    WORDS_FILE = os.environ.get('WORDS_FILE') or os.path.join(BASEDIR, 'data', 'words.json')
    # Reference images; {seed} is the lower-cased word
    REFERENCE_IMAGE_URL = os.environ.get(
        'REFERENCE_IMAGE_URL',
        'https://api.dicebear.com/7.x/shapes/png?seed={seed}&backgroundColor=ffffff',
    )
    REFERENCE_TIMEOUT_SEC = float(os.environ.get('REFERENCE_TIMEOUT_SEC', '5'))
    # Session clocks (seconds)
    CLUE_ROUND_DURATION_SEC = int(os.environ.get('CLUE_ROUND_DURATION_SEC', '300'))
    CLASSIC_REVEAL_DURATION_SEC = int(os.environ.get('CLASSIC_REVEAL_DURATION_SEC', '100'))
    # Accuracy heuristic
    ACCEPTANCE_THRESHOLD = float(os.environ.get('ACCEPTANCE_THRESHOLD', '40'))
    ACCURACY_AMPLIFICATION = float(os.environ.get('ACCURACY_AMPLIFICATION', '2'))
    FALLBACK_ACCURACY = float(os.environ.get('FALLBACK_ACCURACY', '50'))
    COMPARE_GRID_SIZE = int(os.environ.get('COMPARE_GRID_SIZE', '64'))
    ACTIVE_PIXEL_THRESHOLD = int(os.environ.get('ACTIVE_PIXEL_THRESHOLD', '240'))
    # Drawing surface
    UNDO_LIMIT = int(os.environ.get('UNDO_LIMIT', '20'))
    CANVAS_WIDTH = int(os.environ.get('CANVAS_WIDTH', '800'))
    CANVAS_HEIGHT = int(os.environ.get('CANVAS_HEIGHT', '600'))
    # Optional: heartbeat interval for timer worker logs (sec). 0 disables.
    TIMER_HEARTBEAT_SEC = int(os.environ.get('TIMER_HEARTBEAT_SEC', '0'))
    SESSION_HISTORY_LIMIT = int(os.environ.get('SESSION_HISTORY_LIMIT', '20'))
