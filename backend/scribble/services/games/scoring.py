import math


WORD_BASE_POINTS = 10
COMPLETION_BONUS_WINDOW_SEC = 60
CLASSIC_MAX_POINTS = 100


def word_points(accuracy: float) -> int:
    """Points for an accepted drawing: 10 plus one per full 10% of accuracy."""
    return WORD_BASE_POINTS + int(math.floor(max(0.0, accuracy) / 10))


def completion_bonus(elapsed_seconds: int) -> int:
    return max(0, COMPLETION_BONUS_WINDOW_SEC - int(elapsed_seconds))


def classic_score(elapsed_seconds: int) -> int:
    return max(0, CLASSIC_MAX_POINTS - int(elapsed_seconds))


class ScoreKeeper:
    """Session score plus the high score it is compared against.

    The keeper never writes the high score anywhere itself; finalize()
    reports whether the stored value should be replaced.
    """

    def __init__(self, high_score: int = 0):
        self.score = 0
        self.high_score = int(high_score or 0)
        self.bonus_awarded = False

    def reset(self) -> None:
        self.score = 0
        self.bonus_awarded = False

    def award_word(self, accuracy: float) -> int:
        points = word_points(accuracy)
        self.score += points
        return points

    def award_completion_bonus(self, elapsed_seconds: int) -> int:
        if self.bonus_awarded:
            return 0
        self.bonus_awarded = True
        bonus = completion_bonus(elapsed_seconds)
        self.score += bonus
        return bonus

    def award_classic(self, elapsed_seconds: int) -> int:
        """Single-round variant: the whole score comes from how fast the word was drawn."""
        self.score = classic_score(elapsed_seconds)
        return self.score

    def finalize(self) -> bool:
        if self.score > self.high_score:
            self.high_score = self.score
            return True
        return False
