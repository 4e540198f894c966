import math
import random
import threading
from typing import Any, Iterable, List, Optional, Sequence

from ..schemas import QuizQuestion

MIN_FLASHCARDS = 4
MAX_QUESTIONS = 10
NUM_DISTRACTORS = 3

class QuizError(ValueError):
    """Base class for quizzes that cannot be built or played."""

class InsufficientDataError(QuizError):
    def __init__(self, count: int):
        super().__init__(f"Need at least {MIN_FLASHCARDS} flashcards to generate a quiz")
        self.count = count

class InsufficientDistinctAnswersError(QuizError):
    def __init__(self, question: str, available: int):
        super().__init__(
            f"Not enough distinct answers to build choices for {question!r} "
            f"(need {NUM_DISTRACTORS}, found {available})"
        )
        self.question = question
        self.available = available

class QuizStateError(QuizError):
    """An action that does not fit the current state of a quiz session."""

def _field(card: Any, name: str) -> str:
    if isinstance(card, dict):
        return card[name]
    return getattr(card, name)

def generate_quiz(flashcards: Sequence[Any], rng: Optional[random.Random] = None) -> List[QuizQuestion]:
    """
    Build up to 10 multiple-choice questions from a set of flashcards.

    Each question keeps its flashcard's answer as the correct option and takes
    three distractors from the answers of the other cards. Cards are dicts or
    objects with ``question`` and ``answer``.

    Raises InsufficientDataError for fewer than 4 cards and
    InsufficientDistinctAnswersError when a card has fewer than 3 other
    distinct answers to choose from.
    """
    rng = rng or random.Random()
    cards = [(_field(c, "question"), _field(c, "answer")) for c in flashcards]
    if len(cards) < MIN_FLASHCARDS:
        raise InsufficientDataError(len(cards))

    pool = list(cards)
    rng.shuffle(pool)
    pool = pool[:min(MAX_QUESTIONS, len(pool))]

    questions: List[QuizQuestion] = []
    for question, answer in pool:
        # dedupe by value so two cards sharing an answer never show it twice
        candidates = list(dict.fromkeys(a for _, a in cards if a != answer))
        if len(candidates) < NUM_DISTRACTORS:
            raise InsufficientDistinctAnswersError(question, len(candidates))
        rng.shuffle(candidates)

        options = candidates[:NUM_DISTRACTORS] + [answer]
        rng.shuffle(options)
        questions.append(QuizQuestion(
            question=question,
            options=options,
            correct_answer_index=options.index(answer),
        ))
    return questions

def score_percentage(correct: int, total: int) -> int:
    if total <= 0:
        return 0
    # half-up, not Python's banker's rounding
    return int(math.floor(correct * 100 / total + 0.5))

def result_message(percentage: int) -> str:
    if percentage >= 90:
        return "Excellent! You've mastered this material!"
    if percentage >= 70:
        return "Great job! Keep practicing!"
    return "Keep studying! You'll get there!"

class QuizSession:
    """
    One run through a quiz: current question, running score, and whether the
    current question has been answered. Restarting regenerates the questions.
    """

    def __init__(self, flashcards: Iterable[Any], title: str = "", rng: Optional[random.Random] = None):
        self.title = title
        self._rng = rng
        # reentrant so a caller can hold it across answer() and a read of the graded question
        self.lock = threading.RLock()
        self.questions: List[QuizQuestion] = []
        self.restart(flashcards)

    def restart(self, flashcards: Iterable[Any]) -> None:
        with self.lock:
            self.questions = generate_quiz(list(flashcards), self._rng)
            self.current = 0
            self.score = 0
            self.selected: Optional[int] = None
            self.complete = False

    @property
    def total(self) -> int:
        return len(self.questions)

    @property
    def answered(self) -> bool:
        return self.selected is not None

    @property
    def current_question(self) -> QuizQuestion:
        return self.questions[self.current]

    def answer(self, index: int) -> bool:
        with self.lock:
            if self.complete:
                raise QuizStateError("Quiz is already complete")
            if self.answered:
                raise QuizStateError("Question already answered")
            q = self.current_question
            if not 0 <= index < len(q.options):
                raise QuizStateError(f"Answer index {index} out of range")
            self.selected = index
            correct = index == q.correct_answer_index
            if correct:
                self.score += 1
            return correct

    def advance(self) -> bool:
        """Move on to the next question; returns False once the quiz is complete."""
        with self.lock:
            if self.complete:
                return False
            if not self.answered:
                raise QuizStateError("Answer the current question first")
            if self.current < self.total - 1:
                self.current += 1
                self.selected = None
                return True
            self.complete = True
            return False

    def result(self) -> dict:
        with self.lock:
            if not self.complete:
                raise QuizStateError("Quiz is not complete yet")
            pct = score_percentage(self.score, self.total)
            return {
                "score": self.score,
                "total": self.total,
                "percentage": pct,
                "message": result_message(pct),
            }
