from fastapi import APIRouter, HTTPException, Depends
from loguru import logger

from ..auth import current_user
from ..schemas import AnswerIn, QuizQuestionOut
from ..services import db, sessions
from ..services.quiz import QuizSession, QuizStateError
from .library import owned_set

router = APIRouter()

def _questions_out(session: QuizSession):
    return [QuizQuestionOut(question=q.question, options=q.options).model_dump() for q in session.questions]

def _session_or_404(uid: str, session_id: str):
    found = sessions.get_session(uid, session_id)
    if not found:
        raise HTTPException(404, "Quiz session not found")
    return found

@router.post("/sets/{set_id}/quiz")
def start_quiz(set_id: str, uid: str = Depends(current_user)):
    row = owned_set(set_id, uid)
    cards = db.get_flashcards(set_id)
    # InsufficientDataError propagates; the app maps it to 422
    session = QuizSession(cards, title=row.get("title") or "")
    sid = sessions.open_session(uid, set_id, session)
    logger.info(f"[quiz] start session={sid} set_id={set_id} questions={session.total}")
    return {
        "session_id": sid,
        "title": session.title,
        "total": session.total,
        "questions": _questions_out(session),
    }

@router.post("/quiz/{session_id}/answer")
def answer(session_id: str, body: AnswerIn, uid: str = Depends(current_user)):
    _, session = _session_or_404(uid, session_id)
    with session.lock:
        try:
            correct = session.answer(body.index)
        except QuizStateError as e:
            raise HTTPException(409, str(e))
        return {
            "correct": correct,
            "correct_answer_index": session.current_question.correct_answer_index,
            "score": session.score,
            "answered": session.current + 1,
            "total": session.total,
        }

@router.post("/quiz/{session_id}/next")
def next_question(session_id: str, uid: str = Depends(current_user)):
    _, session = _session_or_404(uid, session_id)
    try:
        moved = session.advance()
    except QuizStateError as e:
        raise HTTPException(409, str(e))
    if not moved:
        return {"complete": True}
    q = session.current_question
    return {
        "complete": False,
        "index": session.current,
        "question": QuizQuestionOut(question=q.question, options=q.options).model_dump(),
    }

@router.get("/quiz/{session_id}/result")
def result(session_id: str, uid: str = Depends(current_user)):
    _, session = _session_or_404(uid, session_id)
    try:
        return session.result()
    except QuizStateError as e:
        raise HTTPException(409, str(e))

@router.post("/quiz/{session_id}/restart")
def restart(session_id: str, uid: str = Depends(current_user)):
    set_id, session = _session_or_404(uid, session_id)
    session.restart(db.get_flashcards(set_id))
    logger.info(f"[quiz] restart session={session_id} set_id={set_id}")
    return {
        "session_id": session_id,
        "title": session.title,
        "total": session.total,
        "questions": _questions_out(session),
    }

@router.delete("/quiz/{session_id}")
def end_quiz(session_id: str, uid: str = Depends(current_user)):
    if not sessions.close_session(uid, session_id):
        raise HTTPException(404, "Quiz session not found")
    return {"deleted": True, "id": session_id}
