"""
habitchain — FastAPI backend
"""
import logging
import os

from fastapi import FastAPI, Header, HTTPException, Depends, Request
from fastapi.middleware.cors import CORSMiddleware
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from .db import (
    get_client, get_user, create_user, delete_user,
    list_habits, get_habit, create_habit, delete_habit,
    add_log, delete_logs_for_day, get_daily_totals,
)
from .engine.fulfillment import HabitConfig, HabitType, is_fulfilled
from .engine.progress import HabitProgress, summarize_habit
from .engine.streak import utc_today
from .models import UserRegister, HabitCreate, LogCreate

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address)
app = FastAPI(title="habitchain API")
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

ALLOWED_ORIGINS = [
    o.strip() for o in os.environ.get("CORS_ORIGINS", "http://localhost:3000").split(",") if o.strip()
]
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE"],
    allow_headers=["Authorization", "Content-Type"],
)


@app.get("/health")
def health():
    try:
        db = get_client()
        db.table("users").select("user_id").limit(1).execute()
        return {"status": "ok", "db": "ok"}
    except Exception as e:
        logger.error("Health check DB failure: %s", e)
        raise HTTPException(status_code=503, detail="DB unavailable")


# ── Auth ──────────────────────────────────────────────────────────────────────

def get_user_id(authorization: str = Header(...)) -> str:
    if not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Missing Bearer token")
    return authorization.removeprefix("Bearer ").strip()


def require_user(user_id: str = Depends(get_user_id)) -> str:
    db = get_client()
    if not get_user(db, user_id):
        raise HTTPException(status_code=404, detail="User not registered")
    return user_id


# ── Register ──────────────────────────────────────────────────────────────────

@app.post("/api/users", status_code=201)
@limiter.limit("10/minute")
def register_user(request: Request, body: UserRegister):
    db = get_client()
    if get_user(db, body.user_id):
        return {"status": "already_registered"}
    create_user(db, body.user_id, body.display_name)
    logger.info("User registered: %s (%s)", body.user_id[:8], body.display_name)
    return {"status": "registered"}


@app.delete("/api/me", status_code=200)
def delete_me(user_id: str = Depends(require_user)):
    db = get_client()
    delete_user(db, user_id)
    logger.info("User deleted: %s...", user_id[:8])
    return {"status": "deleted", "message": "All your data has been permanently deleted."}


# ── Habits ────────────────────────────────────────────────────────────────────

@app.get("/api/habits")
def get_habits(user_id: str = Depends(require_user)):
    db = get_client()
    today = utc_today()
    habits = [_with_progress(db, habit, today) for habit in list_habits(db, user_id)]
    return {"habits": habits}


@app.post("/api/habits", status_code=201)
def add_habit(body: HabitCreate, user_id: str = Depends(require_user)):
    db = get_client()
    habit = create_habit(db, user_id, body.model_dump(mode="json"))
    logger.info("Habit created for %s...: %s (%s)", user_id[:8], habit["id"], body.type.value)
    return {"habit": {**habit, **HabitProgress().as_dict()}}


@app.get("/api/habits/{habit_id}")
def get_one_habit(habit_id: str, user_id: str = Depends(require_user)):
    db = get_client()
    habit = _require_habit(db, user_id, habit_id)
    return {"habit": _with_progress(db, habit, utc_today())}


@app.delete("/api/habits/{habit_id}")
def remove_habit(habit_id: str, user_id: str = Depends(require_user)):
    db = get_client()
    if not delete_habit(db, user_id, habit_id):
        raise HTTPException(status_code=404, detail="Habit not found")
    logger.info("Habit deleted for %s...: %s", user_id[:8], habit_id)
    return {"status": "deleted"}


@app.post("/api/habits/{habit_id}/logs", status_code=201)
@limiter.limit("60/minute")
def log_habit(request: Request, habit_id: str, body: LogCreate, user_id: str = Depends(require_user)):
    db = get_client()
    habit = _require_habit(db, user_id, habit_id)
    today = utc_today()
    logged_on = body.logged_on or today
    if logged_on > today:
        raise HTTPException(status_code=422, detail="Cannot log a future day")
    if body.value <= 0 and HabitConfig.from_row(habit).type == HabitType.BOOLEAN.value:
        raise HTTPException(status_code=422, detail="Boolean habits only take positive values")

    add_log(db, habit_id, logged_on, body.value)
    logger.info("Logged %s for habit %s on %s", body.value, habit_id, logged_on)
    return _progress_for(db, habit, today).as_dict()


@app.post("/api/habits/{habit_id}/checkin")
def checkin(habit_id: str, user_id: str = Depends(require_user)):
    """Toggle today's completion of a boolean habit."""
    db = get_client()
    habit = _require_habit(db, user_id, habit_id)
    config = HabitConfig.from_row(habit)
    if config.type != HabitType.BOOLEAN.value:
        raise HTTPException(status_code=400, detail="Check-in is only for boolean habits; post a log instead")

    today = utc_today()
    if is_fulfilled(config, get_daily_totals(db, habit_id).get(today.isoformat())):
        delete_logs_for_day(db, habit_id, today)
    else:
        add_log(db, habit_id, today, 1)

    # Older logs can still net today to <= 0
    progress = _progress_for(db, habit, today)
    completed = today.isoformat() in progress.fulfilled_dates
    return {"completed": completed, **progress.as_dict()}


# ── Helpers ───────────────────────────────────────────────────────────────────

def _require_habit(db, user_id: str, habit_id: str) -> dict:
    habit = get_habit(db, user_id, habit_id)
    if not habit:
        raise HTTPException(status_code=404, detail="Habit not found")
    return habit


def _progress_for(db, habit: dict, today) -> HabitProgress:
    totals = get_daily_totals(db, habit["id"])
    return summarize_habit(HabitConfig.from_row(habit), totals, today)


def _with_progress(db, habit: dict, today) -> dict:
    return {**habit, **_progress_for(db, habit, today).as_dict()}
