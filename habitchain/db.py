import os
import logging
from datetime import date
from decimal import Decimal
from functools import lru_cache
from supabase import create_client, Client

logger = logging.getLogger(__name__)

HABIT_COLUMNS = "id, name, color, type, goal, direction, created_at"


@lru_cache(maxsize=1)
def get_client() -> Client:
    url = os.environ["SUPABASE_URL"]
    key = os.environ["SUPABASE_SERVICE_KEY"]
    return create_client(url, key)


def get_user(db: Client, user_id: str) -> dict | None:
    res = db.table("users").select("*").eq("user_id", user_id).execute()
    return res.data[0] if res.data else None


def create_user(db: Client, user_id: str, display_name: str) -> None:
    db.table("users").insert({"user_id": user_id, "display_name": display_name}).execute()


def delete_user(db: Client, user_id: str) -> None:
    db.table("users").delete().eq("user_id", user_id).execute()


def list_habits(db: Client, user_id: str) -> list[dict]:
    res = (
        db.table("habits")
        .select(HABIT_COLUMNS)
        .eq("user_id", user_id)
        .order("created_at")
        .execute()
    )
    return res.data or []


def get_habit(db: Client, user_id: str, habit_id: str) -> dict | None:
    """Returns the habit only if user_id owns it."""
    res = (
        db.table("habits")
        .select(HABIT_COLUMNS)
        .eq("id", habit_id)
        .eq("user_id", user_id)
        .execute()
    )
    return res.data[0] if res.data else None


def create_habit(db: Client, user_id: str, fields: dict) -> dict:
    res = db.table("habits").insert({"user_id": user_id, **fields}).execute()
    return res.data[0]


def delete_habit(db: Client, user_id: str, habit_id: str) -> bool:
    res = db.table("habits").delete().eq("id", habit_id).eq("user_id", user_id).execute()
    return bool(res.data)


def add_log(db: Client, habit_id: str, logged_on: date, value: float) -> None:
    db.table("habit_logs").insert(
        {"habit_id": habit_id, "logged_on": logged_on.isoformat(), "value": value}
    ).execute()


def delete_logs_for_day(db: Client, habit_id: str, logged_on: date) -> None:
    db.table("habit_logs").delete().eq("habit_id", habit_id).eq("logged_on", logged_on.isoformat()).execute()


def get_daily_totals(db: Client, habit_id: str) -> dict[str, float]:
    """
    Sum every log value per day: {"YYYY-MM-DD": total}. One read per call.
    Values are NUMERIC in Postgres; sum them as Decimal and only convert the
    per-day total, so 0.1 + 0.2 is 0.3.
    """
    res = db.table("habit_logs").select("logged_on, value").eq("habit_id", habit_id).execute()
    totals: dict[str, Decimal] = {}
    for row in res.data or []:
        day = str(row["logged_on"])[:10]
        totals[day] = totals.get(day, Decimal(0)) + Decimal(str(row["value"]))
    return {day: float(total) for day, total in totals.items()}
