"""
LeetCode Stats Widget (Flask)

What it does:
- Accepts a LeetCode username
- Looks it up against a list of public LeetCode stats APIs, trying each one in order
  until one answers (no retries, no caching)
- Normalizes the two known response shapes into one stats record
- Renders three progress circles (easy / medium / hard) and four summary cards,
  or an error notice when the lookup fails

Setup:
  pip install flask requests

Run:
  python app.py
  open http://localhost:5000

Endpoints:
  GET  /                      -> renders templates/index.html (search form + stats)
  GET  /?username=            -> runs a search and renders the result
  POST /                      -> same, from form-data { "username": "..." }
  GET  /api/stats?username=   -> returns JSON stats + view data
  POST /api/stats             -> accepts form-data or JSON { "username": "..." }
  GET  /healthz               -> liveness + configured endpoints

Only one search runs at a time: while a lookup is in flight the search button is
disabled and further searches are rejected until it finishes.
"""

from __future__ import annotations

import logging
import math
import os
import re
import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Sequence

import requests
from flask import Flask, jsonify, render_template, request

# -----------------------------
# Config
# -----------------------------
DEFAULT_ENDPOINTS = (
    "https://leetcode-stats-api.herokuapp.com",  # most reliable
    "https://leetcodestats.cyclic.app",
    "https://leetcode-api-faisalshohag.vercel.app",
)


def _endpoints_from_env() -> tuple:
    raw = os.getenv("STATS_API_ENDPOINTS", "").strip()
    if not raw:
        return DEFAULT_ENDPOINTS
    return tuple(e.strip().rstrip("/") for e in raw.split(",") if e.strip())


API_ENDPOINTS = _endpoints_from_env()
REQUEST_TIMEOUT_SECONDS = float(os.getenv("REQUEST_TIMEOUT_SECONDS", "10"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# LeetCode handles: letters, digits, underscore, hyphen; 1-15 chars
USERNAME_RE = re.compile(r"[A-Za-z0-9_-]{1,15}")

# Shown when the upstream APIs don't report per-tier totals
DEFAULT_TIER_TOTAL = 700
TIERS = ("easy", "medium", "hard")

ERROR_HINT = "Try a different username or check back later."

# -----------------------------
# Logging
# -----------------------------
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logging.getLogger("urllib3").setLevel(logging.WARNING)
logger = logging.getLogger(__name__)

# -----------------------------
# Flask app
# -----------------------------
app = Flask(__name__)


# -----------------------------
# Errors
# -----------------------------
class ValidationError(ValueError):
    def __init__(self, kind: str, message: str):
        super().__init__(message)
        self.kind = kind


class StatsAPIError(RuntimeError):
    pass


class EndpointFailure(StatsAPIError):
    def __init__(self, endpoint: str, reason: str):
        super().__init__(f"{endpoint}: {reason}")
        self.endpoint = endpoint


class ResolutionExhausted(StatsAPIError):
    pass


class TierNotFoundError(LookupError):
    pass


class SearchInProgress(RuntimeError):
    pass


# -----------------------------
# Validation
# -----------------------------
def validate_username(raw: Optional[str]) -> str:
    """
    Returns the username untouched (not trimmed) when it is acceptable.
    Raises ValidationError("empty" | "invalid") otherwise.
    """
    raw = raw or ""
    if not isinstance(raw, str):
        raise ValidationError("invalid", "Invalid username.")
    if raw.strip() == "":
        raise ValidationError("empty", "Username should not be empty.")
    if not USERNAME_RE.fullmatch(raw):
        raise ValidationError("invalid", "Invalid username.")
    return raw


# -----------------------------
# HTTP helpers
# -----------------------------
def _request_json(endpoint: str, username: str, timeout: float = REQUEST_TIMEOUT_SECONDS) -> Any:
    url = f"{endpoint.rstrip('/')}/{username}"
    try:
        resp = requests.get(url, headers={"Accept": "application/json"}, timeout=timeout)
    except requests.RequestException as e:
        raise EndpointFailure(endpoint, f"request error: {e}") from e

    if not resp.ok:
        raise EndpointFailure(endpoint, f"API error: {resp.status_code}")

    try:
        return resp.json()
    except ValueError as e:
        raise EndpointFailure(endpoint, f"unparseable body: {e}") from e


def fetch_with_fallback(username: str, endpoints: Sequence[str] = API_ENDPOINTS) -> Any:
    """
    Try each endpoint in order and return the first parsed JSON body.
    Endpoints after the first success are never contacted.
    """
    for endpoint in endpoints:
        try:
            data = _request_json(endpoint, username)
        except EndpointFailure as e:
            logger.warning("Attempt failed with %s: %s", endpoint, e)
            continue
        logger.info("Fetched stats for %s from %s", username, endpoint)
        return data

    raise ResolutionExhausted("All API endpoints failed")


# -----------------------------
# Normalization
# -----------------------------
SHAPE_FLAT = "flat"
SHAPE_NESTED = "nested"
SHAPE_UNRECOGNIZED = "unrecognized"


def _round_half_up(x: Any, places: int = 2) -> Optional[float]:
    if x is None:
        return None
    scale = 10 ** places
    return math.floor(float(x) * scale + 0.5) / scale


def _matched_user(raw: Any) -> Optional[Dict[str, Any]]:
    if not isinstance(raw, dict):
        return None
    data = raw.get("data")
    if not isinstance(data, dict):
        return None
    user = data.get("matchedUser")
    return user if isinstance(user, dict) and user else None


def detect_shape(raw: Any) -> str:
    # flat wins when both are present
    if isinstance(raw, dict) and "totalSolved" in raw:
        return SHAPE_FLAT
    if _matched_user(raw) is not None:
        return SHAPE_NESTED
    return SHAPE_UNRECOGNIZED


def _normalize_flat(raw: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "easy_solved": raw.get("easySolved"),
        "medium_solved": raw.get("mediumSolved"),
        "hard_solved": raw.get("hardSolved"),
        "total_easy": raw.get("totalEasy"),
        "total_medium": raw.get("totalMedium"),
        "total_hard": raw.get("totalHard"),
        "total_solved": raw.get("totalSolved"),
        "ranking": raw.get("ranking"),
        "acceptance_rate": _round_half_up(raw.get("acceptanceRate")),
        "contribution_points": raw.get("contributionPoints") or 0,
    }


def _tier_count(submissions: List[Dict[str, Any]], difficulty: str) -> int:
    for entry in submissions:
        if entry.get("difficulty") == difficulty:
            return entry["count"]
    raise TierNotFoundError(f"No '{difficulty}' entry in acSubmissionNum")


def _normalize_nested(raw: Dict[str, Any]) -> Dict[str, Any]:
    user = _matched_user(raw) or {}
    submissions = user["submitStats"]["acSubmissionNum"]
    profile = user.get("profile") or {}

    # Totals per tier and contribution points aren't exposed by this shape.
    return {
        "easy_solved": _tier_count(submissions, "Easy"),
        "medium_solved": _tier_count(submissions, "Medium"),
        "hard_solved": _tier_count(submissions, "Hard"),
        # every entry counts, including an upstream "All" row if present
        "total_solved": sum(entry["count"] for entry in submissions),
        "ranking": profile.get("ranking"),
        "acceptance_rate": _round_half_up(profile.get("acceptanceRate")),
    }


def normalize_stats(raw: Any) -> Any:
    """
    Different APIs return different structures; map the known ones onto the
    snake_case stats record. Unknown payloads are passed through untouched.
    """
    shape = detect_shape(raw)
    if shape == SHAPE_FLAT:
        return _normalize_flat(raw)
    if shape == SHAPE_NESTED:
        return _normalize_nested(raw)
    logger.info("Unrecognized stats payload, passing through as-is")
    return raw


# -----------------------------
# Presentation
# -----------------------------
def progress_percent(solved: Any, total: Any) -> int:
    solved = solved or 0
    if not total:
        return 0
    return int(math.floor(solved / total * 100 + 0.5))


def progress_angle(percent: float) -> float:
    return percent * 3.6


def _stats_get(stats: Any, key: str, default: Any = None) -> Any:
    if not isinstance(stats, dict):
        return default
    value = stats.get(key)
    return default if value is None else value


def progress_indicators(stats: Any) -> List[Dict[str, Any]]:
    out: List[Dict[str, Any]] = []
    for tier in TIERS:
        solved = _stats_get(stats, f"{tier}_solved", 0)
        total = _stats_get(stats, f"total_{tier}", DEFAULT_TIER_TOTAL)
        percent = progress_percent(solved, total)
        angle = progress_angle(percent)
        out.append(
            {
                "tier": tier,
                "solved": solved,
                "total": total,
                "percent": percent,
                "angle": angle,
                "label": f"{solved}/{total}",
                "style": f"--progress-degree: {angle:g}deg",
            }
        )
    return out


def summary_cards(stats: Any) -> List[Dict[str, Any]]:
    rate = _stats_get(stats, "acceptance_rate")
    return [
        {"title": "Total Solved", "value": _stats_get(stats, "total_solved", 0)},
        {"title": "Ranking", "value": _stats_get(stats, "ranking", "N/A")},
        {"title": "Acceptance Rate", "value": f"{rate:g}%" if rate is not None else "N/A"},
        {"title": "Contribution", "value": _stats_get(stats, "contribution_points", 0)},
    ]


def build_view(stats: Any) -> Dict[str, Any]:
    return {"stats": stats, "progress": progress_indicators(stats), "cards": summary_cards(stats)}


def error_view(message: str) -> Dict[str, Any]:
    return {"error": {"message": message, "hint": ERROR_HINT}}


# -----------------------------
# Search trigger (busy state)
# -----------------------------
class SearchTrigger:
    """
    Idle/busy flag for the search button. Only one search may be in flight;
    `busy()` always puts the trigger back to idle on exit.
    """

    IDLE_LABEL = "Search"
    BUSY_LABEL = "Searching..."

    def __init__(self) -> None:
        self._lock = threading.Lock()

    @property
    def disabled(self) -> bool:
        return self._lock.locked()

    @property
    def label(self) -> str:
        return self.BUSY_LABEL if self.disabled else self.IDLE_LABEL

    @contextmanager
    def busy(self) -> Iterator["SearchTrigger"]:
        if not self._lock.acquire(blocking=False):
            raise SearchInProgress("A search is already in progress.")
        try:
            yield self
        finally:
            self._lock.release()


SEARCH_TRIGGER = SearchTrigger()


def handle_search(
    raw_username: Optional[str],
    trigger: SearchTrigger = SEARCH_TRIGGER,
    endpoints: Sequence[str] = API_ENDPOINTS,
) -> Dict[str, Any]:
    """
    Top-level query handler. ValidationError and SearchInProgress propagate
    before anything is fetched; every other failure becomes an error view.
    """
    username = validate_username(raw_username)
    with trigger.busy():
        try:
            raw = fetch_with_fallback(username, endpoints)
            stats = normalize_stats(raw)
            return build_view(stats)
        except Exception as e:
            logger.exception("Error fetching stats for %s", username)
            return error_view(f"Failed to fetch data: {e}")


# -----------------------------
# Flask routes
# -----------------------------
def _get_username_from_request() -> Optional[str]:
    if request.method == "GET":
        return request.args.get("username")
    if request.is_json:
        payload = request.get_json(silent=True) or {}
        return payload.get("username")
    return request.form.get("username")


def _render_page(username: str = "", view: Optional[Dict[str, Any]] = None, notice: Optional[str] = None, status: int = 200):
    return (
        render_template(
            "index.html",
            username=username,
            view=view,
            notice=notice,
            trigger=SEARCH_TRIGGER,
        ),
        status,
    )


@app.route("/", methods=["GET", "POST"])
def home():
    username = _get_username_from_request()
    if username is None:
        return _render_page()

    try:
        view = handle_search(username)
    except ValidationError as e:
        return _render_page(username, notice=str(e), status=400)
    except SearchInProgress as e:
        return _render_page(username, notice=str(e), status=409)

    return _render_page(username, view=view)


@app.route("/api/stats", methods=["GET", "POST"])
def api_stats():
    username = _get_username_from_request()

    try:
        view = handle_search(username)
    except ValidationError as e:
        return jsonify({"error": str(e), "kind": e.kind}), 400
    except SearchInProgress as e:
        return jsonify({"error": str(e)}), 409

    if "error" in view:
        return jsonify(view["error"]), 502
    return jsonify(view)


@app.route("/healthz", methods=["GET"])
def healthz():
    return jsonify({"ok": True, "endpoints": list(API_ENDPOINTS), "busy": SEARCH_TRIGGER.disabled})


if __name__ == "__main__":
    port = int(os.getenv("PORT", "5000"))
    app.run(host="0.0.0.0", port=port, debug=True)
