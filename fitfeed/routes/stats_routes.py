# fitfeed/routes/stats_routes.py
from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import get_jwt_identity, jwt_required

from .. import db
from ..services.periods import Period, resolve_period, utcnow
from ..services.ranking import QuarterlyRankingAccumulator
from ..services.statistics import QuarterlyStatisticsStore
from .helpers import safe_int

stats_bp = Blueprint("stats", __name__)


def _requested_period() -> Period:
    """?year=&quarter= defaulting to the current quarter in the reference offset."""
    current = resolve_period(utcnow(), current_app.config["REFERENCE_UTC_OFFSET_HOURS"])
    year = safe_int(request.args.get("year"), current.year)
    quarter = safe_int(request.args.get("quarter"), current.quarter)
    return Period(year=year, quarter=quarter)


@stats_bp.route("/me", methods=["GET"])
@jwt_required()
def my_statistics():
    """
    Returns:
    {
      "statistics": {
        "year": 2024, "quarter": 2,
        "body_part": {"legs": 3},
        "time_zone": {"dawn": 0, "morning": 2, "afternoon": 1, "night": 0},
        "current_streak": 3,
        "longest_streak": 5
      }
    }
    """
    period = _requested_period()
    if not 1 <= period.quarter <= 4:
        return jsonify({"message": "quarter must be between 1 and 4"}), 400

    stats = QuarterlyStatisticsStore(db.session).find(get_jwt_identity(), period)
    return jsonify({"statistics": stats.to_dict() if stats else None}), 200


@stats_bp.route("/rankings", methods=["GET"])
def group_rankings():
    period = _requested_period()
    if not 1 <= period.quarter <= 4:
        return jsonify({"message": "quarter must be between 1 and 4"}), 400

    limit = max(1, min(safe_int(request.args.get("limit"), 50), 100))
    rows = QuarterlyRankingAccumulator(db.session).standings(period, limit)

    rankings = []
    for rank, row in enumerate(rows, start=1):
        item = row.to_dict()
        item["rank"] = rank
        rankings.append(item)

    return jsonify({"period": period.to_dict(), "rankings": rankings}), 200
