# command_center/routes/calendar.py
from datetime import MAXYEAR, MINYEAR, date

from flask import Blueprint, jsonify, request

from command_center.core.schedule import MONTHS, month_view, year_view
from command_center.db.session import get_session
from command_center.errors import BackendError, ErrorType
from command_center.routes.helpers import json_error, open_workspace, require_login

calendar_bp = Blueprint("calendar", __name__, url_prefix="/calendar")

MONTH_NAMES = [name.capitalize() for name in MONTHS]


def _summary(project) -> dict:
    return {
        "id": project.id,
        "projectInfo": project.project_info,
        "order": project.order,
        "status": project.status.value,
        "landing": project.landing,
        "fatDate": project.fat_date,
    }


def _int_arg(name: str, default: int) -> int:
    value = request.args.get(name, "").strip()
    if not value:
        return default
    return int(value)


def _year_arg() -> int:
    year = _int_arg("year", date.today().year)
    if not MINYEAR <= year <= MAXYEAR:
        raise ValueError(f"year must be between {MINYEAR} and {MAXYEAR}")
    return year


@calendar_bp.route("/month", methods=["GET"])
def month():
    """月视图，month 参数为 1-12"""
    check = require_login()
    if check:
        return check

    try:
        year = _year_arg()
        month0 = _int_arg("month", date.today().month) - 1
        if not 0 <= month0 <= 11:
            raise ValueError("month must be between 1 and 12")
    except ValueError as e:
        return json_error(str(e), ErrorType.VALIDATION_ERROR, 400)

    db = get_session()
    try:
        ws = open_workspace(db)
        days = [
            {
                "date": slot["date"].isoformat() if slot["date"] else None,
                "projects": [
                    {**_summary(p["project"]), "isLanding": p["landing"], "isFat": p["fat"]}
                    for p in slot["projects"]
                ],
            }
            for slot in month_view(ws.state.projects, year, month0)
        ]
        return jsonify({
            "year": year,
            "month": month0 + 1,
            "monthName": MONTH_NAMES[month0],
            "days": days,
        })
    except BackendError as e:
        return json_error(str(e), ErrorType.BACKEND_ERROR, 502)
    finally:
        db.close()


@calendar_bp.route("/year", methods=["GET"])
def year():
    """年视图：按 landing 月份分桶，解析不了的放 Other"""
    check = require_login()
    if check:
        return check

    try:
        year_value = _year_arg()
    except ValueError as e:
        return json_error(str(e), ErrorType.VALIDATION_ERROR, 400)

    db = get_session()
    try:
        ws = open_workspace(db)
        view = year_view(ws.state.projects, year_value)
        return jsonify({
            "year": year_value,
            "months": [
                {"month": i + 1, "name": MONTH_NAMES[i], "projects": [_summary(p) for p in bucket]}
                for i, bucket in enumerate(view["months"])
            ],
            "other": [_summary(p) for p in view["other"]],
        })
    except BackendError as e:
        return json_error(str(e), ErrorType.BACKEND_ERROR, 502)
    finally:
        db.close()
