from __future__ import annotations

from datetime import date

from flask import Flask, jsonify, request

from ..common.web import current_actor, date_arg, error_response, json_body, login_required
from ..container import Container
from ..core.enums import AttendanceStatus, DaySession
from ..core.exceptions import DomainError, ValidationError
from .model import GeoLocation


def register(app: Flask, container: Container) -> None:
    @app.route("/api/attendance/punch-in", methods=["POST"], endpoint="punch_in")
    @login_required
    def punch_in():
        try:
            data = json_body()
            try:
                status = AttendanceStatus(data.get("status", AttendanceStatus.OFFICE.value))
                session_type = DaySession(data.get("session", DaySession.FULL.value))
            except ValueError:
                raise ValidationError("Invalid status or session")

            location = None
            if data.get("location"):
                loc = data["location"]
                try:
                    location = GeoLocation(
                        latitude=float(loc["latitude"]),
                        longitude=float(loc["longitude"]),
                        address=loc.get("address"),
                    )
                except (AttributeError, KeyError, TypeError, ValueError):
                    raise ValidationError("location needs numeric latitude and longitude")

            record = container.attendance_service.punch_in(
                current_actor(),
                status=status,
                session=session_type,
                note=data.get("note"),
                location=location,
            )
            return jsonify({"success": True, "attendance_id": record.attendance_id}), 201
        except DomainError as e:
            return error_response(e)

    @app.route("/api/attendance/punch-out", methods=["POST"], endpoint="punch_out")
    @login_required
    def punch_out():
        try:
            data = request.get_json(silent=True) or {}
            container.attendance_service.punch_out(current_actor(), note=data.get("note"))
            return jsonify({"success": True}), 200
        except DomainError as e:
            return error_response(e)

    @app.route("/api/attendance/statistics", methods=["GET"], endpoint="attendance_statistics")
    @login_required
    def attendance_statistics():
        try:
            actor = current_actor()
            today = date.today()
            stats = container.attendance_service.period_statistics(
                actor,
                employee_id=int(request.args.get("employee_id") or actor.user_id),
                start=date_arg("start", today.replace(day=1)),
                end=date_arg("end", today),
            )
            return jsonify(stats.to_dict()), 200
        except DomainError as e:
            return error_response(e)

    @app.route("/api/attendance/calendar", methods=["GET"], endpoint="attendance_calendar")
    @login_required
    def attendance_calendar():
        try:
            actor = current_actor()
            today = date.today()
            days = container.attendance_service.calendar(
                actor,
                employee_id=int(request.args.get("employee_id") or actor.user_id),
                start=date_arg("start", today.replace(day=1)),
                end=date_arg("end", today),
            )
            return jsonify(
                [
                    {
                        "date": d.work_date.strftime("%Y-%m-%d"),
                        "kind": d.kind.value,
                        "status": d.status.value if d.status else None,
                    }
                    for d in days
                ]
            ), 200
        except DomainError as e:
            return error_response(e)
