from __future__ import annotations

from datetime import date

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..common.web import current_actor, error_response, json_body, login_required
from ..container import Container
from ..core.enums import DaySession, LeaveStatus
from ..core.exceptions import DomainError, ValidationError


def register(app: Flask, container: Container) -> None:
    @app.route("/api/leave/requests", methods=["POST"], endpoint="submit_leave")
    @login_required
    def submit_leave():
        try:
            data = json_body()
            try:
                start_date = parse_iso_date(data.get("start_date", ""))
                end_date = parse_iso_date(data.get("end_date", ""))
                duration = DaySession(data.get("duration", DaySession.FULL.value))
                leave_type_id = int(data.get("leave_type_id"))
            except (TypeError, ValueError):
                raise ValidationError("leave_type_id, start_date, end_date and duration are required")

            leave = container.leave_service.submit_leave_request(
                current_actor(),
                leave_type_id=leave_type_id,
                start_date=start_date,
                end_date=end_date,
                duration=duration,
                reason=data.get("reason"),
            )
            return jsonify({"success": True, "request": leave.to_dict()}), 201
        except DomainError as e:
            return error_response(e)

    @app.route("/api/leave/requests/<int:request_id>/<action>", methods=["POST"], endpoint="transition_leave")
    @login_required
    def transition_leave(request_id: int, action: str):
        try:
            data = request.get_json(silent=True) or {}
            leave = container.leave_service.transition_leave_request(
                request_id,
                action,
                current_actor(),
                rejection_reason=data.get("rejection_reason"),
            )
            return jsonify({"success": True, "request": leave.to_dict()}), 200
        except DomainError as e:
            return error_response(e)

    @app.route("/api/leave/requests/mine", methods=["GET"], endpoint="my_leave_requests")
    @login_required
    def my_leave_requests():
        try:
            status = request.args.get("status")
            try:
                status = LeaveStatus(status) if status else None
            except ValueError:
                raise ValidationError("Invalid status filter")
            rows = container.leave_service.list_my_requests(current_actor(), status=status)
            return jsonify([r.to_dict() for r in rows]), 200
        except DomainError as e:
            return error_response(e)

    @app.route("/api/leave/requests/pending", methods=["GET"], endpoint="pending_leave_requests")
    @login_required
    def pending_leave_requests():
        try:
            rows = container.leave_service.list_pending(current_actor())
            return jsonify([r.to_dict() for r in rows]), 200
        except DomainError as e:
            return error_response(e)

    @app.route("/api/leave/balances", methods=["GET"], endpoint="leave_balances")
    @login_required
    def leave_balances():
        try:
            actor = current_actor()
            try:
                employee_id = int(request.args.get("employee_id") or actor.user_id)
                year = int(request.args.get("year") or date.today().year)
            except ValueError:
                raise ValidationError("employee_id and year must be integers")
            summary = container.leave_service.balance_summary(actor, employee_id=employee_id, year=year)
            return jsonify(summary), 200
        except DomainError as e:
            return error_response(e)

    @app.route("/api/leave/balances/open-year", methods=["POST"], endpoint="open_leave_year")
    @login_required
    def open_leave_year():
        try:
            data = json_body()
            try:
                employee_id = int(data.get("employee_id"))
                year = int(data.get("year"))
            except (TypeError, ValueError):
                raise ValidationError("employee_id and year must be integers")
            opened = container.leave_service.open_year(current_actor(), employee_id=employee_id, year=year)
            return jsonify([b.to_dict() for b in opened]), 200
        except DomainError as e:
            return error_response(e)
