from __future__ import annotations

from datetime import date
from decimal import Decimal

from flask import Flask, jsonify, request

from ..common.web import current_actor, date_arg, error_response, json_body, login_required
from ..container import Container
from ..core.exceptions import DomainError, ValidationError
from .model import SalaryStructure


def _int_arg(name: str) -> int:
    value = request.args.get(name)
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be an integer")


def register(app: Flask, container: Container) -> None:
    @app.route("/api/payroll/structures", methods=["POST"], endpoint="save_salary_structure")
    @login_required
    def save_salary_structure():
        try:
            data = json_body()
            if "employee_id" not in data or "period" not in data:
                raise ValidationError("employee_id and period are required")
            try:
                structure = SalaryStructure.from_dict({**data, "employee_id": int(data["employee_id"])})
            except (ArithmeticError, TypeError, ValueError):
                raise ValidationError("Salary components must be numeric")
            structure_id = container.payroll_service.save_salary_structure(current_actor(), structure)
            return jsonify({"success": True, "id": structure_id}), 200
        except DomainError as e:
            return error_response(e)

    @app.route("/api/payroll/structured", methods=["GET"], endpoint="structured_payroll")
    @login_required
    def structured_payroll():
        try:
            breakdown = container.payroll_service.employee_payroll(
                current_actor(),
                employee_id=_int_arg("employee_id"),
                period=request.args.get("period", ""),
            )
            return jsonify(breakdown.to_dict()), 200
        except DomainError as e:
            return error_response(e)

    @app.route("/api/payroll/finalize", methods=["POST"], endpoint="finalize_payroll")
    @login_required
    def finalize_payroll():
        try:
            data = json_body()
            try:
                employee_id = int(data.get("employee_id"))
            except (TypeError, ValueError):
                raise ValidationError("employee_id must be an integer")
            breakdown = container.payroll_service.finalize(
                current_actor(),
                employee_id=employee_id,
                period=str(data.get("period") or ""),
            )
            return jsonify(breakdown.to_dict()), 200
        except DomainError as e:
            return error_response(e)

    @app.route("/api/payroll/per-instance", methods=["GET"], endpoint="per_instance_payroll")
    @login_required
    def per_instance_payroll():
        try:
            today = date.today()
            try:
                hourly_rate = Decimal(request.args.get("hourly_rate", "0"))
                working_days = request.args.get("working_days")
                working_days = int(working_days) if working_days else None
            except (ArithmeticError, ValueError):
                raise ValidationError("hourly_rate and working_days must be numeric")
            breakdown = container.payroll_service.compute_attendance_payroll(
                current_actor(),
                employee_id=_int_arg("employee_id"),
                start=date_arg("start", today.replace(day=1)),
                end=date_arg("end", today),
                hourly_rate=hourly_rate,
                working_days=working_days,
            )
            return jsonify(breakdown.to_dict()), 200
        except DomainError as e:
            return error_response(e)
