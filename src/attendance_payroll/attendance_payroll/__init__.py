"""Attendance & Payroll package.

Feature modules (attendance, payroll, leave) each keep a pure domain layer
(model + calculators), a repository protocol with a MySQL implementation,
a service layer and a thin Flask JSON controller.
"""
