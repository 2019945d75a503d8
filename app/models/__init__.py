from .report import Department, DEPARTMENT_CODES, ValidatedReport

__all__ = [
    "Department",
    "DEPARTMENT_CODES",
    "ValidatedReport",
]
