"""Staffing payroll: payroll/billing money math, weekly rollups and payroll runs."""

__version__ = "0.1.0"
