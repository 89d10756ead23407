"""API routes."""

from staffing_payroll.api.routes.health import router as health_router
from staffing_payroll.api.routes.money import router as money_router
from staffing_payroll.api.routes.payroll import router as payroll_router
from staffing_payroll.api.routes.payroll_runs import router as payroll_runs_router

__all__ = ["health_router", "money_router", "payroll_router", "payroll_runs_router"]
