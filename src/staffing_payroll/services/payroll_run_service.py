"""Payroll run finalization: rollup + money previews as an immutable snapshot."""

from __future__ import annotations

import hashlib
import json
import logging
from datetime import date
from typing import Any, Iterable
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from staffing_payroll.calculators import compute_preview_rows
from staffing_payroll.config import get_settings
from staffing_payroll.models import PayrollRun
from staffing_payroll.services.deductions import (
    DeductionElectionService,
    calculate_deductions_preview,
)
from staffing_payroll.services.rate_cards import (
    RateCard,
    build_rate_inputs,
    hour_buckets_from_totals,
)
from staffing_payroll.services.weekly_rollup import WeeklyRollup, WeeklyRollupService

logger = logging.getLogger(__name__)


class PayrollRunNotFoundError(Exception):
    """Raised when a payroll run does not exist."""

    def __init__(self, payroll_run_id: UUID):
        self.payroll_run_id = payroll_run_id
        super().__init__(f"Payroll run {payroll_run_id} not found")


def compute_snapshot_hash(snapshot: dict[str, Any]) -> str:
    """sha256 of the snapshot's canonical JSON (sorted keys, compact)."""
    json_str = json.dumps(snapshot, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(json_str.encode()).hexdigest()


def build_money_previews(
    rollup: WeeklyRollup, rate_cards: dict[str, RateCard]
) -> list[dict[str, Any]]:
    """One entry per rollup group, in rollup order.

    Groups whose order has no rate card get ``preview: None``.
    """
    previews: list[dict[str, Any]] = []
    for group in rollup.groups:
        card = rate_cards.get(group.order_id)
        buckets = hour_buckets_from_totals(group.totals)
        preview = None
        if card is not None:
            preview = compute_preview_rows(build_rate_inputs(card, buckets)).to_dict()

        previews.append({
            "worker_id": group.worker_id,
            "order_id": group.order_id,
            "period_start": group.period_start.isoformat(),
            "period_end": group.period_end.isoformat(),
            "hour_buckets": buckets.to_dict(),
            "rate_card": card.to_dict() if card is not None else None,
            "preview": preview,
        })
    return previews


class PayrollRunService:
    """Finalizes payroll weeks into immutable payroll run records.

    Finalization pipeline:
    1) Build the weekly rollup
    2) Compute a money preview per group with a rate card
    3) Optionally attach deduction elections and their preview
    4) Hash the snapshot and persist one PayrollRun
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.settings = get_settings()
        self.rollup_service = WeeklyRollupService(session, self.settings.payroll_timezone)
        self.deduction_service = DeductionElectionService(session)

    async def finalize(
        self,
        week_end: date | str,
        include_reference: bool = False,
        include_deductions: bool = False,
        rate_cards: Iterable[RateCard] = (),
        finalized_by_user_id: str | None = None,
    ) -> PayrollRun:
        """Finalize the week containing ``week_end``.

        Raises:
            InvalidWeekEndError: If ``week_end`` is not YYYY-MM-DD
        """
        rollup = await self.rollup_service.get_weekly_rollup(
            week_end, include_reference=include_reference
        )
        cards = {card.order_id: card for card in rate_cards}

        snapshot: dict[str, Any] = {
            "engine_version": self.settings.engine_version,
            "rollup": rollup.to_dict(),
            "money_previews": build_money_previews(rollup, cards),
        }

        if include_deductions:
            elections = await self.deduction_service.get_elections_for_week(
                rollup.week_start, rollup.worker_ids
            )
            snapshot["deduction_elections"] = [e.to_dict() for e in elections]
            snapshot["deductions_preview"] = calculate_deductions_preview(
                elections
            ).to_dict()

        payroll_run = PayrollRun(
            week_start=rollup.week_start,
            week_end=rollup.week_end,
            timezone=rollup.timezone,
            snapshot_json=snapshot,
            snapshot_hash=compute_snapshot_hash(snapshot),
            engine_version=self.settings.engine_version,
            include_deductions=include_deductions,
            include_reference=include_reference,
            finalized_by_user_id=finalized_by_user_id,
        )
        self.session.add(payroll_run)
        await self.session.flush()

        logger.info(
            "Finalized payroll run %s for week %s..%s (%d groups, hash %s)",
            payroll_run.payroll_run_id,
            rollup.week_start,
            rollup.week_end,
            len(rollup.groups),
            payroll_run.snapshot_hash[:12],
        )
        return payroll_run

    async def get_payroll_run(self, payroll_run_id: UUID) -> PayrollRun:
        """Load a payroll run.

        Raises:
            PayrollRunNotFoundError: If no run has this ID
        """
        payroll_run = await self.session.get(PayrollRun, payroll_run_id)
        if payroll_run is None:
            raise PayrollRunNotFoundError(payroll_run_id)
        return payroll_run
