from __future__ import annotations

from datetime import datetime, timezone

from src.domain.models.treatment import Treatment, TreatmentRoute

UTC = timezone.utc


def test_withdrawal_days_become_end_date():
    treatment = Treatment.create("doe", "2026-10-01", "Ivermectin", withdrawal_days=28, route="sc")
    assert treatment.withdrawal_until == datetime(2026, 10, 29, tzinfo=UTC)
    assert treatment.route == TreatmentRoute.SC


def test_explicit_end_date_wins_over_days():
    treatment = Treatment.create(
        "doe", "2026-10-01", "Ivermectin", withdrawal_until="2026-10-05", withdrawal_days=28
    )
    assert treatment.withdrawal_until == datetime(2026, 10, 5, tzinfo=UTC)


def test_missing_treatment_date_leaves_no_withdrawal():
    treatment = Treatment.create("doe", "garbage", "Ivermectin", withdrawal_days=28)
    assert treatment.withdrawal_until is None
