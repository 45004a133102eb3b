"""Seed Command — replaces the diagnoses table content with demo records.

Usage:
    python -m diagnosis_api.seed

Invariants:
    - Existing rows are deleted before inserting
    - One diagnosis per demo client 550e8400-e29b-41d4-a716-44665544000{1..5}
"""

import asyncio
import logging

from sqlalchemy import delete

from diagnosis_api.config import get_settings
from diagnosis_api.db.session import create_session_factory
from diagnosis_api.infrastructure.observability import setup_logging
from diagnosis_api.models.diagnosis import Diagnosis
from diagnosis_api.schemas.diagnosis import DiagnosisCreate

logger = logging.getLogger(__name__)

DEMO_DIAGNOSES: list[tuple[str, DiagnosisCreate]] = [
    (
        "550e8400-e29b-41d4-a716-446655440001",
        DiagnosisCreate(
            diagnosis_name="Major Depressive Disorder",
            justification=(
                "Client presents with persistent depressed mood, loss of interest "
                "in activities, sleep disturbances, and feelings of worthlessness "
                "for the past 6 weeks. PHQ-9 score of 18 indicates moderate to "
                "severe depression."
            ),
        ),
    ),
    (
        "550e8400-e29b-41d4-a716-446655440002",
        DiagnosisCreate(
            diagnosis_name="Generalized Anxiety Disorder",
            justification=(
                "Excessive worry about multiple areas of life, difficulty "
                "controlling worry, restlessness, fatigue, difficulty "
                "concentrating, and sleep problems present for over 6 months. "
                "GAD-7 score of 15 indicates moderate anxiety."
            ),
            challenged_diagnosis="Adjustment Disorder with Anxiety",
            challenged_justification=(
                "Client's symptoms appear to be more situational and related to "
                "recent job loss rather than chronic anxiety. Symptoms may "
                "resolve with time and support."
            ),
        ),
    ),
    (
        "550e8400-e29b-41d4-a716-446655440003",
        DiagnosisCreate(
            diagnosis_name="Post-Traumatic Stress Disorder",
            justification=(
                "Client reports intrusive memories of car accident, avoidance of "
                "driving, hypervigilance, and sleep disturbances. PCL-5 score of "
                "45 indicates probable PTSD. Symptoms began after traumatic "
                "event 3 months ago."
            ),
        ),
    ),
    (
        "550e8400-e29b-41d4-a716-446655440004",
        DiagnosisCreate(
            diagnosis_name="Bipolar II Disorder",
            justification=(
                "History of hypomanic episodes lasting 4-7 days with elevated "
                "mood, increased energy, and decreased need for sleep, "
                "alternating with depressive episodes. Family history of "
                "bipolar disorder."
            ),
            challenged_diagnosis="Cyclothymic Disorder",
            challenged_justification=(
                "While client does experience mood fluctuations, the episodes "
                "may not meet full criteria for hypomania. Symptoms appear to be "
                "more chronic and less severe than typical bipolar II."
            ),
        ),
    ),
    (
        "550e8400-e29b-41d4-a716-446655440005",
        DiagnosisCreate(
            diagnosis_name="Social Anxiety Disorder",
            justification=(
                "Marked fear of social situations, avoidance of social "
                "interactions, fear of negative evaluation, and physical "
                "symptoms in social settings. LSAS score of 72 indicates severe "
                "social anxiety."
            ),
        ),
    ),
]


async def seed_session(db) -> int:
    """Replace all diagnoses with DEMO_DIAGNOSES inside `db`. Returns the inserted count."""
    await db.execute(delete(Diagnosis))
    for client_id, payload in DEMO_DIAGNOSES:
        db.add(Diagnosis(client_id=client_id, **payload.changes()))
    await db.commit()
    return len(DEMO_DIAGNOSES)


async def seed(database_url: str) -> int:
    engine, session_factory = create_session_factory(database_url)
    try:
        async with session_factory() as db:
            return await seed_session(db)
    finally:
        await engine.dispose()


def main() -> None:
    settings = get_settings()
    setup_logging(settings.log_level, "text")
    count = asyncio.run(seed(settings.database_url))
    logger.info(f"Seeded {count} diagnoses")


if __name__ == "__main__":
    main()
