"""Persistence Module - best-effort sink for completed assessments.

Usage:
    from src.modules.persistence import AssessmentRecorder, InMemoryAssessmentRepository

    recorder = AssessmentRecorder(InMemoryAssessmentRepository(), timeout_seconds=10)
    await recorder.store_completed_assessment(session_id, results, user_info)
"""

from src.modules.persistence.interface import (
    IAssessmentRepository,
    StoreResult,
    build_assessment_record,
)
from src.modules.persistence.memory import InMemoryAssessmentRepository
from src.modules.persistence.recorder import AssessmentRecorder
from src.modules.persistence.supabase import SupabaseAssessmentRepository

__all__ = [
    "AssessmentRecorder",
    "IAssessmentRepository",
    "InMemoryAssessmentRepository",
    "StoreResult",
    "SupabaseAssessmentRepository",
    "build_assessment_record",
]
