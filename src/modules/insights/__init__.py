"""Insights Module - AI-generated insights at batch milestones.

Usage:
    from src.modules.insights import AIInsightClient, InsightBatchTrigger

    trigger = InsightBatchTrigger(client)
    insight = await trigger.check_and_generate(session)
"""

from src.modules.insights.client import AIInsightClient
from src.modules.insights.interface import (
    FinalAssessmentPayload,
    FinalAssessmentRequest,
    IInsightClient,
    InsightBatch,
    InsightPayload,
)
from src.modules.insights.trigger import BatchSpec, InsightBatchTrigger, build_batch_specs

__all__ = [
    # Interface types
    "FinalAssessmentPayload",
    "FinalAssessmentRequest",
    "IInsightClient",
    "InsightBatch",
    "InsightPayload",
    # Implementations
    "AIInsightClient",
    "BatchSpec",
    "InsightBatchTrigger",
    "build_batch_specs",
]
