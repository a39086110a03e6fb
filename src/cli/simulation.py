"""Canned assessment run used by the ``simulate`` and ``check-ai`` commands."""

from src.modules.assessment.interface import AssessmentResponse, ResponseType, UserInfo

SAMPLE_USER = UserInfo(
    email="demo@example.com",
    company="Example Analytics",
    product_name="Pipeline Radar",
    product_description="Forecasting dashboard for B2B sales teams",
    business_model="B2B SaaS",
    distinguishing_feature="Predicts deal slippage from CRM activity",
    competitive_positioning="Lighter weight than enterprise forecasting suites",
)

QUESTIONS: list[tuple[str, ResponseType]] = [
    ("How well do you understand your buyers' day-to-day problems?", ResponseType.SCALE),
    ("Who is the economic buyer in a typical deal?", ResponseType.TEXT),
    ("How confident are you explaining technical features in business terms?", ResponseType.SCALE),
    ("How often do you quantify the cost of the buyer's problem?", ResponseType.SCALE),
    ("Describe how you open a first discovery call.", ResponseType.TEXT),
    ("How consistently do you tie features to revenue outcomes?", ResponseType.SCALE),
    ("How well can you justify your pricing against alternatives?", ResponseType.SCALE),
    ("What objection do you hear most often?", ResponseType.TEXT),
    ("How clearly can you state your ROI in one sentence?", ResponseType.SCALE),
    ("How well do you understand the buyer's competitive landscape?", ResponseType.SCALE),
    ("How do you decide which deals to prioritize?", ResponseType.TEXT),
    ("How aligned is your roadmap with what buyers ask for?", ResponseType.SCALE),
]

TEXT_ANSWERS = {
    1: "Usually the VP of Sales, sometimes the CFO for larger contracts.",
    4: "I walk through the product demo and ask what they are using today.",
    7: "It is too expensive compared to spreadsheets.",
    10: "Whichever prospect replied most recently.",
}


def build_simulated_responses(scale: int) -> list[AssessmentResponse]:
    """Twelve responses answering every scale question with ``scale``."""
    responses = []
    for index, (text, response_type) in enumerate(QUESTIONS):
        if response_type is ResponseType.SCALE:
            answer: int | str = scale
        else:
            answer = TEXT_ANSWERS.get(index, "No answer")
        responses.append(AssessmentResponse(
            question_id=f"q{index + 1}",
            question_text=text,
            response=answer,
            response_type=response_type,
        ))
    return responses
