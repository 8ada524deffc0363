"""Watering decision rule.

A reading that indicates precipitation (rain, drizzle, thunderstorms, snow,
sleet or hail) means the owner can skip watering today. Anything else means
they should water.

Readings the provider could not classify (`WeatherCondition.UNKNOWN`) fall
back to a configurable policy, `water_now` by default: a missed watering is
worse for the lawn than an unnecessary one.
"""

from __future__ import annotations

from lawn_advisor.models.advisory import AdvisoryDecision, Recommendation
from lawn_advisor.models.plan import LawnCarePlan
from lawn_advisor.models.weather import WeatherReading

NOTIFICATION_SUBJECT = "Lawn Care Notification"

SKIP_WATERING_MESSAGE = (
    "Dear user, it is expected to rain today in your area. "
    "You do not need to water your lawn today."
)
WATER_NOW_MESSAGE = (
    "Dear user, we recommend watering your lawn today as no rain is expected."
)

MESSAGES: dict[Recommendation, str] = {
    Recommendation.SKIP_WATERING: SKIP_WATERING_MESSAGE,
    Recommendation.WATER_NOW: WATER_NOW_MESSAGE,
}


def evaluate(
    reading: WeatherReading,
    unknown_policy: Recommendation = Recommendation.WATER_NOW,
) -> AdvisoryDecision:
    """Map a weather reading to a watering decision.

    Args:
        reading: Current conditions at the plan's location
        unknown_policy: Recommendation used for unclassified conditions

    Returns:
        AdvisoryDecision with the fixed message for the recommendation
    """
    if reading.is_unknown:
        recommendation = unknown_policy
    elif reading.is_precipitation:
        recommendation = Recommendation.SKIP_WATERING
    else:
        recommendation = Recommendation.WATER_NOW

    return AdvisoryDecision(
        recommendation=recommendation,
        subject=NOTIFICATION_SUBJECT,
        message=MESSAGES[recommendation],
        condition=reading.condition,
    )


class AdvisoryEvaluator:
    """Callable evaluator with a fixed policy for unknown conditions."""

    def __init__(self, unknown_policy: Recommendation = Recommendation.WATER_NOW):
        self.unknown_policy = unknown_policy

    def __call__(self, reading: WeatherReading) -> AdvisoryDecision:
        return evaluate(reading, unknown_policy=self.unknown_policy)


def render_message(decision: AdvisoryDecision, plan: LawnCarePlan) -> str:
    """Personalise the advisory text for a plan's owner."""
    body = decision.message
    if plan.owner_name:
        body = body.replace("Dear user", f"Dear {plan.owner_name}", 1)
    if plan.name:
        body = f"{body}\n\nLawn: {plan.name}"
    return body
