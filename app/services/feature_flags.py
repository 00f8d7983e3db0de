"""
NaijaTax Compliance - Feature Flags

Feature access by subscription plan. The plan lives on the user, so gating
needs no lookup beyond the authenticated user.

Plans:
- FREE: VAT and CIT tracking
- STARTER: + WHT management
- STANDARD / PREMIUM: + payroll and VAT remittance tracking
"""

import logging
from enum import Enum
from typing import Dict, Optional, Set

from app.models.user import SubscriptionPlan, User
from app.utils.error_handling import FeatureNotAvailableException

logger = logging.getLogger(__name__)


class Feature(str, Enum):
    VAT_TRACKING = "vat_tracking"
    CIT_TRACKING = "cit_tracking"
    WHT_MANAGEMENT = "wht_management"
    PAYROLL = "payroll"
    VAT_REMITTANCE = "vat_remittance"


# =============================================================================
# FEATURE PLAN MAPPING
# =============================================================================

_FREE = {Feature.VAT_TRACKING, Feature.CIT_TRACKING}
_STARTER = _FREE | {Feature.WHT_MANAGEMENT}
_STANDARD = _STARTER | {Feature.PAYROLL, Feature.VAT_REMITTANCE}

PLAN_FEATURES: Dict[SubscriptionPlan, Set[Feature]] = {
    SubscriptionPlan.FREE: _FREE,
    SubscriptionPlan.STARTER: _STARTER,
    SubscriptionPlan.STANDARD: _STANDARD,
    SubscriptionPlan.PREMIUM: set(_STANDARD),
}

# Cheapest first, for upgrade hints
PLAN_ORDER = [
    SubscriptionPlan.FREE,
    SubscriptionPlan.STARTER,
    SubscriptionPlan.STANDARD,
    SubscriptionPlan.PREMIUM,
]


def get_plan_features(plan: SubscriptionPlan) -> Set[Feature]:
    return set(PLAN_FEATURES.get(SubscriptionPlan(plan), set()))


def feature_requires_plan(feature: Feature) -> Optional[SubscriptionPlan]:
    """Cheapest plan that includes the feature."""
    for plan in PLAN_ORDER:
        if feature in PLAN_FEATURES[plan]:
            return plan
    return None


def has_feature(user: User, feature: Feature) -> bool:
    return Feature(feature) in get_plan_features(user.subscription_plan)


def check_feature(user: User, feature: Feature) -> None:
    """Raise FeatureNotAvailableException if the user's plan lacks the feature."""
    if has_feature(user, feature):
        return

    plan = SubscriptionPlan(user.subscription_plan)
    required = feature_requires_plan(feature)
    logger.info(f"Feature {feature.value} denied for user {user.id} on {plan.value} plan")
    raise FeatureNotAvailableException(
        feature=feature.value,
        plan=plan.value,
        required_plan=required.value if required else None,
    )
