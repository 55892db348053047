"""
Store Review Validation
Pre-submission checks against App Store and Play Store review rules.
"""

import math
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .models import ApplicationModel, Target


class ReviewCheck(BaseModel):
    """One review rule."""

    model_config = ConfigDict(frozen=True)

    severity: Literal["error", "warning"]
    category: str
    message: str
    guideline: str
    fix: Optional[str] = None


class StoreListing(BaseModel):
    """Listing facts that are not part of the Application Model."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    privacy_policy_url: Optional[str] = None
    data_safety_declared: bool = False
    screenshots: tuple[str, ...] = ()
    test_account: Optional[str] = None


class ReviewResult(BaseModel):
    """Verdict for one target."""

    model_config = ConfigDict(frozen=True)

    valid: bool
    score: int
    issues: tuple[ReviewCheck, ...] = ()
    warnings: tuple[ReviewCheck, ...] = ()
    recommendations: tuple[str, ...] = ()


# ============================================================================
# App Store (iOS)
# ============================================================================

APP_STORE_CHECKS: Dict[str, ReviewCheck] = {
    "incomplete_app": ReviewCheck(
        severity="error", category="Completeness",
        message="App must be complete and fully functional", guideline="2.1 - Performance",
        fix="Define at least one screen",
    ),
    "placeholder_content": ReviewCheck(
        severity="error", category="Content",
        message="No placeholder or demo content allowed", guideline="2.3.1 - Accuracy",
    ),
    "sign_in_with_apple": ReviewCheck(
        severity="error", category="Sign In",
        message="Sign in with Apple required if using social login", guideline="4.1 - Sign in with Apple",
        fix="Add the apple-login feature",
    ),
    "account_deletion": ReviewCheck(
        severity="error", category="Privacy",
        message="Users must be able to delete account in-app", guideline="5.1.1 - Data Collection",
        fix="Add the delete-account feature",
    ),
    "restore_purchases": ReviewCheck(
        severity="error", category="Purchases",
        message="Restore Purchases button required for IAP", guideline="3.1.1 - In-App Purchase",
        fix="Add the restore-purchases feature",
    ),
    "dark_mode": ReviewCheck(
        severity="warning", category="Design",
        message="Should support Dark Mode", guideline="4.1 - Design",
    ),
}

# ============================================================================
# Play Store (Android)
# ============================================================================

PLAY_STORE_CHECKS: Dict[str, ReviewCheck] = {
    "privacy_policy": ReviewCheck(
        severity="error", category="Privacy",
        message="Privacy policy URL required", guideline="Content Policy",
    ),
    "data_safety": ReviewCheck(
        severity="error", category="Privacy",
        message="Data Safety form must be completed", guideline="Data Safety",
    ),
    "app_name": ReviewCheck(
        severity="error", category="Content",
        message="App name must be at least 2 characters", guideline="Naming Policy",
    ),
    "screenshots": ReviewCheck(
        severity="error", category="Content",
        message="At least 2 screenshots required", guideline="Graphic Assets",
    ),
    "test_account": ReviewCheck(
        severity="error", category="Testing",
        message="Test account required for apps with login", guideline="App Testing",
    ),
}

SOCIAL_LOGIN_FEATURES = {"google-login", "facebook-login", "twitter-login"}
LOGIN_FEATURES = SOCIAL_LOGIN_FEATURES | {"auth", "authentication", "login", "apple-login"}
PLACEHOLDER_WORDS = ("placeholder", "demo")


def review_score(issue_count: int, warning_count: int) -> int:
    """100 with nothing flagged, else the warning share rounded half up."""
    total = issue_count + warning_count
    if total == 0:
        return 100
    return math.floor(100 * warning_count / total + 0.5)


class StoreReviewValidator:
    """Validates an Application Model against store review rules."""

    def validate(
        self, app: ApplicationModel, target: Target, listing: Optional[StoreListing] = None
    ) -> ReviewResult:
        """
        Run the rule tables for a target.

        iOS rules apply to ios and react-native, Play rules to android and
        react-native. The web target has no store rules.
        """
        listing = listing or StoreListing()
        checks: List[ReviewCheck] = []
        recommendations: List[str] = []

        if target in (Target.IOS, Target.REACT_NATIVE):
            checks += self._validate_ios(app)
            recommendations.append("Support VoiceOver and Dynamic Type (4.4 - Accessibility)")
            recommendations.append("Include PrivacyInfo.xcprivacy in the bundle (4.2 - Privacy)")

        if target in (Target.ANDROID, Target.REACT_NATIVE):
            checks += self._validate_android(app, listing)
            recommendations.append("Target SDK 33 or higher (Target API 33+)")

        if app.permissions and any(not p.description for p in app.permissions):
            recommendations.append("Describe why each permission is needed")

        issues = tuple(c for c in checks if c.severity == "error")
        warnings = tuple(c for c in checks if c.severity == "warning")

        return ReviewResult(
            valid=not issues,
            score=review_score(len(issues), len(warnings)),
            issues=issues,
            warnings=warnings,
            recommendations=tuple(recommendations),
        )

    def _validate_ios(self, app: ApplicationModel) -> List[ReviewCheck]:
        checks = []
        features = set(app.enabled_features)

        if not app.screens:
            checks.append(APP_STORE_CHECKS["incomplete_app"])

        description = app.description.lower()
        if any(word in description for word in PLACEHOLDER_WORDS):
            checks.append(APP_STORE_CHECKS["placeholder_content"])

        if features & SOCIAL_LOGIN_FEATURES and "apple-login" not in features:
            checks.append(APP_STORE_CHECKS["sign_in_with_apple"])

        if features & LOGIN_FEATURES and "delete-account" not in features:
            checks.append(APP_STORE_CHECKS["account_deletion"])

        if "in-app-purchases" in features and "restore-purchases" not in features:
            checks.append(APP_STORE_CHECKS["restore_purchases"])

        if not app.theme.dark_mode:
            checks.append(APP_STORE_CHECKS["dark_mode"])

        return checks

    def _validate_android(self, app: ApplicationModel, listing: StoreListing) -> List[ReviewCheck]:
        checks = []

        if not listing.privacy_policy_url:
            checks.append(PLAY_STORE_CHECKS["privacy_policy"])

        if not listing.data_safety_declared:
            checks.append(PLAY_STORE_CHECKS["data_safety"])

        if len(app.name) < 2:
            checks.append(PLAY_STORE_CHECKS["app_name"])

        if len(listing.screenshots) < 2:
            checks.append(PLAY_STORE_CHECKS["screenshots"])

        if set(app.enabled_features) & LOGIN_FEATURES and not listing.test_account:
            checks.append(PLAY_STORE_CHECKS["test_account"])

        return checks

    def generate_report(self, result: ReviewResult, target: Target) -> str:
        """Markdown summary of a review."""
        store = {Target.IOS: "App Store", Target.ANDROID: "Play Store"}.get(target, "Stores")

        lines = [
            f"# {store} Review Validation",
            "",
            f"**Status:** {'Ready for Submission' if result.valid else 'Needs Fixes'}",
            f"**Score:** {result.score}%",
            "",
        ]

        if result.issues:
            lines += ["## Critical Issues", ""]
            for issue in result.issues:
                lines.append(f"### {issue.category}")
                lines.append(f"> {issue.message}")
                lines.append(f"Guideline: {issue.guideline}")
                if issue.fix:
                    lines.append(f"Fix: {issue.fix}")
                lines.append("")

        if result.warnings:
            lines += ["## Warnings", ""]
            lines += [f"- **{w.category}**: {w.message}" for w in result.warnings]
            lines.append("")

        if result.recommendations:
            lines += ["## Recommendations", ""]
            lines += [f"- {r}" for r in result.recommendations]

        return "\n".join(lines).rstrip() + "\n"


store_validator = StoreReviewValidator()

__all__ = [
    "ReviewCheck",
    "StoreListing",
    "ReviewResult",
    "StoreReviewValidator",
    "review_score",
    "store_validator",
    "APP_STORE_CHECKS",
    "PLAY_STORE_CHECKS",
]
