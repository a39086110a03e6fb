"""Feature flag management for safe feature rollout.

Usage:
    from src.shared.feature_flags import get_feature_flags, FeatureFlags

    flags = get_feature_flags()
    if flags.is_enabled(FeatureFlags.USE_SUPABASE_PERSISTENCE):
        # Send completed assessments to Supabase
    else:
        # Keep them in memory

Environment Variables:
    FF_ENABLE_AI_INSIGHTS: Call the AI service for insights (default: true)
    FF_USE_SUPABASE_PERSISTENCE: Store results in Supabase (default: false)
    FF_ENABLE_BACKGROUND_JOBS: Run the session cleanup scheduler (default: false)
"""

from enum import Enum
from functools import lru_cache
import logging
import os

logger = logging.getLogger(__name__)

_TRUTHY = ("true", "1", "yes", "on")


class FeatureFlags(str, Enum):
    """Available feature flags.

    Each flag corresponds to an environment variable with FF_ prefix.
    """

    ENABLE_AI_INSIGHTS = "enable_ai_insights"
    USE_SUPABASE_PERSISTENCE = "use_supabase_persistence"
    ENABLE_BACKGROUND_JOBS = "enable_background_jobs"

    @property
    def env_key(self) -> str:
        """Get the environment variable name for this flag."""
        return f"FF_{self.value.upper()}"

    @property
    def default(self) -> bool:
        return self is FeatureFlags.ENABLE_AI_INSIGHTS


class FeatureFlagManager:
    """Manages feature flags with environment variable and runtime overrides."""

    _instance: "FeatureFlagManager | None" = None

    def __new__(cls) -> "FeatureFlagManager":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self) -> None:
        if self._initialized:
            return
        self._overrides: dict[str, bool] = {}
        self._initialized = True
        logger.info("FeatureFlagManager initialized")

    def is_enabled(self, flag: FeatureFlags) -> bool:
        """Check if a feature flag is enabled.

        Priority:
        1. Runtime overrides (set via enable/disable methods)
        2. Environment variables (FF_<FLAG_NAME>=true/false)
        3. The flag's default

        Args:
            flag: The feature flag to check

        Returns:
            True if the flag is enabled, False otherwise
        """
        if flag.value in self._overrides:
            return self._overrides[flag.value]

        env_value = os.getenv(flag.env_key)
        if env_value is None:
            return flag.default
        return env_value.lower() in _TRUTHY

    def enable(self, flag: FeatureFlags) -> None:
        """Enable a feature flag at runtime."""
        self._overrides[flag.value] = True
        logger.info(f"Feature flag enabled: {flag.value}")

    def disable(self, flag: FeatureFlags) -> None:
        """Disable a feature flag at runtime."""
        self._overrides[flag.value] = False
        logger.info(f"Feature flag disabled: {flag.value}")

    def clear_all_overrides(self) -> None:
        """Clear all runtime overrides, reverting to environment variables."""
        self._overrides.clear()
        logger.info("All feature flag overrides cleared")

    def get_all_states(self) -> dict[str, bool]:
        """Get the current state of all feature flags.

        Returns:
            Dictionary of flag names to their enabled states
        """
        return {flag.value: self.is_enabled(flag) for flag in FeatureFlags}

    def __repr__(self) -> str:
        states = self.get_all_states()
        enabled = [k for k, v in states.items() if v]
        return f"FeatureFlagManager(enabled={enabled})"


@lru_cache
def get_feature_flags() -> FeatureFlagManager:
    """Get the shared FeatureFlagManager instance."""
    return FeatureFlagManager()


def is_ai_insights_enabled() -> bool:
    """Check if AI insight generation is enabled."""
    return get_feature_flags().is_enabled(FeatureFlags.ENABLE_AI_INSIGHTS)


def is_supabase_persistence_enabled() -> bool:
    """Check if Supabase persistence is enabled."""
    return get_feature_flags().is_enabled(FeatureFlags.USE_SUPABASE_PERSISTENCE)


def is_background_jobs_enabled() -> bool:
    """Check if background jobs are enabled."""
    return get_feature_flags().is_enabled(FeatureFlags.ENABLE_BACKGROUND_JOBS)
