"""Configuration models."""

from carecommon.models.config import AppConfig, CommonConfig, LandingConfig, Program

__all__ = ["AppConfig", "CommonConfig", "LandingConfig", "Program"]
