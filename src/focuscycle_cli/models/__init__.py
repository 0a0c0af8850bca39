"""focuscycle domain models.

Pydantic configuration models and the work/break session package.
"""

from .config_models import AppConfig, OutputConfig, SessionConfig

__all__ = ["AppConfig", "OutputConfig", "SessionConfig"]
