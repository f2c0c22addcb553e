"""survey_db — PostgreSQL persistence layer for survey responses.

This package provides the ORM models, async engine factory, and repository
that store validated ``PromptResponse`` objects and stream them back as
``ResponseRow`` records for reconstruction.
"""

from survey_db.engine import dispose_engine, get_engine, get_session_factory
from survey_db.models.survey_response import PromptResponseRecord, SurveyResponseRecord
from survey_db.repository import SurveyResponseRepository

__all__ = [
    "PromptResponseRecord",
    "SurveyResponseRecord",
    "SurveyResponseRepository",
    "dispose_engine",
    "get_engine",
    "get_session_factory",
]
