"""ORM models for survey_db."""

from survey_db.models.base import Base
from survey_db.models.survey_response import PromptResponseRecord, SurveyResponseRecord

__all__ = ["Base", "PromptResponseRecord", "SurveyResponseRecord"]
