"""Quiz grading: grade items, overall feedback and their web services."""

from .feedback_form import OverallFeedbackForm, validate_boundaries
from .structure import QuizStructure

__all__ = ["OverallFeedbackForm", "QuizStructure", "validate_boundaries"]
