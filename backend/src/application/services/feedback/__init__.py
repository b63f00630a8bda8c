from .feedback_service import FeedbackService, FeedbackResult, apply_feedback

__all__ = ["FeedbackService", "FeedbackResult", "apply_feedback"]
