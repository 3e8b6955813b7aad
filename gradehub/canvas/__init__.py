"""Canvas REST client and the payload models it returns."""

from .client import CanvasClient
from .models import Assignment, Course, Student, Submission, SubmissionUser

__all__ = [
    "Assignment",
    "CanvasClient",
    "Course",
    "Student",
    "Submission",
    "SubmissionUser",
]
