#!/usr/bin/env python3
"""
Validation Module
Input-validation errors raised before any output is generated.
"""

from dataclasses import dataclass
from typing import List


@dataclass
class ValidationIssue:
    """Single problem found in the input scene graph

    Attributes:
        path: Slash-separated node path where the problem was found
        message: Human-readable description
        code: Short machine-readable category
    """
    path: str
    message: str
    code: str = "invalid"

    def __str__(self) -> str:
        return f"{self.path}: {self.message} ({self.code})"


class SceneValidationError(ValueError):
    """Raised when a scene graph is malformed; carries every issue found"""

    def __init__(self, issues: List[ValidationIssue]):
        self.issues = list(issues)
        lines = "\n".join(f"  - {issue}" for issue in self.issues)
        super().__init__(f"Scene graph validation failed ({len(self.issues)} issue(s)):\n{lines}")
