"""Feedback categories used for classification and filtering."""

from enum import Enum


class Category(str, Enum):
    """Closed set of feedback categories.

    The value is the display label. Classification output, storage and
    query filtering all use this same string.
    """

    ACADEMICS = "Academics"
    INFRASTRUCTURE = "Infrastructure"
    PLACEMENT = "Placement"
    OTHER = "Other"

    @property
    def display_name(self) -> str:
        """Get human-readable display name."""
        return self.value

    @classmethod
    def from_string(cls, value: str | None) -> "Category | None":
        """Create Category from a label, ignoring case."""
        if not value:
            return None
        lowered = value.strip().lower()
        for category in cls:
            if category.value.lower() == lowered:
                return category
        return None

    @classmethod
    def classifiable(cls) -> list["Category"]:
        """Categories a classifier may pick, in match priority order."""
        return [cls.ACADEMICS, cls.INFRASTRUCTURE, cls.PLACEMENT]
