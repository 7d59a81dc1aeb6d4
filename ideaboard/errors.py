"""Domain-level errors for the idea store."""


class IdeaNotFoundError(Exception):
    """Raised when an idea cannot be located."""

    def __init__(self, idea_id: str):
        super().__init__(f"Idea not found: {idea_id}")
        self.idea_id = idea_id
