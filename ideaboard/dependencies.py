"""FastAPI dependencies resolving the objects wired up in ``create_app``."""

from fastapi import Request

from ideaboard.config import Settings
from ideaboard.storage import IdeaStore


def get_store(request: Request) -> IdeaStore:
    return request.app.state.store


def get_settings(request: Request) -> Settings:
    return request.app.state.settings
