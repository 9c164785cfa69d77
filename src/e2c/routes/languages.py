"""Supported language listing."""

from fastapi import APIRouter

from e2c.schemas.problems import LanguageList
from e2c.services.validation.languages import supported_languages

router = APIRouter()


@router.get("", response_model=LanguageList)
async def list_languages() -> LanguageList:
    """Languages accepted for reference solutions and code snippets."""
    return LanguageList(items=supported_languages())
