from fastapi import APIRouter, HTTPException
from fastapi.responses import PlainTextResponse

from ..themes import DEFAULT_THEME, THEMES, css_variables

router = APIRouter(prefix="/themes", tags=["Themes"])


@router.get("")
async def get_themes():
    """Available colour themes and the default"""
    return {"default": DEFAULT_THEME, "themes": THEMES}


@router.get("/{name}/css", response_class=PlainTextResponse)
async def get_theme_css(name: str):
    css = css_variables(name)
    if css is None:
        raise HTTPException(status_code=404, detail="Theme not found")
    return PlainTextResponse(css, media_type="text/css")
