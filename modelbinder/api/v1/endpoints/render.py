import html
import logging
from typing import List

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse

from modelbinder.api.v1 import dependencies as deps
from modelbinder.core.html import HtmlString

router = APIRouter()
logger = logging.getLogger(__name__)


def render_item_list(items: List[str]) -> HtmlString:
    """Renders items as an HTML `<ul>`; every item is escaped, the markup is not."""
    lines = ["<ul>"]
    lines.extend(f"<li>{html.escape(item)}</li>" for item in items)
    lines.append("</ul>")
    return HtmlString("".join(lines))


@router.get(
    "/list",
    response_class=HTMLResponse,
    summary="Render bound items as an HTML list",
)
async def render_list(
    items: List[str] = Depends(deps.bind_from_request(List[str], "items")),
) -> HTMLResponse:
    logger.info(f"Rendering {len(items)} item(s) as HTML")
    fragment = render_item_list(items)
    return HTMLResponse(content=str(fragment))
