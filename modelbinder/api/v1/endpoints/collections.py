import logging
from typing import List, Sequence

from fastapi import APIRouter, Depends

from modelbinder.api.v1 import dependencies as deps
from modelbinder.models.collections import CollectionSummary, PeopleResponse, Person

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get(
    "/summary",
    response_model=CollectionSummary,
    summary="Summarize an integer collection",
    description=(
        "Binds `values` as `Sequence[int]` from the query string. Accepts `?values=1&values=2`, "
        "`?values[0]=1&values[1]=2` or explicit indexes via `values.index`."
    ),
)
async def summarize_values(
    values: Sequence[int] = Depends(deps.bind_from_request(Sequence[int], "values")),
) -> CollectionSummary:
    logger.info(f"Summarizing {len(values)} bound value(s)")
    items = [value for value in values if value is not None]
    return CollectionSummary(
        count=len(values),
        total=sum(items),
        minimum=min(items) if items else None,
        maximum=max(items) if items else None,
        values=items,
    )


@router.post(
    "/people",
    response_model=PeopleResponse,
    summary="Bind a list of people from a form",
    description="Binds `people` as `List[Person]` from fields such as `people[0].name` and `people[0].age`.",
)
async def create_people(
    people: List[Person] = Depends(
        deps.bind_from_request(List[Person], "people", required=True)
    ),
) -> PeopleResponse:
    logger.info(f"Bound {len(people)} people from form data")
    return PeopleResponse(count=len(people), people=people)
