from pydantic import BaseModel, Field
from typing import List, Optional


class Person(BaseModel):
    """A person bound from form fields such as `people[0].name`."""

    name: str = Field(..., min_length=1, description="Display name of the person.")
    age: int = Field(..., ge=0, description="Age in years.")


class CollectionSummary(BaseModel):
    """Aggregate statistics for a bound integer collection."""

    count: int = Field(..., description="Number of bound values.")
    total: int = Field(0, description="Sum of the bound values.")
    minimum: Optional[int] = Field(None, description="Smallest value, if any.")
    maximum: Optional[int] = Field(None, description="Largest value, if any.")
    values: List[int] = Field(
        default_factory=list, description="The values in request order."
    )


class PeopleResponse(BaseModel):
    count: int = Field(..., description="Number of people bound from the form.")
    people: List[Person] = Field(default_factory=list)
