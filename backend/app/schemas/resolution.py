"""
Name-mismatch resolution passed into the settlement engine.

Exactly one of the three variants is chosen by the user when the names on
the two sides of a pair differ.
"""
from pydantic import BaseModel, Field
from typing import Annotated, Literal, Union


class TypoResolution(BaseModel):
    """Same person, the names differ only by a typo. No annotation."""
    kind: Literal["typo"] = "typo"


class ThreeWayResolution(BaseModel):
    """Deliberately different people: a three-cornered trade."""
    kind: Literal["three_way"] = "three_way"


class OtherResolution(BaseModel):
    """Some other reason, recorded as a free-text note on both shifts."""
    kind: Literal["other"] = "other"
    note: str


MismatchResolution = Annotated[
    Union[TypoResolution, ThreeWayResolution, OtherResolution],
    Field(discriminator="kind"),
]
