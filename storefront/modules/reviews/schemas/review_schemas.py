# storefront/modules/reviews/schemas/review_schemas.py

from pydantic import BaseModel, ConfigDict, Field, conint, field_validator
from typing import Optional, List, Dict, Any, Union


DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"

# Largest id a 64-bit signed integer column can hold
MAX_ID = 2**63 - 1
MAX_TEXT_LENGTH = 255

ReviewId = conint(ge=0, le=MAX_ID)


def _strip_required(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip()
    if not v:
        raise ValueError("must not be empty")
    return v


# Request schemas
class ReviewCreate(BaseModel):
    """Payload accepted when creating a review"""

    review: str = Field(..., description="The content of the review.")
    name: str = Field(..., max_length=MAX_TEXT_LENGTH, description="Reviewer name.")
    email: str = Field(..., max_length=MAX_TEXT_LENGTH, description="Reviewer email.")
    rating: int = Field(0, ge=0, le=5, description="Review rating (0 to 5).")

    @field_validator("review", "name", "email")
    @classmethod
    def validate_not_empty(cls, v):
        return _strip_required(v)


class ReviewUpdate(BaseModel):
    """Partial update; only supplied fields are written"""

    review: Optional[str] = None
    name: Optional[str] = Field(None, max_length=MAX_TEXT_LENGTH)
    email: Optional[str] = Field(None, max_length=MAX_TEXT_LENGTH)
    rating: Optional[int] = Field(None, ge=0, le=5)

    @field_validator("review", "name", "email")
    @classmethod
    def validate_not_empty(cls, v):
        return _strip_required(v)


class ReviewBatchUpdateItem(ReviewUpdate):
    """Batch update entry: the target id plus the fields to change"""

    id: ReviewId


class ReviewBatchRequest(BaseModel):
    """Batch body. Create and update entries are validated one by one while the batch runs."""

    create: Optional[List[Dict[str, Any]]] = None
    update: Optional[List[Dict[str, Any]]] = None
    delete: Optional[List[ReviewId]] = None

    def item_count(self) -> int:
        return sum(len(items or []) for items in (self.create, self.update, self.delete))


# Response schemas
class ReviewResponse(BaseModel):
    """Public representation of a review"""

    id: int = Field(
        ...,
        description="Unique identifier for the resource.",
        json_schema_extra={"readonly": True},
    )
    date_created: str = Field(
        ...,
        description="The date the review was created, in the site's timezone.",
        json_schema_extra={"format": "date-time", "readonly": True},
    )
    review: str = Field(..., description="The content of the review.")
    rating: int = Field(..., description="Review rating (0 to 5).")
    name: str = Field(..., description="Reviewer name.")
    email: str = Field(
        ..., description="Reviewer email.", json_schema_extra={"format": "email"}
    )
    verified: bool = Field(
        ...,
        description="Shows if the reviewer bought the product or not.",
        json_schema_extra={"readonly": True},
    )


class Link(BaseModel):
    href: str


class ReviewLinks(BaseModel):
    self: List[Link]
    collection: List[Link]
    up: List[Link]


class ReviewListItem(ReviewResponse):
    """Review as embedded in a collection response"""

    model_config = ConfigDict(populate_by_name=True)

    links: ReviewLinks = Field(..., alias="_links")


class BatchErrorDetail(BaseModel):
    code: str
    message: str
    data: Dict[str, Any]


class BatchItemError(BaseModel):
    """A batch entry that failed; the rest of the batch still commits"""

    id: int
    error: BatchErrorDetail


BatchItemResult = Union[ReviewResponse, BatchItemError]


class ReviewBatchResponse(BaseModel):
    create: Optional[List[BatchItemResult]] = None
    update: Optional[List[BatchItemResult]] = None
    delete: Optional[List[BatchItemResult]] = None


class ReviewSchemaDocument(BaseModel):
    """OPTIONS response describing the collection"""

    model_config = ConfigDict(populate_by_name=True)

    namespace: str
    methods: List[str]
    schema_: Dict[str, Any] = Field(..., alias="schema")


def build_review_schema() -> Dict[str, Any]:
    """
    JSON schema of a review, generated from ``ReviewResponse``.

    Each property carries its type, description, the contexts it appears
    in, and whether clients may write it.
    """
    generated = ReviewResponse.model_json_schema()
    properties = {}
    for name, field_schema in generated["properties"].items():
        prop = {
            "description": field_schema.get("description", ""),
            "type": field_schema.get("type", "string"),
            "context": ["view", "edit"],
            "readonly": bool(field_schema.get("readonly", False)),
        }
        if "format" in field_schema:
            prop["format"] = field_schema["format"]
        properties[name] = prop

    return {
        "$schema": "http://json-schema.org/draft-04/schema#",
        "title": "product_review",
        "type": "object",
        "properties": properties,
    }
