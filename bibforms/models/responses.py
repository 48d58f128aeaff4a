"""Form response Pydantic models"""
from pydantic import BaseModel, Field
from typing import Dict, Any, List, Optional


class ResponseSubmitRequest(BaseModel):
    """Form response submission.

    Both fields are optional at the schema level so that missing values are
    reported by the submission service as a 400 with a readable message.
    """
    form_id: Optional[str] = None
    response_data: Optional[Any] = None


class FormSubmitRequest(BaseModel):
    """Submission where the form id comes from the URL"""
    response_data: Optional[Any] = None


class ResponseSubmitResponse(BaseModel):
    """Response after a successful submission"""
    message: str
    response: Dict[str, Any]


class FileMetadataCreate(BaseModel):
    """Metadata of a file uploaded as an answer to a question"""
    form_response_id: str
    question_name: str
    file_name: str
    file_path: str
    file_size: int = Field(0, ge=0)
    file_type: str = "application/octet-stream"


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    totalPages: int


class PaginatedResponses(BaseModel):
    """One page of a form's responses"""
    responses: List[Dict[str, Any]]
    pagination: Pagination
