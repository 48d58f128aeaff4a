"""Form-related Pydantic models"""
from pydantic import BaseModel, Field
from typing import Dict, Any, Optional, Literal

FormStatus = Literal["draft", "published", "archived"]


class FormCreate(BaseModel):
    """Create a form (admin)"""
    title: str = Field(..., min_length=1)
    description: Optional[str] = ""
    json_schema: Dict[str, Any]
    status: FormStatus = "draft"


class FormUpdate(BaseModel):
    """Partial form update, unset fields are left untouched"""
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    json_schema: Optional[Dict[str, Any]] = None
    status: Optional[FormStatus] = None
