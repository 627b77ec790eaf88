"""Wire shapes for equipment. Field names are camelCase on the wire."""

from __future__ import annotations

from typing import Optional, Union

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class EquipmentCreate(CamelModel):
    """Loose input shape; presence and format checks live in ``core.codes``."""

    line_item_numbers: Union[str, list[str], None] = None
    name: Optional[str] = None
    partial_code: Union[str, int, None] = None
    alternate_name: Optional[str] = None
    size_label: Optional[str] = None
    image_reference: Optional[str] = None


class EquipmentOut(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: str
    line_item_numbers: list[str]
    name: str
    partial_code: str
    alternate_name: str = ""
    size_label: str = ""
    image_reference: Optional[str] = None
    created_at: str


class EquipmentCreated(BaseModel):
    success: bool = True
    item: EquipmentOut
    message: str = "Item added successfully"


class UploadOut(BaseModel):
    success: bool = True
    filename: str
    url: str
    message: str = "Image uploaded successfully"
