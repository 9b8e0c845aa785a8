"""标签相关的响应模型。"""

from typing import List

from pydantic import BaseModel

from app.packages.inventory.api.v1.schemas.common import ResponseEnvelope


class TagItem(BaseModel):
    id: int
    name: str


TagListResponse = ResponseEnvelope[List[TagItem]]
