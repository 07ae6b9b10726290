"""
Source Map (revision 3) document model
"""

from typing import List, Optional

from pydantic import BaseModel, Field


class SourceMap(BaseModel):
    """
    A version 3 source map linking generated Python to the template

    ``mappings`` holds the base64 VLQ encoded segments, one group per
    generated line. ``sourcesContent`` is only set for the variant that
    embeds the template text.
    """

    version: int = 3
    file: str
    sources: List[str]
    sourcesContent: Optional[List[str]] = None
    names: List[str] = Field(default_factory=list)
    mappings: str = ""

    def json_get(self) -> str:
        """Serialize, leaving out fields that are not set"""
        return self.model_dump_json(exclude_none=True)
