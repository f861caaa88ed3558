from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class CodecConfigDTO(BaseModel):
    format: str = "xml"
    sort_keys: bool = True


class LoggingConfigDTO(BaseModel):
    level: str = "WARNING"


class PlistkitConfig(BaseModel):
    codec: CodecConfigDTO = CodecConfigDTO()
    logging: LoggingConfigDTO = LoggingConfigDTO()


class InspectResponseDTO(BaseModel):
    format: str
    format_description: str
    kind: str
    value: Any
