from __future__ import annotations

from pydantic import BaseModel, Field, StrictStr


class ExecuteRequest(BaseModel):
    language: StrictStr = Field(..., description="Language identifier, case-insensitive (e.g. python, cpp).")
    code: StrictStr = Field(..., description="Source code to compile and run.")
    input: StrictStr | None = Field(None, description="Optional stdin passed to the program.")


class ExecuteResponse(BaseModel):
    output: StrictStr
    error: StrictStr


class LanguagesResponse(BaseModel):
    languages: list[StrictStr]
