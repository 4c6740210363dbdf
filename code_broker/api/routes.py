from __future__ import annotations

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from code_broker.core.config import Settings, get_settings
from code_broker.models.schemas import ExecuteRequest, ExecuteResponse, LanguagesResponse
from code_broker.services.executor import ExecutionResult, ExecutionStatus, execute_request
from code_broker.services.toolchains import supported_languages


router = APIRouter()


@router.post("/execute", response_model=ExecuteResponse, status_code=status.HTTP_200_OK)
def execute(req: ExecuteRequest, settings: Settings = Depends(get_settings)) -> ExecuteResponse | JSONResponse:
    """Compile and run the submitted code in an ephemeral container.

    Runs on the threadpool, so each request gets its own worker thread while
    the container executes.
    """
    result: ExecutionResult = execute_request(
        language=req.language,
        code=req.code,
        stdin=req.input,
        settings=settings,
    )

    body = ExecuteResponse(output=result.output, error=result.error)
    if result.status is ExecutionStatus.SERVER_ERROR:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=body.model_dump(),
        )
    return body


@router.get("/languages", response_model=LanguagesResponse)
def languages() -> LanguagesResponse:
    return LanguagesResponse(languages=supported_languages())
