"""Registration task API: trigger, enqueue, operator reset, and progress view.

Thin routes delegating to use cases. Partial task failure is a 200 with the
failures listed in taskResults; only input and infrastructure errors are
non-2xx.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from app.api.v1.dependencies import (
    get_enqueue_registration_tasks_use_case,
    get_process_registration_tasks_use_case,
    get_registration_progress_use_case,
    get_reset_registration_tasks_use_case,
)
from app.application.use_cases.registration import (
    EnqueueRegistrationTasksUseCase,
    GetRegistrationProgressUseCase,
    ProcessRegistrationTasksUseCase,
    ResetRegistrationTasksUseCase,
)
from app.core.limiter import limit_reads, limit_writes
from app.schemas.registration import (
    EnqueueRegistrationTasksRequest,
    EnqueueRegistrationTasksResponse,
    ProcessRegistrationTasksRequest,
    RegistrationProgressResponse,
    RegistrationRunResponse,
    ResetRegistrationTasksRequest,
    ResetRegistrationTasksResponse,
)

router = APIRouter()


@router.post("/process", response_model=RegistrationRunResponse)
@limit_writes
async def process_registration_tasks(
    request: Request,
    body: ProcessRegistrationTasksRequest,
    process_uc: Annotated[
        ProcessRegistrationTasksUseCase,
        Depends(get_process_registration_tasks_use_case),
    ],
):
    """Run the subject's pending tasks, then mark them fully registered if nothing is left."""
    result = await process_uc.execute(body.subject_id)
    return RegistrationRunResponse.model_validate(result)


@router.post("/enqueue", response_model=EnqueueRegistrationTasksResponse)
@limit_writes
async def enqueue_registration_tasks(
    request: Request,
    body: EnqueueRegistrationTasksRequest,
    enqueue_uc: Annotated[
        EnqueueRegistrationTasksUseCase,
        Depends(get_enqueue_registration_tasks_use_case),
    ],
):
    """Create the role's default task set (existing task types are left untouched)."""
    result = await enqueue_uc.execute(body.subject_id)
    return EnqueueRegistrationTasksResponse.model_validate(result)


@router.post("/reset", response_model=ResetRegistrationTasksResponse)
@limit_writes
async def reset_registration_tasks(
    request: Request,
    body: ResetRegistrationTasksRequest,
    reset_uc: Annotated[
        ResetRegistrationTasksUseCase,
        Depends(get_reset_registration_tasks_use_case),
    ],
):
    """Operator action: requeue stuck and/or failed tasks, optionally processing them."""
    result = await reset_uc.execute(
        body.subject_id,
        reset_stuck=body.reset_stuck,
        reset_failed=body.reset_failed,
        trigger=body.trigger,
    )
    return ResetRegistrationTasksResponse.model_validate(result)


@router.get("/{subject_id}", response_model=RegistrationProgressResponse)
@limit_reads
async def get_registration_progress(
    request: Request,
    subject_id: str,
    progress_uc: Annotated[
        GetRegistrationProgressUseCase,
        Depends(get_registration_progress_use_case),
    ],
):
    """Registration status and every task row, including errors (admin diagnostic)."""
    progress = await progress_uc.execute(subject_id)
    return RegistrationProgressResponse.model_validate(progress)
