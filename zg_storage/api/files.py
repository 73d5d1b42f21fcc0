import os
from typing import Union

from fastapi import APIRouter, BackgroundTasks, Depends, File, Path, UploadFile, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import FileResponse, JSONResponse

from zg_storage.api.deps import get_file_storage, get_transfer_manager
from zg_storage.errors import DownloadError, StreamingError
from zg_storage.models import ErrorResponse, UploadResponse
from zg_storage.services import TransferManager, UploadReceipt, is_root_hash
from zg_storage.storage import FileSystemStorage

router = APIRouter()


@router.post(
    "/upload",
    response_model=UploadResponse,
    summary="Upload a file",
    description="Upload a file to 0G Storage.",
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse, "description": "No file uploaded"},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse, "description": "Server error"},
    },
)
async def upload_file(
    file: Union[UploadFile, str, None] = File(None, description="File to store."),
    manager: TransferManager = Depends(get_transfer_manager),
    storage: FileSystemStorage = Depends(get_file_storage),
):
    if not isinstance(file, UploadFile):
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": "No file uploaded"})

    try:
        receipt = await run_in_threadpool(_stage_and_upload, manager, storage, file)
    finally:
        await file.close()

    return UploadResponse(rootHash=receipt.root_hash, transactionHash=receipt.transaction_hash)


@router.get(
    "/download/{root_hash}",
    response_class=FileResponse,
    summary="Download a file",
    description="Download a file from 0G Storage using its root hash.",
    responses={
        status.HTTP_200_OK: {
            "content": {"application/octet-stream": {"schema": {"type": "string", "format": "binary"}}},
            "description": "File downloaded successfully",
        },
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse, "description": "Server error"},
    },
)
async def download_file(
    root_hash: str = Path(..., description="The root hash of the file to download."),
    manager: TransferManager = Depends(get_transfer_manager),
    storage: FileSystemStorage = Depends(get_file_storage),
) -> FileResponse:
    if not is_root_hash(root_hash):
        raise DownloadError(f"invalid root hash {root_hash!r}")

    output_path = storage.reserve_download(root_hash)
    try:
        await run_in_threadpool(manager.download, root_hash, output_path)
        stat_result = _stat_retrieved(output_path)
    except Exception:
        storage.release(output_path)
        raise

    cleanup = BackgroundTasks()
    cleanup.add_task(storage.release, output_path)
    return FileResponse(
        output_path,
        media_type="application/octet-stream",
        filename=root_hash,
        stat_result=stat_result,
        background=cleanup,
    )


def _stage_and_upload(manager: TransferManager, storage: FileSystemStorage, file: UploadFile) -> UploadReceipt:
    with storage.staged_upload(file.file, file.filename) as path:
        return manager.upload(path)


def _stat_retrieved(path) -> os.stat_result:
    try:
        return os.stat(path)
    except OSError as e:
        raise StreamingError(e.strerror or str(e))
