from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse


class RecordStoreError(Exception):
    """Raised when a create/read/update/delete call against the record store fails.

    The message names the operation ("Failed to add budget") and is safe to show
    to the user; the underlying driver error is chained as `__cause__`.
    """

    def __init__(self, operation: str):
        super().__init__(f"Failed to {operation}")
        self.operation = operation


async def _record_store_error_handler(_: Request, exc: RecordStoreError) -> JSONResponse:
    return JSONResponse(status_code=500, content={"detail": str(exc)})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RecordStoreError, _record_store_error_handler)
