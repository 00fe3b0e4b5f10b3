from __future__ import annotations

import logging

from fastapi.responses import StreamingResponse

logger = logging.getLogger(__name__)

XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
PDF_MIME = "application/pdf"


def export_response(
    buf: object, media_type: str, filename: str,
) -> StreamingResponse:
    logger.info("Exporting %s", filename)
    return StreamingResponse(
        buf,  # type: ignore[arg-type]
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
