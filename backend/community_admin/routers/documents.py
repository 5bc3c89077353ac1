from typing import Optional
from fastapi import APIRouter, Body, Depends
from fastapi.responses import StreamingResponse
from ..config import settings
from ..dependencies import get_db, get_bucket, get_http_client, require_session
from ..services import record_service, document_files

router = APIRouter(prefix="/api/documents", tags=["documents"])

LABEL = "Document"


@router.get("")
async def list_documents(
    category: Optional[str] = None,
    community: Optional[str] = None,
    db=Depends(get_db),
    session: dict = Depends(require_session),
):
    return await record_service.list_records(
        db, settings.DOCUMENTS_COLLECTION, {"category": category, "community": community}
    )


@router.get("/categories")
async def list_document_categories(db=Depends(get_db), session: dict = Depends(require_session)):
    documents = await record_service.list_records(db, settings.DOCUMENTS_COLLECTION)
    return sorted({d["category"] for d in documents if d.get("category")})


@router.get("/{document_id}")
async def get_document(document_id: str, db=Depends(get_db), session: dict = Depends(require_session)):
    return await record_service.get_record(db, settings.DOCUMENTS_COLLECTION, document_id, LABEL)


@router.put("/{document_id}")
async def update_document(document_id: str, data: dict = Body(...), db=Depends(get_db), session: dict = Depends(require_session)):
    return await record_service.update_record(
        db, settings.DOCUMENTS_COLLECTION, document_id, data, LABEL, merge_existing=True
    )


@router.delete("/{document_id}")
async def delete_document(document_id: str, db=Depends(get_db), session: dict = Depends(require_session)):
    await record_service.delete_record(db, settings.DOCUMENTS_COLLECTION, document_id)
    return {"success": True}


@router.get("/{document_id}/file")
async def get_document_file_url(
    document_id: str, db=Depends(get_db), bucket=Depends(get_bucket), session: dict = Depends(require_session)
):
    document = await record_service.get_record(db, settings.DOCUMENTS_COLLECTION, document_id, LABEL)
    url = await document_files.file_url(bucket, document_id, document)
    return {"url": url}


@router.get("/{document_id}/file/download")
async def download_document_file(
    document_id: str,
    url: Optional[str] = None,
    db=Depends(get_db),
    bucket=Depends(get_bucket),
    client=Depends(get_http_client),
    session: dict = Depends(require_session),
):
    document = await record_service.get_record(db, settings.DOCUMENTS_COLLECTION, document_id, LABEL)
    downloaded = await document_files.download(bucket, client, document_id, document, url=url)
    return StreamingResponse(
        downloaded.chunks,
        media_type=downloaded.content_type,
        headers={
            "Content-Disposition": document_files.content_disposition(downloaded.filename),
            "Access-Control-Allow-Origin": "*",
        },
    )
