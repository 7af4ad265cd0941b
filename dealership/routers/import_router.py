from fastapi import APIRouter, Depends, UploadFile, File, HTTPException
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from dealership.auth import Principal, require_admin
from dealership.db.session import get_db
from dealership.services import importer

router = APIRouter()


@router.get("/error-report/{report_id}")
def download_error_report(report_id: str, _: Principal = Depends(require_admin)):
    path = importer.error_report_path(report_id)
    if path is None:
        raise HTTPException(status_code=404, detail="Error report not found")
    return FileResponse(path, media_type="text/csv", filename="bike_import_error_report.csv")

@router.post("/bikes/validate")
def validate_bikes(
    bikes: UploadFile = File(...),
    _: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
):
    result = importer.validate_upload(db, bikes.file, bikes.filename or "")
    return {"success": True, "data": result}

@router.post("/bikes/commit")
def commit_bikes(
    bikes: UploadFile = File(...),
    principal: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
):
    result = importer.commit_upload(db, bikes.file, bikes.filename or "", principal)
    return {"success": True, "data": result, "message": f"{result['bikesImported']} bikes imported"}
