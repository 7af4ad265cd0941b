import logging
import uuid
from pathlib import Path

import pandas as pd
from sqlalchemy import insert
from sqlalchemy.orm import Session

from dealership.auth import Principal
from dealership.db.models import Bike, BikeStatus, utcnow
from dealership.db.session import atomic, settings
from dealership.errors import ValidationError
from dealership.services.inventory import registration_taken
from dealership.validation import clean_bike

logger = logging.getLogger(__name__)

# csv header -> model attribute
REQUIRED_BIKES = {
    "bikeName": "bike_name",
    "year": "year",
    "registrationNumber": "registration_number",
    "ownerPhone": "owner_phone",
    "ownerAadhar": "owner_aadhar",
    "ownerAddress": "owner_address",
    "purchasePrice": "purchase_price",
    "sellingPrice": "selling_price",
}
PREVIEW_LIMIT = 25


def error_dir() -> Path:
    path = Path(settings.IMPORT_ERROR_DIR)
    path.mkdir(parents=True, exist_ok=True)
    return path

def read_csv(source, filename: str) -> pd.DataFrame:
    if not filename.lower().endswith(".csv"):
        raise ValidationError(f"{filename} must be a CSV")
    try:
        # everything as text: aadhar numbers must keep their leading zeros
        return pd.read_csv(source, dtype=str, keep_default_na=False)
    except Exception as e:
        raise ValidationError(f"{filename}: could not read CSV: {e}") from e

def missing_cols(df: pd.DataFrame) -> list[str]:
    return sorted(set(REQUIRED_BIKES) - set(df.columns))

def add_error(errors: list, *, file: str, row: int | None, field: str, code: str,
              message: str, value: str = "", suggestion: str = ""):
    errors.append({
        "file": file,
        "row": row,
        "field": field,
        "code": code,
        "message": message,
        "value": value,
        "suggestion": suggestion,
    })


def _to_number(raw: str, cast):
    try:
        return cast(raw.strip())
    except (TypeError, ValueError):
        return None


def check_bikes(db: Session, df: pd.DataFrame, filename: str) -> tuple[list[dict], list[dict]]:
    """Validate every row; returns (errors, cleaned rows)."""
    errors: list[dict] = []
    rows: list[dict] = []

    missing = missing_cols(df)
    if missing:
        add_error(errors, file=filename, row=None, field="*", code="MISSING_COLUMNS",
                  message="Missing required columns", value=",".join(missing),
                  suggestion="Add these columns to header.")
        return errors, rows

    seen: dict[str, int] = {}
    for idx, record in df.iterrows():
        csv_row = int(idx) + 2
        draft = {attr: record[col] for col, attr in REQUIRED_BIKES.items()}
        draft["year"] = _to_number(draft["year"], int)
        draft["purchase_price"] = _to_number(draft["purchase_price"], float)
        draft["selling_price"] = _to_number(draft["selling_price"], float)
        try:
            cleaned = clean_bike(draft)
        except ValidationError as e:
            add_error(errors, file=filename, row=csv_row, field=e.field or "*", code="INVALID",
                      message=e.message, value=str(record.get(e.field, "")))
            continue

        reg = cleaned["registration_number"].upper()
        if settings.ENFORCE_UNIQUE_REGISTRATION:
            if reg in seen:
                add_error(errors, file=filename, row=csv_row, field="registrationNumber",
                          code="DUPLICATE", message=f"duplicate of row {seen[reg]}",
                          value=cleaned["registration_number"])
                continue
            if registration_taken(db, cleaned["registration_number"]):
                add_error(errors, file=filename, row=csv_row, field="registrationNumber",
                          code="ALREADY_REGISTERED", message="registrationNumber already in inventory",
                          value=cleaned["registration_number"],
                          suggestion="Remove the row or fix the registration number.")
                continue
        elif reg in seen:
            logger.warning("%s row %s: registration number %s duplicates row %s, accepted",
                           filename, csv_row, cleaned["registration_number"], seen[reg])
        elif registration_taken(db, cleaned["registration_number"]):
            logger.warning("%s row %s: registration number %s already in inventory, accepted",
                           filename, csv_row, cleaned["registration_number"])
        seen.setdefault(reg, csv_row)
        rows.append(cleaned)

    return errors, rows


def write_error_report(errors: list[dict]) -> str:
    report_id = uuid.uuid4().hex
    pd.DataFrame(errors).to_csv(error_dir() / f"{report_id}.csv", index=False)
    return report_id

def error_report_path(report_id: str) -> Path | None:
    # report ids are uuid hex, anything else could escape the directory
    if len(report_id) != 32 or any(c not in "0123456789abcdef" for c in report_id):
        return None
    path = error_dir() / f"{report_id}.csv"
    return path if path.exists() else None


def validate_upload(db: Session, source, filename: str) -> dict:
    df = read_csv(source, filename)
    errors, _ = check_bikes(db, df, filename)
    result = {
        "ok": not errors,
        "summary": {"bikesRows": int(len(df))},
        "errorsCount": len(errors),
        "errorsPreview": errors[:PREVIEW_LIMIT],
    }
    if errors:
        report_id = write_error_report(errors)
        result["errorReportId"] = report_id
        result["errorReportUrl"] = f"/import/error-report/{report_id}"
    return result


def commit_upload(db: Session, source, filename: str, principal: Principal) -> dict:
    df = read_csv(source, filename)
    errors, rows = check_bikes(db, df, filename)
    if errors:
        report_id = write_error_report(errors)
        raise ValidationError(
            f"{len(errors)} invalid rows, nothing imported. "
            f"Run /import/bikes/validate or download /import/error-report/{report_id}"
        )
    if not rows:
        return {"bikesImported": 0}

    now = utcnow()
    values = [
        {**row, "status": BikeStatus.AVAILABLE.value, "added_by": principal.user_id,
         "created_at": now, "updated_at": now}
        for row in rows
    ]
    with atomic(db):
        db.execute(insert(Bike), values)
    logger.info("imported %s bikes from %s for user %s", len(values), filename, principal.user_id)
    return {"bikesImported": len(values)}
