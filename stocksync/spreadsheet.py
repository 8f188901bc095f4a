"""Write computed costs back into the cost export workbook."""

from zipfile import BadZipFile

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from stocksync.config import DB_PATH, XLSX_SHEET_NAME
from stocksync.db import get_connection, get_cost_by_nm_id
from stocksync.logging_config import get_logger

__all__ = ["SpreadsheetError", "update_spreadsheet_costs"]

logger = get_logger("spreadsheet")


class SpreadsheetError(Exception):
    """Raised when the workbook or its sheet cannot be opened."""
    pass


def update_spreadsheet_costs(
    xlsx_path: str,
    db_path: str = DB_PATH,
    sheet_name: str = XLSX_SHEET_NAME,
) -> int:
    """Fill column B with the stored cost for the card id in column A.

    Row 1 is the header. Rows whose id is not an integer or has no stored
    cost are left untouched. The file is saved in place.

    Returns:
        Number of cells updated
    """
    try:
        workbook = load_workbook(xlsx_path)
    except (OSError, InvalidFileException, BadZipFile) as e:
        raise SpreadsheetError(f"Cannot open workbook {xlsx_path}: {e}") from e

    if sheet_name not in workbook.sheetnames:
        raise SpreadsheetError(f"Sheet {sheet_name!r} not found in {xlsx_path}")
    sheet = workbook[sheet_name]

    updated = 0
    with get_connection(db_path) as conn:
        for row in range(2, sheet.max_row + 1):
            raw = sheet.cell(row=row, column=1).value
            if isinstance(raw, float) and raw.is_integer():
                raw = int(raw)
            text = "" if raw is None else str(raw).strip()
            try:
                nm_id = int(text)
            except ValueError:
                logger.warning(f"Row {row}: cannot parse nm_id {text!r}")
                continue

            cost = get_cost_by_nm_id(conn, nm_id)
            if cost is None:
                logger.info(f"Row {row}: no cost stored for nm_id={nm_id}, skipping")
                continue

            logger.debug(f"Row {row}: nm_id={nm_id} cost={cost}")
            sheet.cell(row=row, column=2).value = cost
            updated += 1

    try:
        workbook.save(xlsx_path)
    except OSError as e:
        logger.error(f"Failed to save {xlsx_path}: {e}")
    else:
        logger.info(f"Workbook saved: {updated} costs written to {xlsx_path}")

    return updated
