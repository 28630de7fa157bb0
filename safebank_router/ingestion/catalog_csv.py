"""KDIC insured-product CSV reader"""

import logging
import re
from pathlib import Path
from typing import List, Optional

import pandas as pd

from safebank_router.domain.exceptions import CatalogSourceError
from safebank_router.domain.models import CatalogEntry

logger = logging.getLogger(__name__)

# Header patterns of the KDIC export (Korean) with English fallbacks
INSTITUTION_HEADER = re.compile(r"금융회사명|^institution$", re.IGNORECASE)
PRODUCT_HEADER = re.compile(r"금융상품명|^product_name$", re.IGNORECASE)
SALE_END_HEADER = re.compile(r"상품판매중단일자|^sale_end_date$", re.IGNORECASE)
REGISTERED_HEADER = re.compile(r"등록일|^registered_date$", re.IGNORECASE)


def _find_column(columns: List[str], pattern: re.Pattern) -> Optional[str]:
    for column in columns:
        if pattern.search(column.strip()):
            return column
    return None


def catalog_from_frame(frame: pd.DataFrame) -> List[CatalogEntry]:
    """
    Convert a raw catalog table into CatalogEntry records.

    Rows whose institution or product name is blank after trimming are
    skipped. Optional date columns are carried when present.

    Raises:
        CatalogSourceError: Institution or product column not found
    """
    columns = [str(c) for c in frame.columns]
    frame.columns = columns

    inst_col = _find_column(columns, INSTITUTION_HEADER)
    prod_col = _find_column(columns, PRODUCT_HEADER)
    if inst_col is None or prod_col is None:
        raise CatalogSourceError(f"Catalog is missing institution/product columns: {columns}")

    sale_end_col = _find_column(columns, SALE_END_HEADER)
    registered_col = _find_column(columns, REGISTERED_HEADER)

    entries = []
    skipped = 0
    for record in frame.to_dict(orient="records"):
        institution = str(record.get(inst_col) or "").strip()
        product_name = str(record.get(prod_col) or "").strip()
        if not institution or not product_name:
            skipped += 1
            continue
        entries.append(
            CatalogEntry(
                institution=institution,
                product_name=product_name,
                sale_end_date=(str(record.get(sale_end_col) or "").strip() or None) if sale_end_col else None,
                registered_date=(str(record.get(registered_col) or "").strip() or None) if registered_col else None,
            )
        )

    if skipped:
        logger.warning("Skipped catalog rows without institution/product", extra={"skipped": skipped})
    return entries


def load_catalog_csv(path: str | Path) -> List[CatalogEntry]:
    """
    Read the KDIC product CSV (UTF-8, optional BOM) into catalog entries.

    Raises:
        CatalogSourceError: File missing, unreadable, or without the expected columns
    """
    path = Path(path)
    if not path.exists():
        raise CatalogSourceError(f"Catalog CSV not found: {path}")

    try:
        frame = pd.read_csv(path, dtype=str, keep_default_na=False, encoding="utf-8-sig")
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        raise CatalogSourceError(f"Unreadable catalog CSV {path}: {e}") from e

    return catalog_from_frame(frame)
