"""
Metro Area Code Maintenance

Refreshes app/config/area_data.json from the BLS QCEW area titles export
(https://www.bls.gov/cew/classifications/areas/qcew-area-titles.htm, CSV
download with columns area_fips, area_title).

QCEW MSA codes are the letter "C" followed by the first four digits of the
Census CBSA code (C1242 for Austin). The 5-character area code used in SM
series IDs is the CBSA code, so C1242 becomes 12420.
See https://www.bls.gov/cew/classifications/areas/area-guide.htm

Processing:
1. Keep CSV titles containing "MSA", keyed by title without the " MSA" suffix
2. Update area codes that changed
3. Remove reference areas missing from the CSV
4. Add CSV areas missing from the reference file, geocoding their coordinates
5. Write the file back sorted by name
6. Optionally sync the metro_areas table (--sync-db); otherwise the new
   file is applied by the next application start

Usage:
    python -m app.etl.area_codes area-titles.csv --api-key KEY [--sync-db]

Author: Market Research Project
License: AGPL-3.0
"""

import argparse
import json
import logging
from typing import Dict, Optional

import pandas as pd
from sqlalchemy.engine import Engine

from app.core.config import AREA_DATA_PATH, GOOGLE_MAPS_API_KEY
from app.db.seed import apply_metro_areas
from app.services.geocoder import GoogleGeocoder

logger = logging.getLogger(__name__)

MSA_SUFFIX = " MSA"


def qcew_to_area_code(area_fips: str) -> str:
    """'C1242' -> '12420'"""
    return area_fips[1:] + "0"


def load_msa_codes(csv_path: str) -> Dict[str, str]:
    """
    Read MSA rows of the QCEW area titles CSV.

    Returns:
        Dict[str, str]: Area title (with " MSA" suffix) to QCEW area code
    """
    frame = pd.read_csv(csv_path, dtype=str, keep_default_na=False)
    frame.columns = [column.strip().strip('"') for column in frame.columns]

    codes = {}
    for fips, title in zip(frame["area_fips"], frame["area_title"]):
        title = title.replace('"', "").replace("\r", "").strip()
        if "MSA" in title:
            codes[title] = fips.strip().strip('"')
    logger.info(f"Read {len(codes)} MSA titles from {csv_path}")
    return codes


def reconcile_area_data(
    area_data: Dict[str, dict],
    msa_codes: Dict[str, str],
    api_key: str,
    geocoder: Optional[GoogleGeocoder] = None
) -> Dict[str, dict]:
    """
    Apply the QCEW codes to the reference mapping.

    Args:
        area_data (Dict[str, dict]): Current reference mapping
        msa_codes (Dict[str, str]): Output of load_msa_codes
        api_key (str): Google Maps API key for new areas
        geocoder (GoogleGeocoder): Optional geocoder

    Returns:
        Dict[str, dict]: Updated mapping sorted by area name
    """
    geocoder = geocoder or GoogleGeocoder()
    updated = {name: dict(info) for name, info in area_data.items()}

    for area in list(updated):
        qcew_code = msa_codes.get(f"{area}{MSA_SUFFIX}")
        if qcew_code is None:
            logger.warning(f"No area code found for {area}, deleting it")
            del updated[area]
            continue

        new_code = qcew_to_area_code(qcew_code)
        if updated[area].get("area_code") != new_code:
            logger.info(
                f"Updating area code for {area} from {updated[area].get('area_code')} to {new_code}"
            )
            updated[area]["area_code"] = new_code

    for title, qcew_code in msa_codes.items():
        area = title.replace(MSA_SUFFIX, "")
        if area in updated:
            continue
        coordinates = geocoder.geocode(area, api_key)
        if coordinates is None:
            logger.warning(f"No coordinates found for {area}")
            continue
        logger.info(f"Area {area} not found in reference data, adding it at {coordinates}")
        updated[area] = {
            "area_code": qcew_to_area_code(qcew_code),
            "coordinates": [coordinates[0], coordinates[1]],
        }

    return dict(sorted(updated.items(), key=lambda item: item[0]))


def update_area_data(
    csv_path: str,
    area_data_path: str = AREA_DATA_PATH,
    api_key: str = GOOGLE_MAPS_API_KEY,
    geocoder: Optional[GoogleGeocoder] = None,
    engine: Optional[Engine] = None
) -> Dict[str, dict]:
    """
    Refresh the reference file in place and return its new content.

    When an engine is given the metro_areas table is brought in line with the
    new content in the same call.
    """
    with open(area_data_path, "r", encoding="utf-8") as f:
        area_data = json.load(f)

    updated = reconcile_area_data(area_data, load_msa_codes(csv_path), api_key, geocoder)

    with open(area_data_path, "w", encoding="utf-8") as f:
        json.dump(updated, f, indent=2)
        f.write("\n")

    logger.info(f"Wrote {len(updated)} metro areas to {area_data_path}")

    if engine is not None:
        apply_metro_areas(engine, updated)

    return updated


if __name__ == "__main__":
    from app.core.logging import setup_logging

    parser = argparse.ArgumentParser(description="Refresh metro area codes from a QCEW area titles CSV")
    parser.add_argument("csv_path")
    parser.add_argument("--area-data", default=AREA_DATA_PATH)
    parser.add_argument("--api-key", default=GOOGLE_MAPS_API_KEY)
    parser.add_argument("--sync-db", action="store_true", help="Also update the metro_areas table")
    args = parser.parse_args()

    setup_logging()
    engine = None
    if args.sync_db:
        from app.db.database import engine
    update_area_data(args.csv_path, args.area_data, args.api_key, engine=engine)
