# build_snapshots.py
import os
import sys
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Optional, Tuple

import requests

from config import DATA_DIR, DATE_LABELS, REMOTE_SNAPSHOT_BASE_URL, REQUEST_TIMEOUT_SECONDS
from data_loader import remote_file_name
from logging_config import get_logger, setup_logging

logger = get_logger(__name__)

MAX_ATTEMPTS = 3
RETRY_DELAY_SECONDS = 30


def download_snapshot(date_label: str, retry_delay: float = RETRY_DELAY_SECONDS) -> Tuple[str, Optional[str]]:
    """
    Downloads the daily report for one date label with retries.
    Returns the date label along with the CSV text, or None if every attempt failed.
    """
    url = REMOTE_SNAPSHOT_BASE_URL + remote_file_name(date_label)
    for attempt in range(MAX_ATTEMPTS):
        try:
            response = requests.get(url, timeout=REQUEST_TIMEOUT_SECONDS)
            if response.status_code == 200:
                logger.info("Download complete", date_label=date_label)
                return date_label, response.text
            logger.warning("Unexpected status", date_label=date_label, status=response.status_code)
        except requests.RequestException as e:
            logger.warning("Download attempt failed", date_label=date_label, attempt=attempt + 1, error=str(e))
        if attempt < MAX_ATTEMPTS - 1:  # Don't sleep on the last attempt
            time.sleep(retry_delay)

    logger.error("Download failed", date_label=date_label, attempts=MAX_ATTEMPTS)
    return date_label, None


def main(data_dir: str = DATA_DIR) -> int:
    """
    Fetches every configured snapshot into ``data_dir`` so the dashboard can run offline.
    Returns the number of snapshots written.
    """
    setup_logging()
    logger.info("Starting snapshot build", labels=len(DATE_LABELS), data_dir=data_dir)
    os.makedirs(data_dir, exist_ok=True)

    written = 0
    with ThreadPoolExecutor(max_workers=3) as executor:
        futures = [executor.submit(download_snapshot, label) for label in DATE_LABELS]
        for future in as_completed(futures):
            date_label, csv_text = future.result()
            if csv_text is None:
                continue
            output_path = os.path.join(data_dir, f"{date_label}.csv")
            with open(output_path, "w", encoding="utf-8", newline="") as f:
                f.write(csv_text)
            written += 1

    if not written:
        logger.error("Build failed, no snapshot could be downloaded")
        sys.exit(1)

    logger.info("Snapshot build complete", written=written, missing=len(DATE_LABELS) - written)
    return written


if __name__ == "__main__":
    main()
