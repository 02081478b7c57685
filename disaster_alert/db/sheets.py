"""
Google Sheets backed record store

Two worksheets are used:
- "Users Info": one row per phone, upserted in place
- "SOS Alert": append-only SOS events

Header rows are self-healing: missing columns are appended to the right of the
existing header row, leaving existing columns and data untouched.
"""
import logging
import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Tuple

import gspread
from gspread.cell import Cell
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from disaster_alert.config import Settings
from disaster_alert.db.base import RecordStore, StoreError, StoreUnavailableError
from disaster_alert.models import ALERT_LEVELS, AlertLevel, SOSEvent, UserRecord

logger = logging.getLogger(__name__)

USER_HEADERS = ["Phone No.", "Area", "City", "Alerts", "Email", "Full Address", "Timestamp"]
SOS_HEADERS = ["Phone No.", "SOS Coordinates", "Timestamp", "Accuracy", "Status"]

TOKEN_URI = "https://oauth2.googleapis.com/token"


def build_client(settings: Settings) -> gspread.Client:
    """Authorize a gspread client from env credentials, falling back to a JSON key file"""
    if settings.GOOGLE_SERVICE_ACCOUNT_EMAIL and settings.GOOGLE_PRIVATE_KEY:
        logger.info("Using environment variables for Google Sheets authentication")
        return gspread.service_account_from_dict({
            "type": "service_account",
            "client_email": settings.GOOGLE_SERVICE_ACCOUNT_EMAIL,
            "private_key": settings.GOOGLE_PRIVATE_KEY.replace("\\n", "\n"),
            "token_uri": TOKEN_URI,
        })

    if settings.GOOGLE_CREDENTIALS_FILE:
        logger.info("Using credentials file for Google Sheets authentication")
        return gspread.service_account(filename=settings.GOOGLE_CREDENTIALS_FILE)

    raise StoreError(
        "No Google Sheets credentials found. Set GOOGLE_SERVICE_ACCOUNT_EMAIL and "
        "GOOGLE_PRIVATE_KEY or GOOGLE_CREDENTIALS_FILE."
    )


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
    retry=retry_if_exception_type(gspread.exceptions.APIError),
    reraise=True
)
def _read_values(worksheet) -> List[List[str]]:
    """Read every populated row of a worksheet, retrying transient API errors"""
    return worksheet.get_all_values()


def _column_index(headers: List[str]) -> Dict[str, int]:
    return {name.strip(): i for i, name in enumerate(headers) if name.strip()}


def _cell(row: List[str], columns: Dict[str, int], header: str) -> str:
    i = columns.get(header)
    if i is None or i >= len(row):
        return ""
    return row[i]


def _parse_alert(raw: str, phone: str) -> AlertLevel:
    value = (raw or "").strip().lower()
    if not value:
        return AlertLevel.green
    if value not in ALERT_LEVELS:
        logger.warning(f"Unrecognized alert value '{raw}' for {phone}, treating as green")
        return AlertLevel.green
    return AlertLevel(value)


@contextmanager
def _sheet_errors(action: str) -> Iterator[None]:
    try:
        yield
    except StoreError:
        raise
    except Exception as e:
        logger.error(f"Google Sheets error while {action}: {e}")
        raise StoreError(f"Failed {action}: {e}") from e


class SheetsRecordStore(RecordStore):
    """Record store persisted in a Google Sheets document"""

    backend = "sheets"

    def __init__(self, settings: Settings, client: Optional[Any] = None):
        self.settings = settings
        self._client = client
        self._spreadsheet = None
        self._users_sheet = None
        self._sos_sheet = None
        self._lock = threading.Lock()

    @property
    def ready(self) -> bool:
        return self._users_sheet is not None and self._sos_sheet is not None

    def initialize(self) -> None:
        """Open the spreadsheet and make sure both worksheets carry their headers"""
        if not self.settings.GOOGLE_SHEET_ID:
            raise StoreError("GOOGLE_SHEET_ID is not configured")

        logger.info(f"Initializing Google Sheets store (sheet id {self.settings.GOOGLE_SHEET_ID})")
        with _sheet_errors("initializing Google Sheets"):
            if self._client is None:
                self._client = build_client(self.settings)
            self._spreadsheet = self._client.open_by_key(self.settings.GOOGLE_SHEET_ID)
            users_sheet = self._get_or_create_worksheet(self.settings.USERS_WORKSHEET, USER_HEADERS)
            sos_sheet = self._get_or_create_worksheet(self.settings.SOS_WORKSHEET, SOS_HEADERS)

        self._users_sheet = users_sheet
        self._sos_sheet = sos_sheet
        logger.info(f"Google Sheets initialized: {getattr(self._spreadsheet, 'title', '')}")

    def _get_or_create_worksheet(self, title: str, headers: List[str]):
        try:
            worksheet = self._spreadsheet.worksheet(title)
            logger.info(f"Using {title} sheet")
        except gspread.exceptions.WorksheetNotFound:
            logger.info(f"{title} sheet not found, creating...")
            worksheet = self._spreadsheet.add_worksheet(title=title, rows=1000, cols=len(headers))

        self._ensure_headers(worksheet, headers)
        return worksheet

    def _ensure_headers(self, worksheet, required: List[str]) -> None:
        current = [h.strip() for h in worksheet.row_values(1)]
        # Trailing blanks are not columns
        while current and not current[-1]:
            current.pop()

        missing = [h for h in required if h not in current]
        if not missing:
            logger.debug(f"{worksheet.title} headers are already correct")
            return

        logger.info(f"Adding missing headers to {worksheet.title}: {missing}")
        needed = len(current) + len(missing)
        if worksheet.col_count < needed:
            worksheet.add_cols(needed - worksheet.col_count)

        start = len(current) + 1
        worksheet.update_cells([
            Cell(row=1, col=start + offset, value=header)
            for offset, header in enumerate(missing)
        ])

    def _ensure_ready(self) -> None:
        if self.ready:
            return
        try:
            self.initialize()
        except StoreError as e:
            raise StoreUnavailableError(f"Google Sheets storage is unavailable: {e}") from e

    def _load_users(self) -> Tuple[Dict[str, int], List[Tuple[int, List[str]]]]:
        values = _read_values(self._users_sheet)
        if not values:
            return {}, []
        columns = _column_index(values[0])
        # Sheet rows are 1-based and row 1 holds the headers
        return columns, [(i + 2, row) for i, row in enumerate(values[1:])]

    def _find_user_row(self, phone: str) -> Tuple[Dict[str, int], Optional[int], Optional[List[str]]]:
        columns, rows = self._load_users()
        for row_number, row in rows:
            if _cell(row, columns, "Phone No.").strip() == phone:
                return columns, row_number, row
        return columns, None, None

    def _row_to_user(self, row: List[str], columns: Dict[str, int]) -> UserRecord:
        phone = _cell(row, columns, "Phone No.").strip()
        return UserRecord(
            phone=phone,
            email=_cell(row, columns, "Email"),
            city=_cell(row, columns, "City"),
            locality=_cell(row, columns, "Area"),
            full_address=_cell(row, columns, "Full Address"),
            alert_status=_parse_alert(_cell(row, columns, "Alerts"), phone),
            timestamp=_cell(row, columns, "Timestamp"),
        )

    def _append(self, worksheet, headers: List[str], values: Dict[str, Any]) -> None:
        current = worksheet.row_values(1)
        columns = _column_index(current) or _column_index(headers)
        row = [""] * (max(columns.values()) + 1)
        for header, value in values.items():
            row[columns[header]] = value
        worksheet.append_row(row, value_input_option="RAW")

    def upsert_user(
        self,
        phone: str,
        email: str,
        city: str,
        locality: str,
        full_address: str,
        timestamp: str,
    ) -> Tuple[UserRecord, bool]:
        self._ensure_ready()
        with self._lock, _sheet_errors("saving user"):
            columns, row_number, row = self._find_user_row(phone)

            if row_number is not None:
                updates = {
                    "Email": email,
                    "City": city,
                    "Area": locality,
                    "Full Address": full_address,
                    "Timestamp": timestamp,
                }
                self._users_sheet.update_cells([
                    Cell(row=row_number, col=columns[header] + 1, value=value)
                    for header, value in updates.items()
                ])
                alert = _parse_alert(_cell(row, columns, "Alerts"), phone)
                logger.info(f"Updated user {phone} in Google Sheets")
                return UserRecord(
                    phone=phone,
                    email=email,
                    city=city,
                    locality=locality,
                    full_address=full_address,
                    alert_status=alert,
                    timestamp=timestamp,
                ), False

            self._append(self._users_sheet, USER_HEADERS, {
                "Phone No.": phone,
                "Email": email,
                "City": city,
                "Area": locality,
                "Full Address": full_address,
                "Alerts": AlertLevel.green.value,
                "Timestamp": timestamp,
            })
            logger.info(f"Created user {phone} in Google Sheets")
            return UserRecord(
                phone=phone,
                email=email,
                city=city,
                locality=locality,
                full_address=full_address,
                alert_status=AlertLevel.green,
                timestamp=timestamp,
            ), True

    def get_user(self, phone: str) -> Optional[UserRecord]:
        self._ensure_ready()
        with _sheet_errors("fetching user"):
            columns, row_number, row = self._find_user_row(phone)
        if row_number is None:
            return None
        return self._row_to_user(row, columns)

    def set_alert_status(self, phone: str, alert_status: AlertLevel) -> Optional[UserRecord]:
        self._ensure_ready()
        level = AlertLevel(alert_status)
        with self._lock, _sheet_errors("updating alert status"):
            columns, row_number, row = self._find_user_row(phone)
            if row_number is None:
                return None
            self._users_sheet.update_cells([
                Cell(row=row_number, col=columns["Alerts"] + 1, value=level.value)
            ])
        record = self._row_to_user(row, columns)
        return record.model_copy(update={"alert_status": level})

    def add_sos_event(self, event: SOSEvent) -> SOSEvent:
        self._ensure_ready()
        with _sheet_errors("saving SOS alert"):
            self._append(self._sos_sheet, SOS_HEADERS, {
                "Phone No.": event.phone,
                "SOS Coordinates": event.coordinates_string,
                "Timestamp": event.timestamp,
                "Accuracy": event.accuracy,
                "Status": event.status,
            })
        return event

    def list_users(self) -> List[UserRecord]:
        self._ensure_ready()
        with _sheet_errors("listing users"):
            columns, rows = self._load_users()
        return [
            self._row_to_user(row, columns)
            for _, row in rows
            if _cell(row, columns, "Phone No.").strip()
        ]

    def list_sos_events(self) -> List[SOSEvent]:
        self._ensure_ready()
        with _sheet_errors("listing SOS alerts"):
            values = _read_values(self._sos_sheet)
        if not values:
            return []

        columns = _column_index(values[0])
        events = []
        for row in values[1:]:
            phone = _cell(row, columns, "Phone No.").strip()
            if not phone:
                continue
            try:
                lat, lng = (float(part) for part in _cell(row, columns, "SOS Coordinates").split(","))
            except ValueError:
                logger.warning(f"Skipping SOS row with malformed coordinates for {phone}")
                continue
            events.append(SOSEvent(
                phone=phone,
                coordinates=(lat, lng),
                accuracy=_cell(row, columns, "Accuracy") or "Unknown",
                timestamp=_cell(row, columns, "Timestamp"),
                status=_cell(row, columns, "Status") or "Active",
            ))
        return events
