# material_ops/constants.py

APP_NAME = "Material Ops Desk"
ORG_NAME = "Laxmi Powertech"

DATA_DIR = "data"
SETTINGS_FILE_NAME = "session.ini"
SIGNAL_DIR_NAME = "signals"
LOG_DIR_NAME = "logs"
LOG_FILE_NAME = "material_ops.log"

DEFAULT_API_BASE_URL = "https://laxmipowertech-backend-1.onrender.com/api"
DEFAULT_API_TIMEOUT = 30  # seconds

# ---------- Notification topics ----------
TOPIC_INTENT = "intentRefresh"
TOPIC_SITE_TRANSFER = "siteTransferRefresh"
TOPIC_UPCOMING_DELIVERY = "upcomingDeliveryRefresh"
TOPIC_DELIVERY = "deliveryRefresh"
TOPICS: tuple[str, ...] = (
    TOPIC_INTENT,
    TOPIC_SITE_TRANSFER,
    TOPIC_UPCOMING_DELIVERY,
    TOPIC_DELIVERY,
)

# Re-poll intervals (ms). Fallback only; topics drive the normal refresh.
POLL_INTERVALS = {
    "intent": 30_000,
    "site_transfer": 5_000,
    "delivery": 30_000,
    "grn": 60_000,
    "admin": 60_000,
}

# ---------- Status vocabularies ----------
DELIVERY_PENDING = "Pending"
DELIVERY_PARTIAL = "Partial"
DELIVERY_TRANSFERRED = "Transferred"
DELIVERY_STATUSES: tuple[str, ...] = (DELIVERY_PENDING, DELIVERY_PARTIAL, DELIVERY_TRANSFERRED)

RECORD_PENDING = "pending"
RECORD_APPROVED = "approved"
RECORD_TRANSFERRED = "transferred"
RECORD_CANCELLED = "cancelled"
RECORD_STATUSES: tuple[str, ...] = (RECORD_PENDING, RECORD_APPROVED, RECORD_TRANSFERRED, RECORD_CANCELLED)

ORIGIN_PO = "PO"
ORIGIN_ST = "ST"

DISCOUNT_FLAT = "flat"
DISCOUNT_PERCENTAGE = "percentage"
DISCOUNT_TYPES: tuple[str, ...] = (DISCOUNT_FLAT, DISCOUNT_PERCENTAGE)

DEFAULT_COMPANY_NAME = "Laxmi Powertech Private Limited"
DEFAULT_UOM = "Nos"

# ---------- Auth / roles ----------
ROLE_ADMIN = "admin"
BRANCH_SCOPED_ROLES: tuple[str, ...] = ("supervisor", "subcontractor")

# A 401 on these paths does not end the session (login itself, uploads, catalog reads)
UNAUTHORIZED_EXEMPT_MARKERS: tuple[str, ...] = (
    "/auth/login",
    "/upload",
    "/receipts",
    "/material/catalog",
)

LIST_PAGE_SIZE = 20
GRN_FETCH_LIMIT = 100
