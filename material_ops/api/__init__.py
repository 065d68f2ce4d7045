from .client import ApiClient, Page
from .errors import ApiConnectionError, ApiError, ApiResponseError, UnauthorizedError
from .auth_api import AuthApi
from .branches_api import BranchesApi
from .catalog_api import CatalogApi, MaterialCatalog
from .purchase_orders_api import MaterialLine, PurchaseOrder, PurchaseOrdersApi
from .site_transfers_api import SiteTransfer, SiteTransfersApi
from .upcoming_deliveries_api import (
    Billing,
    BillingLine,
    DeliveryItem,
    UpcomingDelivery,
    UpcomingDeliveriesApi,
)
from ..utils.loggers import get_logger

_log = get_logger(__name__)


class Apis:
    """One instance per signed-in app; shares a single ApiClient."""

    def __init__(self, client: ApiClient):
        self.client = client
        self.auth = AuthApi(client)
        self.branches = BranchesApi(client)
        self.catalog = CatalogApi(client)
        self.purchase_orders = PurchaseOrdersApi(client)
        self.site_transfers = SiteTransfersApi(client)
        self.deliveries = UpcomingDeliveriesApi(client)

    def form_choices(self):
        """
        (site names, catalog) for the create forms. Either may be empty when its
        request fails; the form fields stay editable so the operator can type.
        """
        try:
            sites = self.branches.site_names()
        except ApiError as exc:
            _log.warning("Could not load branches: %s", exc)
            sites = []
        try:
            catalog = self.catalog.load()
        except ApiError as exc:
            _log.warning("Could not load material catalog: %s", exc)
            catalog = None
        return sites, catalog
