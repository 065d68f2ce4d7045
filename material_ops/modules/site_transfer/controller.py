from PySide6.QtCore import QRegularExpression, QSortFilterProxyModel, Qt, QTimer
from PySide6.QtWidgets import QDialog, QWidget

from ...constants import LIST_PAGE_SIZE, POLL_INTERVALS, TOPIC_SITE_TRANSFER, TOPIC_UPCOMING_DELIVERY
from ...utils import ui_helpers as uih
from ...utils.branch_scope import active_branch
from ...utils.loggers import get_logger
from ...utils.tasks import run_task
from ...widgets.status_dialog import StatusEditDialog
from ..base_module import BaseModule
from ..notifications import RefreshWatcher
from .form import SiteTransferForm
from .model import SiteTransfersTableModel
from .view import SiteTransferView

_log = get_logger(__name__)

SEARCH_DEBOUNCE_MS = 400


class SiteTransferController(BaseModule):
    def __init__(self, apis, session, bus):
        super().__init__()
        self.apis = apis
        self.api = apis.site_transfers
        self.session = session
        self.bus = bus
        self.view = SiteTransferView(is_admin=session.is_admin)

        self._page = 1
        self._search = ""
        self._loading = False
        self._reload_again = False

        self.base_model = SiteTransfersTableModel([])
        self.proxy = QSortFilterProxyModel(self.view)
        self.proxy.setSourceModel(self.base_model)
        self.proxy.setFilterCaseSensitivity(Qt.CaseInsensitive)
        self.proxy.setFilterKeyColumn(-1)
        self.view.table.setModel(self.proxy)
        self.view.table.selectionModel().selectionChanged.connect(self._update_details)

        self._debounce = QTimer(self.view)
        self._debounce.setSingleShot(True)
        self._debounce.setInterval(SEARCH_DEBOUNCE_MS)
        self._debounce.timeout.connect(self._on_search_settled)

        self._wire()
        self.watcher = RefreshWatcher(
            bus, (TOPIC_SITE_TRANSFER, TOPIC_UPCOMING_DELIVERY), self._reload,
            POLL_INTERVALS["site_transfer"], parent=self.view,
        )
        self._reload()

    def get_widget(self) -> QWidget:
        return self.view

    def _wire(self):
        self.view.btn_add.clicked.connect(self._add)
        self.view.btn_status.clicked.connect(self._edit_status)
        self.view.btn_delete.clicked.connect(self._delete)
        self.view.btn_del_attachment.clicked.connect(self._delete_attachment)
        self.view.btn_delete_all.clicked.connect(self._delete_all)
        self.view.btn_refresh.clicked.connect(self._reload)
        self.view.search.textChanged.connect(self._apply_filter)
        self.view.pager.page_requested.connect(self._goto_page)

    # ---------- loading ----------
    def _reload(self):
        if self._loading:
            self._reload_again = True
            return
        self._loading = True
        self.set_busy(True)
        page, search = self._page, self._search
        run_task(
            self.view,
            lambda: self.api.list(page=page, limit=LIST_PAGE_SIZE, search=search),
            self._on_loaded,
            self._on_load_failed,
        )

    def _on_loaded(self, page):
        keep = self._selected()
        self.base_model.set_rows(page.items)
        self.view.pager.set_page(page.page, page.total_pages, page.total)
        self.view.banner.show_message(None)
        row = self.base_model.row_of(keep.id) if keep else None
        if row is not None:
            self.view.table.selectRow(self.proxy.mapFromSource(self.base_model.index(row, 0)).row())
        elif self.proxy.rowCount() > 0:
            self.view.table.selectRow(0)
        else:
            self.view.details.clear()
        self._done_loading()

    def _on_load_failed(self, exc):
        _log.warning("Loading site transfers failed: %s", exc)
        self.view.banner.show_message(uih.error_text(exc))
        self._done_loading()

    def _done_loading(self):
        self._loading = False
        self.set_busy(False)
        if self._reload_again:
            self._reload_again = False
            self._reload()

    def _apply_filter(self, text: str):
        self.proxy.setFilterRegularExpression(QRegularExpression(QRegularExpression.escape(text)))
        self._debounce.start()

    def _on_search_settled(self):
        self._search = self.view.search.text().strip()
        self._page = 1
        self._reload()

    def _goto_page(self, page: int):
        self._page = max(1, page)
        self._reload()

    def _selected(self):
        row = self.view.table.selected_source_row()
        return self.base_model.at(row) if row is not None else None

    def _update_details(self, *args):
        self.view.details.set_data(self._selected())

    # ---------- actions ----------
    def _add(self):
        self.set_busy(True)
        run_task(self.view, self.apis.form_choices, self._open_form, self._on_choices_failed)

    def _on_choices_failed(self, exc):
        self.set_busy(False)
        uih.error(self.view, "New Site Transfer", uih.error_text(exc))

    def _open_form(self, choices):
        self.set_busy(False)
        sites, catalog = choices
        user = self.session.user
        branch = active_branch(self.session)
        dlg = SiteTransferForm(
            self.view,
            sites=sites,
            catalog=catalog,
            requested_by=user.name if user else "",
            from_site=branch.name if branch else "",
        )
        if dlg.exec() != QDialog.Accepted:
            return
        p = dlg.payload()
        self.run_action(
            "Create Site Transfer",
            lambda: self.api.create(
                p["from_site"], p["to_site"], p["requested_by"], p["materials"], p["remarks"], p["attachments"],
            ),
            topics=(TOPIC_SITE_TRANSFER,),
            done=lambda st: uih.info(self.view, "Site Transfer", f"Site transfer {st.site_transfer_id} created."),
        )

    def _edit_status(self):
        st = self._selected()
        if st is None:
            uih.info(self.view, "Site Transfer", "Select a transfer first.")
            return
        dlg = StatusEditDialog(self.view, title=f"Transfer {st.site_transfer_id}", current=st.status, remarks=st.remarks)
        if dlg.exec() != QDialog.Accepted:
            return
        p = dlg.payload()
        self.run_action(
            "Update Status",
            lambda: self.api.update_status(st.id, p["status"], p["remarks"]),
            topics=(TOPIC_SITE_TRANSFER,),
        )

    def _delete(self):
        st = self._selected()
        if st is None:
            return
        if not uih.confirm(self.view, "Delete Transfer", f"Delete site transfer {st.site_transfer_id}?"):
            return
        self.run_action("Delete Transfer", lambda: self.api.delete(st.id), topics=(TOPIC_SITE_TRANSFER,))

    def _delete_attachment(self):
        st = self._selected()
        idx = self.view.details.selected_attachment()
        if st is None or idx is None:
            uih.info(self.view, "Attachments", "Select an attachment first.")
            return
        if not uih.confirm(self.view, "Delete Attachment", "Remove the selected attachment?"):
            return
        self.run_action(
            "Delete Attachment", lambda: self.api.delete_attachment(st.id, idx), topics=(TOPIC_SITE_TRANSFER,),
        )

    def _delete_all(self):
        if not uih.confirm(
            self.view, "Delete All Transfers",
            "Delete every site transfer? This cannot be undone.",
        ):
            return
        self.run_action("Delete All Transfers", self.api.delete_all, topics=(TOPIC_SITE_TRANSFER,))
