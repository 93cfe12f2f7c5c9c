"""
Ledger page: filter row, editable transaction grid, totals and CSV export.
"""

import asyncio
from datetime import date
import pandas as pd
import streamlit as st
from database.operations import DatabaseOperations
from services.ledger_store import LedgerStore
from services.csv_export import build_csv, export_filename
from utils.async_runner import run_async
from utils.formatting import format_currency
from utils.ui.template_loader import load_template
from config.settings import APP_NAME, THEME_COLORS, TRANSACTION_STATUSES, TRANSACTION_TYPES

# Grid column -> Transaction field
GRID_FIELDS = {
    "Date": "date",
    "Description": "description",
    "Rental": "vehicle",
    "Transaction Type": "type",
    "Status": "status",
    "Income": "amount",
    "Expense": "amount"
}

def get_store() -> LedgerStore:
    """Return the session's ledger store, loading rows and dropdowns on first use."""
    if 'ledger_store' not in st.session_state:
        store = LedgerStore(DatabaseOperations())

        async def bootstrap():
            await asyncio.gather(store.load(), store.load_reference_data())

        run_async(bootstrap())
        st.session_state['ledger_store'] = store
        st.session_state['editor_version'] = 0
        st.session_state['selected_ids'] = set()
    return st.session_state['ledger_store']

def _vehicle_names(store: LedgerStore) -> dict:
    return {option.value: option.name for option in store.vehicle_options}

def _reset_editor():
    # A new key discards the data_editor's accumulated edit state
    st.session_state['editor_version'] = st.session_state.get('editor_version', 0) + 1

# ============================================================================
# CALLBACKS
# ============================================================================

def handle_filter_change(store: LedgerStore, field: str):
    """Callback for the filter row widgets."""
    value = st.session_state.get(f"filter_{field}")
    if isinstance(value, date):
        value = value.isoformat()
    run_async(store.apply_filter(field, "" if value is None else str(value)))
    _reset_editor()

def handle_clear_filters(store: LedgerStore):
    st.session_state['filter_date'] = None
    st.session_state['filter_description'] = ""
    st.session_state['filter_vehicle'] = ""
    st.session_state['filter_type'] = ""
    st.session_state['filter_amount'] = ""
    run_async(store.clear_filters())
    _reset_editor()

def handle_refresh(store: LedgerStore):
    run_async(store.refresh())
    _reset_editor()

def handle_add_row(store: LedgerStore):
    run_async(store.add_row())
    _reset_editor()

def handle_delete_selected(store: LedgerStore):
    selected = st.session_state.get('selected_ids', set())

    async def delete_all():
        await asyncio.gather(*(store.delete_row(row_id) for row_id in selected))

    run_async(delete_all())
    st.session_state['selected_ids'] = set()
    _reset_editor()

def handle_grid_change(store: LedgerStore, rows_snapshot: list, editor_key: str):
    """Callback for st.data_editor on_change: write each edited cell through."""
    state = st.session_state.get(editor_key)
    if not state or not state.get("edited_rows"):
        return

    names_to_ids = {name: value for value, name in _vehicle_names(store).items()}
    selected = st.session_state.setdefault('selected_ids', set())
    edits = []

    for pos_str, changes in state["edited_rows"].items():
        pos = int(pos_str)
        if pos >= len(rows_snapshot):
            continue
        row = rows_snapshot[pos]

        for column, value in changes.items():
            if column == "Select":
                if value:
                    selected.add(row.id)
                else:
                    selected.discard(row.id)
                continue
            field = GRID_FIELDS.get(column)
            if field is None:
                continue
            # Amount is only editable in the column matching the row's type
            if column == "Income" and not row.is_income():
                continue
            if column == "Expense" and not row.is_expense():
                continue
            if field == "vehicle":
                value = names_to_ids.get(value, value)
            if isinstance(value, date):
                value = value.isoformat()
            edits.append((row.id, field, value))

    if not edits:
        return

    async def write_edits():
        await asyncio.gather(*(store.edit_cell(row_id, field, value) for row_id, field, value in edits))

    run_async(write_edits())
    _reset_editor()

# ============================================================================
# RENDERING
# ============================================================================

def build_grid_frame(store: LedgerStore) -> pd.DataFrame:
    """Build the DataFrame shown in the editable grid (one row per transaction, store order)."""
    names = _vehicle_names(store)
    selected = st.session_state.get('selected_ids', set())
    records = []
    for row in store.rows:
        records.append({
            "Select": row.id in selected,
            "Date": date.fromisoformat(row.date) if row.date else None,
            "Description": row.description or "",
            "Rental": names.get(row.vehicle, "" if row.vehicle is None else str(row.vehicle)),
            "Transaction Type": row.type,
            "Status": row.status,
            "Income": row.income_amount(),
            "Expense": row.expense_amount(),
            "Pending": "⏳" if store.is_pending(row.id) else ("⚠️" if row.id in store.failed_rows else ""),
            "id": row.id
        })
    return pd.DataFrame(records, columns=["Select", "Date", "Description", "Rental", "Transaction Type",
                                          "Status", "Income", "Expense", "Pending", "id"])

def show_filter_row(store: LedgerStore):
    """Filter widgets. Description filters on Enter/blur, the others on change."""
    vehicle_names = _vehicle_names(store)
    col_date, col_desc, col_vehicle, col_type, col_amount, col_clear = st.columns([2, 3, 2, 2, 2, 1])

    with col_date:
        st.date_input("Date", value=None, key="filter_date",
                      on_change=handle_filter_change, args=(store, "date"))
    with col_desc:
        st.text_input("Description", key="filter_description",
                      on_change=handle_filter_change, args=(store, "description"))
    with col_vehicle:
        st.selectbox("Rental", options=[""] + [str(v) for v in vehicle_names], key="filter_vehicle",
                     format_func=lambda v: vehicle_names.get(int(v), v) if v else "All",
                     on_change=handle_filter_change, args=(store, "vehicle"))
    with col_type:
        st.selectbox("Transaction Type", options=[""] + TRANSACTION_TYPES, key="filter_type",
                     format_func=lambda v: v or "All",
                     on_change=handle_filter_change, args=(store, "type"))
    with col_amount:
        st.text_input("Amount", key="filter_amount",
                      on_change=handle_filter_change, args=(store, "amount"))
    with col_clear:
        st.markdown("<br>", unsafe_allow_html=True)
        st.button("✖", help="Clear filters", on_click=handle_clear_filters, args=(store,))

def show_grid(store: LedgerStore):
    editor_key = f"ledger_editor_{st.session_state.get('editor_version', 0)}"
    frame = build_grid_frame(store)
    vehicle_names = list(_vehicle_names(store).values())

    st.data_editor(
        frame,
        column_config={
            "Select": st.column_config.CheckboxColumn("", width="small", default=False),
            "Date": st.column_config.DateColumn("Date", format="YYYY-MM-DD"),
            "Description": st.column_config.TextColumn("Description"),
            "Rental": st.column_config.SelectboxColumn("Rental", options=vehicle_names),
            "Transaction Type": st.column_config.SelectboxColumn("Transaction Type", options=TRANSACTION_TYPES, required=True),
            "Status": st.column_config.SelectboxColumn("Status", options=TRANSACTION_STATUSES),
            "Income": st.column_config.NumberColumn("Income", min_value=0.0, format="%.2f"),
            "Expense": st.column_config.NumberColumn("Expense", min_value=0.0, format="%.2f"),
            "Pending": st.column_config.TextColumn("", disabled=True, width="small"),
            "id": None
        },
        hide_index=True,
        use_container_width=True,
        num_rows="fixed",
        key=editor_key,
        on_change=handle_grid_change,
        args=(store, list(store.rows), editor_key)
    )

def show_ledger():
    """Display the ledger page."""
    store = get_store()

    col_title, col_refresh, col_export = st.columns([6, 1, 1])
    with col_title:
        st.title(f"📒 {APP_NAME}")
        st.caption("Connected to Supabase Database")
    with col_refresh:
        st.button("🔄 Refresh", on_click=handle_refresh, args=(store,), use_container_width=True)
    with col_export:
        st.download_button(
            "⬇️ Export",
            data=build_csv(store.rows),
            file_name=export_filename(),
            mime="text/csv",
            use_container_width=True
        )

    if store.last_error:
        st.error(f"❌ {store.last_error}")
        st.button("Dismiss", on_click=store.dismiss_error)

    totals = store.totals
    st.markdown(load_template(
        "components/metrics.html",
        total_income=format_currency(totals.income),
        total_expense=format_currency(totals.expense),
        net_balance=format_currency(totals.balance),
        income_color=THEME_COLORS["income"],
        expense_color=THEME_COLORS["expense"],
        balance_color=THEME_COLORS["balance_positive"] if totals.balance >= 0 else THEME_COLORS["balance_negative"]
    ), unsafe_allow_html=True)

    show_filter_row(store)

    if store.loading and not store.rows:
        st.info("Loading transactions...")
    else:
        show_grid(store)

    col_add, col_delete, col_totals = st.columns([2, 2, 4])
    with col_add:
        st.button("➕ Add Transaction Row", on_click=handle_add_row, args=(store,))
    with col_delete:
        st.button("🗑️ Delete Selected", on_click=handle_delete_selected, args=(store,),
                  disabled=not st.session_state.get('selected_ids'))
    with col_totals:
        st.markdown(
            f"**Totals:** Income {format_currency(totals.income)} · Expense {format_currency(totals.expense)}"
        )
