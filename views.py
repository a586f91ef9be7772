import io
import logging

import pandas as pd
import plotly.express as px
import qrcode
import streamlit as st
from fpdf import FPDF

import config
from actions import AssetActions, EmployeeActions, Snapshot, blank_asset, blank_employee
from assignment import assignment_locked, status_options
from database import DataClientError
from history import HistoryRecorder
from inventory import GroupState, assets_for_employee, classify, count_statuses, filter_assets, group_by_type, is_accessory
from navigation import View

logger = logging.getLogger(__name__)

TYPE_ICONS = {
    "Laptop": "💻", "PC": "🖥️", "Phone": "📱", "Tablet": "📱",
    "Keyboard": "⌨️", "Mouse": "🖱️", "Mouse Pad": "🟫", "Monitor": "🖥️",
    "Headset": "🎧", "Cable": "🔌",
}
STATUS_BADGES = {
    config.STATUS_AVAILABLE: "🟢 Available",
    config.STATUS_IN_USE: "🔵 In Use",
    config.STATUS_MAINTENANCE: "🔴 Maintenance",
}
ACTION_DOTS = {
    config.ACTION_RETURNED: "🟡",
    config.ACTION_MAINTENANCE: "🔴",
    config.ACTION_DEPLOYED: "🔵",
    config.ACTION_CREATED: "🟢",
}


# --- SESSION STATE ---
def get_snapshots(db):
    if "assets" not in st.session_state:
        st.session_state.assets = Snapshot(db, config.TABLE_ASSETS)
        st.session_state.employees = Snapshot(db, config.TABLE_EMPLOYEES)
    return st.session_state.assets, st.session_state.employees


def get_group_state():
    if "group_state" not in st.session_state:
        st.session_state.group_state = GroupState()
    return st.session_state.group_state


def flash(message):
    st.session_state.flash = message


def report_failure(message, error, *snapshots):
    logger.error("%s: %s", message, error)
    st.error(f"{message}: {error}")
    for snap in snapshots:
        snap.recover()


# --- HELPER: QR + LABEL ---
def qr_payload(asset):
    return f"Asset: {asset['name']} | SN: {asset['serial_number']}"


def generate_qr(data):
    qr = qrcode.QRCode(box_size=10, border=4)
    qr.add_data(data)
    qr.make(fit=True)
    return qr.make_image(fill_color="black", back_color="white")


def generate_label_pdf(asset):
    pdf = FPDF(orientation="L", unit="mm", format=(50, 90))
    pdf.set_auto_page_break(auto=False)
    pdf.add_page()
    pdf.image(generate_qr(qr_payload(asset)).get_image(), x=3, y=3, w=44, h=44)
    pdf.set_xy(49, 10)
    pdf.set_font("Helvetica", "B", 10)
    pdf.multi_cell(38, 5, text=asset["name"][:40])
    pdf.set_xy(49, 30)
    pdf.set_font("Helvetica", size=7)
    pdf.multi_cell(38, 4, text=f"S/N: {asset['serial_number'] or '-'}\nID: {asset['id']}")
    return bytes(pdf.output())


def asset_frame(assets):
    df = pd.DataFrame(assets, columns=["id"] + list(config.ASSET_COLUMNS))
    df["name"] = [f"{TYPE_ICONS.get(t, '📦')} {n}" for t, n in zip(df["type"], df["name"])]
    df["status"] = df["status"].map(lambda s: STATUS_BADGES.get(s, s))
    df["assigned_to"] = df["assigned_to"].fillna("Not Assigned")
    return df.rename(columns=config.ASSET_COLUMNS)


# --- COMPONENT: ASSET FORM DIALOG ---
def _form_key(asset, field):
    return f"asset_{asset['id']}_{field}"


def open_asset_dialog(db, asset, **overrides):
    # Seed the widget state so every open starts from the stored row
    form = dict(asset, **overrides)
    for field in ("name", "type", "status", "serial_number"):
        st.session_state[_form_key(asset, field)] = form[field] or ""
    st.session_state[_form_key(asset, "assigned_to")] = form.get("assigned_to") or ""
    asset_dialog(db, asset)


@st.dialog("Asset", width="large")
def asset_dialog(db, asset):
    assets, employees = get_snapshots(db)
    key = lambda field: _form_key(asset, field)

    details_tab, qr_tab = st.tabs(["📝 Details", "🔳 QR Code"])
    with details_tab:
        st.text_input("Item Name", key=key("name"), placeholder="e.g. Logitech K380")
        c1, c2 = st.columns(2)
        with c1:
            type_label = "Accessory" if is_accessory(st.session_state[key("type")]) else "Type"
            st.selectbox(type_label, list(config.MAIN_ASSET_TYPES) + list(config.ACCESSORY_TYPES), key=key("type"))
        asset_type = st.session_state[key("type")]
        with c2:
            options = status_options(asset_type)
            if st.session_state[key("status")] not in options:
                st.session_state[key("status")] = options[0]
            st.selectbox("Status", options, key=key("status"))
        status = st.session_state[key("status")]

        locked = assignment_locked(status, asset_type)
        names = [""] + [e["full_name"] for e in employees.ensure_loaded()]
        if locked or st.session_state[key("assigned_to")] not in names:
            st.session_state[key("assigned_to")] = ""
        if not is_accessory(asset_type):
            st.selectbox(
                "Assigned To (Locked)" if locked else "Assigned To",
                names,
                key=key("assigned_to"),
                disabled=locked,
                format_func=lambda n: n or "-- Not Assigned --",
            )
        st.text_input("Serial Number / ID", key=key("serial_number"), placeholder="Optional")

        st.divider()
        c_del, c_save = st.columns([1, 1])
        with c_save:
            if st.button("💾 Save", type="primary", use_container_width=True, key=key("save")):
                form = {
                    "id": asset["id"],
                    "name": st.session_state[key("name")],
                    "type": asset_type,
                    "status": status,
                    "serial_number": st.session_state[key("serial_number")],
                    "assigned_to": st.session_state[key("assigned_to")],
                }
                try:
                    row = AssetActions(db).save(form, employees.rows)
                except DataClientError as e:
                    report_failure("Failed to save", e, assets)
                else:
                    assets.apply(row)
                    flash(f"Saved {row['name']}")
                    st.rerun()
        with c_del:
            if asset["id"] != 0:
                confirm = st.checkbox("Permanently delete this item", key=key("confirm_delete"))
                if st.button("🗑️ Delete", disabled=not confirm, key=key("delete")):
                    delete_asset(db, asset)

    with qr_tab:
        if asset["id"] == 0:
            st.info("Save the asset to print its label.")
        else:
            img = generate_qr(qr_payload(asset))
            buf = io.BytesIO()
            img.save(buf, format="PNG")
            c_qr, c_dl = st.columns([1, 2])
            with c_qr:
                st.image(buf.getvalue(), width=180)
            with c_dl:
                st.subheader(asset["name"])
                st.caption(asset["serial_number"])
                st.download_button("⬇ QR Image", data=buf.getvalue(), file_name=f"QR_{asset['id']}.png", mime="image/png")
                st.download_button(
                    "🖨️ Print Label (PDF)",
                    data=generate_label_pdf(asset),
                    file_name=f"Label_{asset['id']}.pdf",
                    mime="application/pdf",
                )


def delete_asset(db, asset):
    assets, _ = get_snapshots(db)
    try:
        AssetActions(db).delete(asset["id"])
    except DataClientError as e:
        report_failure("Failed to delete", e, assets)
    else:
        assets.discard(asset["id"])
        flash(f"Deleted {asset['name']}")
        st.rerun()


@st.dialog("Delete Asset")
def confirm_delete_dialog(db, asset):
    st.write(f"Are you sure you want to **delete** {asset['name']}?")
    if st.button("🗑️ Delete", type="primary"):
        delete_asset(db, asset)


@st.dialog("Return Asset")
def confirm_return_dialog(db, asset):
    st.write(f"Return **{asset['name']}** from {asset['assigned_to'] or 'Not Assigned'}?")
    if st.button("📥 Return", type="primary"):
        assets, _ = get_snapshots(db)
        try:
            row = AssetActions(db).check_in(asset)
        except DataClientError as e:
            report_failure("Failed to return", e, assets)
        else:
            assets.apply(row)
            flash("Returned successfully!")
            st.rerun()


# --- COMPONENT: HISTORY TIMELINE ---
@st.dialog("Asset Timeline")
def history_dialog(db, asset):
    st.caption(f"History for **{asset['name']}**")
    try:
        events = HistoryRecorder(db).timeline(asset["id"])
    except DataClientError as e:
        report_failure("Could not load history", e)
        return
    if not events:
        st.info("No history recorded yet.")
        return
    for ev in events:
        with st.container(border=True):
            c_dot, c_body = st.columns([1, 8])
            c_dot.write(ACTION_DOTS.get(ev["action"], "🟢"))
            c_body.markdown(f"**{ev['action']}** · `{ev['created_at']:%Y-%m-%d %H:%M}`")
            c_body.caption(ev["details"])


# --- COMPONENT: ASSET TABLE + ACTION BAR ---
def mark_maintenance(db, asset):
    assets, _ = get_snapshots(db)
    try:
        row = AssetActions(db).mark_maintenance(asset)
    except DataClientError as e:
        report_failure("Failed to mark for maintenance", e, assets)
    else:
        assets.apply(row)
        flash(f"{asset['name']} sent to maintenance")
        st.rerun()


def asset_table(db, rows, key):
    event = st.dataframe(
        asset_frame(rows),
        key=key,
        on_select="rerun",
        selection_mode="single-row",
        hide_index=True,
        use_container_width=True,
        column_config={"id": None},
    )
    selected = event.selection.rows
    # Selection can outlive the row it pointed at after a refetch
    if not selected or selected[0] >= len(rows):
        return
    asset = rows[selected[0]]
    b1, b2, b3, b4, b5 = st.columns(5)
    if asset["status"] == config.STATUS_IN_USE:
        if b1.button("↩️ Return", key=f"{key}_return"):
            confirm_return_dialog(db, asset)
    elif b1.button("👤 Deploy", key=f"{key}_deploy"):
        overrides = {} if is_accessory(asset["type"]) else {"status": config.STATUS_IN_USE}
        open_asset_dialog(db, asset, **overrides)
    if b2.button("🕒 History", key=f"{key}_history"):
        history_dialog(db, asset)
    if b3.button("🔧 Maintenance", key=f"{key}_maint"):
        mark_maintenance(db, asset)
    if b4.button("✏️ Edit", key=f"{key}_edit"):
        open_asset_dialog(db, asset)
    if b5.button("🗑️ Delete", key=f"{key}_delete"):
        confirm_delete_dialog(db, asset)


def list_controls(noun, key):
    c_search, c_status = st.columns([2, 1])
    search = c_search.text_input("🔍 Search", placeholder=f"Search {noun}...", key=f"{key}_search")
    status = c_status.selectbox(
        "Status",
        [config.STATUS_FILTER_ALL] + list(config.STATUSES),
        key=f"{key}_status",
        format_func=lambda s: "All Status" if s == config.STATUS_FILTER_ALL else s,
    )
    return search, status


# --- VIEW 1: DASHBOARD ---
def show_dashboard(db):
    assets, _ = get_snapshots(db)
    c_title, c_btn = st.columns([3, 1])
    with c_title:
        st.title("📊 Inventory Overview")
        st.caption("Main assets only")
    if c_btn.button("➕ Register Asset", type="primary", use_container_width=True):
        open_asset_dialog(db, blank_asset(View.DASHBOARD))

    counts = count_statuses(assets.rows)
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Main Assets", counts.total)
    c2.metric("Available", counts.available)
    c3.metric("Deployed", counts.in_use)
    c4.metric("Maintenance", counts.maintenance)

    st.markdown("---")
    if counts.total:
        df = pd.DataFrame({
            "Status": list(config.STATUSES),
            "Count": [counts.available, counts.in_use, counts.maintenance],
        })
        fig = px.pie(df, names="Status", values="Count", hole=0.4, title="Custody")
        st.plotly_chart(fig, use_container_width=True)
    else:
        st.info("No data available.")


# --- VIEW 2: MAIN ASSETS ---
def show_main_assets(db):
    assets, _ = get_snapshots(db)
    c_title, c_btn = st.columns([3, 1])
    with c_title:
        st.title("💻 Main Assets")
        st.caption("Laptops, Phones, Tablets & PCs")
    if c_btn.button("➕ Add Asset", type="primary", use_container_width=True):
        open_asset_dialog(db, blank_asset(View.ALL_ASSETS))

    main_assets, _ = classify(assets.rows)
    search, status = list_controls("device", "main")
    filtered = filter_assets(main_assets, search, status)
    if filtered:
        asset_table(db, filtered, "main_table")
    else:
        st.warning("No results.")


# --- VIEW 3: ACCESSORIES ---
def show_accessories(db):
    assets, _ = get_snapshots(db)
    c_title, c_btn = st.columns([3, 1])
    with c_title:
        st.title("🖱️ Accessories")
        st.caption("Keyboards, Mice, Monitors, etc.")
    if c_btn.button("➕ Add Accessory", type="primary", use_container_width=True):
        open_asset_dialog(db, blank_asset(View.ACCESSORIES))

    _, accessories = classify(assets.rows)
    search, status = list_controls("accessory", "acc")
    groups = group_by_type(filter_assets(accessories, search, status), get_group_state())
    if not groups:
        st.warning("No accessories found.")
        return

    for group in groups:
        with st.container(border=True):
            arrow = "▾" if group.expanded else "▸"
            label = f"{arrow} {TYPE_ICONS.get(group.type, '📦')} {group.type}s ({group.count})"
            if st.button(label, key=f"group_{group.type}", type="secondary"):
                get_group_state().toggle(group.type)
                st.rerun()
            if group.expanded:
                asset_table(db, group.assets, f"group_table_{group.type}")


# --- VIEW 4: EMPLOYEES ---
@st.dialog("Employee")
def employee_dialog(db, employee):
    assets, employees = get_snapshots(db)
    st.subheader("Add Employee" if employee["id"] == 0 else "Edit Employee")
    with st.form(f"employee_{employee['id']}"):
        full_name = st.text_input("Full Name", value=employee["full_name"], placeholder="e.g. John Doe")
        role = st.text_input("Role", value=employee["role"], placeholder="e.g. Developer")
        department = st.text_input("Department", value=employee["department"], placeholder="e.g. Engineering")
        submitted = st.form_submit_button("Save Employee", type="primary")
    if submitted:
        missing = [label for label, v in (("Full Name", full_name), ("Role", role), ("Department", department)) if not v.strip()]
        if missing:
            st.error(f"Missing Required Fields: {', '.join(missing)}")
        else:
            form = {"id": employee["id"], "full_name": full_name, "role": role, "department": department}
            try:
                row = EmployeeActions(db).save(form)
            except DataClientError as e:
                report_failure("Failed to save employee", e, employees)
            else:
                employees.apply(row)
                # Assigned-to names are joined at read time
                assets.recover()
                flash(f"Saved {row['full_name']}")
                st.rerun()

    if employee["id"] != 0:
        st.divider()
        confirm = st.checkbox("Delete this employee", key=f"emp_confirm_{employee['id']}")
        if st.button("🗑️ Delete", disabled=not confirm, key=f"emp_delete_{employee['id']}"):
            try:
                EmployeeActions(db).delete(employee["id"])
            except DataClientError as e:
                report_failure("Failed to delete employee", e, employees)
            else:
                employees.discard(employee["id"])
                assets.recover()
                flash(f"Deleted {employee['full_name']}")
                st.rerun()


def show_employees(db):
    assets, employees = get_snapshots(db)
    c_title, c_btn = st.columns([3, 1])
    with c_title:
        st.title("👥 Employees")
        st.caption("Manage staff and view assigned devices")
    if c_btn.button("➕ Add Employee", type="primary", use_container_width=True):
        employee_dialog(db, blank_employee())

    if not employees.rows:
        st.info("No employees yet.")
        return

    cols = st.columns(3)
    for i, emp in enumerate(employees.rows):
        with cols[i % 3].container(border=True):
            st.markdown(f"### {emp['full_name'][:1].upper()} · {emp['full_name']}")
            st.caption(f"💼 {emp['role']} · {emp['department']}")
            st.markdown("**Assigned Devices**")
            mine = assets_for_employee(assets.rows, emp)
            if mine:
                for a in mine:
                    st.write(f"{TYPE_ICONS.get(a['type'], '📦')} {a['name']}")
            else:
                st.caption("_No devices assigned_")
            if st.button("✏️ Edit", key=f"emp_edit_{emp['id']}"):
                employee_dialog(db, emp)


# --- VIEW 5: SETTINGS ---
def show_settings(db):
    st.title("⚙️ Settings")
    st.info("🔒 Settings Locked")
