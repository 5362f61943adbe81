import streamlit as st

from taskboard.board import enum_to_display_text, format_date, initials
from taskboard.forms import FormValidationError, build_password_payload, build_profile_payload
from taskboard.ui import get_client, require_user, set_page, sidebar_user

set_page(page_title="Profile", page_icon="👤", layout="centered")
user = require_user()
sidebar_user()
client = get_client()


def _show_errors(exc: FormValidationError) -> None:
    for message in exc.errors:
        st.error(message)


st.title("Profile")
h1, h2 = st.columns([1, 5])
with h1:
    st.markdown(f"## {initials(user.first_name, user.last_name)}")
with h2:
    st.markdown(f"**{user.full_name}**")
    st.caption(f"{user.email} · {enum_to_display_text(user.role)}")
    if user.last_login_at:
        st.caption(f"Last login {format_date(user.last_login_at)}")

details_tab, password_tab = st.tabs(["Details", "Password"])

with details_tab:
    with st.form("tb-profile"):
        c1, c2 = st.columns(2)
        with c1:
            first_name = st.text_input("First name", value=user.first_name)
        with c2:
            last_name = st.text_input("Last name", value=user.last_name)
        department = st.text_input("Department", value=user.department or "")
        phone = st.text_input("Phone number", value=user.phone_number or "")
        saved = st.form_submit_button("Save profile")
    if saved:
        try:
            payload = build_profile_payload(
                first_name=first_name, last_name=last_name, department=department, phone_number=phone
            )
        except FormValidationError as exc:
            _show_errors(exc)
        else:
            resp = client.update_profile(payload)
            if resp.success:
                st.toast("Profile updated successfully", icon="✅")
                st.rerun()
            else:
                st.error(resp.message or "Failed to update profile")

with password_tab:
    with st.form("tb-password", clear_on_submit=True):
        current = st.text_input("Current password", type="password")
        new = st.text_input("New password", type="password")
        confirm = st.text_input("Confirm new password", type="password")
        changed = st.form_submit_button("Change password")
    if changed:
        try:
            payload = build_password_payload(current, new, confirm)
        except FormValidationError as exc:
            _show_errors(exc)
        else:
            resp = client.change_password(payload)
            if resp.success:
                st.toast("Password changed successfully", icon="🔑")
            else:
                st.error(resp.message or "Failed to change password")
