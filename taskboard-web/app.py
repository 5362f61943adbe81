import streamlit as st

from taskboard.forms import FormValidationError, build_login_payload, build_register_payload
from taskboard.ui import current_user, get_client, set_page

set_page(page_title="Taskboard · Sign in", page_icon="🔐", layout="centered")

if current_user() is not None:
    st.switch_page("pages/1_Dashboard.py")

st.title("Taskboard")
st.caption("Projects, tasks and team workload in one place.")

login_tab, register_tab = st.tabs(["Sign in", "Create account"])

with login_tab:
    with st.form("tb-login"):
        email = st.text_input("Email", placeholder="you@company.com")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Sign in", use_container_width=True)
    if submitted:
        try:
            payload = build_login_payload(email, password)
        except FormValidationError as exc:
            for message in exc.errors:
                st.error(message)
        else:
            resp = get_client().login(payload["email"], payload["password"])
            if resp.success and get_client().session.is_authenticated:
                st.toast("Welcome back!", icon="✅")
                st.switch_page("pages/1_Dashboard.py")
            else:
                st.error(resp.message if not resp.success else "Login failed")

with register_tab:
    with st.form("tb-register"):
        c1, c2 = st.columns(2)
        with c1:
            first_name = st.text_input("First name")
        with c2:
            last_name = st.text_input("Last name")
        reg_email = st.text_input("Email", key="tb-reg-email")
        reg_password = st.text_input("Password", type="password", key="tb-reg-password")
        c3, c4 = st.columns(2)
        with c3:
            department = st.text_input("Department (optional)")
        with c4:
            phone = st.text_input("Phone (optional)")
        reg_submitted = st.form_submit_button("Create account", use_container_width=True)
    if reg_submitted:
        try:
            payload = build_register_payload(
                email=reg_email,
                password=reg_password,
                first_name=first_name,
                last_name=last_name,
                department=department,
                phone_number=phone,
            )
        except FormValidationError as exc:
            for message in exc.errors:
                st.error(message)
        else:
            resp = get_client().register(payload)
            if resp.success and get_client().session.is_authenticated:
                st.toast("Account created successfully!", icon="🎉")
                st.switch_page("pages/1_Dashboard.py")
            else:
                st.error(resp.message if not resp.success else "Registration failed")
