import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import streamlit as st
import pandas as pd
import plotly.express as px

from wallet.config import EXPORT_FILENAME
from wallet.functional import to_number
from wallet.lazy import category_label, labelled_transactions
from wallet.logging_setup import configure_logging
from wallet.services import WalletService
from wallet.transforms import EXPENSE, INCOME, goal_progress, total_percent

configure_logging()

st.set_page_config(page_title="Wallet Saver", layout="wide")

if "wallet" not in st.session_state:
    st.session_state.wallet = WalletService()

wallet: WalletService = st.session_state.wallet

st.title("💰 Wallet Saver")
st.caption("Local-only • data kept in the local store")

for alert in wallet.pop_alerts():
    st.warning(alert)
if wallet.last_error:
    st.error(f"Could not save your data: {wallet.last_error}")

# --- Income and distribution
st.header("Monthly Income")
col_income, col_dist, col_export, col_import = st.columns([3, 1, 1, 2])
with col_income:
    income_value = st.number_input("Monthly Income", value=float(to_number(wallet.state.income)), step=100.0,
                                   label_visibility="collapsed")
    if income_value != to_number(wallet.state.income):
        wallet.set_income(income_value)
        st.rerun()
with col_dist:
    if st.button("Distribute"):
        wallet.distribute()
        st.rerun()
with col_export:
    st.download_button("⬇ Export", wallet.export(), file_name=EXPORT_FILENAME, mime="application/json")
with col_import:
    uploaded = st.file_uploader("Import", type=["json"], label_visibility="collapsed")
    if uploaded is not None and st.session_state.get("imported_file") != uploaded.file_id:
        st.session_state.imported_file = uploaded.file_id
        result = wallet.import_(uploaded.getvalue())
        if result.is_left():
            st.error("Invalid file")
        else:
            st.rerun()

st.divider()
left, right = st.columns(2)

# --- Categories
with left:
    st.subheader("🗂 Categories")
    categories = wallet.state.categories
    for c in categories:
        c_name, c_pct, c_bal, c_del = st.columns([3, 2, 2, 1])
        with c_name:
            new_name = st.text_input("Name", value=c.name, key=f"name_{c.id}", label_visibility="collapsed")
        with c_pct:
            new_pct = st.number_input("Percent", value=float(to_number(c.percent)), step=1.0, key=f"pct_{c.id}",
                                      label_visibility="collapsed", help="Percent allocation")
        with c_bal:
            st.metric("Balance", f"{to_number(c.balance):,.0f}", label_visibility="collapsed")
        with c_del:
            if st.button("✕", key=f"del_{c.id}"):
                wallet.remove_category(c.id)
                st.rerun()
        if new_name != c.name or new_pct != to_number(c.percent):
            wallet.update_category(c.id, name=new_name, percent=new_pct)

    new_cat_col, add_col = st.columns([3, 1])
    with new_cat_col:
        new_cat_name = st.text_input("New category", key="new_cat_name", label_visibility="collapsed",
                                     placeholder="New category name")
    with add_col:
        if st.button("Add") and new_cat_name.strip():
            wallet.add_category(new_cat_name.strip())
            st.rerun()

    st.caption(f"Total allocation: {total_percent(wallet.state.categories):g}%")

    if wallet.state.categories:
        df_cat = pd.DataFrame([{"Category": c.name, "Balance": to_number(c.balance)} for c in wallet.state.categories])
        if df_cat["Balance"].sum() > 0:
            fig = px.pie(df_cat, values="Balance", names="Category", title="Current balances")
            fig.update_layout(height=300)
            st.plotly_chart(fig, use_container_width=True)

# --- Transactions
with right:
    st.subheader("🧾 Add Transaction")
    with st.form("tx_form", clear_on_submit=True):
        title = st.text_input("Title")
        amount = st.text_input("Amount")
        cat_id = st.selectbox("Category", [c.id for c in wallet.state.categories],
                              format_func=lambda cid: category_label(wallet.state.categories, cid))
        tx_type = st.selectbox("Type", [EXPENSE, INCOME], format_func=str.capitalize)
        if st.form_submit_button("Add"):
            wallet.add_transaction(title, amount, cat_id, tx_type)
            st.rerun()

    st.subheader("Transactions")
    if not wallet.state.transactions:
        st.info("No transactions yet")
    else:
        rows = [
            {
                "Date": pd.to_datetime(t.date, errors="coerce"),
                "Title": t.title,
                "Amount": t.amount,
                "Category": label,
            }
            for t, label in labelled_transactions(wallet.state.transactions, wallet.state.categories)
        ]
        df_tx = pd.DataFrame(rows)
        df_tx["Date"] = df_tx["Date"].dt.strftime("%Y-%m-%d %H:%M").fillna("-")
        st.dataframe(df_tx, hide_index=True, use_container_width=True, height=240)

st.divider()

# --- Goals
st.subheader("🎯 Savings Goals")
goal_form_col, goal_list_col = st.columns(2)
with goal_form_col:
    balances = {c.id: to_number(c.balance) for c in wallet.state.categories}

    def source_label(cid):
        if cid is None:
            return "(no transfer)"
        return f"{category_label(wallet.state.categories, cid)} — {balances[cid]:,.0f}"

    with st.form("goal_form", clear_on_submit=True):
        goal_name = st.text_input("Goal name")
        target = st.number_input("Target amount", min_value=0.0, step=100.0)
        source = st.selectbox("Transfer from", [None] + list(balances), format_func=source_label,
                              index=1 if balances else 0)
        if st.form_submit_button("Create goal") and goal_name.strip():
            wallet.create_goal(goal_name.strip(), target, source)
            st.rerun()

with goal_list_col:
    if not wallet.state.goals:
        st.info("No goals yet")
    for g in wallet.state.goals:
        st.write(f"**{g.name}** — {to_number(g.saved):,.0f} / {to_number(g.target_amount):,.0f}")
        st.progress(goal_progress(g) / 100)
