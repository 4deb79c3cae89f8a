"""
Streamlit Frontend for Hisab

The screen a group of friends uses to keep track of who paid for what
on a trip or in a shared flat.

DESIGN PRINCIPLES:
1. Simple, clear interface
2. Every split is shown before it is saved
3. Clear error messages in simple language
4. Balances are recomputed on every screen, never cached

The UI never does money math itself: it passes what the user typed to
the orchestrator and shows what comes back.
"""

from datetime import datetime
from typing import Optional

import streamlit as st

from hisab.config import validate_all_settings
from hisab.ledger import LedgerError, format_currency
from hisab.models import Expense, ExpenseCategory, Group, SplitMethod
from hisab.orchestrator import (
    ExpenseFlow,
    GroupFlow,
    SettlementFlow,
    create_app_components,
)
from hisab.services import StorageError
from hisab.validation import ExpenseValidationError


# Page configuration
st.set_page_config(
    page_title="Hisab",
    page_icon="🧮",
    layout="wide",
    initial_sidebar_state="expanded",
)

# Custom CSS for better UX
st.markdown("""
<style>
    .stButton>button {
        width: 100%;
        margin-top: 10px;
    }
    .success-box {
        padding: 20px;
        background-color: #d4edda;
        border-radius: 10px;
        border-left: 5px solid #28a745;
        margin: 10px 0;
    }
    .warning-box {
        padding: 20px;
        background-color: #fff3cd;
        border-radius: 10px;
        border-left: 5px solid #ffc107;
        margin: 10px 0;
    }
    .info-box {
        padding: 20px;
        background-color: #cce5ff;
        border-radius: 10px;
        border-left: 5px solid #004085;
        margin: 10px 0;
    }
    .big-number {
        font-size: 2.5em;
        font-weight: bold;
        color: #2c3e50;
    }
</style>
""", unsafe_allow_html=True)


@st.cache_resource
def get_components():
    """Get or create application components (cached)."""
    return create_app_components()


def select_group(group_flow: GroupFlow) -> Optional[Group]:
    """Sidebar group picker. Returns the selected group, if any."""
    groups = group_flow.list_groups()
    if not groups:
        st.sidebar.info("No groups yet. Create one on the Groups page.")
        return None

    ids = [g.id for g in groups]
    current = st.session_state.get("group_id")
    index = ids.index(current) if current in ids else 0

    group = st.sidebar.selectbox(
        "Group",
        options=groups,
        index=index,
        format_func=lambda g: f"{g.name} ({g.currency.value})",
    )
    st.session_state.group_id = group.id
    return group


def main():
    """Main application entry point."""
    group_flow, expense_flow, settlement_flow = get_components()

    # Sidebar navigation
    st.sidebar.title("🧮 Hisab")
    st.sidebar.markdown("---")

    group = select_group(group_flow)

    page = st.sidebar.radio(
        "Navigate to:",
        ["👥 Groups", "🧾 Expenses", "⚖️ Balances", "📄 Export", "⚙️ Settings"],
        index=0,
    )

    st.sidebar.markdown("---")
    st.sidebar.markdown(
        """
        **How to use:**
        1. Create a group and add everyone
        2. Add expenses as they happen
        3. Check balances and record payments
        """
    )

    # Route to appropriate page
    if page == "👥 Groups":
        render_groups_page(group_flow, group)
    elif page == "⚙️ Settings":
        render_settings_page()
    elif group is None:
        st.info("👈 Create or select a group first.")
    elif page == "🧾 Expenses":
        render_expenses_page(expense_flow, group)
    elif page == "⚖️ Balances":
        render_balances_page(settlement_flow, group)
    elif page == "📄 Export":
        render_export_page(settlement_flow, group)


def render_groups_page(group_flow: GroupFlow, group: Optional[Group]):
    """Render the group and participant management page."""
    st.title("👥 Groups")

    with st.form("create_group", clear_on_submit=True):
        st.markdown("### New Group")
        col1, col2 = st.columns([3, 1])
        with col1:
            name = st.text_input("Group name *", placeholder="e.g., Goa Trip")
        with col2:
            currency = st.selectbox("Currency", options=["USD", "EUR", "GBP", "CAD", "INR"])

        if st.form_submit_button("➕ Create Group", type="primary"):
            try:
                created = group_flow.create_group(name, currency)
                st.session_state.group_id = created.id
                st.rerun()
            except (LedgerError, StorageError) as e:
                st.error(str(e))

    if group is None:
        return

    st.markdown("---")
    st.subheader(f"Current group: {group.name}")

    new_name = st.text_input("Rename group", value=group.name)
    if new_name != group.name and st.button("✏️ Rename"):
        try:
            group_flow.rename_group(group.id, new_name)
            st.rerun()
        except (LedgerError, StorageError) as e:
            st.error(str(e))

    st.markdown("### Participants")
    for participant in group.participants:
        col1, col2 = st.columns([4, 1])
        with col1:
            st.markdown(
                f"**{participant.name}** · joined {participant.join_date.isoformat()}"
            )
        with col2:
            if st.button("Remove", key=f"remove_{participant.name}"):
                try:
                    group_flow.remove_participant(group.id, participant.name)
                    st.rerun()
                except (LedgerError, StorageError) as e:
                    st.error(str(e))

    with st.form("add_participant", clear_on_submit=True):
        participant_name = st.text_input("Name *", placeholder="e.g., Alice")
        if st.form_submit_button("➕ Add Participant"):
            try:
                group_flow.add_participant(group.id, participant_name)
                st.rerun()
            except (LedgerError, StorageError) as e:
                st.error(str(e))

    st.markdown("---")
    with st.expander("🗑️ Delete this group"):
        st.warning("This removes the group, its expenses and its settlements.")
        if st.button("Delete group", key="delete_group"):
            try:
                group_flow.delete_group(group.id)
                st.session_state.group_id = None
                st.rerun()
            except (LedgerError, StorageError) as e:
                st.error(str(e))


def render_split_inputs(group: Group, split_method: SplitMethod) -> tuple[dict, list]:
    """
    Inputs for the chosen split method.

    Returns:
        (entries, participants) - entries for custom/percentage splits,
        participants for equal splits
    """
    names = group.participant_names
    entries = {}
    participants = names

    if split_method == SplitMethod.EQUAL:
        participants = st.multiselect("Split between", options=names, default=names)
    else:
        label = "Amount" if split_method == SplitMethod.CUSTOM else "Percent (%)"
        default = "" if split_method == SplitMethod.CUSTOM else f"{100 / len(names):.2f}"
        cols = st.columns(min(len(names), 4))
        for index, name in enumerate(names):
            with cols[index % len(cols)]:
                entries[name] = st.text_input(
                    f"{name} · {label}", value=default, key=f"entry_{split_method.value}_{name}",
                )

    return entries, participants


def render_expenses_page(expense_flow: ExpenseFlow, group: Group):
    """Render the add-expense form and the expense list."""
    st.title("🧾 Expenses")

    if not group.participants:
        st.info("Add at least one participant before adding expenses.")
        return

    st.markdown("### Add Expense")
    col1, col2 = st.columns(2)
    with col1:
        description = st.text_input("Description *", placeholder="e.g., Dinner")
        amount = st.text_input("Amount *", placeholder="e.g., 25.50")
        payer = st.selectbox("Paid by *", options=group.participant_names)
    with col2:
        category = st.selectbox(
            "Category",
            options=list(ExpenseCategory),
            format_func=lambda x: x.value.title(),
        )
        split_method = st.radio(
            "Split method",
            options=list(SplitMethod),
            format_func=lambda x: x.value.title(),
            horizontal=True,
        )
        when = st.date_input("Date", value=datetime.utcnow().date())

    entries, participants = render_split_inputs(group, split_method)

    if amount:
        try:
            preview = expense_flow.preview_split(
                group.id, amount, split_method, entries=entries, participants=participants,
            )
            st.markdown("**Split preview:** " + ", ".join(
                f"{name} {format_currency(owed, group.currency.value)}"
                for name, owed in preview.items()
            ))
        except LedgerError as e:
            st.caption(f"⚠️ {e}")

    if st.button("✅ Add Expense", type="primary"):
        try:
            expense, result = expense_flow.add_expense(
                group.id,
                description=description,
                amount=amount,
                payer=payer,
                category=category,
                split_method=split_method,
                entries=entries,
                participants=participants,
                when=datetime.combine(when, datetime.utcnow().time()),
            )
            st.markdown(f"""
            <div class="success-box">
                <h4>✅ Expense Added</h4>
                <p>{expense.description}: {format_currency(expense.amount, group.currency.value)}</p>
            </div>
            """, unsafe_allow_html=True)
            if result.warnings:
                st.markdown(f"""
                <div class="warning-box">
                    <h4>⚠️ Please Verify</h4>
                    <p>{"<br>".join(result.warnings)}</p>
                </div>
                """, unsafe_allow_html=True)
        except ExpenseValidationError as e:
            st.error("\n".join(
                f"• {issue.message}" for issue in e.result.issues if issue.severity == "error"
            ))
        except (LedgerError, StorageError) as e:
            st.error(str(e))

    st.markdown("---")
    st.markdown("### All Expenses")

    expenses = sorted(group.expenses, key=lambda e: e.date, reverse=True)
    if not expenses:
        st.info("📋 No expenses yet.")
        return

    for expense in expenses:
        title = (
            f"{expense.description} · {format_currency(expense.amount, group.currency.value)} "
            f"· paid by {expense.payer}"
        )
        with st.expander(title):
            st.markdown(
                f"**Category:** {expense.category.value.title()} · "
                f"**Split:** {expense.split_method.value.title()} · "
                f"**Date:** {expense.date.date().isoformat()}"
            )
            for name, owed in expense.split_details.items():
                st.markdown(f"- {name}: {format_currency(owed, group.currency.value)}")
            render_edit_expense(expense_flow, group, expense)
            if st.button("🗑️ Delete", key=f"delete_{expense.id}"):
                try:
                    expense_flow.delete_expense(group.id, expense.id)
                    st.rerun()
                except (LedgerError, StorageError) as e:
                    st.error(str(e))


def render_edit_expense(expense_flow: ExpenseFlow, group: Group, expense: Expense):
    """Edit the description, amount, payer and category of one expense."""
    st.markdown("**Edit**")
    col1, col2 = st.columns(2)
    with col1:
        description = st.text_input(
            "Description", value=expense.description, key=f"edit_description_{expense.id}",
        )
        amount = st.text_input(
            "Amount", value=f"{expense.amount:.2f}", key=f"edit_amount_{expense.id}",
        )
    with col2:
        names = group.participant_names
        payer = st.selectbox(
            "Paid by",
            options=names,
            index=names.index(expense.payer) if expense.payer in names else 0,
            key=f"edit_payer_{expense.id}",
        )
        categories = list(ExpenseCategory)
        category = st.selectbox(
            "Category",
            options=categories,
            index=categories.index(expense.category),
            format_func=lambda x: x.value.title(),
            key=f"edit_category_{expense.id}",
        )
    if expense.split_method == SplitMethod.CUSTOM:
        st.caption("Custom splits must be re-entered to change the amount.")

    if st.button("💾 Save Changes", key=f"save_{expense.id}"):
        try:
            expense_flow.edit_expense(
                group.id,
                expense.id,
                description=description,
                amount=amount,
                payer=payer,
                category=category,
            )
            st.rerun()
        except ExpenseValidationError as e:
            st.error("\n".join(
                f"• {issue.message}" for issue in e.result.issues if issue.severity == "error"
            ))
        except (LedgerError, StorageError) as e:
            st.error(str(e))


def render_balances_page(settlement_flow: SettlementFlow, group: Group):
    """Render balances, the summary and the settle-up form."""
    st.title("⚖️ Balances")

    if not group.participants:
        st.info("Add participants to see balances.")
        return

    summary = settlement_flow.summary(group.id)
    col1, col2, col3 = st.columns(3)
    with col1:
        st.markdown("Total spent")
        st.markdown(
            f'<div class="big-number">{format_currency(summary.total_expenses, group.currency.value)}</div>',
            unsafe_allow_html=True,
        )
    with col2:
        st.markdown("Per person")
        st.markdown(
            f'<div class="big-number">{format_currency(summary.average_per_person, group.currency.value)}</div>',
            unsafe_allow_html=True,
        )
    with col3:
        st.markdown("Expenses")
        st.markdown(f'<div class="big-number">{summary.expense_count}</div>', unsafe_allow_html=True)

    st.markdown("---")
    perspective = st.selectbox(
        "View balances as",
        options=[None] + group.participant_names,
        format_func=lambda x: "Everyone" if x is None else x,
    )

    try:
        lines = settlement_flow.describe_balances(group.id, perspective_user=perspective)
    except (LedgerError, StorageError) as e:
        st.error(str(e))
        return

    for name, line in lines.items():
        st.markdown(f"**{name}:** {line}")

    st.markdown("---")
    st.markdown("### Record a Payment")
    with st.form("settle_up", clear_on_submit=True):
        col1, col2, col3 = st.columns(3)
        with col1:
            from_participant = st.selectbox("From", options=group.participant_names)
        with col2:
            to_participant = st.selectbox("To", options=group.participant_names)
        with col3:
            amount = st.text_input("Amount *", placeholder="e.g., 5.00")

        if st.form_submit_button("💸 Record Payment", type="primary"):
            try:
                settlement_flow.record_settlement(
                    group.id, from_participant, to_participant, amount,
                )
                st.rerun()
            except (LedgerError, StorageError) as e:
                st.error(str(e))

    settlements = settlement_flow.list_settlements(group.id)
    if settlements:
        with st.expander(f"📜 Payment history ({len(settlements)})"):
            for settlement in reversed(settlements):
                st.markdown(
                    f"- {settlement.date.date().isoformat()}: {settlement.from_participant} "
                    f"paid {settlement.to_participant} "
                    f"{format_currency(settlement.amount, group.currency.value)}"
                )


def render_export_page(settlement_flow: SettlementFlow, group: Group):
    """Render the export page."""
    st.title("📄 Export")
    st.markdown("Download a summary to share with the group.")

    try:
        text = settlement_flow.export_text(group.id)
        csv_content = settlement_flow.export_csv(group.id)
    except (LedgerError, StorageError) as e:
        st.error(str(e))
        return

    st.code(text, language=None)

    slug = group.name.lower().replace(" ", "-")
    col1, col2 = st.columns(2)
    with col1:
        st.download_button(
            "⬇️ Download Text",
            data=text,
            file_name=f"{slug}-summary.txt",
            mime="text/plain",
        )
    with col2:
        st.download_button(
            "⬇️ Download CSV",
            data=csv_content,
            file_name=f"{slug}-summary.csv",
            mime="text/csv",
        )


def render_settings_page():
    """Render the settings page."""
    st.title("⚙️ Settings")

    st.markdown("### Configuration Status")

    status = validate_all_settings()

    sections = [
        ("Ledger", "ledger"),
        ("Storage", "storage"),
        ("Application", "app"),
    ]

    for name, key in sections:
        if status.get(key, False):
            st.success(f"✅ {name} - OK")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.error(f"❌ {name} - {error}")

    st.markdown("---")
    st.markdown("### Configuration")
    st.markdown(
        "Settings are read from environment variables. "
        "See README.md for the available variables."
    )


if __name__ == "__main__":
    main()
