"""
Streamlit Frontend for AI Expense Tracker

This is the user interface for tracking expenses, setting budgets,
managing categories and asking Gemini about spending.

DESIGN PRINCIPLES:
1. Every change goes through the state manager
2. Totals and budget bars are recomputed on every render
3. AI errors are shown as a friendly message, never a stack trace
4. Chat history lives in the browser session only

Run with:
    streamlit run app/main.py
"""

import asyncio
from datetime import date
from decimal import Decimal

import streamlit as st

from expense_tracker.agents import from_data_uri
from expense_tracker.config import get_settings
from expense_tracker.models import ChatMessage, ChatRole, ImageUpload
from expense_tracker.orchestrator import (
    InsightsFlow,
    add_category_from_input,
    create_app_components,
    rename_category_from_input,
)
from expense_tracker.state import ExpenseStateManager
from expense_tracker.validation import (
    parse_budget_limit,
    validate_expense_form,
)


# Page configuration
st.set_page_config(
    page_title="AI-Powered Expense Tracker",
    page_icon="💸",
    layout="wide",
    initial_sidebar_state="expanded",
)

# Custom CSS for better UX
st.markdown("""
<style>
    .stButton>button {
        width: 100%;
    }
    .insight-box {
        padding: 16px;
        background-color: #1f2937;
        border-radius: 10px;
        border-left: 5px solid #14b8a6;
        margin: 10px 0;
    }
    .big-number {
        font-size: 2.2em;
        font-weight: bold;
        color: #2dd4bf;
    }
</style>
""", unsafe_allow_html=True)


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_components():
    """Get or create application components (cached)."""
    return create_app_components()


def format_currency(amount: Decimal) -> str:
    symbol = get_settings().app.currency_symbol
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(amount):,.2f}"


def main():
    """Main application entry point."""
    state, insights, audit_logger = get_components()

    st.sidebar.title("💸 Expense Tracker")
    st.sidebar.caption("Manage your finances with the power of Gemini")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["📊 Dashboard", "🎯 Budgeting", "🔍 Analysis", "🖼️ Image Tools", "💬 Chatbot", "⚙️ Settings"],
        index=0,
    )

    if page == "📊 Dashboard":
        render_dashboard_page(state, insights)
    elif page == "🎯 Budgeting":
        render_budgeting_page(state)
    elif page == "🔍 Analysis":
        render_analysis_page(state, insights)
    elif page == "🖼️ Image Tools":
        render_image_tools_page(insights)
    elif page == "💬 Chatbot":
        render_chatbot_page(insights)
    elif page == "⚙️ Settings":
        render_settings_page(audit_logger)


# =============================================================================
# DASHBOARD
# =============================================================================

def render_dashboard_page(state: ExpenseStateManager, insights: InsightsFlow):
    """Render the dashboard: AI summary, entry form, list and chart."""
    st.title("📊 Dashboard")

    render_summary(state, insights)
    render_expense_form(state)

    col1, col2 = st.columns(2)
    with col1:
        render_expense_list(state)
    with col2:
        render_expense_chart(state)


def render_summary(state: ExpenseStateManager, insights: InsightsFlow):
    st.subheader("✨ AI Spending Summary")
    expenses = state.expenses

    label = "Regenerate" if st.session_state.get("summary") else "Generate"
    if st.button(label, disabled=not expenses, key="generate_summary"):
        with st.spinner("Generating your summary..."):
            reply = run_async(insights.summarize_expenses(expenses))
        if reply.success:
            st.session_state.summary = reply.text
        else:
            st.session_state.summary = None
            st.error(reply.error_message)

    if st.session_state.get("summary"):
        st.markdown(
            f'<div class="insight-box">{st.session_state.summary}</div>',
            unsafe_allow_html=True,
        )


def render_expense_form(state: ExpenseStateManager):
    st.subheader("➕ Add New Expense")
    symbol = get_settings().app.currency_symbol

    with st.form("add_expense", clear_on_submit=True):
        description = st.text_input("Description")
        amount = st.text_input(f"Amount ({symbol})")
        category = st.selectbox(
            "Category",
            options=[""] + state.categories,
            format_func=lambda c: c or "Select a category",
        )
        expense_date = st.date_input("Date", value=date.today())
        submitted = st.form_submit_button("Add Expense", type="primary")

    if submitted:
        result = validate_expense_form(description, amount, category, expense_date)
        if not result.is_valid:
            st.error(result.first_message)
            return
        draft = result.draft
        state.add_expense(draft.description, draft.amount, draft.category, draft.date)
        st.success(f"Added {draft.description}")


def render_expense_list(state: ExpenseStateManager):
    st.subheader("🧾 Recent Expenses")
    expenses = state.expenses

    if expenses:
        st.download_button(
            "⬇️ Export CSV",
            data=state.export_csv(),
            file_name="expenses.csv",
            mime="text/csv",
        )
    else:
        st.info("No expenses yet. Add one above to get started.")
        return

    for expense in reversed(expenses):
        col1, col2 = st.columns([5, 1])
        with col1:
            st.markdown(
                f"**{expense.description}** · {expense.category} · "
                f"{expense.date.isoformat()}  \n{format_currency(expense.amount)}"
            )
        with col2:
            if st.button("🗑️", key=f"delete_{expense.id}", help="Delete expense"):
                state.delete_expense(expense.id)
                st.rerun()


def render_expense_chart(state: ExpenseStateManager):
    st.subheader("📈 Spending by Category")
    breakdown = state.category_breakdown()

    if not breakdown:
        st.info("No expense data to display.")
        return

    for entry in breakdown:
        st.markdown(f"**{entry.category}** · {format_currency(entry.amount)}")
        st.progress(min(float(entry.share) / 100, 1.0), text=f"{entry.share:.1f}%")


# =============================================================================
# BUDGETING
# =============================================================================

def render_budgeting_page(state: ExpenseStateManager):
    """Render budget status, budget inputs and category management."""
    st.title("🎯 Budgeting")

    st.subheader("Budget Status")
    for status in state.budget_overview():
        limit_text = format_currency(status.limit) if status.has_budget else "Not set"
        st.markdown(f"**{status.category}** · {format_currency(status.spent)} / {limit_text}")
        if status.has_budget:
            st.progress(
                float(status.display_percentage) / 100,
                text=f"{status.percentage:.0f}% spent",
            )
            if status.remaining < 0:
                st.error(f"{format_currency(status.remaining)} remaining")
            else:
                st.success(f"{format_currency(status.remaining)} remaining")

    st.markdown("---")
    st.subheader("Set Budgets")
    st.caption("Leave a field empty (or press Clear) to remove its budget.")

    for category in state.categories:
        budget = state.get_budget(category)
        current = str(budget.limit) if budget and budget.is_set else ""
        col1, col2 = st.columns([4, 1])
        with col1:
            raw = st.text_input(
                category,
                value=current,
                placeholder="Not set",
                key=f"budget_{category}",
            )
            limit = parse_budget_limit(raw)
            # Invalid input is ignored; the field keeps what the user typed
            if limit is not None and limit != (budget.limit if budget else Decimal(0)):
                state.set_budget(category, limit)
                st.rerun()
        with col2:
            if st.button("Clear", key=f"clear_{category}"):
                state.clear_budget(category)
                st.session_state.pop(f"budget_{category}", None)
                st.rerun()

    st.markdown("---")
    render_category_manager(state)


def render_category_manager(state: ExpenseStateManager):
    st.subheader("Manage Categories")

    # Set before a rerun so it survives to the next render
    warning = st.session_state.pop("category_warning", None)
    if warning:
        st.warning(warning)

    with st.form("add_category", clear_on_submit=True):
        new_label = st.text_input("New category name")
        if st.form_submit_button("Add"):
            warning = add_category_from_input(state, new_label)
            if warning:
                st.warning(warning)

    editing = st.session_state.get("editing_category")

    for category in state.categories:
        col1, col2, col3 = st.columns([4, 1, 1])
        if state.is_preset(category):
            col1.markdown(f"{category} *(built-in)*")
            continue

        if editing == category:
            new_name = col1.text_input("Rename", value=category, key=f"rename_{category}")
            if col2.button("Save", key=f"save_{category}"):
                warning = rename_category_from_input(state, category, new_name)
                if warning:
                    st.session_state.category_warning = warning
                else:
                    st.session_state.editing_category = None
                st.rerun()
            if col3.button("Cancel", key=f"cancel_{category}"):
                st.session_state.editing_category = None
                st.rerun()
        else:
            col1.markdown(category)
            if col2.button("Edit", key=f"edit_{category}"):
                st.session_state.editing_category = category
                st.rerun()
            if col3.button("Delete", key=f"delete_cat_{category}"):
                state.delete_category(category)
                st.rerun()


# =============================================================================
# ANALYSIS
# =============================================================================

def render_analysis_page(state: ExpenseStateManager, insights: InsightsFlow):
    """Render the free-text analysis page."""
    st.title("🔍 Expense Analysis")

    question = st.text_area(
        "What would you like to know?",
        value="Summarize my spending habits for this period.",
    )
    use_detailed_model = st.toggle(
        "Detailed analysis (slower, more thorough)",
        value=False,
    )

    if st.button("Analyze", type="primary"):
        with st.spinner("Analyzing your expenses..."):
            reply = run_async(
                insights.analyze_expenses(state.expenses, question, use_detailed_model)
            )
        if reply.success:
            st.markdown(reply.text)
        else:
            st.error(reply.error_message)


# =============================================================================
# IMAGE TOOLS
# =============================================================================

def render_image_tools_page(insights: InsightsFlow):
    """Render the image generator and editor."""
    st.title("🖼️ Image Tools")

    st.subheader("Generate an Image")
    prompt = st.text_input("Describe the image", key="generate_prompt")
    if st.button("Generate Image", type="primary"):
        with st.spinner("Generating..."):
            reply = run_async(insights.generate_image(prompt))
        if reply.success:
            _, image = from_data_uri(reply.image_data_uri)
            st.image(image)
        else:
            st.error(reply.error_message)

    st.markdown("---")
    st.subheader("Edit an Image")
    app_settings = get_settings().app
    uploaded_file = st.file_uploader(
        "Choose an image",
        type=[fmt.split("/")[-1] for fmt in app_settings.supported_formats_list],
    )
    edit_prompt = st.text_input("What should change?", key="edit_prompt")

    col1, col2 = st.columns(2)
    if uploaded_file:
        col1.image(uploaded_file, caption="Original")

    if st.button("Edit Image"):
        upload = None
        image_bytes = None
        if uploaded_file:
            upload = ImageUpload(
                filename=uploaded_file.name,
                mime_type=uploaded_file.type or "",
                size_bytes=uploaded_file.size,
            )
            image_bytes = uploaded_file.getvalue()
        with st.spinner("Editing..."):
            reply = run_async(insights.edit_image(upload, image_bytes, edit_prompt))
        if reply.success:
            _, image = from_data_uri(reply.image_data_uri)
            col2.image(image, caption="Edited")
        else:
            st.error(reply.error_message)


# =============================================================================
# CHATBOT
# =============================================================================

def render_chatbot_page(insights: InsightsFlow):
    """Render the financial assistant chat."""
    st.title("💬 Financial Assistant Chat")

    if "chat_messages" not in st.session_state:
        st.session_state.chat_messages = []

    for message in st.session_state.chat_messages:
        with st.chat_message("user" if message.role == ChatRole.USER else "assistant"):
            st.markdown(message.text)

    text = st.chat_input("Ask about budgeting, saving or your spending...")
    if text and text.strip():
        history = list(st.session_state.chat_messages)
        st.session_state.chat_messages.append(ChatMessage(role=ChatRole.USER, text=text))
        with st.spinner("Thinking..."):
            reply = run_async(insights.chat(history, text))
        if reply is not None:
            st.session_state.chat_messages.append(ChatMessage(
                role=ChatRole.ASSISTANT,
                text=reply.text if reply.success else reply.error_message,
            ))
        st.rerun()


# =============================================================================
# SETTINGS
# =============================================================================

def render_settings_page(audit_logger):
    """Render connection status and recent activity."""
    st.title("⚙️ Settings")

    st.markdown("### Configuration Status")

    from expense_tracker.config import validate_all_settings

    status = validate_all_settings()

    services = [
        ("Gemini (AI features)", "gemini"),
        ("Storage", "storage"),
        ("Application", "app"),
    ]

    for name, key in services:
        if status.get(key, False):
            st.success(f"✅ {name} - Configured")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.error(f"❌ {name} - {error}")

    st.markdown("---")
    st.markdown("### Recent Activity")
    changes = audit_logger.recent(limit=20)
    if not changes:
        st.info("No changes yet this session.")
    for change in changes:
        st.markdown(
            f"`{change.timestamp.strftime('%H:%M:%S')}` "
            f"**{change.kind.value.replace('_', ' ')}** {change.details}"
        )

    st.markdown("---")
    st.markdown(
        "To configure the application, create a `.env` file with your API keys. "
        "See `.env.example` for the available variables."
    )


if __name__ == "__main__":
    main()
