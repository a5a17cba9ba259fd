"""
Streamlit Frontend for fintrack ("Meu Bolso")

The pages a user moves through every day: log in, record income and
expenses, look at where the money went.

DESIGN PRINCIPLES:
1. Simple, clear interface
2. Every page reads from the FinanceTracker, never from storage
3. Clear error messages in the user's language (pt-BR)
4. Visual feedback for every save and delete

Run with: streamlit run app/main.py
"""

from datetime import date, datetime, time
from decimal import Decimal, InvalidOperation
from typing import Optional

import streamlit as st

from fintrack.analytics import (
    format_currency,
    format_day_heading,
    format_percent,
    goal_message,
    group_by_calendar_date,
)
from fintrack.config import validate_all_settings
from fintrack.identity import IdentityError
from fintrack.ledger import LedgerValidationError
from fintrack.models import (
    CategoryDraft,
    CategoryIcon,
    Period,
    Transaction,
    TransactionDraft,
    TransactionType,
    TransactionUpdate,
)
from fintrack.orchestrator import FinanceTracker, create_app_components
from fintrack.services.storage import StorageError


# Page configuration
st.set_page_config(
    page_title="Meu Bolso",
    page_icon="💰",
    layout="centered",
    initial_sidebar_state="expanded",
)

PAGES = ["📊 Painel", "📋 Transações", "➕ Nova transação", "🎯 Planejamento", "👤 Conta"]

TYPE_LABELS = {
    TransactionType.INCOME: "Receita",
    TransactionType.EXPENSE: "Despesa",
}

STORAGE_ERROR_MESSAGE = "Não foi possível salvar seus dados. Tente novamente."


def get_tracker() -> FinanceTracker:
    """One tracker per browser session."""
    if "tracker" not in st.session_state:
        st.session_state.tracker = create_app_components()
    return st.session_state.tracker


def main():
    """Main application entry point."""
    tracker = get_tracker()

    if "flash" in st.session_state:
        st.toast(st.session_state.pop("flash"))

    account = tracker.current_account()
    if account is None:
        render_auth_pages(tracker)
        return

    st.sidebar.title("💰 Meu Bolso")
    st.sidebar.markdown(f"Olá, **{account.name or 'Usuário'}**")
    st.sidebar.markdown("---")

    # Navigation requested by the previous run, applied before the radio exists
    if "next_page" in st.session_state:
        st.session_state.page = st.session_state.pop("next_page")
    elif "page" not in st.session_state:
        st.session_state.page = PAGES[0]

    page = st.sidebar.radio("Navegar para:", PAGES, key="page")

    if page == "📊 Painel":
        render_dashboard_page(tracker)
    elif page == "📋 Transações":
        render_transactions_page(tracker)
    elif page == "➕ Nova transação":
        render_form_page(tracker, st.session_state.get("editing_id"))
    elif page == "🎯 Planejamento":
        render_planning_page(tracker)
    elif page == "👤 Conta":
        render_account_page(tracker)


def flash(message: str) -> None:
    """Show a toast after the next rerun."""
    st.session_state.flash = message


def go_to(page: str) -> None:
    st.session_state.next_page = page


# =============================================================================
# AUTH
# =============================================================================

def render_auth_pages(tracker: FinanceTracker):
    st.title("💰 Meu Bolso")
    st.markdown("Controle suas finanças de forma simples.")

    login_tab, signup_tab, forgot_tab = st.tabs(["Entrar", "Criar conta", "Esqueci minha senha"])

    with login_tab:
        with st.form("login"):
            email = st.text_input("E-mail", key="login_email")
            password = st.text_input("Senha", type="password", key="login_password")
            submitted = st.form_submit_button("Entrar", type="primary")

        if submitted:
            try:
                tracker.log_in(email, password)
            except IdentityError as e:
                st.error(str(e))
            except StorageError:
                st.error(STORAGE_ERROR_MESSAGE)
            else:
                flash("Login realizado com sucesso")
                st.rerun()

    with signup_tab:
        with st.form("signup"):
            name = st.text_input("Nome", key="signup_name")
            email = st.text_input("E-mail", key="signup_email")
            password = st.text_input("Senha", type="password", key="signup_password")
            confirm = st.text_input("Confirmar senha", type="password")
            submitted = st.form_submit_button("Criar conta", type="primary")

        if submitted:
            if not email or not password:
                st.error("Preencha e-mail e senha.")
            elif password != confirm:
                st.error("As senhas não coincidem.")
            else:
                try:
                    tracker.sign_up(email, password, name)
                except IdentityError as e:
                    st.error(str(e))
                except StorageError:
                    st.error(STORAGE_ERROR_MESSAGE)
                except ValueError:
                    st.error("E-mail inválido.")
                else:
                    flash("Conta criada com sucesso")
                    st.rerun()

    with forgot_tab:
        with st.form("forgot"):
            email = st.text_input("E-mail", key="forgot_email")
            submitted = st.form_submit_button("Enviar instruções")

        if submitted and email:
            st.info(tracker.request_password_reset(email))


# =============================================================================
# DASHBOARD
# =============================================================================

def render_dashboard_page(tracker: FinanceTracker):
    st.title("📊 Resumo")

    period = st.radio(
        "Período",
        [Period.THIS_MONTH, Period.THIS_WEEK],
        format_func=lambda p: "Este mês" if p == Period.THIS_MONTH else "Esta semana",
        horizontal=True,
    )
    summary = tracker.dashboard(period)

    st.metric("Saldo atual", format_currency(summary.balance))
    col1, col2 = st.columns(2)
    col1.metric("Receitas", format_currency(summary.income))
    col2.metric("Despesas", format_currency(summary.expense))

    st.subheader("Despesas por categoria")
    if summary.has_expenses:
        st.bar_chart(
            {
                "Categoria": list(summary.expenses_by_category),
                "Valor": [float(v) for v in summary.expenses_by_category.values()],
            },
            x="Categoria",
            y="Valor",
        )
    else:
        st.info("Sem despesas no período selecionado")

    if period == Period.THIS_MONTH:
        st.subheader("Fluxo do mês")
        st.bar_chart(
            {
                "Dia": [d.day for d in summary.daily_series],
                "Receitas": [float(d.income) for d in summary.daily_series],
                "Despesas": [float(d.expense) for d in summary.daily_series],
            },
            x="Dia",
            y=["Receitas", "Despesas"],
            color=["#10B981", "#EF4444"],
        )

    st.subheader("Insights financeiros")
    for tip in summary.tips:
        st.markdown(f"- {tip}")


# =============================================================================
# TRANSACTIONS
# =============================================================================

def render_transactions_page(tracker: FinanceTracker):
    st.title("📋 Transações")

    term = st.text_input("Buscar", placeholder="Descrição ou categoria")

    col1, col2 = st.columns(2)
    with col1:
        type_filter = st.selectbox(
            "Tipo",
            options=[None, TransactionType.INCOME, TransactionType.EXPENSE],
            format_func=lambda t: "Todos" if t is None else TYPE_LABELS[t],
        )
    with col2:
        category_filter = st.selectbox(
            "Categoria",
            options=[None] + tracker.list_categories(),
            format_func=lambda c: "Todas" if c is None else c.name,
        )

    results = tracker.search_transactions(
        term=term,
        transaction_type=type_filter,
        category_id=category_filter.id if category_filter else None,
    )

    st.markdown("---")

    if not results:
        st.info("Nenhuma transação encontrada.")
        return

    for day, transactions in group_by_calendar_date(results).items():
        st.markdown(f"#### {format_day_heading(day)}")
        for transaction in transactions:
            render_transaction_row(tracker, transaction)


def render_transaction_row(tracker: FinanceTracker, transaction: Transaction):
    sign = "+" if transaction.is_income else "-"
    col1, col2, col3, col4 = st.columns([5, 3, 1, 1])

    with col1:
        st.markdown(f"**{transaction.description or transaction.category.name}**")
        st.caption(transaction.category.name)
    with col2:
        st.markdown(f"{sign} {format_currency(transaction.amount)}")
    with col3:
        if st.button("✏️", key=f"edit-{transaction.id}", help="Editar"):
            st.session_state.editing_id = transaction.id
            go_to("➕ Nova transação")
            st.rerun()
    with col4:
        if st.button("🗑️", key=f"delete-{transaction.id}", help="Excluir"):
            try:
                tracker.delete_transaction(transaction.id)
            except StorageError:
                st.error(STORAGE_ERROR_MESSAGE)
                return
            flash("Transação removida com sucesso")
            st.rerun()


# =============================================================================
# TRANSACTION FORM
# =============================================================================

def render_form_page(tracker: FinanceTracker, editing_id: Optional[str]):
    editing = tracker.get_transaction(editing_id) if editing_id else None
    st.title("✏️ Editar transação" if editing else "➕ Nova transação")

    transaction_type = st.radio(
        "Tipo",
        [TransactionType.EXPENSE, TransactionType.INCOME],
        index=1 if editing and editing.is_income else 0,
        format_func=lambda t: TYPE_LABELS[t],
        horizontal=True,
    )

    categories = tracker.categories_for(transaction_type)
    category_ids = [c.id for c in categories]
    default_index = None
    if editing and editing.category.id in category_ids:
        default_index = category_ids.index(editing.category.id)

    with st.form("transaction"):
        amount_text = st.text_input(
            "Valor (R$)",
            value=str(editing.amount) if editing else "",
            placeholder="0,00",
        )
        when = st.date_input(
            "Data",
            value=editing.calendar_date if editing else date.today(),
            format="DD/MM/YYYY",
        )
        category = st.selectbox(
            "Categoria",
            options=categories,
            index=default_index,
            format_func=lambda c: c.name,
            placeholder="Selecione uma categoria",
        )
        description = st.text_input(
            "Descrição (opcional)",
            value=(editing.description or "") if editing else "",
        )
        submitted = st.form_submit_button("Salvar", type="primary")

    if st.button("Cancelar"):
        st.session_state.pop("editing_id", None)
        go_to("📋 Transações")
        st.rerun()

    if not submitted:
        return

    amount = parse_amount(amount_text)
    if amount is None:
        st.error("Por favor, informe um valor válido.")
        return

    moment = datetime.combine(when, editing.local_datetime.time() if editing else time.min)
    draft = TransactionDraft(
        type=transaction_type,
        amount=amount,
        date=moment,
        category=category,
        description=description,
    )

    # Warnings do not block a save, but the user has to submit the same
    # values a second time to confirm them
    preview = tracker.preview_transaction(draft)
    if preview.has_errors:
        st.error(tracker.describe_validation(preview))
        return
    fingerprint = draft.model_dump_json()
    if preview.warnings and st.session_state.get("confirmed_draft") != fingerprint:
        st.session_state.confirmed_draft = fingerprint
        st.warning(tracker.describe_validation(preview))
        st.info("Clique em Salvar novamente para confirmar.")
        return
    st.session_state.pop("confirmed_draft", None)

    try:
        if editing:
            tracker.update_transaction(editing.id, TransactionUpdate(**draft.model_dump()))
            flash("Transação atualizada com sucesso")
        else:
            tracker.add_transaction(draft)
            flash("Transação adicionada com sucesso")
    except LedgerValidationError as e:
        for issue in e.result.errors:
            st.error(issue.message)
        return
    except StorageError:
        st.error(STORAGE_ERROR_MESSAGE)
        return

    st.session_state.pop("editing_id", None)
    go_to("📋 Transações")
    st.rerun()


def parse_amount(text: str) -> Optional[Decimal]:
    """Accept '1.234,56', '1234,56' and '1234.56'."""
    cleaned = text.strip().replace("R$", "").strip()
    if "," in cleaned:
        cleaned = cleaned.replace(".", "").replace(",", ".")
    try:
        amount = Decimal(cleaned)
    except InvalidOperation:
        return None
    if not amount.is_finite() or amount <= 0:
        return None
    return amount


# =============================================================================
# PLANNING
# =============================================================================

def render_planning_page(tracker: FinanceTracker):
    st.title("🎯 Planejamento")
    st.markdown("Analise seus gastos e economias")

    summary = tracker.planning()

    st.subheader("Taxa de economia")
    st.metric("Este mês", format_percent(summary.savings_rate))
    st.progress(min(max(float(summary.savings_rate), 0.0), 100.0) / 100)
    if summary.meets_goal:
        st.success(goal_message(summary))
    else:
        st.warning(goal_message(summary))

    st.subheader("Distribuição de gastos")
    if not summary.breakdown:
        st.info("Sem despesas registradas este mês")
    for share in summary.breakdown:
        st.markdown(
            f"**{share.name}** {format_currency(share.amount)} "
            f"({format_percent(share.percentage)})"
        )
        st.progress(float(share.percentage) / 100)

    st.subheader("Dicas para economizar")
    for tip in summary.tips:
        st.markdown(f"- {tip}")


# =============================================================================
# ACCOUNT
# =============================================================================

def render_account_page(tracker: FinanceTracker):
    account = tracker.current_account()
    st.title("👤 Conta")
    st.markdown(f"**Nome:** {account.name or '-'}")
    st.markdown(f"**E-mail:** {account.email}")

    st.markdown("---")
    st.markdown("### Categorias")
    for category in tracker.list_categories():
        st.markdown(f"- {category.name} ({TYPE_LABELS[category.type]})")

    with st.form("category"):
        name = st.text_input("Nova categoria")
        category_type = st.selectbox(
            "Tipo",
            [TransactionType.EXPENSE, TransactionType.INCOME],
            format_func=lambda t: TYPE_LABELS[t],
        )
        submitted = st.form_submit_button("Adicionar categoria")

    if submitted and name.strip():
        icon = CategoryIcon.WALLET if category_type == TransactionType.INCOME else CategoryIcon.CATEGORY
        try:
            tracker.add_category(CategoryDraft(name=name, icon=icon, type=category_type))
        except LedgerValidationError as e:
            st.error(str(e))
        except StorageError:
            st.error(STORAGE_ERROR_MESSAGE)
        else:
            flash("Categoria adicionada com sucesso")
            st.rerun()

    st.markdown("---")
    st.markdown("### Configuração")
    status = validate_all_settings()
    for section in ("storage", "auth", "app"):
        if status.get(section, False):
            st.success(f"✅ {section}")
        else:
            st.error(f"❌ {section} - {status.get(f'{section}_error', 'inválido')}")

    st.markdown("---")
    st.markdown("### Atividade recente")
    events = tracker.recent_activity(10)
    if not events:
        st.caption("Nenhuma atividade registrada nesta sessão.")
    for event in events:
        st.caption(f"{event.timestamp:%d/%m/%Y %H:%M} · {event.event_type.value}")

    st.markdown("---")
    if st.button("Sair", type="primary"):
        try:
            tracker.log_out()
        except StorageError:
            st.error(STORAGE_ERROR_MESSAGE)
            return
        st.session_state.pop("editing_id", None)
        go_to(PAGES[0])
        flash("Sessão encerrada")
        st.rerun()


if __name__ == "__main__":
    main()
