# app.py
"""
Lidera Skills - Main Entry Point

Login, company selection and navigation to the evaluation pages.

Version: 1.0.0
"""

import streamlit as st
from lidera.auth import AuthManager
from lidera.db import check_db_connection
from lidera.errors import notify_error
from lidera.store import DocumentStore
from lidera.tenant import TenantSession
import logging

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# ==================== PAGE CONFIGURATION ====================

APP_NAME = "Lidera Skills"
APP_ICON = "🎯"
APP_VERSION = "1.0.0"

st.set_page_config(
    page_title=APP_NAME,
    page_icon=APP_ICON,
    layout="wide",
    initial_sidebar_state="expanded"
)

# ==================== CUSTOM CSS ====================

st.markdown("""
<style>
    .main-header {
        font-size: 2.5rem;
        font-weight: bold;
        margin-bottom: 0.5rem;
        color: #0F52BA;
    }

    .sub-header {
        font-size: 1.1rem;
        color: #666;
        margin-bottom: 2rem;
    }

    .welcome-box {
        background: linear-gradient(135deg, #0F52BA 0%, #4CA1AF 100%);
        color: white;
        padding: 2rem;
        border-radius: 0.75rem;
        margin-bottom: 2rem;
    }

    .welcome-title {
        font-size: 1.75rem;
        font-weight: 600;
        margin-bottom: 0.5rem;
    }

    .info-card {
        background: #f8f9fa;
        padding: 1rem 1.5rem;
        border-radius: 0.5rem;
        border-left: 4px solid #0F52BA;
        margin-bottom: 0.75rem;
    }

    .footer {
        text-align: center;
        color: #888;
        padding: 1rem;
        margin-top: 3rem;
        border-top: 1px solid #eee;
        font-size: 0.9rem;
    }
</style>
""", unsafe_allow_html=True)

# ==================== INITIALIZATION ====================

store = DocumentStore()
auth = AuthManager(store)

PAGES = [
    ("📊 Dashboard", "Visão geral, matriz de competências, comparativo e exportação de relatórios."),
    ("🏆 Ranking", "Classificação por média, destaques e pontuação acumulada."),
    ("📝 Avaliações", "Lançamento, edição em massa e exportação das avaliações."),
    ("👤 Perfil do Colaborador", "Histórico individual, competências e foto."),
    ("⚙️ Cadastros", "Critérios, setores, cargos, funcionários e importação CSV."),
    ("🎯 Metas", "Metas por setor, cargo e nível."),
    ("🧾 Auditoria", "Histórico de alterações feitas pelos usuários."),
]

# ==================== HELPER FUNCTIONS ====================

def show_login_page():
    """Display the login page"""
    st.markdown(f'<p class="main-header">{APP_ICON} {APP_NAME}</p>', unsafe_allow_html=True)
    st.markdown('<p class="sub-header">Gestão de Avaliações de Desempenho</p>', unsafe_allow_html=True)

    db_ok, db_error = check_db_connection()
    if not db_ok:
        st.error(f"⚠️ {db_error}")
        st.info("Verifique a conexão com o banco de dados ou contate o suporte.")
        return

    col1, col2, col3 = st.columns([1, 2, 1])

    with col2:
        with st.form("login_form", clear_on_submit=False):
            st.markdown("#### 🔐 Entrar")

            email = st.text_input("Email", placeholder="seu@email.com", key="login_email")
            password = st.text_input("Senha", type="password", key="login_password")

            submit = st.form_submit_button("🔑 Entrar", type="primary", use_container_width=True)

            if submit:
                if not email or not password:
                    st.warning("Informe email e senha")
                else:
                    with st.spinner("Autenticando..."):
                        success, result = auth.authenticate(email, password)

                    if success:
                        auth.login(result)
                        st.rerun()
                    else:
                        st.error(result.get("error", "Falha na autenticação"))

        with st.expander("ℹ️ Precisa de ajuda?"):
            st.info("""
            - Use o email cadastrado pelo administrador
            - A sessão expira após 8 horas
            - Para criar o primeiro acesso: `python scripts/create_admin_user.py`
            """)


def render_company_selector(tenant: TenantSession):
    """Sidebar company selector; masters may also create companies."""
    companies = tenant.available_companies()

    st.markdown("### 🏢 Empresa")
    if not companies:
        st.info("Nenhuma empresa cadastrada.")
    else:
        ids = [c['id'] for c in companies]
        names = {c['id']: c.get('name', c['id']) for c in companies}
        current = tenant.company_id
        index = ids.index(current) if current in ids else None

        selected = st.selectbox(
            "Empresa atual",
            options=ids,
            index=index,
            format_func=lambda company_id: names[company_id],
            placeholder="Selecione uma empresa",
            label_visibility="collapsed",
            disabled=not auth.is_master() and len(ids) == 1
        )
        if selected and selected != current:
            try:
                tenant.select({'id': selected, 'name': names[selected]})
                st.rerun()
            except Exception as e:
                notify_error(e, "select_company")

    if auth.is_master():
        with st.popover("➕ Nova empresa", use_container_width=True):
            with st.form("new_company_form", clear_on_submit=True):
                name = st.text_input("Nome da empresa")
                if st.form_submit_button("Criar", type="primary"):
                    try:
                        company_id = tenant.add_company(name)
                        tenant.select({'id': company_id, 'name': name.strip()})
                        st.rerun()
                    except Exception as e:
                        notify_error(e, "add_company")


def show_main_app():
    """Display the main application after login"""
    tenant = TenantSession(store, auth.get_current_user())
    tenant.ensure_default()

    with st.sidebar:
        st.markdown(f"### 👤 {auth.get_user_display_name()}")
        if auth.is_master():
            st.success("🔓 Acesso master")
        else:
            st.info("🏢 Acesso da empresa")
        st.markdown("---")

        render_company_selector(tenant)
        st.markdown("---")

        if st.button("🚪 Sair", use_container_width=True):
            auth.logout()
            st.rerun()

    st.markdown(f"""
    <div class="welcome-box">
        <div class="welcome-title">Olá, {auth.get_user_display_name()}! 👋</div>
        <div>{('Empresa atual: <strong>' + tenant.company_name + '</strong>') if tenant.company_name else 'Selecione uma empresa no menu lateral para começar.'}</div>
    </div>
    """, unsafe_allow_html=True)

    st.markdown("### 📚 Módulos")
    for title, description in PAGES:
        st.markdown(f"""
        <div class="info-card">
            <strong>{title}</strong><br>
            <span style="color: #666;">{description}</span>
        </div>
        """, unsafe_allow_html=True)

    if auth.is_master():
        st.markdown("---")
        with st.expander("🔧 Status do sistema"):
            from lidera.db import get_connection_pool_status
            pool_status = get_connection_pool_status()

            col1, col2, col3 = st.columns(3)
            with col1:
                st.metric("Banco", pool_status.get("status", "OK"))
            with col2:
                st.metric("Conexões em uso", pool_status.get("checked_out", 0))
            with col3:
                st.metric("Disponíveis", pool_status.get("checked_in", 0))

    st.markdown(f"""
    <div class="footer">
        <strong>{APP_NAME}</strong> v{APP_VERSION}
    </div>
    """, unsafe_allow_html=True)


# ==================== MAIN ====================

def main():
    """Main application entry point"""
    if not auth.check_session():
        show_login_page()
    else:
        show_main_app()


if __name__ == "__main__":
    main()
