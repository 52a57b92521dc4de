# lidera/auth.py
"""
Authentication Manager for Streamlit Apps

Version: 1.0.0
Features:
- SHA256 password hashing with per-user salt
- Users kept in the `users` collection, access role in `user_roles`
  ('master' sees every company, 'company' is pinned to one companyId)
- Session management with timeout
"""

import streamlit as st
import hashlib
import secrets
from datetime import datetime, timedelta
from typing import Dict, Optional, Tuple, List
from functools import wraps
import logging

from .config import config
from .errors import StoreError
from .store import DocumentStore, USERS, USER_ROLES
from .performance.queries import EvaluationQueries

logger = logging.getLogger(__name__)

ROLE_MASTER = 'master'
ROLE_COMPANY = 'company'


class AuthManager:
    """Authentication manager for Streamlit apps"""

    def __init__(self, store: DocumentStore = None):
        self.store = store or DocumentStore()
        self.session_timeout = timedelta(
            hours=config.get_app_setting("SESSION_TIMEOUT_HOURS", 8)
        )

    # ==================== PASSWORD HASHING ====================

    def hash_password(self, password: str, salt: str = None) -> Tuple[str, str]:
        """
        Hash password with SHA256 + salt

        Returns:
            Tuple of (hash, salt)
        """
        if not salt:
            salt = secrets.token_hex(32)

        pwd_hash = hashlib.sha256((password + salt).encode()).hexdigest()
        return pwd_hash, salt

    def verify_password(self, password: str, stored_hash: str, salt: str) -> bool:
        pwd_hash, _ = self.hash_password(password, salt)
        return secrets.compare_digest(pwd_hash, stored_hash or "")

    # ==================== USERS ====================

    def create_user(self, email: str, password: str, name: str = "",
                    role: str = ROLE_MASTER, company_id: str = None) -> str:
        """
        Register a user and its access role.

        Raises:
            StoreError: already-exists when the email is taken
        """
        email = email.strip().lower()
        if self.store.exists(USERS, email=email):
            raise StoreError("already-exists", "Já existe um usuário com este e-mail.")
        if role == ROLE_COMPANY and not company_id:
            raise StoreError("failed-precondition", "Usuários de empresa precisam de uma empresa vinculada.")

        pwd_hash, salt = self.hash_password(password)
        now = datetime.now()

        with self.store.batch() as batch:
            user_id = batch.create(USERS, {
                'email': email,
                'name': name or email.split('@')[0],
                'passwordHash': pwd_hash,
                'passwordSalt': salt,
                'isActive': True,
                'createdAt': now,
            })
            batch.create(USER_ROLES, {
                'userId': user_id,
                'email': email,
                'role': role,
                'companyId': company_id if role == ROLE_COMPANY else None,
                'createdAt': now,
                'updatedAt': now,
            })

        logger.info(f"👤 User created: {email} ({role})")
        return user_id

    def get_user_role(self, user_id: str) -> Dict:
        """Role record of a user; users without one are treated as master"""
        roles = self.store.query(USER_ROLES, userId=user_id)
        if not roles:
            return {'role': ROLE_MASTER, 'companyId': None}
        return {'role': roles[0].get('role', ROLE_MASTER), 'companyId': roles[0].get('companyId')}

    # ==================== AUTHENTICATION ====================

    def authenticate(self, email: str, password: str) -> Tuple[bool, Optional[Dict]]:
        """
        Authenticate user against the users collection

        Returns:
            Tuple of (success: bool, user_info: dict or error: dict)
        """
        email = (email or "").strip().lower()
        try:
            users = self.store.query(USERS, email=email)

            if not users:
                logger.warning(f"Login attempt for non-existent user: {email}")
                return False, {"error": "E-mail ou senha inválidos"}

            user = users[0]

            if not user.get('isActive', True):
                logger.warning(f"Login attempt for inactive user: {email}")
                return False, {"error": "Conta inativa. Contate o administrador."}

            if not self.verify_password(password, user.get('passwordHash'), user.get('passwordSalt')):
                logger.warning(f"Invalid password for user: {email}")
                return False, {"error": "E-mail ou senha inválidos"}

            role = self.get_user_role(user['id'])
            self._update_last_login(user['id'])

            logger.info(f"User {email} authenticated successfully")

            return True, {
                'id': user['id'],
                'email': email,
                'name': user.get('name') or email,
                'role': role['role'],
                'company_id': role['companyId'],
                'login_time': datetime.now()
            }

        except StoreError as e:
            logger.error(f"Authentication error: {e}")
            return False, {"error": "Falha na autenticação. Tente novamente."}

    def _update_last_login(self, user_id: str):
        try:
            self.store.update(USERS, user_id, {'lastLogin': datetime.now()})
        except StoreError as e:
            logger.warning(f"Could not update lastLogin: {e}")

    # ==================== SESSION MANAGEMENT ====================

    def check_session(self) -> bool:
        """Check if user session is valid and not expired"""
        if not st.session_state.get('authenticated'):
            return False

        login_time = st.session_state.get('login_time')
        if login_time:
            elapsed = datetime.now() - login_time
            if elapsed > self.session_timeout:
                logger.info(f"Session expired for user: {st.session_state.get('user_email')}")
                self.logout()
                return False

        return True

    def login(self, user_info: Dict):
        """Initialize user session after successful authentication"""
        st.session_state.authenticated = True
        st.session_state.user_id = user_info['id']
        st.session_state.user_email = user_info['email']
        st.session_state.user_fullname = user_info['name']
        st.session_state.user_role = user_info['role']
        st.session_state.allowed_company_id = user_info.get('company_id')
        st.session_state.login_time = user_info['login_time']

        logger.info(f"User {user_info['email']} ({user_info['role']}) logged in successfully")

    def logout(self):
        """Clear user session, tenant selection and cache"""
        email = st.session_state.get('user_email', 'Unknown')

        auth_keys = [
            'authenticated', 'user_id', 'user_email', 'user_fullname',
            'user_role', 'allowed_company_id', 'login_time',
            'current_company',
        ]

        for key in auth_keys:
            if key in st.session_state:
                del st.session_state[key]

        st.cache_data.clear()
        EvaluationQueries.invalidate()

        logger.info(f"User {email} logged out")

    # ==================== ACCESS CONTROL ====================

    def require_auth(self) -> bool:
        """
        Require authentication to access a page
        Use at the beginning of each protected page
        """
        if not self.check_session():
            st.warning("⚠️ Faça login para acessar esta página")
            st.stop()
            return False
        return True

    def require_role(self, allowed_roles: List[str]) -> bool:
        if not self.require_auth():
            return False

        current_role = st.session_state.get('user_role', '')

        if current_role not in allowed_roles:
            st.error(f"🚫 Acesso negado. Perfil necessário: {', '.join(allowed_roles)}")
            st.stop()
            return False

        return True

    def is_master(self) -> bool:
        return st.session_state.get('user_role') == ROLE_MASTER

    def allowed_company_id(self) -> Optional[str]:
        """Company a 'company' user is pinned to, None for masters"""
        if st.session_state.get('user_role') == ROLE_COMPANY:
            return st.session_state.get('allowed_company_id')
        return None

    # ==================== USER INFO HELPERS ====================

    def get_user_display_name(self) -> str:
        if st.session_state.get('user_fullname'):
            return st.session_state.user_fullname
        return st.session_state.get('user_email', 'Usuário')

    def get_current_user(self) -> Dict:
        return {
            'id': st.session_state.get('user_id'),
            'email': st.session_state.get('user_email'),
            'name': st.session_state.get('user_fullname'),
            'role': st.session_state.get('user_role'),
            'company_id': st.session_state.get('allowed_company_id'),
        }


# ==================== DECORATORS ====================

def require_login(func):
    """Decorator to require login for a function"""
    @wraps(func)
    def wrapper(*args, **kwargs):
        auth = AuthManager()
        if auth.require_auth():
            return func(*args, **kwargs)
    return wrapper


# ==================== MODULE EXPORTS ====================

__all__ = [
    'AuthManager',
    'require_login',
    'ROLE_MASTER',
    'ROLE_COMPANY',
]
