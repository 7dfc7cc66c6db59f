"""Serviço de autenticação e sessões."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Callable, Optional

import bcrypt
import jwt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..config import settings
from ..models import User, UserSession, as_utc

logger = logging.getLogger(__name__)

# Configurações JWT
JWT_SECRET = settings.secret_key
JWT_ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = settings.access_token_expire_minutes
REFRESH_TOKEN_EXPIRE_DAYS = settings.refresh_token_expire_days


@dataclass(frozen=True)
class UserContext:
    """Usuário autenticado, passado explicitamente para cada serviço."""
    user_id: int
    display_name: str
    email: str
    session_id: int


class EmailAlreadyRegistered(Exception):
    """Já existe usuário com o e-mail informado."""


# =============================================================================
# EVENTOS DE AUTENTICAÇÃO
# =============================================================================

AuthListener = Callable[[str, Optional[UserContext]], None]

SIGNED_IN = "signed_in"
SIGNED_OUT = "signed_out"

_listeners: list[AuthListener] = []


def on_auth_state_change(callback: AuthListener) -> Callable[[], None]:
    """Registra um ouvinte de login/logout. Retorna a função para cancelar."""
    _listeners.append(callback)

    def unsubscribe() -> None:
        if callback in _listeners:
            _listeners.remove(callback)

    return unsubscribe


def _emit(event: str, ctx: Optional[UserContext]) -> None:
    for listener in list(_listeners):
        try:
            listener(event, ctx)
        except Exception:
            logger.exception(f"Ouvinte de autenticação falhou no evento {event}")


# =============================================================================
# FUNÇÕES DE HASH
# =============================================================================

def hash_password(password: str) -> str:
    """Gera hash bcrypt da senha."""
    salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    return bcrypt.hashpw(password.encode(), salt).decode()


def verify_password(password: str, password_hash: str) -> bool:
    """Verifica se a senha corresponde ao hash."""
    return bcrypt.checkpw(password.encode(), password_hash.encode())


# =============================================================================
# FUNÇÕES JWT
# =============================================================================

def create_access_token(user_id: int, session_id: int) -> str:
    """Cria um access token JWT."""
    expire = datetime.now(UTC) + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    payload = {
        "sub": str(user_id),
        "sid": session_id,
        "type": "access",
        "exp": expire,
        "iat": datetime.now(UTC),
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def create_refresh_token(user_id: int, session_id: int) -> str:
    """Cria um refresh token JWT."""
    expire = datetime.now(UTC) + timedelta(days=REFRESH_TOKEN_EXPIRE_DAYS)
    payload = {
        "sub": str(user_id),
        "sid": session_id,
        "type": "refresh",
        "exp": expire,
        "iat": datetime.now(UTC),
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def decode_token(token: str) -> Optional[dict]:
    """Decodifica e valida um token JWT."""
    try:
        return jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None


# =============================================================================
# SERVIÇO DE AUTENTICAÇÃO
# =============================================================================

class AuthService:
    """Serviço para operações de autenticação."""

    def __init__(self, db: Session):
        self.db = db

    def register(self, email: str, password: str, display_name: str) -> User:
        """Cria um novo usuário."""
        email = email.lower()
        if self.db.query(User).filter(User.email == email).first():
            raise EmailAlreadyRegistered(email)

        user = User(
            email=email,
            password_hash=hash_password(password),
            display_name=display_name,
        )
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError:
            # Cadastro concorrente com o mesmo email venceu a corrida
            self.db.rollback()
            raise EmailAlreadyRegistered(email)
        self.db.refresh(user)

        logger.info(f"Usuário registrado: {user.id}")
        return user

    def authenticate(self, email: str, password: str) -> Optional[User]:
        """Autentica um usuário por email e senha."""
        user = self.db.query(User).filter(
            User.email == email.lower(),
            User.is_active == True
        ).first()

        if not user:
            return None

        if not verify_password(password, user.password_hash):
            return None

        return user

    def sign_in(
        self,
        user: User,
        device_info: Optional[str] = None,
        ip_address: Optional[str] = None
    ) -> tuple[str, str]:
        """
        Cria uma nova sessão para o usuário.

        Retorna: (access_token, refresh_token)
        """
        session = UserSession(
            user_id=user.id,
            device_info=device_info,
            ip_address=ip_address,
            expires_at=datetime.now(UTC) + timedelta(days=REFRESH_TOKEN_EXPIRE_DAYS)
        )
        self.db.add(session)
        self.db.flush()

        user.last_login = datetime.now(UTC)

        access_token = create_access_token(user.id, session.id)
        refresh_token = create_refresh_token(user.id, session.id)

        self.db.commit()

        _emit(SIGNED_IN, self._context(user, session))
        return access_token, refresh_token

    def refresh(self, refresh_token: str) -> Optional[tuple[str, str]]:
        """
        Renova os tokens de uma sessão ativa.

        Retorna: (new_access_token, new_refresh_token) ou None se inválido
        """
        payload = decode_token(refresh_token)
        if not payload or payload.get("type") != "refresh":
            return None

        found = self._active_session(int(payload.get("sub", 0)), payload.get("sid"))
        if not found:
            return None
        user, session = found

        session.last_used_at = datetime.now(UTC)
        session.expires_at = datetime.now(UTC) + timedelta(days=REFRESH_TOKEN_EXPIRE_DAYS)
        self.db.commit()

        return create_access_token(user.id, session.id), create_refresh_token(user.id, session.id)

    def sign_out(self, ctx: UserContext) -> bool:
        """Invalida a sessão do contexto."""
        session = self.db.query(UserSession).filter(
            UserSession.id == ctx.session_id,
            UserSession.user_id == ctx.user_id
        ).first()

        if not session:
            return False

        session.is_active = False
        self.db.commit()

        _emit(SIGNED_OUT, None)
        return True

    def context_from_token(self, token: str) -> Optional[UserContext]:
        """Resolve um access token no contexto do usuário, se a sessão estiver ativa."""
        payload = decode_token(token)
        if not payload or payload.get("type") != "access":
            return None

        found = self._active_session(int(payload.get("sub", 0)), payload.get("sid"))
        if not found:
            return None
        return self._context(*found)

    def _active_session(self, user_id: int, session_id: Optional[int]) -> Optional[tuple[User, UserSession]]:
        session = self.db.query(UserSession).filter(
            UserSession.id == session_id,
            UserSession.user_id == user_id,
            UserSession.is_active == True
        ).first()

        if not session or as_utc(session.expires_at) < datetime.now(UTC):
            return None

        user = self.db.get(User, user_id)
        if not user or not user.is_active:
            return None

        return user, session

    @staticmethod
    def _context(user: User, session: UserSession) -> UserContext:
        return UserContext(
            user_id=user.id,
            display_name=user.display_name,
            email=user.email,
            session_id=session.id,
        )
