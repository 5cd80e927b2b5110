# ==============================================================================
# SERVICIO DE AUTENTICACIÓN (enlace mágico por email)
# ==============================================================================
# El ledger no depende de la autenticación; este módulo solo define el
# contrato del proveedor de identidad y una implementación local para una
# única sesión interactiva.
#
# FLUJO:
# 1. sign_in_with_email(email) → genera un token firmado y registra el enlace
# 2. verify(token) → completa el login y notifica a los listeners
# 3. sign_out() → limpia el usuario y notifica con None
#
# El envío real del email queda fuera de este módulo: el enlace se registra
# en el log.
# ==============================================================================

import logging
import re
import threading
from typing import Callable, List, Optional, Protocol, runtime_checkable

from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from pos_ledger.errors import ValidationError
from pos_ledger.models import AuthUser

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

AuthCallback = Callable[[Optional[AuthUser]], None]


@runtime_checkable
class IdentityProvider(Protocol):
    """Contrato del proveedor de identidad consumido por la aplicación."""

    def get_current_user(self) -> Optional[AuthUser]:
        ...

    def sign_in_with_email(self, email: str) -> str:
        ...

    def sign_out(self) -> None:
        ...

    def on_auth_change(self, callback: AuthCallback) -> Callable[[], None]:
        ...


class MagicLinkAuthService:
    """
    Proveedor de identidad local con enlaces mágicos firmados.

    Los tokens se firman con la SECRET_KEY de la aplicación y expiran
    después de max_age segundos.
    """

    SALT = 'pos-ledger-magic-link'

    def __init__(self, secret_key: str, max_age: int = 900, link_base: str = '/api/auth/verify'):
        """
        Args:
            secret_key: Clave para firmar los tokens
            max_age: Validez del enlace en segundos
            link_base: Ruta del endpoint de verificación
        """
        self._serializer = URLSafeTimedSerializer(secret_key, salt=self.SALT)
        self.max_age = max_age
        self.link_base = link_base
        self._current: Optional[AuthUser] = None
        self._listeners: List[AuthCallback] = []
        self._lock = threading.Lock()

    def get_current_user(self) -> Optional[AuthUser]:
        return self._current

    def sign_in_with_email(self, email: str) -> str:
        """
        Emite un enlace mágico para el email.

        Returns:
            Token firmado (el enlace es link_base?token=...)

        Raises:
            ValidationError: Si el email está vacío o mal formado
        """
        if email is not None and not isinstance(email, str):
            raise ValidationError("Email inválido", {'email': 'Debe ser texto'})
        email = (email or '').strip().lower()
        if not email:
            raise ValidationError("Ingrese un email", {'email': 'Campo requerido'})
        if not EMAIL_PATTERN.match(email):
            raise ValidationError("Email inválido", {'email': 'Formato inválido'})

        token = self._serializer.dumps({'email': email})
        logger.info("Enlace mágico para %s: %s?token=%s", email, self.link_base, token)
        return token

    def verify(self, token: str) -> AuthUser:
        """
        Completa el login con un token emitido por sign_in_with_email.

        Raises:
            ValidationError: Token expirado o inválido
        """
        try:
            payload = self._serializer.loads(token, max_age=self.max_age)
        except SignatureExpired as e:
            raise ValidationError("El enlace expiró", {'token': 'Expirado'}) from e
        except BadSignature as e:
            raise ValidationError("Enlace inválido", {'token': 'Inválido'}) from e

        user = AuthUser(email=payload['email'])
        self._set_user(user)
        logger.info("Sesión iniciada: %s", user.email)
        return user

    def sign_out(self) -> None:
        if self._current is None:
            return
        logger.info("Sesión cerrada: %s", self._current.email)
        self._set_user(None)

    def on_auth_change(self, callback: AuthCallback) -> Callable[[], None]:
        """
        Registra un listener de cambios de sesión.

        Returns:
            Función que cancela la suscripción
        """
        with self._lock:
            self._listeners.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._listeners:
                    self._listeners.remove(callback)

        return unsubscribe

    def _set_user(self, user: Optional[AuthUser]) -> None:
        with self._lock:
            self._current = user
            listeners = list(self._listeners)
        for listener in listeners:
            listener(user)
