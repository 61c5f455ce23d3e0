# auth.py: hachage des mots de passe et jetons d'accès JWT.

from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class TokenError(Exception):
    pass


class TokenInvalid(TokenError):
    pass


class TokenExpired(TokenError):
    pass


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    if not plain_password or not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # hash illisible en base
        return False


def create_access_token(user_id: str, settings, now: datetime | None = None) -> str:
    """
    Signe un jeton contenant l'id utilisateur.

    La durée de vie vient de token_lifetime_days (30 jours par défaut) et ne
    dépend pas de jwt_expire.
    """
    issued_at = now or datetime.now(timezone.utc)
    expire_time = issued_at + timedelta(days=settings.token_lifetime_days)
    to_encode = {
        "id": str(user_id),
        "iat": int(issued_at.timestamp()),
        "exp": int(expire_time.timestamp()),
    }
    return jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str, settings, now: datetime | None = None) -> str:
    """Vérifie la signature puis l'expiration, et retourne l'id utilisateur."""
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"verify_exp": False},
        )
    except JWTError as e:
        raise TokenInvalid(str(e)) from e

    # L'expiration est contrôlée ici, que la librairie l'ait fait ou non.
    exp = payload.get("exp")
    current_time = (now or datetime.now(timezone.utc)).timestamp()
    if exp is not None:
        try:
            expired = float(exp) < current_time
        except (TypeError, ValueError) as e:
            raise TokenInvalid("Malformed exp claim") from e
        if expired:
            raise TokenExpired("Token expired")

    user_id = payload.get("id")
    if not user_id:
        raise TokenInvalid("Token has no user id")
    return str(user_id)
